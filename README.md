# netsqlite

netsqlite serves a directory of SQLite databases over gRPC. Clients name a
database, send SQL with positional arguments, and get back either
affected-row counts or a stream of result rows. The package also has a small
client for talking to such a server.

On the server, each database file is opened in WAL mode with a five-second
busy timeout and autocommit. Each database gets a pool of at most five
handles.

## Installing

```
pip install netsqlite
```

To run the test suite as well:

```
pip install "netsqlite[test]"
pytest
```

## Running the server

```
netsqlite --addr :3541 --dir data --token token
```

Options (each may also be written with a single dash, e.g. `-addr`):

- `--addr` is the address and port to listen on. The default is `:3541`.
  An address that starts with `:` listens on all interfaces.
- `--dir` is the directory that holds the database files. The default is
  `data`. The directory is created if it does not exist.
- `--token` names a token, and may be repeated. Without it, tokens are read
  from the comma-separated `NETSQLITE_TOKENS` environment variable.

The server logs at INFO level. It stops on Ctrl-C or SIGTERM. In-flight calls
get up to 15 seconds to finish; after that the server is stopped by force.
All database pools are then closed.

A database file is created the first time a client names it. The name is
taken as a path relative to the data directory.

You can also run the server from Python. `netsqlite.server.start` blocks
until the event is set. It raises `OSError` if the address cannot be
listened on. Tokens may be given as an iterable of strings, or as a mapping
whose true-valued keys are the tokens.

```python
import threading
from netsqlite.server import start

stop = threading.Event()
start(stop, {"token": True}, ":3541", "data")
```

The service itself is `netsqlite.service.NetsqliteService`. Its `handler()`
method returns a gRPC handler that can be added to any `grpc.server`.

## What the server does not do

- **Tokens are not checked.** The server stores the tokens it is given and
  logs how many there are. Calls are served whether or not they carry a
  token.
- **No TLS.** The server listens on an insecure port only.
- **No transactions or prepared statements.** Every statement runs on its
  own on a pooled handle.
- **No protobuf clients.** Messages travel as JSON on the service
  `netsqlite.v1.NetsqliteService` (methods `Ping`, `Exec` and `Query`). Clients
  must use the same encoding, which the client in this package does.

## Connecting as a client

A connection is described by a DSN of this form:

```
netsqlite://host:port/<token>?database=<name>[&tls=true]
```

`netsqlite.dsn.parse_dsn` turns a DSN into a `Config`, which has the fields
`addr`, `db_name`, `token`, `use_tls` and `raw_query`. It raises `DSNError`, a
`ValueError`, in these cases:

- the scheme is not `netsqlite`
- a user name appears in the address
- the `host:port` part is missing or has no `:`
- the token is missing
- the `database` parameter is missing

```python
from netsqlite.conn import connect

with connect("netsqlite://localhost:3541/token?database=app.db") as conn:
    conn.execute(
        "CREATE TABLE IF NOT EXISTS staff (id TEXT PRIMARY KEY, name TEXT)"
    )

    result = conn.execute(
        "INSERT INTO staff (id, name) VALUES (?, ?)", "emp123", "John Doe"
    )
    print(result.rows_affected(), result.last_insert_id())

    with conn.query("SELECT id, name FROM staff WHERE id = ?", "emp123") as rows:
        print(rows.columns)
        for row in rows:
            print(row)  # ('emp123', 'John Doe')
```

`connect` parses the DSN, opens a channel and pings the named database. The
wait is at most 10 seconds. If the ping fails, the channel is closed and
`ConnectionError` is raised. Other outcomes:

- a bad DSN raises `DSNError`
- a DSN with `tls=true` is parsed, but connecting with it raises
  `ValueError`, because the client has no TLS support
- an address that starts with `:` connects to `localhost`

The token is sent with every call as `authorization: Bearer <token>`
metadata.

`netsqlite.conn.Connector(config).connect(timeout)` does the same from a
`Config` that has already been parsed.

### Arguments and values

Arguments may be `None`, `bool`, `int`, `float`, `str`, or `bytes`-like, and
lists or string-keyed mappings of these. Bytes are sent as base64 text, so
BLOB columns also come back as base64 strings. Any other type raises
`TypeError`.

### Running statements

`Connection.execute(query, *args)` returns an `ExecResult`:

- `rows_affected()` returns the number of affected rows.
- `last_insert_id()` returns the last inserted row id, or 0 if there is none.
- Either method raises `ValueError` if the server reports the value as -1,
  meaning unavailable.

A call that the server rejects raises `netsqlite.status.StatusError`. Its
`code` holds the status `Code` and its `message` holds the details.

### Reading results

`Connection.query(query, *args)` returns `Rows`:

- `rows.columns` lists the column names.
- Iterating yields one tuple per row.
- A query that sends back nothing gives an empty `Rows` with no columns.
- `close()` or leaving a `with` block abandons any rows that have not been
  read.

Errors while reading rows close the `Rows` and raise:

- `ConnectionError` if the stream was cancelled
- `StatusError` for any other RPC failure
- `ValueError` for a malformed message or a wrong column count

### Other connection methods

- `Connection.ping(timeout)` returns the server's reply, e.g.
  `"PONG for db app.db"`. It raises `ConnectionError` on failure.
- `Connection.close()` closes the channel. Calling it again does nothing.
- Any call on a closed connection raises `ConnectionError`.

## Errors on the server side

Failures are returned to the client with these status codes:

- `INVALID_ARGUMENT` when no database name is given.
- `INTERNAL` when a database cannot be opened, or a ping, statement, query
  or value conversion fails.
- `CANCELLED` when the client goes away in the middle of a result stream.

## Building blocks

- `netsqlite.manager.DBManager` keeps one pool per database path under a
  data directory. `acquire_pool(name)` returns the pool for a name and
  `close()` closes every pool.
- `netsqlite.pool.Pool` is a thread-safe bounded pool.
  `acquire(timeout)` returns a lease; using it in a `with` block, or calling
  `release()`, gives the value back. `acquire` raises `TimeoutError` when the
  wait runs out.
- `netsqlite.pool.create_or_open(path)` opens a SQLite database in WAL mode.
- `netsqlite.pool.new_pool(path)` builds a five-handle pool of such
  connections.