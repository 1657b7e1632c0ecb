import pytest

from netsqlite.dsn import Config, DSNError, parse_dsn


def test_parse_dsn_from_source_example():
    cfg = parse_dsn("netsqlite://:3451/123?database=testdb")
    assert cfg.addr == ":3451"
    assert cfg.token == "123"
    assert cfg.db_name == "testdb"
    assert cfg.use_tls is False
    assert cfg.raw_query == "database=testdb"


def test_parse_dsn_with_host_and_tls():
    cfg = parse_dsn("netsqlite://localhost:3541/token?database=app.db&tls=true")
    assert cfg == Config(
        addr="localhost:3541",
        db_name="app.db",
        token="token",
        use_tls=True,
        raw_query="database=app.db&tls=true",
    )


@pytest.mark.parametrize("value", ["false", "1", "TRUE", ""])
def test_tls_only_enabled_by_exact_true(value):
    cfg = parse_dsn(f"netsqlite://localhost:3541/token?database=db&tls={value}")
    assert cfg.use_tls is False


def test_token_is_unescaped_and_keeps_inner_slashes():
    cfg = parse_dsn("netsqlite://localhost:3541/a%20b/c?database=db")
    assert cfg.token == "a b/c"


def test_first_database_value_wins():
    cfg = parse_dsn("netsqlite://localhost:3541/token?database=one&database=two")
    assert cfg.db_name == "one"


def test_ipv6_address_is_accepted():
    cfg = parse_dsn("netsqlite://[::1]:3541/token?database=db")
    assert cfg.addr == "[::1]:3541"


def test_wrong_scheme():
    with pytest.raises(DSNError, match="invalid scheme: expected 'netsqlite', got 'postgres'"):
        parse_dsn("postgres://localhost:3541/token?database=db")


def test_username_is_rejected():
    with pytest.raises(DSNError, match="found username in URL authority section"):
        parse_dsn("netsqlite://user@localhost:3541/token?database=db")


@pytest.mark.parametrize(
    "dsn",
    ["netsqlite://localhost/token?database=db", "netsqlite:///token?database=db"],
)
def test_missing_or_invalid_address(dsn):
    with pytest.raises(DSNError, match="address \\(host:port\\) missing or invalid"):
        parse_dsn(dsn)


@pytest.mark.parametrize(
    "dsn",
    ["netsqlite://localhost:3541?database=db", "netsqlite://localhost:3541/?database=db"],
)
def test_missing_token(dsn):
    with pytest.raises(DSNError, match="authentication token missing in DSN path"):
        parse_dsn(dsn)


@pytest.mark.parametrize(
    "dsn",
    ["netsqlite://localhost:3541/token", "netsqlite://localhost:3541/token?database="],
)
def test_missing_database(dsn):
    with pytest.raises(DSNError, match="database name missing in DSN"):
        parse_dsn(dsn)


def test_invalid_port_is_format_error():
    with pytest.raises(DSNError, match="invalid DSN format"):
        parse_dsn("netsqlite://localhost:abc/token?database=db")


def test_dsn_error_is_value_error():
    with pytest.raises(ValueError):
        parse_dsn("nonsense")