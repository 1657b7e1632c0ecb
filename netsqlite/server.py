"""Runs the netsqlite gRPC server until asked to stop."""

from __future__ import annotations

import argparse
import logging
import os
import signal
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, Optional, Sequence

import grpc

from netsqlite.service import NetsqliteService

DEFAULT_ADDR = ":3541"
DEFAULT_DATADIR = "data"
SHUTDOWN_GRACE_SECONDS = 15.0
MAX_WORKERS = 10
TOKENS_ENV = "NETSQLITE_TOKENS"

log = logging.getLogger(__name__)


def _bind_address(addr: str) -> str:
    return f"[::]{addr}" if addr.startswith(":") else addr


def start(
    stop_event: threading.Event,
    valid_tokens: Iterable[str],
    addr: str,
    datadir: str,
) -> None:
    """Serve on ``addr`` until ``stop_event`` is set, then shut down.

    Raises ``OSError`` if the address cannot be listened on.
    """
    service = NetsqliteService(valid_tokens, datadir)
    server = grpc.server(ThreadPoolExecutor(max_workers=MAX_WORKERS))
    server.add_generic_rpc_handlers((service.handler(),))

    bind = _bind_address(addr)
    try:
        port = server.add_insecure_port(bind)
    except RuntimeError as exc:
        service.manager.close()
        raise OSError(f"Failed to listen on {addr}: {exc}") from exc
    if port == 0:
        service.manager.close()
        raise OSError(f"Failed to listen on {addr}")

    log.info("Loaded %d valid token(s)", len(service.valid_tokens))
    server.start()
    log.info("gRPC server listening at %s:%d", bind.rpartition(":")[0], port)

    try:
        stop_event.wait()
        log.info("Shutdown signal received. Attempting graceful shutdown...")
    finally:
        stopped = server.stop(grace=SHUTDOWN_GRACE_SECONDS)
        if stopped.wait(SHUTDOWN_GRACE_SECONDS + 1):
            log.info("gRPC server gracefully stopped.")
        else:
            log.warning("Graceful shutdown timed out. Forcing stop.")
            server.stop(None)
        service.manager.close()
        log.info("Server shut down.")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Command-line entry point."""
    parser = argparse.ArgumentParser(
        prog="netsqlite", description="Serve SQLite databases over gRPC."
    )
    parser.add_argument(
        "-addr", "--addr", default=DEFAULT_ADDR,
        help="Address and port to listen on for gRPC",
    )
    parser.add_argument(
        "-dir", "--dir", dest="datadir", default=DEFAULT_DATADIR,
        help="Data directory for all databases",
    )
    parser.add_argument(
        "-token", "--token", dest="tokens", action="append", default=None,
        help=f"Accepted token; may be repeated (default: comma-separated ${TOKENS_ENV})",
    )
    args = parser.parse_args(argv)

    tokens = args.tokens or [
        t for t in os.environ.get(TOKENS_ENV, "").split(",") if t.strip()
    ]

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")
    log.info("Starting netsqlite gRPC server on %s, dir %s", args.addr, args.datadir)

    stop_event = threading.Event()

    def request_stop(signum, frame):
        stop_event.set()

    previous = {
        sig: signal.signal(sig, request_stop) for sig in (signal.SIGINT, signal.SIGTERM)
    }
    try:
        start(stop_event, tokens, args.addr, args.datadir)
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)
    return 0