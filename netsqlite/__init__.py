"""SQLite databases served over gRPC, with a client for running statements and streaming query rows."""

__version__ = "0.1.0"