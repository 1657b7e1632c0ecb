"""Status codes and the error type returned to RPC callers."""

from __future__ import annotations

import enum

import grpc


class Code(enum.IntEnum):
    """Canonical RPC status codes."""

    OK = 0
    CANCELLED = 1
    UNKNOWN = 2
    INVALID_ARGUMENT = 3
    DEADLINE_EXCEEDED = 4
    NOT_FOUND = 5
    ALREADY_EXISTS = 6
    PERMISSION_DENIED = 7
    RESOURCE_EXHAUSTED = 8
    FAILED_PRECONDITION = 9
    ABORTED = 10
    OUT_OF_RANGE = 11
    UNIMPLEMENTED = 12
    INTERNAL = 13
    UNAVAILABLE = 14
    DATA_LOSS = 15
    UNAUTHENTICATED = 16

    @property
    def grpc_status(self) -> grpc.StatusCode:
        return grpc.StatusCode[self.name]

    @classmethod
    def from_grpc(cls, status: grpc.StatusCode) -> "Code":
        return cls[status.name]


class StatusError(Exception):
    """An error carrying a status code and a message."""

    def __init__(self, code: Code, message: str) -> None:
        super().__init__(code, message)
        self.code = Code(code)
        self.message = message

    def __str__(self) -> str:
        return f"{self.code.name}: {self.message}"