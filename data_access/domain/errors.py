"""
Error types raised by the data-access layer.

Only conditions detected by this library get their own type. Errors raised by
PynamoDB or botocore (connectivity, conditional checks, throughput limits)
reach the caller unchanged.
"""

from __future__ import annotations


class DataAccessError(Exception):
    """
    Base class for errors raised by the data-access layer.

    Attributes
    ----------
    message : str
        Human-readable description.
    http_status : int
        Status code a web layer may map this error to.
    """

    http_status: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class BadRequestError(DataAccessError):
    """The caller supplied malformed input (mismatched keys/values, unknown filter)."""

    http_status = 400


class NotFoundError(DataAccessError):
    """No record matches the requested primary key."""

    http_status = 404


class ConflictError(DataAccessError):
    """A record with the same key/value set already exists."""

    http_status = 409


class UnknownTableError(DataAccessError, KeyError):
    """The table name is not part of the service configuration."""

    http_status = 400


class TableNotReadyError(DataAccessError):
    """A table did not reach ACTIVE status within the configured timeout."""

    http_status = 503


__all__ = [
    "BadRequestError",
    "ConflictError",
    "DataAccessError",
    "NotFoundError",
    "TableNotReadyError",
    "UnknownTableError",
]
