"""Exception hierarchy shared by the Brevo client and the sync pipeline."""
from __future__ import annotations

from typing import Optional


class BrevoSyncError(Exception):
    """Base class for all errors raised by :mod:`brevo_sync`."""


class ConfigurationError(BrevoSyncError, RuntimeError):
    """Raised when configuration values or files are missing or malformed."""


class TransportError(BrevoSyncError):
    """The request could not be sent or its response could not be read."""


class RemoteError(BrevoSyncError):
    """The remote service answered with a non-success status."""

    def __init__(self, message: str, *, status_code: int, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class DecodeError(BrevoSyncError):
    """A response body was not the JSON document we expected."""


class ConflictError(BrevoSyncError):
    """A unique contact attribute already belongs to a different contact."""

    def __init__(self, message: str, *, attribute: str, body: str = "") -> None:
        super().__init__(message)
        self.attribute = attribute
        self.body = body


class ValidationError(BrevoSyncError, ValueError):
    """Malformed input rows or missing/invalid identifiers in a response."""

    def __init__(self, message: str, *, payload: Optional[object] = None) -> None:
        super().__init__(message)
        self.payload = payload


class InvalidStateError(ValidationError):
    """A resolved remote object violates an invariant (e.g. folder id <= 0)."""


__all__ = [
    "BrevoSyncError",
    "ConfigurationError",
    "ConflictError",
    "DecodeError",
    "InvalidStateError",
    "RemoteError",
    "TransportError",
    "ValidationError",
]
