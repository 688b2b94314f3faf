"""Custom exceptions for sheetsync."""

from __future__ import annotations


class SheetSyncError(Exception):
    """Base exception for all sheetsync errors."""

    pass


class InvalidArgumentError(SheetSyncError):
    """Raised for a missing/unbound spreadsheet or malformed operation input."""

    pass


class EmptyBatchError(SheetSyncError):
    """Raised when a batch is submitted without any operations.

    An empty batch is never sent to the API.
    """

    def __init__(self, endpoint: str = "batchUpdate") -> None:
        self.endpoint = endpoint
        super().__init__(f"Requests must not be empty ({endpoint})")


class TransportError(SheetSyncError):
    """Raised for network/HTTP failures below the JSON layer."""

    pass


class DecodeError(SheetSyncError):
    """Raised when a response body is not a JSON object."""

    def __init__(self, reason: str, body: bytes = b"") -> None:
        self.reason = reason
        self.body = body
        super().__init__(f"Malformed response body: {reason}")


class RemoteAPIError(SheetSyncError):
    """Raised when a response body carries an error envelope.

    Attributes:
        code: Numeric error code (usually mirrors the HTTP status)
        status: Symbolic status, e.g. ``INVALID_ARGUMENT``
        message: Human readable message from the API
    """

    def __init__(self, code: int, status: str, message: str) -> None:
        self.code = code
        self.status = status
        self.message = message
        super().__init__(f"error status: {status}, code: {code}, message: {message}")


class AuthenticationError(RemoteAPIError):
    """Raised when the token is rejected (UNAUTHENTICATED/PERMISSION_DENIED)."""

    pass


class NotFoundError(RemoteAPIError):
    """Raised when the spreadsheet does not exist or is not shared (NOT_FOUND)."""

    pass
