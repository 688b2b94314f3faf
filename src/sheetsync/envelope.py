"""Decoding of API response bodies.

The Sheets API reports failures inside the JSON body as an error envelope::

    {"error": {"code": 400, "status": "INVALID_ARGUMENT", "message": "..."}}

The envelope is authoritative regardless of the HTTP status code, so every
response goes through ``decode_response`` before it is used.
"""

from __future__ import annotations

import json
from typing import Any

from sheetsync.exceptions import (
    AuthenticationError,
    DecodeError,
    NotFoundError,
    RemoteAPIError,
)

_STATUS_ERRORS: dict[str, type[RemoteAPIError]] = {
    "UNAUTHENTICATED": AuthenticationError,
    "PERMISSION_DENIED": AuthenticationError,
    "NOT_FOUND": NotFoundError,
}


def decode_response(body: bytes | str) -> dict[str, Any]:
    """Parse a response body and raise if it carries an error envelope.

    Args:
        body: Raw response body

    Returns:
        The decoded JSON object

    Raises:
        DecodeError: If the body is not a JSON object
        RemoteAPIError: If the body contains an ``error`` object
    """
    raw = body.encode("utf-8") if isinstance(body, str) else body
    try:
        data = json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise DecodeError(str(e), raw) from e

    if not isinstance(data, dict):
        raise DecodeError(f"expected a JSON object, got {type(data).__name__}", raw)

    error = data.get("error")
    if error is None:
        return data

    raise error_from_envelope(error)


def error_from_envelope(error: Any) -> RemoteAPIError:
    """Build the typed exception for an ``error`` object.

    Raises:
        DecodeError: If the ``code`` is not numeric
    """
    if not isinstance(error, dict):
        # Some proxies return {"error": "message"}
        return RemoteAPIError(0, "UNKNOWN", str(error))

    try:
        code = int(error.get("code", 0) or 0)
    except (TypeError, ValueError) as e:
        raise DecodeError(f"error code is not numeric: {error.get('code')!r}") from e
    status = str(error.get("status", "") or "UNKNOWN")
    message = str(error.get("message", ""))
    error_cls = _STATUS_ERRORS.get(status, RemoteAPIError)
    return error_cls(code, status, message)
