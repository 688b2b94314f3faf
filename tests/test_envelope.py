"""Tests for response decoding and the error envelope."""

from __future__ import annotations

import pytest

from sheetsync.envelope import decode_response, error_from_envelope
from sheetsync.exceptions import (
    AuthenticationError,
    DecodeError,
    NotFoundError,
    RemoteAPIError,
)


class TestDecodeResponse:
    """Tests for decode_response."""

    def test_success_body_returned(self) -> None:
        data = decode_response(b'{"spreadsheetId": "abc", "replies": []}')
        assert data == {"spreadsheetId": "abc", "replies": []}

    def test_str_body_accepted(self) -> None:
        assert decode_response('{"a": 1}') == {"a": 1}

    def test_error_envelope_raises(self) -> None:
        body = b'{"error":{"code":400,"status":"INVALID_ARGUMENT","message":"bad range"}}'
        with pytest.raises(RemoteAPIError) as exc_info:
            decode_response(body)

        error = exc_info.value
        assert error.code == 400
        assert error.status == "INVALID_ARGUMENT"
        assert error.message == "bad range"
        assert str(error) == (
            "error status: INVALID_ARGUMENT, code: 400, message: bad range"
        )

    def test_error_envelope_wins_over_other_keys(self) -> None:
        body = b'{"replies": [], "error": {"code": 500, "status": "INTERNAL"}}'
        with pytest.raises(RemoteAPIError) as exc_info:
            decode_response(body)
        assert exc_info.value.status == "INTERNAL"
        assert exc_info.value.message == ""

    def test_invalid_json_raises_decode_error(self) -> None:
        with pytest.raises(DecodeError) as exc_info:
            decode_response(b"<html>Bad Gateway</html>")
        assert exc_info.value.body == b"<html>Bad Gateway</html>"

    def test_non_object_raises_decode_error(self) -> None:
        with pytest.raises(DecodeError, match="list"):
            decode_response(b"[1, 2]")

    def test_decode_error_is_not_remote_error(self) -> None:
        with pytest.raises(DecodeError) as exc_info:
            decode_response(b"")
        assert not isinstance(exc_info.value, RemoteAPIError)


class TestErrorFromEnvelope:
    """Tests for mapping statuses to exception types."""

    @pytest.mark.parametrize(
        ("status", "expected"),
        [
            ("UNAUTHENTICATED", AuthenticationError),
            ("PERMISSION_DENIED", AuthenticationError),
            ("NOT_FOUND", NotFoundError),
            ("INVALID_ARGUMENT", RemoteAPIError),
        ],
    )
    def test_status_mapping(self, status: str, expected: type) -> None:
        error = error_from_envelope({"code": 403, "status": status, "message": "x"})
        assert type(error) is expected
        assert isinstance(error, RemoteAPIError)

    def test_missing_status_is_unknown(self) -> None:
        error = error_from_envelope({"code": 502})
        assert error.status == "UNKNOWN"
        assert error.code == 502

    def test_string_error(self) -> None:
        error = error_from_envelope("quota exceeded")
        assert error.code == 0
        assert error.message == "quota exceeded"

    def test_non_numeric_code_is_decode_error(self) -> None:
        with pytest.raises(DecodeError, match="oops"):
            decode_response(b'{"error": {"code": "oops", "status": "INTERNAL"}}')

    def test_numeric_string_code_accepted(self) -> None:
        error = error_from_envelope({"code": "404", "status": "NOT_FOUND"})
        assert error.code == 404
