"""Transport layer for the Sheets API.

Defines the Transport protocol and implementations:
- GoogleSheetsTransport: Production transport using the Google Sheets API
- LocalFileTransport: Test transport reading from local golden files

Transports only move bytes. They do not interpret the body: the API encodes
failures in the JSON body, so decoding happens in ``sheetsync.envelope``.
"""

from __future__ import annotations

import json
import logging
import ssl
from abc import ABC, abstractmethod
from pathlib import Path  # noqa: TC003 - used at runtime
from typing import Any

import certifi
import httpx

from sheetsync.config import Settings
from sheetsync.exceptions import TransportError

logger = logging.getLogger(__name__)


class Transport(ABC):
    """Abstract base class for an authenticated request executor.

    Paths are relative to the API root, e.g. ``/spreadsheets/abc:batchUpdate``.
    """

    @abstractmethod
    async def get(self, path: str) -> bytes:
        """Perform a GET and return the raw response body.

        Raises:
            TransportError: On network failure
        """
        ...

    @abstractmethod
    async def post(self, path: str, body: dict[str, Any]) -> bytes:
        """POST a JSON body and return the raw response body.

        Raises:
            TransportError: On network failure
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections."""
        ...


class GoogleSheetsTransport(Transport):
    """Production transport that talks to the Google Sheets API.

    Handles authentication, SSL, and HTTP communication.
    """

    def __init__(
        self,
        access_token: str,
        settings: Settings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            access_token: OAuth2 access token carrying ``settings.scopes``
            settings: Endpoint and timeout settings
            client: Preconfigured httpx client (mainly for tests)
        """
        self._settings = settings or Settings()
        if client is None:
            ssl_context = ssl.create_default_context(cafile=certifi.where())
            client = httpx.AsyncClient(
                timeout=self._settings.timeout,
                verify=ssl_context,
                headers={
                    "Authorization": f"Bearer {access_token}",
                    "Accept": "application/json",
                },
            )
        self._client = client
        logger.debug(
            "Sheets transport for %s (scopes: %s)",
            self._settings.api_base,
            ", ".join(self._settings.scopes),
        )

    @property
    def scopes(self) -> tuple[str, ...]:
        """OAuth scopes the access token is expected to carry."""
        return self._settings.scopes

    def __repr__(self) -> str:
        return (
            f"GoogleSheetsTransport(api_base={self._settings.api_base!r}, "
            f"scopes={list(self._settings.scopes)!r})"
        )

    async def get(self, path: str) -> bytes:
        """GET {api_base}{path}"""
        return await self._request("GET", path)

    async def post(self, path: str, body: dict[str, Any]) -> bytes:
        """POST {api_base}{path}"""
        return await self._request("POST", path, body)

    async def _request(
        self, method: str, path: str, body: dict[str, Any] | None = None
    ) -> bytes:
        url = f"{self._settings.api_base}{path}"
        logger.debug("%s %s", method, url)
        try:
            response = await self._client.request(method, url, json=body)
        except httpx.RequestError as e:
            raise TransportError(f"Network error: {e}") from e

        if response.status_code >= 400:
            logger.debug("%s %s returned HTTP %d", method, url, response.status_code)
        return response.content

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()


class LocalFileTransport(Transport):
    """Test transport that reads from local golden files.

    Expected directory structure:
        golden_dir/
            <spreadsheet_id>/
                spreadsheet.json

    POSTs are recorded in ``posts`` and answered with one empty reply per
    request, which is what the batch endpoints return on success.
    """

    def __init__(self, golden_dir: Path) -> None:
        """Initialize the transport.

        Args:
            golden_dir: Directory containing golden test files
        """
        self._golden_dir = golden_dir
        self.posts: list[tuple[str, dict[str, Any]]] = []

    async def get(self, path: str) -> bytes:
        """Read the spreadsheet JSON named by the path."""
        spreadsheet_id = _spreadsheet_id_from_path(path)
        file_path = self._golden_dir / spreadsheet_id / "spreadsheet.json"
        if not file_path.exists():
            return json.dumps(
                {
                    "error": {
                        "code": 404,
                        "status": "NOT_FOUND",
                        "message": f"Golden file not found: {file_path}",
                    }
                }
            ).encode("utf-8")
        return file_path.read_bytes()

    async def post(self, path: str, body: dict[str, Any]) -> bytes:
        """Record the request and return a mock reply."""
        self.posts.append((path, body))
        if "requests" in body:
            return json.dumps({"replies": [{} for _ in body["requests"]]}).encode()
        return json.dumps({"responses": [{} for _ in body.get("data", [])]}).encode()

    async def close(self) -> None:
        """No-op for local file transport."""
        pass


def _spreadsheet_id_from_path(path: str) -> str:
    """Extract the spreadsheet id from ``/spreadsheets/<id>[:op|/...][?query]``."""
    path = path.split("?", 1)[0]
    tail = path.removeprefix("/spreadsheets/")
    return tail.split("/", 1)[0].split(":", 1)[0]
