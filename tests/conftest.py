"""Shared test fixtures for sheetsync."""

from __future__ import annotations

import copy
import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from sheetsync.client import SheetsClient
from sheetsync.models import Spreadsheet
from sheetsync.transport import LocalFileTransport

GOLDEN_DIR = Path(__file__).parent / "golden"
SPREADSHEET_ID = "basic_spreadsheet"


def error_body(code: int, status: str, message: str) -> bytes:
    return json.dumps(
        {"error": {"code": code, "status": status, "message": message}}
    ).encode("utf-8")


class MockTransport(LocalFileTransport):
    """Golden-file transport whose server state and replies can be scripted.

    - ``documents`` maps spreadsheet ids to the JSON served by GET. It starts
      as a copy of the golden file, so tests can change "server state".
    - ``replies`` is a queue of POST replies (bytes) or exceptions to raise.
      When empty, the default mock reply is used.
    - ``on_post`` is called with (path, body) before the reply is produced.
    """

    def __init__(self, golden_dir: Path) -> None:
        super().__init__(golden_dir)
        self.documents: dict[str, dict[str, Any]] = {}
        self.gets: list[str] = []
        self.replies: list[bytes | Exception] = []
        self.on_post: Callable[[str, dict[str, Any]], None] | None = None
        self.closed = False

    def load(self, spreadsheet_id: str) -> dict[str, Any]:
        path = self._golden_dir / spreadsheet_id / "spreadsheet.json"
        self.documents[spreadsheet_id] = json.loads(path.read_text())
        return self.documents[spreadsheet_id]

    async def get(self, path: str) -> bytes:
        self.gets.append(path)
        spreadsheet_id = path.split("?", 1)[0].removeprefix("/spreadsheets/")
        if spreadsheet_id in self.documents:
            return json.dumps(self.documents[spreadsheet_id]).encode("utf-8")
        return await super().get(path)

    async def post(self, path: str, body: dict[str, Any]) -> bytes:
        if self.on_post is not None:
            self.on_post(path, body)
        if self.replies:
            self.posts.append((path, copy.deepcopy(body)))
            reply = self.replies.pop(0)
            if isinstance(reply, Exception):
                raise reply
            return reply
        return await super().post(path, copy.deepcopy(body))

    async def close(self) -> None:
        self.closed = True

    def server_sheet(self, spreadsheet_id: str, sheet_id: int) -> dict[str, Any]:
        """Return the served ``properties`` of a sheet, for editing in tests."""
        for sheet in self.documents[spreadsheet_id]["sheets"]:
            if sheet["properties"]["sheetId"] == sheet_id:
                return sheet["properties"]
        raise KeyError(sheet_id)


@pytest.fixture
def golden_dir() -> Path:
    return GOLDEN_DIR


@pytest.fixture
def transport() -> MockTransport:
    mock = MockTransport(GOLDEN_DIR)
    mock.load(SPREADSHEET_ID)
    return mock


@pytest.fixture
def client(transport: MockTransport) -> SheetsClient:
    return SheetsClient(transport)


@pytest.fixture
def spreadsheet(transport: MockTransport) -> Spreadsheet:
    """The golden spreadsheet, bound to the mock transport."""
    return Spreadsheet.from_api(transport.documents[SPREADSHEET_ID], transport)
