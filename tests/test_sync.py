"""Tests for the Synchronizer."""

from __future__ import annotations

import logging
import urllib.parse

import pytest

from sheetsync.config import FETCH_FIELDS
from sheetsync.exceptions import DecodeError, InvalidArgumentError
from sheetsync.models import Spreadsheet
from sheetsync.sync import Synchronizer

from conftest import SPREADSHEET_ID, MockTransport


class TestFetchPath:
    """Tests for the GET path."""

    def test_includes_projection(self, transport: MockTransport) -> None:
        path = Synchronizer(transport).fetch_path("abc")
        assert path.startswith("/spreadsheets/abc?fields=")
        assert urllib.parse.unquote(path.split("fields=", 1)[1]) == FETCH_FIELDS

    def test_empty_projection(self, transport: MockTransport) -> None:
        assert Synchronizer(transport, fields="").fetch_path("abc") == "/spreadsheets/abc"


class TestReload:
    """Tests for wholesale reloads."""

    @pytest.mark.asyncio
    async def test_replaces_properties_and_sheets(
        self, transport: MockTransport, spreadsheet: Spreadsheet
    ) -> None:
        document = transport.documents[SPREADSHEET_ID]
        document["properties"]["title"] = "Renamed"
        document["sheets"] = document["sheets"][:1]

        result = await Synchronizer(transport).reload(spreadsheet)

        assert result is spreadsheet
        assert spreadsheet.title == "Renamed"
        assert [s.title for s in spreadsheet.sheets] == ["Sheet1"]
        assert spreadsheet.sheets[0].spreadsheet is spreadsheet

    @pytest.mark.asyncio
    async def test_drops_pending_writes_with_warning(
        self,
        transport: MockTransport,
        spreadsheet: Spreadsheet,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        spreadsheet.sheets[0].set_value(200, 1, "lost")

        with caplog.at_level(logging.WARNING, logger="sheetsync.sync"):
            await Synchronizer(transport).reload(spreadsheet)

        assert "1 unflushed" in caplog.text
        assert spreadsheet.sheets[0].modified_cells == []
        assert spreadsheet.sheets[0].is_reconciled

    @pytest.mark.asyncio
    async def test_binds_unbound_spreadsheet(self, transport: MockTransport) -> None:
        spreadsheet = Spreadsheet(SPREADSHEET_ID)
        await Synchronizer(transport).reload(spreadsheet)
        assert spreadsheet.is_bound
        assert len(spreadsheet.sheets) == 2

    @pytest.mark.asyncio
    async def test_reload_none(self, transport: MockTransport) -> None:
        with pytest.raises(InvalidArgumentError):
            await Synchronizer(transport).reload(None)  # type: ignore[arg-type]

    @pytest.mark.asyncio
    async def test_malformed_body(self, transport: MockTransport) -> None:
        async def broken_get(path: str) -> bytes:
            return b"not json"

        transport.get = broken_get  # type: ignore[method-assign]
        with pytest.raises(DecodeError):
            await Synchronizer(transport).fetch(SPREADSHEET_ID)
