"""Refetching authoritative spreadsheet state.

After a structural batch commits, the local mirror is refreshed from the
server. The refresh is wholesale: spreadsheet properties and the whole sheet
collection are replaced, never merged. Sheet objects held by callers from
before the reload are detached; look them up again by id or title.
"""

from __future__ import annotations

import logging
import urllib.parse

from sheetsync.config import FETCH_FIELDS
from sheetsync.envelope import decode_response
from sheetsync.exceptions import InvalidArgumentError
from sheetsync.models import Spreadsheet
from sheetsync.transport import Transport

logger = logging.getLogger(__name__)


class Synchronizer:
    """Fetches spreadsheets and reloads local mirrors."""

    def __init__(self, transport: Transport, fields: str = FETCH_FIELDS) -> None:
        """Initialize the synchronizer.

        Args:
            transport: Transport used for the fetch
            fields: Field projection limiting the response shape
        """
        self._transport = transport
        self._fields = fields

    def fetch_path(self, spreadsheet_id: str) -> str:
        """Build the GET path for a spreadsheet, with the field projection."""
        path = f"/spreadsheets/{urllib.parse.quote(spreadsheet_id, safe='')}"
        if self._fields:
            path += f"?fields={urllib.parse.quote(self._fields, safe='')}"
        return path

    async def fetch(self, spreadsheet_id: str) -> Spreadsheet:
        """Fetch a spreadsheet by id.

        Raises:
            InvalidArgumentError: If the id is empty
            RemoteAPIError: If the response carries an error envelope
            DecodeError: If the response is not JSON
            TransportError: On network failure
        """
        if not spreadsheet_id:
            raise InvalidArgumentError("spreadsheet_id must not be empty")
        body = await self._transport.get(self.fetch_path(spreadsheet_id))
        data = decode_response(body)
        return Spreadsheet.from_api(data, self._transport)

    async def reload(self, spreadsheet: Spreadsheet) -> Spreadsheet:
        """Overwrite a spreadsheet's properties and sheets with server state.

        Pending cell writes of the replaced sheets are dropped.

        Returns:
            The same spreadsheet object, refreshed
        """
        if spreadsheet is None:
            raise InvalidArgumentError("spreadsheet must not be None")
        fresh = await self.fetch(spreadsheet.spreadsheet_id)

        pending = sum(len(sheet.modified_cells) for sheet in spreadsheet.sheets)
        if pending:
            logger.warning(
                "Reloading spreadsheet %s discards %d unflushed cell write(s)",
                spreadsheet.spreadsheet_id,
                pending,
            )

        spreadsheet.properties = fresh.properties
        for sheet in fresh.sheets:
            sheet.spreadsheet = spreadsheet
        spreadsheet.sheets = fresh.sheets
        if spreadsheet.transport is None:
            spreadsheet.transport = self._transport

        logger.info(
            "Reloaded spreadsheet %s (%d sheet(s))",
            spreadsheet.spreadsheet_id,
            len(spreadsheet.sheets),
        )
        return spreadsheet
