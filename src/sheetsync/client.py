"""SheetsClient - Main API for sheetsync.

Each mutation is a straight-line sequence: open a batch, append the diffed
operation(s), submit, and on success reload the local mirror from the
server. Cell writes take a different path (``sync_sheet``) because values go
to their own endpoint.

Row/column insertion and deletion adjust the sheet's known grid size and its
projection before the request is sent. If the request fails, that
bookkeeping is not rolled back: the sheet stays out of step with the server
until ``resynchronize()`` (or ``Sheet.reconcile()``) is called.

Calls against one Spreadsheet must not overlap; there is no locking.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import replace
from typing import Any

from sheetsync.batch import BatchUpdate, ValueRange, ValuesBatchUpdate
from sheetsync.config import Settings
from sheetsync.envelope import decode_response
from sheetsync.exceptions import DecodeError, InvalidArgumentError, SheetSyncError
from sheetsync.models import (
    GridProjection,
    Sheet,
    SheetProperties,
    Spreadsheet,
    SpreadsheetProperties,
)
from sheetsync.operations import Dimension
from sheetsync.sync import Synchronizer
from sheetsync.transport import Transport
from sheetsync.utils import sheet_range

logger = logging.getLogger(__name__)


class SheetsClient:
    """Client for mirroring and mutating Google Sheets spreadsheets.

    Example:
        >>> from sheetsync.transport import GoogleSheetsTransport
        >>> transport = GoogleSheetsTransport(access_token="ya29...")
        >>> async with SheetsClient(transport) as client:
        ...     spreadsheet = await client.fetch_spreadsheet("1BxiMVs0XRA5nFMd...")
        ...     await client.update_sheet_title(spreadsheet.sheets[0], "Data")
    """

    def __init__(self, transport: Transport, settings: Settings | None = None) -> None:
        """Initialize the client.

        Args:
            transport: Transport implementation for API calls
            settings: Request settings (defaults to ``Settings()``)
        """
        self._transport = transport
        self._settings = settings or Settings()
        self._synchronizer = Synchronizer(transport, self._settings.fetch_fields)

    @property
    def settings(self) -> Settings:
        return self._settings

    async def __aenter__(self) -> SheetsClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying transport."""
        await self._transport.close()

    # ------------------------------------------------------------------
    # Fetch / synchronize
    # ------------------------------------------------------------------

    async def create_spreadsheet(
        self, title: str, sheet_titles: Iterable[str] = ()
    ) -> Spreadsheet:
        """Create a spreadsheet and return its fetched mirror.

        Args:
            title: Spreadsheet title
            sheet_titles: Titles of the initial sheets (server default if empty)
        """
        body: dict[str, Any] = {"properties": {"title": title}}
        sheets = [{"properties": {"title": t}} for t in sheet_titles]
        if sheets:
            body["sheets"] = sheets

        data = decode_response(await self._transport.post("/spreadsheets", body))
        spreadsheet_id = data.get("spreadsheetId")
        if not spreadsheet_id:
            raise DecodeError("create reply has no spreadsheetId")
        logger.info("Created spreadsheet %s (%r)", spreadsheet_id, title)
        return await self.fetch_spreadsheet(spreadsheet_id)

    async def fetch_spreadsheet(self, spreadsheet_id: str) -> Spreadsheet:
        """Fetch a spreadsheet by id, bound to this client's transport."""
        return await self._synchronizer.fetch(spreadsheet_id)

    async def reload_spreadsheet(self, spreadsheet: Spreadsheet) -> Spreadsheet:
        """Replace the mirror's properties and sheets with server state."""
        return await self._synchronizer.reload(spreadsheet)

    async def resynchronize(self, spreadsheet: Spreadsheet) -> Spreadsheet:
        """Repair local drift, e.g. after a failed optimistic mutation."""
        return await self.reload_spreadsheet(spreadsheet)

    # ------------------------------------------------------------------
    # Spreadsheet properties
    # ------------------------------------------------------------------

    async def update_spreadsheet_properties(
        self, spreadsheet: Spreadsheet, properties: SpreadsheetProperties
    ) -> dict[str, Any]:
        """Send the fields of ``properties`` that differ, then reload.

        Raises:
            EmptyBatchError: If nothing differs (nothing is sent)
        """
        batch = BatchUpdate(spreadsheet).update_spreadsheet_properties(properties)
        return await self._commit(batch)

    async def update_spreadsheet_title(
        self, spreadsheet: Spreadsheet, title: str
    ) -> dict[str, Any]:
        if spreadsheet is None:
            raise InvalidArgumentError("spreadsheet must not be None")
        return await self.update_spreadsheet_properties(
            spreadsheet, replace(spreadsheet.properties, title=title)
        )

    # ------------------------------------------------------------------
    # Sheet properties
    # ------------------------------------------------------------------

    async def update_sheet_properties(
        self, sheet: Sheet, properties: SheetProperties
    ) -> dict[str, Any]:
        """Send the fields of ``properties`` that differ, then reload.

        Raises:
            EmptyBatchError: If nothing differs (nothing is sent)
        """
        spreadsheet = _spreadsheet_of(sheet)
        batch = BatchUpdate(spreadsheet).update_sheet_properties(sheet, properties)
        return await self._commit(batch)

    async def update_sheet_title(self, sheet: Sheet, title: str) -> dict[str, Any]:
        _spreadsheet_of(sheet)
        return await self.update_sheet_properties(
            sheet, replace(sheet.properties, title=title)
        )

    async def hide_sheet(self, sheet: Sheet, hidden: bool = True) -> dict[str, Any]:
        _spreadsheet_of(sheet)
        return await self.update_sheet_properties(
            sheet, replace(sheet.properties, hidden=hidden)
        )

    async def move_sheet(self, sheet: Sheet, index: int) -> dict[str, Any]:
        _spreadsheet_of(sheet)
        if index < 0:
            raise InvalidArgumentError(f"index must be non-negative, got {index}")
        return await self.update_sheet_properties(
            sheet, replace(sheet.properties, index=index)
        )

    async def resize_sheet(
        self, sheet: Sheet, rows: int, columns: int
    ) -> dict[str, Any]:
        """Set the grid size of a sheet, then reload."""
        _spreadsheet_of(sheet)
        return await self.update_sheet_properties(
            sheet, _with_grid_size(sheet.properties, rows, columns)
        )

    # ------------------------------------------------------------------
    # Sheets
    # ------------------------------------------------------------------

    async def add_sheet(
        self, spreadsheet: Spreadsheet, properties: SheetProperties
    ) -> Sheet | None:
        """Add a sheet, reload, and return the new sheet's mirror."""
        batch = BatchUpdate(spreadsheet).add_sheet(properties)
        reply = await self._commit(batch)

        replies = reply.get("replies", [])
        if replies and "addSheet" in replies[0]:
            sheet_id = replies[0]["addSheet"].get("properties", {}).get("sheetId")
            if sheet_id is not None:
                return spreadsheet.sheet_by_id(sheet_id)
        return spreadsheet.sheet_by_title(properties.title)

    async def delete_sheet(
        self, spreadsheet: Spreadsheet, sheet_id: int
    ) -> dict[str, Any]:
        batch = BatchUpdate(spreadsheet).delete_sheet(sheet_id)
        return await self._commit(batch)

    # ------------------------------------------------------------------
    # Rows and columns
    # ------------------------------------------------------------------

    async def insert_rows(
        self, sheet: Sheet, start: int, end: int, *, inherit_from_before: bool = False
    ) -> dict[str, Any]:
        """Insert rows [start, end) (zero-based, half-open)."""
        return await self._insert_dimension(
            sheet, Dimension.ROWS, start, end, inherit_from_before
        )

    async def insert_columns(
        self, sheet: Sheet, start: int, end: int, *, inherit_from_before: bool = False
    ) -> dict[str, Any]:
        """Insert columns [start, end) (zero-based, half-open)."""
        return await self._insert_dimension(
            sheet, Dimension.COLUMNS, start, end, inherit_from_before
        )

    async def delete_rows(self, sheet: Sheet, start: int, end: int) -> dict[str, Any]:
        """Delete rows [start, end) (zero-based, half-open)."""
        return await self._delete_dimension(sheet, Dimension.ROWS, start, end)

    async def delete_columns(
        self, sheet: Sheet, start: int, end: int
    ) -> dict[str, Any]:
        """Delete columns [start, end) (zero-based, half-open)."""
        return await self._delete_dimension(sheet, Dimension.COLUMNS, start, end)

    async def _insert_dimension(
        self,
        sheet: Sheet,
        dimension: Dimension,
        start: int,
        end: int,
        inherit_from_before: bool,
    ) -> dict[str, Any]:
        spreadsheet = _spreadsheet_of(sheet)
        batch = BatchUpdate(spreadsheet).insert_dimension(
            sheet, dimension, start, end, inherit_from_before=inherit_from_before
        )
        _shift_grid(sheet, dimension, end - start)
        return await self._commit_optimistic(batch, sheet)

    async def _delete_dimension(
        self, sheet: Sheet, dimension: Dimension, start: int, end: int
    ) -> dict[str, Any]:
        spreadsheet = _spreadsheet_of(sheet)
        known = sheet.row_count if dimension is Dimension.ROWS else sheet.column_count
        if end > known:
            raise InvalidArgumentError(
                f"Cannot delete {dimension.value.lower()} [{start}, {end}) "
                f"from sheet {sheet.title!r} with {known}"
            )
        batch = BatchUpdate(spreadsheet).delete_dimension(sheet, dimension, start, end)
        _shift_grid(sheet, dimension, -(end - start))
        return await self._commit_optimistic(batch, sheet)

    # ------------------------------------------------------------------
    # Cells
    # ------------------------------------------------------------------

    async def append_cells(
        self, sheet: Sheet, rows: Sequence[Sequence[Any]]
    ) -> dict[str, Any]:
        """Append rows of values after the sheet's last row with data, then reload."""
        batch = BatchUpdate(_spreadsheet_of(sheet)).append_cells(sheet, rows)
        return await self._commit(batch)

    async def expand_sheet(self, sheet: Sheet, rows: int, columns: int) -> dict[str, Any]:
        """Grow the grid to ``rows`` x ``columns`` in its own batch.

        Unlike the other mutations this does not reload: it is the first
        phase of a flush, and a reload would discard the pending writes.
        The sheet's confirmed grid is updated in place on success.

        Raises:
            InvalidArgumentError: If either count is below the known grid
                (use ``resize_sheet`` to shrink)
        """
        spreadsheet = _spreadsheet_of(sheet)
        if rows < sheet.row_count or columns < sheet.column_count:
            raise InvalidArgumentError(
                f"Cannot expand sheet {sheet.title!r} from "
                f"{sheet.row_count} x {sheet.column_count} to {rows} x {columns}"
            )
        properties = _with_grid_size(sheet.properties, rows, columns)
        batch = BatchUpdate(spreadsheet).update_sheet_properties(sheet, properties)
        reply = await batch.submit()

        sheet.properties = properties
        sheet.projection = GridProjection(
            max(rows, sheet.projection.max_row),
            max(columns, sheet.projection.max_column),
        )
        logger.info("Expanded sheet %r to %d x %d", sheet.title, rows, columns)
        return reply

    async def sync_sheet(self, sheet: Sheet) -> dict[str, Any] | None:
        """Flush the sheet's pending cell writes.

        If the writes reach beyond the confirmed grid, the grid is expanded
        first in a separate batch (the values endpoint rejects cells outside
        the grid). Each pending cell is written as its own single-cell range.

        Returns:
            The values batchUpdate reply, or None if nothing was pending
        """
        spreadsheet = _spreadsheet_of(sheet)
        if not sheet.modified_cells:
            logger.debug("Sheet %r has no pending cell writes", sheet.title)
            return None

        if sheet.needs_expand:
            await self.expand_sheet(
                sheet,
                max(sheet.projection.max_row, sheet.row_count),
                max(sheet.projection.max_column, sheet.column_count),
            )

        batch = ValuesBatchUpdate(spreadsheet, self._settings.value_input_option)
        for cell in sheet.modified_cells:
            batch.add(
                ValueRange(
                    range=sheet_range(sheet.title, cell.a1),
                    values=[[cell.value]],
                    major_dimension="COLUMNS",
                )
            )
        reply = await batch.submit()

        logger.info("Flushed %d cell(s) to sheet %r", len(batch), sheet.title)
        sheet.clear_pending()
        sheet.reconcile()
        return reply

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _commit(self, batch: BatchUpdate) -> dict[str, Any]:
        reply = await batch.submit()
        await self.reload_spreadsheet(batch.spreadsheet)
        return reply

    async def _commit_optimistic(self, batch: BatchUpdate, sheet: Sheet) -> dict[str, Any]:
        try:
            reply = await batch.submit()
        except SheetSyncError:
            logger.warning(
                "Request failed after local grid bookkeeping on sheet %r; "
                "local state may differ from the server until resynchronized",
                sheet.title,
            )
            raise
        await self.reload_spreadsheet(batch.spreadsheet)
        return reply


def _spreadsheet_of(sheet: Sheet | None) -> Spreadsheet:
    if sheet is None:
        raise InvalidArgumentError("sheet must not be None")
    if sheet.spreadsheet is None:
        raise InvalidArgumentError(f"sheet {sheet.title!r} has no spreadsheet")
    if not sheet.spreadsheet.owns(sheet):
        raise InvalidArgumentError(
            f"sheet {sheet.title!r} was replaced by a reload; "
            "look it up again with sheet_by_id() or sheet_by_title()"
        )
    return sheet.spreadsheet


def _with_grid_size(properties: SheetProperties, rows: int, columns: int) -> SheetProperties:
    if rows < 1 or columns < 1:
        raise InvalidArgumentError(
            f"Grid size must be positive, got {rows} x {columns}"
        )
    grid = replace(properties.grid_properties, row_count=rows, column_count=columns)
    return replace(properties, grid_properties=grid)


def _shift_grid(sheet: Sheet, dimension: Dimension, delta: int) -> None:
    """Adjust the known grid size and the projection together."""
    grid = sheet.properties.grid_properties
    if dimension is Dimension.ROWS:
        grid = replace(grid, row_count=grid.row_count + delta)
        sheet.projection.max_row += delta
    else:
        grid = replace(grid, column_count=grid.column_count + delta)
        sheet.projection.max_column += delta
    sheet.properties = replace(sheet.properties, grid_properties=grid)
