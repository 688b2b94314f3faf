"""Batch builders for the two write endpoints of a spreadsheet.

``BatchUpdate`` accumulates structural operations for
``POST /spreadsheets/{id}:batchUpdate``; the server applies them atomically
in array order. ``ValuesBatchUpdate`` accumulates value ranges for
``POST /spreadsheets/{id}/values:batchUpdate``. The two endpoints never
share a request body.

Property updates are diffed when they are appended, against the snapshot
known at that moment. An update that changes nothing is not appended.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from sheetsync.envelope import decode_response
from sheetsync.exceptions import EmptyBatchError, InvalidArgumentError
from sheetsync.models import Sheet, SheetProperties, Spreadsheet, SpreadsheetProperties
from sheetsync.operations import (
    AddSheet,
    AppendCells,
    DeleteDimension,
    DeleteSheet,
    Dimension,
    DimensionRange,
    InsertDimension,
    Operation,
    UpdateSheetProperties,
    UpdateSpreadsheetProperties,
)

if TYPE_CHECKING:
    from sheetsync.transport import Transport

logger = logging.getLogger(__name__)


def _require_bound(spreadsheet: Spreadsheet | None) -> tuple[Spreadsheet, Transport]:
    if spreadsheet is None:
        raise InvalidArgumentError("spreadsheet must not be None")
    if not spreadsheet.is_bound:
        raise InvalidArgumentError(
            f"spreadsheet {spreadsheet.spreadsheet_id!r} is not bound to a transport"
        )
    assert spreadsheet.transport is not None
    return spreadsheet, spreadsheet.transport


class BatchUpdate:
    """Ordered structural operations destined for one batchUpdate call.

    Example:
        >>> batch = BatchUpdate(spreadsheet)
        >>> batch.update_sheet_properties(sheet, replace(sheet.properties, title="Data"))
        >>> batch.delete_dimension(sheet, Dimension.ROWS, 2, 5)
        >>> reply = await batch.submit()
    """

    def __init__(self, spreadsheet: Spreadsheet | None) -> None:
        """Open a batch bound to a spreadsheet.

        Raises:
            InvalidArgumentError: If the spreadsheet is missing or unbound
        """
        self._spreadsheet, self._transport = _require_bound(spreadsheet)
        self._operations: list[Operation] = []

    @property
    def spreadsheet(self) -> Spreadsheet:
        return self._spreadsheet

    @property
    def operations(self) -> tuple[Operation, ...]:
        return tuple(self._operations)

    def __len__(self) -> int:
        return len(self._operations)

    def add(self, operation: Operation) -> BatchUpdate:
        """Append an operation as-is."""
        self._operations.append(operation)
        return self

    def update_spreadsheet_properties(
        self, properties: SpreadsheetProperties
    ) -> BatchUpdate:
        """Append an update for the spreadsheet properties that differ."""
        operation = UpdateSpreadsheetProperties.from_diff(
            self._spreadsheet.properties, properties
        )
        if operation is not None:
            self._operations.append(operation)
        return self

    def update_sheet_properties(
        self, sheet: Sheet, properties: SheetProperties
    ) -> BatchUpdate:
        """Append an update for the sheet properties that differ."""
        self._check_sheet(sheet)
        operation = UpdateSheetProperties.from_diff(sheet.properties, properties)
        if operation is not None:
            self._operations.append(operation)
        return self

    def add_sheet(self, properties: SheetProperties) -> BatchUpdate:
        return self.add(AddSheet(properties))

    def delete_sheet(self, sheet_id: int) -> BatchUpdate:
        return self.add(DeleteSheet(sheet_id))

    def insert_dimension(
        self,
        sheet: Sheet,
        dimension: Dimension,
        start: int,
        end: int,
        *,
        inherit_from_before: bool = False,
    ) -> BatchUpdate:
        """Append an insertDimension for rows/columns [start, end)."""
        dimension_range = self._dimension_range(sheet, dimension, start, end)
        return self.add(InsertDimension(dimension_range, inherit_from_before))

    def delete_dimension(
        self, sheet: Sheet, dimension: Dimension, start: int, end: int
    ) -> BatchUpdate:
        """Append a deleteDimension for rows/columns [start, end)."""
        return self.add(
            DeleteDimension(self._dimension_range(sheet, dimension, start, end))
        )

    def append_cells(self, sheet: Sheet, rows: Sequence[Sequence[Any]]) -> BatchUpdate:
        self._check_sheet(sheet)
        return self.add(AppendCells.from_rows(_sheet_id(sheet), rows))

    def to_body(self) -> dict[str, Any]:
        return {"requests": [op.to_request() for op in self._operations]}

    async def submit(self) -> dict[str, Any]:
        """Send the batch.

        Returns:
            The decoded batchUpdate reply

        Raises:
            EmptyBatchError: If no operation was appended (nothing is sent)
            RemoteAPIError: If the reply carries an error envelope
            TransportError: On network failure
        """
        if not self._operations:
            raise EmptyBatchError("batchUpdate")

        path = f"/spreadsheets/{self._spreadsheet.spreadsheet_id}:batchUpdate"
        logger.debug(
            "Submitting %d request(s) to %s: %s",
            len(self._operations),
            path,
            ", ".join(op.kind for op in self._operations),
        )
        body = await self._transport.post(path, self.to_body())
        return decode_response(body)

    def _check_sheet(self, sheet: Sheet) -> None:
        if sheet is None:
            raise InvalidArgumentError("sheet must not be None")
        if sheet.spreadsheet is not self._spreadsheet:
            raise InvalidArgumentError(
                f"sheet {sheet.title!r} does not belong to spreadsheet "
                f"{self._spreadsheet.spreadsheet_id!r}"
            )
        if not self._spreadsheet.owns(sheet):
            raise InvalidArgumentError(
                f"sheet {sheet.title!r} was replaced by a reload; "
                "look it up again with sheet_by_id() or sheet_by_title()"
            )

    def _dimension_range(
        self, sheet: Sheet, dimension: Dimension, start: int, end: int
    ) -> DimensionRange:
        self._check_sheet(sheet)
        return DimensionRange(_sheet_id(sheet), Dimension(dimension), start, end)


def _sheet_id(sheet: Sheet) -> int:
    if sheet.sheet_id is None:
        raise InvalidArgumentError(f"sheet {sheet.title!r} has no sheetId")
    return sheet.sheet_id


@dataclass(frozen=True)
class ValueRange:
    """Values for one sheet-qualified A1 range."""

    range: str
    values: list[list[str]] = field(default_factory=list)
    major_dimension: str = "ROWS"

    def to_api(self) -> dict[str, Any]:
        return {
            "range": self.range,
            "majorDimension": self.major_dimension,
            "values": self.values,
        }


class ValuesBatchUpdate:
    """Value ranges destined for one values:batchUpdate call."""

    def __init__(
        self,
        spreadsheet: Spreadsheet | None,
        value_input_option: str = "USER_ENTERED",
    ) -> None:
        """Open a values batch bound to a spreadsheet.

        Raises:
            InvalidArgumentError: If the spreadsheet is missing or unbound
        """
        self._spreadsheet, self._transport = _require_bound(spreadsheet)
        self._value_input_option = value_input_option
        self._data: list[ValueRange] = []

    @property
    def data(self) -> tuple[ValueRange, ...]:
        return tuple(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def add(self, value_range: ValueRange) -> ValuesBatchUpdate:
        self._data.append(value_range)
        return self

    def to_body(self) -> dict[str, Any]:
        return {
            "valueInputOption": self._value_input_option,
            "data": [value_range.to_api() for value_range in self._data],
        }

    async def submit(self) -> dict[str, Any]:
        """Send the value ranges.

        Raises:
            EmptyBatchError: If no range was added (nothing is sent)
            RemoteAPIError: If the reply carries an error envelope
            TransportError: On network failure
        """
        if not self._data:
            raise EmptyBatchError("values:batchUpdate")

        path = f"/spreadsheets/{self._spreadsheet.spreadsheet_id}/values:batchUpdate"
        logger.debug("Submitting %d value range(s) to %s", len(self._data), path)
        body = await self._transport.post(path, self.to_body())
        return decode_response(body)
