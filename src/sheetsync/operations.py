"""Request kinds accepted by the spreadsheet ``batchUpdate`` endpoint.

Each operation is a frozen dataclass naming its request kind. ``to_request()``
wraps ``payload()`` under that kind, producing one element of the
``requests`` array, e.g. ``{"deleteSheet": {"sheetId": 3}}``.

Supporting a new request kind means adding a dataclass with a ``kind`` and a
``payload()``; ``BatchUpdate`` accepts any ``Operation``.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar

from sheetsync.diff import diff_properties
from sheetsync.exceptions import InvalidArgumentError
from sheetsync.models import SheetProperties, SpreadsheetProperties, to_api


class Dimension(str, Enum):
    """Axis of a dimension range."""

    ROWS = "ROWS"
    COLUMNS = "COLUMNS"


@dataclass(frozen=True)
class Operation:
    """Base class for a single batchUpdate request."""

    kind: ClassVar[str] = ""

    def payload(self) -> dict[str, Any]:
        raise NotImplementedError

    def to_request(self) -> dict[str, Any]:
        return {self.kind: self.payload()}


@dataclass(frozen=True)
class DimensionRange:
    """Zero-based, half-open span of rows or columns on one sheet."""

    sheet_id: int
    dimension: Dimension
    start_index: int
    end_index: int

    def __post_init__(self) -> None:
        if self.start_index < 0:
            raise InvalidArgumentError(
                f"start_index must be non-negative, got {self.start_index}"
            )
        if self.end_index <= self.start_index:
            raise InvalidArgumentError(
                f"Empty dimension range [{self.start_index}, {self.end_index})"
            )

    @property
    def length(self) -> int:
        return self.end_index - self.start_index

    def to_api(self) -> dict[str, Any]:
        return {
            "sheetId": self.sheet_id,
            "dimension": Dimension(self.dimension).value,
            "startIndex": self.start_index,
            "endIndex": self.end_index,
        }


@dataclass(frozen=True)
class UpdateSpreadsheetProperties(Operation):
    """Overwrite the masked spreadsheet-level properties."""

    kind: ClassVar[str] = "updateSpreadsheetProperties"

    properties: dict[str, Any]
    fields: tuple[str, ...]

    @classmethod
    def from_diff(
        cls, current: SpreadsheetProperties, proposed: SpreadsheetProperties
    ) -> UpdateSpreadsheetProperties | None:
        """Build the update for the changed fields, or None if nothing changed."""
        changes = diff_properties(current, proposed)
        if not changes:
            return None
        return cls(properties=changes.properties, fields=changes.fields)

    def payload(self) -> dict[str, Any]:
        return {"properties": self.properties, "fields": ",".join(self.fields)}


@dataclass(frozen=True)
class UpdateSheetProperties(Operation):
    """Overwrite the masked properties of one sheet."""

    kind: ClassVar[str] = "updateSheetProperties"

    sheet_id: int
    properties: dict[str, Any]
    fields: tuple[str, ...]

    @classmethod
    def from_diff(
        cls, current: SheetProperties, proposed: SheetProperties
    ) -> UpdateSheetProperties | None:
        """Build the update for the changed fields, or None if nothing changed."""
        if current.sheet_id is None:
            raise InvalidArgumentError("Cannot update a sheet without a sheetId")
        changes = diff_properties(current, proposed)
        if not changes:
            return None
        return cls(
            sheet_id=current.sheet_id,
            properties=changes.properties,
            fields=changes.fields,
        )

    def payload(self) -> dict[str, Any]:
        return {
            "properties": {"sheetId": self.sheet_id, **self.properties},
            "fields": ",".join(self.fields),
        }


@dataclass(frozen=True)
class AddSheet(Operation):
    """Add a sheet. Unset id/index are assigned by the server."""

    kind: ClassVar[str] = "addSheet"

    properties: SheetProperties

    def payload(self) -> dict[str, Any]:
        return {"properties": to_api(self.properties)}


@dataclass(frozen=True)
class DeleteSheet(Operation):
    kind: ClassVar[str] = "deleteSheet"

    sheet_id: int

    def payload(self) -> dict[str, Any]:
        return {"sheetId": self.sheet_id}


@dataclass(frozen=True)
class InsertDimension(Operation):
    kind: ClassVar[str] = "insertDimension"

    range: DimensionRange
    inherit_from_before: bool = False

    def payload(self) -> dict[str, Any]:
        return {
            "range": self.range.to_api(),
            "inheritFromBefore": self.inherit_from_before,
        }


@dataclass(frozen=True)
class DeleteDimension(Operation):
    kind: ClassVar[str] = "deleteDimension"

    range: DimensionRange

    def payload(self) -> dict[str, Any]:
        return {"range": self.range.to_api()}


@dataclass(frozen=True)
class AppendCells(Operation):
    """Append rows of values after the last row with data.

    Values are user-entered strings; formulas, booleans and numbers are sent
    with their typed ExtendedValue so the server stores them as such.
    """

    kind: ClassVar[str] = "appendCells"

    sheet_id: int
    rows: tuple[tuple[str, ...], ...]
    fields: str = "userEnteredValue"

    @classmethod
    def from_rows(cls, sheet_id: int, rows: Sequence[Sequence[Any]]) -> AppendCells:
        if not rows:
            raise InvalidArgumentError("appendCells needs at least one row")
        return cls(
            sheet_id=sheet_id,
            rows=tuple(
                tuple("" if v is None else str(v) for v in row) for row in rows
            ),
        )

    def payload(self) -> dict[str, Any]:
        return {
            "sheetId": self.sheet_id,
            "rows": [
                {"values": [{"userEnteredValue": infer_value_type(v)} for v in row]}
                for row in self.rows
            ],
            "fields": self.fields,
        }


def infer_value_type(value: str | None) -> dict[str, Any]:
    """Infer the ExtendedValue for a user-entered string.

    Examples:
        "=SUM(A1:A3)" -> {"formulaValue": "=SUM(A1:A3)"}
        "TRUE" -> {"boolValue": True}
        "1,234.5" -> {"numberValue": 1234.5}
        "Alice" -> {"stringValue": "Alice"}
    """
    if value is None or value == "":
        return {}

    if value.startswith("="):
        return {"formulaValue": value}

    if value.upper() == "TRUE":
        return {"boolValue": True}
    if value.upper() == "FALSE":
        return {"boolValue": False}

    # Handle numbers with commas (e.g., "1,234.56")
    try:
        num = float(value.replace(",", ""))
    except ValueError:
        return {"stringValue": value}

    if not math.isfinite(num):
        return {"stringValue": value}
    if num == int(num):
        return {"numberValue": int(num)}
    return {"numberValue": num}
