"""In-memory mirror of a remote spreadsheet.

Value objects (``SpreadsheetProperties``, ``SheetProperties``,
``GridProperties``, ``Color``) describe property snapshots and compare by
value. Each field carries its API name in the dataclass metadata, which is
what ``sheetsync.diff`` walks to build field masks such as
``gridProperties.rowCount``.

Entities (``Spreadsheet``, ``Sheet``, ``Cell``) hold the last-synced state
plus the pending local state of each sheet: the cells written since the last
flush and the projected grid bounds (high-water marks) those writes need.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, is_dataclass
from typing import TYPE_CHECKING, Any

from sheetsync.utils import a1_to_position, position_to_a1

if TYPE_CHECKING:
    from sheetsync.transport import Transport


def api_field(
    name: str,
    default: Any = None,
    *,
    nested: bool = False,
    identity: bool = False,
    default_factory: Any = None,
) -> Any:
    """Declare a dataclass field with its API name.

    Args:
        name: JSON field name used by the Sheets API
        default: Default value
        nested: The value is itself a property object whose fields are
            diffed individually (``gridProperties.rowCount``)
        identity: The field identifies the entity and never enters a field mask
        default_factory: Factory for mutable defaults
    """
    metadata = {"api": name, "nested": nested, "identity": identity}
    if default_factory is not None:
        return field(default_factory=default_factory, metadata=metadata)
    return field(default=default, metadata=metadata)


def to_api(value: Any) -> Any:
    """Serialize a property object to its API JSON form.

    Fields whose value is ``None`` are omitted.
    """
    if not is_dataclass(value) or isinstance(value, type):
        return value
    result: dict[str, Any] = {}
    for f in fields(value):
        item = getattr(value, f.name)
        if item is None:
            continue
        result[f.metadata.get("api", f.name)] = to_api(item)
    return result


@dataclass(frozen=True)
class SpreadsheetProperties:
    """Spreadsheet-level properties."""

    title: str = api_field("title", "")
    locale: str = api_field("locale", "")
    auto_recalc: str = api_field("autoRecalc", "")
    time_zone: str = api_field("timeZone", "")

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> SpreadsheetProperties:
        return cls(
            title=data.get("title", ""),
            locale=data.get("locale", ""),
            auto_recalc=data.get("autoRecalc", ""),
            time_zone=data.get("timeZone", ""),
        )


@dataclass(frozen=True)
class GridProperties:
    """Grid dimensions and display options of a sheet.

    Defaults match a freshly created sheet.
    """

    row_count: int = api_field("rowCount", 1000)
    column_count: int = api_field("columnCount", 26)
    frozen_row_count: int = api_field("frozenRowCount", 0)
    frozen_column_count: int = api_field("frozenColumnCount", 0)
    hide_gridlines: bool = api_field("hideGridlines", False)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> GridProperties:
        return cls(
            row_count=data.get("rowCount", 0),
            column_count=data.get("columnCount", 0),
            frozen_row_count=data.get("frozenRowCount", 0),
            frozen_column_count=data.get("frozenColumnCount", 0),
            hide_gridlines=data.get("hideGridlines", False),
        )


@dataclass(frozen=True)
class Color:
    """RGBA color with components in [0, 1]. Missing alpha means opaque."""

    red: float = api_field("red", 0.0)
    green: float = api_field("green", 0.0)
    blue: float = api_field("blue", 0.0)
    alpha: float | None = api_field("alpha")

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Color:
        return cls(
            red=data.get("red", 0.0),
            green=data.get("green", 0.0),
            blue=data.get("blue", 0.0),
            alpha=data.get("alpha"),
        )


@dataclass(frozen=True)
class SheetProperties:
    """Properties of a single sheet.

    ``sheet_id`` and ``index`` may be ``None`` for a sheet that does not
    exist yet; the server assigns them on ``addSheet``.
    """

    sheet_id: int | None = api_field("sheetId", identity=True)
    title: str = api_field("title", "")
    index: int | None = api_field("index")
    grid_properties: GridProperties = api_field(
        "gridProperties", nested=True, default_factory=GridProperties
    )
    hidden: bool = api_field("hidden", False)
    tab_color: Color | None = api_field("tabColor")
    right_to_left: bool = api_field("rightToLeft", False)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> SheetProperties:
        tab_color = data.get("tabColor")
        return cls(
            sheet_id=data.get("sheetId", 0),
            title=data.get("title", ""),
            index=data.get("index", 0),
            grid_properties=GridProperties.from_api(data.get("gridProperties", {})),
            hidden=data.get("hidden", False),
            tab_color=Color.from_api(tab_color) if tab_color else None,
            right_to_left=data.get("rightToLeft", False),
        )


@dataclass
class Cell:
    """A single cell value at a 1-indexed position."""

    row: int
    column: int
    value: str = ""

    @property
    def a1(self) -> str:
        """Position in A1 notation, e.g. ``B3``."""
        return position_to_a1(self.row, self.column)


@dataclass
class GridProjection:
    """Projected grid bounds of a sheet (high-water marks).

    Tracks the rows/columns local writes need before the server has
    confirmed them.
    """

    max_row: int
    max_column: int


class Sheet:
    """A sheet of a Spreadsheet, with confirmed and pending state.

    Attributes:
        spreadsheet: Owning spreadsheet (back-reference)
        properties: Last-known server properties
        projection: Projected grid bounds including unflushed writes
        modified_cells: Cells written locally and not yet flushed, in write order
    """

    def __init__(
        self,
        spreadsheet: Spreadsheet,
        properties: SheetProperties,
        cells: list[Cell] | None = None,
    ) -> None:
        self.spreadsheet = spreadsheet
        self.properties = properties
        self._cells: dict[tuple[int, int], Cell] = {}
        for cell in cells or []:
            self._cells[(cell.row, cell.column)] = cell
        self._pending: dict[tuple[int, int], Cell] = {}
        grid = properties.grid_properties
        self.projection = GridProjection(grid.row_count, grid.column_count)

    @classmethod
    def from_api(cls, spreadsheet: Spreadsheet, data: dict[str, Any]) -> Sheet:
        """Build a sheet from a ``sheets[]`` entry of a spreadsheet response."""
        properties = SheetProperties.from_api(data.get("properties", {}))
        cells: list[Cell] = []
        for grid_data in data.get("data", []):
            start_row = grid_data.get("startRow", 0)
            start_col = grid_data.get("startColumn", 0)
            for r, row_data in enumerate(grid_data.get("rowData", [])):
                for c, value_data in enumerate(row_data.get("values", [])):
                    entered = value_data.get("userEnteredValue")
                    if entered is None:
                        continue
                    cells.append(
                        Cell(
                            row=start_row + r + 1,
                            column=start_col + c + 1,
                            value=extended_value_to_string(entered),
                        )
                    )
        return cls(spreadsheet, properties, cells)

    @property
    def sheet_id(self) -> int | None:
        return self.properties.sheet_id

    @property
    def title(self) -> str:
        return self.properties.title

    @property
    def row_count(self) -> int:
        return self.properties.grid_properties.row_count

    @property
    def column_count(self) -> int:
        return self.properties.grid_properties.column_count

    def cell(self, row: int, column: int) -> Cell | None:
        """Return the mirrored cell at a 1-indexed position, if any."""
        return self._cells.get((row, column))

    def value(self, row: int, column: int) -> str:
        """Return the mirrored value at a 1-indexed position ("" if empty)."""
        cell = self._cells.get((row, column))
        return cell.value if cell else ""

    @property
    def modified_cells(self) -> list[Cell]:
        return list(self._pending.values())

    def clear_pending(self) -> None:
        """Forget the pending writes (after a successful flush)."""
        self._pending.clear()

    @property
    def rows(self) -> list[list[str]]:
        """Dense grid of values up to the last populated row and column."""
        if not self._cells:
            return []
        max_row = max(r for r, _ in self._cells)
        max_col = max(c for _, c in self._cells)
        return [
            [self.value(r, c) for c in range(1, max_col + 1)]
            for r in range(1, max_row + 1)
        ]

    def set_value(self, row: int, column: int, value: str) -> Cell:
        """Write a value locally and queue it for the next flush.

        The projection grows (never shrinks) to cover the position.
        """
        if row < 1 or column < 1:
            raise ValueError(f"Positions are 1-indexed, got ({row}, {column})")
        cell = Cell(row=row, column=column, value=str(value))
        self._cells[(row, column)] = cell

        # One pending entry per position; the latest write wins and moves last
        self._pending.pop((row, column), None)
        self._pending[(row, column)] = cell

        self.projection.max_row = max(self.projection.max_row, row)
        self.projection.max_column = max(self.projection.max_column, column)
        return cell

    def set_cell(self, a1: str, value: str) -> Cell:
        """Like ``set_value`` but addressed in A1 notation."""
        row, column = a1_to_position(a1)
        return self.set_value(row, column, value)

    @property
    def needs_expand(self) -> bool:
        """True if pending writes lie outside the confirmed grid."""
        return (
            self.projection.max_row > self.row_count
            or self.projection.max_column > self.column_count
        )

    @property
    def is_reconciled(self) -> bool:
        """True if the projection matches the confirmed grid."""
        return (
            self.projection.max_row == self.row_count
            and self.projection.max_column == self.column_count
        )

    def reconcile(self) -> None:
        """Reset the projection to the confirmed grid bounds."""
        self.projection = GridProjection(self.row_count, self.column_count)

    def __repr__(self) -> str:
        return (
            f"Sheet(sheet_id={self.sheet_id!r}, title={self.title!r}, "
            f"rows={self.row_count}, cols={self.column_count})"
        )


class Spreadsheet:
    """Local mirror of a remote spreadsheet.

    A spreadsheet obtained from ``SheetsClient`` is bound to the transport it
    was fetched with; only bound spreadsheets can be mutated.
    """

    def __init__(
        self,
        spreadsheet_id: str,
        properties: SpreadsheetProperties | None = None,
        transport: Transport | None = None,
    ) -> None:
        self.spreadsheet_id = spreadsheet_id
        self.properties = properties or SpreadsheetProperties()
        self.sheets: list[Sheet] = []
        self.transport = transport

    @classmethod
    def from_api(
        cls, data: dict[str, Any], transport: Transport | None = None
    ) -> Spreadsheet:
        """Build a spreadsheet from a ``spreadsheets.get`` response."""
        spreadsheet = cls(
            data.get("spreadsheetId", ""),
            SpreadsheetProperties.from_api(data.get("properties", {})),
            transport,
        )
        spreadsheet.sheets = [
            Sheet.from_api(spreadsheet, sheet_data)
            for sheet_data in data.get("sheets", [])
        ]
        return spreadsheet

    @property
    def title(self) -> str:
        return self.properties.title

    @property
    def is_bound(self) -> bool:
        """True if the spreadsheet has an id and a transport to send with."""
        return bool(self.spreadsheet_id) and self.transport is not None

    def sheet_by_id(self, sheet_id: int) -> Sheet | None:
        for sheet in self.sheets:
            if sheet.sheet_id == sheet_id:
                return sheet
        return None

    def owns(self, sheet: Sheet) -> bool:
        """True if ``sheet`` is one of the current sheets (not one replaced by a reload)."""
        return any(s is sheet for s in self.sheets)

    def sheet_by_title(self, title: str) -> Sheet | None:
        for sheet in self.sheets:
            if sheet.title == title:
                return sheet
        return None

    def __repr__(self) -> str:
        return (
            f"Spreadsheet(spreadsheet_id={self.spreadsheet_id!r}, "
            f"title={self.title!r}, sheets={len(self.sheets)})"
        )


def extended_value_to_string(value: dict[str, Any]) -> str:
    """Render an ExtendedValue (``userEnteredValue``) as a cell string."""
    if "formulaValue" in value:
        return str(value["formulaValue"])
    if "stringValue" in value:
        return str(value["stringValue"])
    if "boolValue" in value:
        return "TRUE" if value["boolValue"] else "FALSE"
    if "numberValue" in value:
        number = value["numberValue"]
        if isinstance(number, float) and number.is_integer():
            return str(int(number))
        return str(number)
    if "errorValue" in value:
        return str(value["errorValue"].get("message", "#ERROR!"))
    return ""
