"""Tests for batchUpdate request kinds."""

from __future__ import annotations

from dataclasses import replace

import pytest

from sheetsync.exceptions import InvalidArgumentError
from sheetsync.models import GridProperties, SheetProperties, SpreadsheetProperties
from sheetsync.operations import (
    AddSheet,
    AppendCells,
    DeleteDimension,
    DeleteSheet,
    Dimension,
    DimensionRange,
    InsertDimension,
    UpdateSheetProperties,
    UpdateSpreadsheetProperties,
    infer_value_type,
)


class TestDimensionRange:
    """Tests for DimensionRange validation and serialization."""

    def test_to_api(self) -> None:
        dimension_range = DimensionRange(0, Dimension.ROWS, 2, 5)
        assert dimension_range.to_api() == {
            "sheetId": 0,
            "dimension": "ROWS",
            "startIndex": 2,
            "endIndex": 5,
        }
        assert dimension_range.length == 3

    def test_negative_start(self) -> None:
        with pytest.raises(InvalidArgumentError):
            DimensionRange(0, Dimension.ROWS, -1, 5)

    @pytest.mark.parametrize("end", [2, 1])
    def test_empty_range(self, end: int) -> None:
        with pytest.raises(InvalidArgumentError):
            DimensionRange(0, Dimension.COLUMNS, 2, end)


class TestPropertyUpdates:
    """Tests for the diff-based update requests."""

    def test_update_sheet_properties_rename(self) -> None:
        current = SheetProperties(sheet_id=0, title="Sheet1", index=0)
        operation = UpdateSheetProperties.from_diff(
            current, replace(current, title="Data")
        )
        assert operation is not None
        assert operation.to_request() == {
            "updateSheetProperties": {
                "properties": {"sheetId": 0, "title": "Data"},
                "fields": "title",
            }
        }

    def test_update_sheet_properties_no_change(self) -> None:
        current = SheetProperties(sheet_id=0, title="Sheet1")
        assert UpdateSheetProperties.from_diff(current, replace(current)) is None

    def test_update_sheet_properties_needs_sheet_id(self) -> None:
        with pytest.raises(InvalidArgumentError):
            UpdateSheetProperties.from_diff(
                SheetProperties(title="a"), SheetProperties(title="b")
            )

    def test_update_spreadsheet_properties(self) -> None:
        current = SpreadsheetProperties(title="Old", locale="en_US")
        operation = UpdateSpreadsheetProperties.from_diff(
            current, replace(current, title="New")
        )
        assert operation is not None
        assert operation.to_request() == {
            "updateSpreadsheetProperties": {
                "properties": {"title": "New"},
                "fields": "title",
            }
        }


class TestStructuralRequests:
    """Tests for sheet and dimension requests."""

    def test_add_sheet_omits_unset_ids(self) -> None:
        operation = AddSheet(
            SheetProperties(title="New", grid_properties=GridProperties(10, 4))
        )
        payload = operation.to_request()["addSheet"]["properties"]
        assert "sheetId" not in payload
        assert "index" not in payload
        assert payload["title"] == "New"
        assert payload["gridProperties"]["rowCount"] == 10

    def test_delete_sheet(self) -> None:
        assert DeleteSheet(7).to_request() == {"deleteSheet": {"sheetId": 7}}

    def test_insert_dimension(self) -> None:
        operation = InsertDimension(DimensionRange(3, Dimension.COLUMNS, 1, 3), True)
        assert operation.to_request() == {
            "insertDimension": {
                "range": {
                    "sheetId": 3,
                    "dimension": "COLUMNS",
                    "startIndex": 1,
                    "endIndex": 3,
                },
                "inheritFromBefore": True,
            }
        }

    def test_delete_dimension(self) -> None:
        operation = DeleteDimension(DimensionRange(0, Dimension.ROWS, 2, 5))
        assert operation.to_request() == {
            "deleteDimension": {
                "range": {
                    "sheetId": 0,
                    "dimension": "ROWS",
                    "startIndex": 2,
                    "endIndex": 5,
                }
            }
        }


class TestAppendCells:
    """Tests for appendCells."""

    def test_payload(self) -> None:
        operation = AppendCells.from_rows(0, [["Dave", 42, None], ["=B2*2"]])
        assert operation.to_request() == {
            "appendCells": {
                "sheetId": 0,
                "rows": [
                    {
                        "values": [
                            {"userEnteredValue": {"stringValue": "Dave"}},
                            {"userEnteredValue": {"numberValue": 42}},
                            {"userEnteredValue": {}},
                        ]
                    },
                    {"values": [{"userEnteredValue": {"formulaValue": "=B2*2"}}]},
                ],
                "fields": "userEnteredValue",
            }
        }

    def test_empty_rows(self) -> None:
        with pytest.raises(InvalidArgumentError):
            AppendCells.from_rows(0, [])


class TestInferValueType:
    """Tests for infer_value_type."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("", {}),
            (None, {}),
            ("=SUM(A1:A3)", {"formulaValue": "=SUM(A1:A3)"}),
            ("TRUE", {"boolValue": True}),
            ("false", {"boolValue": False}),
            ("42", {"numberValue": 42}),
            ("1,234.5", {"numberValue": 1234.5}),
            ("-0.25", {"numberValue": -0.25}),
            ("nan", {"stringValue": "nan"}),
            ("Alice", {"stringValue": "Alice"}),
        ],
    )
    def test_infer(self, value: str | None, expected: dict) -> None:
        assert infer_value_type(value) == expected
