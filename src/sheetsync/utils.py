"""
Utility functions for sheetsync.

Provides A1 coordinate conversion and sheet title quoting.
"""

from __future__ import annotations

import re

_A1_PATTERN = re.compile(r"^([A-Za-z]+)(\d+)$")


def column_index_to_letter(index: int) -> str:
    """Convert a zero-based column index to A1 notation letter(s).

    Examples:
        0 -> A, 1 -> B, 25 -> Z, 26 -> AA, 27 -> AB, 702 -> AAA
    """
    if index < 0:
        raise ValueError(f"Column index must be non-negative: {index}")
    result = ""
    while True:
        result = chr(ord("A") + (index % 26)) + result
        index = index // 26 - 1
        if index < 0:
            break
    return result


def letter_to_column_index(letter: str) -> int:
    """Convert A1 notation letter(s) to a zero-based column index.

    Examples:
        A -> 0, B -> 1, Z -> 25, AA -> 26, AB -> 27, AAA -> 702
    """
    result = 0
    for char in letter.upper():
        result = result * 26 + (ord(char) - ord("A") + 1)
    return result - 1


def position_to_a1(row: int, column: int) -> str:
    """Convert a 1-indexed (row, column) position to A1 notation.

    Examples:
        (1, 1) -> A1, (1, 2) -> B1, (10, 3) -> C10
    """
    if row < 1 or column < 1:
        raise ValueError(f"Positions are 1-indexed, got ({row}, {column})")
    return f"{column_index_to_letter(column - 1)}{row}"


def a1_to_position(a1: str) -> tuple[int, int]:
    """Convert A1 notation to a 1-indexed (row, column) position.

    Examples:
        A1 -> (1, 1), B1 -> (1, 2), C10 -> (10, 3)
    """
    match = _A1_PATTERN.match(a1.strip())
    if not match:
        raise ValueError(f"Invalid A1 notation: {a1}")
    col_letter, row_str = match.groups()
    row = int(row_str)
    if row < 1:
        raise ValueError(f"Invalid A1 notation: {a1}")
    return row, letter_to_column_index(col_letter) + 1


def escape_sheet_title(title: str) -> str:
    """Escape sheet title for use in A1 notation ranges.

    Sheet names containing spaces, special characters, or starting with
    digits need to be wrapped in single quotes.
    """
    needs_quoting = (
        " " in title
        or "'" in title
        or "!" in title
        or ":" in title
        or (len(title) > 0 and title[0].isdigit())
    )
    if needs_quoting:
        escaped = title.replace("'", "''")
        return f"'{escaped}'"
    return title


def sheet_range(title: str, a1: str) -> str:
    """Build a sheet-qualified range such as ``Sheet1!B3``."""
    return f"{escape_sheet_title(title)}!{a1}"
