"""Column offset <-> spreadsheet column label conversion."""

from __future__ import annotations

from openpyxl.utils import column_index_from_string, get_column_letter


def column_label(offset: int) -> str:
    """Return the column label for a zero-based column offset.

    0 -> "A", 25 -> "Z", 26 -> "AA", 701 -> "ZZ", 702 -> "AAA".
    """
    if offset < 0:
        raise ValueError(f"Column offset must be >= 0, got {offset}")
    return get_column_letter(offset + 1)


def column_offset(label: str) -> int:
    """Return the zero-based offset of a column label ("A" -> 0, "AA" -> 26)."""
    return column_index_from_string(label.upper()) - 1
