"""Cell value formatting.

Imported cells are compared as the text a spreadsheet would display for them,
so ``1``, ``1.0`` and ``"1"`` all read as ``"1"``.
"""

from __future__ import annotations

import datetime
from decimal import Decimal
from typing import Any


def format_value(value: Any) -> str:
    """Render a raw cell value as display text."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, Decimal):
        if value == value.to_integral_value():
            return str(value.quantize(Decimal(1)))
        return str(value.normalize())
    if isinstance(value, datetime.datetime):
        if value.time() == datetime.time():
            return value.date().isoformat()
        return value.isoformat(sep=" ", timespec="seconds")
    if isinstance(value, (datetime.date, datetime.time)):
        return value.isoformat()
    return str(value)
