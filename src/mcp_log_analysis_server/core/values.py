"""Helpers for coercing parsed field values."""

from __future__ import annotations

import math
from typing import Any


def value_text(value: Any) -> str:
    """Return the canonical text form of a field value."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def to_number(value: Any) -> float | None:
    """Parse a whole value as a finite number, else None."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        try:
            num = float(value)
        except OverflowError:
            return None
    else:
        try:
            num = float(str(value).strip())
        except ValueError:
            return None
    if not math.isfinite(num):
        return None
    return num


def to_int(value: Any) -> int | None:
    """Parse an integral value (``"500"`` or ``500.0``), else None."""
    num = to_number(value)
    if num is None or not num.is_integer():
        return None
    return int(num)
