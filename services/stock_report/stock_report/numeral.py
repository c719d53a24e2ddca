"""Helpers for parsing signed quantities printed in Brazilian report layouts."""

from __future__ import annotations

import math
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional

__all__ = ["parse_quantity", "is_quantity", "cell_text"]

_INTEGER = re.compile(r"^[-+]?\d+$")
_THOUSANDS = re.compile(r"^[-+]?\d{1,3}(?:\.\d{3})+$")
_DECIMAL = re.compile(r"^[-+]?\d+[.,]\d+$")
_TRIM = ";:()"


def parse_quantity(raw: Any) -> Optional[int]:
    """Parse a quantity such as '-15', '1.234' or '12,0' into an int.

    Returns None for anything that is not number-shaped; decimals are rounded
    half-up since reports only carry piece counts.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        if math.isnan(raw) or math.isinf(raw):
            return None
        return int(Decimal(str(raw)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    value = str(raw).strip().strip(_TRIM)
    if not value:
        return None
    if _INTEGER.match(value):
        return int(value)
    if _THOUSANDS.match(value):
        return int(value.replace(".", ""))
    if _DECIMAL.match(value):
        try:
            number = Decimal(value.replace(",", "."))
        except InvalidOperation:  # pragma: no cover - guarded by the pattern
            return None
        return int(number.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    return None


def is_quantity(raw: Any) -> bool:
    return parse_quantity(raw) is not None


def cell_text(value: Any) -> str:
    """Render a spreadsheet cell as text ('' for empty/NaN, '12' for 12.0)."""
    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
        return str(value)
    if isinstance(value, int):
        return str(value)
    return str(value).strip()
