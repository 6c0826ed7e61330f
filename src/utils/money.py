from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

CENT = Decimal("0.01")


def to_decimal(value: Any) -> Decimal | None:
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        return Decimal(int(value))
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    s = str(value).strip()
    if not s:
        return None
    s = s.replace(",", "")
    try:
        return Decimal(s)
    except InvalidOperation:
        return None


def format_money(value: Any, symbol: str = "$", dash: str = "-") -> str:
    """
    Jinja-friendly money formatter.

    - `None` -> dash
    - numeric -> "$1,234.56"
    - non-numeric string -> returned as-is
    """
    d = to_decimal(value)
    if d is None:
        if value is None:
            return dash
        s = str(value).strip()
        return s if s else dash

    d = d.quantize(CENT, rounding=ROUND_HALF_UP)
    sign = "-" if d < 0 else ""
    d_abs = -d if d < 0 else d
    return f"{sign}{symbol}{d_abs:,.2f}"

