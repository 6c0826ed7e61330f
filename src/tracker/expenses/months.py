from __future__ import annotations

import calendar
import datetime as dt

_MONTHS_BY_NAME: dict[str, int] = {}
for _i in range(1, 13):
    _MONTHS_BY_NAME[calendar.month_name[_i].lower()] = _i
    _MONTHS_BY_NAME[calendar.month_abbr[_i].lower()] = _i


def parse_month(raw: str | None) -> int | None:
    """
    Parses a month query value.

    Accepts "MARCH", "march", "Mar" or "3"; returns None for blank or unknown values.
    """
    s = (raw or "").strip().lower()
    if not s:
        return None
    if s.isdigit():
        m = int(s)
        return m if 1 <= m <= 12 else None
    return _MONTHS_BY_NAME.get(s)


def parse_year(raw: str | None) -> int | None:
    s = (raw or "").strip()
    if not s:
        return None
    try:
        y = int(s)
    except ValueError:
        return None
    return y if dt.MINYEAR <= y <= dt.MAXYEAR else None


def month_display(month: int) -> str:
    return calendar.month_name[month]


def month_bounds(year: int, month: int) -> tuple[dt.date, dt.date]:
    start = dt.date(year, month, 1)
    end = dt.date(year, month, calendar.monthrange(year, month)[1])
    return start, end
