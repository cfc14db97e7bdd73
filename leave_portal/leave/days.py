"""
Inclusive day count between two calendar dates.
"""

import math
from datetime import date, datetime, timezone
from typing import Any

SECONDS_PER_DAY = 86400


def parse_calendar_date(value: Any) -> datetime | None:
    """
    Parse an ISO-8601 date or date-time into a naive UTC datetime.

    Date-only values are anchored at midnight. Returns None for anything
    that does not parse, including non-string input.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is not None:
        try:
            parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
        except (OverflowError, ValueError):
            # UTC value falls outside year 1..9999
            return None
    return parsed


def days(start: Any, end: Any) -> int:
    """
    Count the days from ``start`` to ``end``, both inclusive.

    Returns 0 when either value fails to parse or when ``end`` precedes
    ``start``. Never raises.

    >>> days("2025-02-09", "2025-02-24")
    16
    >>> days("2025-01-05", "2025-01-01")
    0
    """
    start_dt = parse_calendar_date(start)
    end_dt = parse_calendar_date(end)
    if start_dt is None or end_dt is None or end_dt < start_dt:
        return 0
    elapsed = (end_dt - start_dt).total_seconds()
    return math.floor(elapsed / SECONDS_PER_DAY) + 1
