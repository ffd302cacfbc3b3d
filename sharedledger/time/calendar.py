"""
Calendar-date parsing for ledger records.

Canonical rules:
- Ledger dates are pure calendar days (no time-of-day, no timezone).
- `YYYY-MM-DD` strings, and strings whose date part is `YYYY-MM-DD`
  (e.g. '2024-01-05T00:00:00.000Z' from older spreadsheet rows), are trusted as-is.
- Other ISO-8601 strings and `datetime` objects are converted to UTC first
  (naive values are assumed UTC), then truncated to the date.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any, Optional
from zoneinfo import ZoneInfo

UTC = ZoneInfo("UTC")

_DATE_PART_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _datetime_to_utc_date(dt: datetime) -> date:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).date()


def parse_calendar_date(value: Any) -> date:
    """
    Parse a ledger date into `datetime.date`.

    Supports:
    - `date` (returned unchanged)
    - `datetime` (naive treated as UTC)
    - 'YYYY-MM-DD' and 'YYYY-MM-DDT...' strings (date part trusted)
    - other ISO strings with 'Z' / offset (converted to UTC)
    """

    if value is None:
        raise TypeError("calendar date is None")

    # datetime is a subclass of date; check it first.
    if isinstance(value, datetime):
        return _datetime_to_utc_date(value)
    if isinstance(value, date):
        return value

    if isinstance(value, str):
        s = value.strip()
        if not s:
            raise ValueError("calendar date string is empty")
        head = s.split("T", 1)[0]
        if _DATE_PART_RE.match(head):
            try:
                return date.fromisoformat(head)
            except ValueError as e:
                raise ValueError(f"invalid calendar date: {value!r}") from e
        if s.endswith("Z") or s.endswith("z"):
            s = s[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(s)
        except ValueError as e:
            raise ValueError(f"unparseable calendar date: {value!r}") from e
        return _datetime_to_utc_date(dt)

    raise TypeError(f"unsupported calendar date type: {type(value).__name__}")


def format_calendar_date(value: Any) -> str:
    """Render a ledger date as 'YYYY-MM-DD' ('' for missing values)."""

    if value is None or value == "":
        return ""
    return parse_calendar_date(value).isoformat()


def try_parse_calendar_date(value: Any) -> Optional[date]:
    try:
        return parse_calendar_date(value)
    except (TypeError, ValueError):
        return None


__all__ = ["format_calendar_date", "parse_calendar_date", "try_parse_calendar_date"]
