"""
Quick-filter date ranges for ledger reports.

All ranges are inclusive calendar-date bounds computed relative to a caller-supplied
"now". The week runs Monday through Sunday regardless of locale.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Optional, Union

from sharedledger.time.calendar import parse_calendar_date

logger = logging.getLogger(__name__)


class QuickFilter(str, Enum):
    TODAY = "Today"
    YESTERDAY = "Yesterday"
    THIS_WEEK = "This Week"
    THIS_MONTH = "This Month"
    LAST_MONTH = "Last Month"
    ALL_TIME = "All Time"

    @classmethod
    def parse(cls, token: Union["QuickFilter", str, None]) -> Optional["QuickFilter"]:
        """
        Accept the enum itself, its label ('This Week') or its name ('this_week').

        Returns None for unknown tokens.
        """
        if isinstance(token, QuickFilter):
            return token
        s = str(token or "").strip()
        if not s:
            return None
        folded = s.casefold()
        for member in cls:
            if folded in (member.value.casefold(), member.name.casefold()):
                return member
        return None


@dataclass(frozen=True, slots=True)
class DateRange:
    """
    Inclusive [start, end] calendar-date bounds. A None bound is open.
    """

    start: Optional[date] = None
    end: Optional[date] = None

    def __post_init__(self) -> None:
        if self.start is not None:
            object.__setattr__(self, "start", parse_calendar_date(self.start))
        if self.end is not None:
            object.__setattr__(self, "end", parse_calendar_date(self.end))

    @classmethod
    def all_time(cls) -> "DateRange":
        return cls(None, None)

    @property
    def is_unbounded(self) -> bool:
        return self.start is None and self.end is None

    def contains(self, d: date) -> bool:
        if self.start is not None and d < self.start:
            return False
        if self.end is not None and d > self.end:
            return False
        return True


def _first_of_month(d: date) -> date:
    return d.replace(day=1)


def _last_of_month(d: date) -> date:
    # Day 28 exists in every month; +4 days always lands in the next month.
    next_month = d.replace(day=28) + timedelta(days=4)
    return next_month - timedelta(days=next_month.day)


def quick_filter_range(token: Union[QuickFilter, str, None], now: Union[date, datetime]) -> DateRange:
    """
    Resolve a quick-filter token to a concrete inclusive DateRange.

    `now` may be a date or a datetime; a datetime contributes its own calendar date
    (no timezone conversion). Unknown tokens resolve to all-time.
    """
    today = now.date() if isinstance(now, datetime) else now
    qf = QuickFilter.parse(token)
    if qf is None:
        logger.warning("quick_filter.unknown_token token=%r; using all-time", token)
        return DateRange.all_time()

    if qf is QuickFilter.TODAY:
        return DateRange(today, today)
    if qf is QuickFilter.YESTERDAY:
        y = today - timedelta(days=1)
        return DateRange(y, y)
    if qf is QuickFilter.THIS_WEEK:
        monday = today - timedelta(days=today.weekday())
        return DateRange(monday, monday + timedelta(days=6))
    if qf is QuickFilter.THIS_MONTH:
        return DateRange(_first_of_month(today), _last_of_month(today))
    if qf is QuickFilter.LAST_MONTH:
        last_of_prev = _first_of_month(today) - timedelta(days=1)
        return DateRange(_first_of_month(last_of_prev), last_of_prev)
    return DateRange.all_time()


__all__ = ["DateRange", "QuickFilter", "quick_filter_range"]
