from __future__ import annotations

from datetime import date, datetime

import pytest

from sharedledger.time.ranges import DateRange, QuickFilter, quick_filter_range

# Wednesday
NOW = date(2024, 3, 13)


@pytest.mark.parametrize(
    "token,start,end",
    [
        ("Today", date(2024, 3, 13), date(2024, 3, 13)),
        ("Yesterday", date(2024, 3, 12), date(2024, 3, 12)),
        ("This Week", date(2024, 3, 11), date(2024, 3, 17)),
        ("This Month", date(2024, 3, 1), date(2024, 3, 31)),
        ("Last Month", date(2024, 2, 1), date(2024, 2, 29)),
    ],
)
def test_quick_filter_ranges(token: str, start: date, end: date) -> None:
    assert quick_filter_range(token, NOW) == DateRange(start, end)


def test_all_time_is_unbounded() -> None:
    rng = quick_filter_range(QuickFilter.ALL_TIME, NOW)
    assert rng.is_unbounded
    assert rng.contains(date(1999, 1, 1))


def test_week_starts_monday_even_on_sunday() -> None:
    rng = quick_filter_range("This Week", date(2024, 3, 17))
    assert rng == DateRange(date(2024, 3, 11), date(2024, 3, 17))


def test_month_boundaries_across_year() -> None:
    assert quick_filter_range("Yesterday", date(2024, 1, 1)) == DateRange(date(2023, 12, 31), date(2023, 12, 31))
    assert quick_filter_range("Last Month", date(2024, 1, 20)) == DateRange(date(2023, 12, 1), date(2023, 12, 31))
    assert quick_filter_range("This Month", date(2023, 12, 5)) == DateRange(date(2023, 12, 1), date(2023, 12, 31))


def test_datetime_now_uses_its_calendar_date() -> None:
    rng = quick_filter_range("Today", datetime(2024, 3, 13, 23, 59))
    assert rng == DateRange(date(2024, 3, 13), date(2024, 3, 13))


def test_token_parsing_is_case_insensitive() -> None:
    assert QuickFilter.parse("this week") is QuickFilter.THIS_WEEK
    assert QuickFilter.parse("LAST_MONTH") is QuickFilter.LAST_MONTH
    assert QuickFilter.parse("fortnight") is None
    assert QuickFilter.parse(None) is None


def test_unknown_token_falls_back_to_all_time(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level("WARNING"):
        rng = quick_filter_range("fortnight", NOW)
    assert rng.is_unbounded
    assert "quick_filter.unknown_token" in caplog.text


def test_date_range_contains_is_inclusive_and_parses_strings() -> None:
    rng = DateRange("2024-01-01", "2024-01-31")
    assert rng.start == date(2024, 1, 1)
    assert rng.contains(date(2024, 1, 1))
    assert rng.contains(date(2024, 1, 31))
    assert not rng.contains(date(2024, 2, 1))
    assert DateRange(start="2024-01-10").contains(date(2030, 1, 1))
