"""
Generic, stable record sorting for report tables.

Ordering rules per field value:
- None sorts as negative infinity in both directions (first ascending, last descending)
- numbers (int / float / Decimal) compare numerically
- `date` values, and strings in date fields, compare as calendar dates (never lexicographically)
- other strings compare by the process locale's collation (`locale.strxfrm`)

Records may be dataclasses / plain objects (attribute access) or mappings.
"""

from __future__ import annotations

import locale
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Iterable, List, Mapping, Optional, Tuple, TypeVar, Union

from sharedledger.time.calendar import try_parse_calendar_date

T = TypeVar("T")

DEFAULT_DATE_FIELDS: frozenset[str] = frozenset({"date"})

# Rank keeps mixed-type columns totally ordered (nulls lowest).
_RANK_NULL = 0
_RANK_NUMBER = 1
_RANK_DATE = 2
_RANK_TEXT = 3


class SortDirection(str, Enum):
    ASCENDING = "ascending"
    DESCENDING = "descending"
    NONE = "none"


@dataclass(frozen=True, slots=True)
class SortConfig:
    key: str
    direction: SortDirection = SortDirection.ASCENDING

    def request_sort(self, key: str) -> "SortConfig":
        """
        Selecting a new key resets to ascending; re-selecting the same key toggles
        ascending <-> descending.
        """
        if key == self.key and self.direction is SortDirection.ASCENDING:
            return SortConfig(key, SortDirection.DESCENDING)
        return SortConfig(key, SortDirection.ASCENDING)


def request_sort(current: Optional[SortConfig], key: str) -> SortConfig:
    if current is None:
        return SortConfig(key, SortDirection.ASCENDING)
    return current.request_sort(key)


def _field_value(record: Any, field_key: Optional[str]) -> Any:
    if field_key is None:
        return record
    if isinstance(record, Mapping):
        return record.get(field_key)
    return getattr(record, field_key, None)


def _sort_key_for(value: Any, *, is_date_field: bool) -> Tuple[int, Any]:
    if value is None:
        return (_RANK_NULL, 0)
    if isinstance(value, (bool, int, float, Decimal)):
        return (_RANK_NUMBER, value)
    if isinstance(value, date):
        # datetime values collapse to their UTC calendar date.
        return (_RANK_DATE, try_parse_calendar_date(value))
    s = str(value)
    if is_date_field:
        parsed = try_parse_calendar_date(s)
        if parsed is not None:
            return (_RANK_DATE, parsed)
    return (_RANK_TEXT, locale.strxfrm(s))


def record_sort_key(
    field_key: Optional[str],
    *,
    date_fields: Iterable[str] = DEFAULT_DATE_FIELDS,
) -> Callable[[Any], Tuple[int, Any]]:
    is_date_field = field_key is not None and field_key in frozenset(date_fields)

    def _key(record: Any) -> Tuple[int, Any]:
        return _sort_key_for(_field_value(record, field_key), is_date_field=is_date_field)

    return _key


def sort_records(
    records: Iterable[T],
    field_key: Optional[str],
    direction: Union[SortDirection, str] = SortDirection.ASCENDING,
    *,
    date_fields: Iterable[str] = DEFAULT_DATE_FIELDS,
) -> List[T]:
    """
    Return a new, stably sorted list. `SortDirection.NONE` keeps input order.

    `field_key=None` sorts the records by their own value.
    """
    items = list(records)
    direction = SortDirection(direction)
    if direction is SortDirection.NONE:
        return items
    return sorted(
        items,
        key=record_sort_key(field_key, date_fields=date_fields),
        reverse=direction is SortDirection.DESCENDING,
    )


def sort_with_config(
    records: Iterable[T],
    config: Optional[SortConfig],
    *,
    default: Optional[SortConfig] = None,
    date_fields: Iterable[str] = DEFAULT_DATE_FIELDS,
) -> List[T]:
    """Apply `config`, falling back to `default`, falling back to input order."""
    chosen = config or default
    if chosen is None:
        return list(records)
    return sort_records(records, chosen.key, chosen.direction, date_fields=date_fields)


__all__ = [
    "DEFAULT_DATE_FIELDS",
    "SortConfig",
    "SortDirection",
    "record_sort_key",
    "request_sort",
    "sort_records",
    "sort_with_config",
]
