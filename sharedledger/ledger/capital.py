"""
Capital-at-start-of-day reconstruction from cash movements.

Capital basis excludes trade P&L entirely: only deposits (+amount) and
withdrawals (-amount) move it.

Representation:
- `dates`: distinct cash-event dates, ascending
- `_before[i]`: running capital immediately before `dates[i]`'s cash events apply
- `_before[-1]`: running capital after every cash event

Any date resolves with one `bisect` over `dates`.
"""

from __future__ import annotations

from bisect import bisect_left
from collections.abc import Mapping
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, Iterator, Sequence, Tuple

from .models import DEPOSIT, ZERO, CashEvent


class CapitalTimeline(Mapping):
    """
    Read-only `date -> capital before that date's cash events` map.

    Sparse: only dates with at least one cash event are keys. Iteration is in
    ascending date order.
    """

    __slots__ = ("_dates", "_before", "_index")

    def __init__(self, dates: Sequence[date], before: Sequence[Decimal]) -> None:
        if len(before) != len(dates) + 1:
            raise ValueError("before must have exactly one more entry than dates")
        self._dates: Tuple[date, ...] = tuple(dates)
        self._before: Tuple[Decimal, ...] = tuple(before)
        self._index: Dict[date, int] = {d: i for i, d in enumerate(self._dates)}

    def __getitem__(self, key: date) -> Decimal:
        return self._before[self._index[key]]

    def __iter__(self) -> Iterator[date]:
        return iter(self._dates)

    def __len__(self) -> int:
        return len(self._dates)

    def __repr__(self) -> str:
        return f"CapitalTimeline({dict(self.items())!r})"

    @property
    def dates(self) -> Tuple[date, ...]:
        return self._dates

    @property
    def closing_capital(self) -> Decimal:
        """Capital after every recorded cash movement."""
        return self._before[-1]

    def has_capital_before(self, target: date) -> bool:
        """True when at least one cash event is dated strictly before `target`."""
        return bisect_left(self._dates, target) > 0

    def capital_before(self, target: date) -> Decimal:
        """
        Σ deposits - Σ withdrawals dated strictly before `target`.

        Equal to `self[target]` for a cash date, and to
        `self[prev] + Σ(events in [prev, target))` for the latest cash date `prev < target`.
        """
        return self._before[bisect_left(self._dates, target)]


def build_capital_timeline(cash_events: Iterable[CashEvent]) -> CapitalTimeline:
    """
    Build the sparse start-of-day capital timeline from all (unfiltered) cash events.
    """
    deltas: Dict[date, Decimal] = {}
    for ev in cash_events:
        deltas[ev.date] = deltas.get(ev.date, ZERO) + ev.signed_amount

    dates = sorted(deltas)
    before = [ZERO]
    running = ZERO
    for d in dates:
        running += deltas[d]
        before.append(running)
    return CapitalTimeline(dates, before)


def _same_day_deposits(target: date, cash_events: Iterable[CashEvent]) -> Decimal:
    # Same-day withdrawals are not subtracted.
    total = ZERO
    for ev in cash_events:
        if ev.date == target and ev.kind == DEPOSIT:
            total += ev.amount
    return total


def resolve_capital_at_date(
    target: date,
    timeline: CapitalTimeline,
    cash_events: Sequence[CashEvent],
) -> Decimal:
    """
    Capital at the start of `target`.

    - With at least one cash event before `target`: the reconstructed capital basis.
    - Otherwise: the deposits dated exactly `target` (same-day fallback), else 0.
    """
    if timeline.has_capital_before(target):
        return timeline.capital_before(target)
    return _same_day_deposits(target, cash_events)


class CapitalResolver:
    """
    Memoizing resolver for a single aggregation pass.

    Create a new instance per pass; it must not outlive the snapshot it was built from.
    """

    def __init__(self, timeline: CapitalTimeline, cash_events: Sequence[CashEvent]) -> None:
        self._timeline = timeline
        self._cash_events = cash_events
        self._cache: Dict[date, Decimal] = {}

    def resolve(self, target: date) -> Decimal:
        cached = self._cache.get(target)
        if cached is None:
            cached = resolve_capital_at_date(target, self._timeline, self._cash_events)
            self._cache[target] = cached
        return cached

    @property
    def resolved_dates(self) -> int:
        return len(self._cache)


__all__ = [
    "CapitalResolver",
    "CapitalTimeline",
    "build_capital_timeline",
    "resolve_capital_at_date",
]
