from __future__ import annotations

from typing import Iterable, List, Optional

from sharedledger.time.ranges import DateRange

from .models import CashEvent, CashKind, TradeEvent


def filter_trades(
    trades: Iterable[TradeEvent],
    *,
    date_range: Optional[DateRange] = None,
    name_query: str = "",
) -> List[TradeEvent]:
    """
    Keep trades inside the inclusive date range whose name contains `name_query`
    (case-insensitive). An empty query matches every name.
    """
    needle = (name_query or "").strip().casefold()
    out: List[TradeEvent] = []
    for t in trades:
        if date_range is not None and not date_range.contains(t.date):
            continue
        if needle and needle not in t.name.casefold():
            continue
        out.append(t)
    return out


def filter_cash_events(
    events: Iterable[CashEvent],
    *,
    date_range: Optional[DateRange] = None,
    owner_id: Optional[str] = None,
    kind: Optional[CashKind] = None,
) -> List[CashEvent]:
    """None for owner_id / kind means 'all'."""
    out: List[CashEvent] = []
    for ev in events:
        if date_range is not None and not date_range.contains(ev.date):
            continue
        if owner_id is not None and ev.owner_id != owner_id:
            continue
        if kind is not None and ev.kind != kind:
            continue
        out.append(ev)
    return out


__all__ = ["filter_cash_events", "filter_trades"]
