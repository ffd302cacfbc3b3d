"""
Daily trade P&L aggregation against start-of-day capital.

Trades are grouped by calendar date only, so the output does not depend on input
order. Capital is resolved from the *unfiltered* cash-event timeline even when the
trades were filtered by date range or name.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence

from .capital import CapitalResolver, CapitalTimeline
from .models import HUNDRED, ZERO, CashEvent, DailyBucket, TradeEvent


@dataclass(frozen=True, slots=True)
class DailyPnlTotals:
    total_profit: Decimal
    total_loss: Decimal
    net_pnl: Decimal


def compute_pnl_pct(net_pnl: Decimal, start_capital: Decimal) -> Optional[Decimal]:
    """
    Net P&L as a percentage of start-of-day capital.

    - start_capital > 0: net_pnl / start_capital * 100
    - start_capital <= 0 and net_pnl == 0: 0
    - start_capital <= 0 and net_pnl != 0: None (undefined, never NaN/Infinity)
    """
    if start_capital > 0:
        return net_pnl / start_capital * HUNDRED
    if net_pnl == 0:
        return ZERO
    return None


def aggregate_daily_pnl(
    filtered_trades: Iterable[TradeEvent],
    cash_events: Sequence[CashEvent],
    timeline: CapitalTimeline,
) -> List[DailyBucket]:
    """
    Group trades by date into DailyBucket rows (ascending by date).

    Inputs:
    - filtered_trades: the caller's date/name-filtered trade subset
    - cash_events: all cash events (used by the same-day capital fallback)
    - timeline: CapitalTimeline built from all cash events
    """
    resolver = CapitalResolver(timeline, cash_events)
    profit: Dict[date, Decimal] = {}
    loss: Dict[date, Decimal] = {}
    start_capital: Dict[date, Decimal] = {}

    for t in filtered_trades:
        d = t.date
        if d not in start_capital:
            start_capital[d] = resolver.resolve(d)
            profit[d] = ZERO
            loss[d] = ZERO
        if t.pnl > 0:
            profit[d] += t.pnl
        elif t.pnl < 0:
            loss[d] += -t.pnl

    out: List[DailyBucket] = []
    for d in sorted(start_capital):
        net = profit[d] - loss[d]
        out.append(
            DailyBucket(
                date=d,
                profit=profit[d],
                loss=loss[d],
                net_pnl=net,
                start_capital=start_capital[d],
                pnl_pct=compute_pnl_pct(net, start_capital[d]),
            )
        )
    return out


def summarize_daily_pnl(buckets: Iterable[DailyBucket]) -> DailyPnlTotals:
    """
    Period totals across daily buckets (chart footer numbers).
    """
    total_profit = ZERO
    total_loss = ZERO
    for b in buckets:
        total_profit += b.profit
        total_loss += b.loss
    return DailyPnlTotals(
        total_profit=total_profit,
        total_loss=total_loss,
        net_pnl=total_profit - total_loss,
    )


__all__ = ["DailyPnlTotals", "aggregate_daily_pnl", "compute_pnl_pct", "summarize_daily_pnl"]
