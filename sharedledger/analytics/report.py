"""
Ledger report composition.

Wires the pure calculators together the way the reporting page consumes them:
- all-time totals and stakeholder attribution use the *unfiltered* snapshot
- daily P&L uses the caller-filtered trades against the unfiltered capital timeline
- presentation order comes from the generic sorter

The transactions log is the cash-event counterpart: filtered deposits / withdrawals
with a signed total.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from sharedledger.common.logging import log_event
from sharedledger.ledger.attribution import AttributionResult, LedgerTotals, compute_attribution, compute_ledger_totals
from sharedledger.ledger.capital import build_capital_timeline
from sharedledger.ledger.daily_pnl import DailyPnlTotals, aggregate_daily_pnl, summarize_daily_pnl
from sharedledger.ledger.filters import filter_cash_events, filter_trades
from sharedledger.ledger.models import ZERO, CashEvent, CashKind, DailyBucket, TradeEvent
from sharedledger.store.base import LedgerSnapshot
from sharedledger.time.ranges import DateRange

from .sorting import SortConfig, SortDirection, sort_records, sort_with_config

logger = logging.getLogger(__name__)

DEFAULT_DAILY_SORT = SortConfig("date", SortDirection.ASCENDING)
DEFAULT_TRANSACTION_SORT = SortConfig("date", SortDirection.DESCENDING)


@dataclass(frozen=True, slots=True)
class LedgerReport:
    date_range: DateRange
    name_query: str

    totals: LedgerTotals
    attribution: AttributionResult
    filtered_pnl: Decimal

    daily: Tuple[DailyBucket, ...]
    chart_totals: DailyPnlTotals
    matching_trades: Tuple[TradeEvent, ...]

    @property
    def total_account_balance(self) -> Decimal:
        return self.attribution.total_capital

    def to_dict(self) -> Dict[str, Any]:
        return {
            "range": {"start": _fmt_date(self.date_range.start), "end": _fmt_date(self.date_range.end)},
            "name_query": self.name_query,
            "totals": {
                "total_deposits": str(self.totals.total_deposits),
                "total_withdrawals": str(self.totals.total_withdrawals),
                "all_time_net_pnl": str(self.totals.all_time_net_pnl),
                "filtered_pnl": str(self.filtered_pnl),
                "total_account_balance": str(self.total_account_balance),
            },
            "stakeholders": [
                {
                    "stakeholder_id": r.stakeholder_id,
                    "deposits": str(r.deposits),
                    "withdrawals": str(r.withdrawals),
                    "capital": str(r.capital),
                }
                for r in self.attribution
            ],
            "daily": [
                {
                    "date": b.date.isoformat(),
                    "profit": str(b.profit),
                    "loss": str(b.loss),
                    "net_pnl": str(b.net_pnl),
                    "start_capital": str(b.start_capital),
                    "pnl_pct": None if b.pnl_pct is None else str(b.pnl_pct),
                }
                for b in self.daily
            ],
            "chart_totals": {
                "total_profit": str(self.chart_totals.total_profit),
                "total_loss": str(self.chart_totals.total_loss),
                "net_pnl": str(self.chart_totals.net_pnl),
            },
            "matching_trades": [
                {
                    "id": t.event_id,
                    "date": t.date.isoformat(),
                    "name": t.name,
                    "op_kind": t.op_kind,
                    "pnl": str(t.pnl),
                }
                for t in self.matching_trades
            ],
        }


def _fmt_date(d: Optional[date]) -> Optional[str]:
    return None if d is None else d.isoformat()


def build_ledger_report(
    snapshot: LedgerSnapshot,
    *,
    date_range: Optional[DateRange] = None,
    name_query: str = "",
    sort: Optional[SortConfig] = None,
) -> LedgerReport:
    """
    Build every report figure from one snapshot. Pure: nothing is cached between calls.
    """
    rng = date_range or DateRange.all_time()
    query = (name_query or "").strip()

    cash = snapshot.cash_events
    trades = snapshot.trade_events

    totals = compute_ledger_totals(cash, trades)
    attribution = compute_attribution(cash, trades, snapshot.profiles)

    filtered = filter_trades(trades, date_range=rng, name_query=query)
    filtered_pnl = sum((t.pnl for t in filtered), ZERO)

    timeline = build_capital_timeline(cash)
    buckets = aggregate_daily_pnl(filtered, cash, timeline)
    chart_totals = summarize_daily_pnl(buckets)
    daily = sort_with_config(buckets, sort, default=DEFAULT_DAILY_SORT)

    matching: List[TradeEvent] = []
    if query:
        matching = sort_records(filtered, "date", SortDirection.DESCENDING)

    log_event(
        logger,
        "ledger.report_built",
        severity="INFO",
        range_start=_fmt_date(rng.start),
        range_end=_fmt_date(rng.end),
        name_query=query or None,
        trades_in_range=len(filtered),
        daily_buckets=len(buckets),
        stakeholders=len(attribution),
    )

    return LedgerReport(
        date_range=rng,
        name_query=query,
        totals=totals,
        attribution=attribution,
        filtered_pnl=filtered_pnl,
        daily=tuple(daily),
        chart_totals=chart_totals,
        matching_trades=tuple(matching),
    )


@dataclass(frozen=True, slots=True)
class TransactionsReport:
    """Filtered deposit / withdrawal log with its signed total (deposits +, withdrawals -)."""

    date_range: DateRange
    owner_id: Optional[str]
    kind: Optional[CashKind]

    transactions: Tuple[CashEvent, ...]
    total_amount: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            "range": {"start": _fmt_date(self.date_range.start), "end": _fmt_date(self.date_range.end)},
            "owner_id": self.owner_id,
            "kind": self.kind,
            "total_amount": str(self.total_amount),
            "transactions": [
                {
                    "id": ev.event_id,
                    "date": ev.date.isoformat(),
                    "owner_id": ev.owner_id,
                    "kind": ev.kind,
                    "amount": str(ev.amount),
                    "description": ev.description,
                }
                for ev in self.transactions
            ],
        }


def build_transactions_report(
    snapshot: LedgerSnapshot,
    *,
    date_range: Optional[DateRange] = None,
    owner_id: Optional[str] = None,
    kind: Optional[CashKind] = None,
    sort: Optional[SortConfig] = None,
) -> TransactionsReport:
    """
    Cash-event log filtered by date range, owner and kind (None means all).

    Rows follow `sort`, newest first by default.
    """
    rng = date_range or DateRange.all_time()
    events = filter_cash_events(snapshot.cash_events, date_range=rng, owner_id=owner_id, kind=kind)
    total = sum((ev.signed_amount for ev in events), ZERO)
    rows = sort_with_config(events, sort, default=DEFAULT_TRANSACTION_SORT)

    log_event(
        logger,
        "ledger.transactions_report_built",
        severity="INFO",
        range_start=_fmt_date(rng.start),
        range_end=_fmt_date(rng.end),
        owner_id=owner_id,
        kind=kind,
        transactions=len(rows),
        total_amount=total,
    )
    return TransactionsReport(
        date_range=rng,
        owner_id=owner_id,
        kind=kind,
        transactions=tuple(rows),
        total_amount=total,
    )


__all__ = [
    "DEFAULT_DAILY_SORT",
    "DEFAULT_TRANSACTION_SORT",
    "LedgerReport",
    "TransactionsReport",
    "build_ledger_report",
    "build_transactions_report",
]
