from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, Mapping, Optional, Sequence, Tuple

from .models import DEPOSIT, WITHDRAWAL, ZERO, CashEvent, StakeholderCapital, StakeholderProfile, TradeEvent

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LedgerTotals:
    """All-time (unfiltered) account totals."""

    total_deposits: Decimal
    total_withdrawals: Decimal
    all_time_net_pnl: Decimal

    @property
    def net_contributions(self) -> Decimal:
        return self.total_deposits - self.total_withdrawals


@dataclass(frozen=True, slots=True)
class AttributionResult:
    """
    Per-stakeholder capital, restricted to the configured stakeholder set.

    `rows` keep profile order; `by_stakeholder` is a read-only view keyed by id.
    """

    rows: Tuple[StakeholderCapital, ...]
    all_time_net_pnl: Decimal

    @property
    def by_stakeholder(self) -> Mapping[str, StakeholderCapital]:
        return MappingProxyType({r.stakeholder_id: r for r in self.rows})

    @property
    def total_capital(self) -> Decimal:
        """Total account balance: Σ stakeholder capital."""
        return sum((r.capital for r in self.rows), ZERO)

    def get(self, stakeholder_id: str) -> Optional[StakeholderCapital]:
        for r in self.rows:
            if r.stakeholder_id == stakeholder_id:
                return r
        return None

    def __iter__(self) -> Iterator[StakeholderCapital]:
        return iter(self.rows)

    def __len__(self) -> int:
        return len(self.rows)


def compute_ledger_totals(
    cash_events: Iterable[CashEvent],
    trade_events: Iterable[TradeEvent],
) -> LedgerTotals:
    deposits = ZERO
    withdrawals = ZERO
    for ev in cash_events:
        if ev.kind == DEPOSIT:
            deposits += ev.amount
        elif ev.kind == WITHDRAWAL:
            withdrawals += ev.amount
    net = sum((t.pnl for t in trade_events), ZERO)
    return LedgerTotals(total_deposits=deposits, total_withdrawals=withdrawals, all_time_net_pnl=net)


def compute_attribution(
    cash_events: Iterable[CashEvent],
    trade_events: Iterable[TradeEvent],
    profiles: Sequence[StakeholderProfile],
) -> AttributionResult:
    """
    All-time capital per stakeholder:
      capital = deposits - withdrawals + all_time_net_pnl * profit_share_ratio

    Ratios are used as configured (not normalized). Cash events owned by an id
    outside `profiles` are not attributed to anyone.
    """
    order: list[str] = []
    ratios: Dict[str, Decimal] = {}
    for p in profiles:
        if p.stakeholder_id in ratios:
            raise ValueError(f"duplicate stakeholder profile: {p.stakeholder_id!r}")
        order.append(p.stakeholder_id)
        ratios[p.stakeholder_id] = p.profit_share_ratio

    deposits: Dict[str, Decimal] = {sid: ZERO for sid in order}
    withdrawals: Dict[str, Decimal] = {sid: ZERO for sid in order}
    unattributed = 0
    for ev in cash_events:
        if ev.owner_id not in ratios:
            unattributed += 1
            continue
        if ev.kind == DEPOSIT:
            deposits[ev.owner_id] += ev.amount
        else:
            withdrawals[ev.owner_id] += ev.amount
    if unattributed:
        logger.debug("attribution.unknown_owner skipped_cash_events=%d", unattributed)

    all_time_net_pnl = sum((t.pnl for t in trade_events), ZERO)

    rows = tuple(
        StakeholderCapital(
            stakeholder_id=sid,
            deposits=deposits[sid],
            withdrawals=withdrawals[sid],
            capital=deposits[sid] - withdrawals[sid] + all_time_net_pnl * ratios[sid],
        )
        for sid in order
    )
    return AttributionResult(rows=rows, all_time_net_pnl=all_time_net_pnl)


__all__ = ["AttributionResult", "LedgerTotals", "compute_attribution", "compute_ledger_totals"]
