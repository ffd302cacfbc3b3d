from __future__ import annotations

from typing import Iterable

from sharedledger.ledger.models import CashEvent, StakeholderProfile, TradeEvent

from .base import LedgerSnapshot, LedgerStore


class InMemoryLedgerStore(LedgerStore):
    """Ledger store backed by an in-process snapshot (tests, demos, file exports)."""

    def __init__(
        self,
        *,
        cash_events: Iterable[CashEvent] = (),
        trade_events: Iterable[TradeEvent] = (),
        profiles: Iterable[StakeholderProfile] = (),
    ) -> None:
        self._snapshot = LedgerSnapshot(tuple(cash_events), tuple(trade_events), tuple(profiles))

    def fetch_all(self) -> LedgerSnapshot:
        return self._snapshot

    def replace(self, snapshot: LedgerSnapshot) -> None:
        """Swap in a complete replacement snapshot."""
        self._snapshot = snapshot
