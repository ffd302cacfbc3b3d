from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Sequence, Tuple

import requests

from sharedledger.common.logging import log_event
from sharedledger.ledger.models import CashEvent, StakeholderProfile, TradeEvent

logger = logging.getLogger(__name__)


class LedgerStoreError(RuntimeError):
    """Raised when the ledger store cannot produce a snapshot."""


@dataclass(frozen=True, slots=True)
class LedgerSnapshot:
    """
    Complete, immutable replacement snapshot of every ledger record.
    """

    cash_events: Tuple[CashEvent, ...] = ()
    trade_events: Tuple[TradeEvent, ...] = ()
    profiles: Tuple[StakeholderProfile, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "cash_events", tuple(self.cash_events))
        object.__setattr__(self, "trade_events", tuple(self.trade_events))
        object.__setattr__(self, "profiles", tuple(self.profiles))

    @classmethod
    def empty(cls) -> "LedgerSnapshot":
        return cls()

    @property
    def is_empty(self) -> bool:
        return not (self.cash_events or self.trade_events or self.profiles)

    def with_profiles(self, profiles: Sequence[StakeholderProfile]) -> "LedgerSnapshot":
        return LedgerSnapshot(self.cash_events, self.trade_events, tuple(profiles))


class LedgerStore(ABC):
    """Read side of the external ledger store."""

    @abstractmethod
    def fetch_all(self) -> LedgerSnapshot:
        """Return a complete snapshot; raise LedgerStoreError on failure."""


def merge_profiles(
    defaults: Sequence[StakeholderProfile],
    fetched: Sequence[StakeholderProfile],
) -> Tuple[StakeholderProfile, ...]:
    """
    Overlay fetched profiles on the configured defaults, per stakeholder id.

    A fetched profile replaces the default with the same id; defaults the store did
    not return are kept, and ids only the store knows are appended.
    """
    by_id: Dict[str, StakeholderProfile] = {p.stakeholder_id: p for p in defaults}
    for p in fetched:
        by_id[p.stakeholder_id] = p
    return tuple(by_id.values())


def load_snapshot(
    store: LedgerStore,
    *,
    default_profiles: Sequence[StakeholderProfile] = (),
) -> LedgerSnapshot:
    """
    Fetch a snapshot, absorbing store failures into an empty snapshot.

    `default_profiles` are merged under the fetched profiles (see `merge_profiles`).
    """
    try:
        snapshot = store.fetch_all()
    except (LedgerStoreError, requests.RequestException, ValueError) as e:
        log_event(
            logger,
            "ledger.fetch_failed",
            severity="ERROR",
            message=f"ledger store fetch failed: {e}",
            store=type(store).__name__,
            error_type=type(e).__name__,
        )
        snapshot = LedgerSnapshot.empty()

    if default_profiles:
        snapshot = snapshot.with_profiles(merge_profiles(default_profiles, snapshot.profiles))

    log_event(
        logger,
        "ledger.snapshot_loaded",
        severity="DEBUG",
        cash_events=len(snapshot.cash_events),
        trade_events=len(snapshot.trade_events),
        profiles=len(snapshot.profiles),
    )
    return snapshot


__all__ = ["LedgerSnapshot", "LedgerStore", "LedgerStoreError", "load_snapshot", "merge_profiles"]
