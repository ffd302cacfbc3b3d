"""
Wire records for the spreadsheet-backed ledger store.

The store hands back loosely-typed rows (numbers as strings, camelCase keys,
sheet-name-cased collections). These models are the only place that coercion
happens; the engine only ever sees validated domain records.

Coercion rules (matching the store's web client):
- ids are stringified ('' when missing)
- amount / profitLoss / profitShare parse the leading number of a string; anything
  non-numeric becomes 0
- profitShare is given in percent (50 -> ratio 0.5)
- dates are normalized to calendar dates
"""

from __future__ import annotations

import logging
import re
import datetime as dt
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from sharedledger.common.logging import log_event
from sharedledger.ledger.models import CashEvent, StakeholderProfile, TradeEvent
from sharedledger.time.calendar import parse_calendar_date

from .base import LedgerSnapshot

logger = logging.getLogger(__name__)

_LEADING_NUMBER_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")

R = TypeVar("R", bound=BaseModel)
D = TypeVar("D")


def coerce_number(v: Any) -> Decimal:
    """Lenient numeric coercion: leading number of a string, else 0."""
    if v is None or isinstance(v, bool):
        return Decimal("0")
    if isinstance(v, Decimal):
        return v if v.is_finite() else Decimal("0")
    if isinstance(v, (int, float)):
        d = Decimal(str(v))
        return d if d.is_finite() else Decimal("0")
    m = _LEADING_NUMBER_RE.match(str(v).strip())
    if not m:
        return Decimal("0")
    try:
        return Decimal(m.group(0))
    except InvalidOperation:
        return Decimal("0")


def _normalize_choice(v: Any, choices: Iterable[str]) -> Any:
    s = str(v or "").strip()
    for c in choices:
        if s.casefold() == c.casefold():
            return c
    return s


class _Record(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    id: str = ""

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v: Any) -> str:
        return "" if v is None else str(v)


class CashEventRecord(_Record):
    date: dt.date
    amount: Decimal = Decimal("0")
    type: str
    user: str
    description: Optional[str] = None

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, v: Any) -> dt.date:
        return parse_calendar_date(v)

    @field_validator("amount", mode="before")
    @classmethod
    def parse_amount(cls, v: Any) -> Decimal:
        return coerce_number(v)

    @field_validator("type", mode="before")
    @classmethod
    def parse_type(cls, v: Any) -> str:
        return _normalize_choice(v, ("Deposit", "Withdrawal"))

    def to_domain(self) -> CashEvent:
        return CashEvent(
            date=self.date,
            amount=self.amount,
            kind=self.type,  # type: ignore[arg-type]
            owner_id=self.user,
            event_id=self.id,
            description=self.description,
        )


class TradeEventRecord(_Record):
    date: dt.date
    name: str = ""
    profit_loss: Decimal = Field(default=Decimal("0"), alias="profitLoss")
    type: str

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, v: Any) -> dt.date:
        return parse_calendar_date(v)

    @field_validator("profit_loss", mode="before")
    @classmethod
    def parse_pnl(cls, v: Any) -> Decimal:
        return coerce_number(v)

    @field_validator("type", mode="before")
    @classmethod
    def parse_type(cls, v: Any) -> str:
        return _normalize_choice(v, ("Buy", "Sell"))

    def to_domain(self) -> TradeEvent:
        return TradeEvent(
            date=self.date,
            name=self.name,
            pnl=self.profit_loss,
            op_kind=self.type,  # type: ignore[arg-type]
            event_id=self.id,
        )


class ProfileRecord(_Record):
    name: Optional[str] = None
    profit_share: Decimal = Field(default=Decimal("0"), alias="profitShare")

    @field_validator("profit_share", mode="before")
    @classmethod
    def parse_share(cls, v: Any) -> Decimal:
        return coerce_number(v)

    def to_domain(self) -> StakeholderProfile:
        return StakeholderProfile.from_percent(self.id, self.profit_share, self.name)


def _rows(payload: Mapping[str, Any], *keys: str) -> List[Any]:
    for k in keys:
        v = payload.get(k)
        if isinstance(v, list):
            return v
    return []


def _convert_rows(
    rows: Iterable[Any],
    model: type[R],
    to_domain: Callable[[R], D],
    *,
    kind: str,
) -> List[D]:
    out: List[D] = []
    skipped = 0
    for i, raw in enumerate(rows):
        if not isinstance(raw, Mapping):
            skipped += 1
            continue
        try:
            out.append(to_domain(model.model_validate(raw)))
        except (ValidationError, ValueError, TypeError) as e:
            skipped += 1
            logger.warning("ledger.row_skipped kind=%s index=%d id=%r error=%s", kind, i, raw.get("id"), e)
    if skipped:
        log_event(logger, "ledger.rows_skipped", severity="WARNING", kind=kind, skipped=skipped)
    return out


def _dedupe_profiles(profiles: Iterable[StakeholderProfile]) -> List[StakeholderProfile]:
    # Keyed by id: a repeated row replaces the earlier one in place.
    by_id: Dict[str, StakeholderProfile] = {}
    for p in profiles:
        if p.stakeholder_id in by_id:
            log_event(
                logger,
                "ledger.profile_duplicate",
                severity="WARNING",
                message=f"duplicate profile row for {p.stakeholder_id!r}; keeping the last one",
                stakeholder_id=p.stakeholder_id,
            )
        by_id[p.stakeholder_id] = p
    return list(by_id.values())


def parse_ledger_payload(payload: Mapping[str, Any]) -> LedgerSnapshot:
    """
    Convert a raw store payload into a LedgerSnapshot.

    Accepts both camelCase and sheet-cased collection keys. Profiles are unique by
    id; when the sheet repeats an id the last row wins.
    """
    cash = _convert_rows(
        _rows(payload, "transactions", "Transactions"),
        CashEventRecord,
        CashEventRecord.to_domain,
        kind="cash",
    )
    trades = _convert_rows(
        _rows(payload, "trades", "Trades"),
        TradeEventRecord,
        TradeEventRecord.to_domain,
        kind="trade",
    )
    profiles = _convert_rows(
        _rows(payload, "userProfiles", "UserProfiles"),
        ProfileRecord,
        ProfileRecord.to_domain,
        kind="profile",
    )
    return LedgerSnapshot(tuple(cash), tuple(trades), tuple(_dedupe_profiles(profiles)))


__all__ = [
    "CashEventRecord",
    "ProfileRecord",
    "TradeEventRecord",
    "coerce_number",
    "parse_ledger_payload",
]
