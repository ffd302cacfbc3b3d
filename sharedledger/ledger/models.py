from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Literal, Optional

from sharedledger.time.calendar import parse_calendar_date


CashKind = Literal["Deposit", "Withdrawal"]
OpKind = Literal["Buy", "Sell"]

DEPOSIT: CashKind = "Deposit"
WITHDRAWAL: CashKind = "Withdrawal"

ZERO = Decimal("0")
ONE = Decimal("1")
HUNDRED = Decimal("100")


def to_decimal(v: Any) -> Decimal:
    """
    Convert a numeric-ish value to Decimal safely.

    IMPORTANT:
    - Never call Decimal(float) directly (binary float artifacts).
    - Use Decimal(str(x)) for int/float inputs.
    """
    if v is None:
        return ZERO
    if isinstance(v, bool):
        raise TypeError("bool is not a numeric ledger value")
    if isinstance(v, Decimal):
        return v
    if isinstance(v, (int, float)):
        return Decimal(str(v))
    if isinstance(v, str):
        s = v.strip()
        if not s:
            return ZERO
        try:
            return Decimal(s)
        except InvalidOperation as e:
            raise ValueError(f"invalid numeric string: {v!r}") from e
    return Decimal(str(v))


def _finite(v: Decimal, *, field: str) -> Decimal:
    if not v.is_finite():
        raise ValueError(f"{field} must be finite")
    return v


@dataclass(frozen=True, slots=True)
class CashEvent:
    """
    A deposit or withdrawal owned by exactly one stakeholder.

    `amount` is always non-negative; direction is expressed via `kind`.
    """

    date: date
    amount: Decimal
    kind: CashKind
    owner_id: str

    event_id: str = ""
    description: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "date", parse_calendar_date(self.date))
        amount = _finite(to_decimal(self.amount), field="amount")
        if amount < 0:
            raise ValueError("amount must be >= 0")
        object.__setattr__(self, "amount", amount)
        if self.kind not in (DEPOSIT, WITHDRAWAL):
            raise ValueError("kind must be 'Deposit' or 'Withdrawal'")
        owner = (self.owner_id or "").strip()
        if not owner:
            raise ValueError("owner_id is required")
        object.__setattr__(self, "owner_id", owner)
        object.__setattr__(self, "event_id", str(self.event_id or ""))

    @property
    def signed_amount(self) -> Decimal:
        return self.amount if self.kind == DEPOSIT else -self.amount


@dataclass(frozen=True, slots=True)
class TradeEvent:
    """
    A shared trade outcome. Not owned by a single stakeholder until divided by
    profit-share ratio.
    """

    date: date
    name: str
    pnl: Decimal
    op_kind: OpKind

    event_id: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "date", parse_calendar_date(self.date))
        object.__setattr__(self, "pnl", _finite(to_decimal(self.pnl), field="pnl"))
        object.__setattr__(self, "name", str(self.name or "").strip())
        if self.op_kind not in ("Buy", "Sell"):
            raise ValueError("op_kind must be 'Buy' or 'Sell'")
        object.__setattr__(self, "event_id", str(self.event_id or ""))


@dataclass(frozen=True, slots=True)
class StakeholderProfile:
    stakeholder_id: str
    profit_share_ratio: Decimal
    display_name: Optional[str] = None

    def __post_init__(self) -> None:
        sid = (self.stakeholder_id or "").strip()
        if not sid:
            raise ValueError("stakeholder_id is required")
        object.__setattr__(self, "stakeholder_id", sid)
        ratio = _finite(to_decimal(self.profit_share_ratio), field="profit_share_ratio")
        if ratio < ZERO or ratio > ONE:
            raise ValueError("profit_share_ratio must be within [0, 1]")
        object.__setattr__(self, "profit_share_ratio", ratio)

    @classmethod
    def from_percent(cls, stakeholder_id: str, percent: Any, display_name: Optional[str] = None) -> "StakeholderProfile":
        """Build a profile from a profit share given in percent (50 -> 0.5)."""
        return cls(stakeholder_id, to_decimal(percent) / HUNDRED, display_name)


@dataclass(frozen=True, slots=True)
class DailyBucket:
    """
    Trade P&L aggregated for one calendar day.

    - profit: sum of positive trade P&L
    - loss: sum of |negative trade P&L| (stored positive)
    - pnl_pct: net_pnl as a percentage of start-of-day capital (None when undefined)
    """

    date: date
    profit: Decimal
    loss: Decimal
    net_pnl: Decimal
    start_capital: Decimal
    pnl_pct: Optional[Decimal]


@dataclass(frozen=True, slots=True)
class StakeholderCapital:
    stakeholder_id: str
    deposits: Decimal
    withdrawals: Decimal
    capital: Decimal
