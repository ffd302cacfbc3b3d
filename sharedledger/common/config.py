from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Tuple

from sharedledger.ledger.models import StakeholderProfile

DEFAULT_STORE_TIMEOUT_S = 30.0
DEFAULT_STORE_MAX_ATTEMPTS = 3


def _parse_float_env(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return float(default)
    try:
        return float(raw)
    except ValueError:
        return float(default)


def _parse_int_env(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return int(default)
    try:
        return int(raw)
    except ValueError:
        return int(default)


def parse_profit_shares(raw: str) -> Tuple[StakeholderProfile, ...]:
    """
    Parse 'alice=60,bob=40' (percent) into stakeholder profiles.

    Blank input yields no profiles. Malformed entries raise ValueError.
    """
    out: list[StakeholderProfile] = []
    for chunk in (raw or "").split(","):
        item = chunk.strip()
        if not item:
            continue
        sid, sep, pct = item.partition("=")
        if not sep or not sid.strip() or not pct.strip():
            raise ValueError(f"invalid profit share entry: {item!r} (expected id=percent)")
        out.append(StakeholderProfile.from_percent(sid.strip(), pct.strip()))
    return tuple(out)


@dataclass(frozen=True, slots=True)
class LedgerSettings:
    """
    Runtime settings, read from the environment at call time (never at import time).
    """

    store_url: str = ""
    store_timeout_s: float = DEFAULT_STORE_TIMEOUT_S
    store_max_attempts: int = DEFAULT_STORE_MAX_ATTEMPTS
    default_profiles: Tuple[StakeholderProfile, ...] = field(default_factory=tuple)
    service_name: str = "shared-ledger"
    env: str = "local"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "LedgerSettings":
        return cls(
            store_url=(os.getenv("LEDGER_STORE_URL") or "").strip(),
            store_timeout_s=max(0.1, _parse_float_env("LEDGER_STORE_TIMEOUT_S", DEFAULT_STORE_TIMEOUT_S)),
            store_max_attempts=max(1, _parse_int_env("LEDGER_STORE_MAX_ATTEMPTS", DEFAULT_STORE_MAX_ATTEMPTS)),
            default_profiles=parse_profit_shares(os.getenv("LEDGER_PROFIT_SHARES") or ""),
            service_name=(os.getenv("SERVICE_NAME") or "shared-ledger").strip(),
            env=(os.getenv("ENV") or "local").strip(),
            log_level=(os.getenv("LOG_LEVEL") or "INFO").strip().upper(),
        )


__all__ = ["LedgerSettings", "parse_profit_shares"]
