from __future__ import annotations

import logging
from typing import Any, Mapping

import requests

from sharedledger.common.config import LedgerSettings
from sharedledger.common.logging import log_event

from .base import LedgerSnapshot, LedgerStore, LedgerStoreError
from .records import parse_ledger_payload
from .retry import with_http_retry

logger = logging.getLogger(__name__)


class SheetsLedgerStore(LedgerStore):
    """
    Read-only client for the spreadsheet web-app endpoint.

    One GET returns every collection:
      {"transactions": [...], "trades": [...], "userProfiles": [...]}
    (sheet-cased keys such as "Transactions" are accepted too).
    """

    def __init__(
        self,
        url: str,
        *,
        timeout_s: float = 30.0,
        max_attempts: int = 3,
        session: requests.Session | None = None,
    ) -> None:
        u = (url or "").strip()
        if not u.lower().startswith("https://"):
            raise LedgerStoreError(f"ledger store url must be https: {url!r}")
        self.url = u
        self.timeout_s = float(timeout_s)
        self.max_attempts = max(1, int(max_attempts))
        self._http = session or requests

    @classmethod
    def from_settings(cls, settings: LedgerSettings) -> "SheetsLedgerStore":
        return cls(
            settings.store_url,
            timeout_s=settings.store_timeout_s,
            max_attempts=settings.store_max_attempts,
        )

    def _get_payload(self) -> Mapping[str, Any]:
        r = self._http.get(self.url, timeout=self.timeout_s)
        r.raise_for_status()
        payload = r.json()
        if not isinstance(payload, Mapping):
            raise LedgerStoreError(f"unexpected ledger payload type: {type(payload).__name__}")
        return payload

    def fetch_all(self) -> LedgerSnapshot:
        try:
            payload = with_http_retry(self._get_payload, max_attempts=self.max_attempts)
        except requests.HTTPError as e:
            status = getattr(e.response, "status_code", None)
            raise LedgerStoreError(f"ledger store returned HTTP {status}") from e
        except requests.RequestException as e:
            raise LedgerStoreError(f"ledger store request failed: {type(e).__name__}") from e
        except ValueError as e:
            # requests' JSONDecodeError is a ValueError.
            raise LedgerStoreError("ledger store returned invalid JSON") from e

        snapshot = parse_ledger_payload(payload)
        log_event(
            logger,
            "ledger.fetched",
            severity="INFO",
            cash_events=len(snapshot.cash_events),
            trade_events=len(snapshot.trade_events),
            profiles=len(snapshot.profiles),
        )
        return snapshot


__all__ = ["SheetsLedgerStore"]
