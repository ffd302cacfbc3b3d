from __future__ import annotations

from decimal import Decimal
from typing import Any

import pytest
import requests

from sharedledger.analytics.report import build_ledger_report
from sharedledger.ledger.models import CashEvent, StakeholderProfile, TradeEvent
from sharedledger.ledger.sample_dataset import SAMPLE_LEDGER_PAYLOAD
from sharedledger.store import retry
from sharedledger.store.base import LedgerSnapshot, LedgerStoreError, load_snapshot, merge_profiles
from sharedledger.store.memory import InMemoryLedgerStore
from sharedledger.store.retry import is_transient_http_error, with_http_retry
from sharedledger.store.sheets import SheetsLedgerStore

URL = "https://script.example.com/macros/s/abc/exec"


class _Resp:
    def __init__(self, status_code: int = 200, payload: Any = None, json_error: Exception | None = None) -> None:
        self.status_code = status_code
        self._payload = payload
        self._json_error = json_error

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}", response=self)

    def json(self) -> Any:
        if self._json_error is not None:
            raise self._json_error
        return self._payload


class _Session:
    def __init__(self, *responses: Any) -> None:
        self._responses = list(responses)
        self.calls: list[tuple[str, float]] = []

    def get(self, url: str, timeout: float) -> _Resp:
        self.calls.append((url, timeout))
        r = self._responses.pop(0)
        if isinstance(r, Exception):
            raise r
        return r


@pytest.fixture(autouse=True)
def _no_sleep(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(retry.time, "sleep", lambda _s: None)


def test_fetch_all_parses_payload() -> None:
    session = _Session(_Resp(payload=SAMPLE_LEDGER_PAYLOAD))
    store = SheetsLedgerStore(URL, timeout_s=5, session=session)  # type: ignore[arg-type]

    snap = store.fetch_all()

    assert session.calls == [(URL, 5.0)]
    assert len(snap.cash_events) == 3
    assert len(snap.trade_events) == 5
    assert [p.stakeholder_id for p in snap.profiles] == ["alice", "bob"]


def test_fetch_all_retries_transient_errors() -> None:
    session = _Session(
        requests.ConnectionError("reset"),
        _Resp(status_code=503),
        _Resp(payload={"trades": []}),
    )
    store = SheetsLedgerStore(URL, max_attempts=3, session=session)  # type: ignore[arg-type]

    assert store.fetch_all().is_empty
    assert len(session.calls) == 3


def test_fetch_all_does_not_retry_client_errors() -> None:
    session = _Session(_Resp(status_code=404), _Resp(payload={}))
    store = SheetsLedgerStore(URL, max_attempts=3, session=session)  # type: ignore[arg-type]

    with pytest.raises(LedgerStoreError, match="HTTP 404"):
        store.fetch_all()
    assert len(session.calls) == 1


def test_fetch_all_gives_up_after_max_attempts() -> None:
    session = _Session(requests.Timeout("slow"), requests.Timeout("slow"))
    store = SheetsLedgerStore(URL, max_attempts=2, session=session)  # type: ignore[arg-type]

    with pytest.raises(LedgerStoreError):
        store.fetch_all()
    assert len(session.calls) == 2


@pytest.mark.parametrize(
    "resp",
    [
        _Resp(json_error=ValueError("Expecting value")),
        _Resp(payload=["not", "a", "mapping"]),
    ],
)
def test_fetch_all_rejects_bad_payloads(resp: _Resp) -> None:
    store = SheetsLedgerStore(URL, session=_Session(resp))  # type: ignore[arg-type]
    with pytest.raises(LedgerStoreError):
        store.fetch_all()


def test_store_requires_https() -> None:
    with pytest.raises(LedgerStoreError):
        SheetsLedgerStore("http://script.example.com/exec")


def test_load_snapshot_absorbs_store_failures(caplog: pytest.LogCaptureFixture) -> None:
    store = SheetsLedgerStore(URL, max_attempts=1, session=_Session(_Resp(status_code=500)))  # type: ignore[arg-type]

    with caplog.at_level("ERROR"):
        snap = load_snapshot(store)

    assert snap == LedgerSnapshot.empty()
    assert any(getattr(r, "event_type", None) == "ledger.fetch_failed" for r in caplog.records)


def test_load_snapshot_uses_defaults_when_store_has_no_profiles() -> None:
    defaults = (StakeholderProfile("a", Decimal("0.5")), StakeholderProfile("b", Decimal("0.5")))
    store = InMemoryLedgerStore(cash_events=[CashEvent("2024-01-01", 10, "Deposit", "a")])

    snap = load_snapshot(store, default_profiles=defaults)
    assert snap.profiles == defaults
    assert len(snap.cash_events) == 1


def test_load_snapshot_overlays_fetched_profiles_on_defaults() -> None:
    defaults = (StakeholderProfile("yazan", Decimal("0.5")), StakeholderProfile("ghadeer", Decimal("0.5")))
    store = InMemoryLedgerStore(
        cash_events=[
            CashEvent("2024-01-01", 100, "Deposit", "yazan"),
            CashEvent("2024-01-01", 300, "Deposit", "ghadeer"),
        ],
        trade_events=[TradeEvent("2024-01-02", "SPY", 40, "Buy")],
        profiles=[StakeholderProfile("yazan", Decimal("0.5"), "Yazan")],
    )

    snap = load_snapshot(store, default_profiles=defaults)
    assert [p.stakeholder_id for p in snap.profiles] == ["yazan", "ghadeer"]
    assert snap.profiles[0].display_name == "Yazan"

    report = build_ledger_report(snap)
    assert report.attribution.by_stakeholder["yazan"].capital == Decimal("120")
    assert report.attribution.by_stakeholder["ghadeer"].capital == Decimal("320")
    assert report.total_account_balance == Decimal("440")


def test_merge_profiles_fetched_values_win() -> None:
    defaults = (StakeholderProfile("a", Decimal("0.5")), StakeholderProfile("b", Decimal("0.5")))
    fetched = (StakeholderProfile("b", Decimal("0.3")), StakeholderProfile("c", Decimal("0.2")))
    merged = merge_profiles(defaults, fetched)
    assert [(p.stakeholder_id, p.profit_share_ratio) for p in merged] == [
        ("a", Decimal("0.5")),
        ("b", Decimal("0.3")),
        ("c", Decimal("0.2")),
    ]
    assert merge_profiles((), fetched) == fetched


def test_with_http_retry_passes_through_non_transient_errors() -> None:
    calls = []

    def boom() -> None:
        calls.append(1)
        raise KeyError("x")

    with pytest.raises(KeyError):
        with_http_retry(boom, max_attempts=5, sleep=lambda _s: None)
    assert calls == [1]


def test_is_transient_http_error() -> None:
    assert is_transient_http_error(requests.ConnectionError())
    assert is_transient_http_error(requests.HTTPError(response=_Resp(status_code=429)))
    assert not is_transient_http_error(requests.HTTPError(response=_Resp(status_code=400)))
    assert not is_transient_http_error(ValueError())
