from __future__ import annotations

import importlib.util
import json
from decimal import Decimal
from pathlib import Path

import pytest

from sharedledger.ledger.sample_dataset import SAMPLE_LEDGER_PAYLOAD

_SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "ledger_report.py"


def _load_cli():
    spec = importlib.util.spec_from_file_location("ledger_report_cli", _SCRIPT)
    assert spec is not None and spec.loader is not None
    mod = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(mod)
    return mod


@pytest.fixture
def cli(monkeypatch: pytest.MonkeyPatch, restore_root_logging):
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    monkeypatch.delenv("LEDGER_STORE_URL", raising=False)
    monkeypatch.delenv("LEDGER_PROFIT_SHARES", raising=False)
    return _load_cli()


def test_sample_report(cli, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["--sample"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert Decimal(out["totals"]["total_account_balance"]) == Decimal("1410")
    assert [d["date"] for d in out["daily"]] == ["2024-01-01", "2024-01-02", "2024-01-05", "2024-01-11"]


def test_file_report_with_range_name_and_sort(cli, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    p = tmp_path / "ledger.json"
    p.write_text(json.dumps(SAMPLE_LEDGER_PAYLOAD), encoding="utf-8")

    assert cli.main(["--file", str(p), "--start", "2024-01-02", "--end", "2024-01-31", "--name", "aapl", "--desc"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert [d["date"] for d in out["daily"]] == ["2024-01-05", "2024-01-02"]
    assert [t["id"] for t in out["matching_trades"]] == ["t3", "t1"]
    assert Decimal(out["totals"]["filtered_pnl"]) == Decimal("275")


def test_file_without_profiles_uses_env_shares(cli, monkeypatch, tmp_path: Path, capsys) -> None:
    payload = {k: v for k, v in SAMPLE_LEDGER_PAYLOAD.items() if k != "userProfiles"}
    p = tmp_path / "ledger.json"
    p.write_text(json.dumps(payload), encoding="utf-8")
    monkeypatch.setenv("LEDGER_PROFIT_SHARES", "alice=50,bob=50")

    assert cli.main(["--file", str(p)]) == 0
    out = json.loads(capsys.readouterr().out)
    by_id = {s["stakeholder_id"]: Decimal(s["capital"]) for s in out["stakeholders"]}
    assert by_id == {"alice": Decimal("1055"), "bob": Decimal("355")}


def test_missing_source_exits(cli) -> None:
    with pytest.raises(SystemExit):
        cli.main([])


def test_file_with_partial_profiles_keeps_env_defaults(cli, monkeypatch, tmp_path: Path, capsys) -> None:
    payload = dict(SAMPLE_LEDGER_PAYLOAD, userProfiles=[{"id": "alice", "profitShare": 60}])
    p = tmp_path / "ledger.json"
    p.write_text(json.dumps(payload), encoding="utf-8")
    monkeypatch.setenv("LEDGER_PROFIT_SHARES", "alice=50,bob=40")

    assert cli.main(["--file", str(p)]) == 0
    out = json.loads(capsys.readouterr().out)
    by_id = {s["stakeholder_id"]: Decimal(s["capital"]) for s in out["stakeholders"]}
    assert by_id == {"alice": Decimal("1066"), "bob": Decimal("344")}


def test_transactions_log(cli, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["--sample", "--transactions", "--owner", "bob", "--kind", "withdrawal"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert [t["id"] for t in out["transactions"]] == ["c3"]
    assert Decimal(out["total_amount"]) == Decimal("-200")
    assert out["kind"] == "Withdrawal"
