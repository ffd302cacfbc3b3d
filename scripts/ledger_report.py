from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from datetime import datetime

# Allow running as: `python3 scripts/ledger_report.py` from repo root.
_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _ROOT not in sys.path:
    sys.path.insert(0, _ROOT)

from sharedledger.analytics.report import build_ledger_report, build_transactions_report
from sharedledger.analytics.sorting import SortConfig, SortDirection
from sharedledger.common.config import LedgerSettings
from sharedledger.common.logging import init_structured_logging, log_event
from sharedledger.ledger.models import DEPOSIT, WITHDRAWAL
from sharedledger.ledger.sample_dataset import SAMPLE_LEDGER_PAYLOAD
from sharedledger.store.base import LedgerSnapshot, load_snapshot, merge_profiles
from sharedledger.store.records import parse_ledger_payload
from sharedledger.store.sheets import SheetsLedgerStore
from sharedledger.time.ranges import DateRange, quick_filter_range

logger = logging.getLogger("sharedledger.scripts.ledger_report")


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Shared-account ledger report (read-only).")
    src = p.add_mutually_exclusive_group()
    src.add_argument("--file", help="Read a store payload from a local JSON file.")
    src.add_argument("--store-url", help="Store endpoint (defaults to LEDGER_STORE_URL).")
    src.add_argument("--sample", action="store_true", help="Use the bundled sample dataset.")
    p.add_argument("--quick", help="Quick filter: Today, Yesterday, This Week, This Month, Last Month, All Time.")
    p.add_argument("--start", help="Range start (YYYY-MM-DD, inclusive).")
    p.add_argument("--end", help="Range end (YYYY-MM-DD, inclusive).")
    p.add_argument("--name", default="", help="Case-insensitive trade name filter.")
    p.add_argument("--transactions", action="store_true", help="Print the deposit / withdrawal log instead.")
    p.add_argument("--owner", help="Transactions log: only this stakeholder id.")
    p.add_argument("--kind", type=str.capitalize, choices=[DEPOSIT, WITHDRAWAL], help="Transactions log: only this kind.")
    p.add_argument("--sort", help="Table sort field (default: date).")
    p.add_argument("--desc", action="store_true", help="Sort the table descending.")
    return p.parse_args(argv)


def _load(args: argparse.Namespace, settings: LedgerSettings) -> LedgerSnapshot:
    if args.sample:
        snap = parse_ledger_payload(SAMPLE_LEDGER_PAYLOAD)
    elif args.file:
        with open(args.file, "r", encoding="utf-8") as f:
            snap = parse_ledger_payload(json.load(f))
    else:
        url = (args.store_url or settings.store_url).strip()
        if not url:
            raise SystemExit("No data source: pass --file, --sample, --store-url or set LEDGER_STORE_URL.")
        store = SheetsLedgerStore(url, timeout_s=settings.store_timeout_s, max_attempts=settings.store_max_attempts)
        return load_snapshot(store, default_profiles=settings.default_profiles)
    if settings.default_profiles:
        snap = snap.with_profiles(merge_profiles(settings.default_profiles, snap.profiles))
    return snap


def _date_range(args: argparse.Namespace) -> DateRange:
    if args.start or args.end:
        return DateRange(args.start or None, args.end or None)
    if args.quick:
        return quick_filter_range(args.quick, datetime.now())
    return DateRange.all_time()


def _sort_config(args: argparse.Namespace) -> SortConfig | None:
    # None keeps each table's own default order.
    if args.sort is None and not args.desc:
        return None
    return SortConfig(args.sort or "date", SortDirection.DESCENDING if args.desc else SortDirection.ASCENDING)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    settings = LedgerSettings.from_env()
    init_structured_logging(service=settings.service_name, env=settings.env, level=settings.log_level)

    snapshot = _load(args, settings)
    if args.transactions:
        out = build_transactions_report(
            snapshot,
            date_range=_date_range(args),
            owner_id=args.owner or None,
            kind=args.kind,
            sort=_sort_config(args),
        ).to_dict()
    else:
        out = build_ledger_report(
            snapshot,
            date_range=_date_range(args),
            name_query=args.name,
            sort=_sort_config(args),
        ).to_dict()
    log_event(logger, "ledger.report_cli_done", severity="DEBUG", transactions=args.transactions)
    print(json.dumps(out, indent=2, sort_keys=True))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
