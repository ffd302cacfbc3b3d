from __future__ import annotations

import logging

import pytest

from sharedledger.ledger.sample_dataset import SAMPLE_LEDGER_PAYLOAD
from sharedledger.store.base import LedgerSnapshot
from sharedledger.store.records import parse_ledger_payload


@pytest.fixture
def sample_snapshot() -> LedgerSnapshot:
    return parse_ledger_payload(SAMPLE_LEDGER_PAYLOAD)


@pytest.fixture
def restore_root_logging():
    """
    `init_structured_logging` replaces root handlers; put them back so later tests
    (and pytest's own capture handlers) are unaffected.
    """
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers = handlers
    root.setLevel(level)
    logging.captureWarnings(False)
