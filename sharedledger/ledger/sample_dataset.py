"""
Sample shared-account ledger payload + expected figures.

Rows use the store's wire shape (camelCase keys, sheet-style loose typing):
  transactions[] / trades[] / userProfiles[]

Capital basis:
- 2024-01-01: alice deposits 1000, bob deposits 500
- 2024-01-10: bob withdraws 200
"""

from __future__ import annotations

SAMPLE_LEDGER_PAYLOAD: dict = {
    "transactions": [
        {"id": "c1", "date": "2024-01-01", "amount": 1000, "type": "Deposit", "user": "alice"},
        {"id": "c2", "date": "2024-01-01", "amount": "500", "type": "Deposit", "user": "bob"},
        {
            "id": "c3",
            "date": "2024-01-10T09:30:00Z",
            "amount": "200",
            "type": "Withdrawal",
            "user": "bob",
            "description": "partial payout",
        },
    ],
    "trades": [
        # First cash date: no capital before it, so the same-day deposits (1500) apply.
        {"id": "t0", "date": "2024-01-01", "name": "SPY", "profitLoss": 15, "type": "Buy"},
        {"id": "t1", "date": "2024-01-02", "name": "AAPL", "profitLoss": "200", "type": "Buy"},
        {"id": "t2", "date": "2024-01-02", "name": "MSFT", "profitLoss": -50, "type": "Sell"},
        {"id": "t3", "date": "2024-01-05", "name": "AAPL", "profitLoss": 75, "type": "Sell"},
        # After bob's withdrawal the basis is 1300.
        {"id": "t4", "date": "2024-01-11", "name": "TSLA", "profitLoss": -130, "type": "Buy"},
    ],
    "userProfiles": [
        {"id": "alice", "name": "Alice", "profitShare": 60},
        {"id": "bob", "name": "Bob", "profitShare": 40},
    ],
}


EXPECTED_TOTALS: dict = {
    "total_deposits": "1500",
    "total_withdrawals": "200",
    "all_time_net_pnl": "110",
    "total_account_balance": "1410",
}

# alice: 1000 + 0.6 * 110; bob: 500 - 200 + 0.4 * 110
EXPECTED_STAKEHOLDER_CAPITAL: dict = {
    "alice": "1066",
    "bob": "344",
}

# date -> (net_pnl, start_capital, pnl_pct)
EXPECTED_DAILY: dict = {
    "2024-01-01": ("15", "1500", "1"),
    "2024-01-02": ("150", "1500", "10"),
    "2024-01-05": ("75", "1500", "5"),
    "2024-01-11": ("-130", "1300", "-10"),
}
