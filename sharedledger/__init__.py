"""
Shared-capital trading ledger.

Pure reporting engine over a fetched snapshot of cash movements and shared
trade P&L, plus thin adapters for the spreadsheet-backed ledger store.
"""

__version__ = "0.1.0"
