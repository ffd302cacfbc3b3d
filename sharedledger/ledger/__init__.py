"""
Capital attribution + daily P&L reconstruction (pure, in-memory).

This package is intentionally split into:
- models: immutable cash / trade / profile shapes used by the calculators
- capital: start-of-day capital timeline and resolver
- daily_pnl: per-day trade aggregation against start-of-day capital
- attribution: all-time per-stakeholder capital
- filters: report-side date / name / owner filtering
"""
