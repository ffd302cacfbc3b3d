"""
Ledger Store adapters.

The engine never talks to the store directly; callers fetch a complete snapshot
(`load_snapshot`) and hand plain domain records to the pure calculators.
"""
