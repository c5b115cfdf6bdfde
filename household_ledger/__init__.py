"""
Household Ledger - Source Package

A personal finance ledger for one person: income, expenses, budgets,
savings, loans, bank accounts, transfers and a cash pool, with the
monthly and yearly figures derived from them.

DESIGN PRINCIPLES:
1. The ledger store is the only writer
2. Derived fields are recomputed, never typed in
3. Side effects land together or not at all
4. Every mutation is auditable
5. Storage layer is swappable
"""

from household_ledger.store import LedgerStore

__version__ = "1.0.0"
__author__ = "Household Ledger Team"

__all__ = ["LedgerStore"]
