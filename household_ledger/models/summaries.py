"""
Derived Result Models

Shapes returned by the derivation library. None of these are persisted;
they are rebuilt from a snapshot on every query.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional

from household_ledger.models.ledger import Budget, LedgerModel, SavingsEntry


class BudgetStatus(str, Enum):
    """Budget variance outcome. Exactly equal amounts are On Budget."""
    UNDER_BUDGET = "Under Budget"
    OVER_BUDGET = "Over Budget"
    ON_BUDGET = "On Budget"


class BudgetWithActual(Budget):
    """A budget row joined with the month's spending for its expense type."""

    actual_expense: Decimal
    difference: Decimal
    status: BudgetStatus


class SavingsLedgerRow(LedgerModel):
    """One savings entry with the cumulative balance after it."""

    entry: SavingsEntry
    balance: Decimal


class SavingsTotals(LedgerModel):
    total_in: Decimal
    total_out: Decimal
    balance: Decimal
    auto_balance: Decimal
    manual_balance: Decimal


class BreakdownRow(LedgerModel):
    """A group label and the amount summed for it."""

    label: str
    amount: Decimal


class YearlyRow(LedgerModel):
    """Usable income and expenses for one calendar month ("Jan".."Dec")."""

    month: str
    income: Decimal
    expense: Decimal


class MonthlyFlow(LedgerModel):
    """Gross income and expenses for one month key."""

    month: str
    income: Decimal
    expense: Decimal


class MonthSummary(LedgerModel):
    """
    Dashboard figures for one month.

    Income, budget and expense totals are for the month only. Loan,
    savings, bank and cash figures are ledger-wide balances.
    """

    month: str
    total_gross_income: Decimal
    total_auto_savings: Decimal
    total_usable_income: Decimal
    total_budget: Decimal
    total_actual_expense: Decimal
    savings_or_deficit: Decimal
    total_loan_receivable: Decimal
    total_loan_payable: Decimal
    savings_balance: Decimal
    total_bank_balance: Decimal
    total_cash_balance: Decimal
    net_worth: Decimal


class AnnualReport(LedgerModel):
    """Year-level report, optionally narrowed to one responsible person."""

    year: int
    person: Optional[str] = None

    total_gross_income: Decimal
    total_auto_savings: Decimal
    total_usable_income: Decimal
    total_expenses: Decimal

    income_by_source: list[BreakdownRow]
    expenses_by_category: list[BreakdownRow]
    expenses_by_type: list[BreakdownRow]
    expenses_by_person: list[BreakdownRow]
    monthly: list[MonthlyFlow]

    savings: SavingsTotals
    loan_receivable: Decimal
    loan_payable: Decimal
    active_loans: int
    total_bank_balance: Decimal
    cash_balance: Decimal
    net_worth: Decimal

    cash_inflow: Decimal
    cash_outflow: Decimal
    net_cash_flow: Decimal
