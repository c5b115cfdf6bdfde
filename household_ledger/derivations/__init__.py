"""
Derivation Library

Pure, side-effect-free functions over immutable ledger snapshots.
The ledger store writes; everything here only reads.
"""

from household_ledger.derivations.calculations import (
    AUTO_SAVINGS_RATE,
    MONTH_ABBREVIATIONS,
    UNKNOWN_ACCOUNT_LABEL,
    account_label,
    active_loan_count,
    actual_expense,
    all_expense_categories,
    all_income_sources,
    as_decimal,
    auto_savings,
    filtered_expenses,
    find_account,
    loan_outstanding,
    month_key,
    month_keys_for_year,
    monthly_budgets,
    monthly_expenses,
    monthly_incomes,
    parse_month_key,
    person_loan_balance,
    person_loan_balances,
    savings_balance,
    savings_totals,
    savings_with_running_balance,
    total_bank_balance,
    total_loan_payable,
    total_loan_receivable,
    transfer_endpoint_label,
    usable_income,
)
from household_ledger.derivations.reports import (
    UNASSIGNED_PERSON,
    annual_report,
    available_months,
    available_years,
    budget_status,
    budgets_with_actual,
    expenses_by_category,
    expenses_by_person,
    expenses_by_type,
    income_by_source,
    month_summary,
    net_worth,
    unique_persons,
    yearly_summary,
)

__all__ = [
    # Calculations
    "AUTO_SAVINGS_RATE",
    "MONTH_ABBREVIATIONS",
    "UNKNOWN_ACCOUNT_LABEL",
    "account_label",
    "active_loan_count",
    "actual_expense",
    "all_expense_categories",
    "all_income_sources",
    "as_decimal",
    "auto_savings",
    "filtered_expenses",
    "find_account",
    "loan_outstanding",
    "month_key",
    "month_keys_for_year",
    "monthly_budgets",
    "monthly_expenses",
    "monthly_incomes",
    "parse_month_key",
    "person_loan_balance",
    "person_loan_balances",
    "savings_balance",
    "savings_totals",
    "savings_with_running_balance",
    "total_bank_balance",
    "total_loan_payable",
    "total_loan_receivable",
    "transfer_endpoint_label",
    "usable_income",
    # Reports
    "UNASSIGNED_PERSON",
    "annual_report",
    "available_months",
    "available_years",
    "budget_status",
    "budgets_with_actual",
    "expenses_by_category",
    "expenses_by_person",
    "expenses_by_type",
    "income_by_source",
    "month_summary",
    "net_worth",
    "unique_persons",
    "yearly_summary",
]
