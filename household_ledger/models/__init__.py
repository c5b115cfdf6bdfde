"""
Data Models Package

This package contains all Pydantic models used by the Household Ledger.
Every record the store holds and every derived result conforms to these schemas.
"""

from household_ledger.models.ledger import (
    DEFAULT_EXPENSE_CATEGORIES,
    DEFAULT_INCOME_SOURCES,
    AccountType,
    BankAccount,
    Budget,
    CustomSettings,
    Expense,
    ExpenseType,
    Income,
    IncomeType,
    LedgerModel,
    LedgerSnapshot,
    Loan,
    LoanDirection,
    LoanStatus,
    PaymentMethod,
    SavingsAccount,
    SavingsEntry,
    SavingsType,
    Transfer,
    TransferEndpoint,
    WalletType,
    generate_id,
)
from household_ledger.models.summaries import (
    AnnualReport,
    BreakdownRow,
    BudgetStatus,
    BudgetWithActual,
    MonthlyFlow,
    MonthSummary,
    SavingsLedgerRow,
    SavingsTotals,
    YearlyRow,
)
from household_ledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "DEFAULT_EXPENSE_CATEGORIES",
    "DEFAULT_INCOME_SOURCES",
    "AccountType",
    "BankAccount",
    "Budget",
    "CustomSettings",
    "Expense",
    "ExpenseType",
    "Income",
    "IncomeType",
    "LedgerModel",
    "LedgerSnapshot",
    "Loan",
    "LoanDirection",
    "LoanStatus",
    "PaymentMethod",
    "SavingsAccount",
    "SavingsEntry",
    "SavingsType",
    "Transfer",
    "TransferEndpoint",
    "WalletType",
    "generate_id",
    # Derived results
    "AnnualReport",
    "BreakdownRow",
    "BudgetStatus",
    "BudgetWithActual",
    "MonthlyFlow",
    "MonthSummary",
    "SavingsLedgerRow",
    "SavingsTotals",
    "YearlyRow",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
