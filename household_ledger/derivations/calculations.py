"""
Ledger Calculations

Pure functions over ledger records: month keys, the auto-savings split,
month filters, savings, bank and loan balances.

GUARANTEES:
- No function mutates its inputs or keeps state between calls
- month_key is the only place a month key is ever formatted
- Amounts are Decimal end to end; the only rounding is in auto_savings
"""

import datetime as dt
from decimal import ROUND_FLOOR, Decimal
from typing import Iterable, Optional, Sequence, Union

from household_ledger.models.ledger import (
    DEFAULT_EXPENSE_CATEGORIES,
    DEFAULT_INCOME_SOURCES,
    BankAccount,
    Budget,
    CustomSettings,
    Expense,
    ExpenseType,
    Income,
    Loan,
    LoanDirection,
    LoanStatus,
    SavingsEntry,
    SavingsType,
    Transfer,
    TransferEndpoint,
)
from household_ledger.models.summaries import SavingsLedgerRow, SavingsTotals


ZERO = Decimal("0")
AUTO_SAVINGS_RATE = Decimal("0.20")
UNKNOWN_ACCOUNT_LABEL = "Unknown account"

MONTH_ABBREVIATIONS: tuple[str, ...] = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

Amount = Union[Decimal, int, float, str]


def as_decimal(value: Amount) -> Decimal:
    """Convert a caller-supplied amount to Decimal without float noise."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def _total(values: Iterable[Decimal]) -> Decimal:
    return sum(values, ZERO)


# =============================================================================
# MONTH KEYS
# =============================================================================

def month_key(value: Union[dt.date, str]) -> str:
    """
    Format a date as its month key, e.g. ``Jan-2025``.

    Accepts a date, a datetime or an ISO date/datetime string. Month names
    come from a fixed English table, never from the process locale.
    """
    if isinstance(value, str):
        value = dt.date.fromisoformat(value[:10])
    return f"{MONTH_ABBREVIATIONS[value.month - 1]}-{value.year:04d}"


def parse_month_key(key: str) -> tuple[int, int]:
    """Split a month key into ``(year, month)``. Raises ValueError if malformed."""
    name, _, year = key.strip().partition("-")
    if name not in MONTH_ABBREVIATIONS or not year.isdigit():
        raise ValueError(f"Not a month key: {key!r}")
    return int(year), MONTH_ABBREVIATIONS.index(name) + 1


def month_keys_for_year(year: int) -> list[str]:
    """The twelve month keys of a calendar year, January first."""
    return [month_key(dt.date(year, month, 1)) for month in range(1, 13)]


# =============================================================================
# INCOME SPLIT
# =============================================================================

def auto_savings(gross_income: Amount) -> Decimal:
    """
    20% of gross income, rounded to whole units.

    Halves round towards positive infinity. The rounding happens exactly
    once, on the product, so usable_income(g, auto_savings(g)) + auto_savings(g)
    always gives back g.
    """
    raw = as_decimal(gross_income) * AUTO_SAVINGS_RATE
    return (raw + Decimal("0.5")).to_integral_value(rounding=ROUND_FLOOR)


def usable_income(gross_income: Amount, saved: Amount) -> Decimal:
    """Gross income left for spending after auto savings."""
    return as_decimal(gross_income) - as_decimal(saved)


# =============================================================================
# MONTH FILTERS
# =============================================================================

def monthly_incomes(incomes: Sequence[Income], month: str) -> list[Income]:
    return [income for income in incomes if income.month == month]


def monthly_expenses(expenses: Sequence[Expense], month: str) -> list[Expense]:
    return [expense for expense in expenses if expense.month == month]


def monthly_budgets(budgets: Sequence[Budget], month: str) -> list[Budget]:
    return [budget for budget in budgets if budget.month == month]


def filtered_expenses(
    expenses: Sequence[Expense],
    month: str,
    expense_type: Optional[ExpenseType] = None,
    responsibility: Optional[str] = None,
) -> list[Expense]:
    """Expenses of a month, optionally narrowed to one type and/or person."""
    return [
        expense for expense in expenses
        if expense.month == month
        and (expense_type is None or expense.expense_type == expense_type)
        and (responsibility is None or expense.responsibility == responsibility)
    ]


def actual_expense(
    expenses: Sequence[Expense],
    month: str,
    expense_type: ExpenseType,
) -> Decimal:
    """Total spent in a month on one expense type."""
    return _total(
        expense.amount for expense in expenses
        if expense.month == month and expense.expense_type == expense_type
    )


# =============================================================================
# SAVINGS
# =============================================================================

def savings_balance(entries: Sequence[SavingsEntry]) -> Decimal:
    """Sum of in minus out over every entry, in any order."""
    return _total(entry.in_amount - entry.out_amount for entry in entries)


def savings_with_running_balance(
    entries: Sequence[SavingsEntry],
) -> list[SavingsLedgerRow]:
    """
    Savings entries oldest first, each with the balance after it.

    Entries on the same date keep their insertion order.
    """
    rows = []
    running = ZERO
    for entry in sorted(entries, key=lambda e: e.date):
        running += entry.in_amount - entry.out_amount
        rows.append(SavingsLedgerRow(entry=entry, balance=running))
    return rows


def savings_totals(entries: Sequence[SavingsEntry]) -> SavingsTotals:
    auto = [entry for entry in entries if entry.savings_type == SavingsType.AUTO]
    manual = [entry for entry in entries if entry.savings_type == SavingsType.MANUAL]
    return SavingsTotals(
        total_in=_total(entry.in_amount for entry in entries),
        total_out=_total(entry.out_amount for entry in entries),
        balance=savings_balance(entries),
        auto_balance=savings_balance(auto),
        manual_balance=savings_balance(manual),
    )


# =============================================================================
# BANK ACCOUNTS
# =============================================================================

def total_bank_balance(accounts: Sequence[BankAccount]) -> Decimal:
    return _total(account.current_balance for account in accounts)


def find_account(
    accounts: Sequence[BankAccount],
    account_id: Optional[str],
) -> Optional[BankAccount]:
    """Look an account up by id. Dangling or empty ids give None."""
    if not account_id:
        return None
    return next((account for account in accounts if account.id == account_id), None)


def account_label(accounts: Sequence[BankAccount], account_id: Optional[str]) -> str:
    """Display name for an account id, tolerating deleted accounts."""
    account = find_account(accounts, account_id)
    if account is None:
        return UNKNOWN_ACCOUNT_LABEL
    return account.bank_name


def transfer_endpoint_label(
    accounts: Sequence[BankAccount],
    transfer: Transfer,
    side: str,
) -> str:
    """Label for the ``"from"`` or ``"to"`` side of a transfer."""
    if side == "from":
        kind, account_id = transfer.from_type, transfer.from_bank_id
    elif side == "to":
        kind, account_id = transfer.to_type, transfer.to_bank_id
    else:
        raise ValueError(f"Unknown transfer side: {side}")
    if kind == TransferEndpoint.CASH:
        return "Cash"
    return account_label(accounts, account_id)


# =============================================================================
# LOANS
# =============================================================================

def loan_outstanding(loan: Loan) -> Decimal:
    """
    Principal still to be settled on one loan.

    Given loans shrink as money comes back in; Taken loans as it is paid out.
    """
    if loan.direction == LoanDirection.GIVEN:
        return loan.amount - loan.in_amount
    return loan.amount - loan.out_amount


def total_loan_receivable(loans: Sequence[Loan]) -> Decimal:
    """
    Outstanding principal on Given loans that are not Closed.

    Closed loans are skipped even with a nonzero residual; the status flag
    wins over the arithmetic.
    """
    return _total(
        loan.amount - loan.in_amount for loan in loans
        if loan.direction == LoanDirection.GIVEN and loan.status != LoanStatus.CLOSED
    )


def total_loan_payable(loans: Sequence[Loan]) -> Decimal:
    """Outstanding principal on Taken loans that are not Closed."""
    return _total(
        loan.amount - loan.out_amount for loan in loans
        if loan.direction == LoanDirection.TAKEN and loan.status != LoanStatus.CLOSED
    )


def _net_position(loan: Loan) -> Decimal:
    # Positive means the person owes the ledger owner
    flow = loan.out_amount - loan.in_amount
    return flow if loan.direction == LoanDirection.GIVEN else -flow


def person_loan_balance(loans: Sequence[Loan], person: str) -> Decimal:
    """
    Net position with one person across all their loans.

    Positive: the person owes the ledger owner. Negative: the owner owes them.
    """
    return _total(_net_position(loan) for loan in loans if loan.person_name == person)


def person_loan_balances(loans: Sequence[Loan]) -> dict[str, Decimal]:
    """person_loan_balance for every person, in the order they first appear."""
    balances: dict[str, Decimal] = {}
    for loan in loans:
        balances[loan.person_name] = balances.get(loan.person_name, ZERO) + _net_position(loan)
    return balances


def active_loan_count(loans: Sequence[Loan]) -> int:
    return sum(1 for loan in loans if loan.status != LoanStatus.CLOSED)


# =============================================================================
# CATEGORIES
# =============================================================================

def all_expense_categories(settings: CustomSettings) -> list[str]:
    """Default expense categories followed by the user's own."""
    return list(DEFAULT_EXPENSE_CATEGORIES) + list(settings.expense_categories)


def all_income_sources(settings: CustomSettings) -> list[str]:
    """Default income sources followed by the user's own."""
    return list(DEFAULT_INCOME_SOURCES) + list(settings.income_sources)
