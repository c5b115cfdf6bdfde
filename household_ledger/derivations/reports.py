"""
Ledger Reports

Summary builders over a ledger snapshot: budget variance, the month
dashboard, the twelve-month chart series, group-and-sum breakdowns and
the annual report.

DESIGN DECISION: net_worth() is the only net worth formula. Every summary
that shows a net worth figure calls it rather than adding balances itself.
"""

import datetime as dt
from decimal import Decimal
from typing import Callable, Iterable, Optional, Sequence, TypeVar

from household_ledger.derivations.calculations import (
    MONTH_ABBREVIATIONS,
    ZERO,
    active_loan_count,
    actual_expense,
    month_key,
    monthly_budgets,
    monthly_expenses,
    monthly_incomes,
    parse_month_key,
    savings_balance,
    savings_totals,
    total_bank_balance,
    total_loan_payable,
    total_loan_receivable,
)
from household_ledger.models.ledger import Budget, Expense, Income, LedgerSnapshot
from household_ledger.models.summaries import (
    AnnualReport,
    BreakdownRow,
    BudgetStatus,
    BudgetWithActual,
    MonthlyFlow,
    MonthSummary,
    YearlyRow,
)


UNASSIGNED_PERSON = "Unassigned"

Entry = TypeVar("Entry", Income, Expense)


def budget_status(difference: Decimal) -> BudgetStatus:
    if difference > 0:
        return BudgetStatus.UNDER_BUDGET
    if difference < 0:
        return BudgetStatus.OVER_BUDGET
    return BudgetStatus.ON_BUDGET


def budgets_with_actual(
    budgets: Sequence[Budget],
    expenses: Sequence[Expense],
    month: str,
) -> list[BudgetWithActual]:
    """
    Join each budget row of a month with what was actually spent.

    Duplicate budget rows for the same expense type each get the full
    actual amount; nothing is merged here.
    """
    rows = []
    for budget in monthly_budgets(budgets, month):
        spent = actual_expense(expenses, month, budget.expense_type)
        difference = budget.budget_amount - spent
        rows.append(BudgetWithActual(
            **budget.model_dump(),
            actual_expense=spent,
            difference=difference,
            status=budget_status(difference),
        ))
    return rows


def net_worth(snapshot: LedgerSnapshot) -> Decimal:
    """Savings + bank + cash + loans receivable - loans payable."""
    return (
        savings_balance(snapshot.savings)
        + total_bank_balance(snapshot.bank_accounts)
        + snapshot.cash_balance
        + total_loan_receivable(snapshot.loans)
        - total_loan_payable(snapshot.loans)
    )


def month_summary(snapshot: LedgerSnapshot, month: str) -> MonthSummary:
    """Dashboard figures for one month key."""
    incomes = monthly_incomes(snapshot.incomes, month)
    expenses = monthly_expenses(snapshot.expenses, month)
    budgets = monthly_budgets(snapshot.budgets, month)

    total_usable = sum((income.usable_income for income in incomes), ZERO)
    total_expense = sum((expense.amount for expense in expenses), ZERO)

    return MonthSummary(
        month=month,
        total_gross_income=sum((income.gross_income for income in incomes), ZERO),
        total_auto_savings=sum((income.auto_savings for income in incomes), ZERO),
        total_usable_income=total_usable,
        total_budget=sum((budget.budget_amount for budget in budgets), ZERO),
        total_actual_expense=total_expense,
        savings_or_deficit=total_usable - total_expense,
        total_loan_receivable=total_loan_receivable(snapshot.loans),
        total_loan_payable=total_loan_payable(snapshot.loans),
        savings_balance=savings_balance(snapshot.savings),
        total_bank_balance=total_bank_balance(snapshot.bank_accounts),
        total_cash_balance=snapshot.cash_balance,
        net_worth=net_worth(snapshot),
    )


def yearly_summary(
    incomes: Sequence[Income],
    expenses: Sequence[Expense],
    year: int,
) -> list[YearlyRow]:
    """
    Usable income and expenses per calendar month.

    Always twelve rows, January first, zero-filled for empty months so
    chart axes stay stable.
    """
    rows = []
    for index, name in enumerate(MONTH_ABBREVIATIONS, start=1):
        key = month_key(dt.date(year, index, 1))
        rows.append(YearlyRow(
            month=name,
            income=sum((i.usable_income for i in monthly_incomes(incomes, key)), ZERO),
            expense=sum((e.amount for e in monthly_expenses(expenses, key)), ZERO),
        ))
    return rows


# =============================================================================
# BREAKDOWNS
# =============================================================================

def _in_period(entry: Entry, month: Optional[str], year: Optional[int]) -> bool:
    if month is not None and entry.month != month:
        return False
    if year is not None and entry.date.year != year:
        return False
    return True


def _expenses_for(
    expenses: Sequence[Expense],
    month: Optional[str],
    year: Optional[int],
    person: Optional[str],
) -> list[Expense]:
    return [
        expense for expense in expenses
        if _in_period(expense, month, year)
        and (person is None or expense.responsibility == person)
    ]


def _group_and_sum(
    entries: Iterable[Entry],
    label: Callable[[Entry], str],
    amount: Callable[[Entry], Decimal],
) -> list[BreakdownRow]:
    groups: dict[str, Decimal] = {}
    for entry in entries:
        key = label(entry)
        groups[key] = groups.get(key, ZERO) + amount(entry)
    rows = [BreakdownRow(label=key, amount=value) for key, value in groups.items()]
    # sorted() is stable with reverse=True, so equal amounts keep encounter order
    return sorted(rows, key=lambda row: row.amount, reverse=True)


def expenses_by_category(
    expenses: Sequence[Expense],
    month: Optional[str] = None,
    year: Optional[int] = None,
    person: Optional[str] = None,
) -> list[BreakdownRow]:
    return _group_and_sum(
        _expenses_for(expenses, month, year, person),
        lambda e: e.category,
        lambda e: e.amount,
    )


def expenses_by_type(
    expenses: Sequence[Expense],
    month: Optional[str] = None,
    year: Optional[int] = None,
    person: Optional[str] = None,
) -> list[BreakdownRow]:
    return _group_and_sum(
        _expenses_for(expenses, month, year, person),
        lambda e: e.expense_type.value,
        lambda e: e.amount,
    )


def expenses_by_person(
    expenses: Sequence[Expense],
    month: Optional[str] = None,
    year: Optional[int] = None,
) -> list[BreakdownRow]:
    """Spending per responsible person; unattributed rows go under Unassigned."""
    return _group_and_sum(
        _expenses_for(expenses, month, year, None),
        lambda e: e.responsibility or UNASSIGNED_PERSON,
        lambda e: e.amount,
    )


def income_by_source(
    incomes: Sequence[Income],
    month: Optional[str] = None,
    year: Optional[int] = None,
) -> list[BreakdownRow]:
    """Gross income per source."""
    return _group_and_sum(
        (income for income in incomes if _in_period(income, month, year)),
        lambda i: i.source,
        lambda i: i.gross_income,
    )


# =============================================================================
# PICKERS
# =============================================================================

def unique_persons(expenses: Sequence[Expense]) -> list[str]:
    """Every responsibility name used on an expense, alphabetically."""
    return sorted({expense.responsibility for expense in expenses if expense.responsibility})


def available_months(
    incomes: Sequence[Income],
    expenses: Sequence[Expense],
) -> list[str]:
    """Month keys that have an income or expense, newest first."""
    months = {income.month for income in incomes} | {expense.month for expense in expenses}
    return sorted(months, key=parse_month_key, reverse=True)


def available_years(
    incomes: Sequence[Income],
    expenses: Sequence[Expense],
    today: Optional[dt.date] = None,
) -> list[int]:
    """Years that have data, newest first; the current year if there is none."""
    years = {income.date.year for income in incomes} | {expense.date.year for expense in expenses}
    if not years:
        years = {(today or dt.date.today()).year}
    return sorted(years, reverse=True)


# =============================================================================
# ANNUAL REPORT
# =============================================================================

def _monthly_flows(incomes: Sequence[Income], expenses: Sequence[Expense]) -> list[MonthlyFlow]:
    flows: dict[str, list[Decimal]] = {}
    for income in incomes:
        flows.setdefault(income.month, [ZERO, ZERO])[0] += income.gross_income
    for expense in expenses:
        flows.setdefault(expense.month, [ZERO, ZERO])[1] += expense.amount
    return [
        MonthlyFlow(month=month, income=income, expense=expense)
        for month, (income, expense) in sorted(flows.items(), key=lambda item: parse_month_key(item[0]))
    ]


def annual_report(
    snapshot: LedgerSnapshot,
    year: int,
    person: Optional[str] = None,
) -> AnnualReport:
    """
    Year report: totals, breakdowns, month-by-month flow and balances.

    When person is given, only expenses attributed to that person count;
    income figures are never narrowed. Balance figures are ledger-wide.
    """
    incomes = [income for income in snapshot.incomes if income.date.year == year]
    expenses = _expenses_for(snapshot.expenses, None, year, person)

    total_gross = sum((income.gross_income for income in incomes), ZERO)
    total_expenses = sum((expense.amount for expense in expenses), ZERO)

    return AnnualReport(
        year=year,
        person=person,
        total_gross_income=total_gross,
        total_auto_savings=sum((income.auto_savings for income in incomes), ZERO),
        total_usable_income=sum((income.usable_income for income in incomes), ZERO),
        total_expenses=total_expenses,
        income_by_source=income_by_source(incomes),
        expenses_by_category=expenses_by_category(expenses),
        expenses_by_type=expenses_by_type(expenses),
        expenses_by_person=expenses_by_person(expenses),
        monthly=_monthly_flows(incomes, expenses),
        savings=savings_totals(snapshot.savings),
        loan_receivable=total_loan_receivable(snapshot.loans),
        loan_payable=total_loan_payable(snapshot.loans),
        active_loans=active_loan_count(snapshot.loans),
        total_bank_balance=total_bank_balance(snapshot.bank_accounts),
        cash_balance=snapshot.cash_balance,
        net_worth=net_worth(snapshot),
        cash_inflow=total_gross,
        cash_outflow=total_expenses,
        net_cash_flow=total_gross - total_expenses,
    )
