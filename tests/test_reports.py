"""Tests for budget variance, summaries, breakdowns and the annual report."""

import datetime as dt
from decimal import Decimal

import pytest

from household_ledger.derivations import (
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
    month_key,
    month_summary,
    net_worth,
    unique_persons,
    yearly_summary,
)
from household_ledger.models import (
    BankAccount,
    Budget,
    BudgetStatus,
    Expense,
    ExpenseType,
    Income,
    LedgerSnapshot,
    Loan,
    LoanDirection,
    LoanStatus,
    SavingsEntry,
)


def _income(income_id, date, source, gross, auto):
    return Income(
        id=income_id,
        date=date,
        month=month_key(date),
        source=source,
        gross_income=Decimal(gross),
        auto_savings=Decimal(auto),
        usable_income=Decimal(gross) - Decimal(auto),
    )


def _expense(expense_id, date, month, expense_type, category, amount, responsibility=None):
    return Expense(
        id=expense_id,
        date=date,
        month=month,
        expense_type=expense_type,
        category=category,
        amount=Decimal(amount),
        responsibility=responsibility,
    )


@pytest.fixture
def snapshot() -> LedgerSnapshot:
    return LedgerSnapshot(
        incomes=(
            _income("i1", dt.date(2025, 1, 5), "Salary", "10000", "2000"),
            _income("i2", dt.date(2025, 1, 20), "Client", "500", "100"),
            _income("i3", dt.date(2025, 3, 2), "Salary", "10000", "2000"),
            _income("i4", dt.date(2024, 12, 1), "Salary", "9000", "1800"),
        ),
        expenses=(
            _expense("e1", dt.date(2025, 1, 6), "Jan-2025", ExpenseType.PERSONAL_FAMILY, "Food", "300", "Amina"),
            _expense("e2", dt.date(2025, 1, 9), "Jan-2025", ExpenseType.OFFICE, "Transport", "200"),
            _expense("e3", dt.date(2025, 1, 15), "Jan-2025", ExpenseType.PERSONAL_FAMILY, "Rent", "1000", "Karim"),
            _expense("e4", dt.date(2025, 3, 3), "Mar-2025", ExpenseType.PARENTS, "Medical", "450", "Amina"),
            _expense("e5", dt.date(2024, 12, 24), "Dec-2024", ExpenseType.OFFICE, "Food", "80"),
        ),
        budgets=(
            Budget(id="b1", month="Jan-2025", expense_type=ExpenseType.PERSONAL_FAMILY, budget_amount=Decimal("1500")),
            Budget(id="b2", month="Jan-2025", expense_type=ExpenseType.OFFICE, budget_amount=Decimal("200")),
            Budget(id="b3", month="Jan-2025", expense_type=ExpenseType.PARENTS, budget_amount=Decimal("100")),
            Budget(id="b4", month="Feb-2025", expense_type=ExpenseType.OFFICE, budget_amount=Decimal("999")),
        ),
        savings=(
            SavingsEntry(id="s1", date=dt.date(2025, 1, 5), in_amount=Decimal("2000"), linked_income_id="i1"),
            SavingsEntry(id="s2", date=dt.date(2025, 2, 1), out_amount=Decimal("500")),
        ),
        loans=(
            Loan(
                id="l1",
                date=dt.date(2025, 1, 1),
                person_name="Rafi",
                direction=LoanDirection.GIVEN,
                amount=Decimal("1000"),
                in_amount=Decimal("200"),
                out_amount=Decimal("1000"),
            ),
            Loan(
                id="l2",
                date=dt.date(2025, 1, 1),
                person_name="Bank",
                direction=LoanDirection.TAKEN,
                amount=Decimal("3000"),
                in_amount=Decimal("3000"),
                out_amount=Decimal("1000"),
                status=LoanStatus.PARTIAL,
            ),
            Loan(
                id="l3",
                date=dt.date(2024, 6, 1),
                person_name="Nila",
                direction=LoanDirection.GIVEN,
                amount=Decimal("400"),
                status=LoanStatus.CLOSED,
            ),
        ),
        bank_accounts=(
            BankAccount(
                id="acc",
                bank_name="City Bank",
                opening_balance=Decimal("2000"),
                current_balance=Decimal("2500"),
                created_at=dt.datetime(2025, 1, 1),
            ),
        ),
        cash_balance=Decimal("1000"),
    )


class TestBudgetVariance:
    """Tests for budgets joined with actual spending."""

    def test_budget_status(self):
        """Test the three variance outcomes."""
        assert budget_status(Decimal("1")) == BudgetStatus.UNDER_BUDGET
        assert budget_status(Decimal("-0.01")) == BudgetStatus.OVER_BUDGET
        assert budget_status(Decimal("0")) == BudgetStatus.ON_BUDGET

    def test_budgets_with_actual(self, snapshot):
        """Test each budget row of the month gets its actual and status."""
        rows = budgets_with_actual(snapshot.budgets, snapshot.expenses, "Jan-2025")
        by_id = {row.id: row for row in rows}

        assert set(by_id) == {"b1", "b2", "b3"}
        assert by_id["b1"].actual_expense == Decimal("1300")
        assert by_id["b1"].difference == Decimal("200")
        assert by_id["b1"].status == BudgetStatus.UNDER_BUDGET
        assert by_id["b2"].status == BudgetStatus.ON_BUDGET
        assert by_id["b3"].actual_expense == 0
        assert by_id["b3"].status == BudgetStatus.UNDER_BUDGET

    def test_over_budget(self):
        """Test spending past the budget is Over Budget."""
        budgets = [Budget(id="b1", month="Apr-2025", expense_type=ExpenseType.OFFICE, budget_amount=Decimal("100"))]
        expenses = [
            _expense("e1", dt.date(2025, 4, 1), "Apr-2025", ExpenseType.OFFICE, "Food", "150"),
        ]
        (row,) = budgets_with_actual(budgets, expenses, "Apr-2025")
        assert row.difference == Decimal("-50")
        assert row.status == BudgetStatus.OVER_BUDGET

    def test_duplicate_budget_rows_each_see_full_actual(self):
        """Test duplicate (month, type) budgets are not merged."""
        budgets = [
            Budget(id="b1", month="Apr-2025", expense_type=ExpenseType.OFFICE, budget_amount=Decimal("100")),
            Budget(id="b2", month="Apr-2025", expense_type=ExpenseType.OFFICE, budget_amount=Decimal("50")),
        ]
        expenses = [
            _expense("e1", dt.date(2025, 4, 1), "Apr-2025", ExpenseType.OFFICE, "Food", "80"),
        ]
        rows = budgets_with_actual(budgets, expenses, "Apr-2025")
        assert [row.actual_expense for row in rows] == [Decimal("80"), Decimal("80")]
        assert [row.status for row in rows] == [BudgetStatus.UNDER_BUDGET, BudgetStatus.OVER_BUDGET]


class TestMonthSummary:
    """Tests for the month dashboard."""

    def test_net_worth(self, snapshot):
        """Test savings + bank + cash + receivable - payable."""
        # savings 1500, bank 2500, cash 1000, receivable 800, payable 2000
        assert net_worth(snapshot) == Decimal("3800")

    def test_month_summary(self, snapshot):
        """Test month totals and ledger-wide balances."""
        summary = month_summary(snapshot, "Jan-2025")
        assert summary.total_gross_income == Decimal("10500")
        assert summary.total_auto_savings == Decimal("2100")
        assert summary.total_usable_income == Decimal("8400")
        assert summary.total_budget == Decimal("1800")
        assert summary.total_actual_expense == Decimal("1500")
        assert summary.savings_or_deficit == Decimal("6900")
        assert summary.total_loan_receivable == Decimal("800")
        assert summary.total_loan_payable == Decimal("2000")
        assert summary.savings_balance == Decimal("1500")
        assert summary.total_bank_balance == Decimal("2500")
        assert summary.total_cash_balance == Decimal("1000")
        assert summary.net_worth == net_worth(snapshot)

    def test_empty_month(self, snapshot):
        """Test a month without entries has zero totals but real balances."""
        summary = month_summary(snapshot, "Jul-2030")
        assert summary.total_gross_income == 0
        assert summary.savings_or_deficit == 0
        assert summary.net_worth == Decimal("3800")


class TestYearlySummary:
    """Tests for the twelve-month chart series."""

    def test_always_twelve_rows(self, snapshot):
        """Test zero-filled months are emitted, not omitted."""
        rows = yearly_summary(snapshot.incomes, snapshot.expenses, 2025)
        assert [row.month for row in rows] == [
            "Jan", "Feb", "Mar", "Apr", "May", "Jun",
            "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
        ]
        assert rows[0].income == Decimal("8400")
        assert rows[0].expense == Decimal("1500")
        assert rows[1].income == 0
        assert rows[1].expense == 0
        assert rows[2].income == Decimal("8000")

    def test_year_without_data(self):
        """Test an empty ledger still gives twelve zero rows."""
        rows = yearly_summary([], [], 1999)
        assert len(rows) == 12
        assert all(row.income == 0 and row.expense == 0 for row in rows)


class TestBreakdowns:
    """Tests for group-and-sum breakdowns."""

    def test_by_category_for_month(self, snapshot):
        """Test a month breakdown sorted by amount, largest first."""
        rows = expenses_by_category(snapshot.expenses, month="Jan-2025")
        assert [(row.label, row.amount) for row in rows] == [
            ("Rent", Decimal("1000")),
            ("Food", Decimal("300")),
            ("Transport", Decimal("200")),
        ]

    def test_by_category_for_year(self, snapshot):
        """Test a year breakdown spans every month of that year."""
        rows = expenses_by_category(snapshot.expenses, year=2025)
        assert [row.label for row in rows] == ["Rent", "Medical", "Food", "Transport"]

    def test_ties_keep_encounter_order(self):
        """Test equal amounts are left in the order first seen."""
        expenses = [
            _expense("e1", dt.date(2025, 5, 1), "May-2025", ExpenseType.OFFICE, "Zeta", "10"),
            _expense("e2", dt.date(2025, 5, 2), "May-2025", ExpenseType.OFFICE, "Alpha", "10"),
            _expense("e3", dt.date(2025, 5, 3), "May-2025", ExpenseType.OFFICE, "Mid", "10"),
        ]
        rows = expenses_by_category(expenses, month="May-2025")
        assert [row.label for row in rows] == ["Zeta", "Alpha", "Mid"]

    def test_by_type(self, snapshot):
        """Test grouping on expense type value."""
        rows = expenses_by_type(snapshot.expenses, month="Jan-2025")
        assert [(row.label, row.amount) for row in rows] == [
            ("Personal-Family", Decimal("1300")),
            ("Office", Decimal("200")),
        ]

    def test_by_type_for_one_person(self, snapshot):
        """Test a person filter narrows the rows grouped."""
        rows = expenses_by_type(snapshot.expenses, year=2025, person="Amina")
        assert [(row.label, row.amount) for row in rows] == [
            ("Parents", Decimal("450")),
            ("Personal-Family", Decimal("300")),
        ]

    def test_by_person_groups_unassigned(self, snapshot):
        """Test expenses without a responsibility fall under Unassigned."""
        rows = expenses_by_person(snapshot.expenses, month="Jan-2025")
        assert [(row.label, row.amount) for row in rows] == [
            ("Karim", Decimal("1000")),
            ("Amina", Decimal("300")),
            (UNASSIGNED_PERSON, Decimal("200")),
        ]

    def test_income_by_source(self, snapshot):
        """Test gross income is grouped by source."""
        rows = income_by_source(snapshot.incomes, year=2025)
        assert [(row.label, row.amount) for row in rows] == [
            ("Salary", Decimal("20000")),
            ("Client", Decimal("500")),
        ]


class TestPickers:
    """Tests for the person, month and year pickers."""

    def test_unique_persons(self, snapshot):
        """Test responsibility names are distinct and sorted."""
        assert unique_persons(snapshot.expenses) == ["Amina", "Karim"]

    def test_available_months_newest_first(self, snapshot):
        """Test month keys sort chronologically, not alphabetically."""
        assert available_months(snapshot.incomes, snapshot.expenses) == [
            "Mar-2025", "Jan-2025", "Dec-2024",
        ]

    def test_available_years(self, snapshot):
        """Test years with data, newest first."""
        assert available_years(snapshot.incomes, snapshot.expenses) == [2025, 2024]

    def test_available_years_defaults_to_current(self):
        """Test an empty ledger offers the current year."""
        assert available_years([], [], today=dt.date(2026, 10, 19)) == [2026]


class TestAnnualReport:
    """Tests for the year report."""

    def test_totals(self, snapshot):
        """Test income and expense totals for the year."""
        report = annual_report(snapshot, 2025)
        assert report.total_gross_income == Decimal("20500")
        assert report.total_auto_savings == Decimal("4100")
        assert report.total_usable_income == Decimal("16400")
        assert report.total_expenses == Decimal("1950")
        assert report.net_cash_flow == Decimal("18550")

    def test_monthly_flow_is_chronological(self, snapshot):
        """Test only months with data appear, oldest first."""
        report = annual_report(snapshot, 2025)
        assert [(flow.month, flow.income, flow.expense) for flow in report.monthly] == [
            ("Jan-2025", Decimal("10500"), Decimal("1500")),
            ("Mar-2025", Decimal("10000"), Decimal("450")),
        ]

    def test_balances_use_shared_formulas(self, snapshot):
        """Test balances match the month summary figures."""
        report = annual_report(snapshot, 2025)
        summary = month_summary(snapshot, "Jan-2025")
        assert report.net_worth == summary.net_worth
        assert report.loan_receivable == summary.total_loan_receivable
        assert report.loan_payable == summary.total_loan_payable
        assert report.active_loans == 2
        assert report.savings.balance == Decimal("1500")

    def test_person_narrows_expenses_only(self, snapshot):
        """Test a person filter leaves income untouched."""
        report = annual_report(snapshot, 2025, person="Amina")
        assert report.person == "Amina"
        assert report.total_gross_income == Decimal("20500")
        assert report.total_expenses == Decimal("750")
        assert [row.label for row in report.expenses_by_person] == ["Amina"]
