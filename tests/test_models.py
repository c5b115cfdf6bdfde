"""
Tests for Household Ledger models

Test strategy:
1. Unit tests for models and pure derivations
2. Store tests against in-memory storage
3. No real files outside pytest's tmp_path
"""

import datetime as dt
import json
from decimal import Decimal

import pytest
from pydantic import ValidationError

from household_ledger.models import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
    BankAccount,
    Expense,
    ExpenseType,
    Income,
    IncomeType,
    LedgerSnapshot,
    Loan,
    LoanDirection,
    LoanStatus,
    SavingsEntry,
    generate_id,
)


class TestLedgerModels:
    """Tests for ledger record models."""

    def test_income_creation(self):
        """Test Income model creation with defaults."""
        income = Income(
            id="i1",
            date=dt.date(2025, 1, 15),
            month="Jan-2025",
            source="Salary",
            gross_income=Decimal("10000"),
        )
        assert income.income_type == IncomeType.SALARY
        assert income.note == ""
        assert income.auto_savings_account_id is None

    def test_income_type_uses_type_key(self):
        """Test that income_type is read from and written to 'type'."""
        income = Income.model_validate({
            "id": "i1",
            "date": "2025-01-15",
            "month": "Jan-2025",
            "source": "Client",
            "type": "Freelance",
            "grossIncome": 500,
        })
        assert income.income_type == IncomeType.FREELANCE
        assert income.model_dump(by_alias=True)["type"] == IncomeType.FREELANCE

    def test_camel_case_aliases(self):
        """Test that records serialize with camelCase keys."""
        expense = Expense(
            id="e1",
            date=dt.date(2025, 2, 1),
            month="Feb-2025",
            expense_type=ExpenseType.PARENTS,
            category="Medical",
            amount=Decimal("250"),
        )
        data = json.loads(expense.model_dump_json(by_alias=True))
        assert data["expenseType"] == "Parents"
        assert data["subCategory"] == ""
        assert "expense_type" not in data

    def test_records_are_frozen(self):
        """Test that records cannot be changed in place."""
        loan = Loan(
            id="l1",
            date=dt.date(2025, 1, 1),
            person_name="Rafi",
            direction=LoanDirection.GIVEN,
            amount=Decimal("1000"),
        )
        with pytest.raises(ValidationError):
            loan.amount = Decimal("5")

    def test_strips_whitespace(self):
        """Test that whitespace is stripped from strings."""
        account = BankAccount(
            id="b1",
            bank_name="  City Bank  ",
            created_at=dt.datetime(2025, 1, 1),
        )
        assert account.bank_name == "City Bank"

    def test_unknown_expense_type_rejected(self):
        """Test that expense types outside the fixed list are rejected."""
        with pytest.raises(ValidationError):
            Expense(
                id="e1",
                date=dt.date(2025, 2, 1),
                month="Feb-2025",
                expense_type="Neighbours",
                category="Food",
            )

    def test_savings_entry_system_owned(self):
        """Test is_system_owned follows linked_income_id."""
        manual = SavingsEntry(id="s1", date=dt.date(2025, 1, 1))
        auto = SavingsEntry(id="s2", date=dt.date(2025, 1, 1), linked_income_id="i1")
        assert manual.is_system_owned is False
        assert auto.is_system_owned is True

    def test_loan_defaults(self):
        """Test loan status defaults to Open."""
        loan = Loan(
            id="l1",
            date=dt.date(2025, 1, 1),
            person_name="Rafi",
            direction=LoanDirection.TAKEN,
        )
        assert loan.status == LoanStatus.OPEN
        assert loan.due_date is None


class TestLedgerSnapshot:
    """Tests for the snapshot aggregate."""

    def test_empty_snapshot(self):
        """Test that an empty JSON object loads as an empty ledger."""
        snapshot = LedgerSnapshot.model_validate_json("{}")
        assert snapshot.incomes == ()
        assert snapshot.cash_balance == 0
        assert snapshot.settings.auto_savings_account_id is None

    def test_older_snapshot_without_new_collections(self):
        """Test that a snapshot from before accounts and transfers still loads."""
        raw = json.dumps({
            "incomes": [],
            "expenses": [{
                "id": "e1",
                "date": "2024-11-03",
                "month": "Nov-2024",
                "expenseType": "Office",
                "category": "Transport",
                "subCategory": "Taxi",
                "amount": 120,
                "paidBy": "Card",
                "note": "",
            }],
            "budgets": [],
            "savings": [],
            "loans": [],
        })
        snapshot = LedgerSnapshot.model_validate_json(raw)
        assert snapshot.expenses[0].amount == Decimal("120")
        assert snapshot.expenses[0].responsibility is None
        assert snapshot.bank_accounts == ()
        assert snapshot.transfers == ()
        assert snapshot.settings.expense_categories == ()

    def test_settings_key(self):
        """Test custom settings are stored under customSettings."""
        data = json.loads(LedgerSnapshot().model_dump_json(by_alias=True))
        assert "customSettings" in data
        assert "cashBalance" in data
        assert "bankAccounts" in data

    def test_counts(self):
        """Test per-collection counts."""
        snapshot = LedgerSnapshot(savings=(SavingsEntry(id="s1", date=dt.date(2025, 1, 1)),))
        counts = snapshot.counts()
        assert counts["savings"] == 1
        assert counts["incomes"] == 0


class TestGenerateId:
    """Tests for id generation."""

    def test_id_shape(self):
        """Test ids are millis plus a nine character suffix."""
        millis, _, suffix = generate_id().partition("-")
        assert millis.isdigit()
        assert len(suffix) == 9

    def test_ids_unique(self):
        """Test ids do not collide in a burst."""
        ids = {generate_id() for _ in range(500)}
        assert len(ids) == 500


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.ENTITY_CREATED,
            description="Income recorded",
        )
        assert event.event_type == AuditEventType.ENTITY_CREATED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEventBuilder.auto_savings_posted("i1", "b1", Decimal("2000"))
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "auto_savings_posted"
        assert log_dict["entity_id"] == "b1"
        assert log_dict["details"]["amount"] == "2000"

    def test_builder_transfer_side_skipped_is_warning(self):
        """Test skipped transfer sides are warnings."""
        event = AuditEventBuilder.transfer_side_skipped("t1", "to", "gone")
        assert event.severity == AuditSeverity.WARNING
        assert event.details["account_id"] == "gone"

    def test_builder_persist_failed_is_error(self):
        """Test persist failures are errors."""
        event = AuditEventBuilder.persist_failed("finance_data", "disk full")
        assert event.severity == AuditSeverity.ERROR
        assert event.error_message == "disk full"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
