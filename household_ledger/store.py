"""
Ledger Store for Household Ledger

This module owns the canonical ledger and is its only writer. It defines
the mutation API that keeps derived and linked records consistent:
1. Incomes (auto savings split, linked savings row, optional bank posting)
2. Expenses, budgets, savings, loans, bank accounts
3. Transfers and the cash pool
4. Custom settings

DESIGN DECISION: Every mutation builds a complete new snapshot and swaps it
in with one assignment before persisting. A reader holding store.snapshot
never sees a half-applied change, and income side effects land together or
not at all.

Persistence is an injected collaborator. A write failure is raised to the
caller; the in-memory ledger is then ahead of what is on disk.
"""

import datetime as dt
from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Callable, Iterator, Optional, Sequence, TypeVar

from pydantic import ValidationError

from household_ledger.audit import AuditLogger, set_log_level
from household_ledger.config import LedgerSettings, get_settings
from household_ledger.derivations import calculations, reports
from household_ledger.derivations.calculations import (
    Amount,
    as_decimal,
    auto_savings,
    find_account,
    month_key,
    usable_income,
)
from household_ledger.models.audit import AuditEvent, AuditEventBuilder
from household_ledger.models.ledger import (
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
from household_ledger.models.summaries import BudgetWithActual, MonthSummary, YearlyRow
from household_ledger.services.storage import (
    JsonFileStorage,
    SnapshotStorageInterface,
    StorageError,
)
from household_ledger.validation import LedgerError, LedgerGuard, UnknownFieldError


Record = TypeVar("Record", bound=LedgerModel)

INCOME_DERIVED_FIELDS = frozenset({"month", "auto_savings", "usable_income", "auto_savings_account_id"})
EXPENSE_DERIVED_FIELDS = frozenset({"month"})
SAVINGS_DERIVED_FIELDS = frozenset({"linked_income_id"})
BRANDING_FIELDS = frozenset({"app_name", "app_icon", "app_logo"})


def _find(records: Sequence[Record], record_id: str) -> Optional[Record]:
    return next((record for record in records if record.id == record_id), None)


def _replace(records: Sequence[Record], new: Record) -> tuple[Record, ...]:
    return tuple(new if record.id == new.id else record for record in records)


def _without(records: Sequence[Record], record_id: str) -> tuple[Record, ...]:
    return tuple(record for record in records if record.id != record_id)


def _revalidated(record: Record, **changes: Any) -> Record:
    # Validated copy: strings are stripped exactly as they are on reload
    return type(record).model_validate({**record.model_dump(), **changes})


class LedgerStore:
    """
    Owns the ledger snapshot and exposes every mutation on it.

    Construct one store per ledger (and one per test). There is no
    module-level instance.
    """

    def __init__(
        self,
        storage: SnapshotStorageInterface,
        settings: Optional[LedgerSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
        id_factory: Callable[[], str] = generate_id,
        clock: Callable[[], dt.datetime] = dt.datetime.now,
    ):
        self._storage = storage
        self._settings = settings or get_settings()
        self._audit = audit_logger or AuditLogger()
        self._guard = LedgerGuard(strict=self._settings.strict_invariants)
        self._new_id = id_factory
        self._clock = clock
        self._slot = self._settings.storage_slot

        set_log_level(self._settings.log_level)
        self._snapshot = self._load()

    @classmethod
    def from_settings(
        cls,
        settings: Optional[LedgerSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
    ) -> "LedgerStore":
        """Store backed by the JSON file storage the settings point at."""
        settings = settings or get_settings()
        return cls(
            storage=JsonFileStorage(settings.storage_dir),
            settings=settings,
            audit_logger=audit_logger,
        )

    @property
    def snapshot(self) -> LedgerSnapshot:
        """The current, fully settled ledger."""
        return self._snapshot

    @property
    def settings(self) -> LedgerSettings:
        return self._settings

    # =========================================================================
    # LOAD / PERSIST
    # =========================================================================

    def _load(self) -> LedgerSnapshot:
        """
        Read the snapshot slot once at startup.

        A missing slot gives an empty ledger. So does a malformed one: the
        store must always start, so the bad payload is logged and replaced.
        """
        raw = self._storage.read(self._slot)
        if raw is None:
            return LedgerSnapshot()
        try:
            snapshot = LedgerSnapshot.model_validate_json(raw)
        except ValidationError as e:
            self._audit.log(AuditEventBuilder.snapshot_recovered(self._slot, str(e)))
            return LedgerSnapshot()
        self._audit.log(AuditEventBuilder.snapshot_loaded(self._slot, snapshot.counts()))
        return snapshot

    def _persist(self) -> None:
        payload = self._snapshot.model_dump_json(by_alias=True)
        try:
            self._storage.write(self._slot, payload)
        except StorageError as e:
            self._audit.log(AuditEventBuilder.persist_failed(self._slot, str(e)))
            raise

    def _commit(self, snapshot: LedgerSnapshot, events: list[AuditEvent]) -> None:
        self._snapshot = snapshot
        self._persist()
        self._audit.log_all(events)

    @contextmanager
    def _rejections(self, operation: str, entity_id: Optional[str] = None) -> Iterator[None]:
        try:
            yield
        except LedgerError as e:
            self._audit.log(AuditEventBuilder.mutation_rejected(operation, str(e), entity_id))
            raise

    def _missing(self, entity_type: str, entity_id: str, operation: str) -> None:
        self._audit.log(AuditEventBuilder.entity_not_found(entity_type, entity_id, operation))

    def _apply_updates(
        self,
        record: Record,
        updates: dict[str, Any],
        derived: frozenset = frozenset(),
    ) -> Record:
        self._guard.check_update_fields(type(record), updates, derived)
        return _revalidated(record, **updates)

    # =========================================================================
    # INCOME
    # =========================================================================

    def add_income(
        self,
        *,
        date: dt.date,
        source: str,
        gross_income: Amount,
        income_type: IncomeType = IncomeType.SALARY,
        note: str = "",
    ) -> Income:
        """
        Record an income with its auto savings side effects.

        Appends the income, a linked Auto savings entry and, when an
        auto-savings account is configured and exists, credits that account.
        """
        current = self._snapshot
        gross = as_decimal(gross_income)
        saved = auto_savings(gross)
        target = find_account(current.bank_accounts, current.settings.auto_savings_account_id)

        income = Income(
            id=self._new_id(),
            date=date,
            month=month_key(date),
            source=source,
            income_type=income_type,
            gross_income=gross,
            auto_savings=saved,
            usable_income=usable_income(gross, saved),
            note=note,
            auto_savings_account_id=target.id if target else None,
        )
        entry = SavingsEntry(
            id=self._new_id(),
            date=income.date,
            savings_type=SavingsType.AUTO,
            account=SavingsAccount.BANK,
            in_amount=saved,
            out_amount=Decimal("0"),
            purpose=f"Auto savings from {income.source} income",
            linked_income_id=income.id,
        )

        accounts = current.bank_accounts
        events = [
            AuditEventBuilder.entity_created(
                "income", income.id,
                f"Income recorded: {income.source} {income.gross_income}",
                {"auto_savings": str(saved), "savings_entry_id": entry.id},
            ),
        ]
        if target is not None:
            accounts = _replace(accounts, target.model_copy(
                update={"current_balance": target.current_balance + saved}
            ))
            events.append(AuditEventBuilder.auto_savings_posted(income.id, target.id, saved))

        self._commit(current.model_copy(update={
            "incomes": current.incomes + (income,),
            "savings": current.savings + (entry,),
            "bank_accounts": accounts,
        }), events)
        return income

    def update_income(self, income_id: str, **updates: Any) -> Optional[Income]:
        """
        Edit an income and resynchronize what depends on it.

        Derived fields are recomputed and linked savings rows take the new
        auto savings and date. The bank posting from add_income is only
        adjusted when resync_balances_on_income_edit is enabled.
        """
        current = self._snapshot
        income = _find(current.incomes, income_id)
        if income is None:
            self._missing("income", income_id, "update_income")
            return None

        with self._rejections("update_income", income_id):
            changed = self._apply_updates(income, updates, INCOME_DERIVED_FIELDS)
        saved = auto_savings(changed.gross_income)
        changed = changed.model_copy(update={
            "month": month_key(changed.date),
            "auto_savings": saved,
            "usable_income": usable_income(changed.gross_income, saved),
        })

        savings = tuple(
            entry.model_copy(update={"in_amount": saved, "date": changed.date})
            if entry.linked_income_id == income_id else entry
            for entry in current.savings
        )
        events = [AuditEventBuilder.entity_updated("income", income_id, sorted(updates))]
        accounts = self._shift_posting(
            current.bank_accounts, income, saved - income.auto_savings, events
        )

        self._commit(current.model_copy(update={
            "incomes": _replace(current.incomes, changed),
            "savings": savings,
            "bank_accounts": accounts,
        }), events)
        return changed

    def delete_income(self, income_id: str) -> bool:
        """Remove an income and exactly the savings rows linked to it."""
        current = self._snapshot
        income = _find(current.incomes, income_id)
        if income is None:
            self._missing("income", income_id, "delete_income")
            return False

        linked = [entry.id for entry in current.savings if entry.linked_income_id == income_id]
        events = [AuditEventBuilder.entity_deleted("income", income_id, {"savings": linked})]
        accounts = self._shift_posting(
            current.bank_accounts, income, -income.auto_savings, events
        )

        self._commit(current.model_copy(update={
            "incomes": _without(current.incomes, income_id),
            "savings": tuple(e for e in current.savings if e.linked_income_id != income_id),
            "bank_accounts": accounts,
        }), events)
        return True

    def _shift_posting(
        self,
        accounts: tuple[BankAccount, ...],
        income: Income,
        delta: Decimal,
        events: list[AuditEvent],
    ) -> tuple[BankAccount, ...]:
        # Postings stay put unless resync_balances_on_income_edit is on
        if not self._settings.resync_balances_on_income_edit or delta == 0:
            return accounts
        account = find_account(accounts, income.auto_savings_account_id)
        if account is None:
            return accounts
        events.append(AuditEventBuilder.balance_resynced(income.id, account.id, delta))
        return _replace(accounts, account.model_copy(
            update={"current_balance": account.current_balance + delta}
        ))

    # =========================================================================
    # EXPENSES
    # =========================================================================

    def add_expense(
        self,
        *,
        date: dt.date,
        expense_type: ExpenseType,
        category: str,
        amount: Amount,
        sub_category: str = "",
        paid_by: PaymentMethod = PaymentMethod.CASH,
        note: str = "",
        responsibility: Optional[str] = None,
    ) -> Expense:
        expense = Expense(
            id=self._new_id(),
            date=date,
            month=month_key(date),
            expense_type=expense_type,
            category=category,
            sub_category=sub_category,
            amount=as_decimal(amount),
            paid_by=paid_by,
            note=note,
            responsibility=responsibility,
        )
        self._commit(
            self._snapshot.model_copy(update={"expenses": self._snapshot.expenses + (expense,)}),
            [AuditEventBuilder.entity_created(
                "expense", expense.id, f"Expense recorded: {expense.category} {expense.amount}"
            )],
        )
        return expense

    def update_expense(self, expense_id: str, **updates: Any) -> Optional[Expense]:
        current = self._snapshot
        expense = _find(current.expenses, expense_id)
        if expense is None:
            self._missing("expense", expense_id, "update_expense")
            return None
        with self._rejections("update_expense", expense_id):
            changed = self._apply_updates(expense, updates, EXPENSE_DERIVED_FIELDS)
        changed = changed.model_copy(update={"month": month_key(changed.date)})
        self._commit(
            current.model_copy(update={"expenses": _replace(current.expenses, changed)}),
            [AuditEventBuilder.entity_updated("expense", expense_id, sorted(updates))],
        )
        return changed

    def delete_expense(self, expense_id: str) -> bool:
        return self._delete("expenses", "expense", expense_id)

    # =========================================================================
    # BUDGETS
    # =========================================================================

    def add_budget(
        self,
        *,
        month: str,
        expense_type: ExpenseType,
        budget_amount: Amount,
    ) -> Budget:
        """Add a budget row. Duplicates per (month, expense type) are allowed."""
        budget = Budget(
            id=self._new_id(),
            month=month,
            expense_type=expense_type,
            budget_amount=as_decimal(budget_amount),
        )
        self._commit(
            self._snapshot.model_copy(update={"budgets": self._snapshot.budgets + (budget,)}),
            [AuditEventBuilder.entity_created(
                "budget", budget.id,
                f"Budget set: {budget.month} {budget.expense_type.value} {budget.budget_amount}",
            )],
        )
        return budget

    def update_budget(self, budget_id: str, **updates: Any) -> Optional[Budget]:
        return self._update("budgets", "budget", budget_id, updates)

    def delete_budget(self, budget_id: str) -> bool:
        return self._delete("budgets", "budget", budget_id)

    # =========================================================================
    # SAVINGS
    # =========================================================================

    def add_savings(
        self,
        *,
        date: dt.date,
        savings_type: SavingsType = SavingsType.MANUAL,
        account: SavingsAccount = SavingsAccount.BANK,
        in_amount: Amount = 0,
        out_amount: Amount = 0,
        purpose: str = "",
    ) -> SavingsEntry:
        """Add a user-entered savings movement. Linked rows come only from incomes."""
        entry = SavingsEntry(
            id=self._new_id(),
            date=date,
            savings_type=savings_type,
            account=account,
            in_amount=as_decimal(in_amount),
            out_amount=as_decimal(out_amount),
            purpose=purpose,
        )
        self._commit(
            self._snapshot.model_copy(update={"savings": self._snapshot.savings + (entry,)}),
            [AuditEventBuilder.entity_created(
                "savings", entry.id,
                f"Savings entry: in {entry.in_amount} out {entry.out_amount}",
            )],
        )
        return entry

    def update_savings(self, entry_id: str, **updates: Any) -> Optional[SavingsEntry]:
        entry = _find(self._snapshot.savings, entry_id)
        if entry is not None:
            with self._rejections("update_savings", entry_id):
                self._guard.check_savings_editable(entry, "update")
        return self._update("savings", "savings", entry_id, updates, SAVINGS_DERIVED_FIELDS)

    def delete_savings(self, entry_id: str) -> bool:
        entry = _find(self._snapshot.savings, entry_id)
        if entry is not None:
            with self._rejections("delete_savings", entry_id):
                self._guard.check_savings_editable(entry, "delete")
        return self._delete("savings", "savings", entry_id)

    # =========================================================================
    # LOANS
    # =========================================================================

    def add_loan(
        self,
        *,
        date: dt.date,
        person_name: str,
        direction: LoanDirection,
        amount: Amount,
        loan_type: ExpenseType = ExpenseType.PERSONAL_SELF,
        in_amount: Optional[Amount] = None,
        out_amount: Optional[Amount] = None,
        due_date: Optional[dt.date] = None,
        status: LoanStatus = LoanStatus.OPEN,
        note: str = "",
    ) -> Loan:
        """
        Record a loan.

        When neither in_amount nor out_amount is given, the initiating
        movement is seeded: money went out for a Given loan and came in
        for a Taken one.
        """
        principal = as_decimal(amount)
        direction = LoanDirection(direction)
        if in_amount is None and out_amount is None:
            seeded_in = principal if direction == LoanDirection.TAKEN else Decimal("0")
            seeded_out = principal if direction == LoanDirection.GIVEN else Decimal("0")
        else:
            seeded_in = as_decimal(in_amount or 0)
            seeded_out = as_decimal(out_amount or 0)

        loan = Loan(
            id=self._new_id(),
            date=date,
            person_name=person_name,
            loan_type=loan_type,
            direction=direction,
            amount=principal,
            in_amount=seeded_in,
            out_amount=seeded_out,
            due_date=due_date,
            status=status,
            note=note,
        )
        self._commit(
            self._snapshot.model_copy(update={"loans": self._snapshot.loans + (loan,)}),
            [AuditEventBuilder.entity_created(
                "loan", loan.id,
                f"Loan {loan.direction.value.lower()}: {loan.person_name} {loan.amount}",
            )],
        )
        return loan

    def update_loan(self, loan_id: str, **updates: Any) -> Optional[Loan]:
        loan = _find(self._snapshot.loans, loan_id)
        if loan is not None:
            with self._rejections("update_loan", loan_id):
                self._guard.check_loan_update(loan, updates)
        return self._update("loans", "loan", loan_id, updates)

    def delete_loan(self, loan_id: str) -> bool:
        return self._delete("loans", "loan", loan_id)

    # =========================================================================
    # BANK ACCOUNTS
    # =========================================================================

    def add_bank_account(
        self,
        *,
        bank_name: str,
        account_type: AccountType = AccountType.SAVINGS,
        wallet_type: WalletType = WalletType.BANK,
        opening_balance: Amount = 0,
    ) -> BankAccount:
        """Open an account; its current balance starts at the opening balance."""
        opening = as_decimal(opening_balance)
        account = BankAccount(
            id=self._new_id(),
            bank_name=bank_name,
            account_type=account_type,
            wallet_type=wallet_type,
            opening_balance=opening,
            current_balance=opening,
            created_at=self._clock(),
        )
        self._commit(
            self._snapshot.model_copy(update={
                "bank_accounts": self._snapshot.bank_accounts + (account,),
            }),
            [AuditEventBuilder.entity_created(
                "bank_account", account.id, f"Account opened: {account.bank_name} {opening}"
            )],
        )
        return account

    def update_bank_account(self, account_id: str, **updates: Any) -> Optional[BankAccount]:
        account = _find(self._snapshot.bank_accounts, account_id)
        if account is not None:
            with self._rejections("update_bank_account", account_id):
                self._guard.check_bank_account_update(account, updates)
        return self._update("bank_accounts", "bank_account", account_id, updates)

    def delete_bank_account(self, account_id: str) -> bool:
        """
        Remove an account.

        Transfers and incomes that reference it are kept as history. If it
        was the auto-savings target, the target is cleared.
        """
        current = self._snapshot
        if _find(current.bank_accounts, account_id) is None:
            self._missing("bank_account", account_id, "delete_bank_account")
            return False

        settings = current.settings
        events = [AuditEventBuilder.entity_deleted("bank_account", account_id)]
        if settings.auto_savings_account_id == account_id:
            settings = _revalidated(settings, auto_savings_account_id=None)
            events.append(AuditEventBuilder.settings_changed("auto_savings_account_id", "cleared"))

        self._commit(current.model_copy(update={
            "bank_accounts": _without(current.bank_accounts, account_id),
            "settings": settings,
        }), events)
        return True

    # =========================================================================
    # TRANSFERS AND CASH
    # =========================================================================

    def add_transfer(
        self,
        *,
        from_type: TransferEndpoint,
        to_type: TransferEndpoint,
        amount: Amount,
        from_bank_id: Optional[str] = None,
        to_bank_id: Optional[str] = None,
        note: str = "",
        date: Optional[dt.datetime] = None,
    ) -> Transfer:
        """
        Move money between the cash pool and/or bank accounts.

        Applies one debit and one credit. A bank side whose account id does
        not resolve is skipped (and logged); the other side still applies.
        """
        value = as_decimal(amount)
        with self._rejections("add_transfer"):
            self._guard.check_transfer_amount(value)

        transfer = Transfer(
            id=self._new_id(),
            date=date or self._clock(),
            from_type=from_type,
            to_type=to_type,
            from_bank_id=from_bank_id,
            to_bank_id=to_bank_id,
            amount=value,
            note=note,
        )

        current = self._snapshot
        cash = current.cash_balance
        accounts = current.bank_accounts
        events: list[AuditEvent] = []
        sides = (
            ("from", transfer.from_type, transfer.from_bank_id, -value),
            ("to", transfer.to_type, transfer.to_bank_id, value),
        )
        for side, kind, bank_id, delta in sides:
            if kind == TransferEndpoint.CASH:
                cash += delta
                continue
            account = find_account(accounts, bank_id)
            if account is None:
                events.append(AuditEventBuilder.transfer_side_skipped(transfer.id, side, bank_id))
                continue
            accounts = _replace(accounts, account.model_copy(
                update={"current_balance": account.current_balance + delta}
            ))

        events.insert(0, AuditEventBuilder.transfer_applied(
            transfer.id,
            value,
            calculations.transfer_endpoint_label(current.bank_accounts, transfer, "from"),
            calculations.transfer_endpoint_label(current.bank_accounts, transfer, "to"),
        ))
        self._commit(current.model_copy(update={
            "transfers": current.transfers + (transfer,),
            "bank_accounts": accounts,
            "cash_balance": cash,
        }), events)
        return transfer

    def set_cash_balance(self, value: Amount) -> Decimal:
        """Overwrite the cash pool. No transfer record is created."""
        return self._change_cash(as_decimal(value), "set")

    def adjust_cash_balance(self, delta: Amount) -> Decimal:
        """Add to (or subtract from) the cash pool. No transfer record is created."""
        return self._change_cash(self._snapshot.cash_balance + as_decimal(delta), "adjusted")

    def _change_cash(self, value: Decimal, mode: str) -> Decimal:
        current = self._snapshot
        self._commit(
            current.model_copy(update={"cash_balance": value}),
            [AuditEventBuilder.cash_balance_changed(current.cash_balance, value, mode)],
        )
        return value

    # =========================================================================
    # CUSTOM SETTINGS
    # =========================================================================

    def add_custom_expense_category(self, name: str) -> None:
        name = name.strip()
        with self._rejections("add_custom_expense_category"):
            self._guard.check_new_name(
                name, calculations.all_expense_categories(self._snapshot.settings), "Category"
            )
        self._append_setting("expense_categories", name)

    def remove_custom_expense_category(self, name: str) -> bool:
        return self._remove_setting("expense_categories", name.strip())

    def add_custom_income_source(self, name: str) -> None:
        name = name.strip()
        with self._rejections("add_custom_income_source"):
            self._guard.check_new_name(
                name, calculations.all_income_sources(self._snapshot.settings), "Income source"
            )
        self._append_setting("income_sources", name)

    def remove_custom_income_source(self, name: str) -> bool:
        return self._remove_setting("income_sources", name.strip())

    def update_branding(self, **changes: Optional[str]) -> CustomSettings:
        """Change app_name, app_icon and/or app_logo. None clears a value."""
        unknown = set(changes) - BRANDING_FIELDS
        if unknown:
            with self._rejections("update_branding"):
                raise UnknownFieldError(f"Not a branding field: {', '.join(sorted(unknown))}")
        current = self._snapshot
        settings = _revalidated(current.settings, **changes)
        self._commit(
            current.model_copy(update={"settings": settings}),
            [AuditEventBuilder.settings_changed("branding", "updated", sorted(changes))],
        )
        return settings

    def set_auto_savings_account(self, account_id: Optional[str]) -> None:
        """Choose the account that receives auto-savings postings (None to stop)."""
        current = self._snapshot
        with self._rejections("set_auto_savings_account", account_id):
            self._guard.check_account_exists(current.bank_accounts, account_id)
        settings = _revalidated(current.settings, auto_savings_account_id=account_id)
        self._commit(
            current.model_copy(update={"settings": settings}),
            [AuditEventBuilder.settings_changed(
                "auto_savings_account_id", "set" if account_id else "cleared", account_id
            )],
        )

    def _append_setting(self, field: str, name: str) -> None:
        current = self._snapshot
        values = getattr(current.settings, field) + (name,)
        self._commit(
            current.model_copy(update={
                "settings": _revalidated(current.settings, **{field: values}),
            }),
            [AuditEventBuilder.settings_changed(field, "added", name)],
        )

    def _remove_setting(self, field: str, name: str) -> bool:
        current = self._snapshot
        values = getattr(current.settings, field)
        if name not in values:
            return False
        self._commit(
            current.model_copy(update={
                "settings": _revalidated(
                    current.settings, **{field: tuple(v for v in values if v != name)}
                ),
            }),
            [AuditEventBuilder.settings_changed(field, "removed", name)],
        )
        return True

    # =========================================================================
    # GENERIC CRUD
    # =========================================================================

    def _update(
        self,
        collection: str,
        entity_type: str,
        record_id: str,
        updates: dict[str, Any],
        derived: frozenset = frozenset(),
    ) -> Optional[Any]:
        current = self._snapshot
        records = getattr(current, collection)
        record = _find(records, record_id)
        if record is None:
            self._missing(entity_type, record_id, f"update_{entity_type}")
            return None
        with self._rejections(f"update_{entity_type}", record_id):
            changed = self._apply_updates(record, updates, derived)
        self._commit(
            current.model_copy(update={collection: _replace(records, changed)}),
            [AuditEventBuilder.entity_updated(entity_type, record_id, sorted(updates))],
        )
        return changed

    def _delete(self, collection: str, entity_type: str, record_id: str) -> bool:
        current = self._snapshot
        records = getattr(current, collection)
        if _find(records, record_id) is None:
            self._missing(entity_type, record_id, f"delete_{entity_type}")
            return False
        self._commit(
            current.model_copy(update={collection: _without(records, record_id)}),
            [AuditEventBuilder.entity_deleted(entity_type, record_id)],
        )
        return True

    # =========================================================================
    # QUERIES ON THE CURRENT SNAPSHOT
    # =========================================================================

    def month_summary(self, month: str) -> MonthSummary:
        return reports.month_summary(self._snapshot, month)

    def yearly_summary(self, year: int) -> list[YearlyRow]:
        return reports.yearly_summary(self._snapshot.incomes, self._snapshot.expenses, year)

    def budgets_with_actual(self, month: str) -> list[BudgetWithActual]:
        return reports.budgets_with_actual(self._snapshot.budgets, self._snapshot.expenses, month)

    def total_bank_balance(self) -> Decimal:
        return calculations.total_bank_balance(self._snapshot.bank_accounts)

    def all_expense_categories(self) -> list[str]:
        return calculations.all_expense_categories(self._snapshot.settings)

    def all_income_sources(self) -> list[str]:
        return calculations.all_income_sources(self._snapshot.settings)
