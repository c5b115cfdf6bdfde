"""
Ledger Guards

DESIGN DECISION: Some invariants used to live only in the forms that call
the ledger:
- Auto savings rows belong to their income and are not user-editable
- A loan's principal does not change after creation
- Bank balances move only through transfers and auto-savings postings
- Custom categories and income sources are not duplicated

With strict invariants on (the default) the guard raises before the store
touches anything. With them off the store accepts these edits as before.

Two checks are always on because they describe malformed calls rather
than policy: unknown or derived fields in an update, and transfers of a
non-positive amount.

IMPORTANT: Guards NEVER fix input. They accept it or raise.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Optional, Sequence

from pydantic import BaseModel

from household_ledger.models.ledger import BankAccount, Loan, SavingsEntry


class LedgerError(Exception):
    """Base exception for rejected ledger operations."""
    pass


class ProtectedEntryError(LedgerError):
    """The operation would modify a system-owned or immutable value."""
    pass


class DuplicateNameError(LedgerError):
    """A custom category or income source with that name already exists."""
    pass


class InvalidTransferError(LedgerError):
    """A transfer must move a positive amount."""
    pass


class UnknownAccountError(LedgerError):
    """The referenced bank account does not exist."""
    pass


class UnknownFieldError(LedgerError):
    """An update named a field that does not exist or is derived."""
    pass


class LedgerGuard:
    """
    Checks mutations against ledger invariants.

    Every check returns None when the mutation may proceed.
    """

    def __init__(self, strict: bool = True):
        self._strict = strict

    @property
    def strict(self) -> bool:
        return self._strict

    # -------------------------------------------------------------------------
    # Always-on checks
    # -------------------------------------------------------------------------

    def check_update_fields(
        self,
        model: type[BaseModel],
        updates: dict[str, Any],
        derived: Iterable[str] = (),
    ) -> None:
        """Reject ids, derived fields and names the model does not have."""
        blocked = set(derived) | {"id"}
        for name in updates:
            if name not in model.model_fields:
                raise UnknownFieldError(f"{model.__name__} has no field {name!r}")
            if name in blocked:
                raise UnknownFieldError(f"{model.__name__}.{name} cannot be set directly")

    def check_transfer_amount(self, amount: Decimal) -> None:
        if amount <= 0:
            raise InvalidTransferError(f"Transfer amount must be positive, got {amount}")

    # -------------------------------------------------------------------------
    # Strict-mode checks
    # -------------------------------------------------------------------------

    def check_savings_editable(self, entry: SavingsEntry, operation: str) -> None:
        if self._strict and entry.is_system_owned:
            raise ProtectedEntryError(
                f"Cannot {operation} savings entry {entry.id}: it is owned by "
                f"income {entry.linked_income_id}"
            )

    def check_loan_update(self, loan: Loan, updates: dict[str, Any]) -> None:
        if not self._strict or "amount" not in updates:
            return
        try:
            amount = Decimal(str(updates["amount"]))
        except (InvalidOperation, ValueError):
            # Not a number: left for model validation to reject
            return
        if amount != loan.amount:
            raise ProtectedEntryError(
                f"Loan {loan.id} principal is fixed at {loan.amount}"
            )

    def check_bank_account_update(self, account: BankAccount, updates: dict[str, Any]) -> None:
        if not self._strict:
            return
        for name in ("opening_balance", "current_balance"):
            if name in updates:
                raise ProtectedEntryError(
                    f"Bank account {account.id} {name} cannot be edited directly"
                )

    def check_new_name(self, name: str, existing: Sequence[str], kind: str) -> None:
        if self._strict and name in existing:
            raise DuplicateNameError(f"{kind} {name!r} already exists")

    def check_account_exists(
        self,
        accounts: Sequence[BankAccount],
        account_id: Optional[str],
    ) -> None:
        if not self._strict or account_id is None:
            return
        if not any(account.id == account_id for account in accounts):
            raise UnknownAccountError(f"Bank account {account_id} does not exist")
