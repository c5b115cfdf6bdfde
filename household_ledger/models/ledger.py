"""
Core Ledger Models for Household Ledger

These models define the schemas for every record the ledger stores.
They are designed to:
1. Be immutable, so a snapshot handed to a reader can never change under it
2. Serialize to the same camelCase JSON keys the snapshot has always used
3. Load older snapshots where whole collections or fields are missing

DESIGN DECISION: Derived fields (auto savings, usable income, month keys,
current balances) are plain stored fields here. Keeping them in sync is the
job of the ledger store, not of the models.
"""

import datetime as dt
import secrets
import string
import time
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class IncomeType(str, Enum):
    """Kind of income."""
    FREELANCE = "Freelance"
    SALARY = "Salary"
    BUSINESS = "Business"
    OTHER = "Other"


class ExpenseType(str, Enum):
    """
    Who an expense (or budget, or loan) is for.

    DESIGN DECISION: This list is fixed. Budgets are matched against
    expenses on this field, so free text would silently break variance.
    """
    PERSONAL_SELF = "Personal-Self"
    PERSONAL_FAMILY = "Personal-Family"
    PERSONAL_SPOUSE = "Personal-Spouse"
    PERSONAL_CHILDREN = "Personal-Children"
    PARENTS = "Parents"
    OFFICE = "Office"


class PaymentMethod(str, Enum):
    """How an expense was paid."""
    CASH = "Cash"
    BKASH = "Bkash"
    BANK = "Bank"
    CARD = "Card"


class SavingsType(str, Enum):
    """Auto rows are created by incomes, Manual rows by the user."""
    AUTO = "Auto"
    MANUAL = "Manual"


class SavingsAccount(str, Enum):
    """Where a savings movement is held."""
    CASH = "Cash"
    BANK = "Bank"
    MOBILE_WALLET = "Mobile Wallet"


class LoanDirection(str, Enum):
    """Given = lent out (receivable), Taken = borrowed (payable)."""
    GIVEN = "Given"
    TAKEN = "Taken"


class LoanStatus(str, Enum):
    """
    Loan status.

    Set by the user only. The store never moves a loan between
    statuses based on its amounts.
    """
    OPEN = "Open"
    PARTIAL = "Partial"
    CLOSED = "Closed"


class AccountType(str, Enum):
    """Bank account product type."""
    SAVINGS = "Savings"
    CURRENT = "Current"
    SALARY = "Salary"
    FIXED_DEPOSIT = "Fixed Deposit"


class WalletType(str, Enum):
    """Kind of place a BankAccount represents."""
    BANK = "Bank"
    MOBILE_WALLET = "Mobile Wallet"
    CASH = "Cash"


class TransferEndpoint(str, Enum):
    """One side of a transfer: the cash pool or a named bank account."""
    BANK = "bank"
    CASH = "cash"


DEFAULT_EXPENSE_CATEGORIES: tuple[str, ...] = (
    "Food",
    "Rent",
    "Transport",
    "Utility",
    "EMI",
    "Medical",
    "Entertainment",
    "Shopping",
    "Other",
)

DEFAULT_INCOME_SOURCES: tuple[str, ...] = (
    "Client",
    "Salary",
    "Business",
    "Other",
)

_ID_ALPHABET = string.digits + string.ascii_lowercase


def generate_id() -> str:
    """
    Create an entity id: epoch milliseconds plus a random base-36 suffix.

    Ids only need to be unique within one ledger, so a timestamp with
    nine random characters is plenty.
    """
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"{int(time.time() * 1000)}-{suffix}"


class LedgerModel(BaseModel):
    """Base for every ledger record: frozen, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        str_strip_whitespace=True,
    )


# =============================================================================
# LEDGER ENTITIES
# =============================================================================

class Income(LedgerModel):
    """
    An income record.

    auto_savings and usable_income are derived from gross_income and
    must never be set on their own.
    """

    id: str
    date: dt.date
    month: str = Field(..., description="Month key (MMM-YYYY) derived from date")
    source: str = Field(..., description="Default or user-defined income source")
    income_type: IncomeType = Field(default=IncomeType.SALARY, alias="type")
    gross_income: Decimal = Decimal("0")
    auto_savings: Decimal = Decimal("0")
    usable_income: Decimal = Decimal("0")
    note: str = ""
    # Account that received the auto-savings posting when this was recorded
    auto_savings_account_id: Optional[str] = None


class Expense(LedgerModel):
    """An expense record."""

    id: str
    date: dt.date
    month: str
    expense_type: ExpenseType
    category: str
    sub_category: str = ""
    amount: Decimal = Decimal("0")
    paid_by: PaymentMethod = PaymentMethod.CASH
    note: str = ""
    responsibility: Optional[str] = Field(
        default=None,
        description="Person the expense is attributed to"
    )


class Budget(LedgerModel):
    """
    A budget line for one expense type in one month.

    The month is typed in by the user. Several rows for the same
    (month, expense_type) are allowed and are summed by queries.
    """

    id: str
    month: str
    expense_type: ExpenseType
    budget_amount: Decimal = Decimal("0")


class SavingsEntry(LedgerModel):
    """
    A movement in or out of savings.

    Rows with linked_income_id are owned by that income: they are
    created, resynchronized and deleted together with it.
    """

    id: str
    date: dt.date
    savings_type: SavingsType = SavingsType.MANUAL
    account: SavingsAccount = SavingsAccount.BANK
    in_amount: Decimal = Decimal("0")
    out_amount: Decimal = Decimal("0")
    purpose: str = ""
    linked_income_id: Optional[str] = None

    @property
    def is_system_owned(self) -> bool:
        return self.linked_income_id is not None


class Loan(LedgerModel):
    """
    Money lent to or borrowed from a person.

    amount is the original principal. in_amount and out_amount are the
    cumulative money received and paid; the remaining balance is always
    computed from them.
    """

    id: str
    date: dt.date
    person_name: str
    loan_type: ExpenseType = ExpenseType.PERSONAL_SELF
    direction: LoanDirection
    amount: Decimal = Decimal("0")
    in_amount: Decimal = Decimal("0")
    out_amount: Decimal = Decimal("0")
    due_date: Optional[dt.date] = None
    status: LoanStatus = LoanStatus.OPEN
    note: str = ""


class BankAccount(LedgerModel):
    """A bank account, mobile wallet or cash box with a running balance."""

    id: str
    bank_name: str
    account_type: AccountType = AccountType.SAVINGS
    wallet_type: WalletType = WalletType.BANK
    opening_balance: Decimal = Decimal("0")
    current_balance: Decimal = Decimal("0")
    created_at: dt.datetime


class Transfer(LedgerModel):
    """A balance movement between the cash pool and/or bank accounts."""

    id: str
    date: dt.datetime
    from_type: TransferEndpoint
    to_type: TransferEndpoint
    from_bank_id: Optional[str] = None
    to_bank_id: Optional[str] = None
    amount: Decimal
    note: str = ""


class CustomSettings(LedgerModel):
    """User additions to the defaults, branding and the auto-savings target."""

    expense_categories: tuple[str, ...] = ()
    income_sources: tuple[str, ...] = ()
    app_name: Optional[str] = None
    app_icon: Optional[str] = None
    app_logo: Optional[str] = None
    auto_savings_account_id: Optional[str] = None


class LedgerSnapshot(LedgerModel):
    """
    The complete ledger at one point in time.

    CRITICAL: Every field has an empty default. Snapshots written by
    older versions that lack a collection must still load.
    """

    incomes: tuple[Income, ...] = ()
    expenses: tuple[Expense, ...] = ()
    budgets: tuple[Budget, ...] = ()
    savings: tuple[SavingsEntry, ...] = ()
    loans: tuple[Loan, ...] = ()
    bank_accounts: tuple[BankAccount, ...] = ()
    transfers: tuple[Transfer, ...] = ()
    cash_balance: Decimal = Decimal("0")
    settings: CustomSettings = Field(
        default_factory=CustomSettings,
        alias="customSettings"
    )

    def counts(self) -> dict[str, int]:
        """Number of records per collection, for logging."""
        return {
            "incomes": len(self.incomes),
            "expenses": len(self.expenses),
            "budgets": len(self.budgets),
            "savings": len(self.savings),
            "loans": len(self.loans),
            "bank_accounts": len(self.bank_accounts),
            "transfers": len(self.transfers),
        }
