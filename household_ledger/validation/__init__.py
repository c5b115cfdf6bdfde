"""Ledger guard package."""

from household_ledger.validation.guards import (
    DuplicateNameError,
    InvalidTransferError,
    LedgerError,
    LedgerGuard,
    ProtectedEntryError,
    UnknownAccountError,
    UnknownFieldError,
)

__all__ = [
    "DuplicateNameError",
    "InvalidTransferError",
    "LedgerError",
    "LedgerGuard",
    "ProtectedEntryError",
    "UnknownAccountError",
    "UnknownFieldError",
]
