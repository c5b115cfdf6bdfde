"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Ships a JSON file backend and in-memory backends, designed to be swappable.
"""

from household_ledger.services.storage.interface import (
    AuditStorageInterface,
    PersistenceError,
    SnapshotStorageInterface,
    StorageError,
)
from household_ledger.services.storage.json_file import JsonFileStorage
from household_ledger.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryStorage,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "SnapshotStorageInterface",
    # Exceptions
    "PersistenceError",
    "StorageError",
    # Implementations
    "InMemoryAuditStorage",
    "InMemoryStorage",
    "JsonFileStorage",
]
