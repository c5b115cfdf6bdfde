"""Shared fixtures: isolated stores with deterministic ids and clock."""

import datetime as dt
import itertools

import pytest

from household_ledger.audit import AuditLogger
from household_ledger.config import LedgerSettings
from household_ledger.services.storage import InMemoryAuditStorage, InMemoryStorage
from household_ledger.store import LedgerStore


FIXED_NOW = dt.datetime(2025, 3, 10, 9, 30)


def build_store(storage=None, audit_storage=None, **settings_overrides) -> LedgerStore:
    counter = itertools.count(1)
    settings = LedgerSettings(_env_file=None, **settings_overrides)
    return LedgerStore(
        storage if storage is not None else InMemoryStorage(),
        settings=settings,
        audit_logger=AuditLogger(audit_storage),
        id_factory=lambda: f"id-{next(counter)}",
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def audit_storage() -> InMemoryAuditStorage:
    return InMemoryAuditStorage()


@pytest.fixture
def store(storage, audit_storage) -> LedgerStore:
    return build_store(storage, audit_storage)


@pytest.fixture
def lenient_store(storage, audit_storage) -> LedgerStore:
    return build_store(storage, audit_storage, strict_invariants=False)


@pytest.fixture
def make_store():
    """Factory for extra stores, e.g. a second store over the same storage."""
    return build_store


@pytest.fixture
def fixed_now() -> dt.datetime:
    return FIXED_NOW
