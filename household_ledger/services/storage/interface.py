"""
Storage Contracts

DESIGN DECISION: The ledger store only ever sees these two interfaces.
That means:
1. The JSON file backend can be replaced without touching the store
2. Tests run against dict-backed storage
3. Serialization stays in the store; backends move opaque text

The interface is intentionally simple - a key-value store of text slots.
The ledger store serializes its whole snapshot into one slot.
"""

from abc import ABC, abstractmethod
from typing import Optional

from household_ledger.models.audit import AuditEvent


class SnapshotStorageInterface(ABC):
    """
    Abstract interface for snapshot storage.

    Any backend (JSON files, browser-style key-value stores, a database
    column) must implement these methods.
    """

    @abstractmethod
    def read(self, slot: str) -> Optional[str]:
        """
        Read the text stored under a slot.

        Args:
            slot: Slot name

        Returns:
            The stored text, or None if the slot has never been written

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def write(self, slot: str, payload: str) -> None:
        """
        Replace the text stored under a slot.

        Args:
            slot: Slot name
            payload: Text to store

        Raises:
            PersistenceError: If the write fails
        """
        pass

    @abstractmethod
    def delete(self, slot: str) -> bool:
        """
        Remove a slot.

        Returns:
            True if the slot existed
        """
        pass


class AuditStorageInterface(ABC):
    """
    Sink for audit events.

    Append-only: events are never rewritten or removed once stored.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Store one event at the end of the log.

        Returns:
            True if the event was stored
        """
        pass

    @abstractmethod
    def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        """
        Events that refer to one record.

        Returns:
            Events oldest first
        """
        pass

    @abstractmethod
    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Latest events, capped at limit.

        Returns:
            Events newest first
        """
        pass


class StorageError(Exception):
    """A storage backend operation failed."""
    pass


class PersistenceError(StorageError):
    """A snapshot could not be written to durable storage."""
    pass
