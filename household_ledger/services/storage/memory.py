"""
In-Memory Storage Implementations

Used by tests and by callers that want a throwaway ledger.
Nothing here survives the process.
"""

from typing import Optional

from household_ledger.models.audit import AuditEvent
from household_ledger.services.storage.interface import (
    AuditStorageInterface,
    PersistenceError,
    SnapshotStorageInterface,
)


class InMemoryStorage(SnapshotStorageInterface):
    """Dict-backed snapshot storage."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._slots: dict[str, str] = dict(initial or {})
        self.write_count = 0
        # Set to make every write raise, for exercising persist failures
        self.fail_writes = False

    def read(self, slot: str) -> Optional[str]:
        return self._slots.get(slot)

    def write(self, slot: str, payload: str) -> None:
        if self.fail_writes:
            raise PersistenceError(f"Write to slot {slot} refused")
        self._slots[slot] = payload
        self.write_count += 1

    def delete(self, slot: str) -> bool:
        return self._slots.pop(slot, None) is not None


class InMemoryAuditStorage(AuditStorageInterface):
    """List-backed audit log."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    @property
    def events(self) -> list[AuditEvent]:
        return list(self._events)

    def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        return [
            event for event in self._events
            if event.entity_type == entity_type and event.entity_id == entity_id
        ]

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return list(reversed(self._events))[:limit]
