"""
Audit Models for Household Ledger

Every ledger mutation is logged for audit purposes.
This provides:
1. A readable history of what changed and when
2. Visibility into side effects (auto savings, balance postings, cascades)
3. Debugging information when balances drift

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Side effects get their own event type so they can be traced apart
    from the mutation that caused them.
    """
    # Record lifecycle
    ENTITY_CREATED = "entity_created"
    ENTITY_UPDATED = "entity_updated"
    ENTITY_DELETED = "entity_deleted"
    ENTITY_NOT_FOUND = "entity_not_found"

    # Side effects
    AUTO_SAVINGS_POSTED = "auto_savings_posted"
    BALANCE_RESYNCED = "balance_resynced"
    TRANSFER_APPLIED = "transfer_applied"
    TRANSFER_SIDE_SKIPPED = "transfer_side_skipped"

    # Cash and settings
    CASH_BALANCE_CHANGED = "cash_balance_changed"
    SETTINGS_CHANGED = "settings_changed"

    # Guards
    MUTATION_REJECTED = "mutation_rejected"

    # Persistence
    SNAPSHOT_LOADED = "snapshot_loaded"
    SNAPSHOT_RECOVERED = "snapshot_recovered"
    PERSIST_FAILED = "persist_failed"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every mutation creates at least one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what record is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of record (e.g., 'income', 'bank_account')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the record this event relates to"
    )

    # Event details
    description: str = Field(
        ...,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


def _amount(value: Decimal) -> str:
    return str(value)


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.entity_created("income", income.id, "Income recorded")
        event = AuditEventBuilder.transfer_applied(transfer)
    """

    @staticmethod
    def entity_created(
        entity_type: str,
        entity_id: str,
        description: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTITY_CREATED,
            entity_type=entity_type,
            entity_id=entity_id,
            description=description,
            details=details or {},
        )

    @staticmethod
    def entity_updated(
        entity_type: str,
        entity_id: str,
        changed_fields: list[str],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTITY_UPDATED,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type} updated: {', '.join(changed_fields) or 'no fields'}",
            details={
                "changed_fields": changed_fields,
            },
        )

    @staticmethod
    def entity_deleted(
        entity_type: str,
        entity_id: str,
        cascaded: Optional[dict[str, list[str]]] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTITY_DELETED,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type} deleted",
            details={
                "cascaded": cascaded or {},
            },
        )

    @staticmethod
    def entity_not_found(
        entity_type: str,
        entity_id: str,
        operation: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTITY_NOT_FOUND,
            severity=AuditSeverity.WARNING,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{operation} ignored: {entity_type} {entity_id} does not exist",
            details={
                "operation": operation,
            },
        )

    @staticmethod
    def auto_savings_posted(
        income_id: str,
        account_id: str,
        amount: Decimal,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.AUTO_SAVINGS_POSTED,
            entity_type="bank_account",
            entity_id=account_id,
            description=f"Auto savings of {amount} posted from income {income_id}",
            details={
                "income_id": income_id,
                "amount": _amount(amount),
            },
        )

    @staticmethod
    def balance_resynced(
        income_id: str,
        account_id: str,
        delta: Decimal,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BALANCE_RESYNCED,
            entity_type="bank_account",
            entity_id=account_id,
            description=f"Auto savings posting adjusted by {delta} for income {income_id}",
            details={
                "income_id": income_id,
                "delta": _amount(delta),
            },
        )

    @staticmethod
    def transfer_applied(
        transfer_id: str,
        amount: Decimal,
        source: str,
        destination: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSFER_APPLIED,
            entity_type="transfer",
            entity_id=transfer_id,
            description=f"Transferred {amount} from {source} to {destination}",
            details={
                "amount": _amount(amount),
                "from": source,
                "to": destination,
            },
        )

    @staticmethod
    def transfer_side_skipped(
        transfer_id: str,
        side: str,
        account_id: Optional[str],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSFER_SIDE_SKIPPED,
            severity=AuditSeverity.WARNING,
            entity_type="transfer",
            entity_id=transfer_id,
            description=f"Transfer {side} side skipped: bank account {account_id} not found",
            details={
                "side": side,
                "account_id": account_id,
            },
        )

    @staticmethod
    def cash_balance_changed(
        previous: Decimal,
        current: Decimal,
        mode: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CASH_BALANCE_CHANGED,
            entity_type="cash",
            description=f"Cash balance {mode}: {previous} -> {current}",
            details={
                "mode": mode,
                "previous": _amount(previous),
                "current": _amount(current),
            },
        )

    @staticmethod
    def settings_changed(
        setting: str,
        action: str,
        value: Any = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SETTINGS_CHANGED,
            entity_type="settings",
            description=f"Setting {setting} {action}",
            details={
                "setting": setting,
                "action": action,
                "value": value,
            },
        )

    @staticmethod
    def mutation_rejected(
        operation: str,
        reason: str,
        entity_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MUTATION_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_id=entity_id,
            description=f"{operation} rejected",
            error_message=reason,
            details={
                "operation": operation,
            },
        )

    @staticmethod
    def snapshot_loaded(
        slot: str,
        counts: dict[str, int],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_LOADED,
            entity_type="snapshot",
            description=f"Ledger snapshot loaded from slot {slot}",
            details={
                "slot": slot,
                "counts": counts,
            },
        )

    @staticmethod
    def snapshot_recovered(
        slot: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_RECOVERED,
            severity=AuditSeverity.WARNING,
            entity_type="snapshot",
            description=f"Malformed snapshot in slot {slot}; started with an empty ledger",
            error_message=error_message,
            details={
                "slot": slot,
            },
        )

    @staticmethod
    def persist_failed(
        slot: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PERSIST_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="snapshot",
            description=f"Failed to persist ledger snapshot to slot {slot}",
            error_message=error_message,
            details={
                "slot": slot,
            },
        )
