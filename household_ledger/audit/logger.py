"""
Audit Logger

DESIGN DECISION: Every ledger mutation leaves an audit trail.
With it we can:
1. Trace how a balance got to its current value
2. Explain drift between savings rows and bank postings
3. Show the user a history of what changed

How events flow:
- Each event becomes one structured log line, at the level its severity maps to
- It is then appended to the audit sink when one is attached
- A failing sink is logged and reported, but never fails the mutation
"""

import logging
from typing import Iterable, Optional

import structlog

from household_ledger.models.audit import AuditEvent, AuditSeverity
from household_ledger.services.storage import AuditStorageInterface


LOGGER_NAME = "household_ledger"

# One JSON line per event, routed through stdlib logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

_LEVELS = {
    AuditSeverity.DEBUG: logging.DEBUG,
    AuditSeverity.INFO: logging.INFO,
    AuditSeverity.WARNING: logging.WARNING,
    AuditSeverity.ERROR: logging.ERROR,
    AuditSeverity.CRITICAL: logging.ERROR,
}


def set_log_level(level: str) -> None:
    """Set the level of the household_ledger stdlib logger tree."""
    logging.getLogger(LOGGER_NAME).setLevel(level)


class AuditLogger:
    """
    Writes ledger audit events.

    Destinations:
    1. The structlog logger ``household_ledger.audit``
    2. An optional AuditStorageInterface sink the caller can query later
    """

    def __init__(self, storage: Optional[AuditStorageInterface] = None):
        """
        Args:
            storage: Sink that keeps events for later lookup.
                    Without one, events only reach the log.
        """
        self._storage = storage
        self._logger = structlog.get_logger(f"{LOGGER_NAME}.audit")

    @property
    def storage(self) -> Optional[AuditStorageInterface]:
        return self._storage

    def log(self, event: AuditEvent) -> bool:
        """
        Record one event.

        Returns False only when an attached sink refused the event.
        """
        self._logger.log(_LEVELS[event.severity], "audit_event", **event.to_log_dict())

        if self._storage is None:
            return True
        try:
            return self._storage.append_event(event)
        except Exception as e:
            # Sink failures never propagate to the mutation
            self._logger.error(
                "audit_sink_failed",
                error=str(e),
                event_id=str(event.event_id),
                event_type=event.event_type.value,
            )
            return False

    def log_all(self, events: Iterable[AuditEvent]) -> None:
        for event in events:
            self.log(event)
