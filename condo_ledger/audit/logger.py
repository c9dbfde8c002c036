"""
Audit Logger

DESIGN DECISION: Every significant action in the system is logged.
This provides:
1. Traceability of changes to the ledger
2. Debugging capability when a save fails or a document is unreadable
3. A record of failed login attempts

The audit logger:
- Is synchronous, like the rest of the core
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events
"""

import logging
from typing import Any, Callable, Optional
from uuid import UUID, uuid4

import structlog

from condo_ledger.models.audit import AuditEvent, AuditEventBuilder


logger = structlog.get_logger(__name__)


def configure_logging(log_level: str = "INFO") -> None:
    """
    Configure structlog and the stdlib root logger.

    Called once by create_app_components; safe to call again.
    """
    logging.basicConfig(format="%(message)s", level=log_level.upper())
    logging.getLogger().setLevel(log_level.upper())

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


class AuditLogger:
    """
    Central audit logging service.

    Writes every event as a structured log record. The level follows the
    event severity.
    """

    def __init__(self, logger_name: str = "condo_ledger.audit"):
        self._logger = structlog.get_logger(logger_name)

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns False if the record could not be written; never raises.
        """
        try:
            self._write(event)
        except Exception:
            # Audit trail must not break the main flow
            return False

        return True

    def _write(self, event: AuditEvent) -> None:
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        elif event.severity.value == "debug":
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

    def _record(self, build: Callable[..., AuditEvent], **fields: Any) -> bool:
        """
        Build an event and log it.

        Never raises, including when the event itself fails validation.
        Callers log after their change was saved.
        """
        try:
            self._write(build(**fields))
        except Exception as e:
            logger.warning("audit_event_dropped", builder=build.__name__, error=str(e))
            return False

        return True

    def log_user_registered(
        self,
        user_id: int,
        email: str,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        """Log a new registration."""
        return self._record(
            AuditEventBuilder.user_registered,
            user_id=user_id,
            email=email,
            correlation_id=correlation_id,
        )

    def log_login_succeeded(
        self,
        user_id: int,
        is_admin: bool,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        return self._record(
            AuditEventBuilder.login_succeeded,
            user_id=user_id,
            is_admin=is_admin,
            correlation_id=correlation_id,
        )

    def log_login_failed(
        self,
        email: str,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        return self._record(
            AuditEventBuilder.login_failed,
            email=email,
            correlation_id=correlation_id,
        )

    def log_logged_out(self, user_id: Optional[int]) -> bool:
        return self._record(AuditEventBuilder.logged_out, user_id=user_id)

    def log_condominium_created(
        self,
        condominium_id: int,
        name: str,
        owner_user_id: int,
    ) -> bool:
        return self._record(
            AuditEventBuilder.condominium_created,
            condominium_id=condominium_id,
            name=name,
            owner_user_id=owner_user_id,
        )

    def log_condominium_renamed(
        self,
        condominium_id: int,
        name: str,
        actor_id: int,
    ) -> bool:
        return self._record(
            AuditEventBuilder.condominium_renamed,
            condominium_id=condominium_id,
            name=name,
            actor_id=actor_id,
        )

    def log_condominium_deleted(self, condominium_id: int, actor_id: int) -> bool:
        return self._record(
            AuditEventBuilder.condominium_deleted,
            condominium_id=condominium_id,
            actor_id=actor_id,
        )

    def log_movement_added(
        self,
        movement_id: int,
        condominium_id: int,
        kind: str,
        amount_minor_units: int,
        actor_id: int,
    ) -> bool:
        return self._record(
            AuditEventBuilder.movement_added,
            movement_id=movement_id,
            condominium_id=condominium_id,
            kind=kind,
            amount_minor_units=amount_minor_units,
            actor_id=actor_id,
        )

    def log_movement_deleted(
        self,
        movement_id: int,
        condominium_id: int,
        actor_id: int,
    ) -> bool:
        return self._record(
            AuditEventBuilder.movement_deleted,
            movement_id=movement_id,
            condominium_id=condominium_id,
            actor_id=actor_id,
        )

    def log_category_added(self, name: str, actor_id: Optional[int] = None) -> bool:
        return self._record(
            AuditEventBuilder.category_added,
            name=name,
            actor_id=actor_id,
        )

    def log_access_denied(
        self,
        actor_id: int,
        entity_type: str,
        entity_id: int,
    ) -> bool:
        """Log an attempt to reach another user's data."""
        return self._record(
            AuditEventBuilder.access_denied,
            actor_id=actor_id,
            entity_type=entity_type,
            entity_id=entity_id,
        )

    def log_dataset_load_failed(self, error_message: str) -> bool:
        return self._record(
            AuditEventBuilder.dataset_load_failed,
            error_message=error_message,
        )

    def log_save_failed(self, error_message: str) -> bool:
        return self._record(
            AuditEventBuilder.save_failed,
            error_message=error_message,
        )

    def log_legacy_migration(
        self,
        owner_user_id: int,
        condominium_ids: list[int],
    ) -> bool:
        return self._record(
            AuditEventBuilder.legacy_migration_applied,
            owner_user_id=owner_user_id,
            condominium_ids=condominium_ids,
        )


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a user action that spans several steps
    (e.g., register and then log in).
    """
    return uuid4()
