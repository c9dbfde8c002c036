"""
Audit Models for Condo Ledger

Every significant action in the system is logged for audit purposes.
This provides:
1. Traceability of who changed what
2. Debugging information when a save fails or a document is unreadable
3. A record of failed logins

DESIGN DECISION: Audit events are append-only. We never modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Accounts and sessions
    USER_REGISTERED = "user_registered"
    LOGIN_SUCCEEDED = "login_succeeded"
    LOGIN_FAILED = "login_failed"
    LOGGED_OUT = "logged_out"

    # Condominiums
    CONDOMINIUM_CREATED = "condominium_created"
    CONDOMINIUM_RENAMED = "condominium_renamed"
    CONDOMINIUM_DELETED = "condominium_deleted"

    # Movements and categories
    MOVEMENT_ADDED = "movement_added"
    MOVEMENT_DELETED = "movement_deleted"
    CATEGORY_ADDED = "category_added"

    # Access control
    ACCESS_DENIED = "access_denied"

    # Persistence
    DATASET_LOAD_FAILED = "dataset_load_failed"
    SAVE_FAILED = "save_failed"
    LEGACY_MIGRATION_APPLIED = "legacy_migration_applied"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


MAX_QUOTED_LENGTH = 80


def _quote(text: str) -> str:
    """User input shortened to fit a description; the full value goes in details."""
    if len(text) <= MAX_QUOTED_LENGTH:
        return text
    return text[:MAX_QUOTED_LENGTH - 3] + "..."


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
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

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'user', 'condominium', 'movement')"
    )
    entity_id: Optional[int] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Who did it (0 is the administrator)
    actor_id: Optional[int] = Field(
        default=None,
        description="User id of whoever triggered the event"
    )

    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., register then login)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )

    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

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
            "actor_id": self.actor_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.user_registered(user_id, email)
        event = AuditEventBuilder.movement_added(movement_id, condominium_id, ...)
    """

    @staticmethod
    def user_registered(
        user_id: int,
        email: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_REGISTERED,
            entity_type="user",
            entity_id=user_id,
            actor_id=user_id,
            correlation_id=correlation_id,
            description=f"User registered: {_quote(email)}",
            details={"email": email},
            is_user_action=True,
        )

    @staticmethod
    def login_succeeded(
        user_id: int,
        is_admin: bool,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_SUCCEEDED,
            entity_type="user",
            entity_id=user_id,
            actor_id=user_id,
            correlation_id=correlation_id,
            description="Administrator logged in" if is_admin else "User logged in",
            details={"is_admin": is_admin},
            is_user_action=True,
        )

    @staticmethod
    def login_failed(
        email: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="user",
            correlation_id=correlation_id,
            description="Login rejected",
            details={"email": email},
            is_user_action=True,
        )

    @staticmethod
    def logged_out(user_id: Optional[int]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGGED_OUT,
            entity_type="user",
            entity_id=user_id,
            actor_id=user_id,
            description="Session closed",
            is_user_action=True,
        )

    @staticmethod
    def condominium_created(
        condominium_id: int,
        name: str,
        owner_user_id: int
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CONDOMINIUM_CREATED,
            entity_type="condominium",
            entity_id=condominium_id,
            actor_id=owner_user_id,
            description=f"Condominium created: {_quote(name)}",
            details={"name": name, "owner_user_id": owner_user_id},
            is_user_action=True,
        )

    @staticmethod
    def condominium_renamed(
        condominium_id: int,
        name: str,
        actor_id: int
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CONDOMINIUM_RENAMED,
            entity_type="condominium",
            entity_id=condominium_id,
            actor_id=actor_id,
            description=f"Condominium renamed to: {_quote(name)}",
            details={"name": name},
            is_user_action=True,
        )

    @staticmethod
    def condominium_deleted(
        condominium_id: int,
        actor_id: int
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CONDOMINIUM_DELETED,
            entity_type="condominium",
            entity_id=condominium_id,
            actor_id=actor_id,
            description="Condominium deleted",
            is_user_action=True,
        )

    @staticmethod
    def movement_added(
        movement_id: int,
        condominium_id: int,
        kind: str,
        amount_minor_units: int,
        actor_id: int
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MOVEMENT_ADDED,
            entity_type="movement",
            entity_id=movement_id,
            actor_id=actor_id,
            description=f"Movement added ({_quote(kind)})",
            details={
                "condominium_id": condominium_id,
                "kind": kind,
                "amount_minor_units": amount_minor_units,
            },
            is_user_action=True,
        )

    @staticmethod
    def movement_deleted(
        movement_id: int,
        condominium_id: int,
        actor_id: int
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MOVEMENT_DELETED,
            entity_type="movement",
            entity_id=movement_id,
            actor_id=actor_id,
            description="Movement deleted",
            details={"condominium_id": condominium_id},
            is_user_action=True,
        )

    @staticmethod
    def category_added(name: str, actor_id: Optional[int] = None) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CATEGORY_ADDED,
            entity_type="category",
            actor_id=actor_id,
            description=f"Category added: {_quote(name)}",
            details={"name": name},
            is_user_action=True,
        )

    @staticmethod
    def access_denied(
        actor_id: int,
        entity_type: str,
        entity_id: int
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCESS_DENIED,
            severity=AuditSeverity.WARNING,
            entity_type=entity_type,
            entity_id=entity_id,
            actor_id=actor_id,
            description=f"Access denied to {entity_type} {entity_id}",
            is_user_action=True,
        )

    @staticmethod
    def dataset_load_failed(error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATASET_LOAD_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="dataset",
            description="Stored dataset unreadable, starting with an empty one",
            error_message=error_message,
        )

    @staticmethod
    def save_failed(error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="dataset",
            description="Dataset could not be saved",
            error_message=error_message,
        )

    @staticmethod
    def legacy_migration_applied(
        owner_user_id: int,
        condominium_ids: list[int]
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEGACY_MIGRATION_APPLIED,
            severity=AuditSeverity.WARNING,
            entity_type="dataset",
            description=(
                f"Assigned {len(condominium_ids)} ownerless condominium(s) "
                f"to user {owner_user_id}"
            ),
            details={
                "owner_user_id": owner_user_id,
                "condominium_ids": condominium_ids,
            },
        )
