"""
Data Models Package

This package contains all Pydantic models used in Condo Ledger.
All data flowing through the system must conform to these schemas.
"""

from condo_ledger.models.ledger import (
    ADMIN_USER_ID,
    DEFAULT_CATEGORIES,
    Condominium,
    Dataset,
    Movement,
    MovementFilter,
    MovementKind,
    PeriodFilter,
    ReportingPeriod,
    Statistics,
    User,
)
from condo_ledger.models.results import ConstructionResult, Err, Ok
from condo_ledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "ADMIN_USER_ID",
    "DEFAULT_CATEGORIES",
    "Condominium",
    "Dataset",
    "Movement",
    "MovementFilter",
    "MovementKind",
    "PeriodFilter",
    "ReportingPeriod",
    "Statistics",
    "User",
    # Construction results
    "ConstructionResult",
    "Err",
    "Ok",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
