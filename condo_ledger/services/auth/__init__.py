"""Authentication, session and visibility services."""

from condo_ledger.services.auth.access import can_access, visible_condominiums
from condo_ledger.services.auth.authenticator import Authenticator
from condo_ledger.services.auth.session import ADMIN_SESSION_MARKER, SessionManager

__all__ = [
    "ADMIN_SESSION_MARKER",
    "Authenticator",
    "SessionManager",
    "can_access",
    "visible_condominiums",
]
