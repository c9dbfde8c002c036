"""
Domain exceptions for Condo Ledger.

The presentation layer catches these and shows the message to the user,
so every message must be readable as-is.

Hierarchy:
    LedgerError
    ├── ValidationError       → malformed or missing input
    ├── ConflictError         → duplicate email at registration
    ├── AuthenticationError   → login rejected
    └── PersistenceError      → a change could not be written

"Not found" is deliberately absent: lookups and deletions return
None / False so a condominium removed a moment ago is an ordinary outcome.
"""

from typing import Optional


class LedgerError(Exception):
    """Base exception. Catch this to handle any domain failure."""


class ValidationError(LedgerError):
    """
    Input failed a construction rule.

    `field` names the offending input when there is one, so a form can
    highlight it.
    """

    def __init__(self, reason: str, field: Optional[str] = None):
        self.reason = reason
        self.field = field
        super().__init__(reason)


class ConflictError(LedgerError):
    """A unique value (user email) is already taken."""

    def __init__(self, message: str, value: Optional[str] = None):
        self.value = value
        super().__init__(message)


class AuthenticationError(LedgerError):
    """
    Login failed.

    The message never says whether the email or the password was wrong.
    """


class PersistenceError(LedgerError):
    """The dataset could not be saved; the change was not kept."""
