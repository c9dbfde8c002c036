"""
Session handling.

Only a marker is kept in session storage: the user's id as a decimal
string, or "admin". Restoring a session looks the user up again, so a
deleted account or a changed admin configuration takes effect at once.
"""

from typing import Optional

import structlog

from condo_ledger.exceptions import AuthenticationError, PersistenceError
from condo_ledger.models.ledger import ADMIN_USER_ID, User
from condo_ledger.services.auth.authenticator import Authenticator
from condo_ledger.services.storage import (
    KeyValueStorageInterface,
    LedgerStore,
    StorageError,
)


logger = structlog.get_logger(__name__)

ADMIN_SESSION_MARKER = "admin"


class SessionManager:
    """Login, logout and session restore over a per-session storage."""

    def __init__(
        self,
        session_storage: KeyValueStorageInterface,
        authenticator: Authenticator,
        store: LedgerStore,
        session_key: str,
    ):
        self._session_storage = session_storage
        self._authenticator = authenticator
        self._store = store
        self._session_key = session_key

    def login(self, email: str, password: str) -> User:
        """
        Authenticate and remember the identity.

        Raises:
            AuthenticationError: Blank input or rejected credentials
            PersistenceError: If session storage cannot be written
        """
        if not email or not email.strip() or not password:
            raise AuthenticationError("Email and password are required")

        user = self._authenticator.authenticate(email, password)
        if user is None:
            raise AuthenticationError("Invalid email or password")

        marker = ADMIN_SESSION_MARKER if user.id == ADMIN_USER_ID else str(user.id)
        try:
            self._session_storage.set_item(self._session_key, marker)
        except StorageError as e:
            logger.error("session_write_failed", error=str(e))
            raise PersistenceError("Your session could not be saved. Please try again.")
        return user

    def logout(self) -> None:
        """
        Forget the stored marker.

        Raises:
            PersistenceError: If session storage cannot be written
        """
        try:
            self._session_storage.remove_item(self._session_key)
        except StorageError as e:
            logger.error("session_clear_failed", error=str(e))
            raise PersistenceError("Could not log out. Please try again.")

    def marker(self) -> Optional[str]:
        """Raw stored marker, if any."""
        try:
            return self._session_storage.get_item(self._session_key)
        except StorageError as e:
            logger.warning("session_read_failed", error=str(e))
            return None

    def restore(self) -> Optional[User]:
        """
        Re-resolve the stored marker.

        Returns None when nobody is logged in, the user no longer exists,
        administrator login was disabled, or the marker is garbled.
        """
        marker = self.marker()
        if not marker:
            return None

        if marker == ADMIN_SESSION_MARKER:
            if not self._authenticator.admin_enabled:
                return None
            return self._authenticator.admin_identity()

        if not marker.isdigit():
            logger.warning("session_marker_invalid", marker=marker)
            return None

        return self._store.get_user(int(marker))
