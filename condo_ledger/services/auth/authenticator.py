"""
Credential checks.

The administrator is not a row in the user table. Its email and verifier
come from AdminSettings and are fixed when the Authenticator is created,
so an administrator login works whatever the stored data looks like.
Its password is still checked through the same verifier mechanism as
any user's. There is no special case for an empty verifier.
"""

from typing import Optional

import structlog

from condo_ledger.config import AdminSettings, SecuritySettings, get_settings
from condo_ledger.models.ledger import ADMIN_USER_ID, User
from condo_ledger.security import hash_password, verify_password
from condo_ledger.services.storage import LedgerStore


logger = structlog.get_logger(__name__)


class Authenticator:
    """Maps (email, password) to a User, or to nothing."""

    def __init__(
        self,
        store: LedgerStore,
        admin_settings: Optional[AdminSettings] = None,
        security_settings: Optional[SecuritySettings] = None,
    ):
        if admin_settings is None or security_settings is None:
            settings = get_settings()
            admin_settings = admin_settings or settings.admin
            security_settings = security_settings or settings.security

        self._store = store
        self._admin_settings = admin_settings
        self._security = security_settings
        self._admin_verifier = self._seed_admin_verifier()

    def _seed_admin_verifier(self) -> Optional[str]:
        """Derive the administrator verifier once, at startup."""
        if not self._admin_settings.enabled:
            logger.info("admin_login_disabled")
            return None

        if self._admin_settings.password_hash:
            return self._admin_settings.password_hash

        return hash_password(
            self._admin_settings.password.get_secret_value(),
            iterations=self._security.pbkdf2_iterations,
        )

    @property
    def admin_enabled(self) -> bool:
        return self._admin_verifier is not None

    @property
    def admin_email(self) -> str:
        return self._admin_settings.email

    def admin_identity(self) -> User:
        """The synthetic administrator: id 0, sees everything, owns nothing."""
        return User(
            id=ADMIN_USER_ID,
            email=self._admin_settings.email,
            password_hash="",
            condominium_ids=[],
            is_admin=True,
        )

    def is_admin_email(self, email: str) -> bool:
        return email.strip().lower() == self._admin_settings.email

    def authenticate(self, email: str, password: str) -> Optional[User]:
        """
        Check credentials.

        The administrator is tried first. Returns None on any failure; the
        caller cannot tell an unknown email from a wrong password.
        """
        normalized = email.strip().lower()

        if self.admin_enabled and self.is_admin_email(normalized):
            if verify_password(password, self._admin_verifier):
                return self.admin_identity()
            return None

        user = self._store.get_user_by_email(normalized)
        if user is None:
            return None

        if not verify_password(password, user.password_hash):
            return None

        return user
