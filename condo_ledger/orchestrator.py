"""
Main Orchestrator for Condo Ledger

This module ties together all the components and defines the calls the
presentation layer makes:
1. Accounts (register → login → restore → logout)
2. Condominiums, movements and categories (create, rename, delete)
3. Reports (statistics, filtered movement lists, reporting periods)

DESIGN DECISION: The flows keep no state between calls. The caller
passes in the identity it got from login/restore, and whatever it has
selected on screen (condominium, period) is passed as arguments.
The only state is the persisted dataset and the session marker.

Access rule: a condominium the identity cannot see is reported exactly
like a missing one (None / False). The UI never learns it exists.
"""

import datetime as dt
from typing import Optional, Union

import structlog

from condo_ledger.audit import AuditLogger, configure_logging, create_correlation_id
from condo_ledger.config import Settings, get_settings
from condo_ledger.exceptions import AuthenticationError, ConflictError, ValidationError
from condo_ledger.models.ledger import (
    ADMIN_USER_ID,
    Condominium,
    Movement,
    MovementFilter,
    MovementKind,
    PeriodFilter,
    ReportingPeriod,
    Statistics,
    User,
)
from condo_ledger.models.money import Amount
from condo_ledger.queries import compute_statistics, reporting_periods, select_movements
from condo_ledger.services.auth import (
    Authenticator,
    SessionManager,
    can_access,
    visible_condominiums,
)
from condo_ledger.services.storage import (
    InMemoryStorage,
    JsonFileStorage,
    KeyValueStorageInterface,
    LedgerStore,
)
from condo_ledger.validation import build_condominium, build_movement, build_user


logger = structlog.get_logger(__name__)


class AccountFlow:
    """
    Registration and sessions.

    Flow:
    1. Register → validate, reject duplicates, store
    2. Login → verify, remember a session marker
    3. Restore → re-resolve the marker on the next start
    4. Logout → forget the marker
    """

    def __init__(
        self,
        store: LedgerStore,
        session: SessionManager,
        authenticator: Authenticator,
        settings: Optional[Settings] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._session = session
        self._authenticator = authenticator
        self._settings = settings or get_settings()
        self._audit_logger = audit_logger or AuditLogger()

    def register(
        self,
        email: str,
        password: str,
        confirm_password: Optional[str] = None,
    ) -> User:
        """
        Create an account and log it in.

        Raises:
            ValidationError: Bad email, short password, or confirmation mismatch
            ConflictError: Email already registered (or reserved for the administrator)
        """
        correlation_id = create_correlation_id()

        if confirm_password is not None and password != confirm_password:
            raise ValidationError("Passwords do not match", field="confirm_password")

        user = build_user(
            email,
            password,
            min_password_length=self._settings.security.min_password_length,
            iterations=self._settings.security.pbkdf2_iterations,
        ).unwrap()

        if self._authenticator.is_admin_email(user.email):
            raise ConflictError("This email is already registered", value=user.email)

        stored = self._store.add_user(user)
        self._audit_logger.log_user_registered(
            user_id=stored.id,
            email=stored.email,
            correlation_id=correlation_id,
        )

        return self.login(email, password, correlation_id=correlation_id)

    def login(self, email: str, password: str, correlation_id=None) -> User:
        """
        Log in.

        Raises:
            AuthenticationError: With a message fit to show as-is
        """
        correlation_id = correlation_id or create_correlation_id()
        try:
            user = self._session.login(email, password)
        except AuthenticationError:
            self._audit_logger.log_login_failed(
                email=(email or "").strip().lower(),
                correlation_id=correlation_id,
            )
            raise

        self._audit_logger.log_login_succeeded(
            user_id=user.id,
            is_admin=user.is_admin,
            correlation_id=correlation_id,
        )
        return user

    def logout(self) -> None:
        identity = self._session.restore()
        self._session.logout()
        self._audit_logger.log_logged_out(identity.id if identity else None)

    def current_identity(self) -> Optional[User]:
        """Who is logged in, re-read from storage; None if nobody."""
        return self._session.restore()


class CondominiumFlow:
    """Condominium, movement and category management for one identity."""

    def __init__(
        self,
        store: LedgerStore,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._audit_logger = audit_logger or AuditLogger()

    def _accessible(self, identity: User, condominium_id: int) -> Optional[Condominium]:
        """The condominium if it exists and `identity` may see it."""
        condominium = self._store.get_condominium(condominium_id)
        if condominium is None:
            return None
        if not can_access(identity, condominium):
            self._audit_logger.log_access_denied(
                actor_id=identity.id,
                entity_type="condominium",
                entity_id=condominium_id,
            )
            return None
        return condominium

    def list_visible(self, identity: User) -> list[Condominium]:
        """All condominiums for administrators, owned ones for everyone else."""
        return visible_condominiums(self._store, identity)

    def create(self, identity: User, name: str) -> Condominium:
        """
        Create a condominium owned by `identity`.

        Raises:
            ValidationError: Blank name, or the identity is the administrator
        """
        if identity.id == ADMIN_USER_ID:
            raise ValidationError(
                "The administrator account cannot own condominiums",
                field="owner_user_id",
            )

        condominium = build_condominium(name, identity.id).unwrap()
        stored = self._store.add_condominium(condominium)
        if stored is None:
            # Owner vanished between login and now
            raise ValidationError("Owner user is required", field="owner_user_id")

        self._audit_logger.log_condominium_created(
            condominium_id=stored.id,
            name=stored.name,
            owner_user_id=identity.id,
        )
        return stored

    def rename(self, identity: User, condominium_id: int, name: str) -> Optional[Condominium]:
        """None if missing or not visible. Raises ValidationError on a blank name."""
        if self._accessible(identity, condominium_id) is None:
            return None

        renamed = self._store.rename_condominium(condominium_id, name)
        if renamed is not None:
            self._audit_logger.log_condominium_renamed(
                condominium_id=condominium_id,
                name=renamed.name,
                actor_id=identity.id,
            )
        return renamed

    def delete(self, identity: User, condominium_id: int) -> bool:
        """Delete a condominium with all its movements."""
        if self._accessible(identity, condominium_id) is None:
            return False

        removed = self._store.remove_condominium(condominium_id)
        if removed:
            self._audit_logger.log_condominium_deleted(
                condominium_id=condominium_id,
                actor_id=identity.id,
            )
        return removed

    def add_movement(
        self,
        identity: User,
        condominium_id: int,
        kind: Union[str, MovementKind],
        category: str,
        description: str,
        amount: Amount,
        date: Union[str, dt.date],
    ) -> Optional[Movement]:
        """
        Record an income or expense.

        Raises:
            ValidationError: Any field fails its rule

        Returns None if the condominium is missing or not visible.
        """
        movement = build_movement(
            kind=kind,
            category=category,
            description=description,
            amount=amount,
            date=date,
            condominium_id=condominium_id,
        ).unwrap()

        if self._accessible(identity, condominium_id) is None:
            return None

        stored = self._store.add_movement(condominium_id, movement)
        if stored is not None:
            self._audit_logger.log_movement_added(
                movement_id=stored.id,
                condominium_id=condominium_id,
                kind=stored.kind.value,
                amount_minor_units=stored.amount_minor_units,
                actor_id=identity.id,
            )
        return stored

    def delete_movement(
        self,
        identity: User,
        condominium_id: int,
        movement_id: int,
    ) -> bool:
        if self._accessible(identity, condominium_id) is None:
            return False

        removed = self._store.remove_movement(condominium_id, movement_id)
        if removed:
            self._audit_logger.log_movement_deleted(
                movement_id=movement_id,
                condominium_id=condominium_id,
                actor_id=identity.id,
            )
        return removed

    def list_categories(self) -> list[str]:
        return self._store.list_categories()

    def add_category(self, name: str, identity: Optional[User] = None) -> bool:
        """False if blank or already present."""
        added = self._store.add_category(name)
        if added:
            self._audit_logger.log_category_added(
                name=name.strip(),
                actor_id=identity.id if identity else None,
            )
        return added


class ReportFlow:
    """
    Read-only reports for one condominium.

    Each call reads the store once. None means the condominium is missing
    or not visible to `identity`.
    """

    def __init__(self, store: LedgerStore):
        self._store = store

    def _movements(self, identity: User, condominium_id: int) -> Optional[list[Movement]]:
        condominium = self._store.get_condominium(condominium_id)
        if condominium is None or not can_access(identity, condominium):
            return None
        return condominium.movements

    def statistics(
        self,
        identity: User,
        condominium_id: int,
        period: Optional[PeriodFilter] = None,
    ) -> Optional[Statistics]:
        movements = self._movements(identity, condominium_id)
        if movements is None:
            return None
        return compute_statistics(movements, period)

    def movements(
        self,
        identity: User,
        condominium_id: int,
        movement_filter: Optional[MovementFilter] = None,
    ) -> Optional[list[Movement]]:
        """Filtered movements, newest first."""
        movements = self._movements(identity, condominium_id)
        if movements is None:
            return None
        return select_movements(movements, movement_filter)

    def periods(
        self,
        identity: User,
        condominium_id: int,
    ) -> Optional[list[ReportingPeriod]]:
        movements = self._movements(identity, condominium_id)
        if movements is None:
            return None
        return reporting_periods(movements)


def create_storage(settings: Settings) -> KeyValueStorageInterface:
    """Dataset storage backend selected by settings."""
    if settings.storage.backend == "memory":
        return InMemoryStorage()
    return JsonFileStorage(settings.storage.data_file)


def create_app_components(
    settings: Optional[Settings] = None,
    storage: Optional[KeyValueStorageInterface] = None,
    session_storage: Optional[KeyValueStorageInterface] = None,
) -> tuple[AccountFlow, CondominiumFlow, ReportFlow]:
    """
    Factory function to create all application components.

    Args:
        settings: Configuration; defaults to get_settings()
        storage: Dataset backend; defaults to the configured one
        session_storage: Per-session backend; defaults to a fresh
                         in-memory store, which ends with the process

    Returns:
        (account_flow, condominium_flow, report_flow)
    """
    settings = settings or get_settings()
    configure_logging("DEBUG" if settings.app.debug_mode else settings.app.log_level)

    audit_logger = AuditLogger()
    store = LedgerStore(
        storage if storage is not None else create_storage(settings),
        settings=settings.storage,
        audit_logger=audit_logger,
    )
    authenticator = Authenticator(
        store,
        admin_settings=settings.admin,
        security_settings=settings.security,
    )
    session = SessionManager(
        session_storage if session_storage is not None else InMemoryStorage(),
        authenticator=authenticator,
        store=store,
        session_key=settings.storage.session_key,
    )

    account_flow = AccountFlow(
        store=store,
        session=session,
        authenticator=authenticator,
        settings=settings,
        audit_logger=audit_logger,
    )
    condominium_flow = CondominiumFlow(store=store, audit_logger=audit_logger)
    report_flow = ReportFlow(store=store)

    logger.info(
        "app_components_created",
        environment=settings.app.app_environment,
        storage_backend=settings.storage.backend,
        admin_login_enabled=authenticator.admin_enabled,
    )

    return account_flow, condominium_flow, report_flow
