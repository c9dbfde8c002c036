"""
Ledger Store

DESIGN DECISION: The whole ledger is one document (see Dataset) kept under
a single storage key. Every operation is load -> mutate -> save:
- Exactly one load per operation
- Exactly one save, and only when something changed
- Both sides of a relation (condominium list and owner's id list) are
  updated in memory before that single save

TRADEOFFS:
- Rewriting the whole document on every change is wasteful but trivially
  consistent, and a condominium ledger is small
- No cross-process locking: two processes sharing the same storage race
  and the last save wins. Within one process operations run to
  completion one after another, so they never interleave

Failures follow one rule each:
- load never raises; unreadable data means starting fresh
- save returns False instead of raising
- a mutation whose save failed raises PersistenceError
- a missing condominium/movement is None/False, never an exception
"""

from typing import NamedTuple, Optional

import structlog

from condo_ledger.audit import AuditLogger
from condo_ledger.config import StorageSettings, get_settings
from condo_ledger.exceptions import ConflictError, PersistenceError
from condo_ledger.models.ledger import Condominium, Dataset, Movement, User
from condo_ledger.services.storage.interface import (
    KeyValueStorageInterface,
    StorageError,
)
from condo_ledger.validation.validator import check_condominium_name


logger = structlog.get_logger(__name__)


class MigrationReport(NamedTuple):
    """Outcome of migrate_legacy_records."""
    dataset: Dataset
    changed: bool
    owner_user_id: Optional[int]
    condominium_ids: list[int]


def _repair_counter(current: int, ids: list[int]) -> int:
    """A counter must stay above every id ever handed out that is still in use."""
    highest = max(ids, default=0)
    return max(current, highest + 1)


def migrate_legacy_records(
    dataset: Dataset,
    default_owner_email: str,
) -> MigrationReport:
    """
    Repair a dataset written by an older version.

    - Condominiums without an owner are given to the first user. If there
      is no user at all, an admin-like owner is synthesized. Its verifier
      is empty, so nobody can log in as it.
    - Movements without a condominium id take their parent's id.
    - Id counters are moved above the largest id in use.

    Pure: the input is not modified. Running it on its own output changes
    nothing.
    """
    migrated = dataset.model_copy(deep=True)
    adopted: list[int] = []
    owner: Optional[User] = None

    ownerless = [c for c in migrated.condominiums if not c.owner_user_id]
    if ownerless:
        if not migrated.users:
            migrated.users.append(User(
                id=migrated.next_user_id,
                email=default_owner_email,
                password_hash="",
                condominium_ids=[],
                is_admin=True,
            ))
            migrated.next_user_id += 1

        owner = migrated.users[0]
        for condominium in ownerless:
            condominium.owner_user_id = owner.id
            if condominium.id not in owner.condominium_ids:
                owner.condominium_ids.append(condominium.id)
            adopted.append(condominium.id)

    for condominium in migrated.condominiums:
        for movement in condominium.movements:
            if not movement.condominium_id:
                movement.condominium_id = condominium.id

    migrated.next_user_id = _repair_counter(
        migrated.next_user_id,
        [u.id for u in migrated.users],
    )
    migrated.next_condominium_id = _repair_counter(
        migrated.next_condominium_id,
        [c.id for c in migrated.condominiums],
    )
    migrated.next_movement_id = _repair_counter(
        migrated.next_movement_id,
        [m.id for c in migrated.condominiums for m in c.movements],
    )

    return MigrationReport(
        dataset=migrated,
        changed=migrated != dataset,
        owner_user_id=owner.id if owner else None,
        condominium_ids=adopted,
    )


class LedgerStore:
    """
    Repository over the single dataset document.

    Returned entities are copies detached from storage; changing them has
    no effect until they are passed back to an add/rename method.
    """

    def __init__(
        self,
        storage: KeyValueStorageInterface,
        settings: Optional[StorageSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._settings = settings or get_settings().storage
        self._audit_logger = audit_logger or AuditLogger()

    # -------------------------------------------------------------------------
    # Document level
    # -------------------------------------------------------------------------

    def _read(self) -> tuple[Dataset, bool]:
        """
        Read and migrate the document without writing anything.

        Returns (dataset, migrated). Mutations fold a pending migration into
        their own save.
        """
        try:
            raw = self._storage.get_item(self._settings.dataset_key)
        except StorageError as e:
            self._audit_logger.log_dataset_load_failed(str(e))
            return Dataset(), False

        if raw is None:
            return Dataset(), False

        try:
            dataset = Dataset.model_validate_json(raw)
        except ValueError as e:
            self._audit_logger.log_dataset_load_failed(str(e))
            return Dataset(), False

        report = migrate_legacy_records(dataset, self._settings.legacy_owner_email)
        if report.condominium_ids:
            self._audit_logger.log_legacy_migration(
                owner_user_id=report.owner_user_id,
                condominium_ids=report.condominium_ids,
            )
        return report.dataset, report.changed

    def load(self) -> Dataset:
        """
        Load the dataset. Never raises.

        A missing or unreadable document yields a fresh dataset. A migrated
        document is written back once.
        """
        dataset, migrated = self._read()
        if migrated and not self.save(dataset):
            logger.warning("migration_not_persisted")
        return dataset

    def save(self, dataset: Dataset) -> bool:
        """
        Replace the stored document.

        Returns False (and logs) on serialization or storage failure.
        """
        try:
            payload = dataset.model_dump_json(by_alias=True)
            self._storage.set_item(self._settings.dataset_key, payload)
        except (StorageError, ValueError, TypeError) as e:
            self._audit_logger.log_save_failed(str(e))
            return False
        return True

    def reset(self) -> bool:
        """Drop the stored document; the next load starts fresh."""
        try:
            self._storage.remove_item(self._settings.dataset_key)
        except StorageError as e:
            self._audit_logger.log_save_failed(str(e))
            return False
        return True

    def _commit(self, dataset: Dataset) -> None:
        if not self.save(dataset):
            raise PersistenceError("Your changes could not be saved. Please try again.")

    # -------------------------------------------------------------------------
    # Condominiums
    # -------------------------------------------------------------------------

    def list_condominiums(self, owner_user_id: Optional[int] = None) -> list[Condominium]:
        """All condominiums, or only those owned by `owner_user_id`."""
        dataset = self.load()
        if owner_user_id is None:
            return dataset.condominiums
        return [c for c in dataset.condominiums if c.owner_user_id == owner_user_id]

    def get_condominium(self, condominium_id: int) -> Optional[Condominium]:
        return self.load().find_condominium(condominium_id)

    def add_condominium(self, condominium: Condominium) -> Optional[Condominium]:
        """
        Store a new condominium.

        Returns None if the owner does not exist.
        """
        dataset, _ = self._read()
        owner = dataset.find_user(condominium.owner_user_id)
        if owner is None:
            return None

        stored = condominium.model_copy(
            deep=True,
            update={"id": dataset.next_condominium_id},
        )
        dataset.next_condominium_id += 1
        dataset.condominiums.append(stored)
        owner.condominium_ids.append(stored.id)

        self._commit(dataset)
        logger.debug("condominium_added", condominium_id=stored.id, owner_user_id=owner.id)
        return stored

    def rename_condominium(self, condominium_id: int, name: str) -> Optional[Condominium]:
        """
        Rename a condominium. Renaming is the only update allowed.

        Raises:
            ValidationError: If the new name is blank

        Returns None if the condominium does not exist.
        """
        new_name = check_condominium_name(name).unwrap()

        dataset, _ = self._read()
        condominium = dataset.find_condominium(condominium_id)
        if condominium is None:
            return None

        condominium.name = new_name
        self._commit(dataset)
        return condominium

    def remove_condominium(self, condominium_id: int) -> bool:
        """
        Delete a condominium and its movements.

        The id leaves the root list and every user's id list in the same save.
        """
        dataset, _ = self._read()
        condominium = dataset.find_condominium(condominium_id)
        if condominium is None:
            return False

        dataset.condominiums = [
            c for c in dataset.condominiums if c.id != condominium_id
        ]
        for user in dataset.users:
            if condominium_id in user.condominium_ids:
                user.condominium_ids = [
                    cid for cid in user.condominium_ids if cid != condominium_id
                ]

        self._commit(dataset)
        logger.debug("condominium_removed", condominium_id=condominium_id)
        return True

    # -------------------------------------------------------------------------
    # Movements
    # -------------------------------------------------------------------------

    def list_movements(self, condominium_id: int) -> list[Movement]:
        """Movements of a condominium in insertion order; empty if unknown."""
        condominium = self.get_condominium(condominium_id)
        return condominium.movements if condominium else []

    def add_movement(self, condominium_id: int, movement: Movement) -> Optional[Movement]:
        """
        Append a movement to a condominium.

        Returns None if the condominium does not exist.
        """
        dataset, _ = self._read()
        condominium = dataset.find_condominium(condominium_id)
        if condominium is None:
            return None

        stored = movement.model_copy(update={
            "id": dataset.next_movement_id,
            "condominium_id": condominium_id,
        })
        dataset.next_movement_id += 1
        condominium.movements.append(stored)

        self._commit(dataset)
        logger.debug("movement_added", movement_id=stored.id, condominium_id=condominium_id)
        return stored

    def remove_movement(self, condominium_id: int, movement_id: int) -> bool:
        """Delete a movement; False unless both ids resolve."""
        dataset, _ = self._read()
        condominium = dataset.find_condominium(condominium_id)
        if condominium is None:
            return False

        remaining = [m for m in condominium.movements if m.id != movement_id]
        if len(remaining) == len(condominium.movements):
            return False

        condominium.movements = remaining
        self._commit(dataset)
        return True

    # -------------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------------

    def list_users(self) -> list[User]:
        return self.load().users

    def get_user(self, user_id: int) -> Optional[User]:
        return self.load().find_user(user_id)

    def get_user_by_email(self, email: str) -> Optional[User]:
        """Case-insensitive lookup."""
        return self.load().find_user_by_email(email)

    def add_user(self, user: User) -> User:
        """
        Store a new user.

        Raises:
            ConflictError: If the email (in any letter case) is taken
        """
        email = user.email.strip().lower()

        dataset, _ = self._read()
        if dataset.find_user_by_email(email) is not None:
            raise ConflictError("This email is already registered", value=email)

        stored = user.model_copy(
            deep=True,
            update={"id": dataset.next_user_id, "email": email},
        )
        dataset.next_user_id += 1
        dataset.users.append(stored)

        self._commit(dataset)
        return stored

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    def list_categories(self) -> list[str]:
        return self.load().categories

    def add_category(self, name: str) -> bool:
        """
        Append a category.

        False if the name is blank or already present (exact match).
        """
        if not isinstance(name, str) or not name.strip():
            return False
        category = name.strip()

        dataset, _ = self._read()
        if category in dataset.categories:
            return False

        dataset.categories.append(category)
        self._commit(dataset)
        return True
