"""Services package."""

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
    QuotaExceededError,
    StorageError,
)

__all__ = [
    # Auth services
    "Authenticator",
    "SessionManager",
    "can_access",
    "visible_condominiums",
    # Storage services
    "InMemoryStorage",
    "JsonFileStorage",
    "KeyValueStorageInterface",
    "LedgerStore",
    "QuotaExceededError",
    "StorageError",
]
