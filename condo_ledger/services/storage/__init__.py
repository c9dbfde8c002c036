"""
Storage Services Package

Provides the key/value storage interface, local backends, and the
LedgerStore that keeps the whole ledger in one document.
"""

from condo_ledger.services.storage.interface import (
    KeyValueStorageInterface,
    QuotaExceededError,
    StorageError,
)
from condo_ledger.services.storage.local import InMemoryStorage, JsonFileStorage
from condo_ledger.services.storage.ledger_store import (
    LedgerStore,
    MigrationReport,
    migrate_legacy_records,
)

__all__ = [
    # Interfaces
    "KeyValueStorageInterface",
    # Exceptions
    "QuotaExceededError",
    "StorageError",
    # Backends
    "InMemoryStorage",
    "JsonFileStorage",
    # Repository
    "LedgerStore",
    "MigrationReport",
    "migrate_legacy_records",
]
