"""
Shared fixtures.

Everything runs on in-memory storage with the cheapest allowed PBKDF2
cost, so the suite never touches the working directory and stays fast.
"""

import pytest

from condo_ledger.config import (
    AdminSettings,
    AppSettings,
    SecuritySettings,
    Settings,
    StorageSettings,
)
from condo_ledger.services.storage import InMemoryStorage, LedgerStore


ADMIN_EMAIL = "admin@condo.test"
ADMIN_PASSWORD = "adminpass"
FAST_ITERATIONS = 1_000


class CountingStorage(InMemoryStorage):
    """InMemoryStorage that counts reads and writes."""

    def __init__(self, max_bytes=None):
        super().__init__(max_bytes=max_bytes)
        self.reads = 0
        self.writes = 0

    def get_item(self, key):
        self.reads += 1
        return super().get_item(key)

    def set_item(self, key, value):
        self.writes += 1
        super().set_item(key, value)


@pytest.fixture
def settings():
    return Settings(
        storage=StorageSettings(backend="memory"),
        admin=AdminSettings(email=ADMIN_EMAIL, password=ADMIN_PASSWORD),
        security=SecuritySettings(pbkdf2_iterations=FAST_ITERATIONS),
        app=AppSettings(log_level="WARNING"),
    )


@pytest.fixture
def storage():
    return CountingStorage()


@pytest.fixture
def store(storage, settings):
    return LedgerStore(storage, settings=settings.storage)
