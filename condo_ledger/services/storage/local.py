"""
Local Storage Implementations

InMemoryStorage is a dict. It backs tests and the per-session marker,
which is meant to disappear when the process ends.

JsonFileStorage keeps every key in one JSON object on disk. Writes go to a
temporary file in the same directory and are moved into place with
os.replace, so a crash mid-write leaves the previous file intact.

TRADEOFFS:
- No locking. Two processes writing the same file race and the last
  write wins. The ledger is a single-user tool and accepts this.
- The whole file is read on every get_item. Fine for a personal ledger.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

import structlog

from condo_ledger.services.storage.interface import (
    KeyValueStorageInterface,
    QuotaExceededError,
    StorageError,
)


logger = structlog.get_logger(__name__)


class InMemoryStorage(KeyValueStorageInterface):
    """
    Dict-backed storage.

    `max_bytes` caps the total size of stored values (UTF-8), mimicking
    the quota of browser storage. None means unlimited.
    """

    def __init__(self, max_bytes: Optional[int] = None):
        self._items: dict[str, str] = {}
        self._max_bytes = max_bytes

    def _size_with(self, key: str, value: str) -> int:
        total = len(value.encode("utf-8"))
        for other_key, other_value in self._items.items():
            if other_key != key:
                total += len(other_value.encode("utf-8"))
        return total

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self._max_bytes is not None:
            size = self._size_with(key, value)
            if size > self._max_bytes:
                raise QuotaExceededError(
                    f"Storage quota exceeded: {size} > {self._max_bytes} bytes"
                )
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def __len__(self) -> int:
        return len(self._items)


class JsonFileStorage(KeyValueStorageInterface):
    """File-backed storage: one JSON object mapping keys to strings."""

    def __init__(self, file_path: Union[str, Path]):
        self._file_path = Path(file_path)

    @property
    def file_path(self) -> Path:
        return self._file_path

    def _read_all(self) -> dict[str, str]:
        """Read the whole file. A missing file is an empty store."""
        try:
            raw = self._file_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            raise StorageError(f"Failed to read {self._file_path}: {e}")

        if not raw.strip():
            return {}

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageError(f"Storage file is not valid JSON: {e}")

        if not isinstance(data, dict):
            raise StorageError("Storage file does not contain a JSON object")
        return data

    def _write_all(self, data: dict[str, str]) -> None:
        directory = self._file_path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                prefix=".ledger_", suffix=".json", dir=directory
            )
        except OSError as e:
            raise StorageError(f"Failed to write {self._file_path}: {e}")

        try:
            try:
                handle = os.fdopen(fd, "w", encoding="utf-8")
            except Exception:
                # fdopen did not take ownership of the descriptor
                os.close(fd)
                raise
            with handle:
                json.dump(data, handle, ensure_ascii=False)
            os.replace(tmp_path, self._file_path)
        except OSError as e:
            raise StorageError(f"Failed to write {self._file_path}: {e}")
        finally:
            if os.path.exists(tmp_path):
                try:
                    os.remove(tmp_path)
                except OSError:
                    logger.warning("temp_file_cleanup_failed", path=tmp_path)

    def _read_for_update(self) -> dict[str, str]:
        """
        Read before a write.

        An unreadable file is replaced rather than blocking every future
        write; LedgerStore has already fallen back to a fresh dataset by then.
        """
        try:
            return self._read_all()
        except StorageError as e:
            logger.warning(
                "storage_file_replaced",
                path=str(self._file_path),
                error=str(e),
            )
            return {}

    def get_item(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        if value is not None and not isinstance(value, str):
            raise StorageError(f"Value under '{key}' is not a string")
        return value

    def set_item(self, key: str, value: str) -> None:
        data = self._read_for_update()
        data[key] = value
        self._write_all(data)

    def remove_item(self, key: str) -> None:
        data = self._read_for_update()
        if key in data:
            del data[key]
            self._write_all(data)
