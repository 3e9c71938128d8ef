"""
Local File Storage Implementation

DESIGN DECISION: Each key is one file under a data directory because:
1. The user can inspect or copy their data directly
2. No database setup required
3. Replacing one file is atomic on the same filesystem

TRADEOFFS:
- No transactions across keys (the backup snapshot is written before the
  primary record, so a crash leaves at worst an extra backup)
- Single writer assumed
"""

import os
import re
import tempfile
from pathlib import Path
from typing import Optional

import structlog
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from portfolio_tracker.services.storage.interface import (
    KeyValueStore,
    StorageError,
    StorageUnavailableError,
)


logger = structlog.get_logger(__name__)

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.\-]+$")


class JsonFileStore(KeyValueStore):
    """
    File-backed key-value store.

    Values are written as-is (the persistence service stores JSON text)
    to <data_dir>/<key>.json.
    """

    def __init__(self, data_dir: Path):
        self._data_dir = Path(data_dir)

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def _path_for(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise StorageError(f"Invalid storage key: {key!r}")
        return self._data_dir / f"{key}.json"

    def _ensure_dir(self) -> None:
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageUnavailableError(
                f"Cannot create data directory {self._data_dir}: {e}"
            )

    def get(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(f"Failed to read {key}: {e}")

    @retry(
        retry=retry_if_exception_type(OSError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
        reraise=True,
    )
    def _write_atomic(self, path: Path, value: str) -> None:
        fd, tmp_name = tempfile.mkstemp(dir=self._data_dir, prefix=".tmp-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
            os.replace(tmp_name, path)
        except Exception:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def set(self, key: str, value: str) -> bool:
        path = self._path_for(key)
        self._ensure_dir()
        try:
            self._write_atomic(path, value)
        except OSError as e:
            logger.error("storage_write_failed", key=key, error=str(e))
            raise StorageError(f"Failed to write {key}: {e}")
        return True

    def remove(self, key: str) -> None:
        path = self._path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to remove {key}: {e}")


class InMemoryStore(KeyValueStore):
    """
    Dictionary-backed store for tests and for running without a disk.
    """

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> bool:
        self._data[key] = value
        return True

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)
