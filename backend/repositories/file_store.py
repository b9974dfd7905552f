"""
File-based implementation of StoreProtocol.
Every key lives in one JSON object file under a configurable data directory,
rewritten atomically on each change.
"""

import json
import logging
import shutil
import threading
import time
from pathlib import Path
from typing import Optional

from errors import StorageError, StorageQuotaError
from .base import used_bytes

logger = logging.getLogger(__name__)


class FileStore:
    """localStorage-style key space persisted to `<data_dir>/<filename>`."""

    def __init__(
        self,
        data_dir: Path,
        filename: str = "storage.json",
        quota_bytes: Optional[int] = None,
    ):
        self.data_dir = Path(data_dir)
        self.path = self.data_dir / filename
        self.quota_bytes = quota_bytes
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create data directory {self.data_dir}: {e}") from e
        self._lock = threading.RLock()

    def _read(self) -> dict[str, str]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            self._quarantine(f"invalid JSON ({e})")
            return {}
        except OSError as e:
            raise StorageError(f"Cannot read {self.path}: {e}", code="storage_unavailable") from e
        if not isinstance(data, dict):
            self._quarantine("root is not an object")
            return {}
        return {str(k): v if isinstance(v, str) else json.dumps(v) for k, v in data.items()}

    def _quarantine(self, reason: str) -> None:
        # Move the unreadable file aside once; the next write starts a fresh one.
        bak = self.path.with_name(f"{self.path.name}.bak.{time.strftime('%Y%m%d_%H%M%S')}")
        logger.warning("Storage file %s unreadable (%s); moved to %s", self.path, reason, bak.name)
        try:
            self.path.replace(bak)
        except OSError as e:
            raise StorageError(f"Cannot move corrupt {self.path} aside: {e}") from e

    def _write(self, data: dict[str, str]) -> None:
        if self.quota_bytes is not None and used_bytes(data) > self.quota_bytes:
            raise StorageQuotaError(
                f"Storage quota of {self.quota_bytes} bytes exceeded "
                f"({used_bytes(data)} bytes requested)"
            )
        tmp = self.path.with_suffix(".tmp")
        try:
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            tmp.replace(self.path)
        except OSError as e:
            raise StorageError(f"Cannot write {self.path}: {e}", code="storage_unavailable") from e

    # Key-value API
    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read()
            data[key] = value
            self._write(data)

    def remove_item(self, key: str) -> None:
        with self._lock:
            data = self._read()
            if key in data:
                del data[key]
                self._write(data)

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._read())

    def clear(self) -> None:
        with self._lock:
            self._write({})

    # Transactions
    def snapshot(self) -> dict[str, str]:
        with self._lock:
            return dict(self._read())

    def restore(self, snapshot: dict[str, str]) -> None:
        with self._lock:
            self._write(dict(snapshot))

    def estimate(self) -> Optional[dict]:
        with self._lock:
            usage = used_bytes(self._read())
        if self.quota_bytes is not None:
            return {"usage": usage, "quota": self.quota_bytes}
        try:
            free = shutil.disk_usage(self.data_dir).free
        except OSError as e:
            logger.warning("disk_usage failed for %s: %s", self.data_dir, e)
            return None
        return {"usage": usage, "quota": usage + free}
