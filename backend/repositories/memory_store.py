"""In-process implementation of StoreProtocol. Nothing survives a restart."""

import threading
from typing import Optional

from errors import StorageQuotaError
from .base import used_bytes


class MemoryStore:
    def __init__(self, quota_bytes: Optional[int] = None, initial: Optional[dict[str, str]] = None):
        self.quota_bytes = quota_bytes
        self._items: dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def _check_quota(self, data: dict[str, str]) -> None:
        if self.quota_bytes is not None and used_bytes(data) > self.quota_bytes:
            raise StorageQuotaError(f"Storage quota of {self.quota_bytes} bytes exceeded")

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            candidate = dict(self._items)
            candidate[key] = value
            self._check_quota(candidate)
            self._items = candidate

    def remove_item(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._items)

    def clear(self) -> None:
        with self._lock:
            self._items = {}

    def snapshot(self) -> dict[str, str]:
        return dict(self._items)

    def restore(self, snapshot: dict[str, str]) -> None:
        with self._lock:
            self._items = dict(snapshot)

    def estimate(self) -> Optional[dict]:
        if self.quota_bytes is None:
            return None
        return {"usage": used_bytes(self._items), "quota": self.quota_bytes}
