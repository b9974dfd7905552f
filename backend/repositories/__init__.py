"""Persistence layer: abstract interface and implementations."""

from .base import StoreProtocol
from .file_store import FileStore
from .memory_store import MemoryStore

__all__ = ["StoreProtocol", "FileStore", "MemoryStore", "build_backend"]


def build_backend(settings) -> StoreProtocol:
    """Construct the key-value backend selected by PWA_STORAGE."""
    if settings.PWA_STORAGE == "memory":
        return MemoryStore(quota_bytes=settings.PWA_QUOTA_BYTES)
    return FileStore(settings.PWA_DATA_DIR, quota_bytes=settings.PWA_QUOTA_BYTES)
