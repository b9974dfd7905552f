"""
PWA Template Persistence Layer
Settings, free-form data and the schema version, kept in a localStorage-style
key-value backend. Structure in the backend:
  <app>_settings  — JSON settings record
  <app>_data      — JSON data record (entries may carry a `timestamp` in ms)
  <app>_version   — raw schema version string

Reads never raise: absent, corrupt or unreachable values come back as the
default. Writes report success as a bool. Only initialize() lets a storage
failure through, since nothing works without storage.
"""

import asyncio
import inspect
import json
import logging
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Literal, Optional, Sequence

from pydantic import ValidationError

import migrations
from errors import InvalidBackupError, StorageError
from repositories.base import StoreProtocol
from schemas.records import ExportBundle, SettingsRecord

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS: dict[str, Any] = SettingsRecord().model_dump()
RETENTION_DAYS = 30
DAY_MS = 24 * 60 * 60 * 1000

MigrationPolicy = Literal["stamp_target", "stamp_last_success"]


def _iso_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class PersistentStore:
    """Settings, data and schema version over a StoreProtocol backend.

    Construct one per process and hand it to whatever needs persistence.
    """

    def __init__(
        self,
        backend: StoreProtocol,
        app_name: str = "pwa_template",
        *,
        current_version: str = migrations.CURRENT_VERSION,
        versions: Sequence[str] = migrations.VERSIONS,
        migration_registry: Optional[dict[str, Callable]] = None,
        migration_policy: MigrationPolicy = "stamp_target",
        retention_days: int = RETENTION_DAYS,
        backup_dir: Optional[Path] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.backend = backend
        self.app_name = app_name
        self.storage_key = f"{app_name}_data"
        self.settings_key = f"{app_name}_settings"
        self.version_key = f"{app_name}_version"
        self.current_version = current_version
        self.versions = tuple(versions)
        self.migrations = dict(migrations.MIGRATIONS if migration_registry is None else migration_registry)
        self.migration_policy = migration_policy
        self.retention_days = retention_days
        self.backup_dir = Path(backup_dir) if backup_dir else None
        self.default_settings = dict(DEFAULT_SETTINGS)
        self._clock = clock
        self._init_task: Optional[asyncio.Future] = None
        self.is_initialized = False

    # ── Lifecycle ──────────────────────────────────────────────────────

    async def initialize(self) -> None:
        """Run migrations and apply default settings, once per store.

        Concurrent callers share the same run. A run that fails with a
        storage error is not remembered, so the next call tries again.
        """
        if self.is_initialized:
            return
        if self._init_task is None:
            self._init_task = asyncio.ensure_future(self._initialize())
        task = self._init_task
        try:
            # A cancelled caller must not cancel the run other callers share.
            await asyncio.shield(task)
        except BaseException:
            failed = task.done() and (task.cancelled() or task.exception() is not None)
            if failed and self._init_task is task:
                self._init_task = None
            raise
        self.is_initialized = True

    async def _initialize(self) -> None:
        logger.info("Initializing storage (%s, target schema %s)", self.app_name, self.current_version)
        try:
            await self.check_for_migration()
            # Read errors propagate here; only absent or undecodable settings count as none.
            current = self._decode(self.settings_key, self.backend.get_item(self.settings_key))
            if not isinstance(current, dict):
                current = {}
            missing = {k: v for k, v in self.default_settings.items() if k not in current}
            if missing:
                self.backend.set_item(self.settings_key, json.dumps({**missing, **current}))
        except StorageError as e:
            logger.error("Failed to initialize storage: %s", e, exc_info=True)
            raise
        logger.info("Storage initialized")

    # ── Settings ───────────────────────────────────────────────────────

    def get_settings(self) -> Optional[dict]:
        settings = self._read_json(self.settings_key)
        if settings is not None and not isinstance(settings, dict):
            logger.warning("Settings under %s are not an object; ignoring", self.settings_key)
            return None
        return settings

    def set_settings(self, settings: dict) -> bool:
        """Shallow-merge `settings` over what is stored. Pass only changed keys."""
        merged = {**(self.get_settings() or {}), **settings}
        return self.set_item(self.settings_key, merged)

    def update_settings(self, updates: dict) -> bool:
        current = self.get_settings() or self.default_settings
        return self.set_settings({**current, **updates})

    # ── Generic items ──────────────────────────────────────────────────

    def get_item(self, key: str, default: Any = None) -> Any:
        value = self._read_json(key)
        return default if value is None else value

    def set_item(self, key: str, value: Any) -> bool:
        try:
            self.backend.set_item(key, json.dumps(value))
            return True
        except (StorageError, TypeError, ValueError) as e:
            logger.error("Failed to set item %s: %s", key, e)
            return False

    def remove_item(self, key: str) -> bool:
        try:
            self.backend.remove_item(key)
            return True
        except StorageError as e:
            logger.error("Failed to remove item %s: %s", key, e)
            return False

    def _read_json(self, key: str) -> Any:
        try:
            raw = self.backend.get_item(key)
        except StorageError as e:
            logger.error("Failed to get item %s: %s", key, e)
            return None
        return self._decode(key, raw)

    def _decode(self, key: str, raw: Optional[str]) -> Any:
        if raw is None or raw == "":
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("Failed to decode item %s: %s", key, e)
            return None

    # ── Data ───────────────────────────────────────────────────────────

    def get_data(self) -> dict:
        data = self.get_item(self.storage_key, {})
        return data if isinstance(data, dict) else {}

    def set_data(self, data: dict) -> bool:
        return self.set_item(self.storage_key, data)

    def update_data(self, updates: dict) -> bool:
        return self.set_data({**self.get_data(), **updates})

    def clear_data(self) -> bool:
        return self.remove_item(self.storage_key)

    # ── Migration ──────────────────────────────────────────────────────

    def get_version(self) -> Optional[str]:
        try:
            return self.backend.get_item(self.version_key)
        except StorageError as e:
            logger.error("Failed to read schema version: %s", e)
            return None

    async def check_for_migration(self) -> None:
        stored = self.backend.get_item(self.version_key)
        if not stored:
            # Fresh store: nothing to migrate, just stamp it.
            self.backend.set_item(self.version_key, self.current_version)
            return
        if stored == self.current_version:
            return
        logger.info("Migrating data from version %s to %s", stored, self.current_version)
        reached = await self.migrate_data(stored, self.current_version)
        if self.migration_policy == "stamp_last_success":
            if reached != stored:
                self.backend.set_item(self.version_key, reached)
            return
        self.backend.set_item(self.version_key, self.current_version)

    async def migrate_data(self, from_version: str, to_version: str) -> str:
        """Apply pending migrations in order; return the last version reached.

        Each step runs against a snapshot of the backend and is rolled back
        if it raises. The first failure ends the batch. Storage errors while
        taking or restoring a snapshot propagate.
        """
        pending = migrations.versions_between(from_version, to_version, self.versions)
        if not pending:
            # Unknown or downgraded layouts are stamped, not migrated.
            return to_version
        reached = from_version
        for version in pending:
            migration = self.migrations.get(version)
            if migration is None:
                reached = version
                continue
            snapshot = self.backend.snapshot()
            try:
                logger.info("Running migration for version %s", version)
                result = migration(self)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error("Data migration to %s failed: %s", version, e, exc_info=True)
                self.backend.restore(snapshot)
                return reached
            reached = version
        logger.info("Data migration completed successfully")
        return reached

    # ── Quota ──────────────────────────────────────────────────────────

    def get_storage_usage(self) -> int:
        try:
            total = 0
            for key in self.backend.keys():
                value = self.backend.get_item(key)
                if value is not None:
                    total += len(key) + len(value)
            return total
        except StorageError as e:
            logger.error("Failed to calculate storage usage: %s", e)
            return 0

    async def get_storage_quota(self) -> Optional[dict]:
        estimate = getattr(self.backend, "estimate", None)
        if estimate is None:
            return None
        try:
            return await asyncio.to_thread(estimate)
        except StorageError as e:
            logger.error("Failed to get storage quota: %s", e)
            return None

    async def cleanup_old_data(self) -> None:
        """Drop data entries without a timestamp or older than the retention window."""
        try:
            now = self._clock() * 1000
            max_age = self.retention_days * DAY_MS
            cleaned = {}
            for key, value in self.get_data().items():
                ts = value.get("timestamp") if isinstance(value, dict) else None
                if isinstance(ts, (int, float)) and not isinstance(ts, bool) and now - ts < max_age:
                    cleaned[key] = value
            if self.set_data(cleaned):
                logger.info("Old data cleaned up (%d entries kept)", len(cleaned))
        except Exception as e:
            logger.error("Failed to cleanup old data: %s", e, exc_info=True)

    # ── Export / import ────────────────────────────────────────────────

    def export_bundle(self) -> dict:
        return {
            "settings": self.get_settings(),
            "data": self.get_data(),
            "version": self.current_version,
            "exportDate": _iso_now(),
        }

    def export_filename(self) -> str:
        day = datetime.now(timezone.utc).date().isoformat()
        return f"{self.app_name.replace('_', '-')}-backup-{day}.json"

    def export_data(self, dest_dir: Optional[Path] = None) -> bool:
        """Write a backup file into `dest_dir` (default: the backup dir)."""
        target = Path(dest_dir) if dest_dir else self.backup_dir
        if target is None:
            logger.error("Failed to export data: no backup directory configured")
            return False
        try:
            target.mkdir(parents=True, exist_ok=True)
            path = target / self.export_filename()
            path.write_text(json.dumps(self.export_bundle(), indent=2), encoding="utf-8")
        except OSError as e:
            logger.error("Failed to export data: %s", e)
            return False
        logger.info("Exported data to %s", path)
        return True

    async def import_data(self, source) -> bool:
        """Replace settings and data with the contents of a backup bundle.

        `source` is a path, raw bytes/str, or an upload-like object with
        read(). Raises InvalidBackupError without writing anything if the
        bundle is malformed; returns False if storage rejects the write.
        """
        text = await _read_source(source)
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as e:
            raise InvalidBackupError(f"Backup is not valid JSON: {e}") from e
        if not isinstance(payload, dict):
            raise InvalidBackupError("Invalid backup file format")
        try:
            bundle = ExportBundle.model_validate(payload)
        except ValidationError as e:
            raise InvalidBackupError(f"Invalid backup file format: {e.error_count()} problem(s)") from e

        try:
            snapshot = self.backend.snapshot()
        except StorageError as e:
            logger.error("Failed to import data: %s", e)
            return False
        try:
            self.backend.set_item(self.settings_key, json.dumps(bundle.settings))
            if bundle.data is not None:
                self.backend.set_item(self.storage_key, json.dumps(bundle.data))
        except StorageError as e:
            logger.error("Failed to import data: %s", e)
            try:
                self.backend.restore(snapshot)
            except StorageError as restore_err:
                logger.error("Rollback after failed import also failed: %s", restore_err)
            return False
        logger.info("Data imported successfully (bundle version %s)", bundle.version)
        return True

    # ── Debug ──────────────────────────────────────────────────────────

    def get_all_keys(self) -> list[str]:
        try:
            return self.backend.keys()
        except StorageError as e:
            logger.error("Failed to list keys: %s", e)
            return []

    def clear_all(self) -> bool:
        try:
            self.backend.clear()
        except StorageError as e:
            logger.error("Failed to clear all storage: %s", e)
            return False
        logger.info("All storage cleared")
        return True


async def _read_source(source) -> str:
    if isinstance(source, bytes):
        raw = source
    elif isinstance(source, Path):
        try:
            raw = await asyncio.to_thread(source.read_bytes)
        except OSError as e:
            raise InvalidBackupError(f"Cannot read backup file {source}: {e}") from e
    elif isinstance(source, str):
        raw = source
    elif hasattr(source, "read"):
        raw = source.read()
        if inspect.isawaitable(raw):
            raw = await raw
    else:
        raise InvalidBackupError(f"Unsupported backup source: {type(source).__name__}")
    if isinstance(raw, bytes):
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidBackupError("Backup is not UTF-8 text") from e
    return raw
