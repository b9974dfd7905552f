"""
Schema migrations for persisted state.

VERSIONS lists every schema version ever shipped, oldest first. A migration
registered under a version upgrades state written by the previous version to
that version's layout. Migrations receive the PersistentStore and may be plain
functions or coroutines.
"""

import json
import logging

logger = logging.getLogger(__name__)

CURRENT_VERSION = "1.0.0"
VERSIONS: tuple[str, ...] = ("1.0.0",)

LEGACY_SETTINGS_KEY = "old_settings_key"


def versions_between(from_version: str, to_version: str, versions=VERSIONS) -> list[str]:
    """Versions after `from_version` up to and including `to_version`.

    Unknown versions give an empty list: nothing is migrated from a layout we
    cannot identify.
    """
    versions = list(versions)
    if from_version not in versions or to_version not in versions:
        logger.warning("Unknown version in migration: %s -> %s", from_version, to_version)
        return []
    return versions[versions.index(from_version) + 1 : versions.index(to_version) + 1]


def migrate_legacy_settings(store) -> None:
    """Move pre-1.0 settings from the legacy key into the settings record.

    Only runs when the canonical record is absent, so existing settings are
    never overwritten.
    """
    raw = store.backend.get_item(LEGACY_SETTINGS_KEY)
    if raw is None:
        return
    if store.backend.get_item(store.settings_key) is not None:
        logger.info("Legacy settings present but %s already exists; leaving both", store.settings_key)
        return
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.error("Failed to migrate old settings: %s", e)
        return
    if not isinstance(parsed, dict):
        logger.error("Failed to migrate old settings: not an object")
        return
    settings = {
        "theme": parsed.get("theme") or "auto",
        "notifications": parsed.get("notifications") is not False,
        "autoUpdate": parsed.get("autoUpdate") is not False,
    }
    store.backend.set_item(store.settings_key, json.dumps(settings))
    store.backend.remove_item(LEGACY_SETTINGS_KEY)
    logger.info("Migrated legacy settings into %s", store.settings_key)


MIGRATIONS = {
    "1.0.0": migrate_legacy_settings,
}
