"""
PWA Template Store configuration.
Single source of truth for environment and app settings.
"""

import os
from pathlib import Path
from typing import Literal, Optional

from dotenv import load_dotenv

load_dotenv()


def get_settings():
    """Return app settings (use as FastAPI Depends or call directly)."""
    return Settings()


def _int_env(name: str, default: Optional[int]) -> Optional[int]:
    raw = (os.environ.get(name) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


class Settings:
    """Application settings loaded from environment."""

    # App
    APP_TITLE: str = "PWA Template Store API"
    APP_VERSION: str = "1.0.0"
    ALLOWED_ORIGINS: list[str]
    LOG_LEVEL: str = "INFO"

    # Storage: "file" | "memory"
    PWA_APP_NAME: str = "pwa_template"
    PWA_STORAGE: Literal["file", "memory"] = "file"
    PWA_DATA_DIR: Path
    PWA_BACKUP_DIR: Path
    PWA_QUOTA_BYTES: Optional[int] = None

    # Housekeeping
    PWA_RETENTION_DAYS: int = 30
    # "stamp_target" | "stamp_last_success"
    PWA_MIGRATION_POLICY: Literal["stamp_target", "stamp_last_success"] = "stamp_target"

    def __init__(self):
        origins = os.environ.get("ALLOWED_ORIGINS", "http://localhost:3000")
        self.ALLOWED_ORIGINS = [o.strip() for o in origins.split(",") if o.strip()]
        self.LOG_LEVEL = (os.environ.get("LOG_LEVEL") or "INFO").strip().upper()
        self.PWA_APP_NAME = (os.environ.get("PWA_APP_NAME") or "pwa_template").strip()
        self.PWA_STORAGE = (os.environ.get("PWA_STORAGE") or "file").lower()
        if self.PWA_STORAGE not in ("file", "memory"):
            self.PWA_STORAGE = "file"
        self.PWA_DATA_DIR = Path(os.environ.get("PWA_DATA_DIR", "data"))
        backup_dir = (os.environ.get("PWA_BACKUP_DIR") or "").strip()
        self.PWA_BACKUP_DIR = Path(backup_dir) if backup_dir else self.PWA_DATA_DIR / "backups"
        self.PWA_QUOTA_BYTES = _int_env("PWA_QUOTA_BYTES", None)
        self.PWA_RETENTION_DAYS = _int_env("PWA_RETENTION_DAYS", 30)
        policy = (os.environ.get("PWA_MIGRATION_POLICY") or "stamp_target").lower()
        self.PWA_MIGRATION_POLICY = "stamp_last_success" if policy == "stamp_last_success" else "stamp_target"
