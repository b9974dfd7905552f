from pathlib import Path

from config import Settings


def test_defaults(monkeypatch):
    for name in (
        "PWA_APP_NAME",
        "PWA_STORAGE",
        "PWA_DATA_DIR",
        "PWA_BACKUP_DIR",
        "PWA_QUOTA_BYTES",
        "PWA_RETENTION_DAYS",
        "PWA_MIGRATION_POLICY",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    s = Settings()
    assert s.PWA_APP_NAME == "pwa_template"
    assert s.PWA_STORAGE == "file"
    assert s.PWA_DATA_DIR == Path("data")
    assert s.PWA_BACKUP_DIR == Path("data") / "backups"
    assert s.PWA_QUOTA_BYTES is None
    assert s.PWA_RETENTION_DAYS == 30
    assert s.PWA_MIGRATION_POLICY == "stamp_target"
    assert s.LOG_LEVEL == "INFO"


def test_invalid_values_fall_back(monkeypatch):
    monkeypatch.setenv("PWA_STORAGE", "redis")
    monkeypatch.setenv("PWA_QUOTA_BYTES", "lots")
    monkeypatch.setenv("PWA_RETENTION_DAYS", "-3")
    monkeypatch.setenv("PWA_MIGRATION_POLICY", "whatever")
    s = Settings()
    assert s.PWA_STORAGE == "file"
    assert s.PWA_QUOTA_BYTES is None
    assert s.PWA_RETENTION_DAYS == 30
    assert s.PWA_MIGRATION_POLICY == "stamp_target"


def test_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("PWA_APP_NAME", "notes_app")
    monkeypatch.setenv("PWA_STORAGE", "MEMORY")
    monkeypatch.setenv("PWA_BACKUP_DIR", str(tmp_path))
    monkeypatch.setenv("PWA_QUOTA_BYTES", "5242880")
    monkeypatch.setenv("PWA_MIGRATION_POLICY", "stamp_last_success")
    monkeypatch.setenv("ALLOWED_ORIGINS", "http://a.test, http://b.test")
    s = Settings()
    assert s.PWA_APP_NAME == "notes_app"
    assert s.PWA_STORAGE == "memory"
    assert s.PWA_BACKUP_DIR == tmp_path
    assert s.PWA_QUOTA_BYTES == 5 * 1024 * 1024
    assert s.PWA_MIGRATION_POLICY == "stamp_last_success"
    assert s.ALLOWED_ORIGINS == ["http://a.test", "http://b.test"]
