"""
HTTP-level tests. The app is built around an injected in-memory store.
Run: pytest backend
"""

import json

import pytest
from fastapi.testclient import TestClient

from main import create_app
from repositories import MemoryStore
from store import DEFAULT_SETTINGS, PersistentStore


@pytest.fixture
def store(tmp_path):
    return PersistentStore(MemoryStore(), backup_dir=tmp_path / "backups")


@pytest.fixture
def client(store):
    with TestClient(create_app(store)) as c:
        yield c


def test_startup_initializes_store(client, store):
    assert store.is_initialized
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["schema_version"] == "1.0.0"
    assert r.json()["initialized"] is True


def test_settings_patch_only_touches_sent_fields(client):
    assert client.get("/api/settings").json() == DEFAULT_SETTINGS

    r = client.patch("/api/settings", json={"theme": "dark"})
    assert r.status_code == 200
    assert r.json() == {**DEFAULT_SETTINGS, "theme": "dark"}

    r = client.patch("/api/settings", json={"notifications": False})
    assert r.json() == {**DEFAULT_SETTINGS, "theme": "dark", "notifications": False}


def test_settings_patch_validates_known_fields(client):
    r = client.patch("/api/settings", json={"theme": "neon"})
    assert r.status_code == 422


def test_settings_reset(client):
    client.patch("/api/settings", json={"theme": "light", "language": "it"})
    r = client.post("/api/settings/reset")
    assert r.status_code == 200
    assert r.json() == DEFAULT_SETTINGS


def test_data_replace_merge_clear(client):
    assert client.get("/api/data").json() == {}
    assert client.put("/api/data", json={"a": 1}).json() == {"a": 1}
    assert client.patch("/api/data", json={"b": 2}).json() == {"a": 1, "b": 2}
    assert client.delete("/api/data").status_code == 200
    assert client.get("/api/data").json() == {}


def test_items(client):
    assert client.get("/api/items/draft").status_code == 404
    r = client.put("/api/items/draft", json={"title": "hello"})
    assert r.status_code == 200
    assert client.get("/api/items/draft").json() == {"key": "draft", "value": {"title": "hello"}}
    assert client.delete("/api/items/draft").status_code == 200
    assert client.get("/api/items/draft").status_code == 404


def test_write_failure_maps_to_507():
    limited = PersistentStore(MemoryStore(quota_bytes=300))
    with TestClient(create_app(limited)) as c:
        r = c.put("/api/data", json={"blob": "x" * 1000})
    assert r.status_code == 507
    assert r.json()["detail"]["code"] == "storage_write_failed"


def test_usage_and_keys(client, store):
    r = client.get("/api/storage/usage")
    assert r.status_code == 200
    assert r.json()["usage"] == store.get_storage_usage()
    assert r.json()["quota"] is None
    keys = client.get("/api/storage/keys").json()["keys"]
    assert set(keys) == {store.settings_key, store.version_key}


def test_cleanup_endpoint(client, store):
    store.set_data({"untimed": {"v": 1}})
    r = client.post("/api/storage/cleanup")
    assert r.json() == {"kept": 0, "removed": 1}


def test_export_download_and_import(client, store):
    client.patch("/api/settings", json={"theme": "dark"})
    client.put("/api/data", json={"note": {"timestamp": 1, "text": "x"}})

    r = client.get("/api/storage/export")
    assert r.status_code == 200
    assert "attachment" in r.headers["content-disposition"]
    assert store.export_filename() in r.headers["content-disposition"]
    bundle = r.json()
    assert bundle["version"] == "1.0.0"

    fresh = PersistentStore(MemoryStore())
    with TestClient(create_app(fresh)) as other:
        r = other.post(
            "/api/storage/import",
            files={"file": ("backup.json", json.dumps(bundle), "application/json")},
        )
        assert r.status_code == 200
        assert other.get("/api/settings").json() == store.get_settings()
        assert other.get("/api/data").json() == store.get_data()


def test_import_rejects_incomplete_bundle(client, store):
    before = store.backend.snapshot()
    r = client.post(
        "/api/storage/import",
        files={"file": ("backup.json", '{"foo": "bar"}', "application/json")},
    )
    assert r.status_code == 400
    assert r.json()["detail"]["code"] == "invalid_backup"
    assert store.backend.snapshot() == before


def test_export_to_backup_dir(client, store, tmp_path):
    r = client.post("/api/storage/export")
    assert r.status_code == 200
    assert (tmp_path / "backups" / r.json()["filename"]).exists()


def test_clear_all(client, store):
    assert client.delete("/api/storage").status_code == 200
    assert store.get_all_keys() == []


def test_empty_settings_record_is_returned_as_stored(client, store):
    store.backend.set_item(store.settings_key, "{}")
    assert client.get("/api/settings").json() == {}
