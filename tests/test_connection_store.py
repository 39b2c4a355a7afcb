"""
Tests for the file-backed connection store.
"""

import json
from unittest.mock import patch

import pytest

from mcp_chat.core.errors import (
    ConnectionNotFoundError,
    DuplicateURLError,
    InputValidationError,
    StorageError,
)
from mcp_chat.services.connection_store import ConnectionStore


class TestConnectionStore:

    def test_missing_file_is_created_empty(self, tmp_path):
        storage_file = tmp_path / "nested" / "connections.json"
        store = ConnectionStore(str(storage_file))

        assert store.list() == []
        assert json.loads(storage_file.read_text(encoding="utf-8")) == []

    def test_add_persists_immediately(self, store, storage_file):
        connection = store.add("svc", "A service", "http://localhost:9000")

        assert connection.id.startswith("mcp_")
        records = json.loads(storage_file.read_text(encoding="utf-8"))
        assert records == [{
            "id": connection.id,
            "name": "svc",
            "description": "A service",
            "url": "http://localhost:9000",
            "createdAt": connection.created_at,
        }]

    def test_add_trims_url_and_trailing_slash(self, store):
        connection = store.add("svc", "", "  http://localhost:9000/  ")
        assert connection.url == "http://localhost:9000"
        assert store.find_by_url("http://localhost:9000/") == connection

    def test_duplicate_url_is_rejected_without_mutation(self, store, storage_file):
        store.add("first", "", "http://localhost:9000")
        before = storage_file.read_text(encoding="utf-8")

        with pytest.raises(DuplicateURLError) as excinfo:
            store.add("second", "", "http://localhost:9000")

        assert excinfo.value.existing_name == "first"
        assert [c.name for c in store.list()] == ["first"]
        assert storage_file.read_text(encoding="utf-8") == before

    def test_url_match_is_case_sensitive(self, store):
        store.add("lower", "", "http://localhost:9000/tools")
        store.add("upper", "", "http://localhost:9000/TOOLS")
        assert len(store.list()) == 2

    @pytest.mark.parametrize("name, url", [
        ("", "http://localhost:9000"),
        ("svc", ""),
        ("svc", "not a url"),
        ("svc", "ftp://localhost:9000"),
    ])
    def test_add_validates_input(self, store, name, url):
        with pytest.raises(InputValidationError):
            store.add(name, "", url)
        assert store.list() == []

    def test_ids_are_unique(self, store):
        ids = {store.add(f"svc{i}", "", f"http://localhost:{9000 + i}").id for i in range(20)}
        assert len(ids) == 20

    def test_reload_round_trip(self, store, storage_file):
        created = store.add("svc", "desc", "http://localhost:9000")

        reopened = ConnectionStore(str(storage_file))
        loaded = reopened.get(created.id)

        assert loaded is not None
        assert (loaded.name, loaded.description, loaded.url, loaded.created_at) == \
            (created.name, created.description, created.url, created.created_at)

    def test_list_keeps_insertion_order(self, store, storage_file):
        for i in range(5):
            store.add(f"svc{i}", "", f"http://localhost:{9000 + i}")
        store.reload()
        assert [c.name for c in store.list()] == [f"svc{i}" for i in range(5)]

    def test_update_merges_mutable_fields(self, store):
        created = store.add("svc", "old", "http://localhost:9000")

        updated = store.update(created.id, description="new", id="hijack", created_at="never")

        assert updated.id == created.id
        assert updated.name == "svc"
        assert updated.description == "new"
        assert updated.created_at == created.created_at
        assert store.get(created.id).description == "new"

    def test_update_rejects_url_taken_by_another_connection(self, store):
        store.add("a", "", "http://localhost:9000")
        b = store.add("b", "", "http://localhost:9001")

        with pytest.raises(DuplicateURLError):
            store.update(b.id, url="http://localhost:9000")
        assert store.get(b.id).url == "http://localhost:9001"

    def test_update_keeping_own_url_is_allowed(self, store):
        a = store.add("a", "", "http://localhost:9000")
        assert store.update(a.id, url="http://localhost:9000/", name="renamed").name == "renamed"

    def test_update_unknown_id(self, store):
        with pytest.raises(ConnectionNotFoundError):
            store.update("missing", name="x")

    def test_remove(self, store, storage_file):
        created = store.add("svc", "", "http://localhost:9000")

        assert store.remove(created.id) is True
        assert store.remove(created.id) is False
        assert json.loads(storage_file.read_text(encoding="utf-8")) == []

    def test_corrupt_file_starts_empty(self, storage_file):
        storage_file.write_text("{not json", encoding="utf-8")

        store = ConnectionStore(str(storage_file))

        assert store.list() == []

    def test_failed_write_rolls_back(self, store):
        store.add("kept", "", "http://localhost:9000")

        with patch.object(store, "_write_snapshot", side_effect=OSError("disk full")):
            with pytest.raises(StorageError):
                store.add("lost", "", "http://localhost:9001")
            with pytest.raises(StorageError):
                store.clear()

        assert [c.name for c in store.list()] == ["kept"]

    def test_backup_and_restore(self, store, tmp_path):
        store.add("svc", "", "http://localhost:9000")
        backup_path = store.backup(str(tmp_path / "backup.json"))

        store.clear()
        assert store.list() == []

        assert store.restore(backup_path) == 1
        assert [c.name for c in store.list()] == ["svc"]

    def test_default_backup_goes_next_to_storage_file(self, store, storage_file):
        store.add("svc", "", "http://localhost:9000")
        backup_path = store.backup()

        assert backup_path.startswith(str(storage_file.parent))
        assert "mcp-connections-backup-" in backup_path
        assert len(store.list()) == 1

    def test_restore_from_bad_file_keeps_state(self, store, tmp_path):
        store.add("svc", "", "http://localhost:9000")
        bad = tmp_path / "bad.json"
        bad.write_text("[{\"id\": 1}]", encoding="utf-8")

        with pytest.raises(StorageError):
            store.restore(str(bad))
        assert [c.name for c in store.list()] == ["svc"]

    def test_reload_discards_memory(self, store, storage_file):
        store.add("svc", "", "http://localhost:9000")
        storage_file.write_text("[]", encoding="utf-8")

        store.reload()

        assert store.list() == []

    def test_stats(self, store, storage_file):
        created = store.add("svc", "", "http://localhost:9000")
        stats = store.stats()

        assert stats["totalConnections"] == 1
        assert stats["storageFile"] == str(storage_file)
        assert stats["lastModified"] is not None
        assert stats["connections"] == [{
            "id": created.id, "name": "svc", "url": "http://localhost:9000", "createdAt": created.created_at,
        }]
