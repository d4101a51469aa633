"""Tests for the record store and its backends."""

import json
from decimal import Decimal

import pytest

from factories import expense, income
from smartexpense.audit import AuditLogger
from smartexpense.models.audit import AuditEventType
from smartexpense.models.finance import Account
from smartexpense.services.storage import (
    InMemoryBackend,
    JsonFileBackend,
    RecordStore,
    StorageCorruptedError,
)


class TestRecordStoreRoundTrip:
    """Tests for reading back what was written."""

    def test_empty_store_defaults(self, store):
        """Test missing keys give empty defaults."""
        assert store.load_transactions() == []
        assert store.load_accounts() == []
        assert store.load_session() is None

    def test_transactions_round_trip(self, store):
        """Test order and values survive a save."""
        records = [expense("12.50"), income("1000")]
        store.save_transactions(records)
        loaded = store.load_transactions()
        assert [t.id for t in loaded] == [t.id for t in records]
        assert loaded[0].amount == Decimal("12.50")

    def test_transactions_stored_with_camel_case(self, store, backend):
        """Test the persisted JSON uses createdAt."""
        store.save_transactions([expense("5")])
        raw = json.loads(backend.get("transactions"))
        assert "createdAt" in raw[0]

    def test_session_round_trip(self, store, alice):
        """Test the active account is persisted."""
        store.save_session(alice)
        assert store.load_session() == alice

    def test_save_session_none_deletes_key(self, store, backend, alice):
        """Test logging out removes the session entry."""
        store.save_session(alice)
        store.save_session(None)
        assert backend.get("currentSession") is None
        assert store.load_session() is None


class TestRecordStoreCorruption:
    """Tests for damaged stored values."""

    def test_invalid_json_degrades_to_default(self, backend, audit_logger):
        """Test corrupt transactions read as empty and are reported."""
        backend.set("transactions", "{not json")
        store = RecordStore(backend, audit_logger=audit_logger)

        assert store.load_transactions() == []
        events = [e.event_type for e in audit_logger.history]
        assert AuditEventType.STORAGE_CORRUPTED in events

    def test_schema_mismatch_degrades_to_default(self, backend, audit_logger):
        """Test well-formed JSON with the wrong shape."""
        backend.set("accounts", json.dumps([{"username": "x"}]))
        store = RecordStore(backend, audit_logger=audit_logger)

        assert store.load_accounts() == []
        assert audit_logger.history[-1].entity_id == "accounts"

    def test_strict_mode_raises(self, backend):
        """Test strict stores refuse to hide corruption."""
        backend.set("transactions", "[1, 2")
        store = RecordStore(backend, strict=True)

        with pytest.raises(StorageCorruptedError) as exc_info:
            store.load_transactions()
        assert exc_info.value.key == "transactions"

    def test_bad_record_does_not_drop_neighbours(self, backend, audit_logger):
        """Test one invalid record is skipped and the valid ones survive."""
        good = income("1000")
        bad = expense("20").model_dump(mode="json", by_alias=True)
        bad["amount"] = "-20"
        backend.set("transactions", json.dumps([good.model_dump(mode="json", by_alias=True), bad]))
        store = RecordStore(backend, audit_logger=audit_logger)

        assert [t.id for t in store.load_transactions()] == [good.id]
        event = audit_logger.history[-1]
        assert event.event_type == AuditEventType.STORAGE_CORRUPTED
        assert "record 1" in event.error_message

    def test_bad_record_strict_raises(self, backend):
        """Test strict stores refuse a single invalid record."""
        backend.set("accounts", json.dumps([{"name": "A", "username": "a", "email": "nope", "password": "p"}]))
        with pytest.raises(StorageCorruptedError):
            RecordStore(backend, strict=True).load_accounts()

    def test_other_keys_unaffected(self, backend, alice):
        """Test one bad entry does not hide the others."""
        backend.set("transactions", "garbage")
        store = RecordStore(backend)
        store.save_accounts([alice])

        assert store.load_transactions() == []
        assert store.load_accounts() == [alice]


class TestAccountUpsert:
    """Tests for upsert_account."""

    def test_appends_new_account(self, store, alice):
        """Test insert."""
        store.upsert_account(alice)
        assert store.load_accounts() == [alice]

    def test_replaces_case_insensitively_in_place(self, store, alice):
        """Test replacement keeps list position."""
        bob = Account(name="Bob", username="bob", email="bob@example.com", password="pw")
        store.save_accounts([alice, bob])

        renamed = Account(name="Alice S.", username="ALICE", email="alice@example.com", password="new")
        store.upsert_account(renamed)

        accounts = store.load_accounts()
        assert [a.username for a in accounts] == ["ALICE", "bob"]
        assert accounts[0].password == "new"


class TestSnapshotAndClear:
    """Tests for whole-namespace operations."""

    def test_export_snapshot(self, store, alice):
        """Test the snapshot holds every collection."""
        store.save_transactions([income("10")])
        store.save_accounts([alice])
        store.save_session(alice)

        snapshot = store.export_snapshot()
        assert len(snapshot.transactions) == 1
        assert snapshot.accounts == [alice]
        assert snapshot.current_user == alice
        assert snapshot.version == "1.0.0"

    def test_clear_all_removes_unknown_keys(self, store, backend, alice):
        """Test every key is wiped."""
        store.save_accounts([alice])
        backend.set("legacy", "1")

        store.clear_all()

        assert backend.keys() == []
        assert store.load_accounts() == []


class TestJsonFileBackend:
    """Tests for the on-disk backend."""

    def test_persists_across_instances(self, tmp_path, alice):
        """Test data survives a new backend on the same file."""
        path = tmp_path / "data" / "store.json"
        RecordStore(JsonFileBackend(path)).save_accounts([alice])

        reopened = RecordStore(JsonFileBackend(path))
        assert reopened.load_accounts() == [alice]

    def test_no_temp_file_left_behind(self, tmp_path):
        """Test atomic write cleans up."""
        path = tmp_path / "store.json"
        backend = JsonFileBackend(path)
        backend.set("k", "1")
        assert [p.name for p in tmp_path.iterdir()] == ["store.json"]

    def test_delete_and_keys(self, tmp_path):
        """Test key listing."""
        backend = JsonFileBackend(tmp_path / "store.json")
        backend.set("a", "1")
        backend.set("b", "2")
        backend.delete("a")
        backend.delete("missing")
        assert backend.keys() == ["b"]

    def test_corrupt_file_is_quarantined(self, tmp_path):
        """Test lenient mode moves the damaged file aside."""
        path = tmp_path / "store.json"
        path.write_text("{{{", encoding="utf-8")

        backend = JsonFileBackend(path)
        assert backend.get("transactions") is None

        names = [p.name for p in tmp_path.iterdir()]
        assert any(name.startswith("store.json.corrupt-") for name in names)
        assert "store.json" not in names

    def test_corrupt_file_strict_raises(self, tmp_path):
        """Test strict mode keeps the file and raises."""
        path = tmp_path / "store.json"
        path.write_text("[]", encoding="utf-8")

        with pytest.raises(StorageCorruptedError):
            JsonFileBackend(path, strict=True).get("transactions")
        assert path.exists()

    def test_non_string_value_reported_by_store(self, tmp_path):
        """Test a hand-edited entry is rejected per key."""
        path = tmp_path / "store.json"
        path.write_text(json.dumps({"transactions": [1, 2]}), encoding="utf-8")

        audit_logger = AuditLogger()
        store = RecordStore(JsonFileBackend(path), audit_logger=audit_logger)
        assert store.load_transactions() == []
        assert audit_logger.history[-1].event_type == AuditEventType.STORAGE_CORRUPTED


class TestInMemoryBackend:
    """Tests for the dict backend."""

    def test_initial_data_is_copied(self):
        """Test the caller's dict is not shared."""
        initial = {"a": "1"}
        backend = InMemoryBackend(initial)
        backend.set("b", "2")
        assert initial == {"a": "1"}
        assert sorted(backend.keys()) == ["a", "b"]
