"""Unit tests for vault records and record stores."""

import json
from datetime import datetime

import pytest


class TestVaultRecord:
    """Tests for the persisted record model."""

    def test_create(self):
        """Test new records get an id, base64 fields and equal timestamps."""
        from aura_vault.vault.models import VaultRecord

        record = VaultRecord.create("u1", "Bank PIN", b"\x00\x01ciphertext", b"\x02" * 12)

        assert record.id.startswith("v")
        assert record.owner == "u1"
        assert record.ciphertext_bytes == b"\x00\x01ciphertext"
        assert record.nonce_bytes == b"\x02" * 12
        assert record.created_at == record.updated_at

    def test_ids_unique(self):
        """Test record ids do not collide."""
        from aura_vault.vault.models import VaultRecord

        ids = {VaultRecord.create("u1", "t", b"c", b"n").id for _ in range(50)}
        assert len(ids) == 50

    def test_reencrypted_keeps_identity(self):
        """Test re-encryption replaces cipher fields and updated_at only."""
        from aura_vault.vault.models import VaultRecord

        old = datetime(2023, 11, 20)
        record = VaultRecord("v1", "u1", "WiFi", "AAAA", "BBBB", old, old)

        updated = record.reencrypted(b"new-ciphertext", b"\x07" * 12)

        assert updated.id == "v1"
        assert updated.title == "WiFi"
        assert updated.created_at == old
        assert updated.updated_at > old
        assert updated.ciphertext_bytes == b"new-ciphertext"
        assert record.ciphertext == "AAAA"  # original untouched

    def test_to_dict_wire_format(self):
        """Test serialized keys and ISO-8601 timestamps."""
        from aura_vault.vault.models import VaultRecord

        ts = datetime(2023, 11, 21, 8, 15)
        record = VaultRecord("v2", "u1", "Bank PIN", "Y2lwaGVy", "bm9uY2U=", ts, ts)

        assert record.to_dict() == {
            "id": "v2",
            "owner": "u1",
            "title": "Bank PIN",
            "ciphertext": "Y2lwaGVy",
            "nonce": "bm9uY2U=",
            "createdAt": "2023-11-21T08:15:00",
            "updatedAt": "2023-11-21T08:15:00",
        }

    def test_from_dict_browser_format(self):
        """Test records written by the browser build load."""
        from aura_vault.vault.models import VaultRecord

        record = VaultRecord.from_dict({
            "id": "v1",
            "userId": "u1",
            "title": "WiFi Password",
            "ciphertext_base64": "U3RhR3h1",
            "nonce": "L2V4dElh",
            "createdAt": "2023-11-20T00:00:00.000Z",
            "updatedAt": "2023-11-20T00:00:00.000Z",
        })

        assert record.owner == "u1"
        assert record.ciphertext == "U3RhR3h1"
        assert record.created_at.year == 2023

    def test_from_dict_missing_field(self):
        """Test malformed records raise VaultCorruptedError."""
        from aura_vault.vault.exceptions import VaultCorruptedError
        from aura_vault.vault.models import VaultRecord

        with pytest.raises(VaultCorruptedError):
            VaultRecord.from_dict({"id": "v1", "title": "no cipher"})

    def test_invalid_base64(self):
        """Test undecodable ciphertext raises VaultCorruptedError."""
        from aura_vault.vault.exceptions import VaultCorruptedError
        from aura_vault.vault.models import VaultRecord

        record = VaultRecord("v1", "u1", "t", "not base64!!", "AAAA")

        with pytest.raises(VaultCorruptedError):
            record.ciphertext_bytes

    def test_decrypted_record_repr_hides_content(self):
        """Test plaintext does not leak through repr()."""
        from aura_vault.vault.models import DecryptedRecord

        item = DecryptedRecord(id="v1", title="Bank PIN", content="9876")

        assert "9876" not in repr(item)


class TestMemoryRecordStore:
    """Tests for the in-memory store."""

    def test_load_returns_copy(self):
        """Test callers cannot mutate the stored list."""
        from aura_vault.vault.models import VaultRecord
        from aura_vault.vault.storage import MemoryRecordStore

        store = MemoryRecordStore([VaultRecord.create("u1", "t", b"c", b"n")])

        records = store.load_records()
        records.clear()

        assert len(store.load_records()) == 1

    def test_save_counts(self):
        """Test save_count tracks writes."""
        from aura_vault.vault.storage import MemoryRecordStore

        store = MemoryRecordStore()
        store.save_records([])

        assert store.save_count == 1


class TestJsonRecordStore:
    """Tests for the JSON file store."""

    def test_missing_file_is_empty(self, tmp_path):
        """Test a vault file that does not exist loads as empty."""
        from aura_vault.vault.storage import JsonRecordStore

        store = JsonRecordStore(tmp_path / "missing.json")

        assert store.load_records() == []
        assert not store.exists

    def test_save_and_load(self, tmp_path):
        """Test records survive a save/load cycle in order."""
        from aura_vault.vault.models import VaultRecord
        from aura_vault.vault.storage import JsonRecordStore

        store = JsonRecordStore(tmp_path / "nested" / "vault.json")
        records = [
            VaultRecord.create("u1", "First", b"one", b"\x01" * 12),
            VaultRecord.create("u1", "Second", b"two", b"\x02" * 12),
        ]

        store.save_records(records)

        assert store.load_records() == records
        data = json.loads(store.path.read_text(encoding="utf-8"))
        assert [item["title"] for item in data] == ["First", "Second"]

    def test_save_leaves_no_temp_files(self, tmp_path):
        """Test atomic replace cleans up after itself."""
        from aura_vault.vault.models import VaultRecord
        from aura_vault.vault.storage import JsonRecordStore

        store = JsonRecordStore(tmp_path / "vault.json")
        store.save_records([VaultRecord.create("u1", "t", b"c", b"n")])
        store.save_records([])

        assert [p.name for p in tmp_path.iterdir()] == ["vault.json"]

    def test_invalid_json(self, tmp_path):
        """Test a damaged file raises VaultCorruptedError."""
        from aura_vault.vault.exceptions import VaultCorruptedError
        from aura_vault.vault.storage import JsonRecordStore

        path = tmp_path / "vault.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(VaultCorruptedError):
            JsonRecordStore(path).load_records()

    def test_not_a_list(self, tmp_path):
        """Test a JSON object instead of a list is rejected."""
        from aura_vault.vault.exceptions import VaultCorruptedError
        from aura_vault.vault.storage import JsonRecordStore

        path = tmp_path / "vault.json"
        path.write_text('{"records": []}', encoding="utf-8")

        with pytest.raises(VaultCorruptedError, match="list of records"):
            JsonRecordStore(path).load_records()

    def test_null_nonce(self, tmp_path):
        """Test a null nonce is reported as corruption, not a TypeError."""
        from aura_vault.vault.exceptions import VaultCorruptedError
        from aura_vault.vault.models import VaultRecord
        from aura_vault.vault.storage import JsonRecordStore

        store = JsonRecordStore(tmp_path / "vault.json")
        store.save_records([VaultRecord.create("u1", "Bank PIN", b"cipher", b"\x01" * 12)])
        data = json.loads(store.path.read_text(encoding="utf-8"))
        data[0]["nonce"] = None
        store.path.write_text(json.dumps(data), encoding="utf-8")

        with pytest.raises(VaultCorruptedError, match="base64 strings"):
            store.load_records()

    def test_non_string_base64_field(self):
        """Test decoding a non-string field raises VaultCorruptedError."""
        from aura_vault.vault.exceptions import VaultCorruptedError
        from aura_vault.vault.models import VaultRecord

        record = VaultRecord("v1", "u1", "t", 12345, "AAAA")

        with pytest.raises(VaultCorruptedError):
            record.ciphertext_bytes
