"""Tests for the JSON data store.

**Feature: prop-journal**
"""

import json
import tempfile
from pathlib import Path

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from propjournal.db import records
from propjournal.db.store import DataStore
from propjournal.models import Database


@pytest.fixture
def temp_store():
    """Create a data store in a temporary directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield DataStore(Path(tmpdir) / "nested" / "propjournal.json")


class TestLoadFallbacks:
    """
    **Feature: prop-journal, Property 10: Load Never Fails**

    *For any* file contents, opening the store yields a normalized database;
    unreadable data degrades to an empty database.
    """

    def test_missing_file_is_empty(self, temp_store: DataStore):
        assert temp_store.snapshot() == Database()
        assert temp_store.get_stats() == {"firms": 0, "accounts": 0, "journals": 0, "compliance": 0}

    @given(contents=st.text(max_size=50))
    @settings(max_examples=50)
    def test_arbitrary_contents(self, contents: str):
        with tempfile.TemporaryDirectory() as tmpdir:
            db_path = Path(tmpdir) / "db.json"
            db_path.write_text(contents, encoding="utf-8")
            store = DataStore(db_path)
            assert isinstance(store.snapshot(), Database)

    def test_corrupt_json_is_empty(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            db_path = Path(tmpdir) / "db.json"
            db_path.write_text("{not json", encoding="utf-8")
            assert DataStore(db_path).snapshot() == Database()

    def test_oversized_number_is_empty(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            db_path = Path(tmpdir) / "db.json"
            db_path.write_text('{"firms": [{"id": ' + "1" * 5000 + "}]}", encoding="utf-8")
            assert DataStore(db_path).snapshot() == Database()

    def test_dangling_references_are_dropped_on_load(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            db_path = Path(tmpdir) / "db.json"
            db_path.write_text(json.dumps({
                "firms": [{"id": "f1", "name": "Apex"}],
                "accounts": [{"id": "a1", "firmId": "f1"}, {"id": "a2", "firmId": "gone"}],
                "compliance": [{"id": "c1", "accountId": "a2", "date": "2024-01-01"}],
            }), encoding="utf-8")
            db = DataStore(db_path).snapshot()
            assert [a.id for a in db.accounts] == ["a1"]
            assert db.compliance == ()


class TestCommit:
    """
    **Feature: prop-journal, Property 11: Commit Persists Normalized Data**

    After a commit, the file and the published snapshot hold the same
    normalized database.
    """

    def test_commit_persists(self, temp_store: DataStore):
        created = {}

        def edit(db):
            db, created["firm"] = records.add_firm(db, "Topstep")
            return db

        db = temp_store.commit(edit)
        assert temp_store.snapshot() is db

        reopened = DataStore(temp_store.db_path)
        assert reopened.snapshot() == db
        assert reopened.snapshot().firms[0].name == "Topstep"

    def test_commit_normalizes(self, temp_store: DataStore):
        db, firm = records.add_firm(Database(), "Apex")
        db, account = records.add_account(db, firm.id, "50K")
        db, _ = records.add_compliance_entry(db, account.id, "2024-01-01")
        temp_store.commit(lambda _: db)

        # Dropping the firm without cascading still leaves no orphans
        after = temp_store.commit(lambda current: current.model_copy(update={"firms": ()}))
        assert after.accounts == ()
        assert after.compliance == ()

    def test_file_uses_serialized_keys(self, temp_store: DataStore):
        db, firm = records.add_firm(Database(), "Apex")
        db, _ = records.add_account(db, firm.id, "50K", initial_balance="50000")
        temp_store.commit(lambda _: db)

        data = json.loads(temp_store.db_path.read_text(encoding="utf-8"))
        assert set(data) == {"firms", "accounts", "journals", "compliance"}
        assert data["accounts"][0]["initialBalance"] == "50000"
        assert data["accounts"][0]["firmId"] == firm.id


class TestBackup:
    def test_export_import(self, temp_store: DataStore):
        db, firm = records.add_firm(Database(), "Apex")
        temp_store.commit(lambda _: db)
        exported = temp_store.export_text()

        temp_store.reset()
        assert temp_store.snapshot() == Database()

        imported = temp_store.import_text(exported)
        assert [f.name for f in imported.firms] == ["Apex"]
        assert DataStore(temp_store.db_path).snapshot() == imported

    def test_export_of_missing_file(self, temp_store: DataStore):
        assert json.loads(temp_store.export_text()) == DataStore.empty()

    def test_invalid_import_leaves_store_untouched(self, temp_store: DataStore):
        db, _ = records.add_firm(Database(), "Apex")
        temp_store.commit(lambda _: db)

        with pytest.raises(ValueError):
            temp_store.import_text("{broken")

        assert DataStore(temp_store.db_path).snapshot() == db

    def test_import_with_oversized_number_is_rejected(self, temp_store: DataStore):
        with pytest.raises(ValueError):
            temp_store.import_text('{"firms": [{"id": ' + "9" * 5000 + "}]}")
        assert not temp_store.db_path.exists()

    def test_import_normalizes_legacy_data(self, temp_store: DataStore):
        legacy = json.dumps({
            "firms": [{"id": "f1", "name": "Apex"}],
            "accounts": [{"id": "a1", "firmId": "f1", "name": "Old"}],
            "compliance": [{"id": "c1", "accountId": "a1", "date": "2024-01-01", "endingBalance": "100"}],
        })
        db = temp_store.import_text(legacy)
        assert db.accounts[0].trailing_drawdown_limit == ""
        assert db.compliance[0].followed_stop_rule_11 is True

        saved = json.loads(temp_store.db_path.read_text(encoding="utf-8"))
        assert saved["journals"] == []
        assert saved["compliance"][0]["withdrewFunds"] is False
