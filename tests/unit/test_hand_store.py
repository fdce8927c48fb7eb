"""
HandStore against an in-memory sqlite database.
"""

import json
import sqlite3
from datetime import datetime

import pytest

from hhreplay.engine.conn import DB_ENV_VAR, get_conn
from hhreplay.engine.hand_store import HandRecord, HandStore


class TestHandStore:
    """CRUD, notes and JSON import/export."""

    def setup_method(self):
        self.store = HandStore(sqlite3.connect(":memory:"))

    def teardown_method(self):
        self.store.close()

    def test_save_assigns_fresh_id_and_clears_notes(self):
        draft = HandRecord(raw_text="Seat 1: A ($1)", hero="A", notes="scratch", tags=("3bp",))
        saved = self.store.save_hand(draft)
        assert saved.id != draft.id
        assert saved.notes == ""
        loaded = self.store.get_hand(saved.id)
        assert loaded == saved
        assert loaded.tags == ("3bp",)

    def test_newest_first(self):
        first = self.store.save_hand(HandRecord(raw_text="one"))
        second = self.store.save_hand(HandRecord(raw_text="two"))
        self.store.update_hand(first.id, timestamp=datetime(2020, 1, 1))
        assert [h.id for h in self.store.get_hands()] == [second.id, first.id]

    def test_update_hand(self):
        saved = self.store.save_hand(HandRecord(raw_text="one"))
        assert self.store.update_hand(saved.id, notes="river overbluff", tags=["bluff"])
        loaded = self.store.get_hand(saved.id)
        assert loaded.notes == "river overbluff"
        assert loaded.tags == ("bluff",)
        assert not self.store.update_hand("missing", notes="x")
        with pytest.raises(ValueError):
            self.store.update_hand(saved.id, id="other")
        with pytest.raises(ValueError):
            self.store.update_hand(saved.id, colour="red")

    def test_update_timestamp_from_iso_string(self):
        saved = self.store.save_hand(HandRecord(raw_text="one"))
        assert self.store.update_hand(saved.id, timestamp="2024-01-01")
        assert self.store.get_hand(saved.id).timestamp == datetime(2024, 1, 1)

    def test_failed_update_keeps_the_record(self):
        saved = self.store.save_hand(HandRecord(raw_text="one"))
        with pytest.raises(ValueError):
            self.store.update_hand(saved.id, timestamp="yesterday")
        self.store.save_hand(HandRecord(raw_text="two"))
        assert self.store.get_hand(saved.id) == saved
        assert sorted(h.raw_text for h in self.store.get_hands()) == ["one", "two"]

    def test_delete_and_missing(self):
        saved = self.store.save_hand(HandRecord(raw_text="one"))
        self.store.delete_hand(saved.id)
        assert self.store.get_hand(saved.id) is None
        assert self.store.get_hands() == []

    def test_export_import_round_trip(self):
        saved = self.store.save_hand(HandRecord(raw_text="one", stakes="$1/$2", is_bomb_pot=True))
        exported = self.store.export_json()
        self.store.clear()
        assert self.store.get_hands() == []

        assert self.store.import_json(exported)
        assert self.store.get_hands() == [saved]

    def test_import_replaces_everything(self):
        self.store.save_hand(HandRecord(raw_text="old"))
        payload = json.dumps([{"id": "h1", "timestamp": "2024-03-02T21:15:07", "raw_text": "new"}])
        assert self.store.import_json(payload)
        hands = self.store.get_hands()
        assert [h.id for h in hands] == ["h1"]
        assert hands[0].timestamp == datetime(2024, 3, 2, 21, 15, 7)

    @pytest.mark.parametrize("payload", [
        "not json",
        json.dumps({"id": "h1"}),
        json.dumps([{"id": "h1", "timestamp": "2024-03-02T21:15:07"}]),
        json.dumps([{"id": "h1", "timestamp": "yesterday", "raw_text": "x"}]),
        json.dumps([{"id": "h1", "timestamp": "2024-03-02T21:15:07", "raw_text": "x"}] * 2),
    ])
    def test_bad_import_leaves_store_untouched(self, payload):
        saved = self.store.save_hand(HandRecord(raw_text="keep me"))
        assert not self.store.import_json(payload)
        assert self.store.get_hands() == [saved]

    def test_player_notes(self):
        assert self.store.get_player_note("Bob") == ""
        self.store.save_player_note("Bob", "calls too wide")
        self.store.save_player_note("Bob", "folds to 3-bets")
        assert self.store.get_player_note("Bob") == "folds to 3-bets"


class TestConn:
    def test_env_var_path(self, tmp_path, monkeypatch):
        db_file = tmp_path / "nested" / "hands.db"
        monkeypatch.setenv(DB_ENV_VAR, str(db_file))
        conn = get_conn()
        HandStore(conn).close()
        assert db_file.exists()

    def test_explicit_path_wins(self, tmp_path, monkeypatch):
        monkeypatch.setenv(DB_ENV_VAR, str(tmp_path / "env.db"))
        conn = get_conn(str(tmp_path / "explicit.db"))
        HandStore(conn).close()
        assert (tmp_path / "explicit.db").exists()
        assert not (tmp_path / "env.db").exists()
