"""
Hand Store - flat persistence for hand-history records.

Records are stored as-is (raw text plus metadata) in sqlite. No replay
logic lives here; callers parse record.raw_text when they need a timeline.
"""

import json
import sqlite3
import uuid
from dataclasses import asdict, dataclass, field, fields, replace
from datetime import datetime
from typing import Any

from .conn import get_conn
from .logger import get_logger

logger = get_logger(__name__)

SCHEMA = """
    CREATE TABLE IF NOT EXISTS hands (
        id TEXT PRIMARY KEY,
        timestamp TEXT NOT NULL,
        hero TEXT,
        stakes TEXT,
        raw_text TEXT NOT NULL,
        summary TEXT,
        pot_size TEXT,
        notes TEXT,
        tags TEXT,
        video_url TEXT,
        is_bomb_pot INTEGER DEFAULT 0
    );
    CREATE TABLE IF NOT EXISTS player_notes (
        name TEXT PRIMARY KEY,
        note TEXT NOT NULL
    );
"""


@dataclass(frozen=True)
class HandRecord:
    """One stored hand: the transcribed text plus what the user added to it."""
    raw_text: str
    hero: str = ""
    stakes: str = ""
    summary: str = ""
    pot_size: str = ""
    notes: str = ""
    tags: tuple[str, ...] = ()
    video_url: str | None = None
    is_bomb_pot: bool = False
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["tags"] = list(self.tags)
        data["timestamp"] = self.timestamp.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HandRecord":
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        if "timestamp" in values and not isinstance(values["timestamp"], datetime):
            values["timestamp"] = datetime.fromisoformat(values["timestamp"])
        values["tags"] = tuple(values.get("tags") or ())
        values["is_bomb_pot"] = bool(values.get("is_bomb_pot", False))
        return cls(**values)


def _row_to_record(row: tuple) -> HandRecord:
    (hand_id, timestamp, hero, stakes, raw_text, summary,
     pot_size, notes, tags, video_url, is_bomb_pot) = row
    return HandRecord(
        id=hand_id,
        timestamp=datetime.fromisoformat(timestamp),
        hero=hero or "",
        stakes=stakes or "",
        raw_text=raw_text,
        summary=summary or "",
        pot_size=pot_size or "",
        notes=notes or "",
        tags=tuple(json.loads(tags)) if tags else (),
        video_url=video_url,
        is_bomb_pot=bool(is_bomb_pot),
    )


def _record_to_row(record: HandRecord) -> tuple:
    return (
        record.id,
        record.timestamp.isoformat(),
        record.hero,
        record.stakes,
        record.raw_text,
        record.summary,
        record.pot_size,
        record.notes,
        json.dumps(list(record.tags)),
        record.video_url,
        int(record.is_bomb_pot),
    )


class HandStore:
    """
    Sqlite-backed list of hand records, newest first.

    Args:
        conn: Open connection; defaults to get_conn()
    """

    def __init__(self, conn: sqlite3.Connection | None = None):
        self.conn = conn if conn is not None else get_conn()
        self.conn.executescript(SCHEMA)
        self.conn.commit()

    def close(self) -> None:
        self.conn.close()

    def save_hand(self, record: HandRecord) -> HandRecord:
        """Store a new record under a fresh id and timestamp."""
        stored = replace(record, id=str(uuid.uuid4()), timestamp=datetime.now(), notes="")
        self._insert([stored])
        logger.info(f"Saved hand {stored.id}")
        return stored

    def get_hands(self) -> list[HandRecord]:
        cursor = self.conn.execute("SELECT * FROM hands ORDER BY timestamp DESC")
        return [_row_to_record(row) for row in cursor.fetchall()]

    def get_hand(self, hand_id: str) -> HandRecord | None:
        row = self.conn.execute("SELECT * FROM hands WHERE id = ?", (hand_id,)).fetchone()
        return _row_to_record(row) if row else None

    def update_hand(self, hand_id: str, **updates: Any) -> bool:
        """
        Apply field updates to a stored hand.

        Returns:
            True if the hand existed and was updated

        Raises:
            ValueError: If an update names an unknown or immutable field,
                or carries a timestamp string that is not ISO formatted
        """
        allowed = {f.name for f in fields(HandRecord)} - {"id"}
        unknown = set(updates) - allowed
        if unknown:
            raise ValueError(f"Cannot update fields: {sorted(unknown)}")
        current = self.get_hand(hand_id)
        if current is None:
            return False
        if "tags" in updates:
            updates["tags"] = tuple(updates["tags"])
        if "timestamp" in updates and not isinstance(updates["timestamp"], datetime):
            updates["timestamp"] = datetime.fromisoformat(updates["timestamp"])
        # Row is built before the table is touched so a bad value changes nothing
        row = _record_to_row(replace(current, **updates))
        with self.conn:
            self.conn.execute(
                "UPDATE hands SET timestamp = ?, hero = ?, stakes = ?, raw_text = ?, summary = ?, "
                "pot_size = ?, notes = ?, tags = ?, video_url = ?, is_bomb_pot = ? WHERE id = ?",
                row[1:] + (hand_id,),
            )
        return True

    def delete_hand(self, hand_id: str) -> None:
        self.conn.execute("DELETE FROM hands WHERE id = ?", (hand_id,))
        self.conn.commit()

    def import_json(self, json_string: str) -> bool:
        """
        Replace the whole store with a JSON export.

        All-or-nothing: malformed JSON or any record without id, timestamp
        and raw_text leaves the store untouched and returns False.
        """
        try:
            data = json.loads(json_string)
        except json.JSONDecodeError as e:
            logger.warning(f"Import rejected, invalid JSON: {e}")
            return False
        if not isinstance(data, list):
            return False
        if not all(isinstance(h, dict) and h.get("id") and h.get("timestamp") and h.get("raw_text")
                   for h in data):
            return False
        try:
            records = [HandRecord.from_dict(h) for h in data]
        except (TypeError, ValueError) as e:
            logger.warning(f"Import rejected, bad record: {e}")
            return False
        if len({r.id for r in records}) != len(records):
            logger.warning("Import rejected, duplicate hand ids")
            return False

        with self.conn:
            self.conn.execute("DELETE FROM hands")
            self._insert(records)
        logger.info(f"Imported {len(records)} hands")
        return True

    def export_json(self) -> str:
        return json.dumps([r.to_dict() for r in self.get_hands()], indent=2)

    def clear(self) -> None:
        self.conn.execute("DELETE FROM hands")
        self.conn.execute("DELETE FROM player_notes")
        self.conn.commit()

    # --- Player notes ---

    def get_player_note(self, name: str) -> str:
        row = self.conn.execute("SELECT note FROM player_notes WHERE name = ?", (name,)).fetchone()
        return row[0] if row else ""

    def save_player_note(self, name: str, note: str) -> None:
        self.conn.execute(
            "INSERT INTO player_notes (name, note) VALUES (?, ?) "
            "ON CONFLICT(name) DO UPDATE SET note = excluded.note",
            (name, note),
        )
        self.conn.commit()

    def _insert(self, records: list[HandRecord]) -> None:
        self.conn.executemany(
            "INSERT INTO hands (id, timestamp, hero, stakes, raw_text, summary, pot_size, "
            "notes, tags, video_url, is_bomb_pot) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            [_record_to_row(r) for r in records],
        )
        self.conn.commit()
