from __future__ import annotations

import logging
import os
import sqlite3
from datetime import datetime, timezone
from pathlib import Path

from questlife import savefile
from questlife.errors import ImportDataError, SaveSlotError
from questlife.models import GameState

logger = logging.getLogger(__name__)

DB_PATH = Path(os.environ.get("QUESTLIFE_DB") or Path(__file__).resolve().parent.parent / "data.sqlite3")

SLOT_ID = 1


def get_conn() -> sqlite3.Connection:
    try:
        conn = sqlite3.connect(DB_PATH)
    except sqlite3.Error as exc:
        raise SaveSlotError(f"Cannot open save slot at {DB_PATH}: {exc}") from exc
    conn.row_factory = sqlite3.Row
    return conn


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def init_db() -> None:
    conn = get_conn()
    try:
        conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS save_slot (
                id INTEGER PRIMARY KEY CHECK (id = 1),
                document_json TEXT NOT NULL,
                revision INTEGER NOT NULL DEFAULT 1,
                saved_at TEXT NOT NULL
            );
            """
        )
        conn.commit()
    finally:
        conn.close()


def load_state(now: datetime | None = None) -> GameState | None:
    conn = get_conn()
    try:
        row = conn.execute("SELECT document_json FROM save_slot WHERE id = ?", (SLOT_ID,)).fetchone()
    finally:
        conn.close()
    if row is None:
        return None
    try:
        state = savefile.loads(row["document_json"], now=now)
    except ImportDataError as exc:
        raise SaveSlotError(f"Save slot holds an unreadable document: {exc}") from exc
    logger.info("Loaded save slot (%d quests, last rollover %s)", len(state.quests), state.last_rollover_date)
    return state


def save_state(state: GameState) -> int:
    document = savefile.dumps(state)
    conn = get_conn()
    try:
        conn.execute(
            """
            INSERT INTO save_slot (id, document_json, revision, saved_at) VALUES (?, ?, 1, ?)
            ON CONFLICT(id) DO UPDATE SET
                document_json = excluded.document_json,
                revision = save_slot.revision + 1,
                saved_at = excluded.saved_at
            """,
            (SLOT_ID, document, utc_now_iso()),
        )
        conn.commit()
        revision = conn.execute("SELECT revision FROM save_slot WHERE id = ?", (SLOT_ID,)).fetchone()["revision"]
    finally:
        conn.close()
    logger.info("Saved slot revision %d", revision)
    return revision


def get_slot_info() -> dict | None:
    conn = get_conn()
    try:
        row = conn.execute("SELECT revision, saved_at FROM save_slot WHERE id = ?", (SLOT_ID,)).fetchone()
    finally:
        conn.close()
    return dict(row) if row else None


def clear_save_slot() -> None:
    conn = get_conn()
    try:
        conn.execute("DELETE FROM save_slot WHERE id = ?", (SLOT_ID,))
        conn.commit()
    finally:
        conn.close()


def export_save_data(path: Path) -> Path:
    state = load_state()
    if state is None:
        raise SaveSlotError("Nothing to export: the save slot is empty")
    path = Path(path)
    path.write_text(savefile.dumps(state, indent=2), encoding="utf-8")
    return path

