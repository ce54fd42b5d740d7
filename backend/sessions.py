"""History of completed workout sessions.

Each completed routine produces one immutable :class:`SessionHistoryEntry`
which is stored in the ``session_history`` table of the SQLite database.
Rows are soft deleted so a cleared history can still be inspected with
``print_db.py``.
"""

from __future__ import annotations

import sqlite3
from dataclasses import asdict, dataclass
from pathlib import Path

from backend import DEFAULT_DB_PATH

SCHEMA = """
CREATE TABLE IF NOT EXISTS session_history (
    id TEXT PRIMARY KEY,
    routine_id TEXT NOT NULL,
    routine_name TEXT NOT NULL,
    completed_at TEXT NOT NULL,
    total_duration_ms INTEGER NOT NULL,
    completed_exercise_count INTEGER NOT NULL,
    total_exercise_count INTEGER NOT NULL,
    deleted INTEGER NOT NULL DEFAULT 0
)
"""


@dataclass(frozen=True)
class SessionHistoryEntry:
    id: str
    routine_id: str
    routine_name: str
    completed_at: str
    total_duration_ms: int
    completed_exercise_count: int
    total_exercise_count: int

    def to_dict(self) -> dict:
        return asdict(self)


def _connect(db_path: Path) -> sqlite3.Connection:
    path = Path(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.execute(SCHEMA)
    return conn


def save_history_entry(entry: SessionHistoryEntry, db_path: Path = DEFAULT_DB_PATH) -> None:
    """Insert ``entry`` into the history table."""

    with _connect(db_path) as conn:
        conn.execute(
            """
            INSERT INTO session_history
                (id, routine_id, routine_name, completed_at, total_duration_ms,
                 completed_exercise_count, total_exercise_count)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                entry.id,
                entry.routine_id,
                entry.routine_name,
                entry.completed_at,
                entry.total_duration_ms,
                entry.completed_exercise_count,
                entry.total_exercise_count,
            ),
        )


def get_session_history(
    limit: int | None = None, db_path: Path = DEFAULT_DB_PATH
) -> list[SessionHistoryEntry]:
    """Return completed sessions, most recent first."""

    query = (
        "SELECT id, routine_id, routine_name, completed_at, total_duration_ms, "
        "completed_exercise_count, total_exercise_count FROM session_history "
        "WHERE deleted = 0 ORDER BY completed_at DESC, rowid DESC"
    )
    with _connect(db_path) as conn:
        if limit is not None:
            rows = conn.execute(query + " LIMIT ?", (limit,)).fetchall()
        else:
            rows = conn.execute(query).fetchall()
    return [SessionHistoryEntry(*row) for row in rows]


def delete_history_entry(entry_id: str, db_path: Path = DEFAULT_DB_PATH) -> bool:
    """Soft delete a single entry. Returns ``True`` if a row was affected."""

    with _connect(db_path) as conn:
        cur = conn.execute(
            "UPDATE session_history SET deleted = 1 WHERE id = ? AND deleted = 0",
            (entry_id,),
        )
        return cur.rowcount > 0


def clear_history(db_path: Path = DEFAULT_DB_PATH) -> int:
    """Soft delete every entry and return how many were removed."""

    with _connect(db_path) as conn:
        cur = conn.execute("UPDATE session_history SET deleted = 1 WHERE deleted = 0")
        return cur.rowcount


class HistoryLog:
    """Bind the history helpers to one database for the engine."""

    def __init__(self, db_path: Path = DEFAULT_DB_PATH):
        self.db_path = Path(db_path)

    def record(self, entry: SessionHistoryEntry) -> None:
        save_history_entry(entry, db_path=self.db_path)

    def entries(self, limit: int | None = None) -> list[SessionHistoryEntry]:
        return get_session_history(limit, db_path=self.db_path)

    def delete(self, entry_id: str) -> bool:
        return delete_history_entry(entry_id, db_path=self.db_path)

    def clear(self) -> int:
        return clear_history(db_path=self.db_path)
