"""SQLite storage for user records."""

import json
import sqlite3
from pathlib import Path

from ..errors import PersistenceUnavailable
from .models import DEFAULT_HISTORY_CAP, UserRecord


class SQLiteUserStore:
    """Persistent storage for user records using SQLite.

    Each record is one row keyed by user_id; upserts replace the whole
    row so a save never leaves a partially updated record behind.
    """

    def __init__(self, db_path: Path, history_cap: int = DEFAULT_HISTORY_CAP) -> None:
        """Initialize the store with a database path.

        Args:
            db_path: Path to the SQLite database file.
            history_cap: Chat history cap applied to loaded records.
        """
        self.db_path = db_path
        self.history_cap = history_cap
        self._conn: sqlite3.Connection | None = None

    def _get_connection(self) -> sqlite3.Connection:
        """Get or create the database connection."""
        if self._conn is None:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(self.db_path)
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def init_db(self) -> None:
        """Create the users table if it doesn't exist."""
        try:
            conn = self._get_connection()
            conn.execute("""
                CREATE TABLE IF NOT EXISTS users (
                    user_id             TEXT PRIMARY KEY,
                    language            TEXT NOT NULL,
                    conversation_state  TEXT NOT NULL,
                    child_birth_date    TEXT,
                    chat_history        TEXT NOT NULL DEFAULT '[]',
                    last_reminder_sent  TEXT,
                    created_at          REAL NOT NULL,
                    updated_at          REAL NOT NULL
                )
            """)
            conn.commit()
        except sqlite3.Error as e:
            raise PersistenceUnavailable(f"SQLite init failed: {e}") from e

    async def get_all_users(self) -> list[UserRecord]:
        try:
            cursor = self._get_connection().execute("SELECT * FROM users")
            return [self._row_to_record(row) for row in cursor.fetchall()]
        except sqlite3.Error as e:
            raise PersistenceUnavailable(f"SQLite read failed: {e}") from e

    async def get_user(self, user_id: str) -> UserRecord | None:
        try:
            cursor = self._get_connection().execute(
                "SELECT * FROM users WHERE user_id = ?", (user_id,)
            )
            row = cursor.fetchone()
        except sqlite3.Error as e:
            raise PersistenceUnavailable(f"SQLite read failed: {e}") from e
        return self._row_to_record(row) if row else None

    async def upsert_user(self, record: UserRecord) -> None:
        data = record.to_dict()
        try:
            conn = self._get_connection()
            conn.execute(
                """
                INSERT INTO users (
                    user_id, language, conversation_state, child_birth_date,
                    chat_history, last_reminder_sent, created_at, updated_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(user_id) DO UPDATE SET
                    language = excluded.language,
                    conversation_state = excluded.conversation_state,
                    child_birth_date = excluded.child_birth_date,
                    chat_history = excluded.chat_history,
                    last_reminder_sent = excluded.last_reminder_sent,
                    updated_at = excluded.updated_at
                """,
                (
                    data["user_id"],
                    data["language"],
                    data["conversation_state"],
                    data["child_birth_date"],
                    json.dumps(data["chat_history"], ensure_ascii=False),
                    data["last_reminder_sent"],
                    data["created_at"],
                    data["updated_at"],
                ),
            )
            conn.commit()
        except sqlite3.Error as e:
            raise PersistenceUnavailable(f"SQLite write failed: {e}") from e

    async def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def _row_to_record(self, row: sqlite3.Row) -> UserRecord:
        """Convert a database row to a UserRecord."""
        data = dict(row)
        try:
            data["chat_history"] = json.loads(data.get("chat_history") or "[]")
        except json.JSONDecodeError:
            data["chat_history"] = []
        return UserRecord.from_dict(data, history_cap=self.history_cap)
