"""
SQLite state store.

Keeps each record as a JSON document in a single key-value table, so a
tree and its settings survive restarts of the watcher or the host.
"""

import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from .base import StateStore

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1


class SQLiteStateStore(StateStore):
    """
    Persistent state in a local SQLite file.

    Each call opens its own connection, so the store can be shared between
    the watcher thread and the main thread.
    """

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self._init_db()

    @contextmanager
    def _connection(self):
        """Context manager for database connections."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA synchronous=NORMAL")
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_db(self) -> None:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        with self._connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS schema_version (
                    version INTEGER PRIMARY KEY,
                    applied_at TEXT NOT NULL,
                    description TEXT
                )
            """)
            row = conn.execute("SELECT MAX(version) AS v FROM schema_version").fetchone()
            current_version = row["v"] if row and row["v"] else 0

            if current_version < 1:
                conn.execute("""
                    CREATE TABLE IF NOT EXISTS state (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL,
                        updated_at TEXT NOT NULL
                    )
                """)
                conn.execute(
                    "INSERT INTO schema_version (version, applied_at, description) VALUES (?, ?, ?)",
                    (SCHEMA_VERSION, _now(), "Key-value state"),
                )

    def load(self, key: str) -> Optional[Dict[str, Any]]:
        with self._connection() as conn:
            row = conn.execute("SELECT value FROM state WHERE key = ?", (key,)).fetchone()
        if row is None:
            return None
        try:
            return json.loads(row["value"])
        except json.JSONDecodeError as e:
            logger.warning(f"Discarding corrupt state record '{key}': {e}")
            return None

    def save(self, key: str, value: Optional[Dict[str, Any]]) -> None:
        if value is None:
            self.delete(key)
            return
        with self._connection() as conn:
            conn.execute(
                """
                INSERT INTO state (key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                """,
                (key, json.dumps(value), _now()),
            )

    def delete(self, key: str) -> None:
        with self._connection() as conn:
            conn.execute("DELETE FROM state WHERE key = ?", (key,))

    def keys(self) -> list:
        with self._connection() as conn:
            return [row["key"] for row in conn.execute("SELECT key FROM state ORDER BY key")]


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()
