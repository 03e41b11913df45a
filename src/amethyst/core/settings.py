"""
Persistent key-value settings for Amethyst.

Stores the handful of fields that survive restarts (current path, queue,
volume) as JSON values in a single SQLite table.
"""

import json
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

from loguru import logger

from .config import get_data_dir

CURRENT_PATH_KEY = "current_path"
QUEUE_KEY = "queue"
VOLUME_KEY = "volume"


def get_settings_path() -> Path:
    """Get the path to the settings database file."""
    return get_data_dir() / "amethyst.db"


class SettingsStore:
    """Simple named-key store with a default for absent keys."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with self._connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS settings (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)
            conn.commit()

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(self.db_path, timeout=30.0)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        try:
            yield conn
        finally:
            conn.close()

    def get(self, key: str, default: Any = None) -> Any:
        """Read a value, returning ``default`` when absent or unreadable."""
        with self._connection() as conn:
            row = conn.execute(
                "SELECT value FROM settings WHERE key = ?", (key,)
            ).fetchone()

        if row is None:
            return default

        try:
            return json.loads(row["value"])
        except json.JSONDecodeError:
            logger.warning(f"Discarding corrupt setting {key!r}")
            return default

    def set(self, key: str, value: Any) -> None:
        """Write a value (JSON-encoded)."""
        with self._connection() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO settings (key, value, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                """,
                (key, json.dumps(value)),
            )
            conn.commit()

    def delete(self, key: str) -> None:
        with self._connection() as conn:
            conn.execute("DELETE FROM settings WHERE key = ?", (key,))
            conn.commit()
