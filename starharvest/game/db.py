import json
import sqlite3
import time
from pathlib import Path
from typing import Any, Dict, Optional

from loguru import logger


class StateStore:
    """
    Durable key-value records, one JSON document per key, in SQLite.
    save_many() writes every record it is given in a single transaction.
    """

    def __init__(self, db_path: Path | str):
        self.db_path = Path(db_path)

    def get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self) -> None:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with self.get_conn() as conn:
            conn.execute("""
            CREATE TABLE IF NOT EXISTS kv_state (
                key TEXT PRIMARY KEY,
                value_json TEXT NOT NULL,
                updated_at REAL NOT NULL
            )
            """)
        conn.close()

    def load(self, key: str) -> Optional[Any]:
        """
        Return the decoded record, or None if it is absent or isn't valid JSON.
        """
        with self.get_conn() as conn:
            row = conn.execute("SELECT value_json FROM kv_state WHERE key=?", (key,)).fetchone()
        conn.close()

        if row is None:
            return None
        try:
            return json.loads(row["value_json"])
        except (TypeError, ValueError):
            logger.warning("Stored record {!r} is not valid JSON, ignoring it", key)
            return None

    def save_many(self, records: Dict[str, Any]) -> None:
        now = time.time()
        rows = [(k, json.dumps(v), now) for k, v in records.items()]
        with self.get_conn() as conn:
            conn.executemany(
                "INSERT INTO kv_state (key, value_json, updated_at) VALUES (?, ?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value_json=excluded.value_json, updated_at=excluded.updated_at",
                rows,
            )
        conn.close()
