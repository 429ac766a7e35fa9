"""SQLite response cache shared by the data-source clients."""

import hashlib
import json
import sqlite3
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Optional

from surfscore.settings import get_cache_dir


class ResponseCache:
    """Key/value cache of JSON-serializable payloads with a fixed TTL."""

    def __init__(self, name: str, ttl_seconds: int, cache_path: Optional[Path] = None):
        """Initialize the cache.

        Args:
            name: Table name prefix, e.g. "tides"
            ttl_seconds: Entry lifetime
            cache_path: Path to SQLite file. Defaults to <cache dir>/<name>.db
        """
        if cache_path is None:
            cache_path = get_cache_dir() / f"{name}.db"

        self.table = f"{name}_cache"
        self.ttl = timedelta(seconds=ttl_seconds)
        self.cache_path = cache_path
        self._init_cache()

    def _init_cache(self) -> None:
        """Initialize the SQLite cache table."""
        with sqlite3.connect(self.cache_path) as conn:
            conn.execute(f"""
                CREATE TABLE IF NOT EXISTS {self.table} (
                    cache_key TEXT PRIMARY KEY,
                    data TEXT NOT NULL,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)
            conn.commit()

    @staticmethod
    def make_key(params: Any) -> str:
        """Generate a cache key for the request parameters."""
        key_data = json.dumps(params, sort_keys=True, default=str)
        return hashlib.sha256(key_data.encode()).hexdigest()[:32]

    def get(self, cache_key: str) -> Optional[Any]:
        """Retrieve data from cache if valid."""
        with sqlite3.connect(self.cache_path) as conn:
            cursor = conn.execute(
                f"SELECT data, created_at FROM {self.table} WHERE cache_key = ?",
                (cache_key,),
            )
            row = cursor.fetchone()

            if row is None:
                return None

            data_json, created_at_str = row
            created_at = datetime.fromisoformat(created_at_str)
            if created_at.tzinfo is None:
                created_at = created_at.replace(tzinfo=timezone.utc)

            if datetime.now(timezone.utc) - created_at > self.ttl:
                conn.execute(f"DELETE FROM {self.table} WHERE cache_key = ?", (cache_key,))
                conn.commit()
                return None

            return json.loads(data_json)

    def set(self, cache_key: str, data: Any) -> None:
        """Store data in cache."""
        with sqlite3.connect(self.cache_path) as conn:
            conn.execute(
                f"""
                INSERT OR REPLACE INTO {self.table} (cache_key, data, created_at)
                VALUES (?, ?, ?)
                """,
                (cache_key, json.dumps(data), datetime.now(timezone.utc).isoformat()),
            )
            conn.commit()
