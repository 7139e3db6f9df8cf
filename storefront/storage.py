"""
Local key/value store used as the fallback database.

Each key holds one JSON document (usually an array of records) that is read
and written wholesale, the way the browser client used localStorage.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from .config import settings

logger = logging.getLogger(__name__)

PRODUCTS_KEY = "products"
CATEGORIES_KEY = "categories"
ORDERS_KEY = "guestOrders"
CUSTOMERS_KEY = "customers"
CART_KEY = "cart"
AUTH_TOKEN_KEY = "authToken"


class LocalStore:
    """SQLite-backed stand-in for browser localStorage."""

    def __init__(self, db_path: str | Path | None = None) -> None:
        self.db_path = str(db_path or settings.store_path)
        self.init_db()

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(self.db_path)
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def init_db(self) -> None:
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv(
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
                """
            )

    # Raw access
    def get_raw(self, key: str) -> Optional[str]:
        with self._connect() as conn:
            row = conn.execute("SELECT value FROM kv WHERE key=?", (key,)).fetchone()
        return row[0] if row else None

    def set_raw(self, key: str, value: str) -> None:
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO kv(key, value) VALUES (?, ?) ON CONFLICT(key) DO UPDATE SET value=excluded.value",
                (key, value),
            )

    def has(self, key: str) -> bool:
        return self.get_raw(key) is not None

    def remove(self, key: str) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM kv WHERE key=?", (key,))

    def clear(self) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM kv")

    def keys(self) -> List[str]:
        with self._connect() as conn:
            return [row[0] for row in conn.execute("SELECT key FROM kv ORDER BY key")]

    # JSON helpers
    def get_value(self, key: str, default: Any = None) -> Any:
        raw = self.get_raw(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Discarding unreadable value stored under %r", key)
            return default

    def set_value(self, key: str, value: Any) -> None:
        self.set_raw(key, json.dumps(value))

    def get_items(self, key: str) -> List[Dict[str, Any]]:
        """Return the array stored under ``key``; anything that is not a list reads as empty."""
        value = self.get_value(key, [])
        return value if isinstance(value, list) else []

    def set_items(self, key: str, items: List[Dict[str, Any]]) -> None:
        self.set_value(key, list(items))
