"""JSON key-value store backed by the ``kv_store`` table."""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Generic, TypeVar

from policy_portal.repositories.db_pool import ThreadLocalConnection

logger = logging.getLogger(__name__)

T = TypeVar("T")


class KeyValueStore:
    """Reads and writes JSON-serializable values under string keys."""

    def __init__(self, pool: ThreadLocalConnection):
        self._pool = pool

    def read(self, key: str, default: Any) -> Any:
        """Return the stored value, or ``default`` when missing or unreadable."""
        row = self._pool.fetchone("SELECT value FROM kv_store WHERE key = ?", (key,))
        if row is None:
            return default
        try:
            return json.loads(row["value"])
        except (TypeError, ValueError) as error:
            logger.warning("Stored value for %r is not valid JSON, using default: %s", key, error)
            return default

    def write(self, key: str, value: Any) -> None:
        """Serialize ``value`` and upsert it under ``key``."""
        payload = json.dumps(value, ensure_ascii=False)
        self._pool.execute(
            """
            INSERT INTO kv_store (key, value, updated_at)
            VALUES (?, ?, CURRENT_TIMESTAMP)
            ON CONFLICT(key) DO UPDATE SET
                value = excluded.value,
                updated_at = excluded.updated_at
            """,
            (key, payload),
        )


class PersistedValue(Generic[T]):
    """In-memory value that writes through to the store on every change."""

    def __init__(self, store: KeyValueStore, key: str, default: T):
        self._store = store
        self._key = key
        self._value: T = store.read(key, default)

    @property
    def key(self) -> str:
        return self._key

    def get(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        # Memory is updated first; a failing write leaves the two out of step.
        self._value = value
        self._store.write(self._key, value)

    def update(self, transform: Callable[[T], T]) -> T:
        self.set(transform(self._value))
        return self._value
