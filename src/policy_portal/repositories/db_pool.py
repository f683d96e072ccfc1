"""Thread-local database connection management."""

from __future__ import annotations

import sqlite3
import threading
from pathlib import Path
from typing import Any


class ThreadLocalConnection:
    """Maintain one SQLite connection per thread."""

    def __init__(self, db_path: str):
        self._db_path = db_path
        self._local = threading.local()

    def _open_connection(self) -> sqlite3.Connection:
        db_path = Path(self._db_path)
        db_path.parent.mkdir(parents=True, exist_ok=True)

        connection = sqlite3.connect(str(db_path), check_same_thread=False)
        connection.row_factory = sqlite3.Row
        return connection

    def get_connection(self) -> sqlite3.Connection:
        """Return current thread's connection, creating it when needed."""
        connection = getattr(self._local, "connection", None)
        if connection is None:
            connection = self._open_connection()
            self._local.connection = connection
        return connection

    def close_connection(self) -> None:
        """Close current thread's connection."""
        connection = getattr(self._local, "connection", None)
        if connection is not None:
            connection.close()
            self._local.connection = None

    def execute(self, query: str, params: tuple[Any, ...] = ()) -> sqlite3.Cursor:
        """Execute a query and commit the transaction."""
        connection = self.get_connection()
        cursor = connection.cursor()
        cursor.execute(query, params)
        connection.commit()
        return cursor

    def fetchall(self, query: str, params: tuple[Any, ...] = ()) -> list[sqlite3.Row]:
        """Fetch all rows for a query."""
        cursor = self.execute(query, params)
        return cursor.fetchall()

    def fetchone(self, query: str, params: tuple[Any, ...] = ()) -> sqlite3.Row | None:
        """Fetch first row for a query."""
        cursor = self.execute(query, params)
        return cursor.fetchone()
