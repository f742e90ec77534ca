"""SQLite plumbing shared by the user-scoped stores."""

from __future__ import annotations

import sqlite3
from pathlib import Path

MEMORY_DB = ":memory:"


class SQLiteStore:
    """Base class for a store that owns one or more tables in a SQLite file.

    A file database is opened per operation. An in-memory database only
    lives as long as its connection, so ``":memory:"`` keeps a single
    connection open for the lifetime of the store.
    """

    def __init__(self, db_path: Path | str) -> None:
        self._memory_conn: sqlite3.Connection | None = None
        if str(db_path) == MEMORY_DB:
            self.db_path: Path | str = MEMORY_DB
            self._memory_conn = self._open(MEMORY_DB)
        else:
            self.db_path = Path(db_path)
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_sqlite()

    @staticmethod
    def _open(target: Path | str) -> sqlite3.Connection:
        conn = sqlite3.connect(target)
        conn.row_factory = sqlite3.Row
        return conn

    def _connect(self) -> sqlite3.Connection:
        if self._memory_conn is not None:
            return self._memory_conn
        return self._open(self.db_path)

    def _init_sqlite(self) -> None:
        raise NotImplementedError

    def close(self) -> None:
        if self._memory_conn is not None:
            self._memory_conn.close()
            self._memory_conn = None
