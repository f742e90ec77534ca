"""User-owned exchange connections stored in SQLite."""

from __future__ import annotations

import logging
import sqlite3
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from .storage import SQLiteStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Connection:
    """Credentials for one exchange account, owned by a single user."""

    id: str
    user_id: str
    name: str
    exchange: str
    key: str
    secret: str | None = None
    api_wallet_address: str | None = None
    api_private_key: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def exchange_id(self) -> str:
        return self.exchange.lower()

    def public_dict(self) -> dict[str, Any]:
        """Fields that are safe to send back to the dashboard."""
        return {
            "id": self.id,
            "name": self.name,
            "exchange": self.exchange,
            "createdAt": self.created_at.isoformat(),
        }


class ConnectionStore(SQLiteStore):
    """SQLite-backed store of connections. Records are never updated in place."""

    def _init_sqlite(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS connections (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    name TEXT NOT NULL,
                    exchange TEXT NOT NULL,
                    key TEXT NOT NULL,
                    secret TEXT,
                    api_wallet_address TEXT,
                    api_private_key TEXT,
                    created_at TEXT NOT NULL
                )
            """)

            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_connections_user
                ON connections(user_id)
            """)

    @staticmethod
    def _from_row(row: sqlite3.Row) -> Connection:
        return Connection(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            exchange=row["exchange"],
            key=row["key"],
            secret=row["secret"],
            api_wallet_address=row["api_wallet_address"],
            api_private_key=row["api_private_key"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    def add(
        self,
        user_id: str,
        name: str,
        exchange: str,
        key: str,
        *,
        secret: str | None = None,
        api_wallet_address: str | None = None,
        api_private_key: str | None = None,
    ) -> Connection:
        connection = Connection(
            id=uuid.uuid4().hex,
            user_id=user_id,
            name=name,
            exchange=exchange,
            key=key,
            secret=secret or None,
            api_wallet_address=api_wallet_address or None,
            api_private_key=api_private_key or None,
        )
        with self._connect() as conn:
            conn.execute("""
                INSERT INTO connections (
                    id, user_id, name, exchange, key, secret,
                    api_wallet_address, api_private_key, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                connection.id, connection.user_id, connection.name,
                connection.exchange, connection.key, connection.secret,
                connection.api_wallet_address, connection.api_private_key,
                connection.created_at.isoformat(),
            ))
        logger.info("Created connection %s (%s) for user %s", connection.id, exchange, user_id)
        return connection

    def get(self, connection_id: str, user_id: str) -> Connection | None:
        """Look up a connection, only if it belongs to ``user_id``."""
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM connections WHERE id = ? AND user_id = ?",
                (connection_id, user_id),
            ).fetchone()
        return self._from_row(row) if row else None

    def list_for_user(self, user_id: str) -> list[Connection]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM connections WHERE user_id = ? ORDER BY created_at",
                (user_id,),
            ).fetchall()
        return [self._from_row(row) for row in rows]

    def delete(self, connection_id: str, user_id: str) -> bool:
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM connections WHERE id = ? AND user_id = ?",
                (connection_id, user_id),
            )
            deleted = cursor.rowcount > 0
        if deleted:
            logger.info("Deleted connection %s for user %s", connection_id, user_id)
        return deleted
