"""User-owned trading bots and their stopped/running lifecycle."""

from __future__ import annotations

import logging
import sqlite3
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from .errors import BotStateError
from .storage import SQLiteStore

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class BotStatus(str, Enum):
    STOPPED = "stopped"
    RUNNING = "running"


@dataclass(frozen=True, slots=True)
class Bot:
    id: str
    user_id: str
    name: str
    type: str
    status: BotStatus = BotStatus.STOPPED
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)

    def public_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "status": self.status.value,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }


class BotStore(SQLiteStore):
    """SQLite-backed store of bots.

    New bots start ``stopped``. ``start`` and ``stop`` are the only
    transitions and each one is rejected when the bot already has the
    target status.
    """

    def _init_sqlite(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS bots (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    name TEXT NOT NULL,
                    type TEXT NOT NULL,
                    status TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)

            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_bots_user
                ON bots(user_id)
            """)

    @staticmethod
    def _from_row(row: sqlite3.Row) -> Bot:
        return Bot(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            type=row["type"],
            status=BotStatus(row["status"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    def add(self, user_id: str, name: str, bot_type: str) -> Bot:
        bot = Bot(id=uuid.uuid4().hex, user_id=user_id, name=name, type=bot_type)
        with self._connect() as conn:
            conn.execute("""
                INSERT INTO bots (id, user_id, name, type, status, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
            """, (
                bot.id, bot.user_id, bot.name, bot.type, bot.status.value,
                bot.created_at.isoformat(), bot.updated_at.isoformat(),
            ))
        logger.info("Created %s bot %s for user %s", bot_type, bot.id, user_id)
        return bot

    def get(self, bot_id: str, user_id: str) -> Bot | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM bots WHERE id = ? AND user_id = ?",
                (bot_id, user_id),
            ).fetchone()
        return self._from_row(row) if row else None

    def list_for_user(self, user_id: str) -> list[Bot]:
        """Bots of ``user_id``, newest first."""
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM bots WHERE user_id = ? ORDER BY created_at DESC",
                (user_id,),
            ).fetchall()
        return [self._from_row(row) for row in rows]

    def delete(self, bot_id: str, user_id: str) -> bool:
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM bots WHERE id = ? AND user_id = ?",
                (bot_id, user_id),
            )
            deleted = cursor.rowcount > 0
        if deleted:
            logger.info("Deleted bot %s for user %s", bot_id, user_id)
        return deleted

    def set_status(self, bot_id: str, user_id: str, status: BotStatus) -> Bot | None:
        """Move a bot to ``status``.

        Returns:
            The updated bot, or None if the user has no such bot

        Raises:
            BotStateError: If the bot already has ``status``
        """
        bot = self.get(bot_id, user_id)
        if bot is None:
            return None
        if bot.status == status:
            raise BotStateError(f"Bot is already {status.value}")

        updated = replace(bot, status=status, updated_at=_now())
        with self._connect() as conn:
            conn.execute(
                "UPDATE bots SET status = ?, updated_at = ? WHERE id = ? AND user_id = ?",
                (updated.status.value, updated.updated_at.isoformat(), bot_id, user_id),
            )
        logger.info("Bot %s is now %s", bot_id, status.value)
        return updated

    def start(self, bot_id: str, user_id: str) -> Bot | None:
        return self.set_status(bot_id, user_id, BotStatus.RUNNING)

    def stop(self, bot_id: str, user_id: str) -> Bot | None:
        return self.set_status(bot_id, user_id, BotStatus.STOPPED)
