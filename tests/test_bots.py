"""Tests for the bot store."""

import pytest

from tradedesk.bots import Bot, BotStatus, BotStore
from tradedesk.errors import BotStateError, ErrorCode


@pytest.fixture
def store(tmp_path):
    return BotStore(tmp_path / "bots.db")


class TestBotStore:
    """Tests for BotStore."""

    def test_new_bot_is_stopped(self, store):
        bot = store.add("user-1", "Grid BTC", "grid")

        assert bot.status is BotStatus.STOPPED
        assert store.get(bot.id, "user-1") == bot

    def test_scoped_to_owner(self, store):
        bot = store.add("user-1", "Grid BTC", "grid")

        assert store.get(bot.id, "user-2") is None
        assert store.list_for_user("user-2") == []
        assert store.start(bot.id, "user-2") is None
        assert store.delete(bot.id, "user-2") is False

    def test_list_for_user(self, store):
        first = store.add("user-1", "A", "grid")
        second = store.add("user-1", "B", "auto-invest")

        assert {b.id for b in store.list_for_user("user-1")} == {first.id, second.id}

    def test_start_then_stop(self, store):
        bot = store.add("user-1", "Grid BTC", "grid")

        started = store.start(bot.id, "user-1")
        assert started.status is BotStatus.RUNNING
        assert started.updated_at >= bot.updated_at
        assert store.get(bot.id, "user-1").status is BotStatus.RUNNING

        stopped = store.stop(bot.id, "user-1")
        assert stopped.status is BotStatus.STOPPED
        assert store.get(bot.id, "user-1").status is BotStatus.STOPPED

    def test_start_running_bot_rejected(self, store):
        bot = store.add("user-1", "Grid BTC", "grid")
        store.start(bot.id, "user-1")

        with pytest.raises(BotStateError, match="already running") as exc_info:
            store.start(bot.id, "user-1")
        assert exc_info.value.code is ErrorCode.INVALID_STATE
        assert exc_info.value.status == 400

    def test_stop_stopped_bot_rejected(self, store):
        bot = store.add("user-1", "Grid BTC", "grid")

        with pytest.raises(BotStateError, match="already stopped"):
            store.stop(bot.id, "user-1")

    def test_unknown_bot(self, store):
        assert store.start("missing", "user-1") is None
        assert store.stop("missing", "user-1") is None

    def test_delete(self, store):
        bot = store.add("user-1", "Grid BTC", "grid")

        assert store.delete(bot.id, "user-1") is True
        assert store.get(bot.id, "user-1") is None

    def test_memory_database(self):
        store = BotStore(":memory:")
        bot = store.add("user-1", "Grid BTC", "grid")

        assert store.start(bot.id, "user-1").status is BotStatus.RUNNING

    def test_shares_database_file_with_connections(self, tmp_path):
        from tradedesk.connections import ConnectionStore

        path = tmp_path / "tradedesk.db"
        connections = ConnectionStore(path)
        bots = BotStore(path)
        connections.add("user-1", "Main", "binance", "key")
        bots.add("user-1", "Grid BTC", "grid")

        assert len(connections.list_for_user("user-1")) == 1
        assert len(bots.list_for_user("user-1")) == 1


class TestBot:
    """Tests for Bot."""

    def test_public_dict(self):
        bot = Bot(id="b1", user_id="user-1", name="Grid", type="grid")
        data = bot.public_dict()

        assert data["status"] == "stopped"
        assert set(data) == {"id", "name", "type", "status", "createdAt", "updatedAt"}
