"""Reuse of exchange clients (and their loaded markets) across requests."""

from __future__ import annotations

import logging
from typing import Callable

from ..cache import TTLCache
from ..connections import Connection
from .factory import create_exchange_client
from .protocol import ExchangeClient

logger = logging.getLogger(__name__)


class ExchangeClientCache:
    """Per-connection cache of exchange clients.

    A client is rebuilt once its entry is older than ``ttl`` seconds; the
    replaced client is closed at that point.
    """

    def __init__(
        self,
        ttl: float = 300.0,
        *,
        factory: Callable[[Connection], ExchangeClient] | None = None,
    ) -> None:
        self._cache: TTLCache[str, ExchangeClient] = TTLCache(ttl)
        self._factory = factory or create_exchange_client

    async def get(self, connection: Connection) -> ExchangeClient:
        if self._cache.expired(connection.id):
            stale = self._cache.pop(connection.id)
            if stale is not None:
                await self._close(stale)

        client = self._cache.get(connection.id)
        if client is not None:
            return client

        client = self._factory(connection)
        self._cache.set(connection.id, client)
        logger.debug("Cached new %s client for connection %s", connection.exchange_id, connection.id)
        return client

    async def discard(self, connection_id: str) -> None:
        client = self._cache.pop(connection_id)
        if client is not None:
            await self._close(client)

    async def close(self) -> None:
        for client in self._cache.values():
            await self._close(client)
        self._cache.clear()

    @staticmethod
    async def _close(client: ExchangeClient) -> None:
        try:
            await client.close()
        except Exception as e:
            logger.warning("Failed to close exchange client: %s", e)

    def __len__(self) -> int:
        return len(self._cache)
