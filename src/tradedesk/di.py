from __future__ import annotations

import asyncio
import functools
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .balances import BalanceService, PriceClient, PriceLookup, StakingFeed
from .bots import BotStore
from .connections import ConnectionStore
from .exchanges import ExchangeClientCache, create_exchange_client

if TYPE_CHECKING:
    from .settings import Settings


@dataclass(slots=True)
class AppContainer:
    settings: "Settings"
    connections: ConnectionStore
    bots: BotStore
    client_cache: ExchangeClientCache
    price_client: PriceClient
    staking_feed: StakingFeed
    balance_service: BalanceService
    price_lookup: PriceLookup
    shutdown: asyncio.Event = field(default_factory=asyncio.Event)

    async def close(self) -> None:
        await self.client_cache.close()
        await self.price_client.close()
        await self.staking_feed.close()
        self.connections.close()
        self.bots.close()


def build_container(
    settings: "Settings",
    connections: ConnectionStore | None = None,
    bots: BotStore | None = None,
) -> AppContainer:
    """Wire the stores, caches and services described by ``settings``."""
    store = connections or ConnectionStore(settings.server.database)
    bot_store = bots or BotStore(settings.server.database)

    factory = functools.partial(
        create_exchange_client,
        timeout_ms=settings.exchanges.timeout_ms,
        sandbox=settings.exchanges.sandbox,
    )
    client_cache = ExchangeClientCache(settings.cache.client_ttl, factory=factory)

    price_client = PriceClient(
        settings.pricing.base_url,
        ttl=settings.cache.price_ttl,
        timeout=settings.pricing.timeout,
        max_retries=settings.pricing.max_retries,
    )
    staking_feed = StakingFeed(
        settings.staking.url,
        timeout=settings.staking.timeout,
        max_retries=settings.staking.max_retries,
    )
    balance_service = BalanceService(
        price_client,
        staking_feed,
        wallet_types=settings.exchanges.wallet_types,
        staking_asset=settings.staking.asset,
        stable_asset=settings.pricing.stable_asset,
    )

    return AppContainer(
        settings=settings,
        connections=store,
        bots=bot_store,
        client_cache=client_cache,
        price_client=price_client,
        staking_feed=staking_feed,
        balance_service=balance_service,
        price_lookup=PriceLookup(settings.pricing.quote_candidates),
    )
