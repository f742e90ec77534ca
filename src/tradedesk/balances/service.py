"""Per-connection balance snapshot with USD valuation."""

from __future__ import annotations

import logging
from typing import Sequence

from ..connections import Connection
from ..errors import StakingFeedError
from ..exchanges.protocol import ExchangeClient
from ..exchanges.venues import get_venue_profile
from .aggregator import AggregatedBalances, BalanceEntry, market_assets
from .pricing import PriceClient
from .staking import StakingFeed

logger = logging.getLogger(__name__)


class BalanceService:
    """Builds the balance view of one connection.

    Exchange errors from the unqualified balance query and from market
    loading propagate to the caller. Per-wallet-type failures, staking
    failures and price failures are logged and leave a partial result.
    """

    def __init__(
        self,
        price_client: PriceClient,
        staking_feed: StakingFeed,
        *,
        wallet_types: dict[str, list[str]] | None = None,
        staking_asset: str = "HYPE",
        stable_asset: str = "USDC",
    ) -> None:
        self.price_client = price_client
        self.staking_feed = staking_feed
        self.wallet_types = wallet_types or {"default": ["spot"]}
        self.staking_asset = staking_asset
        self.stable_asset = stable_asset

    def wallet_types_for(self, exchange_id: str) -> list[str]:
        return list(self.wallet_types.get(exchange_id) or self.wallet_types.get("default") or ["spot"])

    async def fetch_balances(
        self,
        client: ExchangeClient,
        connection: Connection,
        *,
        cookie: str | None = None,
        price_base_url: str | None = None,
    ) -> list[BalanceEntry]:
        """Fetch, merge and value the balances of ``connection``.

        Args:
            client: Exchange client built for ``connection``
            connection: Connection being queried
            cookie: Caller's ``Cookie`` header, forwarded to the price endpoint
            price_base_url: Origin of the price endpoint for this request

        Returns:
            Balance entries sorted by asset symbol
        """
        exchange_id = connection.exchange_id
        balances = AggregatedBalances()

        if get_venue_profile(exchange_id).uses_wallet_address:
            await self._collect_wallet_venue(client, connection, balances)
        else:
            await self._collect_wallet_types(client, exchange_id, balances)

        markets = await client.load_markets()
        assets = market_assets(markets) | balances.nonzero_assets()
        entries = balances.entries(assets)

        await self.add_usd_values(entries, connection, cookie=cookie, base_url=price_base_url)

        logger.info(
            "Fetched %d assets (%d with balance) for connection %s on %s",
            len(entries), len(balances.nonzero_assets()), connection.id, exchange_id,
        )
        return entries

    async def _collect_wallet_venue(
        self,
        client: ExchangeClient,
        connection: Connection,
        balances: AggregatedBalances,
    ) -> None:
        balance = await client.fetch_balance()

        if get_venue_profile(connection.exchange_id).staking:
            try:
                summary = await self.staking_feed.fetch_summary(connection.key)
            except StakingFeedError as e:
                logger.warning("Error fetching staking data for connection %s: %s", connection.id, e)
            else:
                balances.add_staking(self.staking_asset, summary)

        balances.merge(balance)

    async def _collect_wallet_types(
        self,
        client: ExchangeClient,
        exchange_id: str,
        balances: AggregatedBalances,
    ) -> None:
        for wallet_type in self.wallet_types_for(exchange_id):
            try:
                balance = await client.fetch_balance({"type": wallet_type})
            except Exception as e:
                logger.warning("Unable to retrieve %s balances for wallet type %s: %s", exchange_id, wallet_type, e)
                continue
            count = balances.merge(balance)
            if count:
                logger.debug("%s %s: %d assets", exchange_id, wallet_type, count)

        if not len(balances):
            logger.debug("No %s balances by wallet type, trying unqualified query", exchange_id)
            balances.merge(await client.fetch_balance())

    async def add_usd_values(
        self,
        entries: Sequence[BalanceEntry],
        connection: Connection,
        *,
        cookie: str | None = None,
        base_url: str | None = None,
    ) -> None:
        """Set ``usd_value`` in place; assets without a price keep ``None``."""
        for entry in entries:
            if entry.asset == self.stable_asset:
                entry.usd_value = entry.total

        priced = [entry for entry in entries if entry.asset != self.stable_asset]
        if not priced:
            return

        try:
            prices = await self.price_client.get_prices(
                connection.id,
                [entry.asset for entry in priced],
                cookie=cookie,
                base_url=base_url,
            )
        except Exception as e:
            logger.error("Error fetching prices for connection %s: %s", connection.id, e)
            return

        for entry in priced:
            price = prices.get(entry.asset)
            if price is not None:
                entry.usd_value = entry.total * price
