"""USD prices for balance valuation.

``PriceClient`` is what the balance service talks to: it keeps a short-lived
per-connection price cache in front of the ``/api/ccxt/price`` endpoint.
``PriceLookup`` is what that endpoint runs: it reads tickers from the
connection's own exchange.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable, Sequence

import aiohttp

from ..cache import TTLCache
from ..errors import PriceServiceError
from ..exchanges.protocol import ExchangeClient

logger = logging.getLogger(__name__)

PRICE_PATH = "/api/ccxt/price"


def _as_price(value: Any) -> float | None:
    try:
        price = float(value)
    except (TypeError, ValueError):
        return None
    return price if price > 0 else None


class PriceClient:
    """Batched, cached client of the price endpoint.

    Prices are cached per (connection id, symbol) for ``ttl`` seconds.
    Symbols the endpoint had no price for are cached as unknown too, so a
    repeated request inside the TTL window never goes back to the network.
    """

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:8080",
        *,
        ttl: float = 30.0,
        timeout: float = 10.0,
        max_retries: int = 2,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.max_retries = max(1, max_retries)
        self.session = session
        self._own_session = session is None
        self._cache: TTLCache[tuple[str, str], float | None] = TTLCache(ttl)

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self.session is None:
            self.session = aiohttp.ClientSession(timeout=self.timeout)
        return self.session

    async def get_prices(
        self,
        connection_id: str,
        symbols: Iterable[str],
        *,
        cookie: str | None = None,
        base_url: str | None = None,
    ) -> dict[str, float]:
        """Return known USD prices for ``symbols``.

        Args:
            connection_id: Connection whose exchange quotes the prices
            symbols: Asset symbols to price
            cookie: Raw ``Cookie`` header of the caller, forwarded for auth
            base_url: Origin of the price endpoint, overriding the configured one

        Returns:
            Mapping of symbol to price; symbols without a price are absent
        """
        wanted = list(dict.fromkeys(symbols))
        prices: dict[str, float] = {}
        missing: list[str] = []

        for symbol in wanted:
            key = (connection_id, symbol)
            if key in self._cache:
                price = self._cache.get(key)
                if price is not None:
                    prices[symbol] = price
            else:
                missing.append(symbol)

        if not missing:
            return prices

        try:
            fetched = await self._request(connection_id, missing, cookie=cookie, base_url=base_url)
        except PriceServiceError as e:
            logger.error("Error fetching prices for connection %s: %s", connection_id, e)
            return prices

        for symbol in missing:
            price = _as_price(fetched.get(symbol))
            self._cache.set((connection_id, symbol), price)
            if price is not None:
                prices[symbol] = price

        return prices

    async def _request(
        self,
        connection_id: str,
        symbols: Sequence[str],
        *,
        cookie: str | None,
        base_url: str | None,
    ) -> dict[str, Any]:
        session = await self._ensure_session()
        url = f"{(base_url or self.base_url).rstrip('/')}{PRICE_PATH}"
        params = {"id": connection_id, "symbols": ",".join(symbols)}
        headers = {"Cookie": cookie} if cookie else {}
        last_error: Exception | None = None

        for attempt in range(1, self.max_retries + 1):
            try:
                async with session.get(url, params=params, headers=headers, timeout=self.timeout) as resp:
                    if resp.status != 200:
                        raise PriceServiceError(f"Price endpoint returned {resp.status}")
                    data = await resp.json()
                prices = data.get("prices") if isinstance(data, dict) else None
                return prices if isinstance(prices, dict) else {}
            except (aiohttp.ClientError, asyncio.TimeoutError, ValueError, PriceServiceError) as e:
                last_error = e
                logger.debug("Price request attempt %d/%d failed: %s", attempt, self.max_retries, e)

        raise PriceServiceError(f"Price service unavailable: {last_error}")

    def invalidate(self, connection_id: str, symbols: Iterable[str]) -> None:
        for symbol in symbols:
            self._cache.pop((connection_id, symbol))

    async def close(self) -> None:
        if self.session and self._own_session:
            await self.session.close()
            self.session = None


class PriceLookup:
    """Reads last-trade prices for asset symbols from an exchange's tickers."""

    def __init__(self, quote_candidates: Sequence[str] = ("USDC", "USDT", "USD")) -> None:
        self.quote_candidates = list(quote_candidates)

    def resolve_markets(self, markets: dict[str, Any], symbols: Iterable[str]) -> dict[str, str]:
        """Pick the first ``SYMBOL/QUOTE`` market that exists for each symbol."""
        resolved: dict[str, str] = {}
        for symbol in symbols:
            for quote in self.quote_candidates:
                if symbol == quote:
                    continue
                market = f"{symbol}/{quote}"
                if market in markets:
                    resolved[symbol] = market
                    break
        return resolved

    async def fetch_prices(self, client: ExchangeClient, symbols: Iterable[str]) -> dict[str, float]:
        markets = await client.load_markets()
        resolved = self.resolve_markets(markets, symbols)
        if not resolved:
            return {}

        tickers: dict[str, Any] = {}
        if client.has.get("fetchTickers"):
            tickers = await client.fetch_tickers(list(resolved.values()))
        else:
            for market in resolved.values():
                try:
                    tickers[market] = await client.fetch_ticker(market)
                except Exception as e:
                    logger.warning("Error fetching ticker %s: %s", market, e)

        prices: dict[str, float] = {}
        for symbol, market in resolved.items():
            ticker = tickers.get(market) or {}
            price = _as_price(ticker.get("last")) or _as_price(ticker.get("close"))
            if price is not None:
                prices[symbol] = price
        return prices
