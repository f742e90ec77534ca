"""Protocol definition for the exchange clients tradedesk talks to."""

from __future__ import annotations

from typing import Any, Protocol


class ExchangeClient(Protocol):
    """Subset of the ccxt async exchange API used by tradedesk."""

    id: str
    has: dict[str, Any]
    markets: dict[str, dict[str, Any]] | None

    async def fetch_balance(self, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """Fetch account balances.

        Args:
            params: Venue-specific parameters, e.g. ``{"type": "margin"}``

        Returns:
            ccxt balance structure with ``total``, ``free`` and ``used``
            mappings keyed by asset symbol
        """
        ...

    async def load_markets(self, reload: bool = False) -> dict[str, dict[str, Any]]:
        """Load (and memoize) the market catalogue keyed by market symbol."""
        ...

    async def fetch_markets(self, params: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        """Fetch the market catalogue as a list of market structures."""
        ...

    async def fetch_ticker(self, symbol: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        ...

    async def fetch_tickers(
        self,
        symbols: list[str] | None = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, dict[str, Any]]:
        ...

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        ...
