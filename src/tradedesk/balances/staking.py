"""Client for the staking summary endpoint of wallet-address venues."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import aiohttp

from ..errors import StakingFeedError

logger = logging.getLogger(__name__)


class StakingFeed:
    """Fetches delegated/undelegated/pending amounts for a wallet address."""

    def __init__(
        self,
        url: str = "https://api.hyperliquid.xyz/info",
        *,
        timeout: float = 10.0,
        max_retries: int = 2,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self.url = url
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.max_retries = max(1, max_retries)
        self.session = session
        self._own_session = session is None

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self.session is None:
            self.session = aiohttp.ClientSession(timeout=self.timeout)
        return self.session

    async def fetch_summary(self, user: str) -> dict[str, Any]:
        """POST a ``delegatorSummary`` query for ``user``.

        Raises:
            StakingFeedError: If every attempt failed, returned a non-200 status
                or answered with a body that is not a JSON object
        """
        session = await self._ensure_session()
        payload = {"user": user, "type": "delegatorSummary"}
        last_error: Exception | None = None

        for attempt in range(1, self.max_retries + 1):
            try:
                async with session.post(self.url, json=payload, timeout=self.timeout) as resp:
                    if resp.status != 200:
                        raise StakingFeedError(f"Staking endpoint returned {resp.status}")
                    data = await resp.json()
                if not isinstance(data, dict):
                    raise StakingFeedError(f"Unexpected staking payload: {type(data).__name__}")
                return data
            except (aiohttp.ClientError, asyncio.TimeoutError, ValueError, StakingFeedError) as e:
                last_error = e
                logger.debug("Staking query attempt %d/%d failed: %s", attempt, self.max_retries, e)

        raise StakingFeedError(f"Staking summary unavailable: {last_error}")

    async def close(self) -> None:
        if self.session and self._own_session:
            await self.session.close()
            self.session = None
