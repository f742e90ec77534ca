"""Per-venue quirks: how a venue authenticates and which markets it exposes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class VenueProfile:
    """How to configure the ccxt client for one venue.

    ``auth`` is ``"wallet"`` for venues that identify the account by a
    wallet address (the connection key) and sign with a private key, or
    ``"key"`` for classic API key/secret venues.
    """

    auth: str = "key"
    options: dict[str, Any] = field(default_factory=lambda: {"defaultType": "spot"})
    staking: bool = False

    @property
    def uses_wallet_address(self) -> bool:
        return self.auth == "wallet"


DEFAULT_PROFILE = VenueProfile()

VENUE_PROFILES: dict[str, VenueProfile] = {
    "hyperliquid": VenueProfile(
        auth="wallet",
        options={"defaultType": "spot", "fetchMarkets": {"types": ["spot"]}},
        staking=True,
    ),
}


def get_venue_profile(exchange: str) -> VenueProfile:
    return VENUE_PROFILES.get(exchange.lower(), DEFAULT_PROFILE)
