"""Exchange clients and connectivity layer."""

from .protocol import ExchangeClient
from .factory import create_exchange_client, supported_exchanges, EXCHANGE_CLIENTS
from .client_cache import ExchangeClientCache
from .venues import VenueProfile, get_venue_profile, VENUE_PROFILES

__all__ = [
    "ExchangeClient",
    "create_exchange_client",
    "supported_exchanges",
    "EXCHANGE_CLIENTS",
    "ExchangeClientCache",
    "VenueProfile",
    "get_venue_profile",
    "VENUE_PROFILES",
]
