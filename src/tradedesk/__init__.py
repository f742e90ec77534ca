"""tradedesk: exchange connections and balance dashboard backend."""

from .settings import Settings
from .exchanges import ExchangeClient, create_exchange_client
from .balances import BalanceEntry, BalanceService

__all__ = [
    "Settings",
    "ExchangeClient",
    "create_exchange_client",
    "BalanceEntry",
    "BalanceService",
]
