"""Balance aggregation and USD valuation."""

from .aggregator import AggregatedBalances, BalanceEntry, market_assets
from .pricing import PriceClient, PriceLookup
from .service import BalanceService
from .staking import StakingFeed

__all__ = [
    "AggregatedBalances",
    "BalanceEntry",
    "market_assets",
    "PriceClient",
    "PriceLookup",
    "BalanceService",
    "StakingFeed",
]
