"""Merging of per-wallet balance snapshots into one per-asset view."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

logger = logging.getLogger(__name__)

STAKED_SUFFIX = "-STAKED"
UNSTAKED_SUFFIX = "-UNSTAKED"
PENDING_SUFFIX = "-PENDING"


def to_number(value: Any) -> float:
    """Coerce a ccxt amount (number, numeric string or None) to float."""
    if value is None or value == "":
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring non-numeric balance amount %r", value)
        return 0.0


@dataclass
class BalanceEntry:
    """Balance of a single asset as shown on the dashboard."""

    asset: str
    total: float = 0.0
    free: float = 0.0
    used: float = 0.0
    usd_value: float | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "asset": self.asset,
            "total": self.total,
            "free": self.free,
            "used": self.used,
        }
        # An unknown USD value is left out rather than reported as 0
        if self.usd_value is not None:
            data["usdValue"] = self.usd_value
        return data


@dataclass
class AggregatedBalances:
    """Running total/free/used sums keyed by asset symbol."""

    total: dict[str, float] = field(default_factory=dict)
    free: dict[str, float] = field(default_factory=dict)
    used: dict[str, float] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.total)

    def __contains__(self, asset: object) -> bool:
        return asset in self.total

    def merge(self, balance: Mapping[str, Any] | None) -> int:
        """Add one ccxt balance structure to the running sums.

        The first occurrence of an asset initializes its fields, with free
        and used defaulting to 0 when the snapshot lacks them. Later
        occurrences add to what is already there.

        Returns:
            Number of assets found in ``balance``
        """
        if not balance:
            return 0
        totals = balance.get("total") or {}
        frees = balance.get("free") or {}
        useds = balance.get("used") or {}

        for asset, amount in totals.items():
            self.total[asset] = self.total.get(asset, 0.0) + to_number(amount)
            self.free[asset] = self.free.get(asset, 0.0) + to_number(frees.get(asset))
            self.used[asset] = self.used.get(asset, 0.0) + to_number(useds.get(asset))

        return len(totals)

    def set_asset(self, asset: str, *, free: float = 0.0, used: float = 0.0) -> None:
        self.total[asset] = free + used
        self.free[asset] = free
        self.used[asset] = used

    def add_staking(self, asset: str, summary: Mapping[str, Any]) -> None:
        """Record a staking summary as three synthetic assets.

        Delegated and pending-withdrawal amounts are locked (``used``),
        undelegated amounts are available (``free``). Components missing
        from ``summary`` are skipped.
        """
        delegated = summary.get("delegated")
        if delegated:
            self.set_asset(f"{asset}{STAKED_SUFFIX}", used=to_number(delegated))

        undelegated = summary.get("undelegated")
        if undelegated:
            self.set_asset(f"{asset}{UNSTAKED_SUFFIX}", free=to_number(undelegated))

        pending = summary.get("totalPendingWithdrawal")
        if pending:
            self.set_asset(f"{asset}{PENDING_SUFFIX}", used=to_number(pending))

    def nonzero_assets(self) -> set[str]:
        return {asset for asset, amount in self.total.items() if amount}

    def entries(self, assets: Iterable[str]) -> list[BalanceEntry]:
        """One entry per asset, sorted by symbol; unknown assets read as zero."""
        return [
            BalanceEntry(
                asset=asset,
                total=self.total.get(asset, 0.0),
                free=self.free.get(asset, 0.0),
                used=self.used.get(asset, 0.0),
            )
            for asset in sorted(assets)
        ]


def market_assets(markets: Mapping[str, Any] | Iterable[Mapping[str, Any]]) -> set[str]:
    """Base and quote symbols of every market in a ccxt catalogue."""
    values = markets.values() if isinstance(markets, Mapping) else markets
    assets: set[str] = set()
    for market in values:
        if not market:
            continue
        if market.get("base"):
            assets.add(market["base"])
        if market.get("quote"):
            assets.add(market["quote"])
    return assets
