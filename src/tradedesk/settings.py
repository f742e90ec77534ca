from __future__ import annotations

from pydantic import BaseModel, Field


def _default_wallet_types() -> dict[str, list[str]]:
    return {
        "hyperliquid": ["spot"],
        "binance": ["spot", "margin"],
        "coinbase": ["spot"],
        "kraken": ["spot", "margin"],
        "default": ["spot"],
    }


class ServerSettings(BaseModel):
    host: str = "127.0.0.1"
    port: int = Field(default=8080, gt=0, le=65535)
    session_cookie: str = "tradedesk_session"
    database: str = "data/tradedesk.db"

    model_config = {"extra": "forbid"}


class CacheSettings(BaseModel):
    client_ttl: float = Field(default=300.0, gt=0)
    price_ttl: float = Field(default=30.0, gt=0)

    model_config = {"extra": "forbid"}


class ExchangeSettings(BaseModel):
    timeout_ms: int = Field(default=30000, gt=0)
    sandbox: bool = False
    wallet_types: dict[str, list[str]] = Field(default_factory=_default_wallet_types)

    model_config = {"extra": "forbid"}


class StakingSettings(BaseModel):
    url: str = "https://api.hyperliquid.xyz/info"
    asset: str = "HYPE"
    timeout: float = Field(default=10.0, gt=0)
    max_retries: int = Field(default=2, ge=1)

    model_config = {"extra": "forbid"}


class PricingSettings(BaseModel):
    base_url: str = "http://127.0.0.1:8080"
    stable_asset: str = "USDC"
    quote_candidates: list[str] = Field(default_factory=lambda: ["USDC", "USDT", "USD"])
    timeout: float = Field(default=10.0, gt=0)
    max_retries: int = Field(default=2, ge=1)

    model_config = {"extra": "forbid"}


class Settings(BaseModel):
    env: str = "dev"
    server: ServerSettings = Field(default_factory=ServerSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    exchanges: ExchangeSettings = Field(default_factory=ExchangeSettings)
    staking: StakingSettings = Field(default_factory=StakingSettings)
    pricing: PricingSettings = Field(default_factory=PricingSettings)

    model_config = {"extra": "forbid"}
