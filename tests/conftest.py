"""Pytest configuration and fixtures."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from tradedesk.connections import Connection


def create_async_response(status=200, json_data=None):
    """Create a mock aiohttp response usable with ``async with``."""
    resp = AsyncMock()
    resp.status = status
    resp.json = AsyncMock(return_value=json_data if json_data is not None else {})
    resp.__aenter__ = AsyncMock(return_value=resp)
    resp.__aexit__ = AsyncMock(return_value=None)
    return resp


def make_exchange_client(balance=None, markets=None, exchange_id="binance", tickers=None):
    """Create a fake ccxt async client."""
    client = MagicMock()
    client.id = exchange_id
    client.has = {"fetchBalance": True, "fetchTickers": True}
    if callable(balance):
        client.fetch_balance = AsyncMock(side_effect=balance)
    else:
        client.fetch_balance = AsyncMock(return_value=balance or {})
    client.load_markets = AsyncMock(return_value=markets or {})
    client.fetch_markets = AsyncMock(return_value=list((markets or {}).values()))
    client.fetch_tickers = AsyncMock(return_value=tickers or {})
    client.fetch_ticker = AsyncMock(side_effect=lambda symbol, *a: (tickers or {})[symbol])
    client.close = AsyncMock()
    return client


def market(base, quote, active=True):
    return {"symbol": f"{base}/{quote}", "base": base, "quote": quote, "active": active}


@pytest.fixture
def api_key():
    """Test API key."""
    return "test_api_key_123456"


@pytest.fixture
def api_secret():
    """Test API secret."""
    return "test_api_secret_789012"


@pytest.fixture
def wallet_address():
    """Test wallet address."""
    return "0x1234567890abcdef1234567890abcdef12345678"


@pytest.fixture
def binance_connection(api_key, api_secret):
    return Connection(
        id="conn-binance",
        user_id="user-1",
        name="Main",
        exchange="Binance",
        key=api_key,
        secret=api_secret,
    )


@pytest.fixture
def hyperliquid_connection(wallet_address):
    return Connection(
        id="conn-hl",
        user_id="user-1",
        name="HL",
        exchange="hyperliquid",
        key=wallet_address,
        api_private_key="0xprivate",
    )


@pytest.fixture
def sample_balance_response():
    """Sample ccxt balance structure."""
    return {
        "total": {"BTC": 0.6, "ETH": 12.0, "USDC": 1000.0},
        "free": {"BTC": 0.5, "ETH": 10.0, "USDC": 1000.0},
        "used": {"BTC": 0.1, "ETH": 2.0, "USDC": 0.0},
    }
