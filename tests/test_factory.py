"""Tests for exchange client factory."""

import ccxt.async_support as ccxt_async
import pytest

from tradedesk.connections import Connection
from tradedesk.errors import ExchangeConfigError, UnsupportedExchangeError
from tradedesk.exchanges.factory import (
    EXCHANGE_CLIENTS,
    build_client_config,
    create_exchange_client,
    supported_exchanges,
)
from tradedesk.exchanges.venues import get_venue_profile


def _connection(exchange, key="test_key", **kwargs):
    return Connection(id="c1", user_id="u1", name="test", exchange=exchange, key=key, **kwargs)


class TestExchangeFactory:
    """Tests for exchange client factory."""

    @pytest.mark.asyncio
    async def test_create_binance_client(self):
        """Test creating Binance client."""
        client = create_exchange_client(_connection("binance", secret="test_secret"))
        try:
            assert isinstance(client, ccxt_async.binance)
            assert client.apiKey == "test_key"
            assert client.secret == "test_secret"
            assert client.options["defaultType"] == "spot"
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_create_hyperliquid_client(self, wallet_address):
        """Wallet venues identify the account by wallet address."""
        client = create_exchange_client(
            _connection("hyperliquid", key=wallet_address, api_private_key="0xpriv")
        )
        try:
            assert isinstance(client, ccxt_async.hyperliquid)
            assert client.walletAddress == wallet_address
            assert client.privateKey == "0xpriv"
            assert client.options["defaultType"] == "spot"
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_case_insensitive_exchange_names(self):
        """Test that exchange names are case-insensitive."""
        client1 = create_exchange_client(_connection("KRAKEN"))
        client2 = create_exchange_client(_connection("kraken"))
        try:
            assert type(client1) == type(client2)
        finally:
            await client1.close()
            await client2.close()

    def test_unsupported_exchange(self):
        """Test error for unsupported exchange."""
        with pytest.raises(UnsupportedExchangeError, match="Unsupported exchange"):
            create_exchange_client(_connection("invalid_exchange"))

    def test_supported_exchanges(self):
        expected = {"binance", "coinbase", "kraken", "hyperliquid"}
        assert expected.issubset(EXCHANGE_CLIENTS)
        names = supported_exchanges()
        assert names == sorted(names)


class TestBuildClientConfig:
    """Tests for the ccxt config built from a connection."""

    def test_key_secret_config(self):
        config = build_client_config(_connection("binance", secret="s"), timeout_ms=5000)
        assert config == {
            "apiKey": "test_key",
            "secret": "s",
            "enableRateLimit": True,
            "timeout": 5000,
            "options": {"defaultType": "spot"},
        }

    def test_secret_omitted_when_absent(self):
        config = build_client_config(_connection("coinbase"))
        assert "secret" not in config
        assert config["timeout"] == 30000

    def test_wallet_config(self, wallet_address):
        config = build_client_config(_connection("Hyperliquid", key=wallet_address))
        assert config["walletAddress"] == wallet_address
        assert "privateKey" not in config
        assert config["options"]["defaultType"] == "spot"
        assert config["options"]["fetchMarkets"] == {"types": ["spot"]}

    def test_wallet_config_with_api_wallet(self, wallet_address):
        config = build_client_config(_connection(
            "hyperliquid",
            key=wallet_address,
            api_wallet_address="0xagent",
            api_private_key="0xagentkey",
        ))
        assert config["walletAddress"] == wallet_address
        assert config["apiWalletAddress"] == "0xagent"
        assert config["privateKey"] == "0xagentkey"

    def test_api_wallet_ignored_for_key_venues(self):
        config = build_client_config(_connection("binance", api_wallet_address="0xagent"))
        assert "apiWalletAddress" not in config

    def test_wallet_venue_requires_address(self):
        with pytest.raises(ExchangeConfigError, match="wallet address"):
            build_client_config(_connection("hyperliquid", key=""))

    def test_profile_options_not_shared(self):
        config = build_client_config(_connection("binance"))
        config["options"]["defaultType"] = "margin"
        assert get_venue_profile("binance").options["defaultType"] == "spot"
