"""Factory for creating exchange client instances."""

from __future__ import annotations

import logging
from typing import Any

import ccxt.async_support as ccxt_async

from ..connections import Connection
from ..errors import ExchangeConfigError, UnsupportedExchangeError
from .protocol import ExchangeClient
from .venues import get_venue_profile

logger = logging.getLogger(__name__)

EXCHANGE_CLIENTS: frozenset[str] = frozenset(ccxt_async.exchanges)


def supported_exchanges() -> list[str]:
    return sorted(EXCHANGE_CLIENTS)


def build_client_config(connection: Connection, *, timeout_ms: int = 30000) -> dict[str, Any]:
    """Translate a stored connection into a ccxt constructor config.

    Raises:
        ExchangeConfigError: If a wallet-address venue has no wallet address
    """
    profile = get_venue_profile(connection.exchange_id)

    config: dict[str, Any] = {
        "apiKey": connection.key,
        "enableRateLimit": True,
        "timeout": timeout_ms,
    }

    if connection.secret:
        config["secret"] = connection.secret

    if profile.uses_wallet_address:
        if not connection.key:
            raise ExchangeConfigError(
                f"{connection.exchange} requires a wallet address as connection key"
            )
        config["walletAddress"] = connection.key
        if connection.api_wallet_address:
            config["apiWalletAddress"] = connection.api_wallet_address
        if connection.api_private_key:
            config["privateKey"] = connection.api_private_key

    config["options"] = dict(profile.options)
    return config


def create_exchange_client(
    connection: Connection,
    *,
    timeout_ms: int = 30000,
    sandbox: bool = False,
) -> ExchangeClient:
    """Create a ccxt async client for ``connection``.

    No network I/O happens here; markets are loaded on first use.

    Args:
        connection: Stored connection with credentials
        timeout_ms: Per-request timeout passed to ccxt
        sandbox: Switch the client to the venue's testnet

    Returns:
        Configured exchange client

    Raises:
        UnsupportedExchangeError: If ccxt does not know the exchange
        ExchangeConfigError: If the venue configuration is incomplete
    """
    exchange_id = connection.exchange_id

    if exchange_id not in EXCHANGE_CLIENTS:
        raise UnsupportedExchangeError(connection.exchange)

    client_class = getattr(ccxt_async, exchange_id)
    config = build_client_config(connection, timeout_ms=timeout_ms)

    client = client_class(config)
    if sandbox:
        client.set_sandbox_mode(True)

    logger.debug("Created %s client for connection %s", exchange_id, connection.id)
    return client
