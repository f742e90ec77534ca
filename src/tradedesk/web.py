"""HTTP API consumed by the dashboard."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable

from aiohttp import web
from pydantic import BaseModel, Field, ValidationError

from .bots import Bot
from .connections import Connection
from .di import AppContainer
from .errors import BotStateError, classify_exchange_error
from .exchanges import supported_exchanges

logger = logging.getLogger(__name__)

CONTAINER_KEY = web.AppKey("container", AppContainer)
USER_KEY = "user_id"

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


class ConnectionCreate(BaseModel):
    name: str = Field(min_length=1)
    exchange: str = Field(min_length=1)
    api_key: str = Field(min_length=1, alias="apiKey")
    api_secret: str | None = Field(default=None, alias="apiSecret")
    api_wallet_address: str | None = Field(default=None, alias="apiWalletAddress")
    api_private_key: str | None = Field(default=None, alias="apiPrivateKey")

    model_config = {"extra": "ignore", "populate_by_name": True}


class BotCreate(BaseModel):
    name: str = Field(min_length=1)
    type: str = Field(min_length=1)

    model_config = {"extra": "ignore"}


def _error(code: str, status: int, message: str | None = None, **extra: Any) -> web.Response:
    body: dict[str, Any] = {"code": code}
    if message:
        body["message"] = message
    body.update(extra)
    return web.json_response(body, status=status)


@web.middleware
async def session_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    """Reject requests without the session cookie set by the auth layer."""
    container = request.app[CONTAINER_KEY]
    user_id = request.cookies.get(container.settings.server.session_cookie)
    if not user_id:
        return _error("UNAUTHORIZED", 401, "Not authenticated")
    request[USER_KEY] = user_id
    return await handler(request)


def _find_connection(request: web.Request) -> Connection | web.Response:
    connection_id = request.query.get("id")
    if not connection_id:
        return _error("MISSING_ID", 400)
    connection = request.app[CONTAINER_KEY].connections.get(connection_id, request[USER_KEY])
    if connection is None:
        return _error("CONNECTION_NOT_FOUND", 404)
    return connection


def _exchange_error(exc: Exception, context: str) -> web.Response:
    classified = classify_exchange_error(exc)
    logger.error("Error %s: %s", context, exc)
    return web.json_response(classified.to_dict(), status=classified.status)


async def list_exchanges(request: web.Request) -> web.Response:
    return web.json_response(supported_exchanges())


async def list_connections(request: web.Request) -> web.Response:
    store = request.app[CONTAINER_KEY].connections
    return web.json_response([c.public_dict() for c in store.list_for_user(request[USER_KEY])])


async def create_connection(request: web.Request) -> web.Response:
    try:
        body = await request.json()
    except ValueError:
        return _error("VALIDATION_ERROR", 400, "Request body must be JSON")

    try:
        data = ConnectionCreate.model_validate(body)
    except ValidationError as exc:
        details = [{"loc": list(err["loc"]), "msg": err["msg"]} for err in exc.errors()]
        return _error("VALIDATION_ERROR", 400, details=details)

    connection = request.app[CONTAINER_KEY].connections.add(
        request[USER_KEY],
        data.name,
        data.exchange,
        data.api_key,
        secret=data.api_secret,
        api_wallet_address=data.api_wallet_address,
        api_private_key=data.api_private_key,
    )
    return web.json_response(connection.public_dict(), status=201)


async def delete_connection(request: web.Request) -> web.Response:
    container = request.app[CONTAINER_KEY]
    connection = _find_connection(request)
    if isinstance(connection, web.Response):
        return connection

    container.connections.delete(connection.id, request[USER_KEY])
    await container.client_cache.discard(connection.id)
    return web.json_response({"success": True})


async def get_assets(request: web.Request) -> web.Response:
    container = request.app[CONTAINER_KEY]
    connection = _find_connection(request)
    if isinstance(connection, web.Response):
        return connection

    try:
        client = await container.client_cache.get(connection)
        entries = await container.balance_service.fetch_balances(
            client,
            connection,
            cookie=request.headers.get("Cookie"),
        )
    except Exception as exc:
        return _exchange_error(exc, f"fetching assets for connection {connection.id}")

    return web.json_response([entry.to_dict() for entry in entries])


async def get_prices(request: web.Request) -> web.Response:
    container = request.app[CONTAINER_KEY]
    symbols = [s.strip() for s in request.query.get("symbols", "").split(",") if s.strip()]
    if not request.query.get("id") or not symbols:
        return _error("MISSING_PARAMETERS", 400)

    connection = _find_connection(request)
    if isinstance(connection, web.Response):
        return connection

    try:
        client = await container.client_cache.get(connection)
        prices = await container.price_lookup.fetch_prices(client, symbols)
    except Exception as exc:
        return _exchange_error(exc, f"fetching prices for connection {connection.id}")

    return web.json_response({"prices": prices})


async def get_symbols(request: web.Request) -> web.Response:
    container = request.app[CONTAINER_KEY]
    connection = _find_connection(request)
    if isinstance(connection, web.Response):
        return connection

    try:
        client = await container.client_cache.get(connection)
        markets = await client.fetch_markets()
    except Exception as exc:
        return _exchange_error(exc, f"fetching symbols for connection {connection.id}")

    symbols = [m["symbol"] for m in markets if m and m.get("active") and m.get("symbol")]
    return web.json_response(symbols)


async def list_bots(request: web.Request) -> web.Response:
    store = request.app[CONTAINER_KEY].bots
    return web.json_response([b.public_dict() for b in store.list_for_user(request[USER_KEY])])


async def create_bot(request: web.Request) -> web.Response:
    try:
        data = BotCreate.model_validate(await request.json())
    except (ValueError, ValidationError):
        return _error("INVALID_INPUT", 400, "Name and type are required")

    bot = request.app[CONTAINER_KEY].bots.add(request[USER_KEY], data.name, data.type)
    return web.json_response(bot.public_dict(), status=201)


async def delete_bot(request: web.Request) -> web.Response:
    deleted = request.app[CONTAINER_KEY].bots.delete(request.match_info["bot_id"], request[USER_KEY])
    if not deleted:
        return _error("NOT_FOUND", 404, "Bot not found")
    return web.json_response({"success": True})


async def _transition_bot(request: web.Request, action: Callable[[str, str], Bot | None]) -> web.Response:
    try:
        bot = action(request.match_info["bot_id"], request[USER_KEY])
    except BotStateError as exc:
        return _error(exc.code.value, exc.status, str(exc))
    if bot is None:
        return _error("NOT_FOUND", 404, "Bot not found")
    return web.json_response(bot.public_dict())


async def start_bot(request: web.Request) -> web.Response:
    return await _transition_bot(request, request.app[CONTAINER_KEY].bots.start)


async def stop_bot(request: web.Request) -> web.Response:
    return await _transition_bot(request, request.app[CONTAINER_KEY].bots.stop)


async def _close_container(app: web.Application) -> None:
    await app[CONTAINER_KEY].close()


def create_app(container: AppContainer) -> web.Application:
    app = web.Application(middlewares=[session_middleware])
    app[CONTAINER_KEY] = container
    app.router.add_get("/api/exchanges", list_exchanges)
    app.router.add_get("/api/ccxt", list_connections)
    app.router.add_post("/api/ccxt", create_connection)
    app.router.add_delete("/api/ccxt", delete_connection)
    app.router.add_get("/api/ccxt/assets", get_assets)
    app.router.add_get("/api/ccxt/price", get_prices)
    app.router.add_get("/api/ccxt/symbols", get_symbols)
    app.router.add_get("/api/bots", list_bots)
    app.router.add_post("/api/bots", create_bot)
    app.router.add_delete("/api/bots/{bot_id}", delete_bot)
    app.router.add_post("/api/bots/{bot_id}/start", start_bot)
    app.router.add_post("/api/bots/{bot_id}/stop", stop_bot)
    app.on_cleanup.append(_close_container)
    return app
