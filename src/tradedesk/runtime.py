from __future__ import annotations

import asyncio
import logging

from aiohttp import web

from .di import AppContainer
from .web import create_app

logger = logging.getLogger(__name__)


async def run(container: AppContainer) -> None:
    logger.info("runtime starting")
    logger.debug("settings=%s", container.settings.model_dump(mode="json"))

    server = container.settings.server
    runner = web.AppRunner(create_app(container))
    await runner.setup()

    site = web.TCPSite(runner, server.host, server.port)
    await site.start()
    logger.info("listening on http://%s:%s", server.host, server.port)

    try:
        await container.shutdown.wait()
    except asyncio.CancelledError:
        logger.info("runtime cancelled")
    finally:
        await runner.cleanup()

    logger.info("runtime stopped")
