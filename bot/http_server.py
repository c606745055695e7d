"""Bot health server (for container health checks)."""
from __future__ import annotations

import logging
import time
from datetime import datetime, timezone

import aiohttp.web

import config

logger = logging.getLogger("kraken.http")


async def _handle_health(request: aiohttp.web.Request) -> aiohttp.web.Response:
    """GET /health - liveness plus whether the gateway session is ready."""
    bot = request.app["bot"]
    return aiohttp.web.json_response({
        "status": "healthy",
        "uptime": round(time.monotonic() - request.app["started_at"], 3),
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "botReady": bool(bot.is_ready()),
    })


async def _handle_not_found(request: aiohttp.web.Request) -> aiohttp.web.Response:
    return aiohttp.web.json_response({"error": "Not found"}, status=404)


def create_app(bot) -> aiohttp.web.Application:
    """Create aiohttp app with bot reference."""
    app = aiohttp.web.Application()
    app["bot"] = bot
    app["started_at"] = time.monotonic()
    app.router.add_get("/health", _handle_health)
    app.router.add_get("/", _handle_health)
    app.router.add_route("*", "/{tail:.*}", _handle_not_found)
    return app


async def start_http_server(bot, host: str = "0.0.0.0", port: int | None = None) -> aiohttp.web.AppRunner:
    """Start the health server alongside the bot. Returns the runner so the caller can clean it up."""
    port = port or config.BOT_HEALTH_PORT
    runner = aiohttp.web.AppRunner(create_app(bot))
    await runner.setup()
    site = aiohttp.web.TCPSite(runner, host, port)
    await site.start()
    logger.info("Health server listening on %s:%d", host, port)
    return runner
