from __future__ import annotations

import asyncio
import logging
import os
import signal

from aiohttp import web

from kv_cache.application.service import Cache
from kv_cache.infrastructure.codecs import JsonCodec
from kv_cache.infrastructure.config import Settings, load_settings
from kv_cache.infrastructure.logging import configure_logging
from kv_cache.infrastructure.redis_store import RedisStoreClient
from kv_cache.transport.http.health_app import create_health_app

logger = logging.getLogger(__name__)


def build_cache(settings: Settings, store: RedisStoreClient | None = None) -> Cache:
    if store is None:
        store = RedisStoreClient.from_settings(settings)
    return Cache(
        store,
        JsonCodec(),
        min_expiration=settings.min_ttl,
        default_expiration=settings.default_ttl,
    )


async def serve(settings: Settings | None = None) -> None:
    settings = settings or load_settings()

    store = RedisStoreClient.from_settings(settings)
    cache = build_cache(settings, store)
    health_app = create_health_app(cache, store)

    if settings.log_level == "DEBUG":
        access_log = logger
    else:
        access_log = None
        logging.getLogger("aiohttp.access").disabled = True

    health_runner = web.AppRunner(health_app, access_log=access_log)
    await health_runner.setup()
    health_site = web.TCPSite(health_runner, settings.health_host, settings.health_port)
    await health_site.start()
    logger.info(
        "Health check server started on %s:%s (store %s)",
        settings.health_host,
        settings.health_port,
        store.pool.connection_kwargs.get("host", "?"),
    )

    stop_event = asyncio.Event()

    def _begin_shutdown() -> None:
        logger.info("Received shutdown signal, stopping health server...")
        stop_event.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, _begin_shutdown)

    try:
        await stop_event.wait()
    finally:
        await health_runner.cleanup()
        store.close()


def main() -> None:
    configure_logging(
        os.getenv("CACHE_LOG_LEVEL", "INFO").upper(),
        os.getenv("CACHE_LOG_FORMAT", "text"),
    )
    try:
        settings = load_settings()
        asyncio.run(serve(settings))
    except Exception:
        logger.exception("Failed to start health server")
        raise


if __name__ == "__main__":
    main()
