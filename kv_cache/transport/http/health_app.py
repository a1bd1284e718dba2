from __future__ import annotations

import asyncio
import json
import logging
import time
import uuid
from typing import Protocol

from aiohttp import web

from kv_cache.application.request_context import request_id_var
from kv_cache.application.service import Cache

logger = logging.getLogger(__name__)


class PingableStore(Protocol):
    def ping(self) -> bool: ...


def _json_response(payload: dict, status: int = 200) -> web.Response:
    return web.Response(text=json.dumps(payload), status=status, content_type="application/json")


@web.middleware
async def request_id_middleware(request: web.Request, handler):
    request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
    token = request_id_var.set(request_id)
    try:
        response = await handler(request)
    finally:
        request_id_var.reset(token)

    response.headers["x-request-id"] = request_id
    return response


class HealthCheckHandler:
    def __init__(self, cache: Cache, store: PingableStore):
        self._cache = cache
        self._store = store
        self._start_time = time.monotonic()

    async def health_check(self, request: web.Request) -> web.Response:
        try:
            reachable = await asyncio.to_thread(self._store.ping)
            stats = self._cache.stats()
        except Exception as exc:
            logger.exception("Health check error")
            return _json_response({"status": "error", "message": str(exc)}, status=503)

        uptime = time.monotonic() - self._start_time
        return _json_response(
            {
                "status": "healthy" if reachable else "unhealthy",
                "store_reachable": reachable,
                "uptime_seconds": round(uptime, 2),
                "cache_hits": stats.hits,
                "cache_misses": stats.misses,
                "timestamp": time.time(),
            },
            status=200 if reachable else 503,
        )

    async def readiness_check(self, request: web.Request) -> web.Response:
        return await self.health_check(request)

    async def liveness_check(self, request: web.Request) -> web.Response:
        try:
            uptime = time.monotonic() - self._start_time
            response_data = {
                "status": "alive",
                "uptime_seconds": round(uptime, 2),
                "timestamp": time.time(),
            }
            return _json_response(response_data)
        except Exception as exc:
            logger.exception("Liveness check error")
            return _json_response({"status": "error", "message": str(exc)}, status=503)

    async def metrics(self, request: web.Request) -> web.Response:
        stats = self._cache.stats()
        uptime = time.monotonic() - self._start_time

        lines = [
            "# HELP kv_cache_hits_total Total cache hits",
            "# TYPE kv_cache_hits_total counter",
            f"kv_cache_hits_total {stats.hits}",
            "# HELP kv_cache_misses_total Total cache misses",
            "# TYPE kv_cache_misses_total counter",
            f"kv_cache_misses_total {stats.misses}",
            "# HELP kv_cache_uptime_seconds Process uptime in seconds",
            "# TYPE kv_cache_uptime_seconds gauge",
            f"kv_cache_uptime_seconds {uptime}",
            "",
        ]
        return web.Response(
            text="\n".join(lines),
            status=200,
            content_type="text/plain",
            charset="utf-8",
        )

    async def stats(self, request: web.Request) -> web.Response:
        payload = self._cache.stats().as_dict()
        payload.update(
            {
                "uptime_seconds": round(time.monotonic() - self._start_time, 2),
                "timestamp": time.time(),
            }
        )
        return _json_response(payload)


def create_health_app(cache: Cache, store: PingableStore) -> web.Application:
    handler = HealthCheckHandler(cache, store)

    app = web.Application(middlewares=[request_id_middleware])
    app.router.add_get("/health", handler.health_check)
    app.router.add_get("/ready", handler.readiness_check)
    app.router.add_get("/live", handler.liveness_check)
    app.router.add_get("/metrics", handler.metrics)
    app.router.add_get("/stats", handler.stats)

    async def root_handler(request: web.Request) -> web.Response:
        return _json_response(
            {
                "service": "kv-cache",
                "endpoints": ["/health", "/ready", "/live", "/metrics", "/stats"],
            }
        )

    app.router.add_get("/", root_handler)
    return app
