from __future__ import annotations

import logging
from typing import Optional

from redis import BlockingConnectionPool, Redis

from .config import Settings

logger = logging.getLogger(__name__)


def build_connection_pool(settings: Settings) -> BlockingConnectionPool:
    """
    Pool that blocks up to `redis_pool_timeout` seconds when all
    `redis_max_connections` connections are checked out, then raises
    redis.ConnectionError.
    """
    return BlockingConnectionPool.from_url(
        settings.redis_url,
        max_connections=settings.redis_max_connections,
        timeout=settings.redis_pool_timeout,
        socket_timeout=settings.redis_socket_timeout,
        socket_connect_timeout=settings.redis_connect_timeout,
        health_check_interval=settings.redis_health_check_interval,
    )


class RedisConnection:
    """One pooled connection, checked out until `close()`."""

    def __init__(self, client: Redis):
        self._client = client

    def setex(self, key: str, ttl_seconds: int, payload: bytes) -> None:
        self._client.setex(key, ttl_seconds, payload)

    def get(self, key: str) -> Optional[bytes]:
        return self._client.get(key)

    def ping(self) -> bool:
        return bool(self._client.ping())

    def close(self) -> None:
        self._client.close()


class RedisStoreClient:
    def __init__(self, pool: BlockingConnectionPool):
        self.pool = pool

    @classmethod
    def from_settings(cls, settings: Settings) -> "RedisStoreClient":
        return cls(build_connection_pool(settings))

    def acquire(self) -> RedisConnection:
        # single_connection_client checks a connection out of the pool (and
        # connects it) right away; close() hands it back.
        client = Redis(connection_pool=self.pool, single_connection_client=True)
        return RedisConnection(client)

    def ping(self) -> bool:
        conn = self.acquire()
        try:
            return conn.ping()
        finally:
            conn.close()

    def close(self) -> None:
        logger.debug("Disconnecting redis connection pool")
        self.pool.disconnect()
