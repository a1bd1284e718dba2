from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Any, Callable, Iterator

from kv_cache.domain.errors import (
    CacheConnectionError,
    CacheMiss,
    DecodeError,
    EncodeError,
    StoreReadError,
    StoreWriteError,
)
from kv_cache.domain.expiration import (
    DEFAULT_EXPIRATION,
    MIN_EXPIRATION,
    Duration,
    effective_ttl_seconds,
    to_timedelta,
)
from kv_cache.domain.models import Item, Stats
from kv_cache.domain.validation import validate_key

from .ports import Codec, StoreClient, StoreConnection
from .stats import StatsCounter

logger = logging.getLogger(__name__)


class Cache:
    """
    Caching facade in front of a pooled key-value store.

    Objects are encoded with the injected codec and written with a TTL that
    never drops below `min_expiration`. Every call checks out its own
    connection and returns it before the call ends, so one instance can be
    shared across threads; the hit/miss counters are the only shared state.
    """

    def __init__(
        self,
        store: StoreClient,
        codec: Codec,
        *,
        min_expiration: Duration = MIN_EXPIRATION,
        default_expiration: Duration = DEFAULT_EXPIRATION,
    ):
        if store is None:
            raise ValueError("store is required")
        if codec is None:
            raise ValueError("codec is required")

        resolved_min = to_timedelta(min_expiration)
        resolved_default = to_timedelta(default_expiration)
        if resolved_min < MIN_EXPIRATION:
            raise ValueError(
                f"min_expiration must be >= {MIN_EXPIRATION}, got {resolved_min}"
            )
        if resolved_default < resolved_min:
            raise ValueError(
                f"default_expiration must be >= min_expiration, got {resolved_default} < {resolved_min}"
            )

        self.store = store
        self.codec = codec
        self.min_expiration = resolved_min
        self.default_expiration = resolved_default
        self._stats = StatsCounter()

    @contextmanager
    def _connection(self) -> Iterator[StoreConnection]:
        try:
            conn = self.store.acquire()
        except Exception as exc:
            raise CacheConnectionError(f"acquiring store connection failed: {exc}") from exc
        try:
            yield conn
        finally:
            try:
                conn.close()
            except Exception as exc:
                raise CacheConnectionError(f"releasing store connection failed: {exc}") from exc

    def _log_request(self, operation: str, key: str, start_time: float, result: str, **extra: Any) -> None:
        if not logger.isEnabledFor(logging.DEBUG):
            return
        details = "".join(f" {name}={value}" for name, value in extra.items())
        logger.debug(
            "%s key=%r%s duration_ms=%.2f result=%s",
            operation,
            key,
            details,
            (time.monotonic() - start_time) * 1000,
            result,
        )

    def ttl_for(self, expiration: Duration) -> int:
        return effective_ttl_seconds(
            expiration,
            minimum=self.min_expiration,
            default=self.default_expiration,
        )

    def set(self, item: Item) -> None:
        validate_key(item.key)
        start_time = time.monotonic()

        try:
            payload = self.codec.encode(item.object)
        except EncodeError:
            self._log_request("SET", item.key, start_time, "ERROR")
            raise
        except Exception as exc:
            self._log_request("SET", item.key, start_time, "ERROR")
            raise EncodeError(f"encoding value for {item.key!r} failed: {exc}") from exc

        ttl = self.ttl_for(item.expiration)

        with self._connection() as conn:
            try:
                conn.setex(item.key, ttl, payload)
            except Exception as exc:
                self._log_request("SET", item.key, start_time, "ERROR", ttl=ttl)
                raise StoreWriteError(f"store write for {item.key!r} failed: {exc}") from exc

        self._log_request("SET", item.key, start_time, "OK", ttl=ttl)

    def get(self, key: str, target: Any = None, default: Any = None) -> Any:
        """
        Fetch and decode the value stored under `key`.

        `target` is handed to the codec as the type to decode into. A
        zero-length payload is a present-but-empty value: it counts as a hit
        and `default` is returned without decoding.

        Raises CacheMiss when the key is absent.
        """
        validate_key(key)
        start_time = time.monotonic()

        with self._connection() as conn:
            try:
                payload = conn.get(key)
            except Exception as exc:
                self._log_request("GET", key, start_time, "ERROR")
                raise StoreReadError(f"store read for {key!r} failed: {exc}") from exc

        if payload is None:
            self._stats.record_miss()
            self._log_request("GET", key, start_time, "MISS")
            raise CacheMiss(key)

        self._stats.record_hit()
        if len(payload) == 0:
            self._log_request("GET", key, start_time, "HIT", size=0)
            return default

        try:
            value = self.codec.decode(payload, target)
        except DecodeError:
            self._log_request("GET", key, start_time, "ERROR", size=len(payload))
            raise
        except Exception as exc:
            self._log_request("GET", key, start_time, "ERROR", size=len(payload))
            raise DecodeError(f"decoding value for {key!r} failed: {exc}") from exc

        self._log_request("GET", key, start_time, "HIT", size=len(payload))
        return value

    def get_or_set(
        self,
        key: str,
        factory: Callable[[], Any],
        expiration: Duration = DEFAULT_EXPIRATION,
        target: Any = None,
    ) -> Any:
        try:
            return self.get(key, target)
        except CacheMiss:
            pass

        value = factory()
        self.set(Item(key=key, object=value, expiration=expiration))
        return value

    def stats(self) -> Stats:
        return self._stats.snapshot()
