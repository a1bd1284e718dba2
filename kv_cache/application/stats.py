from __future__ import annotations

import threading

from kv_cache.domain.models import Stats


class StatsCounter:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def record_hit(self) -> None:
        with self._lock:
            self._hits += 1

    def record_miss(self) -> None:
        with self._lock:
            self._misses += 1

    def snapshot(self) -> Stats:
        with self._lock:
            return Stats(hits=self._hits, misses=self._misses)
