from __future__ import annotations

import threading
from typing import Optional

import pytest


class FakeConnection:
    def __init__(self, store: "FakeStore"):
        self._store = store
        self.closed = False

    def setex(self, key: str, ttl_seconds: int, payload: bytes) -> None:
        if self._store.fail_write is not None:
            raise self._store.fail_write
        with self._store.lock:
            self._store.data[key] = payload
            self._store.writes.append((key, ttl_seconds, payload))

    def get(self, key: str) -> Optional[bytes]:
        if self._store.fail_read is not None:
            raise self._store.fail_read
        with self._store.lock:
            return self._store.data.get(key)

    def ping(self) -> bool:
        return True

    def close(self) -> None:
        assert not self.closed, "connection released twice"
        self.closed = True
        with self._store.lock:
            self._store.released += 1
        if self._store.fail_release is not None:
            raise self._store.fail_release


class FakeStore:
    """In-memory stand-in for a pooled key-value store client."""

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.data: dict[str, bytes] = {}
        self.writes: list[tuple[str, int, bytes]] = []
        self.acquired = 0
        self.released = 0
        self.fail_acquire: Exception | None = None
        self.fail_write: Exception | None = None
        self.fail_read: Exception | None = None
        self.fail_release: Exception | None = None
        self.reachable = True

    def acquire(self) -> FakeConnection:
        if self.fail_acquire is not None:
            raise self.fail_acquire
        with self.lock:
            self.acquired += 1
        return FakeConnection(self)

    def ping(self) -> bool:
        if not self.reachable:
            raise ConnectionError("store unreachable")
        return True

    def close(self) -> None:
        pass

    @property
    def last_ttl(self) -> int:
        return self.writes[-1][1]


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()
