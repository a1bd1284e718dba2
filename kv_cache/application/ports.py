from __future__ import annotations

from typing import Any, Optional, Protocol


class Codec(Protocol):
    def encode(self, obj: Any) -> bytes: ...

    def decode(self, data: bytes, target: Any = None) -> Any: ...


class StoreConnection(Protocol):
    def setex(self, key: str, ttl_seconds: int, payload: bytes) -> Any: ...

    def get(self, key: str) -> Optional[bytes]: ...

    def close(self) -> None: ...


class StoreClient(Protocol):
    def acquire(self) -> StoreConnection: ...
