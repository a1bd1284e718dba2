from __future__ import annotations


class CacheError(Exception):
    """Base class for every error raised by the cache facade."""


class CacheMiss(CacheError):
    """The key is absent from the store (never written or expired)."""

    def __init__(self, key: str):
        super().__init__(f"cache: key is missing: {key!r}")
        self.key = key


class CacheConnectionError(CacheError):
    """A connection could not be acquired from the store client."""


class SerializationError(CacheError):
    pass


class EncodeError(SerializationError):
    pass


class DecodeError(SerializationError):
    pass


class StoreError(CacheError):
    pass


class StoreWriteError(StoreError):
    pass


class StoreReadError(StoreError):
    pass
