from __future__ import annotations

import json
from typing import Any

import pydantic_core
from pydantic import TypeAdapter

from kv_cache.domain.errors import DecodeError, EncodeError


class JsonCodec:
    """UTF-8 JSON via the standard library; `target` is an optional class to check against."""

    def __init__(self, *, sort_keys: bool = False):
        self.sort_keys = sort_keys

    def encode(self, obj: Any) -> bytes:
        try:
            text = json.dumps(obj, ensure_ascii=False, sort_keys=self.sort_keys, separators=(",", ":"))
        except (TypeError, ValueError) as exc:
            raise EncodeError(f"value is not JSON serializable: {exc}") from exc
        return text.encode("utf-8")

    def decode(self, data: bytes, target: Any = None) -> Any:
        try:
            value = json.loads(data)
        except (UnicodeDecodeError, ValueError) as exc:
            raise DecodeError(f"payload is not valid JSON: {exc}") from exc

        if isinstance(target, type) and not isinstance(value, target):
            raise DecodeError(
                f"expected {target.__name__}, decoded {type(value).__name__}"
            )
        return value


class PydanticCodec:
    """
    JSON through pydantic.

    Encodes anything pydantic can serialize (models, dataclasses, datetimes,
    UUIDs, sets...). When `target` is given the payload is validated into it,
    so `cache.get(key, list[User])` returns `User` instances.
    """

    def __init__(self) -> None:
        self._adapters: dict[Any, TypeAdapter] = {}

    def _adapter(self, target: Any) -> TypeAdapter:
        try:
            return self._adapters[target]
        except (KeyError, TypeError):
            pass
        adapter = TypeAdapter(target)
        try:
            self._adapters[target] = adapter
        except TypeError:
            # unhashable annotations are simply not memoized
            pass
        return adapter

    def encode(self, obj: Any) -> bytes:
        try:
            return pydantic_core.to_json(obj)
        except pydantic_core.PydanticSerializationError as exc:
            raise EncodeError(str(exc)) from exc

    def decode(self, data: bytes, target: Any = None) -> Any:
        try:
            if target is None:
                return pydantic_core.from_json(data)
            return self._adapter(target).validate_json(data)
        except (pydantic_core.ValidationError, ValueError) as exc:
            raise DecodeError(str(exc)) from exc
