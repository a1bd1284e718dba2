from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .expiration import DEFAULT_EXPIRATION, Duration


@dataclass(frozen=True)
class Item:
    key: str
    object: Any
    expiration: Duration = DEFAULT_EXPIRATION


@dataclass(frozen=True)
class Stats:
    hits: int = 0
    misses: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0

    def as_dict(self) -> dict[str, Any]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": self.hit_rate,
        }
