from datetime import timedelta

import pytest

from kv_cache.domain.errors import (
    CacheConnectionError,
    CacheError,
    CacheMiss,
    DecodeError,
    EncodeError,
    SerializationError,
    StoreError,
    StoreReadError,
    StoreWriteError,
)
from kv_cache.domain.expiration import effective_ttl_seconds, to_timedelta
from kv_cache.domain.models import Item, Stats
from kv_cache.domain.validation import validate_key


pytestmark = [pytest.mark.unit]


def test_validate_key_rejects_non_string():
    with pytest.raises(TypeError, match="Key must be a string"):
        validate_key(123)  # type: ignore[arg-type]


def test_validate_key_rejects_empty():
    with pytest.raises(ValueError, match="Key cannot be empty"):
        validate_key("")


def test_validate_key_accepts_long_and_unicode_keys():
    validate_key("k" * 10_000)
    validate_key("usér:ключ:1")


@pytest.mark.parametrize(
    "requested, expected",
    [
        (timedelta(milliseconds=500), 120),
        (timedelta(seconds=5), 5),
        (timedelta(seconds=1), 1),
        (timedelta(milliseconds=999), 120),
        (0, 120),
        (-1, 120),
        (2.5, 2),
        (3600, 3600),
    ],
)
def test_effective_ttl_seconds(requested, expected):
    assert effective_ttl_seconds(requested) == expected


def test_effective_ttl_seconds_with_custom_policy():
    assert effective_ttl_seconds(30, minimum=60, default=timedelta(hours=1)) == 3600
    assert effective_ttl_seconds(60, minimum=60, default=timedelta(hours=1)) == 60


def test_to_timedelta_rejects_non_durations():
    with pytest.raises(TypeError, match="expiration must be a timedelta"):
        to_timedelta("5")  # type: ignore[arg-type]
    with pytest.raises(TypeError):
        to_timedelta(True)  # type: ignore[arg-type]


def test_error_taxonomy():
    assert issubclass(CacheMiss, CacheError)
    assert issubclass(CacheConnectionError, CacheError)
    assert issubclass(EncodeError, SerializationError)
    assert issubclass(DecodeError, SerializationError)
    assert issubclass(StoreWriteError, StoreError)
    assert issubclass(StoreReadError, StoreError)
    assert not issubclass(CacheConnectionError, ConnectionError)

    miss = CacheMiss("user:1")
    assert miss.key == "user:1"
    assert "user:1" in str(miss)


def test_stats_snapshot_is_immutable_and_reports_hit_rate():
    stats = Stats(hits=3, misses=1)
    assert stats.hit_rate == 0.75
    assert stats.as_dict() == {"hits": 3, "misses": 1, "hit_rate": 0.75}
    assert Stats().hit_rate == 0.0

    with pytest.raises(AttributeError):
        stats.hits = 10  # type: ignore[misc]


def test_item_defaults_to_default_expiration():
    item = Item(key="k", object=[1, 2])
    assert item.expiration == timedelta(minutes=2)
