from __future__ import annotations

from datetime import timedelta
from typing import Union

Duration = Union[timedelta, int, float]

MIN_EXPIRATION = timedelta(seconds=1)
DEFAULT_EXPIRATION = timedelta(minutes=2)


def to_timedelta(value: Duration) -> timedelta:
    if isinstance(value, timedelta):
        return value
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(
            f"expiration must be a timedelta or a number of seconds, got {type(value).__name__}"
        )
    return timedelta(seconds=value)


def effective_ttl_seconds(
    requested: Duration,
    *,
    minimum: Duration = MIN_EXPIRATION,
    default: Duration = DEFAULT_EXPIRATION,
) -> int:
    """
    Return the TTL in whole seconds that is actually sent to the store.

    Requests shorter than `minimum` (including zero and negative values) are
    replaced by `default`. Sub-second precision is truncated.
    """
    expiration = to_timedelta(requested)
    if expiration < to_timedelta(minimum):
        expiration = to_timedelta(default)
    return int(expiration.total_seconds())
