from __future__ import annotations

import os
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


def get_env_int(
    env_name: str,
    default_value: int,
    *,
    min_value: Optional[int] = None,
    max_value: Optional[int] = None,
) -> int:
    raw_value = os.getenv(env_name)
    if raw_value is None:
        value = default_value
    else:
        try:
            value = int(raw_value)
        except ValueError as exc:
            raise ValueError(
                f"{env_name} must be an integer, got {raw_value!r}"
            ) from exc

    if min_value is not None and value < min_value:
        raise ValueError(f"{env_name} must be >= {min_value}, got {value}")
    if max_value is not None and value > max_value:
        raise ValueError(f"{env_name} must be <= {max_value}, got {value}")
    return value


def get_env_float(
    env_name: str,
    default_value: float,
    *,
    min_value: Optional[float] = None,
) -> float:
    raw_value = os.getenv(env_name)
    if raw_value is None:
        value = default_value
    else:
        try:
            value = float(raw_value)
        except ValueError as exc:
            raise ValueError(
                f"{env_name} must be a number, got {raw_value!r}"
            ) from exc

    if min_value is not None and value < min_value:
        raise ValueError(f"{env_name} must be >= {min_value}, got {value}")
    return value


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    redis_url: str
    redis_max_connections: int = Field(ge=1)
    redis_pool_timeout: float = Field(gt=0)
    redis_socket_timeout: float = Field(gt=0)
    redis_connect_timeout: float = Field(gt=0)
    redis_health_check_interval: int = Field(ge=0)
    default_ttl: int = Field(ge=1)
    min_ttl: int = Field(ge=1)
    health_host: str
    health_port: int = Field(ge=1, le=65535)
    log_level: str
    log_format: str

    @model_validator(mode="after")
    def _check_ttls(self) -> "Settings":
        if self.default_ttl < self.min_ttl:
            raise ValueError(
                f"CACHE_DEFAULT_TTL must be >= CACHE_MIN_TTL, got {self.default_ttl} < {self.min_ttl}"
            )
        return self


def load_settings() -> Settings:
    return Settings(
        redis_url=os.getenv("CACHE_REDIS_URL", "redis://localhost:6379/0"),
        redis_max_connections=get_env_int("CACHE_REDIS_MAX_CONNECTIONS", 50, min_value=1),
        redis_pool_timeout=get_env_float("CACHE_REDIS_POOL_TIMEOUT", 5.0, min_value=0.001),
        redis_socket_timeout=get_env_float("CACHE_REDIS_SOCKET_TIMEOUT", 5.0, min_value=0.001),
        redis_connect_timeout=get_env_float("CACHE_REDIS_CONNECT_TIMEOUT", 5.0, min_value=0.001),
        redis_health_check_interval=get_env_int(
            "CACHE_REDIS_HEALTH_CHECK_INTERVAL", 30, min_value=0
        ),
        default_ttl=get_env_int("CACHE_DEFAULT_TTL", 120, min_value=1),
        min_ttl=get_env_int("CACHE_MIN_TTL", 1, min_value=1),
        health_host=os.getenv("CACHE_HEALTH_HOST", "0.0.0.0"),
        health_port=get_env_int(
            "CACHE_HEALTH_PORT", 8080, min_value=1, max_value=65535
        ),
        log_level=os.getenv("CACHE_LOG_LEVEL", "INFO").upper(),
        log_format=os.getenv("CACHE_LOG_FORMAT", "text"),
    )
