from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache

import redis

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RedisSettings:
    url: str
    timeout_seconds: float
    health_check_interval: int

    @classmethod
    def from_env(cls, timeout_seconds: float | None = None) -> RedisSettings:
        url = os.getenv("REDIS_URL")
        if not url:
            raise RuntimeError("REDIS_URL is not set")
        if timeout_seconds is None:
            timeout_seconds = float(os.getenv("REDIS_TIMEOUT_SECONDS", "1.0"))
        return cls(
            url=url,
            timeout_seconds=timeout_seconds,
            health_check_interval=int(os.getenv("REDIS_HEALTH_CHECK_INTERVAL", "30")),
        )


@lru_cache(maxsize=8)
def _build_client(settings: RedisSettings) -> redis.Redis:
    # Cache entries and pub/sub payloads are JSON text.
    return redis.Redis.from_url(
        settings.url,
        socket_connect_timeout=settings.timeout_seconds,
        socket_timeout=settings.timeout_seconds,
        decode_responses=True,
        health_check_interval=settings.health_check_interval,
    )


def get_redis_client(timeout_seconds: float | None = None) -> redis.Redis:
    return _build_client(RedisSettings.from_env(timeout_seconds))


def ping_redis(timeout_seconds: float = 1.0) -> bool:
    try:
        return bool(get_redis_client(timeout_seconds).ping())
    except (redis.RedisError, RuntimeError) as exc:
        logger.warning("redis_ping_failed", extra={"operation": "ping"}, exc_info=exc)
        return False
