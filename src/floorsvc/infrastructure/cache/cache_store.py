from __future__ import annotations

from floorsvc.application.ports.cache import CacheStore
from floorsvc.infrastructure.cache.redis_client import get_redis_client

KEY_PREFIX = "floorsvc:"


class RedisCacheStore(CacheStore):
    """String cache namespaced under ``prefix`` so several services can share a Redis db."""

    def __init__(self, timeout_seconds: float | None = None, prefix: str = KEY_PREFIX) -> None:
        self._timeout_seconds = timeout_seconds
        self._prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def get(self, key: str) -> str | None:
        return get_redis_client(self._timeout_seconds).get(self._key(key))

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        get_redis_client(self._timeout_seconds).setex(self._key(key), ttl_seconds, value)
