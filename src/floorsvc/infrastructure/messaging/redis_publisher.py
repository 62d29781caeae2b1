from __future__ import annotations

import logging

from floorsvc.application.ports.publisher import EventPublisher
from floorsvc.infrastructure.cache.redis_client import get_redis_client

logger = logging.getLogger(__name__)


class RedisEventPublisher(EventPublisher):
    def __init__(self, timeout_seconds: float | None = None) -> None:
        self._timeout_seconds = timeout_seconds

    def publish(self, channel: str, message: str) -> int:
        receivers = int(get_redis_client(self._timeout_seconds).publish(channel, message))
        if receivers == 0:
            logger.debug("event_published_without_subscribers", extra={"channel": channel})
        else:
            logger.debug("event_published", extra={"channel": channel, "count": receivers})
        return receivers
