from __future__ import annotations

from typing import Protocol


class EventPublisher(Protocol):
    """Fire-and-forget fan-out of serialized domain events.

    Returns the number of subscribers that received ``message``. Delivery is
    not guaranteed; callers publish only after their transaction commits.
    """

    def publish(self, channel: str, message: str) -> int: ...
