"""Notification Intent Queue Stub.

In-memory FIFO implementation of NotificationIntentQueueProtocol. A real
deployment would back this with a durable queue; delivery stays outside
the engine either way.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Sequence

from founder_loop.application.ports.notification_intent_queue import (
    NotificationIntentQueueProtocol,
)
from founder_loop.domain.events.notification_intent import (
    NotificationIntent,
    NotificationKind,
)


class NotificationIntentQueueStub(NotificationIntentQueueProtocol):
    """In-memory intent queue."""

    def __init__(self) -> None:
        self._pending: deque[NotificationIntent] = deque()
        # Every intent ever enqueued, for test assertions
        self._history: list[NotificationIntent] = []

    def clear(self) -> None:
        """Clear all stored data for test cleanup."""
        self._pending.clear()
        self._history.clear()

    async def enqueue(self, intents: Sequence[NotificationIntent]) -> None:
        self._pending.extend(intents)
        self._history.extend(intents)

    async def drain(self, limit: int | None = None) -> list[NotificationIntent]:
        count = len(self._pending) if limit is None else min(limit, len(self._pending))
        return [self._pending.popleft() for _ in range(count)]

    async def pending_count(self) -> int:
        return len(self._pending)

    # Test helpers

    @property
    def history(self) -> list[NotificationIntent]:
        """Every intent enqueued since creation or the last clear()."""
        return list(self._history)

    def kinds(self) -> list[NotificationKind]:
        """Kinds of every enqueued intent, in order."""
        return [intent.kind for intent in self._history]
