"""Notification intent queue protocol.

The engine appends intents; a delivery collaborator drains them. The
queue preserves append order.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from founder_loop.domain.events.notification_intent import NotificationIntent


class NotificationIntentQueueProtocol(Protocol):
    """Protocol for the outbound notification intent queue."""

    async def enqueue(self, intents: Sequence[NotificationIntent]) -> None:
        """Append intents in order."""
        ...

    async def drain(self, limit: int | None = None) -> list[NotificationIntent]:
        """Remove and return queued intents, oldest first.

        Args:
            limit: Maximum number of intents to return (None for all).
        """
        ...

    async def pending_count(self) -> int:
        """Number of intents waiting to be drained."""
        ...
