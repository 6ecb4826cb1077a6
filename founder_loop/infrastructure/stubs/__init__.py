"""In-memory stub adapters for Founder Loop ports."""

from founder_loop.infrastructure.stubs.notification_intent_queue_stub import (
    NotificationIntentQueueStub,
)
from founder_loop.infrastructure.stubs.participant_repository_stub import (
    ParticipantRepositoryStub,
)

__all__ = [
    "NotificationIntentQueueStub",
    "ParticipantRepositoryStub",
]
