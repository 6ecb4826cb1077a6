"""Application ports (interfaces) for Founder Loop.

Ports are implemented by infrastructure adapters and injected into
application services.
"""

from founder_loop.application.ports.notification_intent_queue import (
    NotificationIntentQueueProtocol,
)
from founder_loop.application.ports.participant_repository import (
    ParticipantRepositoryProtocol,
)
from founder_loop.application.ports.time_authority import TimeAuthorityProtocol

__all__ = [
    "NotificationIntentQueueProtocol",
    "ParticipantRepositoryProtocol",
    "TimeAuthorityProtocol",
]
