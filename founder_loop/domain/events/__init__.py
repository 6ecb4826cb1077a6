"""Domain events for Founder Loop."""

from founder_loop.domain.events.notification_intent import (
    NOTIFICATION_INTENT_SCHEMA_VERSION,
    NotificationIntent,
    NotificationKind,
)

__all__: list[str] = [
    "NOTIFICATION_INTENT_SCHEMA_VERSION",
    "NotificationIntent",
    "NotificationKind",
]
