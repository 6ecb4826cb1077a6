"""Application services for Founder Loop."""

from founder_loop.application.services.loop_engine_service import LoopEngineService
from founder_loop.application.services.notification_intent_emitter import (
    NotificationIntentEmitter,
)
from founder_loop.application.services.time_authority_service import SystemTimeAuthority

__all__ = [
    "LoopEngineService",
    "NotificationIntentEmitter",
    "SystemTimeAuthority",
]
