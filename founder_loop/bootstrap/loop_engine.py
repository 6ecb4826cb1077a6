"""Bootstrap wiring for the weekly loop engine.

Provides process-wide singletons backed by the in-memory stubs. Tests and
alternative deployments swap any piece with the ``set_*`` functions;
every setter forces the engine to be rebuilt on next access.
"""

from __future__ import annotations

from founder_loop.application.ports.notification_intent_queue import (
    NotificationIntentQueueProtocol,
)
from founder_loop.application.ports.participant_repository import (
    ParticipantRepositoryProtocol,
)
from founder_loop.application.ports.time_authority import TimeAuthorityProtocol
from founder_loop.application.services.loop_engine_service import LoopEngineService
from founder_loop.application.services.time_authority_service import SystemTimeAuthority
from founder_loop.config.loop_config import LoopConfig
from founder_loop.infrastructure.stubs.notification_intent_queue_stub import (
    NotificationIntentQueueStub,
)
from founder_loop.infrastructure.stubs.participant_repository_stub import (
    ParticipantRepositoryStub,
)

_config: LoopConfig | None = None
_repository: ParticipantRepositoryProtocol | None = None
_intent_queue: NotificationIntentQueueProtocol | None = None
_time_authority: TimeAuthorityProtocol | None = None
_loop_engine: LoopEngineService | None = None


def get_loop_config() -> LoopConfig:
    """Get the loop configuration, read from the environment on first use."""
    global _config
    if _config is None:
        _config = LoopConfig.from_environment()
    return _config


def get_participant_repository() -> ParticipantRepositoryProtocol:
    global _repository
    if _repository is None:
        _repository = ParticipantRepositoryStub()
    return _repository


def get_intent_queue() -> NotificationIntentQueueProtocol:
    global _intent_queue
    if _intent_queue is None:
        _intent_queue = NotificationIntentQueueStub()
    return _intent_queue


def get_time_authority() -> TimeAuthorityProtocol:
    global _time_authority
    if _time_authority is None:
        _time_authority = SystemTimeAuthority()
    return _time_authority


def get_loop_engine() -> LoopEngineService:
    """Get the loop engine, wiring it from the current singletons."""
    global _loop_engine
    if _loop_engine is None:
        _loop_engine = LoopEngineService(
            repository=get_participant_repository(),
            intent_queue=get_intent_queue(),
            time_authority=get_time_authority(),
            config=get_loop_config(),
        )
    return _loop_engine


def set_loop_config(config: LoopConfig) -> None:
    global _config, _loop_engine
    _config = config
    _loop_engine = None


def set_participant_repository(repository: ParticipantRepositoryProtocol) -> None:
    global _repository, _loop_engine
    _repository = repository
    _loop_engine = None


def set_intent_queue(queue: NotificationIntentQueueProtocol) -> None:
    global _intent_queue, _loop_engine
    _intent_queue = queue
    _loop_engine = None


def set_time_authority(time_authority: TimeAuthorityProtocol) -> None:
    global _time_authority, _loop_engine
    _time_authority = time_authority
    _loop_engine = None


def reset_loop_engine_dependencies() -> None:
    """Reset all singleton instances for testing.

    Call this in test fixtures to ensure clean state between tests.
    """
    global _config, _repository, _intent_queue, _time_authority, _loop_engine
    _config = None
    _repository = None
    _intent_queue = None
    _time_authority = None
    _loop_engine = None
