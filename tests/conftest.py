"""
Pytest configuration and shared fixtures for Founder Loop tests.

Testing Standards:
- All async tests use pytest.mark.asyncio (auto mode enabled in pyproject.toml)
- Time-dependent tests use FakeTimeAuthority, never the host clock
- Unit tests go in tests/unit/
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from founder_loop.application.services.loop_engine_service import LoopEngineService
from founder_loop.config.loop_config import LoopConfig
from founder_loop.domain.services.weekly_loop_machine import WeeklyLoopMachine
from founder_loop.infrastructure.stubs import (
    NotificationIntentQueueStub,
    ParticipantRepositoryStub,
)
from tests.helpers.fake_time_authority import FakeTimeAuthority
from tests.helpers.loop_builders import wat


@pytest.fixture
def project_version() -> str:
    """Provide the current project version for tests."""
    from founder_loop import __version__

    return __version__


@pytest.fixture
def loop_config() -> LoopConfig:
    return LoopConfig()


@pytest.fixture
def machine(loop_config: LoopConfig) -> WeeklyLoopMachine:
    return WeeklyLoopMachine(loop_config)


@pytest.fixture
def fake_time() -> FakeTimeAuthority:
    """Clock frozen at Sunday 4 January 2026, 12:00 WAT (day before week 1)."""
    return FakeTimeAuthority(frozen_at=wat(4, 12))


@pytest.fixture
def repository() -> Iterator[ParticipantRepositoryStub]:
    repo = ParticipantRepositoryStub()
    yield repo
    repo.clear()


@pytest.fixture
def intent_queue() -> Iterator[NotificationIntentQueueStub]:
    queue = NotificationIntentQueueStub()
    yield queue
    queue.clear()


@pytest.fixture
def engine(
    repository: ParticipantRepositoryStub,
    intent_queue: NotificationIntentQueueStub,
    fake_time: FakeTimeAuthority,
    loop_config: LoopConfig,
) -> LoopEngineService:
    return LoopEngineService(
        repository=repository,
        intent_queue=intent_queue,
        time_authority=fake_time,
        config=loop_config,
    )
