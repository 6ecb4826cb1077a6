"""Unit tests for loop engine bootstrap wiring."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from founder_loop.application.services.time_authority_service import SystemTimeAuthority
from founder_loop.bootstrap import loop_engine as bootstrap
from founder_loop.config.loop_config import LoopConfig
from founder_loop.infrastructure.stubs import ParticipantRepositoryStub
from tests.helpers.fake_time_authority import FakeTimeAuthority


@pytest.fixture(autouse=True)
def _reset() -> Iterator[None]:
    bootstrap.reset_loop_engine_dependencies()
    yield
    bootstrap.reset_loop_engine_dependencies()


class TestLoopEngineBootstrap:
    """Tests for the process-wide singletons."""

    def test_engine_is_cached(self) -> None:
        assert bootstrap.get_loop_engine() is bootstrap.get_loop_engine()

    def test_defaults(self) -> None:
        assert isinstance(bootstrap.get_time_authority(), SystemTimeAuthority)
        assert isinstance(bootstrap.get_participant_repository(), ParticipantRepositoryStub)

    def test_config_read_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FOUNDER_LOOP_PROGRAM_WEEKS", "8")
        assert bootstrap.get_loop_config().program_weeks == 8

    def test_setter_rebuilds_engine(self) -> None:
        engine = bootstrap.get_loop_engine()
        bootstrap.set_time_authority(FakeTimeAuthority())
        rebuilt = bootstrap.get_loop_engine()
        assert rebuilt is not engine

    def test_set_config(self) -> None:
        bootstrap.set_loop_config(LoopConfig(program_weeks=6))
        assert bootstrap.get_loop_engine().config.program_weeks == 6
