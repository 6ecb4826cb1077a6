"""Integration errors.

A malformed event (unknown participant id, nonexistent week number) is a
programmer or integration error. It is surfaced to the calling
collaborator and never retried by the engine.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from founder_loop.domain.exceptions import FounderLoopError


class NotFoundError(FounderLoopError):
    """Base error for references to entities that do not exist."""

    code = "NotFound"
    title = "Not Found"
    status = 404


class ParticipantNotFoundError(NotFoundError):
    """Raised when a command or query names an unknown participant."""

    def __init__(self, participant_id: UUID) -> None:
        super().__init__(f"Participant {participant_id} not found.")
        self.participant_id = participant_id

    def extensions(self) -> dict[str, Any]:
        return {"participant_id": str(self.participant_id)}


class WeekNotFoundError(NotFoundError):
    """Raised when a command names a week that has not been opened."""

    def __init__(self, participant_id: UUID, week_number: int) -> None:
        super().__init__(
            f"Week {week_number} does not exist for participant {participant_id}."
        )
        self.participant_id = participant_id
        self.week_number = week_number

    def extensions(self) -> dict[str, Any]:
        return {"participant_id": str(self.participant_id), "week_number": self.week_number}


class ParticipantAlreadyEnrolledError(FounderLoopError):
    """Raised when enrolling a participant id that already exists."""

    code = "ParticipantAlreadyEnrolled"
    title = "Participant Already Enrolled"
    status = 409

    def __init__(self, participant_id: UUID) -> None:
        super().__init__(f"Participant {participant_id} is already enrolled.")
        self.participant_id = participant_id

    def extensions(self) -> dict[str, Any]:
        return {"participant_id": str(self.participant_id)}


class ConcurrentModificationError(FounderLoopError):
    """Raised when a participant save is based on an outdated version.

    Indicates a second writer bypassed the per-participant lock. The
    caller should reload the participant and replay the event.
    """

    code = "ConcurrentModification"
    title = "Concurrent Modification"
    status = 409

    def __init__(self, participant_id: UUID, expected: int, actual: int) -> None:
        super().__init__(
            f"Participant {participant_id} is at version {actual}, expected {expected}."
        )
        self.participant_id = participant_id
        self.expected = expected
        self.actual = actual

    def extensions(self) -> dict[str, Any]:
        return {
            "participant_id": str(self.participant_id),
            "expected_version": self.expected,
            "actual_version": self.actual,
        }


class StageNotFoundError(NotFoundError):
    """Raised when a query names a stage outside the program."""

    def __init__(self, stage: int) -> None:
        super().__init__(f"Stage {stage} does not exist.")
        self.stage = stage

    def extensions(self) -> dict[str, Any]:
        return {"stage": self.stage}
