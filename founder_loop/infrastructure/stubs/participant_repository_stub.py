"""Participant Repository Stub.

In-memory implementation of ParticipantRepositoryProtocol for tests and
local development. Participants are frozen values, so storing them by
reference is safe.
"""

from __future__ import annotations

from dataclasses import replace
from uuid import UUID

from founder_loop.application.ports.participant_repository import (
    ParticipantRepositoryProtocol,
)
from founder_loop.domain.errors.integration import (
    ConcurrentModificationError,
    ParticipantAlreadyEnrolledError,
    ParticipantNotFoundError,
)
from founder_loop.domain.models.participant import Participant


class ParticipantRepositoryStub(ParticipantRepositoryProtocol):
    """In-memory stub for participant storage with version checks."""

    def __init__(self) -> None:
        """Initialize with empty storage."""
        # Map participant_id -> Participant (dict preserves insertion order)
        self._participants: dict[UUID, Participant] = {}

    def clear(self) -> None:
        """Clear all stored data for test cleanup."""
        self._participants.clear()

    async def get(self, participant_id: UUID) -> Participant | None:
        return self._participants.get(participant_id)

    async def add(self, participant: Participant) -> Participant:
        if participant.participant_id in self._participants:
            raise ParticipantAlreadyEnrolledError(participant.participant_id)
        stored = replace(participant, version=1)
        self._participants[participant.participant_id] = stored
        return stored

    async def save(self, participant: Participant) -> Participant:
        current = self._participants.get(participant.participant_id)
        if current is None:
            raise ParticipantNotFoundError(participant.participant_id)
        if current.version != participant.version:
            raise ConcurrentModificationError(
                participant.participant_id,
                expected=participant.version,
                actual=current.version,
            )
        stored = replace(participant, version=current.version + 1)
        self._participants[participant.participant_id] = stored
        return stored

    async def list_ids(self) -> list[UUID]:
        return list(self._participants)

    # Test helpers

    def put(self, participant: Participant) -> None:
        """Store a participant directly, bypassing version checks."""
        self._participants[participant.participant_id] = participant

    def count(self) -> int:
        """Get number of stored participants."""
        return len(self._participants)
