"""Participant repository protocol.

The engine loads a participant aggregate, applies one event and saves the
whole aggregate back. Saves are guarded by the aggregate version: a save
whose version no longer matches the stored one is rejected, so a writer
racing the per-participant lock cannot silently overwrite state.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from founder_loop.domain.models.participant import Participant


class ParticipantRepositoryProtocol(Protocol):
    """Protocol for participant persistence."""

    async def get(self, participant_id: UUID) -> Participant | None:
        """Get a participant by id.

        Returns:
            The participant, or None if unknown.
        """
        ...

    async def add(self, participant: Participant) -> Participant:
        """Store a new participant at version 1.

        Raises:
            ParticipantAlreadyEnrolledError: If the id already exists.
        """
        ...

    async def save(self, participant: Participant) -> Participant:
        """Replace a stored participant.

        ``participant.version`` must equal the stored version. The stored
        copy is returned with its version incremented.

        Raises:
            ParticipantNotFoundError: If the participant is unknown.
            ConcurrentModificationError: If the version does not match.
        """
        ...

    async def list_ids(self) -> list[UUID]:
        """Return every stored participant id in insertion order."""
        ...
