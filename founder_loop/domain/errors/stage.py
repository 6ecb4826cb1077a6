"""Stage gating errors."""

from __future__ import annotations

from typing import Any
from uuid import UUID

from founder_loop.domain.exceptions import FounderLoopError


class StageLockedError(FounderLoopError):
    """Raised when stage content is requested before the stage is unlocked.

    This is a read-only query failure, not a mutation failure. It always
    carries the unmet requirement(s) of the participant's current stage.

    Attributes:
        participant_id: Participant who attempted the access.
        current_stage: The participant's current stage.
        requested_stage: The stage whose content was requested.
        unmet_requirements: Requirements still open on the current stage.
    """

    code = "StageLocked"
    title = "Stage Locked"
    status = 403

    def __init__(
        self,
        participant_id: UUID,
        current_stage: int,
        requested_stage: int,
        unmet_requirements: tuple[str, ...] = (),
    ) -> None:
        super().__init__(
            f"Stage {requested_stage} is locked; participant is in stage {current_stage}."
        )
        self.participant_id = participant_id
        self.current_stage = current_stage
        self.requested_stage = requested_stage
        self.unmet_requirements = unmet_requirements

    def extensions(self) -> dict[str, Any]:
        return {
            "participant_id": str(self.participant_id),
            "current_stage": self.current_stage,
            "requested_stage": self.requested_stage,
            "unmet_requirements": list(self.unmet_requirements),
        }
