"""Escalation errors.

UnderReviewError is the only error in the system that requires human
(mentor) intervention rather than participant self-correction.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from uuid import UUID

from founder_loop.domain.exceptions import FounderLoopError

if TYPE_CHECKING:
    from founder_loop.domain.models.participant import ParticipantStatus


class EscalationError(FounderLoopError):
    """Base error for escalation-related rejections.

    Attributes:
        participant_id: Participant whose escalation state blocked the operation.
    """

    code = "EscalationError"
    title = "Escalation Error"
    status = 423

    def __init__(self, message: str, participant_id: UUID) -> None:
        super().__init__(message)
        self.participant_id = participant_id

    def extensions(self) -> dict[str, Any]:
        return {"participant_id": str(self.participant_id)}


class UnderReviewError(EscalationError):
    """Raised for any new submission while the participant is under review.

    Historical data stays readable; only ResolveReview unlocks submissions.

    Attributes:
        missed_weeks: Week numbers whose missed reports triggered the review.
    """

    code = "UnderReview"
    title = "Account Under Review"

    def __init__(self, participant_id: UUID, missed_weeks: tuple[int, ...] = ()) -> None:
        super().__init__(
            "Account under review after consecutive missed reports; "
            "new submissions are blocked until a mentor resolves the review.",
            participant_id=participant_id,
        )
        self.missed_weeks = missed_weeks

    def extensions(self) -> dict[str, Any]:
        return {**super().extensions(), "missed_weeks": list(self.missed_weeks)}


class ParticipantInactiveError(EscalationError):
    """Raised for any command targeting a deferred or removed participant."""

    code = "ParticipantInactive"
    title = "Participant Inactive"

    def __init__(self, participant_id: UUID, status: ParticipantStatus) -> None:
        super().__init__(
            f"Participant is {status.value.lower()}; weekly-loop processing has ended.",
            participant_id=participant_id,
        )
        self.participant_status = status

    def extensions(self) -> dict[str, Any]:
        return {**super().extensions(), "participant_status": self.participant_status.value}


class NoPendingReviewError(EscalationError):
    """Raised when a review resolution arrives but no review is pending."""

    code = "NoPendingReview"
    title = "No Pending Review"
    status = 409

    def __init__(self, participant_id: UUID) -> None:
        super().__init__(
            "Participant has no pending review to resolve.",
            participant_id=participant_id,
        )
