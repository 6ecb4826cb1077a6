"""Sequencing errors for the weekly loop.

Raised when a submission arrives out of order with respect to the weekly
cycle (Commit -> Execute -> Report -> Diagnose -> Adjust). Every error
names the specific action that unlocks the rejected operation; none of
them is ever silently ignored.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any
from uuid import UUID

from founder_loop.domain.exceptions import FounderLoopError

if TYPE_CHECKING:
    from founder_loop.domain.models.week_cycle import LoopStep


class SequencingError(FounderLoopError):
    """Base error for operations attempted out of sequence.

    Attributes:
        participant_id: Participant the operation targeted.
        week_number: Week the operation targeted (None for program-level ops).
        required_action: What the participant must do to unlock the operation.
    """

    code = "SequencingError"
    title = "Operation Out Of Sequence"
    status = 409

    def __init__(
        self,
        message: str,
        participant_id: UUID,
        week_number: int | None,
        required_action: str,
    ) -> None:
        super().__init__(message)
        self.participant_id = participant_id
        self.week_number = week_number
        self.required_action = required_action

    def extensions(self) -> dict[str, Any]:
        return {
            "participant_id": str(self.participant_id),
            "week_number": self.week_number,
            "required_action": self.required_action,
        }


class ReportLockedError(SequencingError):
    """Raised when a report is submitted for a week with no commit.

    A report can never exist without a commit; this is the primary
    sequencing rule of the weekly loop.
    """

    code = "ReportLocked"
    title = "Report Locked"

    def __init__(
        self,
        participant_id: UUID,
        week_number: int,
        message: str | None = None,
        required_action: str = "Submit this week's commit first.",
    ) -> None:
        super().__init__(
            message
            or f"Cannot submit report for week {week_number} without a commit.",
            participant_id=participant_id,
            week_number=week_number,
            required_action=required_action,
        )


class WeekLockedError(ReportLockedError):
    """Raised when the commit deadline was missed and no late commit exists.

    Execute and Report stay inaccessible until a late commit is accepted.
    This is a specialisation of ReportLockedError: the week still has no
    commit, and the cause is a missed deadline.
    """

    code = "WeekLocked"
    title = "Week Locked"

    def __init__(self, participant_id: UUID, week_number: int) -> None:
        super().__init__(
            participant_id=participant_id,
            week_number=week_number,
            message=(
                f"Week {week_number} is locked: the commit deadline passed "
                "without a commit."
            ),
            required_action="Submit a late commit to unlock the week.",
        )


class AdjustLockedError(SequencingError):
    """Raised when an adjustment is submitted before the diagnosis is complete."""

    code = "AdjustLocked"
    title = "Adjust Locked"

    def __init__(
        self,
        participant_id: UUID,
        week_number: int,
        available_at: datetime | None = None,
    ) -> None:
        if available_at is None:
            action = "Submit an accepted report to receive a diagnosis."
        else:
            action = f"Wait for the diagnosis, available at {available_at.isoformat()}."
        super().__init__(
            f"Cannot adjust week {week_number} before its diagnosis is complete.",
            participant_id=participant_id,
            week_number=week_number,
            required_action=action,
        )
        self.available_at = available_at


class CommitLockedError(SequencingError):
    """Raised when next week's commit is submitted while this week's adjust is pending."""

    code = "CommitLocked"
    title = "Commit Locked"

    def __init__(self, participant_id: UUID, week_number: int) -> None:
        super().__init__(
            f"Cannot commit for week {week_number} before week "
            f"{week_number - 1} is adjusted.",
            participant_id=participant_id,
            week_number=week_number,
            required_action=(
                f"Submit the adjustment for week {week_number - 1}, "
                f"or wait for week {week_number} to start."
            ),
        )


class AlreadySubmittedError(SequencingError):
    """Raised for a duplicate submission of an already completed step.

    The engine assumes at-least-once delivery: idempotency is enforced by
    rejection, never by merging.
    """

    code = "AlreadySubmitted"
    title = "Already Submitted"

    def __init__(self, participant_id: UUID, week_number: int, step: LoopStep) -> None:
        super().__init__(
            f"{step.value.title()} for week {week_number} was already submitted.",
            participant_id=participant_id,
            week_number=week_number,
            required_action="No action required; the submission is on record.",
        )
        self.step = step

    def extensions(self) -> dict[str, Any]:
        return {**super().extensions(), "step": self.step.value}


class DeadlinePassedError(SequencingError):
    """Raised when a step's deadline passed and the step is permanently missed."""

    code = "DeadlinePassed"
    title = "Deadline Passed"

    def __init__(
        self,
        participant_id: UUID,
        week_number: int,
        step: LoopStep,
        deadline: datetime,
    ) -> None:
        super().__init__(
            f"The {step.value.lower()} deadline for week {week_number} passed at "
            f"{deadline.isoformat()}.",
            participant_id=participant_id,
            week_number=week_number,
            required_action="Focus on the next open step of the current week.",
        )
        self.step = step
        self.deadline = deadline

    def extensions(self) -> dict[str, Any]:
        return {
            **super().extensions(),
            "step": self.step.value,
            "deadline": self.deadline.isoformat(),
        }


class WeekClosedError(SequencingError):
    """Raised when a submission targets a week that is already history."""

    code = "WeekClosed"
    title = "Week Closed"

    def __init__(self, participant_id: UUID, week_number: int) -> None:
        super().__init__(
            f"Week {week_number} is closed and can no longer be changed.",
            participant_id=participant_id,
            week_number=week_number,
            required_action="Submit to the current week instead.",
        )


class SystemDocumentNotSubmittedError(SequencingError):
    """Raised when a system document is approved before it is submitted."""

    code = "SystemDocumentNotSubmitted"
    title = "System Document Not Submitted"

    def __init__(self, participant_id: UUID) -> None:
        super().__init__(
            "No system document has been submitted for approval.",
            participant_id=participant_id,
            week_number=None,
            required_action="Submit the system document first.",
        )
