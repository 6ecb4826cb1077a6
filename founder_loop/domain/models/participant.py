"""Participant aggregate.

The participant is the unit of serialization: every event for one
participant is applied to one Participant value, and the engine replaces
the whole value atomically. Each save bumps ``version`` so a repository
can reject a stale write.

Participant Status:
    ACTIVE -> UNDER_REVIEW (miss threshold reached)
    UNDER_REVIEW -> ACTIVE (reinstated)
    UNDER_REVIEW -> DEFERRED | REMOVED (terminal)
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from uuid import UUID

from founder_loop.domain.models.escalation_record import EscalationRecord
from founder_loop.domain.models.stage import StageProgress
from founder_loop.domain.models.system_document import SystemDocument
from founder_loop.domain.models.week_cycle import WeekCycle


class ParticipantStatus(Enum):
    """Lifecycle status of a participant."""

    ACTIVE = "ACTIVE"
    UNDER_REVIEW = "UNDER_REVIEW"
    DEFERRED = "DEFERRED"
    REMOVED = "REMOVED"

    @property
    def is_terminal(self) -> bool:
        """True if weekly-loop processing has ended for good."""
        return self in (ParticipantStatus.DEFERRED, ParticipantStatus.REMOVED)


@dataclass(frozen=True, eq=True)
class RevenueBaseline:
    """Revenue captured once at intake. Immutable afterwards.

    Attributes:
        revenue_30d: Revenue over the 30 days before enrollment.
        revenue_90d: Revenue over the 90 days before enrollment.
    """

    revenue_30d: float
    revenue_90d: float = 0.0

    def __post_init__(self) -> None:
        if self.revenue_30d < 0 or self.revenue_90d < 0:
            raise ValueError("Baseline revenue must not be negative")


@dataclass(frozen=True, eq=True)
class Participant:
    """One founder running the weekly loop.

    Attributes:
        participant_id: Unique participant id.
        enrolled_at: When the participant enrolled.
        cohort_start: Monday 00:00 (program timezone) of week 1.
        baseline: Intake revenue baseline.
        weeks: Opened week cycles, week 1 first.
        stage: Stage progress.
        escalation: Consecutive-miss tracking and review state.
        status: Lifecycle status.
        system_document: Latest submitted system document.
        exit_interview_at: When the exit interview was recorded.
        version: Optimistic-concurrency version, bumped on every save.
    """

    participant_id: UUID
    enrolled_at: datetime
    cohort_start: datetime
    baseline: RevenueBaseline
    weeks: tuple[WeekCycle, ...] = ()
    stage: StageProgress = field(default_factory=StageProgress)
    escalation: EscalationRecord = field(default_factory=EscalationRecord)
    status: ParticipantStatus = ParticipantStatus.ACTIVE
    system_document: SystemDocument | None = None
    exit_interview_at: datetime | None = None
    version: int = 0

    @property
    def current_week(self) -> int:
        """Number of the latest opened week (0 before week 1 opens)."""
        return self.weeks[-1].week_number if self.weeks else 0

    @property
    def current_cycle(self) -> WeekCycle | None:
        """The latest opened week cycle."""
        return self.weeks[-1] if self.weeks else None

    def week(self, week_number: int) -> WeekCycle | None:
        """Return an opened week, or None."""
        if 1 <= week_number <= len(self.weeks):
            return self.weeks[week_number - 1]
        return None

    def with_week(self, cycle: WeekCycle) -> Participant:
        """Create new participant with a week replaced or appended.

        Raises:
            ValueError: If the cycle would leave a gap in the history.
        """
        index = cycle.week_number - 1
        if index < len(self.weeks):
            weeks = self.weeks[:index] + (cycle,) + self.weeks[index + 1 :]
        elif index == len(self.weeks):
            weeks = self.weeks + (cycle,)
        else:
            raise ValueError(
                f"Cannot open week {cycle.week_number}; latest week is {self.current_week}"
            )
        return replace(self, weeks=weeks)

    @property
    def under_review(self) -> bool:
        return self.status is ParticipantStatus.UNDER_REVIEW

    @property
    def is_graduated(self) -> bool:
        return self.stage.is_graduated

    @property
    def is_locked(self) -> bool:
        """True if new submissions are blocked."""
        return self.status is not ParticipantStatus.ACTIVE

    @property
    def lock_reason(self) -> str | None:
        """Why submissions are blocked, if they are."""
        if self.status is ParticipantStatus.UNDER_REVIEW:
            return "Mandatory review after consecutive missed reports"
        if self.status is ParticipantStatus.DEFERRED:
            return "Deferred to a later cohort"
        if self.status is ParticipantStatus.REMOVED:
            return "Removed from the program"
        return None
