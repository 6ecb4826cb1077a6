"""Escalation record domain model.

Tracks consecutive missed reports for one participant and the state of
the mandatory review they trigger.

Review State Machine:
    NONE -> PENDING (miss threshold reached)
    PENDING -> RESOLVED (mentor resolution: reinstate, defer cohort, remove)
    RESOLVED -> PENDING (a reinstated participant misses again)
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum


class ReviewState(Enum):
    """State of the participant's mandatory review."""

    NONE = "NONE"
    PENDING = "PENDING"
    RESOLVED = "RESOLVED"


class ReviewOutcome(Enum):
    """Mentor decision resolving a mandatory review.

    Outcomes:
        REINSTATE: Counter reset, submissions unlocked
        DEFER_COHORT: Participant moved to a later cohort (terminal here)
        REMOVE: Participant removed from the program (terminal)
    """

    REINSTATE = "REINSTATE"
    DEFER_COHORT = "DEFER_COHORT"
    REMOVE = "REMOVE"

    @property
    def is_terminal(self) -> bool:
        """True if the outcome ends weekly-loop processing."""
        return self is not ReviewOutcome.REINSTATE


@dataclass(frozen=True, eq=True)
class EscalationRecord:
    """Consecutive-miss tracking for one participant.

    Attributes:
        miss_streak: Week numbers of the current run of consecutive missed
            reports. Its length is the consecutive-miss counter.
        missed_weeks: Every week whose report ended missed, in order.
        review_state: Mandatory review state.
        review_outcome: Outcome of the last resolved review.
        review_triggered_at: When the last review was triggered.
        review_resolved_at: When the last review was resolved.
        review_count: Number of reviews triggered so far.
    """

    miss_streak: tuple[int, ...] = ()
    missed_weeks: tuple[int, ...] = ()
    review_state: ReviewState = ReviewState.NONE
    review_outcome: ReviewOutcome | None = None
    review_triggered_at: datetime | None = None
    review_resolved_at: datetime | None = None
    review_count: int = 0

    @property
    def consecutive_misses(self) -> int:
        """Number of consecutive missed reports."""
        return len(self.miss_streak)

    @property
    def under_review(self) -> bool:
        """True while a mandatory review is pending."""
        return self.review_state is ReviewState.PENDING

    def with_miss(self, week_number: int) -> EscalationRecord:
        """Record a missed report.

        While a review is pending the miss is kept in history only; the
        counter is frozen until the review is resolved.
        """
        if week_number in self.missed_weeks:
            return self
        missed = self.missed_weeks + (week_number,)
        if self.under_review:
            return replace(self, missed_weeks=missed)
        return replace(self, missed_weeks=missed, miss_streak=self.miss_streak + (week_number,))

    def with_accepted_report(self) -> EscalationRecord:
        """Reset the counter after an accepted report."""
        if self.under_review or not self.miss_streak:
            return self
        return replace(self, miss_streak=())

    def with_review_triggered(self, at: datetime) -> EscalationRecord:
        """Move to PENDING review."""
        return replace(
            self,
            review_state=ReviewState.PENDING,
            review_outcome=None,
            review_triggered_at=at,
            review_resolved_at=None,
            review_count=self.review_count + 1,
        )

    def with_review_resolved(self, outcome: ReviewOutcome, at: datetime) -> EscalationRecord:
        """Resolve the pending review. Reinstatement resets the counter."""
        return replace(
            self,
            miss_streak=() if outcome is ReviewOutcome.REINSTATE else self.miss_streak,
            review_state=ReviewState.RESOLVED,
            review_outcome=outcome,
            review_resolved_at=at,
        )
