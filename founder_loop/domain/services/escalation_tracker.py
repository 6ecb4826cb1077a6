"""Escalation tracker domain service.

Consumes weekly outcomes across consecutive weeks:
- A missed report increments the consecutive-miss counter
- An accepted report resets it
- Reaching the threshold (default 2) puts the participant under review

While under review, further misses are recorded in history only; the
counter stays frozen until a mentor resolves the review. Resolution is an
external event: reinstate, defer to a later cohort, or remove.

The tracker also watches for a pattern of late submissions inside a
rolling window of weeks.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime

from founder_loop.config.loop_config import DEFAULT_LOOP_CONFIG, LoopConfig
from founder_loop.domain.errors.escalation import NoPendingReviewError
from founder_loop.domain.models.escalation_record import ReviewOutcome
from founder_loop.domain.models.participant import Participant, ParticipantStatus

_OUTCOME_STATUS: dict[ReviewOutcome, ParticipantStatus] = {
    ReviewOutcome.REINSTATE: ParticipantStatus.ACTIVE,
    ReviewOutcome.DEFER_COHORT: ParticipantStatus.DEFERRED,
    ReviewOutcome.REMOVE: ParticipantStatus.REMOVED,
}


@dataclass(frozen=True)
class MissOutcome:
    """Result of recording a missed report.

    Attributes:
        participant: Updated participant.
        review_triggered: True if this miss opened a mandatory review.
    """

    participant: Participant
    review_triggered: bool = False


class EscalationTracker:
    """Tracks consecutive missed reports and the review they trigger."""

    def __init__(self, config: LoopConfig = DEFAULT_LOOP_CONFIG) -> None:
        self._config = config

    def record_missed_report(
        self, participant: Participant, week_number: int, now: datetime
    ) -> MissOutcome:
        """Record a week whose report ended missed.

        The review triggers on the miss that brings the counter to the
        threshold, never earlier.
        """
        escalation = participant.escalation.with_miss(week_number)
        participant = replace(participant, escalation=escalation)

        if (
            participant.status is ParticipantStatus.ACTIVE
            and escalation.consecutive_misses >= self._config.review_miss_threshold
        ):
            participant = replace(
                participant,
                escalation=escalation.with_review_triggered(now),
                status=ParticipantStatus.UNDER_REVIEW,
            )
            return MissOutcome(participant, review_triggered=True)
        return MissOutcome(participant)

    def record_accepted_report(self, participant: Participant) -> Participant:
        """Reset the consecutive-miss counter after an accepted report."""
        return replace(participant, escalation=participant.escalation.with_accepted_report())

    def resolve_review(
        self, participant: Participant, outcome: ReviewOutcome, now: datetime
    ) -> Participant:
        """Apply a mentor's review decision.

        Raises:
            NoPendingReviewError: If no review is pending.
        """
        if not participant.escalation.under_review:
            raise NoPendingReviewError(participant.participant_id)
        return replace(
            participant,
            escalation=participant.escalation.with_review_resolved(outcome, now),
            status=_OUTCOME_STATUS[outcome],
        )

    def late_submissions_in_window(self, participant: Participant, week_number: int) -> int:
        """Count late submissions in the rolling window ending at ``week_number``."""
        first = week_number - self._config.pattern_warning_window_weeks + 1
        return sum(
            cycle.late_submission_count
            for cycle in participant.weeks
            if first <= cycle.week_number <= week_number
        )

    def pattern_warning_due(self, participant: Participant, week_number: int) -> bool:
        """True if late submissions in the window reached the warning count."""
        return (
            self.late_submissions_in_window(participant, week_number)
            >= self._config.pattern_warning_late_count
        )
