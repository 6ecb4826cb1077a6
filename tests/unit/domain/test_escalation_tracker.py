"""Unit tests for EscalationRecord and EscalationTracker.

Tests:
- Consecutive-miss counter increments and resets
- Review triggers exactly at the threshold
- Misses while under review are history only
- Review resolution outcomes
- Late-submission pattern window
"""

from __future__ import annotations

import pytest

from founder_loop.config.loop_config import LoopConfig
from founder_loop.domain.errors import NoPendingReviewError
from founder_loop.domain.models.escalation_record import (
    EscalationRecord,
    ReviewOutcome,
    ReviewState,
)
from founder_loop.domain.models.participant import ParticipantStatus
from founder_loop.domain.services.escalation_tracker import EscalationTracker
from founder_loop.domain.services.weekly_loop_machine import WeeklyLoopMachine
from tests.helpers.loop_builders import credited_week, make_participant, wat


class TestEscalationRecord:
    """Tests for the escalation value object."""

    def test_miss_extends_streak(self) -> None:
        record = EscalationRecord().with_miss(1).with_miss(2)
        assert record.consecutive_misses == 2
        assert record.missed_weeks == (1, 2)

    def test_duplicate_week_is_ignored(self) -> None:
        record = EscalationRecord().with_miss(1)
        assert record.with_miss(1) is record

    def test_accepted_report_resets_streak_but_keeps_history(self) -> None:
        record = EscalationRecord().with_miss(1).with_accepted_report()
        assert record.consecutive_misses == 0
        assert record.missed_weeks == (1,)

    def test_misses_under_review_are_history_only(self) -> None:
        record = EscalationRecord().with_miss(1).with_miss(2).with_review_triggered(wat(16, 18))
        record = record.with_miss(3)
        assert record.consecutive_misses == 2
        assert record.missed_weeks == (1, 2, 3)

    def test_reinstatement_clears_streak(self) -> None:
        record = (
            EscalationRecord()
            .with_miss(1)
            .with_miss(2)
            .with_review_triggered(wat(16, 18))
            .with_review_resolved(ReviewOutcome.REINSTATE, wat(17))
        )
        assert record.consecutive_misses == 0
        assert record.review_state is ReviewState.RESOLVED
        assert record.review_count == 1

    def test_terminal_outcomes(self) -> None:
        assert not ReviewOutcome.REINSTATE.is_terminal
        assert ReviewOutcome.DEFER_COHORT.is_terminal
        assert ReviewOutcome.REMOVE.is_terminal


class TestEscalationTracker:
    """Tests for EscalationTracker."""

    def test_first_miss_does_not_trigger_review(self) -> None:
        tracker = EscalationTracker()
        outcome = tracker.record_missed_report(make_participant(), 1, wat(9, 18))
        assert not outcome.review_triggered
        assert outcome.participant.status is ParticipantStatus.ACTIVE
        assert outcome.participant.escalation.consecutive_misses == 1

    def test_second_consecutive_miss_triggers_review(self) -> None:
        tracker = EscalationTracker()
        first = tracker.record_missed_report(make_participant(), 1, wat(9, 18))
        second = tracker.record_missed_report(first.participant, 2, wat(16, 18))
        assert second.review_triggered
        assert second.participant.status is ParticipantStatus.UNDER_REVIEW
        assert second.participant.escalation.review_triggered_at == wat(16, 18)

    def test_third_miss_under_review_does_not_trigger_again(self) -> None:
        tracker = EscalationTracker()
        participant = make_participant()
        for week in (1, 2):
            participant = tracker.record_missed_report(participant, week, wat(9, 18)).participant
        third = tracker.record_missed_report(participant, 3, wat(23, 18))
        assert not third.review_triggered
        assert third.participant.escalation.review_count == 1

    def test_custom_threshold(self) -> None:
        tracker = EscalationTracker(LoopConfig(review_miss_threshold=1))
        assert tracker.record_missed_report(make_participant(), 1, wat(9, 18)).review_triggered

    def test_accepted_report_resets_counter(self) -> None:
        tracker = EscalationTracker()
        participant = tracker.record_missed_report(make_participant(), 1, wat(9, 18)).participant
        participant = tracker.record_accepted_report(participant)
        outcome = tracker.record_missed_report(participant, 3, wat(23, 18))
        assert not outcome.review_triggered
        assert outcome.participant.escalation.consecutive_misses == 1

    @pytest.mark.parametrize(
        ("outcome", "status"),
        [
            (ReviewOutcome.REINSTATE, ParticipantStatus.ACTIVE),
            (ReviewOutcome.DEFER_COHORT, ParticipantStatus.DEFERRED),
            (ReviewOutcome.REMOVE, ParticipantStatus.REMOVED),
        ],
    )
    def test_resolve_review(self, outcome: ReviewOutcome, status: ParticipantStatus) -> None:
        tracker = EscalationTracker()
        participant = make_participant()
        for week in (1, 2):
            participant = tracker.record_missed_report(participant, week, wat(9, 18)).participant
        resolved = tracker.resolve_review(participant, outcome, wat(17))
        assert resolved.status is status
        assert resolved.escalation.review_outcome is outcome

    def test_resolve_without_pending_review(self) -> None:
        with pytest.raises(NoPendingReviewError):
            EscalationTracker().resolve_review(make_participant(), ReviewOutcome.REINSTATE, wat(17))


class TestLatePattern:
    """Tests for the late-submission pattern warning."""

    def test_three_late_weeks_in_window_warn(self, machine: WeeklyLoopMachine) -> None:
        tracker = EscalationTracker()
        weeks = tuple(
            credited_week(machine, n, 100.0, late_commit=True) for n in (1, 2, 3)
        )
        participant = make_participant(weeks)
        assert tracker.late_submissions_in_window(participant, 3) == 3
        assert tracker.pattern_warning_due(participant, 3)
        assert not tracker.pattern_warning_due(participant, 2)

    def test_late_weeks_outside_window_do_not_count(self, machine: WeeklyLoopMachine) -> None:
        tracker = EscalationTracker(LoopConfig(pattern_warning_window_weeks=2))
        weeks = tuple(
            credited_week(machine, n, 100.0, late_commit=n != 2) for n in (1, 2, 3)
        )
        participant = make_participant(weeks)
        assert tracker.late_submissions_in_window(participant, 3) == 1
