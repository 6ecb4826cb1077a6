"""Unit tests for LoopEngineService.

Tests:
- Enrollment and default cohort start
- Commit, report and adjust commands through the full pipeline
- Deadline sweeps, escalation to review and review resolution
- Stage progression, stage access and the system document flow
- Read-only queries and notification intent draining
- Serialization of concurrent commands for one participant
"""

from __future__ import annotations

import asyncio
import gc
from datetime import date, datetime, timedelta

import pytest

from founder_loop.application.services.loop_engine_service import LoopEngineService
from founder_loop.config.loop_config import LoopConfig
from founder_loop.domain.errors import (
    AdjustLockedError,
    AlreadySubmittedError,
    CommitLockedError,
    DeadlinePassedError,
    InvalidCohortStartError,
    MissingEvidenceError,
    NoPendingReviewError,
    ParticipantAlreadyEnrolledError,
    ParticipantInactiveError,
    ParticipantNotFoundError,
    ReportLockedError,
    StageLockedError,
    StageNotFoundError,
    SystemDocumentIncompleteError,
    SystemDocumentNotSubmittedError,
    UnderReviewError,
    VagueLanguageError,
    WeekLockedError,
    WeekNotFoundError,
)
from founder_loop.domain.events.notification_intent import NotificationKind
from founder_loop.domain.models.escalation_record import ReviewOutcome
from founder_loop.infrastructure.stubs import (
    NotificationIntentQueueStub,
    ParticipantRepositoryStub,
)
from tests.helpers.fake_time_authority import FakeTimeAuthority
from tests.helpers.loop_builders import (
    ACTION,
    COHORT_START,
    EVIDENCE,
    NARRATIVE,
    PARTICIPANT_ID,
    complete_document_sections,
    wat,
)

Kind = NotificationKind

# Report deadline dates of weeks 1 and 2
WEEK1_FRIDAY = date(2026, 1, 9)
WEEK2_FRIDAY = date(2026, 1, 16)


async def _enroll(engine: LoopEngineService, baseline: float = 1000.0):
    return await engine.enroll_participant(PARTICIPANT_ID, baseline_revenue_30d=baseline)


async def _commit(engine: LoopEngineService, week: int = 1, friday: date = WEEK1_FRIDAY):
    return await engine.submit_commit(PARTICIPANT_ID, week, ACTION, 4000.0, friday)


async def _report(
    engine: LoopEngineService,
    week: int = 1,
    revenue: float = 3000.0,
    evidence: tuple[str, ...] = EVIDENCE,
):
    return await engine.submit_report(PARTICIPANT_ID, week, revenue, 10.0, NARRATIVE, evidence)


async def _complete_week_one(engine: LoopEngineService, fake_time: FakeTimeAuthority) -> None:
    """Commit on time, report Wednesday, adjust Saturday."""
    await _enroll(engine)
    fake_time.set_time(wat(5, 8))
    await _commit(engine)
    fake_time.set_time(wat(7, 10))
    await _report(engine)
    fake_time.set_time(wat(10, 10))
    await engine.submit_adjust(PARTICIPANT_ID, 1, "Double down on referrals")


class TestEnrollment:
    """Tests for enroll_participant."""

    async def test_enroll_opens_week_one(
        self, engine: LoopEngineService, repository: ParticipantRepositoryStub
    ) -> None:
        state = await _enroll(engine)

        assert state.week_number == 1
        assert state.calendar_week == 0
        assert state.next_action == "SUBMIT_COMMIT"
        assert state.next_deadline == wat(5, 9)
        assert [s.status for s in state.steps] == ["NOT_STARTED"] * 5
        stored = await repository.get(PARTICIPANT_ID)
        assert stored is not None
        assert stored.cohort_start == COHORT_START
        assert stored.version == 1

    async def test_default_cohort_before_commit_deadline(
        self, engine: LoopEngineService, fake_time: FakeTimeAuthority,
        repository: ParticipantRepositoryStub,
    ) -> None:
        fake_time.set_time(wat(5, 8))
        await _enroll(engine)
        stored = await repository.get(PARTICIPANT_ID)
        assert stored is not None
        assert stored.cohort_start == COHORT_START

    async def test_default_cohort_after_commit_deadline(
        self, engine: LoopEngineService, fake_time: FakeTimeAuthority
    ) -> None:
        fake_time.set_time(wat(5, 10))
        state = await _enroll(engine)
        assert state.next_deadline == wat(12, 9)
        assert state.calendar_week == 0

    async def test_explicit_cohort_start(self, engine: LoopEngineService) -> None:
        state = await engine.enroll_participant(
            PARTICIPANT_ID, 1000.0, cohort_start=COHORT_START + timedelta(weeks=2)
        )
        assert state.next_deadline == wat(19, 9)

    @pytest.mark.parametrize(
        "cohort_start",
        [wat(6), datetime(2026, 1, 5)],
        ids=["not-monday", "naive"],
    )
    async def test_invalid_cohort_start(
        self, engine: LoopEngineService, cohort_start: datetime
    ) -> None:
        with pytest.raises(InvalidCohortStartError):
            await engine.enroll_participant(PARTICIPANT_ID, 1000.0, cohort_start=cohort_start)

    async def test_past_cohort_start_rejected(
        self,
        engine: LoopEngineService,
        fake_time: FakeTimeAuthority,
        repository: ParticipantRepositoryStub,
        intent_queue: NotificationIntentQueueStub,
    ) -> None:
        """Weeks that ended before enrollment are never counted as misses."""
        fake_time.set_time(wat(21, 10))
        with pytest.raises(InvalidCohortStartError, match="already passed"):
            await engine.enroll_participant(PARTICIPANT_ID, 1000.0, cohort_start=COHORT_START)
        assert repository.count() == 0
        assert intent_queue.history == []

    async def test_current_week_before_commit_deadline_accepted(
        self, engine: LoopEngineService, fake_time: FakeTimeAuthority
    ) -> None:
        fake_time.set_time(wat(19, 8))
        state = await engine.enroll_participant(
            PARTICIPANT_ID, 1000.0, cohort_start=COHORT_START + timedelta(weeks=2)
        )
        assert state.next_deadline == wat(19, 9)
        status = await engine.get_escalation_status(PARTICIPANT_ID)
        assert status.consecutive_misses == 0
        assert not status.under_review

    async def test_duplicate_enrollment(self, engine: LoopEngineService) -> None:
        await _enroll(engine)
        with pytest.raises(ParticipantAlreadyEnrolledError):
            await _enroll(engine)

    async def test_negative_baseline(self, engine: LoopEngineService) -> None:
        with pytest.raises(ValueError):
            await _enroll(engine, baseline=-1.0)


class TestCommit:
    """Tests for submit_commit."""

    async def test_on_time_commit(
        self, engine: LoopEngineService, fake_time: FakeTimeAuthority,
        intent_queue: NotificationIntentQueueStub,
    ) -> None:
        await _enroll(engine)
        fake_time.set_time(wat(5, 8))
        state = await _commit(engine)

        assert state.next_action == "SUBMIT_REPORT"
        assert state.next_deadline == wat(9, 18)
        assert not state.commit_late
        assert state.steps[0].status == "COMPLETE"
        assert state.steps[1].status == "IN_PROGRESS"
        assert intent_queue.kinds() == []

    async def test_commit_exactly_at_deadline_is_on_time(
        self, engine: LoopEngineService, fake_time: FakeTimeAuthority
    ) -> None:
        await _enroll(engine)
        fake_time.set_time(wat(5, 9))
        state = await _commit(engine)
        assert not state.commit_late

    async def test_late_commit_unlocks_week_without_credit(
        self, engine: LoopEngineService, fake_time: FakeTimeAuthority,
        intent_queue: NotificationIntentQueueStub,
    ) -> None:
        await _enroll(engine)
        fake_time.set_time(wat(5, 9, 5))

        locked = await engine.get_current_week_state(PARTICIPANT_ID)
        assert locked.is_locked
        assert locked.next_action == "SUBMIT_LATE_COMMIT"
        assert locked.next_deadline == wat(9, 18)

        state = await _commit(engine)
        assert state.commit_late
        assert state.stage_credit_locked
        assert not state.is_locked
        assert state.next_action == "SUBMIT_REPORT"
        assert intent_queue.kinds() == [Kind.MENTOR_NOTIFIED_MISSED_COMMIT, Kind.MENTOR_NOTIFIED_LATE_COMMIT]
        assert intent_queue.history[1].payload["minutes_late"] == 5

    async def test_vague_commit_rejected(
        self, engine: LoopEngineService, fake_time: FakeTimeAuthority
    ) -> None:
        await _enroll(engine)
        fake_time.set_time(wat(5, 8))
        with pytest.raises(VagueLanguageError) as exc_info:
            await engine.submit_commit(
                PARTICIPANT_ID, 1, "Try to close more deals this week", 4000.0, WEEK1_FRIDAY
            )
        assert exc_info.value.status == 422

    async def test_second_commit_rejected(
        self, engine: LoopEngineService, fake_time: FakeTimeAuthority
    ) -> None:
        await _enroll(engine)
        fake_time.set_time(wat(5, 8))
        await _commit(engine)
        with pytest.raises(AlreadySubmittedError):
            await _commit(engine)

    async def test_next_week_commit_locked_until_adjust(
        self, engine: LoopEngineService, fake_time: FakeTimeAuthority
    ) -> None:
        await _enroll(engine)
        fake_time.set_time(wat(5, 8))
        with pytest.raises(CommitLockedError):
            await _commit(engine, week=2, friday=WEEK2_FRIDAY)
        with pytest.raises(WeekNotFoundError):
            await _commit(engine, week=3, friday=date(2026, 1, 23))

    async def test_commit_after_report_cutoff_persists_misses(
        self, engine: LoopEngineService, fake_time: FakeTimeAuthority,
        repository: ParticipantRepositoryStub, intent_queue: NotificationIntentQueueStub,
    ) -> None:
        await _enroll(engine)
        fake_time.set_time(wat(9, 18, 1))
        with pytest.raises(DeadlinePassedError):
            await _commit(engine)

        stored = await repository.get(PARTICIPANT_ID)
        assert stored is not None
        assert stored.escalation.consecutive_misses == 1
        assert intent_queue.kinds() == [
            Kind.MENTOR_NOTIFIED_MISSED_COMMIT,
            Kind.MENTOR_NOTIFIED_MISSED_REPORT,
        ]


class TestReport:
    """Tests for submit_report."""

    async def test_report_before_commit_is_locked(
        self, engine: LoopEngineService, fake_time: FakeTimeAuthority
    ) -> None:
        await _enroll(engine)
        fake_time.set_time(wat(5, 8))
        with pytest.raises(ReportLockedError):
            await _report(engine)

    async def test_report_in_locked_week(
        self, engine: LoopEngineService, fake_time: FakeTimeAuthority
    ) -> None:
        await _enroll(engine)
        fake_time.set_time(wat(6, 10))
        with pytest.raises(WeekLockedError) as exc_info:
            await _report(engine)
        assert isinstance(exc_info.value, ReportLockedError)

    async def test_accepted_report_moves_to_diagnosis(
        self, engine: LoopEngineService, fake_time: FakeTimeAuthority
    ) -> None:
        await _enroll(engine)
        fake_time.set_time(wat(5, 8))
        await _commit(engine)
        fake_time.set_time(wat(7, 10))
        state = await _report(engine)

        assert state.report_status == "ACCEPTED"
        assert state.next_action == "AWAIT_DIAGNOSIS"
        assert state.next_deadline == wat(8)
        assert state.diagnosis is None

        fake_time.set_time(wat(8))
        visible = await engine.get_current_week_state(PARTICIPANT_ID)
        assert visible.next_action == "SUBMIT_ADJUST"
        assert visible.diagnosis is not None
        assert visible.diagnosis.dollar_per_hour == 300.0
        assert visible.diagnosis.win_rate == 75.0
        assert visible.diagnosis.revenue_delta == 3.0

    async def test_report_without_evidence_is_retained(
        self, engine: LoopEngineService, fake_time: FakeTimeAuthority,
        intent_queue: NotificationIntentQueueStub,
    ) -> None:
        await _enroll(engine)
        fake_time.set_time(wat(5, 8))
        await _commit(engine)
        fake_time.set_time(wat(7, 10))
        with pytest.raises(MissingEvidenceError):
            await _report(engine, evidence=())

        state = await engine.get_current_week_state(PARTICIPANT_ID)
        assert state.report_status == "REJECTED_NO_EVIDENCE"
        assert state.next_action == "RESUBMIT_REPORT"
        assert state.steps[2].status == "IN_PROGRESS"
        assert intent_queue.kinds() == [Kind.MENTOR_NOTIFIED_REJECTED_EVIDENCE]

        accepted = await _report(engine)
        assert accepted.report_status == "ACCEPTED"

    async def test_rejected_report_then_missed_cutoff(
        self, engine: LoopEngineService, fake_time: FakeTimeAuthority,
        intent_queue: NotificationIntentQueueStub,
    ) -> None:
        await _enroll(engine)
        fake_time.set_time(wat(5, 8))
        await _commit(engine)
        fake_time.set_time(wat(7, 10))
        with pytest.raises(MissingEvidenceError):
            await _report(engine, evidence=())

        fake_time.set_time(wat(9, 18, 1))
        summary = await engine.tick()
        assert summary.transitions == 1
        escalation = await engine.get_escalation_status(PARTICIPANT_ID)
        assert escalation.consecutive_misses == 1
        assert escalation.missed_weeks == (1,)
        assert intent_queue.kinds()[-1] is Kind.MENTOR_NOTIFIED_MISSED_REPORT

        again = await engine.tick()
        assert again.transitions == 0
        assert again.intents_emitted == 0

    async def test_late_report_inside_grace(
        self, repository: ParticipantRepositoryStub,
        intent_queue: NotificationIntentQueueStub, fake_time: FakeTimeAuthority,
    ) -> None:
        engine = LoopEngineService(
            repository, intent_queue, fake_time, LoopConfig(late_report_grace=timedelta(hours=6))
        )
        await _enroll(engine)
        fake_time.set_time(wat(5, 8))
        await _commit(engine)
        fake_time.set_time(wat(9, 20))
        state = await _report(engine)

        assert state.report_late
        assert intent_queue.kinds() == [Kind.MENTOR_NOTIFIED_LATE_REPORT]


class TestAdjust:
    """Tests for submit_adjust."""

    async def test_adjust_before_diagnosis_is_locked(
        self, engine: LoopEngineService, fake_time: FakeTimeAuthority
    ) -> None:
        await _enroll(engine)
        fake_time.set_time(wat(5, 8))
        await _commit(engine)
        fake_time.set_time(wat(7, 10))
        await _report(engine)
        fake_time.set_time(wat(7, 11))
        with pytest.raises(AdjustLockedError):
            await engine.submit_adjust(PARTICIPANT_ID, 1, "Too early")

    async def test_adjust_closes_week_and_opens_next(
        self, engine: LoopEngineService, fake_time: FakeTimeAuthority
    ) -> None:
        await _enroll(engine)
        fake_time.set_time(wat(5, 8))
        await _commit(engine)
        fake_time.set_time(wat(7, 10))
        await _report(engine)
        fake_time.set_time(wat(10, 10))
        state = await engine.submit_adjust(PARTICIPANT_ID, 1, "Double down on referrals")

        assert state.week_number == 2
        assert state.next_action == "SUBMIT_COMMIT"
        assert state.next_deadline == wat(12, 9)

        week_one = await engine.get_week_state(PARTICIPANT_ID, 1)
        assert week_one.is_closed
        assert week_one.next_action == "AWAIT_NEXT_WEEK"

        with pytest.raises(AlreadySubmittedError):
            await engine.submit_adjust(PARTICIPANT_ID, 1, "Again")

    async def test_early_commit_for_next_week(
        self, engine: LoopEngineService, fake_time: FakeTimeAuthority
    ) -> None:
        await _complete_week_one(engine, fake_time)
        state = await _commit(engine, week=2, friday=WEEK2_FRIDAY)
        assert state.week_number == 2
        assert state.next_action == "SUBMIT_REPORT"


class TestEscalation:
    """Tests for deadline sweeps and the mandatory review."""

    async def _miss_two_weeks(
        self, engine: LoopEngineService, fake_time: FakeTimeAuthority
    ) -> None:
        await _enroll(engine)
        fake_time.set_time(wat(16, 18, 1))
        await engine.tick()

    async def test_two_missed_reports_trigger_review(
        self, engine: LoopEngineService, fake_time: FakeTimeAuthority,
        intent_queue: NotificationIntentQueueStub,
    ) -> None:
        await _enroll(engine)
        fake_time.set_time(wat(16, 18, 1))
        summary = await engine.tick()

        assert summary.participants_swept == 1
        assert summary.transitions == 5
        assert summary.intents_emitted == 5
        assert intent_queue.kinds() == [
            Kind.MENTOR_NOTIFIED_MISSED_COMMIT,
            Kind.MENTOR_NOTIFIED_MISSED_REPORT,
            Kind.MENTOR_NOTIFIED_MISSED_COMMIT,
            Kind.MENTOR_NOTIFIED_MISSED_REPORT,
            Kind.REVIEW_TRIGGERED,
        ]
        assert intent_queue.history[-1].payload["missed_weeks"] == [1, 2]

        escalation = await engine.get_escalation_status(PARTICIPANT_ID)
        assert escalation.under_review
        assert escalation.participant_status == "UNDER_REVIEW"
        assert escalation.is_locked

    async def test_submissions_blocked_under_review(
        self, engine: LoopEngineService, fake_time: FakeTimeAuthority
    ) -> None:
        await self._miss_two_weeks(engine, fake_time)

        with pytest.raises(UnderReviewError) as exc_info:
            await _commit(engine, week=2, friday=WEEK2_FRIDAY)
        assert exc_info.value.status == 423

        state = await engine.get_current_week_state(PARTICIPANT_ID)
        assert state.next_action == "AWAIT_REVIEW"
        assert state.is_locked

    async def test_reinstatement_resets_counter(
        self, engine: LoopEngineService, fake_time: FakeTimeAuthority,
        intent_queue: NotificationIntentQueueStub,
    ) -> None:
        await self._miss_two_weeks(engine, fake_time)
        status = await engine.resolve_review(PARTICIPANT_ID, ReviewOutcome.REINSTATE)

        assert status.participant_status == "ACTIVE"
        assert status.consecutive_misses == 0
        assert status.review_state == "RESOLVED"
        assert status.review_outcome == "REINSTATE"
        assert intent_queue.kinds()[-1] is Kind.REVIEW_RESOLVED

        with pytest.raises(NoPendingReviewError):
            await engine.resolve_review(PARTICIPANT_ID, ReviewOutcome.REINSTATE)

    async def test_removed_participant_is_skipped(
        self, engine: LoopEngineService, fake_time: FakeTimeAuthority
    ) -> None:
        await self._miss_two_weeks(engine, fake_time)
        await engine.resolve_review(PARTICIPANT_ID, ReviewOutcome.REMOVE)

        fake_time.set_time(wat(30, 12))
        summary = await engine.tick()
        assert summary.participants_swept == 0
        assert summary.participants_skipped == 1

        with pytest.raises(ParticipantInactiveError):
            await _commit(engine, week=2, friday=WEEK2_FRIDAY)
        state = await engine.get_current_week_state(PARTICIPANT_ID)
        assert state.next_action == "INACTIVE"

    async def test_tick_opens_weeks_the_calendar_reached(
        self, engine: LoopEngineService, fake_time: FakeTimeAuthority,
        repository: ParticipantRepositoryStub,
    ) -> None:
        await _enroll(engine)
        fake_time.set_time(wat(12, 8))
        await engine.tick()
        stored = await repository.get(PARTICIPANT_ID)
        assert stored is not None
        assert stored.current_week == 2
        assert stored.weeks[0].is_closed


class TestStages:
    """Tests for stage progression, stage access and the system document."""

    async def test_two_credited_weeks_advance_stage(
        self, engine: LoopEngineService, fake_time: FakeTimeAuthority,
        intent_queue: NotificationIntentQueueStub,
    ) -> None:
        await _complete_week_one(engine, fake_time)
        fake_time.set_time(wat(12, 8))
        await _commit(engine, week=2, friday=WEEK2_FRIDAY)
        fake_time.set_time(wat(14, 10))
        state = await _report(engine, week=2)

        assert state.current_stage == 2
        assert intent_queue.kinds() == [Kind.STAGE_ADVANCED]
        assert intent_queue.history[0].payload == {
            "from_stage": 1,
            "to_stage": 2,
            "week_number": 2,
            "graduated": False,
        }

        status = await engine.get_stage_status(PARTICIPANT_ID)
        assert status.current_stage_name == "Revenue Diagnosis"
        assert status.unlocked_stages == (1, 2)

    async def test_access_stage(
        self, engine: LoopEngineService, intent_queue: NotificationIntentQueueStub
    ) -> None:
        await _enroll(engine)
        access = await engine.access_stage(PARTICIPANT_ID, 1)
        assert access.name == "Revenue Baseline"

        with pytest.raises(StageLockedError) as exc_info:
            await engine.access_stage(PARTICIPANT_ID, 3)
        assert exc_info.value.status == 403
        assert exc_info.value.current_stage == 1
        assert intent_queue.kinds() == [Kind.STAGE_LOCKED_ATTEMPT]

    @pytest.mark.parametrize("stage", [0, 6])
    async def test_unknown_stage(self, engine: LoopEngineService, stage: int) -> None:
        await _enroll(engine)
        with pytest.raises(StageNotFoundError):
            await engine.access_stage(PARTICIPANT_ID, stage)

    async def test_system_document_flow(
        self, engine: LoopEngineService, repository: ParticipantRepositoryStub
    ) -> None:
        await _enroll(engine)
        with pytest.raises(SystemDocumentNotSubmittedError):
            await engine.approve_system_document(PARTICIPANT_ID)
        with pytest.raises(SystemDocumentIncompleteError):
            await engine.submit_system_document(PARTICIPANT_ID, {"overview": "short"})

        await engine.submit_system_document(PARTICIPANT_ID, complete_document_sections())
        await engine.approve_system_document(PARTICIPANT_ID)
        stored = await repository.get(PARTICIPANT_ID)
        assert stored is not None and stored.system_document is not None
        assert stored.system_document.is_approved

        await engine.submit_system_document(PARTICIPANT_ID, complete_document_sections())
        stored = await repository.get(PARTICIPANT_ID)
        assert stored is not None and stored.system_document is not None
        assert not stored.system_document.is_approved

    async def test_exit_interview_recorded_once(
        self, engine: LoopEngineService, fake_time: FakeTimeAuthority,
        repository: ParticipantRepositoryStub,
    ) -> None:
        await _enroll(engine)
        await engine.record_exit_interview(PARTICIPANT_ID)
        fake_time.advance(3600)
        await engine.record_exit_interview(PARTICIPANT_ID)
        stored = await repository.get(PARTICIPANT_ID)
        assert stored is not None
        assert stored.exit_interview_at == wat(4, 12)


class TestQueries:
    """Tests for read-only queries and intent draining."""

    async def test_unknown_participant(self, engine: LoopEngineService) -> None:
        with pytest.raises(ParticipantNotFoundError) as exc_info:
            await engine.get_current_week_state(PARTICIPANT_ID)
        assert exc_info.value.status == 404

    async def test_unopened_week(self, engine: LoopEngineService) -> None:
        await _enroll(engine)
        with pytest.raises(WeekNotFoundError):
            await engine.get_week_state(PARTICIPANT_ID, 2)

    async def test_queries_never_write(
        self, engine: LoopEngineService, fake_time: FakeTimeAuthority,
        repository: ParticipantRepositoryStub, intent_queue: NotificationIntentQueueStub,
    ) -> None:
        await _enroll(engine)
        fake_time.set_time(wat(12, 10))

        state = await engine.get_current_week_state(PARTICIPANT_ID)
        assert state.week_number == 2
        assert state.calendar_week == 2

        stored = await repository.get(PARTICIPANT_ID)
        assert stored is not None
        assert stored.current_week == 1
        assert stored.version == 1
        assert intent_queue.kinds() == []

    async def test_drain_notification_intents(
        self, engine: LoopEngineService, fake_time: FakeTimeAuthority,
        intent_queue: NotificationIntentQueueStub,
    ) -> None:
        await _enroll(engine)
        fake_time.set_time(wat(9, 18, 1))
        await engine.tick()

        first = await engine.drain_notification_intents(limit=1)
        assert [i.kind for i in first] == [Kind.MENTOR_NOTIFIED_MISSED_COMMIT]
        rest = await engine.drain_notification_intents()
        assert [i.kind for i in rest] == [Kind.MENTOR_NOTIFIED_MISSED_REPORT]
        assert await intent_queue.pending_count() == 0


class TestSerialization:
    """Tests for one-writer-per-participant command ordering."""

    async def test_concurrent_commit_report_and_tick(
        self,
        engine: LoopEngineService,
        fake_time: FakeTimeAuthority,
        repository: ParticipantRepositoryStub,
    ) -> None:
        await _enroll(engine)
        fake_time.set_time(wat(5, 8))

        commit, report, tick = await asyncio.gather(
            _commit(engine), _report(engine), engine.tick()
        )

        assert commit.steps[0].status == "COMPLETE"
        assert report.report_status == "ACCEPTED"
        assert tick.participants_swept == 1
        assert tick.transitions == 0
        stored = await repository.get(PARTICIPANT_ID)
        assert stored is not None
        # Enrollment, then one save per applied command
        assert stored.version == 3

    async def test_report_queued_before_commit_stays_locked(
        self,
        engine: LoopEngineService,
        fake_time: FakeTimeAuthority,
        repository: ParticipantRepositoryStub,
    ) -> None:
        """A report is never evaluated against a commit that has not landed yet."""
        await _enroll(engine)
        fake_time.set_time(wat(5, 8))

        report, commit = await asyncio.gather(
            _report(engine), _commit(engine), return_exceptions=True
        )

        assert isinstance(report, ReportLockedError)
        assert not isinstance(commit, BaseException)
        state = await engine.get_week_state(PARTICIPANT_ID, 1)
        assert state.report_status is None
        assert state.next_action == "SUBMIT_REPORT"
        stored = await repository.get(PARTICIPANT_ID)
        assert stored is not None
        assert stored.version == 2

    async def test_concurrent_duplicate_commits(
        self, engine: LoopEngineService, fake_time: FakeTimeAuthority
    ) -> None:
        await _enroll(engine)
        fake_time.set_time(wat(5, 8))

        results = await asyncio.gather(_commit(engine), _commit(engine), return_exceptions=True)

        assert not isinstance(results[0], BaseException)
        assert isinstance(results[1], AlreadySubmittedError)

    async def test_idle_participant_holds_no_lock(
        self, engine: LoopEngineService, fake_time: FakeTimeAuthority
    ) -> None:
        await _enroll(engine)
        fake_time.set_time(wat(5, 8))
        await asyncio.gather(_commit(engine), engine.tick())
        gc.collect()
        assert PARTICIPANT_ID not in engine._locks
