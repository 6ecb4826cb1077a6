"""Loop engine service - command/query facade of the weekly loop.

The engine owns the per-participant serialization. Every command for a
participant runs under that participant's asyncio.Lock; different
participants proceed concurrently.

Command pipeline:
    1. Load the participant aggregate (NotFound if unknown)
    2. Apply deadlines up to the command's own timestamp (implicit tick)
    3. Check the participant may act (ParticipantInactive, UnderReview)
    4. Apply the event through the weekly loop machine
    5. Feed escalation tracking and stage progression
    6. Save the aggregate, then queue notification intents

Deadline changes made in step 2 are saved even when the command itself is
rejected, so a rejected submission never hides a miss.

Developer Golden Rules:
1. ONE PARTICIPANT, ONE LOCK - never touch an aggregate outside its lock
2. DEADLINES FIRST - every command applies deadlines before its own event
3. INTENTS AFTER SAVE - intents are queued only once state is persisted
4. READS NEVER WRITE - queries derive state at ``now`` without saving it
"""

from __future__ import annotations

import asyncio
import weakref
from collections.abc import Callable, Mapping, Sequence
from dataclasses import replace
from datetime import date, datetime
from typing import TypeVar
from uuid import UUID

from structlog import get_logger

from founder_loop.application.dtos.loop_state import (
    DiagnosisDTO,
    EscalationStatusDTO,
    StageAccessDTO,
    StageStatusDTO,
    StepStateDTO,
    TickSummaryDTO,
    WeekStateDTO,
)
from founder_loop.application.ports.notification_intent_queue import (
    NotificationIntentQueueProtocol,
)
from founder_loop.application.ports.participant_repository import (
    ParticipantRepositoryProtocol,
)
from founder_loop.application.ports.time_authority import TimeAuthorityProtocol
from founder_loop.application.services.notification_intent_emitter import (
    NotificationIntentEmitter,
)
from founder_loop.config.loop_config import DEFAULT_LOOP_CONFIG, LoopConfig
from founder_loop.domain.errors.escalation import (
    ParticipantInactiveError,
    UnderReviewError,
)
from founder_loop.domain.errors.integration import (
    ParticipantAlreadyEnrolledError,
    ParticipantNotFoundError,
    StageNotFoundError,
    WeekNotFoundError,
)
from founder_loop.domain.errors.sequencing import (
    CommitLockedError,
    SystemDocumentNotSubmittedError,
)
from founder_loop.domain.errors.stage import StageLockedError
from founder_loop.domain.errors.validation import InvalidCohortStartError
from founder_loop.domain.events.notification_intent import NotificationIntent
from founder_loop.domain.exceptions import FounderLoopError
from founder_loop.domain.models.escalation_record import ReviewOutcome
from founder_loop.domain.models.participant import Participant, RevenueBaseline
from founder_loop.domain.models.stage import FINAL_STAGE, FIRST_STAGE, get_stage
from founder_loop.domain.models.system_document import SystemDocument
from founder_loop.domain.models.week_cycle import LoopStep, NextAction, StepStatus, WeekCycle
from founder_loop.domain.services.escalation_tracker import EscalationTracker
from founder_loop.domain.services.stage_progression import StageProgressionEngine
from founder_loop.domain.services.system_document_validator import (
    validate_system_document,
)
from founder_loop.domain.services.weekly_loop_machine import (
    StepTransition,
    WeeklyLoopMachine,
)

logger = get_logger()

T = TypeVar("T")

# An operation receives the synced participant, the command time and the
# intent list; it returns the updated participant, the command result and
# an error to raise after saving (for submissions that are retained anyway).
Operation = Callable[
    [Participant, datetime, list[NotificationIntent]],
    tuple[Participant, T, FounderLoopError | None],
]


class LoopEngineService:
    """Weekly loop engine.

    Example:
        >>> engine = LoopEngineService(repository, queue, time_authority)
        >>> await engine.enroll_participant(participant_id, baseline_revenue_30d=2400)
        >>> await engine.submit_commit(participant_id, 1, "Call 20 leads ...", 5000, friday)
        >>> state = await engine.get_current_week_state(participant_id)
    """

    def __init__(
        self,
        repository: ParticipantRepositoryProtocol,
        intent_queue: NotificationIntentQueueProtocol,
        time_authority: TimeAuthorityProtocol,
        config: LoopConfig = DEFAULT_LOOP_CONFIG,
    ) -> None:
        """Initialize the engine.

        Args:
            repository: Participant aggregate storage.
            intent_queue: Outbound notification intent queue.
            time_authority: Source of the current time.
            config: Rule set.
        """
        self._repository = repository
        self._queue = intent_queue
        self._time = time_authority
        self._config = config
        self._machine = WeeklyLoopMachine(config)
        self._tracker = EscalationTracker(config)
        self._stages = StageProgressionEngine(config)
        self._emitter = NotificationIntentEmitter(intent_queue)
        # A lock lives only while a command holds or awaits it
        self._locks: weakref.WeakValueDictionary[UUID, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    @property
    def config(self) -> LoopConfig:
        return self._config

    # =========================================================================
    # Commands
    # =========================================================================

    async def enroll_participant(
        self,
        participant_id: UUID,
        baseline_revenue_30d: float,
        baseline_revenue_90d: float = 0.0,
        cohort_start: datetime | None = None,
    ) -> WeekStateDTO:
        """Enroll a participant and open week 1.

        Args:
            participant_id: New participant id.
            baseline_revenue_30d: Revenue over the 30 days before intake.
            baseline_revenue_90d: Revenue over the 90 days before intake.
            cohort_start: Monday 00:00 (program timezone) of week 1. Defaults
                to the current week when its commit deadline is still ahead,
                otherwise the next week.

        Raises:
            ParticipantAlreadyEnrolledError: If the id is already enrolled.
            InvalidCohortStartError: If cohort_start is not a week start, or
                its week 1 commit deadline has already passed.
            ValueError: If a baseline is negative.
        """
        log = logger.bind(command="enroll_participant", participant_id=str(participant_id))
        baseline = RevenueBaseline(baseline_revenue_30d, baseline_revenue_90d)

        async with self._lock_for(participant_id):
            if await self._repository.get(participant_id) is not None:
                raise ParticipantAlreadyEnrolledError(participant_id)

            now = self._time.now()
            if cohort_start is None:
                cohort_start = self._default_cohort_start(now)
            elif (
                cohort_start.tzinfo is None
                or not self._machine.is_week_start(cohort_start)
            ):
                raise InvalidCohortStartError(cohort_start)
            elif cohort_start + self._config.commit_deadline_offset < now:
                # Weeks before enrollment must never count as missed
                raise InvalidCohortStartError(
                    cohort_start,
                    f"Cohort start {cohort_start.isoformat()} is in the past; "
                    "week 1's commit deadline has already passed.",
                )
            cohort_start = self._machine.to_local(cohort_start)

            participant = Participant(
                participant_id=participant_id,
                enrolled_at=now,
                cohort_start=cohort_start,
                baseline=baseline,
            ).with_week(self._machine.open_week(cohort_start, 1))

            intents: list[NotificationIntent] = []
            participant, _ = self._sync(participant, now, intents)
            participant = await self._repository.add(participant)
            await self._emitter.emit(intents)

        log.info(
            "participant_enrolled",
            cohort_start=cohort_start.isoformat(),
            baseline_revenue_30d=baseline.revenue_30d,
        )
        return self._week_state(participant, participant.weeks[-1], now)

    async def submit_commit(
        self,
        participant_id: UUID,
        week_number: int,
        action_description: str,
        target_revenue: float | None,
        target_completion_date: date | None,
    ) -> WeekStateDTO:
        """Submit the week's commit.

        Raises:
            ParticipantInactiveError, UnderReviewError: Participant may not submit.
            WeekNotFoundError: Unknown or future week.
            CommitLockedError: Previous week's adjustment still pending.
            AlreadySubmittedError, WeekClosedError, DeadlinePassedError: Sequencing.
            SubmissionValidationError: First failed commit rule.
        """

        def operation(
            participant: Participant, now: datetime, intents: list[NotificationIntent]
        ) -> tuple[Participant, WeekStateDTO, FounderLoopError | None]:
            self._ensure_can_submit(participant)
            cycle = self._cycle_for_commit(participant, week_number)
            update = self._machine.submit_commit(
                participant.participant_id,
                cycle,
                action_description,
                target_revenue,
                target_completion_date,
                now,
            )
            participant = participant.with_week(update.cycle)
            commit = update.cycle.commit
            if commit is not None and commit.is_late:
                intents.append(
                    self._emitter.late_commit(
                        participant.participant_id, week_number, now, cycle.deadlines.commit
                    )
                )
                self._check_late_pattern(participant, week_number, now, intents)
            return participant, self._week_state(participant, update.cycle, now), None

        return await self._execute(participant_id, "submit_commit", operation, week_number)

    async def submit_report(
        self,
        participant_id: UUID,
        week_number: int,
        revenue_generated: float,
        hours_spent: float,
        narrative: str,
        evidence_items: Sequence[str],
        tactic: str | None = None,
    ) -> WeekStateDTO:
        """Submit the week's report.

        A report without evidence is retained as rejected (and the mentor
        notified) before MissingEvidenceError is raised; it can be
        resubmitted until the report cutoff.

        Raises:
            ParticipantInactiveError, UnderReviewError: Participant may not submit.
            WeekNotFoundError: Unknown or future week.
            ReportLockedError, WeekLockedError: No commit for the week.
            AlreadySubmittedError, WeekClosedError, DeadlinePassedError: Sequencing.
            SubmissionValidationError: First failed report rule.
        """

        def operation(
            participant: Participant, now: datetime, intents: list[NotificationIntent]
        ) -> tuple[Participant, WeekStateDTO, FounderLoopError | None]:
            self._ensure_can_submit(participant)
            cycle = self._existing_cycle(participant, week_number)
            update = self._machine.submit_report(
                participant.participant_id,
                cycle,
                revenue_generated,
                hours_spent,
                narrative,
                evidence_items,
                now,
                baseline_revenue=participant.baseline.revenue_30d,
                previous_revenue=self._previous_revenue(participant, week_number),
                tactic=tactic,
            )
            participant = participant.with_week(update.cycle)

            if update.rejection is not None:
                intents.append(
                    self._emitter.rejected_evidence(
                        participant.participant_id,
                        week_number,
                        now,
                        cycle.deadlines.report_cutoff,
                    )
                )
                return (
                    participant,
                    self._week_state(participant, update.cycle, now),
                    update.rejection,
                )

            participant = self._tracker.record_accepted_report(participant)
            report = update.cycle.report
            if report is not None and report.is_late:
                intents.append(
                    self._emitter.late_report(
                        participant.participant_id, week_number, now, cycle.deadlines.report
                    )
                )
                self._check_late_pattern(participant, week_number, now, intents)
            participant = self._advance_stage(participant, now, intents)
            return participant, self._week_state(participant, update.cycle, now), None

        return await self._execute(participant_id, "submit_report", operation, week_number)

    async def submit_adjust(
        self, participant_id: UUID, week_number: int, notes: str
    ) -> WeekStateDTO:
        """Submit the week's adjustment, closing it and opening the next week.

        Returns:
            State of the participant's current week after the adjustment
            (the newly opened week, unless the program has ended).

        Raises:
            ParticipantInactiveError, UnderReviewError: Participant may not submit.
            WeekNotFoundError: Unknown or future week.
            AdjustLockedError: Diagnosis not complete.
            AlreadySubmittedError, WeekClosedError, DeadlinePassedError: Sequencing.
        """

        def operation(
            participant: Participant, now: datetime, intents: list[NotificationIntent]
        ) -> tuple[Participant, WeekStateDTO, FounderLoopError | None]:
            self._ensure_can_submit(participant)
            cycle = self._existing_cycle(participant, week_number)
            update = self._machine.submit_adjust(participant.participant_id, cycle, notes, now)
            participant = participant.with_week(update.cycle)

            next_week = week_number + 1
            if next_week <= self._config.program_weeks and participant.week(next_week) is None:
                opened = self._machine.open_week(participant.cohort_start, next_week)
                participant = participant.with_week(opened)
                participant, _ = self._sync(participant, now, intents)

            current = participant.weeks[-1]
            return participant, self._week_state(participant, current, now), None

        return await self._execute(participant_id, "submit_adjust", operation, week_number)

    async def tick(self) -> TickSummaryDTO:
        """Apply deadlines for every participant at the current time.

        Idempotent: a second tick at the same instant changes nothing.
        Deferred and removed participants are skipped.
        """
        now = self._time.now()
        swept = skipped = transitions = emitted = 0

        for participant_id in await self._repository.list_ids():
            async with self._lock_for(participant_id):
                original = await self._repository.get(participant_id)
                if original is None:
                    continue
                if original.status.is_terminal:
                    skipped += 1
                    continue
                intents: list[NotificationIntent] = []
                participant, count = self._sync(original, now, intents)
                await self._persist(original, participant, intents)
                swept += 1
                transitions += count
                emitted += len(intents)

        logger.info(
            "tick_completed",
            as_of=now.isoformat(),
            participants_swept=swept,
            participants_skipped=skipped,
            transitions=transitions,
            intents_emitted=emitted,
        )
        return TickSummaryDTO(
            as_of=now,
            participants_swept=swept,
            participants_skipped=skipped,
            transitions=transitions,
            intents_emitted=emitted,
        )

    async def resolve_review(
        self, participant_id: UUID, outcome: ReviewOutcome
    ) -> EscalationStatusDTO:
        """Apply a mentor's review decision.

        Raises:
            ParticipantInactiveError: Participant already deferred or removed.
            NoPendingReviewError: No review is pending.
        """

        def operation(
            participant: Participant, now: datetime, intents: list[NotificationIntent]
        ) -> tuple[Participant, EscalationStatusDTO, FounderLoopError | None]:
            self._ensure_active_or_reviewable(participant)
            participant = self._tracker.resolve_review(participant, outcome, now)
            intents.append(
                self._emitter.review_resolved(participant.participant_id, now, outcome)
            )
            return participant, self._escalation_status(participant), None

        return await self._execute(participant_id, "resolve_review", operation)

    async def submit_system_document(
        self, participant_id: UUID, sections: Mapping[str, str]
    ) -> StageStatusDTO:
        """Submit (or replace) the participant's system document.

        A replaced document needs a fresh mentor approval.

        Raises:
            ParticipantInactiveError, UnderReviewError: Participant may not submit.
            SystemDocumentIncompleteError: Word requirements not met.
        """

        def operation(
            participant: Participant, now: datetime, intents: list[NotificationIntent]
        ) -> tuple[Participant, StageStatusDTO, FounderLoopError | None]:
            self._ensure_can_submit(participant)
            validate_system_document(sections, config=self._config).raise_for_failure()
            participant = replace(
                participant, system_document=SystemDocument.from_sections(sections, now)
            )
            return participant, self._stage_status(participant), None

        return await self._execute(participant_id, "submit_system_document", operation)

    async def approve_system_document(self, participant_id: UUID) -> StageStatusDTO:
        """Record a mentor's approval of the submitted system document.

        Approving an already approved document keeps the original approval.

        Raises:
            ParticipantInactiveError: Participant deferred or removed.
            SystemDocumentNotSubmittedError: Nothing to approve.
        """

        def operation(
            participant: Participant, now: datetime, intents: list[NotificationIntent]
        ) -> tuple[Participant, StageStatusDTO, FounderLoopError | None]:
            self._ensure_active_or_reviewable(participant)
            document = participant.system_document
            if document is None:
                raise SystemDocumentNotSubmittedError(participant.participant_id)
            if not document.is_approved:
                participant = replace(participant, system_document=document.with_approval(now))
            participant = self._advance_stage(participant, now, intents)
            return participant, self._stage_status(participant), None

        return await self._execute(participant_id, "approve_system_document", operation)

    async def record_exit_interview(self, participant_id: UUID) -> StageStatusDTO:
        """Record that the participant completed the exit interview.

        Raises:
            ParticipantInactiveError: Participant deferred or removed.
        """

        def operation(
            participant: Participant, now: datetime, intents: list[NotificationIntent]
        ) -> tuple[Participant, StageStatusDTO, FounderLoopError | None]:
            self._ensure_active_or_reviewable(participant)
            if participant.exit_interview_at is None:
                participant = replace(participant, exit_interview_at=now)
            participant = self._advance_stage(participant, now, intents)
            return participant, self._stage_status(participant), None

        return await self._execute(participant_id, "record_exit_interview", operation)

    # =========================================================================
    # Queries
    # =========================================================================

    async def get_current_week_state(self, participant_id: UUID) -> WeekStateDTO:
        """Derived state of the participant's current week at the current time."""
        participant, now = await self._view(participant_id)
        return self._week_state(participant, participant.weeks[-1], now)

    async def get_week_state(self, participant_id: UUID, week_number: int) -> WeekStateDTO:
        """Derived state of one opened week at the current time.

        Raises:
            WeekNotFoundError: Week not opened.
        """
        participant, now = await self._view(participant_id)
        return self._week_state(participant, self._existing_cycle(participant, week_number), now)

    async def get_stage_status(self, participant_id: UUID) -> StageStatusDTO:
        participant, _ = await self._view(participant_id)
        return self._stage_status(participant)

    async def get_escalation_status(self, participant_id: UUID) -> EscalationStatusDTO:
        participant, _ = await self._view(participant_id)
        return self._escalation_status(participant)

    async def access_stage(self, participant_id: UUID, stage: int) -> StageAccessDTO:
        """Request access to a stage's content.

        Raises:
            StageNotFoundError: Stage outside the program.
            StageLockedError: Stage above the participant's current stage.
                A StageLockedAttempt intent is queued first.
        """
        if not FIRST_STAGE <= stage <= FINAL_STAGE:
            raise StageNotFoundError(stage)

        participant, now = await self._view(participant_id)
        if stage not in participant.stage.unlocked_stages:
            evaluation = self._stages.evaluate(participant)
            error = StageLockedError(
                participant_id,
                current_stage=participant.stage.current_stage,
                requested_stage=stage,
                unmet_requirements=evaluation.unmet,
            )
            await self._emitter.emit([self._emitter.stage_locked_attempt(error, now)])
            logger.info(
                "stage_access_denied",
                participant_id=str(participant_id),
                current_stage=error.current_stage,
                requested_stage=stage,
            )
            raise error

        definition = get_stage(stage)
        return StageAccessDTO(
            participant_id=participant_id,
            stage=definition.number,
            name=definition.name,
            requirement=definition.requirement,
        )

    async def drain_notification_intents(self, limit: int | None = None) -> list[NotificationIntent]:
        """Remove and return queued notification intents, oldest first."""
        return await self._queue.drain(limit)

    # =========================================================================
    # Pipeline
    # =========================================================================

    def _lock_for(self, participant_id: UUID) -> asyncio.Lock:
        """Lock serializing one participant's commands.

        The caller's ``async with`` keeps the lock alive; once no command
        holds or awaits it, the entry drops out of the registry.
        """
        lock = self._locks.get(participant_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[participant_id] = lock
        return lock

    async def _load(self, participant_id: UUID) -> Participant:
        participant = await self._repository.get(participant_id)
        if participant is None:
            raise ParticipantNotFoundError(participant_id)
        return participant

    async def _execute(
        self,
        participant_id: UUID,
        command: str,
        operation: Operation[T],
        week_number: int | None = None,
    ) -> T:
        log = logger.bind(
            command=command, participant_id=str(participant_id), week_number=week_number
        )
        async with self._lock_for(participant_id):
            original = await self._load(participant_id)
            now = self._time.now()
            intents: list[NotificationIntent] = []
            participant, _ = self._sync(original, now, intents)
            try:
                participant, result, deferred = operation(participant, now, intents)
            except FounderLoopError as exc:
                await self._persist(original, participant, intents)
                log.info("command_rejected", code=exc.code, detail=exc.message)
                raise
            await self._persist(original, participant, intents)

        if deferred is not None:
            log.info("command_rejected", code=deferred.code, detail=deferred.message)
            raise deferred
        log.info("command_applied", intents_emitted=len(intents))
        return result

    async def _persist(
        self,
        original: Participant,
        participant: Participant,
        intents: list[NotificationIntent],
    ) -> Participant:
        if participant != original:
            participant = await self._repository.save(participant)
        await self._emitter.emit(intents)
        return participant

    async def _view(self, participant_id: UUID) -> tuple[Participant, datetime]:
        """Participant as it stands at ``now``, without saving or emitting."""
        participant = await self._load(participant_id)
        now = self._time.now()
        participant, _ = self._sync(participant, now, [])
        return participant, now

    def _sync(
        self,
        participant: Participant,
        now: datetime,
        intents: list[NotificationIntent],
    ) -> tuple[Participant, int]:
        """Apply every deadline up to ``now`` and open weeks the calendar reached.

        Returns:
            The updated participant and the number of step transitions made.
        """
        if participant.status.is_terminal:
            return participant, 0

        count = 0
        for cycle in participant.weeks:
            if cycle.is_closed:
                continue
            update = self._machine.apply_deadlines(cycle, now)
            participant = participant.with_week(update.cycle)
            participant = self._after_transitions(participant, update.transitions, intents)
            count += len(update.transitions)

        calendar_week = min(
            self._machine.calendar_week(participant.cohort_start, now),
            self._config.program_weeks,
        )
        while participant.current_week < calendar_week:
            opened = self._machine.open_week(participant.cohort_start, participant.current_week + 1)
            update = self._machine.apply_deadlines(opened, now)
            participant = participant.with_week(update.cycle)
            participant = self._after_transitions(participant, update.transitions, intents)
            count += len(update.transitions)
            logger.debug(
                "week_opened",
                participant_id=str(participant.participant_id),
                week_number=opened.week_number,
            )

        return participant, count

    def _after_transitions(
        self,
        participant: Participant,
        transitions: Sequence[StepTransition],
        intents: list[NotificationIntent],
    ) -> Participant:
        participant_id = participant.participant_id
        intents.extend(self._emitter.for_missed_steps(participant_id, transitions))

        for transition in transitions:
            if transition.step is not LoopStep.REPORT or not transition.is_miss:
                continue
            outcome = self._tracker.record_missed_report(
                participant, transition.week_number, transition.at
            )
            participant = outcome.participant
            logger.info(
                "report_missed",
                participant_id=str(participant_id),
                week_number=transition.week_number,
                consecutive_misses=participant.escalation.consecutive_misses,
            )
            if outcome.review_triggered:
                intents.append(
                    self._emitter.review_triggered(
                        participant_id, transition.at, participant.escalation.miss_streak
                    )
                )
                logger.warning(
                    "review_triggered",
                    participant_id=str(participant_id),
                    missed_weeks=list(participant.escalation.miss_streak),
                )
        return participant

    def _advance_stage(
        self,
        participant: Participant,
        now: datetime,
        intents: list[NotificationIntent],
    ) -> Participant:
        participant, advance = self._stages.try_advance(participant, now)
        if advance is not None:
            intents.append(self._emitter.stage_advanced(participant.participant_id, advance))
            logger.info(
                "stage_advanced",
                participant_id=str(participant.participant_id),
                from_stage=advance.from_stage,
                to_stage=advance.to_stage,
                graduated=advance.graduated,
            )
        return participant

    def _check_late_pattern(
        self,
        participant: Participant,
        week_number: int,
        now: datetime,
        intents: list[NotificationIntent],
    ) -> None:
        if self._tracker.pattern_warning_due(participant, week_number):
            late_count = self._tracker.late_submissions_in_window(participant, week_number)
            intents.append(
                self._emitter.pattern_warning(
                    participant.participant_id,
                    week_number,
                    now,
                    late_count,
                    self._config.pattern_warning_window_weeks,
                )
            )

    # =========================================================================
    # Guards
    # =========================================================================

    @staticmethod
    def _ensure_active_or_reviewable(participant: Participant) -> None:
        if participant.status.is_terminal:
            raise ParticipantInactiveError(participant.participant_id, participant.status)

    def _ensure_can_submit(self, participant: Participant) -> None:
        self._ensure_active_or_reviewable(participant)
        if participant.under_review:
            raise UnderReviewError(
                participant.participant_id, participant.escalation.miss_streak
            )

    def _existing_cycle(self, participant: Participant, week_number: int) -> WeekCycle:
        cycle = participant.week(week_number)
        if cycle is None:
            raise WeekNotFoundError(participant.participant_id, week_number)
        return cycle

    def _cycle_for_commit(self, participant: Participant, week_number: int) -> WeekCycle:
        """Resolve the target week of a commit.

        The week after the current one is addressable but locked while the
        current week's adjustment is still pending.
        """
        cycle = participant.week(week_number)
        if cycle is not None:
            return cycle
        if (
            week_number == participant.current_week + 1
            and week_number <= self._config.program_weeks
        ):
            raise CommitLockedError(participant.participant_id, week_number)
        raise WeekNotFoundError(participant.participant_id, week_number)

    @staticmethod
    def _previous_revenue(participant: Participant, week_number: int) -> float | None:
        for cycle in reversed(participant.weeks[: week_number - 1]):
            if cycle.report_accepted and cycle.report is not None:
                return cycle.report.revenue_generated
        return None

    def _default_cohort_start(self, now: datetime) -> datetime:
        start = self._machine.week_start_of(now)
        if now > start + self._config.commit_deadline_offset:
            start += LoopConfig.WEEK_LENGTH
        return start

    # =========================================================================
    # Snapshots
    # =========================================================================

    def _week_state(self, participant: Participant, cycle: WeekCycle, now: datetime) -> WeekStateDTO:
        action, deadline = cycle.next_action()
        if participant.status.is_terminal:
            action, deadline = NextAction.INACTIVE, None
        elif participant.under_review:
            action, deadline = NextAction.AWAIT_REVIEW, None
        elif cycle.is_closed and cycle.week_number >= self._config.program_weeks:
            action, deadline = NextAction.PROGRAM_COMPLETE, None

        lock_reason = participant.lock_reason
        if lock_reason is None and cycle.is_week_locked and not cycle.is_closed:
            lock_reason = "Commit deadline missed; submit a late commit to unlock the week"

        diagnosis = None
        if cycle.diagnosis is not None and cycle.status_of(LoopStep.DIAGNOSE) is StepStatus.COMPLETE:
            d = cycle.diagnosis
            diagnosis = DiagnosisDTO(
                dollar_per_hour=d.dollar_per_hour,
                win_rate=d.win_rate,
                revenue_delta=d.revenue_delta,
                velocity=d.velocity,
                available_at=d.available_at,
            )

        return WeekStateDTO(
            participant_id=participant.participant_id,
            week_number=cycle.week_number,
            calendar_week=self._machine.calendar_week(participant.cohort_start, now),
            as_of=now,
            steps=tuple(
                StepStateDTO(
                    step=record.step.value,
                    status=record.status.value,
                    deadline=record.deadline,
                    completed_at=record.completed_at,
                    missed_at=record.missed_at,
                )
                for record in cycle.steps
            ),
            is_locked=lock_reason is not None,
            lock_reason=lock_reason,
            next_action=action.value,
            next_deadline=deadline,
            commit_late=cycle.commit is not None and cycle.commit.is_late,
            stage_credit_locked=cycle.stage_credit_locked,
            report_status=cycle.report.status.value if cycle.report else None,
            report_late=cycle.report is not None and cycle.report.is_late,
            diagnosis=diagnosis,
            is_closed=cycle.is_closed,
            participant_status=participant.status.value,
            current_stage=participant.stage.current_stage,
        )

    def _stage_status(self, participant: Participant) -> StageStatusDTO:
        evaluation = self._stages.evaluate(participant)
        definition = get_stage(participant.stage.current_stage)
        return StageStatusDTO(
            participant_id=participant.participant_id,
            current_stage=definition.number,
            current_stage_name=definition.name,
            unlocked_stages=participant.stage.unlocked_stages,
            graduated=participant.is_graduated,
            requirement=definition.requirement,
            unmet_requirements=() if participant.is_graduated else evaluation.unmet,
        )

    @staticmethod
    def _escalation_status(participant: Participant) -> EscalationStatusDTO:
        escalation = participant.escalation
        return EscalationStatusDTO(
            participant_id=participant.participant_id,
            consecutive_misses=escalation.consecutive_misses,
            missed_weeks=escalation.missed_weeks,
            under_review=escalation.under_review,
            review_state=escalation.review_state.value,
            review_outcome=escalation.review_outcome.value if escalation.review_outcome else None,
            participant_status=participant.status.value,
            is_locked=participant.is_locked,
            lock_reason=participant.lock_reason,
        )
