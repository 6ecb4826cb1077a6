"""Weekly loop state machine.

Applies deadlines and submissions to a single WeekCycle. The machine is
pure: it never reads the clock and never stores state. Every method takes
the instant it should act at and returns a new cycle together with the
step transitions it made, so callers can feed escalation tracking and
notification intents from the same result.

Deadline rule:
    A step is missed only when ``now > cutoff``. A submission stamped
    exactly at a deadline is on time, so it wins over a simultaneous tick.

Week calendar:
    Week N starts at ``cohort_start + (N - 1) * 7 days``. All deadlines are
    offsets from the week start in the program timezone.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, replace
from datetime import date, datetime, time, timedelta
from uuid import UUID

from founder_loop.config.loop_config import DEFAULT_LOOP_CONFIG, LoopConfig
from founder_loop.domain.errors.sequencing import (
    AdjustLockedError,
    AlreadySubmittedError,
    DeadlinePassedError,
    ReportLockedError,
    WeekClosedError,
    WeekLockedError,
)
from founder_loop.domain.errors.validation import (
    InvalidTargetError,
    MissingDateError,
    SubmissionValidationError,
)
from founder_loop.domain.models.commitment import Commitment
from founder_loop.domain.models.report_metrics import Diagnosis
from founder_loop.domain.models.week_cycle import (
    Adjustment,
    LoopStep,
    StepStatus,
    WeekCycle,
    WeekDeadlines,
)
from founder_loop.domain.models.weekly_report import ReportStatus, WeeklyReport
from founder_loop.domain.services.commit_validator import validate_commit
from founder_loop.domain.services.metrics_calculator import (
    compute_report_metrics,
    compute_revenue_delta,
    compute_velocity,
)
from founder_loop.domain.services.report_validator import (
    is_evidence_only_rejection,
    validate_report,
)


@dataclass(frozen=True, eq=True)
class StepTransition:
    """One step status change made by the machine.

    Attributes:
        week_number: Week whose step changed.
        step: The step that changed.
        from_status: Status before the change.
        to_status: Status after the change.
        at: Instant the change took effect (the cutoff for misses).
    """

    week_number: int
    step: LoopStep
    from_status: StepStatus
    to_status: StepStatus
    at: datetime

    @property
    def is_miss(self) -> bool:
        return self.to_status is StepStatus.MISSED


@dataclass(frozen=True)
class CycleUpdate:
    """Result of applying an event to a week cycle.

    Attributes:
        cycle: The updated cycle.
        transitions: Step transitions made, in order.
        rejection: Validation failure of a submission that was retained
            anyway (a report without evidence).
    """

    cycle: WeekCycle
    transitions: tuple[StepTransition, ...] = ()
    rejection: SubmissionValidationError | None = None


class WeeklyLoopMachine:
    """Deadline and submission rules for one week of the loop.

    Example:
        >>> machine = WeeklyLoopMachine()
        >>> cycle = machine.open_week(cohort_start, 1)
        >>> update = machine.apply_deadlines(cycle, now)
        >>> update.cycle.status_of(LoopStep.COMMIT)
    """

    def __init__(self, config: LoopConfig = DEFAULT_LOOP_CONFIG) -> None:
        self._config = config

    @property
    def config(self) -> LoopConfig:
        return self._config

    # =========================================================================
    # Calendar
    # =========================================================================

    def to_local(self, moment: datetime) -> datetime:
        """Convert an aware instant to the program timezone.

        Raises:
            ValueError: If the instant is naive.
        """
        if moment.tzinfo is None or moment.utcoffset() is None:
            raise ValueError("Timestamps must be timezone-aware")
        return moment.astimezone(self._config.program_timezone)

    def week_start_of(self, moment: datetime) -> datetime:
        """Monday 00:00 (program timezone) of the week containing ``moment``."""
        local = self.to_local(moment)
        monday = local.date() - timedelta(days=local.weekday())
        return datetime.combine(monday, time(0), tzinfo=self._config.program_timezone)

    def is_week_start(self, moment: datetime) -> bool:
        """True if ``moment`` is exactly a Monday 00:00 in the program timezone."""
        return self.week_start_of(moment) == moment

    def week_start(self, cohort_start: datetime, week_number: int) -> datetime:
        return self.to_local(cohort_start) + (week_number - 1) * LoopConfig.WEEK_LENGTH

    def deadlines_for(self, cohort_start: datetime, week_number: int) -> WeekDeadlines:
        """Absolute deadlines of one program week."""
        start = self.week_start(cohort_start, week_number)
        return WeekDeadlines(
            commit=start + self._config.commit_deadline_offset,
            report=start + self._config.report_deadline_offset,
            report_cutoff=start + self._config.report_cutoff_offset,
            adjust=start + self._config.adjust_deadline_offset,
            week_end=start + LoopConfig.WEEK_LENGTH,
        )

    def calendar_week(self, cohort_start: datetime, now: datetime) -> int:
        """Program week the calendar is in at ``now``.

        Returns:
            0 before the cohort starts, otherwise the 1-based week number.
            The value is not capped at the program length.
        """
        if now < cohort_start:
            return 0
        return (now - cohort_start) // LoopConfig.WEEK_LENGTH + 1

    def open_week(self, cohort_start: datetime, week_number: int) -> WeekCycle:
        """Create the cycle for a program week.

        Raises:
            ValueError: If the week is outside the program.
        """
        if not 1 <= week_number <= self._config.program_weeks:
            raise ValueError(
                f"Week {week_number} is outside the program "
                f"(1..{self._config.program_weeks})"
            )
        return WeekCycle.open(
            week_number=week_number,
            week_start=self.week_start(cohort_start, week_number),
            deadlines=self.deadlines_for(cohort_start, week_number),
        )

    def diagnosis_available_at(self, reported_at: datetime) -> datetime:
        """Start of the program-local day after the report."""
        local = self.to_local(reported_at)
        next_day: date = local.date() + timedelta(days=1)
        return datetime.combine(next_day, time(0), tzinfo=self._config.program_timezone)

    # =========================================================================
    # Deadlines
    # =========================================================================

    def apply_deadlines(self, cycle: WeekCycle, now: datetime) -> CycleUpdate:
        """Apply every deadline that has passed at ``now``.

        Idempotent: applying the same or an earlier instant again makes no
        further change. Closed cycles are never touched.
        """
        if cycle.is_closed:
            return CycleUpdate(cycle)

        transitions: list[StepTransition] = []

        commit = cycle.step(LoopStep.COMMIT)
        if commit.is_overdue(now):
            cycle = self._move(
                cycle, LoopStep.COMMIT, StepStatus.MISSED, cycle.deadlines.commit, transitions
            )

        report = cycle.step(LoopStep.REPORT)
        if report.is_overdue(now):
            cycle = self._move(
                cycle,
                LoopStep.REPORT,
                StepStatus.MISSED,
                cycle.deadlines.report_cutoff,
                transitions,
            )

        diagnosis = cycle.diagnosis
        if (
            diagnosis is not None
            and cycle.status_of(LoopStep.DIAGNOSE) is StepStatus.IN_PROGRESS
            and now >= diagnosis.available_at
        ):
            cycle = self._move(
                cycle, LoopStep.DIAGNOSE, StepStatus.COMPLETE, diagnosis.available_at, transitions
            )

        adjust = cycle.step(LoopStep.ADJUST)
        if adjust.is_overdue(now):
            cycle = self._move(
                cycle, LoopStep.ADJUST, StepStatus.MISSED, cycle.deadlines.adjust, transitions
            )

        if now >= cycle.deadlines.week_end:
            cycle = replace(cycle, closed_at=cycle.deadlines.week_end)

        return CycleUpdate(cycle, tuple(transitions))

    # =========================================================================
    # Submissions
    # =========================================================================

    def submit_commit(
        self,
        participant_id: UUID,
        cycle: WeekCycle,
        action_description: str,
        target_revenue: float | None,
        target_completion_date: date | None,
        now: datetime,
    ) -> CycleUpdate:
        """Accept a commit, on time or late.

        A late commit recovers a missed Commit step and unlocks the week, but
        permanently removes the week from stage-requirement counting.

        Raises:
            AlreadySubmittedError: The week already has a commit.
            WeekClosedError: The week is closed.
            DeadlinePassedError: The report cutoff passed; the week can no
                longer be unlocked.
            SubmissionValidationError: The first failed commit rule.
        """
        week = cycle.week_number
        if cycle.commit is not None:
            raise AlreadySubmittedError(participant_id, week, LoopStep.COMMIT)
        if cycle.is_closed:
            raise WeekClosedError(participant_id, week)
        if cycle.report_missed:
            raise DeadlinePassedError(
                participant_id, week, LoopStep.COMMIT, cycle.deadlines.report_cutoff
            )

        validate_commit(
            action_description,
            target_revenue,
            target_completion_date,
            config=self._config,
            report_deadline=cycle.deadlines.report,
        ).raise_for_failure()
        if target_revenue is None:
            raise InvalidTargetError(target_revenue)
        if target_completion_date is None:
            raise MissingDateError()

        is_late = now > cycle.deadlines.commit
        transitions: list[StepTransition] = []
        cycle = self._move(cycle, LoopStep.COMMIT, StepStatus.COMPLETE, now, transitions)
        if cycle.status_of(LoopStep.EXECUTE) is StepStatus.NOT_STARTED:
            cycle = self._move(cycle, LoopStep.EXECUTE, StepStatus.IN_PROGRESS, now, transitions)

        cycle = replace(
            cycle,
            commit=Commitment(
                action_description=action_description,
                target_revenue=target_revenue,
                target_completion_date=target_completion_date,
                submitted_at=now,
                is_late=is_late,
            ),
            stage_credit_locked=cycle.stage_credit_locked or is_late,
        )
        return CycleUpdate(cycle, tuple(transitions))

    def submit_report(
        self,
        participant_id: UUID,
        cycle: WeekCycle,
        revenue_generated: float,
        hours_spent: float,
        narrative: str,
        evidence_items: Sequence[str],
        now: datetime,
        *,
        baseline_revenue: float,
        previous_revenue: float | None = None,
        tactic: str | None = None,
    ) -> CycleUpdate:
        """Accept, retain or reject a report.

        A report failing only the evidence rule is retained as
        REJECTED_NO_EVIDENCE and returned with ``rejection`` set; it stays
        resubmittable until the report cutoff.

        Args:
            baseline_revenue: Baseline used for the diagnosis revenue delta.
            previous_revenue: Revenue of the previous accepted week, for velocity.

        Raises:
            WeekLockedError: The commit deadline passed without a commit.
            ReportLockedError: The week has no commit.
            AlreadySubmittedError: The week already has an accepted report.
            WeekClosedError: The week is closed.
            DeadlinePassedError: The report cutoff passed.
            SubmissionValidationError: The first failed report rule.
        """
        week = cycle.week_number
        if cycle.commit is None:
            if cycle.is_week_locked:
                raise WeekLockedError(participant_id, week)
            raise ReportLockedError(participant_id, week)
        if cycle.report_accepted:
            raise AlreadySubmittedError(participant_id, week, LoopStep.REPORT)
        if cycle.is_closed:
            raise WeekClosedError(participant_id, week)
        if cycle.report_missed:
            raise DeadlinePassedError(participant_id, week, LoopStep.REPORT, cycle.deadlines.report)

        result = validate_report(
            revenue_generated,
            hours_spent,
            narrative,
            len(evidence_items),
            config=self._config,
        )
        transitions: list[StepTransition] = []

        if not result.is_valid:
            if not is_evidence_only_rejection(result):
                result.raise_for_failure()
            if cycle.status_of(LoopStep.REPORT) is StepStatus.NOT_STARTED:
                cycle = self._move(cycle, LoopStep.REPORT, StepStatus.IN_PROGRESS, now, transitions)
            cycle = replace(
                cycle,
                report=WeeklyReport(
                    revenue_generated=revenue_generated,
                    hours_spent=hours_spent,
                    narrative=narrative,
                    evidence_items=tuple(evidence_items),
                    submitted_at=now,
                    status=ReportStatus.REJECTED_NO_EVIDENCE,
                    tactic=tactic,
                ),
            )
            return CycleUpdate(cycle, tuple(transitions), rejection=result.first_failure)

        is_late = now > cycle.deadlines.report
        cycle = self._move(cycle, LoopStep.REPORT, StepStatus.COMPLETE, now, transitions)
        if cycle.status_of(LoopStep.EXECUTE) is StepStatus.IN_PROGRESS:
            cycle = self._move(cycle, LoopStep.EXECUTE, StepStatus.COMPLETE, now, transitions)
        cycle = self._move(cycle, LoopStep.DIAGNOSE, StepStatus.IN_PROGRESS, now, transitions)

        metrics = compute_report_metrics(
            revenue_generated, hours_spent, cycle.commit.target_revenue
        )
        cycle = replace(
            cycle,
            report=WeeklyReport(
                revenue_generated=revenue_generated,
                hours_spent=hours_spent,
                narrative=narrative,
                evidence_items=tuple(evidence_items),
                submitted_at=now,
                status=ReportStatus.ACCEPTED,
                is_late=is_late,
                tactic=tactic,
            ),
            diagnosis=Diagnosis(
                dollar_per_hour=metrics.dollar_per_hour,
                win_rate=metrics.win_rate,
                revenue_delta=compute_revenue_delta(baseline_revenue, [revenue_generated]),
                velocity=compute_velocity(revenue_generated, previous_revenue),
                available_at=self.diagnosis_available_at(now),
            ),
        )
        return CycleUpdate(cycle, tuple(transitions))

    def submit_adjust(
        self,
        participant_id: UUID,
        cycle: WeekCycle,
        notes: str,
        now: datetime,
    ) -> CycleUpdate:
        """Record the adjustment and close the week.

        Raises:
            AlreadySubmittedError: The adjustment was already recorded.
            WeekClosedError: The week is closed.
            DeadlinePassedError: The adjust deadline passed.
            AdjustLockedError: The diagnosis is not complete yet.
        """
        week = cycle.week_number
        adjust_status = cycle.status_of(LoopStep.ADJUST)
        if adjust_status is StepStatus.COMPLETE:
            raise AlreadySubmittedError(participant_id, week, LoopStep.ADJUST)
        if cycle.is_closed:
            raise WeekClosedError(participant_id, week)
        if adjust_status is StepStatus.MISSED:
            raise DeadlinePassedError(participant_id, week, LoopStep.ADJUST, cycle.deadlines.adjust)
        if cycle.status_of(LoopStep.DIAGNOSE) is not StepStatus.COMPLETE:
            available_at = cycle.diagnosis.available_at if cycle.diagnosis else None
            raise AdjustLockedError(participant_id, week, available_at)

        transitions: list[StepTransition] = []
        cycle = self._move(cycle, LoopStep.ADJUST, StepStatus.COMPLETE, now, transitions)
        cycle = replace(cycle, adjustment=Adjustment(notes=notes, submitted_at=now), closed_at=now)
        return CycleUpdate(cycle, tuple(transitions))

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def _move(
        cycle: WeekCycle,
        step: LoopStep,
        status: StepStatus,
        at: datetime,
        transitions: list[StepTransition],
    ) -> WeekCycle:
        previous = cycle.status_of(step)
        updated = cycle.with_step_status(step, status, at)
        transitions.append(StepTransition(cycle.week_number, step, previous, status, at))
        return updated
