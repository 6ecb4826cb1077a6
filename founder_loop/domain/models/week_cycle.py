"""Week cycle domain model.

One WeekCycle exists per (participant, week number). It tracks the five
steps of the weekly loop:

    COMMIT -> EXECUTE -> REPORT -> DIAGNOSE -> ADJUST

Step State Machine:
    NOT_STARTED -> IN_PROGRESS | COMPLETE | MISSED
    IN_PROGRESS -> COMPLETE | MISSED
    COMPLETE and MISSED are terminal, with one exception: a MISSED commit
    may still be completed by a late commit.

Invariants:
- Step N+1 cannot be IN_PROGRESS until step N is COMPLETE, except EXECUTE,
  which is advisory and never blocks REPORT.
- EXECUTE and DIAGNOSE have no deadline.
- Deadlines are strictly increasing: COMMIT < REPORT < ADJUST.
- Once closed (ADJUST complete or week ended) a cycle is immutable history.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum

from founder_loop.domain.models.commitment import Commitment
from founder_loop.domain.models.report_metrics import Diagnosis
from founder_loop.domain.models.weekly_report import WeeklyReport


class LoopStep(Enum):
    """The five steps of the weekly loop, in order."""

    COMMIT = "COMMIT"
    EXECUTE = "EXECUTE"
    REPORT = "REPORT"
    DIAGNOSE = "DIAGNOSE"
    ADJUST = "ADJUST"


LOOP_STEP_ORDER: tuple[LoopStep, ...] = (
    LoopStep.COMMIT,
    LoopStep.EXECUTE,
    LoopStep.REPORT,
    LoopStep.DIAGNOSE,
    LoopStep.ADJUST,
)


class StepStatus(Enum):
    """Status of a single loop step."""

    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETE = "COMPLETE"
    MISSED = "MISSED"

    def is_open(self) -> bool:
        """True while the step can still be completed or missed."""
        return self in (StepStatus.NOT_STARTED, StepStatus.IN_PROGRESS)

    def valid_transitions(self) -> frozenset[StepStatus]:
        """Get valid target states from this state.

        Returns:
            Frozenset of states this state can transition to.
        """
        return STEP_TRANSITION_MATRIX.get(self, frozenset())


STEP_TRANSITION_MATRIX: dict[StepStatus, frozenset[StepStatus]] = {
    StepStatus.NOT_STARTED: frozenset(
        {StepStatus.IN_PROGRESS, StepStatus.COMPLETE, StepStatus.MISSED}
    ),
    StepStatus.IN_PROGRESS: frozenset({StepStatus.COMPLETE, StepStatus.MISSED}),
    StepStatus.COMPLETE: frozenset(),
    StepStatus.MISSED: frozenset(),
}

# Steps whose MISSED status can still be recovered by a late submission
LATE_RECOVERABLE_STEPS: frozenset[LoopStep] = frozenset({LoopStep.COMMIT})


class NextAction(Enum):
    """What the participant should do next in the current week."""

    SUBMIT_COMMIT = "SUBMIT_COMMIT"
    SUBMIT_LATE_COMMIT = "SUBMIT_LATE_COMMIT"
    SUBMIT_REPORT = "SUBMIT_REPORT"
    RESUBMIT_REPORT = "RESUBMIT_REPORT"
    AWAIT_DIAGNOSIS = "AWAIT_DIAGNOSIS"
    SUBMIT_ADJUST = "SUBMIT_ADJUST"
    AWAIT_NEXT_WEEK = "AWAIT_NEXT_WEEK"
    AWAIT_REVIEW = "AWAIT_REVIEW"
    PROGRAM_COMPLETE = "PROGRAM_COMPLETE"
    INACTIVE = "INACTIVE"


@dataclass(frozen=True, eq=True)
class WeekDeadlines:
    """Absolute deadlines of one week.

    Attributes:
        commit: Commit deadline.
        report: Report deadline shown to the participant.
        report_cutoff: Last instant a report is accepted (deadline + grace).
        adjust: Adjust deadline.
        week_end: Start of the following week.
    """

    commit: datetime
    report: datetime
    report_cutoff: datetime
    adjust: datetime
    week_end: datetime

    def __post_init__(self) -> None:
        if not (self.commit < self.report <= self.report_cutoff < self.adjust < self.week_end):
            raise ValueError("Week deadlines must be strictly increasing")


@dataclass(frozen=True, eq=True)
class StepRecord:
    """Status of one step within a week.

    Attributes:
        step: Which loop step this record tracks.
        status: Current status.
        deadline: Deadline shown to the participant (None for EXECUTE/DIAGNOSE).
        cutoff: Instant after which the step is missed (defaults to deadline).
        completed_at: When the step completed.
        missed_at: When the step was marked missed.
    """

    step: LoopStep
    status: StepStatus = StepStatus.NOT_STARTED
    deadline: datetime | None = None
    cutoff: datetime | None = None
    completed_at: datetime | None = None
    missed_at: datetime | None = None

    def with_status(self, new_status: StepStatus, at: datetime) -> StepRecord:
        """Create new record with updated status.

        Args:
            new_status: Target status.
            at: Instant of the transition.

        Returns:
            New StepRecord with the transition applied.

        Raises:
            InvalidStepTransitionError: If the transition is not in the matrix.
        """
        from founder_loop.domain.errors.state_transition import (
            InvalidStepTransitionError,
        )

        late_recovery = (
            self.status is StepStatus.MISSED
            and new_status is StepStatus.COMPLETE
            and self.step in LATE_RECOVERABLE_STEPS
        )
        if new_status not in self.status.valid_transitions() and not late_recovery:
            raise InvalidStepTransitionError(self.step, self.status, new_status)

        return replace(
            self,
            status=new_status,
            completed_at=at if new_status is StepStatus.COMPLETE else self.completed_at,
            missed_at=at if new_status is StepStatus.MISSED else self.missed_at,
        )

    @property
    def effective_cutoff(self) -> datetime | None:
        """Cutoff if set, otherwise the deadline."""
        return self.cutoff if self.cutoff is not None else self.deadline

    def is_overdue(self, now: datetime) -> bool:
        """True if the step is still open and its cutoff has passed.

        The comparison is strict: a submission stamped exactly at the
        deadline is on time.
        """
        cutoff = self.effective_cutoff
        return cutoff is not None and self.status.is_open() and now > cutoff


@dataclass(frozen=True, eq=True)
class Adjustment:
    """A participant's adjustment notes closing out a week."""

    notes: str
    submitted_at: datetime


@dataclass(frozen=True, eq=True)
class WeekCycle:
    """One week of the loop for one participant.

    Attributes:
        week_number: 1-based program week.
        week_start: Monday 00:00 (program timezone) of this week.
        deadlines: Absolute deadlines of the week.
        steps: The five step records in LOOP_STEP_ORDER.
        commit: Accepted commit, if any.
        report: Latest report (accepted or retained as rejected), if any.
        diagnosis: Diagnosis computed from the accepted report, if any.
        adjustment: Adjustment notes, if submitted.
        stage_credit_locked: True once the commit was late; never cleared.
        closed_at: When the cycle became immutable history.
    """

    week_number: int
    week_start: datetime
    deadlines: WeekDeadlines
    steps: tuple[StepRecord, ...]
    commit: Commitment | None = None
    report: WeeklyReport | None = None
    diagnosis: Diagnosis | None = None
    adjustment: Adjustment | None = None
    stage_credit_locked: bool = False
    closed_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.week_number < 1:
            raise ValueError(f"week_number must be positive, got {self.week_number}")
        if tuple(r.step for r in self.steps) != LOOP_STEP_ORDER:
            raise ValueError("steps must contain exactly one record per step, in order")

    @classmethod
    def open(
        cls,
        week_number: int,
        week_start: datetime,
        deadlines: WeekDeadlines,
    ) -> WeekCycle:
        """Create a fresh cycle with every step NOT_STARTED."""
        return cls(
            week_number=week_number,
            week_start=week_start,
            deadlines=deadlines,
            steps=(
                StepRecord(LoopStep.COMMIT, deadline=deadlines.commit),
                StepRecord(LoopStep.EXECUTE),
                StepRecord(
                    LoopStep.REPORT,
                    deadline=deadlines.report,
                    cutoff=deadlines.report_cutoff,
                ),
                StepRecord(LoopStep.DIAGNOSE),
                StepRecord(LoopStep.ADJUST, deadline=deadlines.adjust),
            ),
        )

    def step(self, step: LoopStep) -> StepRecord:
        """Return the record for a step."""
        return self.steps[LOOP_STEP_ORDER.index(step)]

    def status_of(self, step: LoopStep) -> StepStatus:
        """Return the status of a step."""
        return self.step(step).status

    def with_step_status(self, step: LoopStep, status: StepStatus, at: datetime) -> WeekCycle:
        """Create new cycle with one step transitioned."""
        index = LOOP_STEP_ORDER.index(step)
        updated = self.steps[index].with_status(status, at)
        return replace(self, steps=self.steps[:index] + (updated,) + self.steps[index + 1 :])

    @property
    def is_closed(self) -> bool:
        """True once the cycle is immutable history."""
        return self.closed_at is not None

    @property
    def is_week_locked(self) -> bool:
        """True if the commit deadline was missed and no late commit exists."""
        return self.commit is None and self.status_of(LoopStep.COMMIT) is StepStatus.MISSED

    @property
    def report_accepted(self) -> bool:
        """True if the week has an accepted report."""
        return self.report is not None and self.report.is_accepted

    @property
    def report_missed(self) -> bool:
        """True if the Report step ended MISSED."""
        return self.status_of(LoopStep.REPORT) is StepStatus.MISSED

    @property
    def earns_stage_credit(self) -> bool:
        """True if the week counts toward stage requirements."""
        return self.report_accepted and not self.stage_credit_locked

    @property
    def late_submission_count(self) -> int:
        """Number of late submissions (commit, accepted report) in this week."""
        count = 1 if self.commit is not None and self.commit.is_late else 0
        if self.report_accepted and self.report is not None and self.report.is_late:
            count += 1
        return count

    def next_action(self) -> tuple[NextAction, datetime | None]:
        """Compute what the participant should do next, with its deadline."""
        if self.is_closed:
            return NextAction.AWAIT_NEXT_WEEK, None

        commit = self.step(LoopStep.COMMIT)
        if self.is_week_locked:
            return NextAction.SUBMIT_LATE_COMMIT, self.deadlines.report_cutoff
        if commit.status.is_open():
            return NextAction.SUBMIT_COMMIT, commit.deadline

        report = self.step(LoopStep.REPORT)
        if report.status.is_open():
            if self.report is not None:
                return NextAction.RESUBMIT_REPORT, report.effective_cutoff
            return NextAction.SUBMIT_REPORT, report.deadline
        if report.status is StepStatus.MISSED:
            return NextAction.AWAIT_NEXT_WEEK, self.deadlines.week_end

        if self.status_of(LoopStep.DIAGNOSE).is_open():
            available = self.diagnosis.available_at if self.diagnosis else None
            return NextAction.AWAIT_DIAGNOSIS, available

        adjust = self.step(LoopStep.ADJUST)
        if adjust.status.is_open():
            return NextAction.SUBMIT_ADJUST, adjust.deadline
        return NextAction.AWAIT_NEXT_WEEK, self.deadlines.week_end
