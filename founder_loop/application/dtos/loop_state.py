"""Loop state DTOs.

Application-layer snapshots returned by the loop engine. The API layer
converts these to Pydantic response models; the application layer has no
dependency on the API layer.
"""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class StepStateDTO:
    """Status of one loop step.

    Attributes:
        step: Step name (COMMIT, EXECUTE, REPORT, DIAGNOSE, ADJUST).
        status: NOT_STARTED, IN_PROGRESS, COMPLETE or MISSED.
        deadline: Deadline, or None for steps without one.
        completed_at: When the step completed.
        missed_at: When the step was missed.
    """

    step: str
    status: str
    deadline: datetime | None
    completed_at: datetime | None
    missed_at: datetime | None


@dataclass(frozen=True)
class DiagnosisDTO:
    """A visible diagnosis."""

    dollar_per_hour: float
    win_rate: float
    revenue_delta: float
    velocity: float | None
    available_at: datetime


@dataclass(frozen=True)
class WeekStateDTO:
    """Derived state of one week, as seen by a collaborator.

    Attributes:
        participant_id: Participant the week belongs to.
        week_number: Week described.
        calendar_week: Program week the calendar is in at ``as_of``.
        as_of: Engine time the snapshot was taken at.
        steps: The five step states in loop order.
        is_locked: True if the participant cannot submit to this week.
        lock_reason: Why, when locked.
        next_action: What the participant should do next.
        next_deadline: Deadline of the next action, if any.
        commit_late: True if the commit was late.
        stage_credit_locked: True if the week cannot earn stage credit.
        report_status: ACCEPTED, REJECTED_NO_EVIDENCE or None.
        report_late: True if the accepted report was late.
        diagnosis: Diagnosis, once visible.
        is_closed: True once the week is history.
        participant_status: Participant lifecycle status.
        current_stage: Participant's current stage.
    """

    participant_id: UUID
    week_number: int
    calendar_week: int
    as_of: datetime
    steps: tuple[StepStateDTO, ...]
    is_locked: bool
    lock_reason: str | None
    next_action: str
    next_deadline: datetime | None
    commit_late: bool
    stage_credit_locked: bool
    report_status: str | None
    report_late: bool
    diagnosis: DiagnosisDTO | None
    is_closed: bool
    participant_status: str
    current_stage: int


@dataclass(frozen=True)
class StageStatusDTO:
    """Stage progress of a participant.

    Attributes:
        participant_id: Participant described.
        current_stage: Current stage number.
        current_stage_name: Current stage display name.
        unlocked_stages: Stages whose content is accessible.
        graduated: True once the final stage was completed.
        requirement: Plain-language requirement of the current stage.
        unmet_requirements: What is still missing for the current stage.
    """

    participant_id: UUID
    current_stage: int
    current_stage_name: str
    unlocked_stages: tuple[int, ...]
    graduated: bool
    requirement: str
    unmet_requirements: tuple[str, ...]


@dataclass(frozen=True)
class StageAccessDTO:
    """Granted access to one stage's content."""

    participant_id: UUID
    stage: int
    name: str
    requirement: str


@dataclass(frozen=True)
class EscalationStatusDTO:
    """Escalation state of a participant.

    Attributes:
        participant_id: Participant described.
        consecutive_misses: Consecutive missed reports.
        missed_weeks: Every week whose report was missed.
        under_review: True while a mandatory review is pending.
        review_state: NONE, PENDING or RESOLVED.
        review_outcome: Outcome of the last resolved review.
        participant_status: Participant lifecycle status.
        is_locked: True if submissions are blocked.
        lock_reason: Why, when locked.
    """

    participant_id: UUID
    consecutive_misses: int
    missed_weeks: tuple[int, ...]
    under_review: bool
    review_state: str
    review_outcome: str | None
    participant_status: str
    is_locked: bool
    lock_reason: str | None


@dataclass(frozen=True)
class TickSummaryDTO:
    """Result of one deadline sweep.

    Attributes:
        as_of: Engine time of the sweep.
        participants_swept: Participants whose deadlines were applied.
        participants_skipped: Deferred or removed participants.
        transitions: Step transitions made across all participants.
        intents_emitted: Notification intents queued by the sweep.
    """

    as_of: datetime
    participants_swept: int
    participants_skipped: int
    transitions: int
    intents_emitted: int
