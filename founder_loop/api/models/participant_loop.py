"""Participant loop API request/response models.

Pydantic models for the weekly loop endpoints. Schema validation only
covers shape and sign; every business rule (banned phrases, minimum
lengths, evidence, deadlines) is enforced by the engine so that its
error codes reach the caller unchanged.
"""

from datetime import date, datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from founder_loop.domain.models.escalation_record import ReviewOutcome


class EnrollParticipantRequest(BaseModel):
    """Request to enroll a participant and open week 1."""

    participant_id: UUID = Field(..., description="Participant id assigned by the caller")
    baseline_revenue_30d: float = Field(
        ..., ge=0, description="Revenue over the 30 days before intake"
    )
    baseline_revenue_90d: float = Field(
        default=0.0, ge=0, description="Revenue over the 90 days before intake"
    )
    cohort_start: datetime | None = Field(
        default=None,
        description="Monday 00:00 (program timezone) of week 1; defaults to the next open week",
    )


class CommitRequest(BaseModel):
    """Weekly commit: one specific action with a revenue target."""

    action_description: str = Field(..., description="The single action committed to")
    target_revenue: float | None = Field(default=None, description="Revenue target")
    target_completion_date: date | None = Field(
        default=None, description="Date the action will be complete"
    )


class ReportRequest(BaseModel):
    """Weekly report with evidence."""

    revenue_generated: float = Field(..., description="Revenue generated this week")
    hours_spent: float = Field(..., description="Hours spent on the committed action")
    narrative: str = Field(..., description="What happened this week")
    evidence_items: list[str] = Field(
        default_factory=list, description="References to evidence (links, file ids)"
    )
    tactic: str | None = Field(default=None, description="Tactic used this week")


class AdjustRequest(BaseModel):
    """Adjustment notes closing the week."""

    notes: str = Field(..., description="What changes next week")


class ReviewResolutionRequest(BaseModel):
    """Mentor decision on a pending review."""

    outcome: ReviewOutcome = Field(..., description="REINSTATE, DEFER_COHORT or REMOVE")


class SystemDocumentRequest(BaseModel):
    """Stage 4 system document, keyed by section id."""

    sections: dict[str, str] = Field(..., description="Section id to section text")


class StepStateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    step: str
    status: str
    deadline: datetime | None = None
    completed_at: datetime | None = None
    missed_at: datetime | None = None


class DiagnosisResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    dollar_per_hour: float
    win_rate: float
    revenue_delta: float
    velocity: float | None = None
    available_at: datetime


class WeekStateResponse(BaseModel):
    """Derived state of one week."""

    model_config = ConfigDict(from_attributes=True)

    participant_id: UUID
    week_number: int
    calendar_week: int
    as_of: datetime
    steps: list[StepStateResponse]
    is_locked: bool
    lock_reason: str | None = None
    next_action: str
    next_deadline: datetime | None = None
    commit_late: bool
    stage_credit_locked: bool
    report_status: str | None = None
    report_late: bool
    diagnosis: DiagnosisResponse | None = None
    is_closed: bool
    participant_status: str
    current_stage: int


class StageStatusResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    participant_id: UUID
    current_stage: int
    current_stage_name: str
    unlocked_stages: list[int]
    graduated: bool
    requirement: str
    unmet_requirements: list[str]


class StageAccessResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    participant_id: UUID
    stage: int
    name: str
    requirement: str


class EscalationStatusResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    participant_id: UUID
    consecutive_misses: int
    missed_weeks: list[int]
    under_review: bool
    review_state: str
    review_outcome: str | None = None
    participant_status: str
    is_locked: bool
    lock_reason: str | None = None


class TickSummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    as_of: datetime
    participants_swept: int
    participants_skipped: int
    transitions: int
    intents_emitted: int


class NotificationIntentResponse(BaseModel):
    """One drained notification intent."""

    intent_id: UUID
    participant_id: UUID
    kind: str
    occurred_at: datetime
    payload: dict[str, Any]
    schema_version: str


class DrainIntentsResponse(BaseModel):
    intents: list[NotificationIntentResponse]


class ProblemDetailResponse(BaseModel):
    """Error response (RFC 7807).

    Attributes:
        type: Error type URN.
        title: Human-readable error title.
        status: HTTP status code.
        detail: Detailed error message.
        code: Stable machine-readable error code.
        instance: Request path that caused the error.
    """

    model_config = ConfigDict(extra="allow")

    type: str = Field(..., description="Error type URN")
    title: str = Field(..., description="Human-readable error title")
    status: int = Field(..., description="HTTP status code")
    detail: str = Field(..., description="Detailed error message")
    code: str = Field(..., description="Stable machine-readable error code")
    instance: str | None = Field(default=None, description="Request path")


class HealthResponse(BaseModel):
    status: str
