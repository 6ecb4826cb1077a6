"""Participant loop API routes.

FastAPI router exposing the weekly loop engine: enrollment, the weekly
commit/report/adjust submissions, deadline sweeps, mentor review
decisions, stage access and notification intent draining.

Every domain error is surfaced as an RFC 7807 problem document carrying
the error's stable ``code``; the HTTP status comes from the error class.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from founder_loop.api.dependencies.loop_engine import get_loop_engine
from founder_loop.api.models.participant_loop import (
    AdjustRequest,
    CommitRequest,
    DrainIntentsResponse,
    EnrollParticipantRequest,
    EscalationStatusResponse,
    NotificationIntentResponse,
    ProblemDetailResponse,
    ReportRequest,
    ReviewResolutionRequest,
    StageAccessResponse,
    StageStatusResponse,
    SystemDocumentRequest,
    TickSummaryResponse,
    WeekStateResponse,
)
from founder_loop.application.services.loop_engine_service import LoopEngineService
from founder_loop.domain.exceptions import FounderLoopError

router = APIRouter(prefix="/v1", tags=["participant-loop"])

_ERROR_RESPONSES: dict[int | str, dict[str, object]] = {
    403: {"model": ProblemDetailResponse, "description": "Participant locked or stage locked"},
    404: {"model": ProblemDetailResponse, "description": "Participant, week or stage not found"},
    409: {"model": ProblemDetailResponse, "description": "Sequencing violation"},
    422: {"model": ProblemDetailResponse, "description": "Submission failed validation"},
    423: {"model": ProblemDetailResponse, "description": "Participant under review or inactive"},
}


def _problem(exc: FounderLoopError, request: Request) -> HTTPException:
    """Convert a domain error to an HTTPException with an RFC 7807 body."""
    detail = exc.to_rfc7807_dict()
    detail["instance"] = request.url.path
    return HTTPException(status_code=exc.status, detail=detail)


@router.post(
    "/participants",
    response_model=WeekStateResponse,
    status_code=201,
    responses=_ERROR_RESPONSES,
    summary="Enroll a participant",
)
async def enroll_participant(
    request_data: EnrollParticipantRequest,
    request: Request,
    engine: LoopEngineService = Depends(get_loop_engine),
) -> WeekStateResponse:
    """Enroll a participant with their revenue baseline and open week 1."""
    try:
        state = await engine.enroll_participant(
            participant_id=request_data.participant_id,
            baseline_revenue_30d=request_data.baseline_revenue_30d,
            baseline_revenue_90d=request_data.baseline_revenue_90d,
            cohort_start=request_data.cohort_start,
        )
    except FounderLoopError as exc:
        raise _problem(exc, request) from None
    return WeekStateResponse.model_validate(state)


@router.post(
    "/participants/{participant_id}/weeks/{week_number}/commit",
    response_model=WeekStateResponse,
    responses=_ERROR_RESPONSES,
    summary="Submit the weekly commit",
)
async def submit_commit(
    participant_id: UUID,
    week_number: int,
    request_data: CommitRequest,
    request: Request,
    engine: LoopEngineService = Depends(get_loop_engine),
) -> WeekStateResponse:
    """Submit the week's commit.

    A commit after the commit deadline but before the report cutoff is
    accepted as late: the mentor is notified and the week earns no stage
    credit.
    """
    try:
        state = await engine.submit_commit(
            participant_id,
            week_number,
            request_data.action_description,
            request_data.target_revenue,
            request_data.target_completion_date,
        )
    except FounderLoopError as exc:
        raise _problem(exc, request) from None
    return WeekStateResponse.model_validate(state)


@router.post(
    "/participants/{participant_id}/weeks/{week_number}/report",
    response_model=WeekStateResponse,
    responses=_ERROR_RESPONSES,
    summary="Submit the weekly report",
)
async def submit_report(
    participant_id: UUID,
    week_number: int,
    request_data: ReportRequest,
    request: Request,
    engine: LoopEngineService = Depends(get_loop_engine),
) -> WeekStateResponse:
    """Submit the week's report with evidence."""
    try:
        state = await engine.submit_report(
            participant_id,
            week_number,
            request_data.revenue_generated,
            request_data.hours_spent,
            request_data.narrative,
            request_data.evidence_items,
            tactic=request_data.tactic,
        )
    except FounderLoopError as exc:
        raise _problem(exc, request) from None
    return WeekStateResponse.model_validate(state)


@router.post(
    "/participants/{participant_id}/weeks/{week_number}/adjust",
    response_model=WeekStateResponse,
    responses=_ERROR_RESPONSES,
    summary="Submit the weekly adjustment",
)
async def submit_adjust(
    participant_id: UUID,
    week_number: int,
    request_data: AdjustRequest,
    request: Request,
    engine: LoopEngineService = Depends(get_loop_engine),
) -> WeekStateResponse:
    """Close the week with adjustment notes; returns the next week's state."""
    try:
        state = await engine.submit_adjust(participant_id, week_number, request_data.notes)
    except FounderLoopError as exc:
        raise _problem(exc, request) from None
    return WeekStateResponse.model_validate(state)


@router.get(
    "/participants/{participant_id}/week",
    response_model=WeekStateResponse,
    responses=_ERROR_RESPONSES,
    summary="Get the current week state",
)
async def get_current_week(
    participant_id: UUID,
    request: Request,
    engine: LoopEngineService = Depends(get_loop_engine),
) -> WeekStateResponse:
    try:
        state = await engine.get_current_week_state(participant_id)
    except FounderLoopError as exc:
        raise _problem(exc, request) from None
    return WeekStateResponse.model_validate(state)


@router.get(
    "/participants/{participant_id}/weeks/{week_number}",
    response_model=WeekStateResponse,
    responses=_ERROR_RESPONSES,
    summary="Get the state of one week",
)
async def get_week(
    participant_id: UUID,
    week_number: int,
    request: Request,
    engine: LoopEngineService = Depends(get_loop_engine),
) -> WeekStateResponse:
    try:
        state = await engine.get_week_state(participant_id, week_number)
    except FounderLoopError as exc:
        raise _problem(exc, request) from None
    return WeekStateResponse.model_validate(state)


@router.get(
    "/participants/{participant_id}/stage",
    response_model=StageStatusResponse,
    responses=_ERROR_RESPONSES,
    summary="Get stage progress",
)
async def get_stage_status(
    participant_id: UUID,
    request: Request,
    engine: LoopEngineService = Depends(get_loop_engine),
) -> StageStatusResponse:
    try:
        status = await engine.get_stage_status(participant_id)
    except FounderLoopError as exc:
        raise _problem(exc, request) from None
    return StageStatusResponse.model_validate(status)


@router.get(
    "/participants/{participant_id}/stages/{stage}",
    response_model=StageAccessResponse,
    responses=_ERROR_RESPONSES,
    summary="Access a stage's content",
)
async def access_stage(
    participant_id: UUID,
    stage: int,
    request: Request,
    engine: LoopEngineService = Depends(get_loop_engine),
) -> StageAccessResponse:
    """Grant access to an unlocked stage; locked stages return 403."""
    try:
        access = await engine.access_stage(participant_id, stage)
    except FounderLoopError as exc:
        raise _problem(exc, request) from None
    return StageAccessResponse.model_validate(access)


@router.get(
    "/participants/{participant_id}/escalation",
    response_model=EscalationStatusResponse,
    responses=_ERROR_RESPONSES,
    summary="Get escalation status",
)
async def get_escalation_status(
    participant_id: UUID,
    request: Request,
    engine: LoopEngineService = Depends(get_loop_engine),
) -> EscalationStatusResponse:
    try:
        status = await engine.get_escalation_status(participant_id)
    except FounderLoopError as exc:
        raise _problem(exc, request) from None
    return EscalationStatusResponse.model_validate(status)


@router.post(
    "/participants/{participant_id}/review-resolution",
    response_model=EscalationStatusResponse,
    responses=_ERROR_RESPONSES,
    summary="Resolve a pending review",
)
async def resolve_review(
    participant_id: UUID,
    request_data: ReviewResolutionRequest,
    request: Request,
    engine: LoopEngineService = Depends(get_loop_engine),
) -> EscalationStatusResponse:
    """Apply the mentor's review decision."""
    try:
        status = await engine.resolve_review(participant_id, request_data.outcome)
    except FounderLoopError as exc:
        raise _problem(exc, request) from None
    return EscalationStatusResponse.model_validate(status)


@router.post(
    "/participants/{participant_id}/system-document",
    response_model=StageStatusResponse,
    responses=_ERROR_RESPONSES,
    summary="Submit the system document",
)
async def submit_system_document(
    participant_id: UUID,
    request_data: SystemDocumentRequest,
    request: Request,
    engine: LoopEngineService = Depends(get_loop_engine),
) -> StageStatusResponse:
    try:
        status = await engine.submit_system_document(participant_id, request_data.sections)
    except FounderLoopError as exc:
        raise _problem(exc, request) from None
    return StageStatusResponse.model_validate(status)


@router.post(
    "/participants/{participant_id}/system-document/approval",
    response_model=StageStatusResponse,
    responses=_ERROR_RESPONSES,
    summary="Approve the system document",
)
async def approve_system_document(
    participant_id: UUID,
    request: Request,
    engine: LoopEngineService = Depends(get_loop_engine),
) -> StageStatusResponse:
    try:
        status = await engine.approve_system_document(participant_id)
    except FounderLoopError as exc:
        raise _problem(exc, request) from None
    return StageStatusResponse.model_validate(status)


@router.post(
    "/participants/{participant_id}/exit-interview",
    response_model=StageStatusResponse,
    responses=_ERROR_RESPONSES,
    summary="Record the exit interview",
)
async def record_exit_interview(
    participant_id: UUID,
    request: Request,
    engine: LoopEngineService = Depends(get_loop_engine),
) -> StageStatusResponse:
    try:
        status = await engine.record_exit_interview(participant_id)
    except FounderLoopError as exc:
        raise _problem(exc, request) from None
    return StageStatusResponse.model_validate(status)


@router.post(
    "/tick",
    response_model=TickSummaryResponse,
    summary="Apply deadlines for every participant",
)
async def tick(
    engine: LoopEngineService = Depends(get_loop_engine),
) -> TickSummaryResponse:
    """Run one deadline sweep. Idempotent at a given instant."""
    summary = await engine.tick()
    return TickSummaryResponse.model_validate(summary)


@router.post(
    "/notification-intents/drain",
    response_model=DrainIntentsResponse,
    summary="Drain queued notification intents",
)
async def drain_notification_intents(
    limit: int | None = Query(default=None, ge=1),
    engine: LoopEngineService = Depends(get_loop_engine),
) -> DrainIntentsResponse:
    """Remove and return queued intents, oldest first."""
    intents = await engine.drain_notification_intents(limit)
    return DrainIntentsResponse(
        intents=[NotificationIntentResponse(**intent.to_dict()) for intent in intents]
    )
