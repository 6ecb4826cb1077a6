"""Notification intent emitter.

Translates weekly-loop transitions into NotificationIntent values and
appends them to the intent queue. It never delivers anything.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Any
from uuid import UUID

from structlog import get_logger

from founder_loop.application.ports.notification_intent_queue import (
    NotificationIntentQueueProtocol,
)
from founder_loop.domain.errors.stage import StageLockedError
from founder_loop.domain.events.notification_intent import (
    NotificationIntent,
    NotificationKind,
)
from founder_loop.domain.models.escalation_record import ReviewOutcome
from founder_loop.domain.models.stage import StageAdvance
from founder_loop.domain.models.week_cycle import LoopStep
from founder_loop.domain.services.weekly_loop_machine import StepTransition

logger = get_logger()

# Missed steps that produce a mentor notification
_MISS_KINDS: dict[LoopStep, NotificationKind] = {
    LoopStep.COMMIT: NotificationKind.MENTOR_NOTIFIED_MISSED_COMMIT,
    LoopStep.REPORT: NotificationKind.MENTOR_NOTIFIED_MISSED_REPORT,
}


class NotificationIntentEmitter:
    """Builds notification intents and appends them to the queue."""

    def __init__(self, queue: NotificationIntentQueueProtocol) -> None:
        self._queue = queue

    async def emit(self, intents: Sequence[NotificationIntent]) -> None:
        """Append intents to the queue in order."""
        if not intents:
            return
        await self._queue.enqueue(intents)
        for intent in intents:
            logger.info(
                "notification_intent_emitted",
                intent_id=str(intent.intent_id),
                participant_id=str(intent.participant_id),
                kind=intent.kind.value,
            )

    # =========================================================================
    # Builders
    # =========================================================================

    @staticmethod
    def _intent(
        participant_id: UUID,
        kind: NotificationKind,
        at: datetime,
        **payload: Any,
    ) -> NotificationIntent:
        return NotificationIntent(
            participant_id=participant_id,
            kind=kind,
            occurred_at=at,
            payload=payload,
        )

    def for_missed_steps(
        self, participant_id: UUID, transitions: Sequence[StepTransition]
    ) -> list[NotificationIntent]:
        """One intent per missed Commit or Report step."""
        return [
            self._intent(
                participant_id,
                _MISS_KINDS[t.step],
                t.at,
                week_number=t.week_number,
                deadline=t.at.isoformat(),
            )
            for t in transitions
            if t.is_miss and t.step in _MISS_KINDS
        ]

    def late_commit(
        self, participant_id: UUID, week_number: int, submitted_at: datetime, deadline: datetime
    ) -> NotificationIntent:
        return self._intent(
            participant_id,
            NotificationKind.MENTOR_NOTIFIED_LATE_COMMIT,
            submitted_at,
            week_number=week_number,
            deadline=deadline.isoformat(),
            minutes_late=int((submitted_at - deadline).total_seconds() // 60),
        )

    def late_report(
        self, participant_id: UUID, week_number: int, submitted_at: datetime, deadline: datetime
    ) -> NotificationIntent:
        return self._intent(
            participant_id,
            NotificationKind.MENTOR_NOTIFIED_LATE_REPORT,
            submitted_at,
            week_number=week_number,
            deadline=deadline.isoformat(),
            minutes_late=int((submitted_at - deadline).total_seconds() // 60),
        )

    def rejected_evidence(
        self, participant_id: UUID, week_number: int, submitted_at: datetime, cutoff: datetime
    ) -> NotificationIntent:
        return self._intent(
            participant_id,
            NotificationKind.MENTOR_NOTIFIED_REJECTED_EVIDENCE,
            submitted_at,
            week_number=week_number,
            resubmit_until=cutoff.isoformat(),
        )

    def pattern_warning(
        self, participant_id: UUID, week_number: int, at: datetime, late_count: int, window: int
    ) -> NotificationIntent:
        return self._intent(
            participant_id,
            NotificationKind.MENTOR_NOTIFIED_PATTERN_WARNING,
            at,
            week_number=week_number,
            late_submissions=late_count,
            window_weeks=window,
        )

    def review_triggered(
        self, participant_id: UUID, at: datetime, missed_weeks: Sequence[int]
    ) -> NotificationIntent:
        return self._intent(
            participant_id,
            NotificationKind.REVIEW_TRIGGERED,
            at,
            missed_weeks=list(missed_weeks),
        )

    def review_resolved(
        self, participant_id: UUID, at: datetime, outcome: ReviewOutcome
    ) -> NotificationIntent:
        return self._intent(
            participant_id,
            NotificationKind.REVIEW_RESOLVED,
            at,
            outcome=outcome.value,
        )

    def stage_advanced(self, participant_id: UUID, advance: StageAdvance) -> NotificationIntent:
        return self._intent(
            participant_id,
            NotificationKind.STAGE_ADVANCED,
            advance.advanced_at,
            from_stage=advance.from_stage,
            to_stage=advance.to_stage,
            week_number=advance.week_number,
            graduated=advance.graduated,
        )

    def stage_locked_attempt(self, error: StageLockedError, at: datetime) -> NotificationIntent:
        return self._intent(
            error.participant_id,
            NotificationKind.STAGE_LOCKED_ATTEMPT,
            at,
            current_stage=error.current_stage,
            requested_stage=error.requested_stage,
            unmet_requirements=list(error.unmet_requirements),
        )
