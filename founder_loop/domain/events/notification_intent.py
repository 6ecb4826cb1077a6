"""Notification intents emitted by the weekly loop engine.

An intent records that a collaborator should notify someone (usually the
participant's mentor). The engine only appends intents to a queue; it
never delivers them.

Developer Golden Rules:
1. INTENTS ARE IMMUTABLE - created once, never updated
2. NEVER SEND - delivery belongs to a collaborator draining the queue
3. ONE INTENT PER TRANSITION - duplicate transitions are rejected upstream
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from uuid6 import uuid7

# Schema version for serialized intents
NOTIFICATION_INTENT_SCHEMA_VERSION: str = "1.0.0"


class NotificationKind(str, Enum):
    """Kinds of notification intent.

    Kinds:
        MENTOR_NOTIFIED_LATE_COMMIT: Commit accepted after its deadline
        MENTOR_NOTIFIED_MISSED_COMMIT: Commit deadline passed with no commit
        MENTOR_NOTIFIED_MISSED_REPORT: Report cutoff passed with no accepted report
        MENTOR_NOTIFIED_LATE_REPORT: Report accepted inside the grace window
        MENTOR_NOTIFIED_REJECTED_EVIDENCE: Report retained without evidence
        MENTOR_NOTIFIED_PATTERN_WARNING: Repeated late submissions
        REVIEW_TRIGGERED: Miss threshold reached, mandatory review opened
        REVIEW_RESOLVED: Mentor resolved the mandatory review
        STAGE_ADVANCED: Participant advanced a stage or graduated
        STAGE_LOCKED_ATTEMPT: Locked stage content was requested
    """

    MENTOR_NOTIFIED_LATE_COMMIT = "MentorNotifiedLateCommit"
    MENTOR_NOTIFIED_MISSED_COMMIT = "MentorNotifiedMissedCommit"
    MENTOR_NOTIFIED_MISSED_REPORT = "MentorNotifiedMissedReport"
    MENTOR_NOTIFIED_LATE_REPORT = "MentorNotifiedLateReport"
    MENTOR_NOTIFIED_REJECTED_EVIDENCE = "MentorNotifiedRejectedEvidence"
    MENTOR_NOTIFIED_PATTERN_WARNING = "MentorNotifiedPatternWarning"
    REVIEW_TRIGGERED = "ReviewTriggered"
    REVIEW_RESOLVED = "ReviewResolved"
    STAGE_ADVANCED = "StageAdvanced"
    STAGE_LOCKED_ATTEMPT = "StageLockedAttempt"


@dataclass(frozen=True, eq=True)
class NotificationIntent:
    """An outbound notification the engine wants delivered.

    Attributes:
        participant_id: Participant the intent concerns.
        kind: What happened.
        occurred_at: Engine time of the transition.
        payload: Kind-specific details (JSON-serializable values only).
        intent_id: Unique, time-ordered intent id (UUIDv7).
    """

    participant_id: UUID
    kind: NotificationKind
    occurred_at: datetime
    payload: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)
    intent_id: UUID = field(default_factory=uuid7)

    def to_dict(self) -> dict[str, Any]:
        """Convert intent to a dict for a delivery collaborator.

        Returns:
            Dict representation with schema_version.
        """
        return {
            "intent_id": str(self.intent_id),
            "participant_id": str(self.participant_id),
            "kind": self.kind.value,
            "occurred_at": self.occurred_at.isoformat(),
            "payload": dict(self.payload),
            "schema_version": NOTIFICATION_INTENT_SCHEMA_VERSION,
        }
