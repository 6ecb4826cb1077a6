"""Domain errors for Founder Loop.

Error taxonomy:
- Validation errors: rejected submissions, resubmittable before the deadline
- Sequencing errors: operations attempted out of weekly-loop order
- Escalation errors: submissions blocked by review or terminal status
- Stage errors: stage content requested before it is unlocked
- Integration errors: unknown participant or week (caller bug)

All exceptions inherit from FounderLoopError.
"""

from founder_loop.domain.errors.escalation import (
    EscalationError,
    NoPendingReviewError,
    ParticipantInactiveError,
    UnderReviewError,
)
from founder_loop.domain.errors.integration import (
    ConcurrentModificationError,
    NotFoundError,
    ParticipantAlreadyEnrolledError,
    ParticipantNotFoundError,
    StageNotFoundError,
    WeekNotFoundError,
)
from founder_loop.domain.errors.sequencing import (
    AdjustLockedError,
    AlreadySubmittedError,
    CommitLockedError,
    DeadlinePassedError,
    ReportLockedError,
    SequencingError,
    SystemDocumentNotSubmittedError,
    WeekClosedError,
    WeekLockedError,
)
from founder_loop.domain.errors.stage import StageLockedError
from founder_loop.domain.errors.state_transition import InvalidStepTransitionError
from founder_loop.domain.errors.validation import (
    CompletionDateAfterReportDeadlineError,
    InvalidCohortStartError,
    InvalidHoursError,
    InvalidRevenueError,
    InvalidTargetError,
    MissingDateError,
    MissingEvidenceError,
    NarrativeTooShortError,
    SubmissionValidationError,
    SystemDocumentIncompleteError,
    TooShortError,
    VagueLanguageError,
)

__all__: list[str] = [
    # Validation
    "SubmissionValidationError",
    "VagueLanguageError",
    "TooShortError",
    "InvalidTargetError",
    "MissingDateError",
    "CompletionDateAfterReportDeadlineError",
    "InvalidRevenueError",
    "InvalidHoursError",
    "NarrativeTooShortError",
    "MissingEvidenceError",
    "SystemDocumentIncompleteError",
    "InvalidCohortStartError",
    # Sequencing
    "SequencingError",
    "ReportLockedError",
    "WeekLockedError",
    "AdjustLockedError",
    "CommitLockedError",
    "AlreadySubmittedError",
    "DeadlinePassedError",
    "WeekClosedError",
    "SystemDocumentNotSubmittedError",
    # Escalation
    "EscalationError",
    "UnderReviewError",
    "ParticipantInactiveError",
    "NoPendingReviewError",
    # Stage
    "StageLockedError",
    # Integration
    "NotFoundError",
    "ParticipantNotFoundError",
    "WeekNotFoundError",
    "StageNotFoundError",
    "ParticipantAlreadyEnrolledError",
    "ConcurrentModificationError",
    # Internal
    "InvalidStepTransitionError",
]
