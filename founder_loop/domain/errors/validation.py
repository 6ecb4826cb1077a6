"""Submission validation errors.

These errors are expected, recoverable outcomes of validating a commit,
a report or a system document. They are surfaced verbatim to the
submitter, who can always resubmit before the relevant deadline.

Validators return them as values inside a ValidationResult; the engine
raises the first one when it rejects a submission.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from founder_loop.domain.exceptions import FounderLoopError


class SubmissionValidationError(FounderLoopError):
    """Base error for a submission that failed a validation rule.

    Attributes:
        field: Name of the submitted field that failed the rule.
    """

    code = "ValidationFailed"
    title = "Submission Validation Failed"
    status = 422

    def __init__(self, message: str, field: str) -> None:
        super().__init__(message)
        self.field = field

    def extensions(self) -> dict[str, Any]:
        return {"field": self.field}


class VagueLanguageError(SubmissionValidationError):
    """Raised when a commit statement contains a banned vague phrase.

    Attributes:
        phrase: The configured banned phrase that matched.
    """

    code = "VagueLanguage"
    title = "Vague Commitment"

    def __init__(self, phrase: str) -> None:
        super().__init__(
            f"Vague commitment detected: '{phrase}'. "
            "Be specific about what you will do.",
            field="action_description",
        )
        self.phrase = phrase

    def extensions(self) -> dict[str, Any]:
        return {**super().extensions(), "phrase": self.phrase}


class TooShortError(SubmissionValidationError):
    """Raised when a commit statement is shorter than the configured minimum."""

    code = "TooShort"
    title = "Commitment Too Short"

    def __init__(self, length: int, minimum: int) -> None:
        super().__init__(
            f"Action is too short ({length} characters, minimum {minimum}). "
            "Describe specifically what you will do.",
            field="action_description",
        )
        self.length = length
        self.minimum = minimum

    def extensions(self) -> dict[str, Any]:
        return {**super().extensions(), "length": self.length, "minimum": self.minimum}


class InvalidTargetError(SubmissionValidationError):
    """Raised when the committed revenue target is not strictly positive."""

    code = "InvalidTarget"
    title = "Invalid Revenue Target"

    def __init__(self, target: float | None) -> None:
        super().__init__(
            f"Enter a specific revenue target (must be > 0, got {target}).",
            field="target_revenue",
        )
        self.target = target


class MissingDateError(SubmissionValidationError):
    """Raised when a commit has no target completion date."""

    code = "MissingDate"
    title = "Missing Completion Date"

    def __init__(self) -> None:
        super().__init__(
            "Enter the date the committed action will be complete.",
            field="completion_date",
        )


class CompletionDateAfterReportDeadlineError(SubmissionValidationError):
    """Raised when the completion date falls after the week's report deadline."""

    code = "CompletionDateAfterReportDeadline"
    title = "Completion Date Too Late"

    def __init__(self, completion_date: date, report_deadline: datetime) -> None:
        super().__init__(
            f"Completion date {completion_date.isoformat()} must be on or before "
            f"the report deadline ({report_deadline.isoformat()}).",
            field="completion_date",
        )
        self.completion_date = completion_date
        self.report_deadline = report_deadline


class InvalidRevenueError(SubmissionValidationError):
    """Raised when reported revenue is negative."""

    code = "InvalidRevenue"
    title = "Invalid Revenue"

    def __init__(self, revenue: float) -> None:
        super().__init__(
            f"Enter revenue generated (use 0 if none, got {revenue}).",
            field="revenue_generated",
        )
        self.revenue = revenue


class InvalidHoursError(SubmissionValidationError):
    """Raised when reported hours are not strictly positive."""

    code = "InvalidHours"
    title = "Invalid Hours"

    def __init__(self, hours: float) -> None:
        super().__init__(
            f"Enter hours spent (must be > 0, got {hours}).",
            field="hours_spent",
        )
        self.hours = hours


class NarrativeTooShortError(SubmissionValidationError):
    """Raised when a report narrative is shorter than the configured minimum."""

    code = "NarrativeTooShort"
    title = "Narrative Too Short"

    def __init__(self, length: int, minimum: int) -> None:
        super().__init__(
            f"Narrative is too short ({length} characters). "
            f"Explain what happened (minimum {minimum} characters).",
            field="narrative",
        )
        self.length = length
        self.minimum = minimum

    def extensions(self) -> dict[str, Any]:
        return {**super().extensions(), "length": self.length, "minimum": self.minimum}


class MissingEvidenceError(SubmissionValidationError):
    """Raised when a report carries no evidence items.

    Unlike the other validation failures, a report rejected for missing
    evidence is retained by the engine so it can be resubmitted until the
    report deadline.
    """

    code = "MissingEvidence"
    title = "Missing Evidence"

    def __init__(self) -> None:
        super().__init__(
            "Evidence is required. Upload at least one file showing your work.",
            field="evidence_items",
        )


class SystemDocumentIncompleteError(SubmissionValidationError):
    """Raised when a system document misses its word-count requirements.

    Attributes:
        unmet: Human-readable description of each unmet requirement.
    """

    code = "SystemDocumentIncomplete"
    title = "System Document Incomplete"

    def __init__(self, unmet: tuple[str, ...]) -> None:
        super().__init__(
            "System document is incomplete: " + "; ".join(unmet),
            field="sections",
        )
        self.unmet = unmet

    def extensions(self) -> dict[str, Any]:
        return {**super().extensions(), "unmet_requirements": list(self.unmet)}


class InvalidCohortStartError(SubmissionValidationError):
    """Raised when a cohort start is not a usable week 1 start.

    A cohort start must be a Monday 00:00 in the program timezone whose
    commit deadline has not yet passed.
    """

    code = "InvalidCohortStart"
    title = "Invalid Cohort Start"

    def __init__(self, cohort_start: datetime, reason: str | None = None) -> None:
        super().__init__(
            reason
            or f"Cohort start {cohort_start.isoformat()} must be a Monday 00:00 "
            "in the program timezone.",
            field="cohort_start",
        )
        self.cohort_start = cohort_start
