"""Commit validation domain service.

Validation rules for a weekly commit, checked in this order:
1. VagueLanguage: statement contains a banned phrase
2. TooShort: statement shorter than the configured minimum
3. InvalidTarget: revenue target not strictly positive
4. MissingDate: no target completion date
5. CompletionDateAfterReportDeadline: completion date after the week's
   report deadline (only when a deadline is supplied)

Every rule runs. The first failure is the one surfaced to the submitter.
"""

from __future__ import annotations

import math
from datetime import date, datetime

from founder_loop.config.loop_config import DEFAULT_LOOP_CONFIG, LoopConfig
from founder_loop.domain.errors.validation import (
    CompletionDateAfterReportDeadlineError,
    InvalidTargetError,
    MissingDateError,
    SubmissionValidationError,
    TooShortError,
    VagueLanguageError,
)
from founder_loop.domain.models.vague_language import VaguePhraseList
from founder_loop.domain.models.validation_result import ValidationResult


def validate_commit(
    action_description: str,
    target_revenue: float | None,
    target_completion_date: date | None,
    *,
    config: LoopConfig = DEFAULT_LOOP_CONFIG,
    report_deadline: datetime | None = None,
) -> ValidationResult:
    """Validate a commit submission.

    Pure function; never raises for invalid input.

    Args:
        action_description: The committed action statement.
        target_revenue: Weekly revenue target.
        target_completion_date: Date the action will be complete.
        config: Rule set supplying banned phrases and the minimum length.
        report_deadline: The week's report deadline. The completion date
            may not fall after its (program-local) date.

    Returns:
        ValidationResult listing every failed rule in rule order.
    """
    failures: list[SubmissionValidationError] = []

    matches = VaguePhraseList(config.vague_phrases).find_matches(action_description)
    if matches:
        failures.append(VagueLanguageError(matches[0]))

    if len(action_description) < config.min_commit_length:
        failures.append(TooShortError(len(action_description), config.min_commit_length))

    if target_revenue is None or math.isnan(target_revenue) or target_revenue <= 0:
        failures.append(InvalidTargetError(target_revenue))

    if target_completion_date is None:
        failures.append(MissingDateError())
    elif report_deadline is not None and target_completion_date > report_deadline.date():
        failures.append(
            CompletionDateAfterReportDeadlineError(target_completion_date, report_deadline)
        )

    return ValidationResult(tuple(failures))
