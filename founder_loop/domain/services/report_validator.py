"""Report validation domain service.

Validation rules for a weekly report, checked in this order:
1. InvalidRevenue: revenue below zero (zero is allowed)
2. InvalidHours: hours not strictly positive
3. NarrativeTooShort: narrative shorter than the configured minimum
4. MissingEvidence: no evidence items

A report whose only failure is MissingEvidence is retained by the engine
as rejected; any other failure rejects the submission outright.
"""

from __future__ import annotations

import math

from founder_loop.config.loop_config import DEFAULT_LOOP_CONFIG, LoopConfig
from founder_loop.domain.errors.validation import (
    InvalidHoursError,
    InvalidRevenueError,
    MissingEvidenceError,
    NarrativeTooShortError,
    SubmissionValidationError,
)
from founder_loop.domain.models.validation_result import ValidationResult


def validate_report(
    revenue_generated: float,
    hours_spent: float,
    narrative: str,
    evidence_count: int,
    *,
    config: LoopConfig = DEFAULT_LOOP_CONFIG,
) -> ValidationResult:
    """Validate a report submission.

    Args:
        revenue_generated: Revenue generated this week.
        hours_spent: Hours spent on the committed action.
        narrative: What happened this week.
        evidence_count: Number of evidence items attached.
        config: Rule set supplying the minimum narrative length.

    Returns:
        ValidationResult listing every failed rule in rule order.
    """
    failures: list[SubmissionValidationError] = []

    if math.isnan(revenue_generated) or revenue_generated < 0:
        failures.append(InvalidRevenueError(revenue_generated))
    if math.isnan(hours_spent) or hours_spent <= 0:
        failures.append(InvalidHoursError(hours_spent))
    if len(narrative) < config.min_narrative_length:
        failures.append(NarrativeTooShortError(len(narrative), config.min_narrative_length))
    if evidence_count <= 0:
        failures.append(MissingEvidenceError())

    return ValidationResult(tuple(failures))


def is_evidence_only_rejection(result: ValidationResult) -> bool:
    """True if missing evidence is the report's only failure."""
    return len(result.failures) == 1 and isinstance(result.failures[0], MissingEvidenceError)
