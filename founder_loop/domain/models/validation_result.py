"""Validation result value object."""

from __future__ import annotations

from dataclasses import dataclass

from founder_loop.domain.errors.validation import SubmissionValidationError


@dataclass(frozen=True, eq=True)
class ValidationResult:
    """Outcome of running a validator.

    Every rule runs; failures are kept in rule order so the first one is
    the failure surfaced to the submitter.

    Attributes:
        failures: Validation errors, in rule order.
    """

    failures: tuple[SubmissionValidationError, ...] = ()

    @property
    def is_valid(self) -> bool:
        """True if no rule failed."""
        return not self.failures

    @property
    def first_failure(self) -> SubmissionValidationError | None:
        """The failure surfaced to the submitter, if any."""
        return self.failures[0] if self.failures else None

    @property
    def codes(self) -> tuple[str, ...]:
        """Error codes of every failure, in rule order."""
        return tuple(f.code for f in self.failures)

    def has_failure(self, error_type: type[SubmissionValidationError]) -> bool:
        """True if any failure is an instance of ``error_type``."""
        return any(isinstance(f, error_type) for f in self.failures)

    def raise_for_failure(self) -> None:
        """Raise the first failure, if any."""
        if self.failures:
            raise self.failures[0]
