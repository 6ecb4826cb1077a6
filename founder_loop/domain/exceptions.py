"""Base exception classes for the Founder Loop domain layer."""

from __future__ import annotations

from typing import Any


class FounderLoopError(Exception):
    """Base exception for all domain errors.

    All domain-specific exceptions MUST inherit from this class.
    Subclasses override the class attributes below so that every error
    can be rendered as an RFC 7807 problem document without the API layer
    knowing about individual error types.

    Attributes:
        code: Stable machine-readable error code (e.g. "VagueLanguage").
        title: Short human-readable summary.
        status: HTTP status an adapter should use when surfacing the error.
    """

    code: str = "FounderLoopError"
    title: str = "Founder Loop Error"
    status: int = 500

    def __init__(self, message: str = "") -> None:
        """Initialize the exception with an optional message.

        Args:
            message: Human-readable error description.
        """
        super().__init__(message)
        self.message = message

    def problem_type(self) -> str:
        """Return the RFC 7807 type URN for this error."""
        slug = "".join(
            f"-{c.lower()}" if c.isupper() and i else c.lower()
            for i, c in enumerate(self.code)
        )
        return f"urn:founder-loop:error:{slug}"

    def extensions(self) -> dict[str, Any]:
        """Return error-specific fields added to the problem document."""
        return {}

    def to_rfc7807_dict(self) -> dict[str, Any]:
        """Serialize to RFC 7807 problem details.

        Returns:
            Dictionary with type, title, status, detail, code and any
            error-specific extension fields.
        """
        result: dict[str, Any] = {
            "type": self.problem_type(),
            "title": self.title,
            "status": self.status,
            "detail": self.message,
            "code": self.code,
        }
        result.update(self.extensions())
        return result
