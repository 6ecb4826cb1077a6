"""Weekly report domain model.

A report discloses actual revenue, hours, narrative and evidence for a
week. It can only exist alongside a commitment for the same week.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class ReportStatus(Enum):
    """Acceptance status of a submitted report.

    States:
        ACCEPTED: Passed every validation rule
        REJECTED_NO_EVIDENCE: Retained without evidence; resubmittable until
            the report deadline
    """

    ACCEPTED = "ACCEPTED"
    REJECTED_NO_EVIDENCE = "REJECTED_NO_EVIDENCE"


@dataclass(frozen=True, eq=True)
class WeeklyReport:
    """A week's report submission.

    Attributes:
        revenue_generated: Revenue generated this week (>= 0).
        hours_spent: Hours spent on the committed action (> 0).
        narrative: What happened, in the participant's words.
        evidence_items: Ordered references to uploaded evidence.
        submitted_at: When the report was received.
        status: Acceptance status.
        is_late: True if accepted inside the late-report grace window.
        tactic: Label of the revenue tactic this week tested, if any.
    """

    revenue_generated: float
    hours_spent: float
    narrative: str
    evidence_items: tuple[str, ...]
    submitted_at: datetime
    status: ReportStatus
    is_late: bool = False
    tactic: str | None = None

    @property
    def evidence_count(self) -> int:
        """Number of evidence items attached."""
        return len(self.evidence_items)

    @property
    def is_accepted(self) -> bool:
        """True if the report passed every rule."""
        return self.status is ReportStatus.ACCEPTED

    @property
    def dollar_per_hour(self) -> float:
        """Revenue generated per hour spent."""
        return self.revenue_generated / self.hours_spent
