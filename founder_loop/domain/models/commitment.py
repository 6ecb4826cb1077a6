"""Weekly commitment domain model.

A commitment is a participant's weekly statement of a specific revenue
action and target. It is created by SubmitCommit and never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime


@dataclass(frozen=True, eq=True)
class Commitment:
    """A week's accepted commit.

    Attributes:
        action_description: Specific revenue action the participant commits to.
        target_revenue: Revenue target for the week (> 0).
        target_completion_date: Date the action will be complete.
        submitted_at: When the commit was accepted.
        is_late: True if submitted after the commit deadline. A late commit
            unblocks the week but never earns stage credit.
    """

    action_description: str
    target_revenue: float
    target_completion_date: date
    submitted_at: datetime
    is_late: bool = False
