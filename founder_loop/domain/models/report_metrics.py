"""Report metrics value objects."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, eq=True)
class ReportMetrics:
    """Efficiency metrics for a single report.

    Attributes:
        dollar_per_hour: revenue / hours.
        win_rate: revenue / target * 100, unbounded above.
    """

    dollar_per_hour: float
    win_rate: float


@dataclass(frozen=True, eq=True)
class Diagnosis:
    """System-computed diagnosis of an accepted report.

    The diagnosis is computed when the report is accepted but only becomes
    visible (and the Diagnose step complete) at ``available_at``.

    Attributes:
        dollar_per_hour: revenue / hours for the week.
        win_rate: revenue / target * 100 for the week.
        revenue_delta: Week revenue divided by the participant's baseline.
        velocity: Revenue change against the previous accepted week
            (None when there is no previous accepted week).
        available_at: When the diagnosis becomes visible.
    """

    dollar_per_hour: float
    win_rate: float
    revenue_delta: float
    velocity: float | None
    available_at: datetime
