"""Metrics calculator domain service.

Pure arithmetic over report values. Nothing here is rounded; rounding is
a display concern.
"""

from __future__ import annotations

import math
from collections.abc import Iterable

from founder_loop.domain.models.report_metrics import ReportMetrics


def compute_report_metrics(revenue: float, hours: float, target: float) -> ReportMetrics:
    """Compute dollars per hour and win rate for one report.

    Args:
        revenue: Revenue generated (>= 0).
        hours: Hours spent (> 0).
        target: Committed revenue target (> 0).

    Returns:
        ReportMetrics. Win rate is a percentage and unbounded above.

    Raises:
        ValueError: If hours or target is not strictly positive.
    """
    if hours <= 0:
        raise ValueError(f"hours must be positive, got {hours}")
    if target <= 0:
        raise ValueError(f"target must be positive, got {target}")
    return ReportMetrics(dollar_per_hour=revenue / hours, win_rate=revenue / target * 100)


def compute_revenue_delta(baseline: float, revenues: Iterable[float]) -> float:
    """Ratio of generated revenue to the baseline.

    Args:
        baseline: Baseline revenue (>= 0).
        revenues: Revenue of each accepted report to include.

    Returns:
        sum(revenues) / baseline. With a zero baseline the ratio is
        infinite for positive revenue and 0.0 otherwise.
    """
    total = sum(revenues)
    if baseline <= 0:
        return math.inf if total > 0 else 0.0
    return total / baseline


def compute_velocity(current: float, previous: float | None) -> float | None:
    """Week-over-week revenue change, or None without a previous week."""
    if previous is None:
        return None
    return current - previous


def revenue_threshold(baseline: float, multiple: float, zero_baseline_floor: float) -> float:
    """Weekly revenue needed to reach ``multiple`` times the baseline.

    A zero baseline has no meaningful multiple; the absolute floor applies.
    """
    if baseline <= 0:
        return zero_baseline_floor
    return baseline * multiple


def meets_revenue_multiple(
    revenue: float, baseline: float, multiple: float, zero_baseline_floor: float
) -> bool:
    """True if ``revenue`` reaches ``multiple`` times the baseline.

    Args:
        revenue: Weekly revenue (or a weekly average) to judge.
        baseline: Baseline revenue (>= 0).
        multiple: Required ratio of revenue to baseline.
        zero_baseline_floor: Absolute weekly revenue required instead when
            the baseline is zero.
    """
    if baseline <= 0:
        return revenue >= zero_baseline_floor
    return compute_revenue_delta(baseline, (revenue,)) >= multiple
