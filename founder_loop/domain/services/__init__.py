"""Domain services for Founder Loop.

Domain services hold the weekly-loop rules that don't belong to a single
model. They are pure: no I/O, no clock reads, no logging.

Available services:
- validate_commit / validate_report / validate_system_document: submission rules
- compute_report_metrics / compute_revenue_delta / compute_velocity: metrics
- WeeklyLoopMachine: deadlines and submissions for one week
- EscalationTracker: consecutive misses and mandatory review
- StageProgressionEngine: stage predicates and advances
"""

from founder_loop.domain.services.commit_validator import validate_commit
from founder_loop.domain.services.escalation_tracker import EscalationTracker, MissOutcome
from founder_loop.domain.services.metrics_calculator import (
    compute_report_metrics,
    compute_revenue_delta,
    compute_velocity,
)
from founder_loop.domain.services.report_validator import (
    is_evidence_only_rejection,
    validate_report,
)
from founder_loop.domain.services.stage_progression import StageProgressionEngine
from founder_loop.domain.services.system_document_validator import (
    unmet_document_requirements,
    validate_system_document,
)
from founder_loop.domain.services.weekly_loop_machine import (
    CycleUpdate,
    StepTransition,
    WeeklyLoopMachine,
)

__all__ = [
    "CycleUpdate",
    "EscalationTracker",
    "MissOutcome",
    "StageProgressionEngine",
    "StepTransition",
    "WeeklyLoopMachine",
    "compute_report_metrics",
    "compute_revenue_delta",
    "compute_velocity",
    "is_evidence_only_rejection",
    "unmet_document_requirements",
    "validate_commit",
    "validate_report",
    "validate_system_document",
]
