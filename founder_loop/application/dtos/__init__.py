"""Application DTOs for Founder Loop."""

from founder_loop.application.dtos.loop_state import (
    DiagnosisDTO,
    EscalationStatusDTO,
    StageAccessDTO,
    StageStatusDTO,
    StepStateDTO,
    TickSummaryDTO,
    WeekStateDTO,
)

__all__ = [
    "DiagnosisDTO",
    "EscalationStatusDTO",
    "StageAccessDTO",
    "StageStatusDTO",
    "StepStateDTO",
    "TickSummaryDTO",
    "WeekStateDTO",
]
