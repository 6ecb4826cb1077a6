"""Domain models for Founder Loop."""

from founder_loop.domain.models.commitment import Commitment
from founder_loop.domain.models.escalation_record import (
    EscalationRecord,
    ReviewOutcome,
    ReviewState,
)
from founder_loop.domain.models.participant import (
    Participant,
    ParticipantStatus,
    RevenueBaseline,
)
from founder_loop.domain.models.report_metrics import Diagnosis, ReportMetrics
from founder_loop.domain.models.stage import (
    FINAL_STAGE,
    FIRST_STAGE,
    PROGRAM_STAGES,
    StageAdvance,
    StageDefinition,
    StageEvaluation,
    StageProgress,
    get_stage,
)
from founder_loop.domain.models.system_document import SystemDocument, count_words
from founder_loop.domain.models.vague_language import (
    VaguePhraseList,
    normalize_for_matching,
)
from founder_loop.domain.models.validation_result import ValidationResult
from founder_loop.domain.models.week_cycle import (
    LATE_RECOVERABLE_STEPS,
    LOOP_STEP_ORDER,
    STEP_TRANSITION_MATRIX,
    Adjustment,
    LoopStep,
    NextAction,
    StepRecord,
    StepStatus,
    WeekCycle,
    WeekDeadlines,
)
from founder_loop.domain.models.weekly_report import ReportStatus, WeeklyReport

__all__: list[str] = [
    "Adjustment",
    "Commitment",
    "Diagnosis",
    "EscalationRecord",
    "FINAL_STAGE",
    "FIRST_STAGE",
    "LATE_RECOVERABLE_STEPS",
    "LOOP_STEP_ORDER",
    "LoopStep",
    "NextAction",
    "PROGRAM_STAGES",
    "Participant",
    "ParticipantStatus",
    "ReportMetrics",
    "ReportStatus",
    "RevenueBaseline",
    "ReviewOutcome",
    "ReviewState",
    "STEP_TRANSITION_MATRIX",
    "StageAdvance",
    "StageDefinition",
    "StageEvaluation",
    "StageProgress",
    "StepRecord",
    "StepStatus",
    "SystemDocument",
    "ValidationResult",
    "VaguePhraseList",
    "WeekCycle",
    "WeekDeadlines",
    "WeeklyReport",
    "count_words",
    "get_stage",
    "normalize_for_matching",
]
