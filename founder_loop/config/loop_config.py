"""Weekly loop configuration.

Every business rule the engine enforces lives here: banned phrases,
deadlines, escalation thresholds and stage parameters. Nothing is
duplicated in views or adapters.

Deadlines are offsets from the week start (Monday 00:00 in the program
timezone, default UTC+1 / WAT):
- Commit: Monday 09:00
- Report: Friday 18:00 (plus optional late-report grace)
- Adjust: Sunday 18:00

Environment Variables:
- FOUNDER_LOOP_PROGRAM_WEEKS: Program length in weeks (default: 12)
- FOUNDER_LOOP_UTC_OFFSET_HOURS: Program timezone offset (default: 1)
- FOUNDER_LOOP_LATE_REPORT_GRACE_MINUTES: Late-report window (default: 0)
- FOUNDER_LOOP_REVIEW_MISS_THRESHOLD: Consecutive misses before review (default: 2)
- FOUNDER_LOOP_VAGUE_PHRASES: Comma-separated banned phrases (default: built-in list)
- FOUNDER_LOOP_STAGE3_ZERO_BASELINE_REVENUE: Weekly floor for zero baselines (default: 1000)
- FOUNDER_LOOP_STAGE5_ZERO_BASELINE_REVENUE: Weekly floor for zero baselines (default: 2000)
- FOUNDER_LOOP_TICK_INTERVAL_SECONDS: Deadline sweep interval (default: 60)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta, timezone
from typing import ClassVar, Final

DEFAULT_VAGUE_PHRASES: Final[tuple[str, ...]] = (
    "work on",
    "try to",
    "maybe",
    "explore",
    "think about",
    "consider",
    "attempt",
)

# Mandatory sections of the Stage 4 system document
DEFAULT_SYSTEM_DOCUMENT_SECTIONS: Final[tuple[str, ...]] = (
    "overview",
    "audience",
    "process",
    "scripts",
    "tools",
    "metrics",
    "obstacles",
    "optimization",
)


def _get_int_env(key: str, default: int) -> int:
    """Get integer environment variable with default.

    Args:
        key: Environment variable name.
        default: Default value if not set or invalid.

    Returns:
        Parsed integer value or default.
    """
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float_env(key: str, default: float) -> float:
    """Get float environment variable with default."""
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _get_phrases_env(key: str, default: tuple[str, ...]) -> tuple[str, ...]:
    """Get a comma-separated phrase list, ignoring blank entries."""
    value = os.environ.get(key)
    if value is None:
        return default
    phrases = tuple(p.strip() for p in value.split(",") if p.strip())
    return phrases or default


@dataclass(frozen=True)
class LoopConfig:
    """Declarative rule set consumed by the weekly loop engine.

    Attributes:
        program_weeks: Fixed program length N (weeks are numbered 1..N).
        utc_offset_hours: Offset of the program timezone from UTC.
        commit_deadline_offset: Commit deadline relative to week start.
        report_deadline_offset: Report deadline relative to week start.
        adjust_deadline_offset: Adjust deadline relative to week start.
        late_report_grace: Window after the report deadline in which a
            report is still accepted, flagged late.
        vague_phrases: Banned phrases for commit statements.
        min_commit_length: Minimum commit statement length in characters.
        min_narrative_length: Minimum report narrative length in characters.
        review_miss_threshold: Consecutive missed reports that trigger review.
        pattern_warning_late_count: Late submissions that trigger a pattern warning.
        pattern_warning_window_weeks: Window (weeks) for the pattern warning.
        stage1_required_reports: Credited reports required for stage 1.
        stage1_max_intervening_misses: Missed weeks allowed between them.
        stage2_required_tactics: Distinct tactics required for stage 2.
        stage3_revenue_multiple: Weekly revenue / baseline required for stage 3.
        stage3_consecutive_weeks: Consecutive weeks the multiple must hold.
        stage3_zero_baseline_weekly_revenue: Absolute weekly revenue used
            instead of the ratio when the baseline is zero.
        stage4_min_total_words: Minimum system document length.
        stage4_min_section_words: Minimum words per mandatory section.
        system_document_sections: Mandatory system document section ids.
        stage5_revenue_multiple: Average revenue / baseline required to graduate.
        stage5_window_weeks: Number of final weeks averaged for stage 5.
        stage5_zero_baseline_weekly_revenue: Absolute average weekly revenue
            used instead of the ratio when the baseline is zero.
        tick_interval_seconds: How often the deadline sweep runs.
    """

    WEEK_LENGTH: ClassVar[timedelta] = timedelta(days=7)

    program_weeks: int = 12
    utc_offset_hours: int = 1
    commit_deadline_offset: timedelta = timedelta(hours=9)
    report_deadline_offset: timedelta = timedelta(days=4, hours=18)
    adjust_deadline_offset: timedelta = timedelta(days=6, hours=18)
    late_report_grace: timedelta = timedelta(0)
    vague_phrases: tuple[str, ...] = DEFAULT_VAGUE_PHRASES
    min_commit_length: int = 20
    min_narrative_length: int = 50
    review_miss_threshold: int = 2
    pattern_warning_late_count: int = 3
    pattern_warning_window_weeks: int = 4
    stage1_required_reports: int = 2
    stage1_max_intervening_misses: int = 1
    stage2_required_tactics: int = 3
    stage3_revenue_multiple: float = 2.0
    stage3_consecutive_weeks: int = 2
    stage3_zero_baseline_weekly_revenue: float = 1000.0
    stage4_min_total_words: int = 1000
    stage4_min_section_words: int = 50
    system_document_sections: tuple[str, ...] = DEFAULT_SYSTEM_DOCUMENT_SECTIONS
    stage5_revenue_multiple: float = 4.0
    stage5_window_weeks: int = 3
    stage5_zero_baseline_weekly_revenue: float = 2000.0
    tick_interval_seconds: float = 60.0

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.program_weeks < 1:
            raise ValueError(f"program_weeks must be positive, got {self.program_weeks}")
        if not -12 <= self.utc_offset_hours <= 14:
            raise ValueError(
                f"utc_offset_hours must be within -12..14, got {self.utc_offset_hours}"
            )
        if self.commit_deadline_offset < timedelta(0):
            raise ValueError("commit_deadline_offset must not be negative")
        if self.late_report_grace < timedelta(0):
            raise ValueError("late_report_grace must not be negative")
        # Deadlines must be strictly increasing: Commit < Report < Adjust
        if not (
            self.commit_deadline_offset
            < self.report_deadline_offset
            <= self.report_cutoff_offset
            < self.adjust_deadline_offset
            < self.WEEK_LENGTH
        ):
            raise ValueError(
                "deadlines must satisfy commit < report (+grace) < adjust < week end"
            )
        if not self.vague_phrases or any(not p.strip() for p in self.vague_phrases):
            raise ValueError("vague_phrases must be a non-empty list of non-blank phrases")
        if self.min_commit_length < 0 or self.min_narrative_length < 0:
            raise ValueError("minimum lengths must not be negative")
        if self.review_miss_threshold < 1:
            raise ValueError(
                f"review_miss_threshold must be at least 1, got {self.review_miss_threshold}"
            )
        if self.pattern_warning_late_count < 1 or self.pattern_warning_window_weeks < 1:
            raise ValueError("pattern warning count and window must be at least 1")
        if (
            self.stage1_required_reports < 1
            or self.stage2_required_tactics < 1
            or self.stage3_consecutive_weeks < 1
            or self.stage5_window_weeks < 1
        ):
            raise ValueError("stage week and report counts must be at least 1")
        if self.stage1_max_intervening_misses < 0:
            raise ValueError("stage1_max_intervening_misses must not be negative")
        if self.stage3_revenue_multiple <= 0 or self.stage5_revenue_multiple <= 0:
            raise ValueError("stage revenue multiples must be positive")
        if (
            self.stage3_zero_baseline_weekly_revenue <= 0
            or self.stage5_zero_baseline_weekly_revenue <= 0
        ):
            raise ValueError("zero-baseline revenue floors must be positive")
        if not self.system_document_sections:
            raise ValueError("system_document_sections must not be empty")
        if self.stage4_min_section_words < 0 or self.stage4_min_total_words < 0:
            raise ValueError("system document word minimums must not be negative")
        if self.tick_interval_seconds <= 0:
            raise ValueError(
                f"tick_interval_seconds must be positive, got {self.tick_interval_seconds}"
            )

    @property
    def program_timezone(self) -> timezone:
        """Fixed-offset timezone all deadlines are expressed in."""
        return timezone(timedelta(hours=self.utc_offset_hours))

    @property
    def report_cutoff_offset(self) -> timedelta:
        """Last instant (relative to week start) a report is accepted."""
        return self.report_deadline_offset + self.late_report_grace

    @classmethod
    def from_environment(cls) -> LoopConfig:
        """Create config from environment variables with defaults.

        Returns:
            LoopConfig with values from environment or defaults.
        """
        return cls(
            program_weeks=_get_int_env("FOUNDER_LOOP_PROGRAM_WEEKS", 12),
            utc_offset_hours=_get_int_env("FOUNDER_LOOP_UTC_OFFSET_HOURS", 1),
            late_report_grace=timedelta(
                minutes=_get_int_env("FOUNDER_LOOP_LATE_REPORT_GRACE_MINUTES", 0)
            ),
            review_miss_threshold=_get_int_env("FOUNDER_LOOP_REVIEW_MISS_THRESHOLD", 2),
            vague_phrases=_get_phrases_env(
                "FOUNDER_LOOP_VAGUE_PHRASES", DEFAULT_VAGUE_PHRASES
            ),
            stage3_zero_baseline_weekly_revenue=_get_float_env(
                "FOUNDER_LOOP_STAGE3_ZERO_BASELINE_REVENUE", 1000.0
            ),
            stage5_zero_baseline_weekly_revenue=_get_float_env(
                "FOUNDER_LOOP_STAGE5_ZERO_BASELINE_REVENUE", 2000.0
            ),
            tick_interval_seconds=_get_float_env("FOUNDER_LOOP_TICK_INTERVAL_SECONDS", 60.0),
        )


# Default production config
DEFAULT_LOOP_CONFIG = LoopConfig()
