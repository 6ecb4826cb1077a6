"""Stage progression domain service.

Decides whether a participant's current stage is complete. Only the
current stage's predicate is ever evaluated, so a later stage can never
be satisfied while an earlier one is open, and at most one stage
advances per evaluation.

Only credited weeks count toward requirements: weeks with an accepted
report whose commit was on time.

Stage predicates:
1. Revenue Baseline: N credited weeks, at most M missed weeks between
   consecutive ones
2. Revenue Diagnosis: N distinct tactics in credited weeks since entry
3. Revenue Amplification: weekly revenue >= multiple * baseline for N
   consecutive concluded weeks since entry
4. Revenue System: approved system document meeting word requirements
5. Revenue Scale: average revenue over the final N concluded weeks
   >= multiple * baseline, approved document, exit interview recorded
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime

from founder_loop.config.loop_config import DEFAULT_LOOP_CONFIG, LoopConfig
from founder_loop.domain.models.participant import Participant
from founder_loop.domain.models.stage import StageAdvance, StageEvaluation
from founder_loop.domain.models.week_cycle import LoopStep, WeekCycle
from founder_loop.domain.services.metrics_calculator import (
    meets_revenue_multiple,
    revenue_threshold,
)
from founder_loop.domain.services.system_document_validator import (
    unmet_document_requirements,
)


def _concluded(weeks: tuple[WeekCycle, ...]) -> list[WeekCycle]:
    """Weeks whose report step is no longer open."""
    return [w for w in weeks if not w.status_of(LoopStep.REPORT).is_open()]


def _credited_revenue(week: WeekCycle) -> float:
    if week.earns_stage_credit and week.report is not None:
        return week.report.revenue_generated
    return 0.0


class StageProgressionEngine:
    """Evaluates stage predicates and records advances."""

    def __init__(self, config: LoopConfig = DEFAULT_LOOP_CONFIG) -> None:
        self._config = config

    # =========================================================================
    # Queries
    # =========================================================================

    def evaluate(self, participant: Participant) -> StageEvaluation:
        """Evaluate the participant's current stage."""
        stage = participant.stage.current_stage
        if participant.is_graduated:
            return StageEvaluation(stage=stage, satisfied=True)

        unmet = {
            1: self._stage1_unmet,
            2: self._stage2_unmet,
            3: self._stage3_unmet,
            4: self._stage4_unmet,
            5: self._stage5_unmet,
        }[stage](participant)
        return StageEvaluation(stage=stage, satisfied=not unmet, unmet=unmet)

    def can_advance(self, participant: Participant, stage: int) -> bool:
        """True if ``stage`` is the participant's current stage and it is complete.

        Any other stage is never advanceable: stages complete strictly in order.
        """
        if participant.is_graduated or stage != participant.stage.current_stage:
            return False
        return self.evaluate(participant).satisfied

    # =========================================================================
    # Commands
    # =========================================================================

    def try_advance(
        self, participant: Participant, now: datetime
    ) -> tuple[Participant, StageAdvance | None]:
        """Advance at most one stage if the current one is complete."""
        if not self.can_advance(participant, participant.stage.current_stage):
            return participant, None
        stage, advance = participant.stage.advance(participant.current_week, now)
        return replace(participant, stage=stage), advance

    # =========================================================================
    # Predicates
    # =========================================================================

    def _baseline(self, participant: Participant) -> float:
        return participant.baseline.revenue_30d

    def _stage1_unmet(self, participant: Participant) -> tuple[str, ...]:
        required = self._config.stage1_required_reports
        allowed_gap = self._config.stage1_max_intervening_misses
        missed = {w.week_number for w in participant.weeks if w.report_missed}

        best = run = 0
        previous: int | None = None
        for week in participant.weeks:
            if not week.earns_stage_credit:
                continue
            n = week.week_number
            gap = 0 if previous is None else sum(1 for m in missed if previous < m < n)
            run = run + 1 if previous is not None and gap <= allowed_gap else 1
            best = max(best, run)
            previous = n

        if best >= required:
            return ()
        return (
            f"{best}/{required} credited weekly reports "
            f"(at most {allowed_gap} missed week between them)",
        )

    def _stage2_unmet(self, participant: Participant) -> tuple[str, ...]:
        required = self._config.stage2_required_tactics
        entered = participant.stage.entered_week
        tactics = {
            w.report.tactic.strip().lower()
            for w in participant.weeks
            if w.week_number > entered
            and w.earns_stage_credit
            and w.report is not None
            and w.report.tactic
            and w.report.tactic.strip()
        }
        if len(tactics) >= required:
            return ()
        return (f"{len(tactics)}/{required} distinct tactics tested with $/hour recorded",)

    def _stage3_unmet(self, participant: Participant) -> tuple[str, ...]:
        required = self._config.stage3_consecutive_weeks
        baseline = self._baseline(participant)
        multiple = self._config.stage3_revenue_multiple
        floor = self._config.stage3_zero_baseline_weekly_revenue
        entered = participant.stage.entered_week

        best = run = 0
        for week in _concluded(participant.weeks):
            if week.week_number <= entered:
                continue
            if week.earns_stage_credit and meets_revenue_multiple(
                _credited_revenue(week), baseline, multiple, floor
            ):
                run += 1
            else:
                run = 0
            best = max(best, run)

        if best >= required:
            return ()
        threshold = revenue_threshold(baseline, multiple, floor)
        return (
            f"{best}/{required} consecutive weeks with revenue of at least {threshold:.2f}",
        )

    def _document_unmet(self, participant: Participant) -> list[str]:
        document = participant.system_document
        if document is None:
            return ["System document not submitted"]
        unmet = list(unmet_document_requirements(dict(document.sections), self._config))
        if not document.is_approved:
            unmet.append("System document not approved by a mentor")
        return unmet

    def _stage4_unmet(self, participant: Participant) -> tuple[str, ...]:
        return tuple(self._document_unmet(participant))

    def _stage5_unmet(self, participant: Participant) -> tuple[str, ...]:
        window = self._config.stage5_window_weeks
        baseline = self._baseline(participant)
        multiple = self._config.stage5_revenue_multiple
        floor = self._config.stage5_zero_baseline_weekly_revenue

        unmet: list[str] = []
        concluded = _concluded(participant.weeks)
        if len(concluded) < window:
            unmet.append(f"{len(concluded)}/{window} concluded weeks")
        else:
            average = sum(_credited_revenue(w) for w in concluded[-window:]) / window
            if not meets_revenue_multiple(average, baseline, multiple, floor):
                threshold = revenue_threshold(baseline, multiple, floor)
                unmet.append(
                    f"Average revenue over the final {window} weeks is {average:.2f} "
                    f"(required {threshold:.2f})"
                )
        unmet.extend(self._document_unmet(participant))
        if participant.exit_interview_at is None:
            unmet.append("Exit interview not completed")
        return tuple(unmet)
