"""Program stage domain models.

The program is a fixed, ordered sequence of five stages. A participant
starts in stage 1 and advances one stage at a time; advancing is
irreversible. Advancing from the final stage graduates the participant.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime

FIRST_STAGE = 1
FINAL_STAGE = 5


@dataclass(frozen=True, eq=True)
class StageDefinition:
    """Read-only definition of one program stage.

    Attributes:
        number: 1-based stage number.
        name: Display name of the stage.
        requirement: Plain-language unlock requirement.
    """

    number: int
    name: str
    requirement: str


PROGRAM_STAGES: tuple[StageDefinition, ...] = (
    StageDefinition(
        1,
        "Revenue Baseline",
        "Two credited weekly reports with at most one missed week between them",
    ),
    StageDefinition(
        2,
        "Revenue Diagnosis",
        "Three distinct tactics tested with dollars per hour recorded for each",
    ),
    StageDefinition(
        3,
        "Revenue Amplification",
        "Weekly revenue of at least twice the baseline for two consecutive weeks",
    ),
    StageDefinition(
        4,
        "Revenue System",
        "Approved system document meeting every word requirement",
    ),
    StageDefinition(
        5,
        "Revenue Scale",
        "Final weeks averaging four times the baseline, approved system "
        "document and completed exit interview",
    ),
)


def get_stage(number: int) -> StageDefinition:
    """Return the definition of a stage.

    Raises:
        ValueError: If the number is outside the program.
    """
    if not FIRST_STAGE <= number <= FINAL_STAGE:
        raise ValueError(f"Stage must be within {FIRST_STAGE}..{FINAL_STAGE}, got {number}")
    return PROGRAM_STAGES[number - 1]


@dataclass(frozen=True, eq=True)
class StageAdvance:
    """A recorded stage advancement.

    Attributes:
        from_stage: Stage whose requirements were met.
        to_stage: Stage entered (equal to from_stage on graduation).
        week_number: Program week in which the advance happened.
        advanced_at: When the advance was recorded.
        graduated: True if this advance completed the program.
    """

    from_stage: int
    to_stage: int
    week_number: int
    advanced_at: datetime
    graduated: bool = False


@dataclass(frozen=True, eq=True)
class StageEvaluation:
    """Result of evaluating one stage's unlock predicate.

    Attributes:
        stage: Stage evaluated.
        satisfied: True if every requirement is met.
        unmet: Human-readable unmet requirements (empty when satisfied).
    """

    stage: int
    satisfied: bool
    unmet: tuple[str, ...] = ()


@dataclass(frozen=True, eq=True)
class StageProgress:
    """A participant's position in the program.

    Attributes:
        current_stage: Stage the participant is working on (1..5).
        entered_week: Week in which the current stage was entered
            (0 for stage 1, entered at enrollment).
        history: Every advance, oldest first.
        graduated_at: When the participant graduated, if they have.
    """

    current_stage: int = FIRST_STAGE
    entered_week: int = 0
    history: tuple[StageAdvance, ...] = field(default_factory=tuple)
    graduated_at: datetime | None = None

    def __post_init__(self) -> None:
        if not FIRST_STAGE <= self.current_stage <= FINAL_STAGE:
            raise ValueError(f"current_stage out of range: {self.current_stage}")

    @property
    def is_graduated(self) -> bool:
        """True once the final stage's requirements have been met."""
        return self.graduated_at is not None

    @property
    def unlocked_stages(self) -> tuple[int, ...]:
        """Stages whose content the participant may access."""
        return tuple(range(FIRST_STAGE, self.current_stage + 1))

    def advance(self, week_number: int, at: datetime) -> tuple[StageProgress, StageAdvance]:
        """Advance one stage, or graduate from the final stage.

        Raises:
            ValueError: If the participant already graduated.
        """
        if self.is_graduated:
            raise ValueError("Participant has already graduated")
        if self.current_stage == FINAL_STAGE:
            record = StageAdvance(FINAL_STAGE, FINAL_STAGE, week_number, at, graduated=True)
            return replace(self, history=self.history + (record,), graduated_at=at), record
        record = StageAdvance(self.current_stage, self.current_stage + 1, week_number, at)
        return (
            replace(
                self,
                current_stage=self.current_stage + 1,
                entered_week=week_number,
                history=self.history + (record,),
            ),
            record,
        )
