"""Step state transition errors.

These indicate a bug in the engine, not a participant mistake: the
public command surface never requests a transition outside the matrix.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from founder_loop.domain.exceptions import FounderLoopError

if TYPE_CHECKING:
    from founder_loop.domain.models.week_cycle import LoopStep, StepStatus


class InvalidStepTransitionError(FounderLoopError):
    """Raised when a step transition is not permitted by the transition matrix.

    Attributes:
        step: The loop step being transitioned.
        from_status: Current status of the step.
        to_status: Attempted target status.
    """

    code = "InvalidStepTransition"
    title = "Invalid Step Transition"
    status = 500

    def __init__(self, step: LoopStep, from_status: StepStatus, to_status: StepStatus) -> None:
        super().__init__(
            f"Invalid {step.value} transition: {from_status.value} -> {to_status.value}"
        )
        self.step = step
        self.from_status = from_status
        self.to_status = to_status
