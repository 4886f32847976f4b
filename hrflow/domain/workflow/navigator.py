"""Step Navigator.

States are steps 1..N. ``advance`` from N does not move; it signals the
caller to commit, which leaves the state machine entirely.
"""

from __future__ import annotations

from dataclasses import dataclass

from hrflow.core.errors import InvalidStepError, ValidationFailed
from hrflow.core.results import Outcome
from .entities import Draft, StepDescriptor, WorkflowDefinition


@dataclass(frozen=True)
class StepChange:
    draft: Draft
    should_commit: bool = False


class StepNavigator:
    def __init__(self, definition: WorkflowDefinition) -> None:
        self._definition = definition

    @property
    def total_steps(self) -> int:
        return self._definition.total_steps

    def active_step(self, draft: Draft) -> StepDescriptor:
        return self._definition.step(self._clamp(draft.current_step))

    def step_errors(self, draft: Draft) -> dict[str, str]:
        return self.active_step(draft).validate(draft)

    def can_advance(self, draft: Draft) -> bool:
        return not self.step_errors(draft)

    def first_invalid_step(self, draft: Draft) -> tuple[int, dict[str, str]] | None:
        for number in range(1, self.total_steps + 1):
            errors = self._definition.step(number).validate(draft)
            if errors:
                return number, errors
        return None

    def advance(self, draft: Draft) -> Outcome[StepChange]:
        errors = self.step_errors(draft)
        if errors:
            return Outcome.failure(InvalidStepError(draft.current_step, errors))

        if draft.current_step >= self.total_steps:
            # Earlier steps may have been edited since they were passed
            invalid = self.first_invalid_step(draft)
            if invalid is not None:
                return Outcome.failure(InvalidStepError(*invalid))
            return Outcome.success(StepChange(draft=draft, should_commit=True))

        moved = draft.model_copy(update={"current_step": draft.current_step + 1, "errors": {}})
        return Outcome.success(StepChange(draft=moved))

    def retreat(self, draft: Draft) -> Draft:
        if draft.current_step <= 1:
            return draft
        return draft.model_copy(update={"current_step": draft.current_step - 1, "errors": {}})

    def jump_to(self, draft: Draft, step: int) -> Outcome[Draft]:
        """Go back to an already visited step; skipping ahead is refused."""
        if step < 1 or step > draft.current_step:
            return Outcome.failure(
                ValidationFailed(
                    f"Cannot jump to step {step} from step {draft.current_step}",
                    details={"step": step, "current_step": draft.current_step},
                )
            )
        return Outcome.success(draft.model_copy(update={"current_step": step, "errors": {}}))

    def progress_fraction(self, draft: Draft) -> float:
        return self._clamp(draft.current_step) / self.total_steps

    def _clamp(self, step: int) -> int:
        return max(1, min(step, self.total_steps))
