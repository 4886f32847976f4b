# ---------------------------------
# TYPED EXCEPTIONS
# ---------------------------------
from typing import Any


class WorkflowError(Exception):
    """Base class for recoverable workflow failures.

    Engine operations return these inside an ``Outcome`` instead of raising
    them, so a wizard session stays usable after any of them.
    """

    def __init__(self, reason: str, details: dict[str, Any] | None = None):
        self.reason = reason
        self.details = details or {}
        super().__init__(reason)


class ValidationFailed(WorkflowError):
    pass


class InvalidStepError(ValidationFailed):
    """The active step's predicate rejected the draft."""

    def __init__(self, step: int, errors: dict[str, str]):
        self.step = step
        self.errors = errors
        super().__init__(f"Step {step} is incomplete", details={"step": step, "errors": errors})


class RecordNotFound(WorkflowError):
    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} '{record_id}' not found")


class PreconditionFailed(WorkflowError):
    pass


class StateCorruption(RuntimeError):
    """Raised when an invariant that should be unreachable is violated."""
    pass
