from dataclasses import dataclass
from typing import Generic, TypeVar

from .errors import WorkflowError

T = TypeVar("T")


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Result of an engine operation.

    Recoverable failures (validation, not found, precondition) travel in
    ``error`` instead of being raised.
    """
    ok: bool
    value: T | None = None
    error: WorkflowError | None = None

    @classmethod
    def success(cls, value: T | None = None) -> "Outcome[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: WorkflowError) -> "Outcome[T]":
        return cls(ok=False, error=error)
