"""Async tasks with cooperative cancellation and typed results.

Slow work (candidate lookups, anything behind the network) runs here,
outside the synchronous draft/record engine. A task never raises for the
expected endings; the caller gets a ``TaskResult`` instead.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Generic, TypeVar

from hrflow.observability.tracing import start_span

T = TypeVar("T")


class TaskOutcome(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True)
class TaskResult(Generic[T]):
    outcome: TaskOutcome
    value: T | None = None
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.outcome == TaskOutcome.SUCCEEDED


class CancellationToken:
    def __init__(self) -> None:
        self._event = asyncio.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()


async def run_task(
    factory: Callable[[], Awaitable[T]],
    *,
    token: CancellationToken | None = None,
    timeout: float | None = None,
    name: str = "task",
    trace_id: str | None = None,
) -> TaskResult[T]:
    """Run ``factory()`` until it finishes, the token fires or time runs out."""
    token = token or CancellationToken()
    with start_span(name, trace_id=trace_id) as span:
        if token.cancelled:
            result: TaskResult[T] = TaskResult(TaskOutcome.CANCELLED, reason="Cancelled before start")
        else:
            result = await _race(factory, token, timeout)
        span.attributes.update(outcome=result.outcome.value, reason=result.reason)
    return result


async def _race(
    factory: Callable[[], Awaitable[T]],
    token: CancellationToken,
    timeout: float | None,
) -> TaskResult[T]:
    work = asyncio.ensure_future(factory())
    cancel_wait = asyncio.ensure_future(token.wait())
    try:
        done, _ = await asyncio.wait(
            {work, cancel_wait},
            timeout=timeout,
            return_when=asyncio.FIRST_COMPLETED,
        )
        if work in done:
            if work.cancelled():
                return TaskResult(TaskOutcome.CANCELLED, reason="Task was cancelled")
            exc = work.exception()
            if exc is not None:
                return TaskResult(TaskOutcome.FAILED, reason=str(exc) or type(exc).__name__)
            return TaskResult(TaskOutcome.SUCCEEDED, value=work.result())
        if cancel_wait in done:
            return TaskResult(TaskOutcome.CANCELLED, reason="Cancelled by caller")
        return TaskResult(TaskOutcome.TIMED_OUT, reason=f"No result after {timeout}s")
    finally:
        for pending in (work, cancel_wait):
            if not pending.done():
                pending.cancel()
        await asyncio.gather(work, cancel_wait, return_exceptions=True)
