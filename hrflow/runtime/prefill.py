"""Prefill a wizard draft from a candidate profile.

The lookup runs as an async task; its result lands in the draft with a
single update, and only if the draft was not reset while it was loading.
"""

from __future__ import annotations

import asyncio
from typing import Iterable, Protocol

from hrflow.domain.candidates import CandidateProfile
from hrflow.domain.workflow.entities import Draft
from .sessions import WizardSession
from .tasks import CancellationToken, TaskOutcome, TaskResult, run_task


class CandidateNotFound(LookupError):
    pass


class CandidateDirectory(Protocol):
    async def fetch(self, candidate_id: str) -> CandidateProfile | None:
        ...


class InMemoryCandidateDirectory:
    """Candidate lookups against a local dict.

    ``delay`` simulates a slow upstream for tests of cancellation and
    timeouts.
    """

    def __init__(self, profiles: Iterable[CandidateProfile] = (), delay: float = 0.0) -> None:
        self._profiles = {p.id: p for p in profiles}
        self._delay = delay

    async def fetch(self, candidate_id: str) -> CandidateProfile | None:
        if self._delay:
            await asyncio.sleep(self._delay)
        return self._profiles.get(candidate_id)


async def prefill_session(
    session: WizardSession,
    directory: CandidateDirectory,
    candidate_id: str,
    *,
    token: CancellationToken | None = None,
    timeout: float | None = None,
) -> TaskResult[Draft]:
    if session.definition.prefill is None:
        return TaskResult(
            TaskOutcome.FAILED,
            reason=f"{session.definition.kind} drafts cannot be prefilled",
        )

    generation = session.draft.generation

    async def load() -> CandidateProfile:
        profile = await directory.fetch(candidate_id)
        if profile is None:
            raise CandidateNotFound(f"Candidate '{candidate_id}' not found")
        return profile

    loaded = await run_task(
        load,
        token=token,
        timeout=timeout,
        name="candidate.prefill",
        trace_id=session.trace_id,
    )
    if not loaded.ok:
        return TaskResult(loaded.outcome, reason=loaded.reason)

    draft = session.apply_if_current(generation, session.definition.prefill(loaded.value))
    if draft is None:
        return TaskResult(
            TaskOutcome.CANCELLED,
            reason="Draft was reset while the candidate was loading",
        )
    return TaskResult(TaskOutcome.SUCCEEDED, value=draft)
