"""Wizard sessions.

A session binds one Draft Store, one Step Navigator and the lifecycle manager
that receives the finished draft. Draft mutations inside a session are
serialized by a lock, so two edits never interleave.
"""

from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Literal, Mapping

from hrflow.core.errors import PreconditionFailed, RecordNotFound, ValidationFailed
from hrflow.core.results import Outcome
from hrflow.domain.approval import chain as approval_chain
from hrflow.domain.approval.entities import Approver
from hrflow.domain.workflow.drafts import DraftStore, draft_slot_keys
from hrflow.domain.workflow.entities import Draft, Record, RecordStatus, WorkflowDefinition
from hrflow.domain.workflow.lifecycle import RecordLifecycleManager
from hrflow.domain.workflow.navigator import StepNavigator
from hrflow.observability.tracing import log_event, new_trace_id


@dataclass(frozen=True)
class AdvanceResult:
    draft: Draft | None = None
    record: Record | None = None

    @property
    def committed(self) -> bool:
        return self.record is not None


class WizardSession:
    def __init__(self, *, lifecycle: RecordLifecycleManager, session_id: str | None = None) -> None:
        self.session_id = session_id or uuid.uuid4().hex
        self.trace_id = new_trace_id()
        self._lifecycle = lifecycle
        self._store = DraftStore()
        self._navigator = StepNavigator(lifecycle.definition)
        self._lock = threading.RLock()

    @property
    def definition(self) -> WorkflowDefinition:
        return self._lifecycle.definition

    @property
    def navigator(self) -> StepNavigator:
        return self._navigator

    @property
    def draft(self) -> Draft:
        with self._lock:
            if self._store.draft is None:
                self._store.init_draft()
            return self._store.draft

    # ------------------------------------------------------------------
    def start(self, seed_record_id: str | None = None) -> Outcome[Draft]:
        """Open the wizard empty, or on an existing draft record for editing."""
        with self._lock:
            if seed_record_id is None:
                draft = self._store.init_draft()
            else:
                record = self._lifecycle.repository.get(seed_record_id)
                if record is None:
                    return Outcome.failure(RecordNotFound(self.definition.kind, seed_record_id))
                if record.status != RecordStatus.DRAFT:
                    return Outcome.failure(
                        PreconditionFailed(
                            f"Only draft records can be edited; '{record.id}' is {record.status.value}"
                        )
                    )
                draft = self._store.init_draft(seed=record)

        log_event(
            "session.started",
            trace_id=self.trace_id,
            kind=self.definition.kind,
            session_id=self.session_id,
            record_id=seed_record_id,
        )
        return Outcome.success(draft)

    def update(self, patch: Mapping[str, Any]) -> Outcome[Draft]:
        """Merge payload fields into the draft.

        The approval chain and status are refused here; the chain changes
        through the approver operations and status only on committed records.
        """
        slots = draft_slot_keys(patch)
        if slots:
            return Outcome.failure(
                ValidationFailed(
                    f"Cannot patch {', '.join(slots)} directly",
                    details={"fields": slots},
                )
            )
        with self._lock:
            return Outcome.success(self._store.update_draft(patch))

    def update_with(self, change: Callable[[Draft], Outcome[Mapping[str, Any]]]) -> Outcome[Draft]:
        """Compute a patch from the current draft and apply it atomically."""
        with self._lock:
            patch = change(self.draft)
            if not patch.ok:
                return Outcome.failure(patch.error)
            return Outcome.success(self._store.update_draft(patch.value))

    def apply_if_current(self, generation: int, patch: Mapping[str, Any]) -> Draft | None:
        """Apply a late result only if the draft was not reset meanwhile."""
        with self._lock:
            draft = self._store.draft
            if draft is None or draft.generation != generation:
                return None
            return self._store.update_draft(patch)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------
    def advance(self, *, actor: str) -> Outcome[AdvanceResult]:
        """Move to the next step; on the last step, commit the draft."""
        with self._lock:
            draft = self.draft
            moved = self._navigator.advance(draft)
            if not moved.ok:
                self._store.replace(draft.model_copy(update={"errors": moved.error.errors}))
                return Outcome.failure(moved.error)

            if not moved.value.should_commit:
                return Outcome.success(AdvanceResult(draft=self._store.replace(moved.value.draft)))

            committed = self._commit(actor=actor)
            if not committed.ok:
                return Outcome.failure(committed.error)
            return Outcome.success(AdvanceResult(record=committed.value))

    def retreat(self) -> Draft:
        with self._lock:
            return self._store.replace(self._navigator.retreat(self.draft))

    def jump_to(self, step: int) -> Outcome[Draft]:
        with self._lock:
            jumped = self._navigator.jump_to(self.draft, step)
            if jumped.ok:
                self._store.replace(jumped.value)
            return jumped

    def save(self, *, actor: str) -> Outcome[Record]:
        """Commit the draft as it stands, whatever step it is on."""
        with self._lock:
            return self._commit(actor=actor)

    def cancel(self) -> None:
        with self._lock:
            self._store.reset_draft()
        log_event("session.cancelled", trace_id=self.trace_id, session_id=self.session_id)

    def _commit(self, *, actor: str) -> Outcome[Record]:
        if not self.draft.fields:
            return Outcome.failure(
                ValidationFailed("Nothing to save", details={"fields": "empty"})
            )
        outcome = self._lifecycle.commit_draft(self.draft, actor=actor, trace_id=self.trace_id)
        if outcome.ok:
            self._store.reset_draft()
        return outcome

    # ------------------------------------------------------------------
    # Approval chain of the draft
    # ------------------------------------------------------------------
    def add_approver(self, name: str, position: str) -> Outcome[Draft]:
        def change(draft: Draft) -> Outcome[Mapping[str, Any]]:
            added = approval_chain.add_approver(draft.approval_chain, name, position)
            if not added.ok:
                return Outcome.failure(added.error)
            return Outcome.success({"approval_chain": added.value})

        return self.update_with(change)

    def remove_approver(self, approver_id: str) -> Draft:
        with self._lock:
            chain = approval_chain.remove_approver(self.draft.approval_chain, approver_id)
            return self._store.update_draft({"approval_chain": chain})

    def move_approver(self, approver_id: str, direction: Literal["up", "down"]) -> Outcome[Draft]:
        def change(draft: Draft) -> Outcome[Mapping[str, Any]]:
            index = approval_chain.index_of(draft.approval_chain, approver_id)
            if index is None:
                return Outcome.failure(RecordNotFound("approver", approver_id))
            move = approval_chain.move_up if direction == "up" else approval_chain.move_down
            return Outcome.success({"approval_chain": move(draft.approval_chain, index)})

        return self.update_with(change)

    def apply_chain_template(self, template: str) -> Outcome[Draft]:
        def change(draft: Draft) -> Outcome[Mapping[str, Any]]:
            built = approval_chain.chain_from_template(
                template, department=draft.fields.get("department") or None
            )
            if not built.ok:
                return Outcome.failure(built.error)
            return Outcome.success({"approval_chain": built.value})

        return self.update_with(change)

    @property
    def approval_chain(self) -> list[Approver]:
        return list(self.draft.approval_chain)


class SessionRegistry:
    """Live wizard sessions of one workflow, keyed by session id."""

    def __init__(self, lifecycle: RecordLifecycleManager) -> None:
        self._lifecycle = lifecycle
        self._sessions: dict[str, WizardSession] = {}
        self._lock = threading.Lock()

    def open(self, seed_record_id: str | None = None) -> Outcome[WizardSession]:
        session = WizardSession(lifecycle=self._lifecycle)
        started = session.start(seed_record_id)
        if not started.ok:
            return Outcome.failure(started.error)
        with self._lock:
            self._sessions[session.session_id] = session
        return Outcome.success(session)

    def get(self, session_id: str) -> WizardSession | None:
        with self._lock:
            return self._sessions.get(session_id)

    def close(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
