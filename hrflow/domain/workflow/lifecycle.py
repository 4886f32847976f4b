"""Record Lifecycle Manager.

Owns every write to the record collection:
- commit a draft (create or edit)
- delete (drafts only), duplicate
- status transitions through the workflow's transition table
- approver changes on committed records

Every mutation bumps ``version``, refreshes ``updated_at`` and appends
exactly one history entry. Recoverable failures come back as ``Outcome``
errors; a record without history raises ``StateCorruption``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Literal

from pydantic import ValidationError

from hrflow.core.errors import (
    PreconditionFailed,
    RecordNotFound,
    StateCorruption,
    ValidationFailed,
    WorkflowError,
)
from hrflow.core.results import Outcome
from hrflow.domain.approval import chain as approval_chain
from hrflow.domain.approval.entities import Approver, ApproverStatus
from hrflow.domain.records.repository import RecordRepositoryProtocol
from hrflow.observability.tracing import log_event, new_trace_id, start_span
from .entities import (
    Draft,
    HistoryAction,
    HistoryEntry,
    Record,
    RecordStatus,
    WorkflowDefinition,
)
from .transitions import history_action_for, is_allowed

# Approvers can only change before the record leaves the approval stage
_CHAIN_EDITABLE = frozenset({RecordStatus.DRAFT, RecordStatus.PENDING_APPROVAL})


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RecordLifecycleManager:
    def __init__(
        self,
        *,
        definition: WorkflowDefinition,
        repository: RecordRepositoryProtocol,
        id_prefix: str,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._definition = definition
        self._repo = repository
        self._id_prefix = id_prefix
        self._clock = clock

    @property
    def definition(self) -> WorkflowDefinition:
        return self._definition

    @property
    def repository(self) -> RecordRepositoryProtocol:
        return self._repo

    # ------------------------------------------------------------------
    # Commit
    # ------------------------------------------------------------------
    def commit_draft(
        self,
        draft: Draft,
        *,
        actor: str,
        trace_id: str | None = None,
    ) -> Outcome[Record]:
        """Turn a draft into a record.

        Drafts without ``record_id`` create a new record; otherwise the draft
        is merged into the existing one. The caller resets its draft store.
        """
        trace_id = trace_id or new_trace_id()
        if not draft.fields:
            raise StateCorruption("Cannot commit a draft without any payload")

        with start_span(
            "record.commit", trace_id=trace_id, kind=self._definition.kind, record_id=draft.record_id
        ) as span:
            if draft.record_id is None:
                outcome = self._create(draft, actor=actor)
            else:
                outcome = self._edit(draft, actor=actor)
            span.attributes["ok"] = outcome.ok
            if outcome.ok:
                span.attributes["record_id"] = outcome.value.id

        if outcome.ok:
            log_event(
                "record.committed",
                trace_id=trace_id,
                kind=self._definition.kind,
                record_id=outcome.value.id,
                version=outcome.value.version,
                actor=actor,
            )
        else:
            self._log_rejected("commit", outcome.error, trace_id=trace_id, record_id=draft.record_id)
        return outcome

    def _create(self, draft: Draft, *, actor: str) -> Outcome[Record]:
        payload = self._validate_payload(draft.fields)
        if not payload.ok:
            return payload

        now = self._clock()
        record = self._definition.record_model(
            id=self._repo.next_id(self._id_prefix),
            kind=self._definition.kind,
            status=RecordStatus.DRAFT,
            creator=actor,
            created_at=now,
            updated_at=now,
            payload=payload.value,
            approval_chain=list(draft.approval_chain),
            history=[
                HistoryEntry(
                    action=HistoryAction.CREATED,
                    timestamp=now,
                    actor=actor,
                    details="Initial record created",
                )
            ],
        )
        return Outcome.success(self._repo.add(record))

    def _edit(self, draft: Draft, *, actor: str) -> Outcome[Record]:
        existing = self._repo.get(draft.record_id)
        if existing is None:
            return Outcome.failure(RecordNotFound(self._definition.kind, draft.record_id))
        if existing.status != RecordStatus.DRAFT:
            return Outcome.failure(
                PreconditionFailed(
                    f"Only draft records can be edited; '{existing.id}' is {existing.status.value}"
                )
            )
        if draft.base_version is not None and draft.base_version != existing.version:
            return Outcome.failure(self._stale(existing))

        payload = self._validate_payload({**existing.payload.model_dump(), **draft.fields})
        if not payload.ok:
            return payload

        return self._apply(
            existing,
            update={"payload": payload.value, "approval_chain": list(draft.approval_chain)},
            action=HistoryAction.EDITED,
            details="Record updated",
            actor=actor,
        )

    def _validate_payload(self, fields: dict[str, Any]) -> Outcome[Any]:
        try:
            return Outcome.success(self._definition.payload_model.model_validate(fields))
        except ValidationError as exc:
            errors = {
                ".".join(str(part) for part in err["loc"]): err["msg"]
                for err in exc.errors()
            }
            return Outcome.failure(ValidationFailed("Invalid payload", details={"errors": errors}))

    # ------------------------------------------------------------------
    # Delete / duplicate
    # ------------------------------------------------------------------
    def delete_record(self, record_id: str, *, trace_id: str | None = None) -> Outcome[None]:
        """Delete a record; only drafts can go, everything else is refused."""
        trace_id = trace_id or new_trace_id()
        existing = self._repo.get(record_id)
        if existing is None:
            return self._refuse("delete", RecordNotFound(self._definition.kind, record_id), trace_id)
        if existing.status != RecordStatus.DRAFT:
            return self._refuse(
                "delete",
                PreconditionFailed(
                    f"Only draft records can be deleted; '{record_id}' is {existing.status.value}"
                ),
                trace_id,
            )
        if not self._repo.remove(record_id, expected_version=existing.version):
            return self._refuse("delete", self._stale(existing), trace_id)

        log_event("record.deleted", trace_id=trace_id, kind=self._definition.kind, record_id=record_id)
        return Outcome.success(None)

    def duplicate_record(
        self,
        record_id: str,
        *,
        actor: str,
        trace_id: str | None = None,
    ) -> Outcome[Record]:
        """Clone a record as a fresh draft with its own single-entry history."""
        trace_id = trace_id or new_trace_id()
        source = self._repo.get(record_id)
        if source is None:
            return self._refuse("duplicate", RecordNotFound(self._definition.kind, record_id), trace_id)

        now = self._clock()
        duplicate = source.model_copy(
            update={
                "id": self._repo.next_id(self._id_prefix),
                "status": RecordStatus.DRAFT,
                "created_at": now,
                "updated_at": now,
                "version": 1,
                "approval_chain": [
                    approver.model_copy(
                        update={"status": ApproverStatus.PENDING, "timestamp": None, "comment": None}
                    )
                    for approver in source.approval_chain
                ],
                "history": [
                    HistoryEntry(
                        action=HistoryAction.CREATED,
                        timestamp=now,
                        actor=actor,
                        details=f"Duplicated from {source.id}",
                    )
                ],
            },
            deep=True,
        )
        self._repo.add(duplicate)
        log_event(
            "record.duplicated",
            trace_id=trace_id,
            kind=self._definition.kind,
            record_id=duplicate.id,
            source_id=source.id,
        )
        return Outcome.success(duplicate)

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------
    def transition_status(
        self,
        record_id: str,
        new_status: RecordStatus,
        *,
        actor: str,
        details: str | None = None,
        trace_id: str | None = None,
    ) -> Outcome[Record]:
        trace_id = trace_id or new_trace_id()
        with start_span(
            "record.transition",
            trace_id=trace_id,
            kind=self._definition.kind,
            record_id=record_id,
            to_status=new_status.value,
        ) as span:
            outcome = self._transition(record_id, new_status, actor=actor, details=details, trace_id=trace_id)
            span.attributes["ok"] = outcome.ok
        return outcome

    def _transition(
        self,
        record_id: str,
        new_status: RecordStatus,
        *,
        actor: str,
        details: str | None,
        trace_id: str,
    ) -> Outcome[Record]:
        existing = self._repo.get(record_id)
        if existing is None:
            return self._refuse("transition", RecordNotFound(self._definition.kind, record_id), trace_id)

        if not is_allowed(self._definition.transitions, existing.status, new_status):
            return self._refuse(
                "transition",
                PreconditionFailed(
                    f"Cannot move {self._definition.kind} '{record_id}' "
                    f"from {existing.status.value} to {new_status.value}",
                    details={"from": existing.status.value, "to": new_status.value},
                ),
                trace_id,
            )

        if new_status == RecordStatus.APPROVED:
            chain_status = approval_chain.derive_chain_status(existing.approval_chain)
            if chain_status != RecordStatus.APPROVED:
                return self._refuse(
                    "transition",
                    PreconditionFailed(
                        f"Approval chain of '{record_id}' is {chain_status.value}",
                        details={"chain_status": chain_status.value},
                    ),
                    trace_id,
                )

        outcome = self._apply(
            existing,
            update={"status": new_status},
            action=history_action_for(new_status),
            details=details or f"Status updated to {new_status.value}",
            actor=actor,
        )
        if outcome.ok:
            log_event(
                "record.status_changed",
                trace_id=trace_id,
                kind=self._definition.kind,
                record_id=record_id,
                from_status=existing.status.value,
                to_status=new_status.value,
                actor=actor,
            )
        else:
            self._log_rejected("transition", outcome.error, trace_id=trace_id, record_id=record_id)
        return outcome

    # ------------------------------------------------------------------
    # Approvers on committed records
    # ------------------------------------------------------------------
    def add_approver(
        self,
        record_id: str,
        name: str,
        position: str,
        *,
        actor: str,
        trace_id: str | None = None,
    ) -> Outcome[Record]:
        def change(chain: list[Approver]) -> Outcome[list[Approver]]:
            return approval_chain.add_approver(chain, name, position)

        return self._change_chain(
            record_id, change, actor=actor, details=f"Approver {name} added", trace_id=trace_id
        )

    def remove_approver(
        self,
        record_id: str,
        approver_id: str,
        *,
        actor: str,
        trace_id: str | None = None,
    ) -> Outcome[Record]:
        def change(chain: list[Approver]) -> Outcome[list[Approver]]:
            if approval_chain.index_of(chain, approver_id) is None:
                return Outcome.failure(RecordNotFound("approver", approver_id))
            return Outcome.success(approval_chain.remove_approver(chain, approver_id))

        return self._change_chain(
            record_id, change, actor=actor, details=f"Approver {approver_id} removed", trace_id=trace_id
        )

    def move_approver(
        self,
        record_id: str,
        approver_id: str,
        direction: Literal["up", "down"],
        *,
        actor: str,
        trace_id: str | None = None,
    ) -> Outcome[Record]:
        def change(chain: list[Approver]) -> Outcome[list[Approver]]:
            index = approval_chain.index_of(chain, approver_id)
            if index is None:
                return Outcome.failure(RecordNotFound("approver", approver_id))
            if direction == "up":
                return Outcome.success(approval_chain.move_up(chain, index))
            return Outcome.success(approval_chain.move_down(chain, index))

        return self._change_chain(
            record_id,
            change,
            actor=actor,
            details=f"Approver {approver_id} moved {direction}",
            trace_id=trace_id,
        )

    def decide_approver(
        self,
        record_id: str,
        approver_id: str,
        status: ApproverStatus,
        comment: str | None = None,
        *,
        actor: str,
        trace_id: str | None = None,
    ) -> Outcome[Record]:
        def change(chain: list[Approver]) -> Outcome[list[Approver]]:
            if approval_chain.index_of(chain, approver_id) is None:
                return Outcome.failure(RecordNotFound("approver", approver_id))
            return Outcome.success(
                approval_chain.set_approver_status(
                    chain, approver_id, status, comment, now=self._clock()
                )
            )

        return self._change_chain(
            record_id,
            change,
            actor=actor,
            details=f"Approver {approver_id} set to {status.value}",
            trace_id=trace_id,
        )

    def _change_chain(
        self,
        record_id: str,
        change: Callable[[list[Approver]], Outcome[list[Approver]]],
        *,
        actor: str,
        details: str,
        trace_id: str | None,
    ) -> Outcome[Record]:
        trace_id = trace_id or new_trace_id()
        existing = self._repo.get(record_id)
        if existing is None:
            return self._refuse("approvers", RecordNotFound(self._definition.kind, record_id), trace_id)
        if existing.status not in _CHAIN_EDITABLE:
            return self._refuse(
                "approvers",
                PreconditionFailed(
                    f"Approvers of '{record_id}' are locked in status {existing.status.value}"
                ),
                trace_id,
            )

        changed = change(list(existing.approval_chain))
        if not changed.ok:
            return self._refuse("approvers", changed.error, trace_id)

        outcome = self._apply(
            existing,
            update={"approval_chain": changed.value},
            action=HistoryAction.EDITED,
            details=details,
            actor=actor,
        )
        if outcome.ok:
            log_event(
                "record.approvers_changed",
                trace_id=trace_id,
                kind=self._definition.kind,
                record_id=record_id,
                details=details,
                chain_status=approval_chain.derive_chain_status(changed.value).value,
            )
        else:
            self._log_rejected("approvers", outcome.error, trace_id=trace_id, record_id=record_id)
        return outcome

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _apply(
        self,
        existing: Record,
        *,
        update: dict[str, Any],
        action: HistoryAction,
        details: str,
        actor: str,
    ) -> Outcome[Record]:
        if not existing.history:
            raise StateCorruption(f"Record '{existing.id}' has no history")

        now = max(self._clock(), existing.updated_at)
        entry = HistoryEntry(action=action, timestamp=now, actor=actor, details=details)
        updated = existing.model_copy(
            update={
                **update,
                "updated_at": now,
                "history": [*existing.history, entry],
                "version": existing.version + 1,
            }
        )
        if not self._repo.replace(updated, expected_version=existing.version):
            return Outcome.failure(self._stale(existing))
        return Outcome.success(updated)

    def _stale(self, existing: Record) -> PreconditionFailed:
        return PreconditionFailed(
            f"{self._definition.kind} '{existing.id}' was modified concurrently",
            details={"current_version": existing.version},
        )

    def _refuse(self, operation: str, error: WorkflowError, trace_id: str) -> Outcome[Any]:
        self._log_rejected(operation, error, trace_id=trace_id)
        return Outcome.failure(error)

    def _log_rejected(
        self,
        operation: str,
        error: WorkflowError,
        *,
        trace_id: str,
        record_id: str | None = None,
    ) -> None:
        log_event(
            "record.rejected_op",
            trace_id=trace_id,
            kind=self._definition.kind,
            operation=operation,
            record_id=record_id,
            error=type(error).__name__,
            reason=error.reason,
        )
