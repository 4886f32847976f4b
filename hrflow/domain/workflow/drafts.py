"""Draft Store: holds the one in-progress record of a wizard session."""

from __future__ import annotations

from typing import Any, Mapping

from pydantic import TypeAdapter

from hrflow.domain.approval.entities import Approver
from .entities import Draft, Record, RecordStatus

# Patch keys that live on the draft itself rather than in the payload
DRAFT_SLOTS = ("approval_chain", "status")
# Assigned by the lifecycle manager, never by editing
_RESERVED = frozenset({"id", "kind", "creator", "created_at", "updated_at", "history", "version"})

_CHAIN = TypeAdapter(list[Approver])


def draft_slot_keys(patch: Mapping[str, Any]) -> list[str]:
    """Keys of ``patch`` that would replace a draft slot instead of a payload field."""
    return sorted(key for key in patch if key in DRAFT_SLOTS)


class DraftStore:
    def __init__(self) -> None:
        self._draft: Draft | None = None
        self._generation = 0

    @property
    def draft(self) -> Draft | None:
        return self._draft

    @property
    def generation(self) -> int:
        return self._generation

    def init_draft(self, seed: Record | Mapping[str, Any] | None = None) -> Draft:
        """Start a new draft, optionally seeded from an existing record."""
        self._generation += 1
        if isinstance(seed, Record):
            draft = Draft(
                record_id=seed.id,
                base_version=seed.version,
                status=seed.status,
                fields=seed.payload.model_dump(),
                approval_chain=list(seed.approval_chain),
                generation=self._generation,
            )
        else:
            draft = _merge(Draft(generation=self._generation), seed or {})
        self._draft = draft
        return draft

    def update_draft(self, patch: Mapping[str, Any]) -> Draft:
        """Shallow-merge ``patch`` into the draft.

        Payload fields are never validated here; the draft slots must hold a
        valid chain and status, callers screen them with ``draft_slot_keys``.
        """
        if self._draft is None:
            self.init_draft()
        self._draft = _merge(self._draft, patch).model_copy(update={"is_dirty": True})
        return self._draft

    def replace(self, draft: Draft) -> Draft:
        """Store a draft produced by the navigator or a chain operation."""
        self._draft = draft
        return draft

    def reset_draft(self) -> None:
        self._generation += 1
        self._draft = None


def _merge(draft: Draft, patch: Mapping[str, Any]) -> Draft:
    update: dict[str, Any] = {}
    fields = dict(draft.fields)
    for key, value in patch.items():
        if key == "approval_chain":
            # model_copy skips validation, so slots are validated here
            update[key] = _CHAIN.validate_python(list(value or []))
        elif key == "status":
            update[key] = None if value is None else RecordStatus(value)
        elif key in _RESERVED:
            continue
        else:
            fields[key] = value
    update["fields"] = fields
    return draft.model_copy(update=update)
