"""Approval chain operations.

Every operation returns a new list; the chain passed in is never mutated.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Callable, Sequence

from hrflow.core.errors import ValidationFailed
from hrflow.core.results import Outcome
from hrflow.domain.workflow.entities import RecordStatus
from .entities import Approver, ApproverStatus

# (name, position) pairs; "{department}" is filled from the draft
CHAIN_TEMPLATES: dict[str, list[tuple[str, str]]] = {
    "standard": [
        ("Direct Manager", "{department} Manager"),
        ("HR Manager", "HR Department"),
    ],
    "executive": [
        ("Direct Manager", "{department} Manager"),
        ("HR Manager", "HR Department"),
        ("Finance Director", "Finance Department"),
        ("CEO", "Executive Office"),
    ],
}


def new_approver_id() -> str:
    return f"APR-{uuid.uuid4().hex[:12]}"


def _unique_id(chain: Sequence[Approver], id_factory: Callable[[], str]) -> str:
    taken = {a.id for a in chain}
    approver_id = id_factory()
    while approver_id in taken:
        approver_id = id_factory()
    return approver_id


def add_approver(
    chain: Sequence[Approver],
    name: str,
    position: str,
    *,
    id_factory: Callable[[], str] = new_approver_id,
) -> Outcome[list[Approver]]:
    """Append a pending approver to the end of the chain."""
    name = (name or "").strip()
    position = (position or "").strip()

    missing = {}
    if not name:
        missing["name"] = "Approver name is required"
    if not position:
        missing["position"] = "Approver position is required"
    if missing:
        return Outcome.failure(
            ValidationFailed("Approver name and position are required", details=missing)
        )

    approver = Approver(id=_unique_id(chain, id_factory), name=name, position=position)
    return Outcome.success([*chain, approver])


def remove_approver(chain: Sequence[Approver], approver_id: str) -> list[Approver]:
    return [a for a in chain if a.id != approver_id]


def move_up(chain: Sequence[Approver], index: int) -> list[Approver]:
    approvers = list(chain)
    if index <= 0 or index >= len(approvers):
        return approvers
    approvers[index - 1], approvers[index] = approvers[index], approvers[index - 1]
    return approvers


def move_down(chain: Sequence[Approver], index: int) -> list[Approver]:
    approvers = list(chain)
    if index < 0 or index >= len(approvers) - 1:
        return approvers
    approvers[index], approvers[index + 1] = approvers[index + 1], approvers[index]
    return approvers


def index_of(chain: Sequence[Approver], approver_id: str) -> int | None:
    for i, approver in enumerate(chain):
        if approver.id == approver_id:
            return i
    return None


def set_approver_status(
    chain: Sequence[Approver],
    approver_id: str,
    status: ApproverStatus,
    comment: str | None = None,
    *,
    now: datetime | None = None,
) -> list[Approver]:
    """Record a decision for one approver.

    A decision stamps a fresh timestamp; re-opening to pending clears it.
    Unknown ids leave the chain as is.
    """
    stamp = now or datetime.now(timezone.utc)
    updated: list[Approver] = []
    for approver in chain:
        if approver.id != approver_id:
            updated.append(approver)
            continue
        updated.append(
            approver.model_copy(
                update={
                    "status": status,
                    "timestamp": None if status == ApproverStatus.PENDING else stamp,
                    "comment": comment if comment is not None else approver.comment,
                }
            )
        )
    return updated


def derive_chain_status(chain: Sequence[Approver]) -> RecordStatus:
    """Aggregate status of a chain, independent of approver order.

    An empty chain has no approval requirement and counts as approved.
    """
    if any(a.status == ApproverStatus.REJECTED for a in chain):
        return RecordStatus.REJECTED
    if all(a.status == ApproverStatus.APPROVED for a in chain):
        return RecordStatus.APPROVED
    return RecordStatus.PENDING_APPROVAL


def chain_from_template(
    template: str,
    *,
    department: str | None = None,
    id_factory: Callable[[], str] = new_approver_id,
) -> Outcome[list[Approver]]:
    entries = CHAIN_TEMPLATES.get(template)
    if entries is None:
        return Outcome.failure(
            ValidationFailed(
                f"Unknown approval template '{template}'",
                details={"available": sorted(CHAIN_TEMPLATES)},
            )
        )

    chain: list[Approver] = []
    for name, position in entries:
        outcome = add_approver(
            chain,
            name,
            position.format(department=department or "Department"),
            id_factory=id_factory,
        )
        chain = outcome.value
    return Outcome.success(chain)
