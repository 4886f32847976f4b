from __future__ import annotations

from datetime import datetime, timezone

import pytest

from hrflow.core.errors import ValidationFailed
from hrflow.domain.approval import chain as approval_chain
from hrflow.domain.approval.entities import Approver, ApproverStatus
from hrflow.domain.workflow.entities import RecordStatus


def _chain(*statuses: ApproverStatus) -> list[Approver]:
    return [
        Approver(id=f"a{i}", name=f"Approver {i}", position="Manager", status=status)
        for i, status in enumerate(statuses, start=1)
    ]


def test_add_approver_appends_pending_entry() -> None:
    outcome = approval_chain.add_approver([], "Omar Khalid", "Engineering Manager")

    assert outcome.ok
    [approver] = outcome.value
    assert approver.id.startswith("APR-")
    assert approver.status == ApproverStatus.PENDING
    assert approver.timestamp is None


@pytest.mark.parametrize("name, position", [("", "Manager"), ("Omar", "  "), ("", "")])
def test_add_approver_requires_name_and_position(name, position) -> None:
    chain = _chain(ApproverStatus.PENDING)

    outcome = approval_chain.add_approver(chain, name, position)

    assert outcome.ok is False
    assert isinstance(outcome.error, ValidationFailed)
    assert [a.id for a in chain] == ["a1"]


def test_add_approver_never_reuses_an_id() -> None:
    ids = iter(["a1", "a1", "a2"])
    chain = _chain(ApproverStatus.PENDING)

    outcome = approval_chain.add_approver(chain, "HR", "HR Department", id_factory=lambda: next(ids))

    assert [a.id for a in outcome.value] == ["a1", "a2"]


def test_move_at_boundaries_keeps_order() -> None:
    chain = _chain(ApproverStatus.PENDING, ApproverStatus.PENDING, ApproverStatus.PENDING)

    assert [a.id for a in approval_chain.move_up(chain, 0)] == ["a1", "a2", "a3"]
    assert [a.id for a in approval_chain.move_down(chain, 2)] == ["a1", "a2", "a3"]


def test_move_swaps_neighbours() -> None:
    chain = _chain(ApproverStatus.PENDING, ApproverStatus.PENDING, ApproverStatus.PENDING)

    assert [a.id for a in approval_chain.move_up(chain, 2)] == ["a1", "a3", "a2"]
    assert [a.id for a in approval_chain.move_down(chain, 0)] == ["a2", "a1", "a3"]
    assert [a.id for a in chain] == ["a1", "a2", "a3"]


@pytest.mark.parametrize(
    "statuses, expected",
    [
        ((ApproverStatus.APPROVED,) * 3, RecordStatus.APPROVED),
        ((ApproverStatus.APPROVED, ApproverStatus.PENDING), RecordStatus.PENDING_APPROVAL),
        (
            (ApproverStatus.APPROVED, ApproverStatus.REJECTED, ApproverStatus.PENDING),
            RecordStatus.REJECTED,
        ),
        ((), RecordStatus.APPROVED),
    ],
)
def test_derive_chain_status(statuses, expected) -> None:
    assert approval_chain.derive_chain_status(_chain(*statuses)) == expected


def test_set_status_stamps_only_the_target() -> None:
    # Arrange
    now = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
    chain = _chain(ApproverStatus.PENDING, ApproverStatus.PENDING)

    # Act
    updated = approval_chain.set_approver_status(chain, "a1", ApproverStatus.APPROVED, now=now)

    # Assert
    assert updated[0].status == ApproverStatus.APPROVED
    assert updated[0].timestamp == now
    assert updated[1].status == ApproverStatus.PENDING
    assert updated[1].timestamp is None
    assert approval_chain.derive_chain_status(updated) == RecordStatus.PENDING_APPROVAL


def test_reopening_clears_timestamp_and_keeps_comment() -> None:
    now = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
    chain = approval_chain.set_approver_status(
        _chain(ApproverStatus.PENDING), "a1", ApproverStatus.REJECTED, "Budget", now=now
    )

    reopened = approval_chain.set_approver_status(chain, "a1", ApproverStatus.PENDING)

    assert reopened[0].timestamp is None
    assert reopened[0].comment == "Budget"


def test_chain_from_template_fills_department() -> None:
    outcome = approval_chain.chain_from_template("standard", department="Engineering")

    assert outcome.ok
    assert [a.position for a in outcome.value] == ["Engineering Manager", "HR Department"]
    assert len({a.id for a in outcome.value}) == 2


def test_unknown_template_is_a_validation_failure() -> None:
    outcome = approval_chain.chain_from_template("board")

    assert outcome.ok is False
    assert outcome.error.details["available"] == ["executive", "standard"]
