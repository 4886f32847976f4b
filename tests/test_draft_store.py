from __future__ import annotations

import pytest
from pydantic import ValidationError

from hrflow.domain.approval.entities import Approver, ApproverStatus
from hrflow.domain.workflow.drafts import DraftStore, draft_slot_keys
from hrflow.domain.workflow.entities import RecordStatus

from tests.fixtures.workflow_factory import draft_with, offer_fields, offer_lifecycle


def test_update_without_draft_initializes_one() -> None:
    store = DraftStore()

    draft = store.update_draft({"candidate_id": "c1"})

    assert draft.fields == {"candidate_id": "c1"}
    assert draft.is_dirty is True
    assert draft.current_step == 1


def test_update_is_a_shallow_merge() -> None:
    store = DraftStore()
    store.init_draft({"compensation": {"base_salary": 1000, "housing": 200}, "grade": "G5"})

    draft = store.update_draft({"compensation": {"base_salary": 2000}})

    assert draft.fields["compensation"] == {"base_salary": 2000}
    assert draft.fields["grade"] == "G5"


def test_reserved_keys_are_ignored_and_chain_goes_to_its_slot() -> None:
    store = DraftStore()

    draft = store.update_draft({"id": "OFF-999", "version": 7, "approval_chain": [], "grade": "G1"})

    assert draft.fields == {"grade": "G1"}
    assert draft.approval_chain == []
    assert draft.record_id is None


def test_init_from_record_seeds_edit_draft() -> None:
    lifecycle = offer_lifecycle()
    record = lifecycle.commit_draft(draft_with(offer_fields()), actor="hr").value

    store = DraftStore()
    draft = store.init_draft(seed=record)

    assert draft.record_id == record.id
    assert draft.base_version == record.version
    assert draft.status == RecordStatus.DRAFT
    assert draft.fields["candidate_name"] == "Sara Ahmed"
    assert draft.is_dirty is False


def test_reset_discards_draft_and_bumps_generation() -> None:
    store = DraftStore()
    first = store.init_draft({"grade": "G1"})

    store.reset_draft()

    assert store.draft is None
    assert store.generation > first.generation


def test_chain_slot_is_validated_into_approvers() -> None:
    store = DraftStore()

    draft = store.update_draft(
        {"approval_chain": [{"id": "a1", "name": "Omar", "position": "Engineering Manager"}]}
    )

    assert isinstance(draft.approval_chain[0], Approver)
    assert draft.approval_chain[0].status == ApproverStatus.PENDING


def test_invalid_slots_raise_instead_of_corrupting_the_draft() -> None:
    store = DraftStore()
    store.init_draft({"grade": "G1"})

    with pytest.raises(ValidationError):
        store.update_draft({"approval_chain": [{"name": "Omar"}]})
    with pytest.raises(ValueError):
        store.update_draft({"status": "bogus"})

    assert store.draft.approval_chain == []
    assert draft_slot_keys({"status": "draft", "grade": "G2", "approval_chain": []}) == [
        "approval_chain",
        "status",
    ]
