from __future__ import annotations

import pytest

from hrflow.core.errors import InvalidStepError, ValidationFailed
from hrflow.domain.offers.workflow import OFFER_WORKFLOW
from hrflow.domain.onboarding.workflow import ONBOARDING_WORKFLOW
from hrflow.domain.workflow.drafts import DraftStore
from hrflow.domain.workflow.entities import Draft
from hrflow.domain.workflow.navigator import StepNavigator

from tests.fixtures.workflow_factory import draft_with, offer_fields, onboarding_fields


@pytest.mark.parametrize(
    "definition, fields",
    [(OFFER_WORKFLOW, offer_fields()), (ONBOARDING_WORKFLOW, onboarding_fields())],
)
def test_advance_never_passes_last_step(definition, fields) -> None:
    navigator = StepNavigator(definition)
    draft = draft_with(fields)

    for _ in range(definition.total_steps * 2):
        change = navigator.advance(draft)
        assert change.ok
        draft = change.value.draft
        assert 1 <= draft.current_step <= definition.total_steps

    assert draft.current_step == definition.total_steps
    assert navigator.advance(draft).value.should_commit is True


def test_retreat_from_first_step_is_noop() -> None:
    navigator = StepNavigator(OFFER_WORKFLOW)
    draft = Draft()

    assert navigator.retreat(draft).current_step == 1


def test_retreat_moves_back_one_step_and_clears_errors() -> None:
    navigator = StepNavigator(OFFER_WORKFLOW)
    draft = Draft(current_step=3, errors={"delivery_channel": "required"})

    moved = navigator.retreat(draft)

    assert moved.current_step == 2
    assert moved.errors == {}


def test_advance_is_gated_by_step_validation() -> None:
    navigator = StepNavigator(OFFER_WORKFLOW)
    draft = draft_with({"candidate_id": "", "requisition_id": "j1"})

    outcome = navigator.advance(draft)

    assert outcome.ok is False
    assert isinstance(outcome.error, InvalidStepError)
    assert outcome.error.step == 1
    assert "candidate_id" in outcome.error.errors
    assert draft.current_step == 1


def test_filling_missing_field_unblocks_advance() -> None:
    # Arrange
    navigator = StepNavigator(OFFER_WORKFLOW)
    store = DraftStore()
    store.init_draft({"candidate_id": "", "requisition_id": "j1"})
    assert navigator.can_advance(store.draft) is False

    # Act
    draft = store.update_draft({"candidate_id": "c1"})
    outcome = navigator.advance(draft)

    # Assert
    assert navigator.can_advance(draft) is True
    assert outcome.ok
    assert outcome.value.draft.current_step == 2
    assert outcome.value.should_commit is False


def test_jump_back_to_visited_step() -> None:
    navigator = StepNavigator(OFFER_WORKFLOW)
    draft = Draft(current_step=4)

    outcome = navigator.jump_to(draft, 2)

    assert outcome.ok
    assert outcome.value.current_step == 2


@pytest.mark.parametrize("step", [0, 5, 6])
def test_jump_ahead_or_out_of_range_is_refused(step) -> None:
    navigator = StepNavigator(OFFER_WORKFLOW)
    draft = Draft(current_step=4)

    outcome = navigator.jump_to(draft, step)

    assert outcome.ok is False
    assert isinstance(outcome.error, ValidationFailed)


def test_progress_fraction_and_active_step() -> None:
    navigator = StepNavigator(ONBOARDING_WORKFLOW)
    draft = Draft(current_step=2)

    assert navigator.progress_fraction(draft) == pytest.approx(0.4)
    assert navigator.active_step(draft).key == "documents"


def test_send_step_requires_email_for_email_delivery() -> None:
    navigator = StepNavigator(OFFER_WORKFLOW)
    draft = draft_with(offer_fields(candidate_email=None)).model_copy(update={"current_step": 4})

    assert navigator.step_errors(draft) == {
        "candidate_email": "An email address is required for email delivery"
    }


def test_commit_from_last_step_rechecks_every_step() -> None:
    navigator = StepNavigator(OFFER_WORKFLOW)
    draft = draft_with(offer_fields(candidate_id="")).model_copy(update={"current_step": 5})

    outcome = navigator.advance(draft)

    assert isinstance(outcome.error, InvalidStepError)
    assert outcome.error.step == 1
    assert outcome.error.errors == {"candidate_id": "Select a candidate"}
    assert navigator.first_invalid_step(draft_with(offer_fields())) is None
