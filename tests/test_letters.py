from __future__ import annotations

import pytest

from hrflow.core.errors import ValidationFailed
from hrflow.domain.offers.letters import InMemoryLetterTemplateStore, render_offer_letter
from hrflow.runtime.renderer import LetterRenderer, MissingLetterVariables, placeholders

from tests.fixtures.workflow_factory import offer_fields


def test_letter_rendering_ok() -> None:
    renderer = LetterRenderer()
    rendered = renderer.render('Dear ${candidate_name}', {'candidate_name': 'Sara'}, language='en')
    assert rendered == 'Dear Sara'


def test_letter_rendering_reports_every_missing_variable() -> None:
    renderer = LetterRenderer()
    with pytest.raises(MissingLetterVariables) as exc_info:
        renderer.render('Dear ${candidate_name}, grade $grade, ${candidate_name}', {}, language='ar')

    assert exc_info.value.names == ['candidate_name', 'grade']
    assert exc_info.value.language == 'ar'
    assert "for 'ar'" in str(exc_info.value)


def test_placeholders_skip_escaped_dollars() -> None:
    assert placeholders('$$5 for ${name} at $grade') == ['name', 'grade']


def test_english_letter_lands_in_its_field() -> None:
    outcome = render_offer_letter(offer_fields(), 'en')

    assert outcome.ok
    letter = outcome.value['offer_letter_en']
    assert 'Dear Sara Ahmed' in letter
    assert 'Base salary: 15,000.00' in letter
    assert 'Total: 20,250.00' in letter
    assert 'probation period of 3 months' in letter


def test_arabic_letter_lands_in_its_field() -> None:
    outcome = render_offer_letter(offer_fields(), 'ar')

    assert list(outcome.value) == ['offer_letter_ar']
    assert 'Sara Ahmed' in outcome.value['offer_letter_ar']


def test_missing_draft_field_is_a_validation_failure() -> None:
    fields = offer_fields()
    del fields['grade']

    outcome = render_offer_letter(fields, 'en')

    assert outcome.ok is False
    assert isinstance(outcome.error, ValidationFailed)
    assert 'grade' in outcome.error.reason
    assert outcome.error.details == {'language': 'en', 'missing': ['grade']}


def test_unknown_language_is_refused() -> None:
    outcome = render_offer_letter(offer_fields(), 'fr')

    assert isinstance(outcome.error, ValidationFailed)


def test_custom_template_store() -> None:
    store = InMemoryLetterTemplateStore({'en': 'Hello ${candidate_name}, grade ${grade}'})

    outcome = render_offer_letter(offer_fields(), 'en', store=store)

    assert outcome.value == {'offer_letter_en': 'Hello Sara Ahmed, grade G7'}
