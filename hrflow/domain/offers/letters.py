"""Offer letter templates.

Templates are filled from the draft's fields; nothing here produces a
signed or printable document.
"""

from __future__ import annotations

from typing import Any, Mapping

from hrflow.core.errors import ValidationFailed
from hrflow.core.results import Outcome
from hrflow.runtime.renderer import LetterRenderer, MissingLetterVariables
from .entities import Compensation

DEFAULT_LETTER_TEMPLATES: dict[str, str] = {
    'en': (
        'Dear ${candidate_name},\n\n'
        'We are pleased to offer you the position of ${requisition_title} in the '
        '${department} department at grade ${grade}.\n\n'
        'Your monthly compensation will be:\n'
        '- Base salary: ${base_salary}\n'
        '- Housing allowance: ${housing}\n'
        '- Transportation allowance: ${transportation}\n'
        '- Other allowances: ${other_allowances}\n'
        'Total: ${total_compensation}\n\n'
        'This is a ${contract_type} contract with a probation period of '
        '${probation_period} months. Working hours: ${working_hours}.\n\n'
        'We look forward to welcoming you.\n'
    ),
    'ar': (
        'عزيزي/عزيزتي ${candidate_name}،\n\n'
        'يسعدنا أن نعرض عليك وظيفة ${requisition_title} في قسم ${department} '
        'بالدرجة ${grade}.\n\n'
        'الراتب الأساسي: ${base_salary}\n'
        'بدل السكن: ${housing}\n'
        'بدل المواصلات: ${transportation}\n'
        'بدلات أخرى: ${other_allowances}\n'
        'الإجمالي: ${total_compensation}\n\n'
        'نوع العقد: ${contract_type}، فترة التجربة ${probation_period} أشهر. '
        'ساعات العمل: ${working_hours}.\n'
    ),
}

# Draft field that receives the rendered text, per language
LETTER_FIELDS = {'en': 'offer_letter_en', 'ar': 'offer_letter_ar'}

# Payload defaults the letter relies on when the draft never set them
_LETTER_DEFAULTS = {'contract_type': 'permanent', 'probation_period': 3}


class InMemoryLetterTemplateStore:
    def __init__(self, templates: dict[str, str] | None = None):
        self._templates = dict(DEFAULT_LETTER_TEMPLATES if templates is None else templates)

    def get_template(self, *, language: str) -> str | None:
        return self._templates.get(language)


def _letter_variables(fields: Mapping[str, Any]) -> dict[str, str]:
    fields = {**_LETTER_DEFAULTS, **fields}
    variables = {
        key: str(value.value if hasattr(value, 'value') else value)
        for key, value in fields.items()
        if value not in (None, '') and not isinstance(value, (dict, list))
    }

    raw = fields.get('compensation')
    if raw is not None:
        compensation = raw if isinstance(raw, Compensation) else Compensation.model_validate(raw)
        variables.update(
            base_salary=f'{compensation.base_salary:,.2f}',
            housing=f'{compensation.housing:,.2f}',
            transportation=f'{compensation.transportation:,.2f}',
            other_allowances=f'{compensation.other_allowances:,.2f}',
            total_compensation=f'{compensation.total:,.2f}',
        )
    return variables


def render_offer_letter(
    fields: Mapping[str, Any],
    language: str,
    *,
    store: InMemoryLetterTemplateStore | None = None,
    renderer: LetterRenderer | None = None,
) -> Outcome[dict[str, str]]:
    """Render the letter for ``language`` into a draft patch."""
    store = store or InMemoryLetterTemplateStore()
    renderer = renderer or LetterRenderer()

    template = store.get_template(language=language)
    if template is None or language not in LETTER_FIELDS:
        return Outcome.failure(
            ValidationFailed(f"No offer letter template for language '{language}'")
        )

    try:
        text = renderer.render(template, _letter_variables(fields), language=language)
    except MissingLetterVariables as exc:
        return Outcome.failure(
            ValidationFailed(str(exc), details={'language': exc.language, 'missing': exc.names})
        )

    return Outcome.success({LETTER_FIELDS[language]: text})
