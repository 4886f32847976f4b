"""Offer wizard: Setup -> Letter -> Approval -> Send -> Signature."""

from __future__ import annotations

from typing import Any, Mapping

from hrflow.domain.approval.chain import derive_chain_status
from hrflow.domain.candidates import CandidateProfile
from hrflow.domain.workflow.entities import (
    Draft,
    RecordStatus,
    StepDescriptor,
    WorkflowDefinition,
)
from hrflow.domain.workflow.transitions import OFFER_TRANSITIONS
from .entities import DeliveryChannel, OfferPayload, SignatureMethod


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _get(mapping: Any, key: str, default: Any = None) -> Any:
    if isinstance(mapping, Mapping):
        return mapping.get(key, default)
    return getattr(mapping, key, default)


def validate_setup(draft: Draft) -> dict[str, str]:
    errors = {}
    if _blank(draft.fields.get('candidate_id')):
        errors['candidate_id'] = 'Select a candidate'
    if _blank(draft.fields.get('requisition_id')):
        errors['requisition_id'] = 'Select a job requisition'
    return errors


def validate_letter(draft: Draft) -> dict[str, str]:
    errors = {}
    base_salary = _get(draft.fields.get('compensation') or {}, 'base_salary', 0)
    try:
        salary_ok = float(base_salary or 0) > 0
    except (TypeError, ValueError):
        salary_ok = False
    if not salary_ok:
        errors['compensation.base_salary'] = 'Base salary must be greater than zero'
    if _blank(draft.fields.get('offer_letter_en')) and _blank(draft.fields.get('offer_letter_ar')):
        errors['offer_letter'] = 'Write the offer letter in at least one language'
    return errors


def validate_approval(draft: Draft) -> dict[str, str]:
    if derive_chain_status(draft.approval_chain) == RecordStatus.REJECTED:
        return {'approval_chain': 'The approval chain contains a rejection'}
    return {}


def validate_send(draft: Draft) -> dict[str, str]:
    channel = draft.fields.get('delivery_channel')
    if _blank(channel):
        return {'delivery_channel': 'Choose how the offer is delivered'}
    try:
        channel = DeliveryChannel(channel)
    except ValueError:
        return {'delivery_channel': f'Unknown delivery channel {channel!r}'}
    if channel == DeliveryChannel.EMAIL and _blank(draft.fields.get('candidate_email')):
        return {'candidate_email': 'An email address is required for email delivery'}
    if channel in (DeliveryChannel.SMS, DeliveryChannel.WHATSAPP) and _blank(draft.fields.get('candidate_phone')):
        return {'candidate_phone': 'A phone number is required for SMS or WhatsApp delivery'}
    return {}


def validate_signature(draft: Draft) -> dict[str, str]:
    method = draft.fields.get('signature_method')
    if _blank(method):
        return {'signature_method': 'Choose a signature method'}
    try:
        SignatureMethod(method)
    except ValueError:
        return {'signature_method': f'Unknown signature method {method!r}'}
    return {}


def prefill_from_candidate(profile: CandidateProfile) -> dict[str, Any]:
    patch: dict[str, Any] = {
        'candidate_id': profile.id,
        'candidate_name': profile.name,
        'candidate_email': profile.email,
        'candidate_phone': profile.phone,
    }
    if profile.department:
        patch['department'] = profile.department
    if profile.requisition_id:
        patch['requisition_id'] = profile.requisition_id
        patch['requisition_title'] = profile.requisition_title
    return patch


OFFER_WORKFLOW = WorkflowDefinition(
    kind='offer',
    steps=(
        StepDescriptor(key='setup', label='Offer setup', validate=validate_setup),
        StepDescriptor(key='letter', label='Offer letter', validate=validate_letter),
        StepDescriptor(key='approval', label='Approval workflow', validate=validate_approval),
        StepDescriptor(key='send', label='Send to candidate', validate=validate_send),
        StepDescriptor(key='signature', label='Signature', validate=validate_signature),
    ),
    payload_model=OfferPayload,
    transitions=OFFER_TRANSITIONS,
    search_fields=lambda p: [p.candidate_name, p.requisition_title],
    requisition_id=lambda p: p.requisition_id or None,
    prefill=prefill_from_candidate,
)
