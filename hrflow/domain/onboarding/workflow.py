"""Onboarding wizard: Profile -> Documents -> Owner -> Tasks -> Review."""

from __future__ import annotations

from typing import Any, Mapping

from hrflow.domain.candidates import CandidateProfile
from hrflow.domain.workflow.entities import Draft, StepDescriptor, WorkflowDefinition
from hrflow.domain.workflow.transitions import ONBOARDING_TRANSITIONS
from .entities import OnboardingPayload

_PROFILE_REQUIRED = {
    'name': 'Employee name is required',
    'email': 'Employee email is required',
    'position': 'Position is required',
    'department': 'Department is required',
    'start_date': 'Start date is required',
}


def _employee(draft: Draft) -> Mapping[str, Any]:
    employee = draft.fields.get('employee') or {}
    if isinstance(employee, Mapping):
        return employee
    return employee.model_dump()


def validate_profile(draft: Draft) -> dict[str, str]:
    employee = _employee(draft)
    return {
        f'employee.{key}': message
        for key, message in _PROFILE_REQUIRED.items()
        if not str(employee.get(key) or '').strip()
    }


def validate_documents(draft: Draft) -> dict[str, str]:
    if 'required_documents' in draft.fields:
        documents = draft.fields.get('required_documents') or []
    else:
        # Untouched drafts get the default document list on commit
        documents = OnboardingPayload().required_documents
    if not documents and not draft.fields.get('custom_documents'):
        return {'required_documents': 'Request at least one document'}
    return {}


def validate_owner(draft: Draft) -> dict[str, str]:
    if not str(draft.fields.get('owner') or '').strip():
        return {'owner': 'Assign an onboarding owner'}
    return {}


def validate_tasks(draft: Draft) -> dict[str, str]:
    if not draft.fields.get('tasks'):
        return {'tasks': 'Add at least one onboarding task'}
    return {}


def validate_review(draft: Draft) -> dict[str, str]:
    return {}


def prefill_from_candidate(profile: CandidateProfile) -> dict[str, Any]:
    return {
        'candidate_id': profile.id,
        'requisition_id': profile.requisition_id,
        'employee': {
            'name': profile.name,
            'email': profile.email,
            'phone': profile.phone or '',
            'position': profile.position,
            'department': profile.department,
            'manager': profile.manager,
            'national_id': profile.national_id,
            'start_date': profile.start_date,
            'joining_location': profile.joining_location,
            'contract_type': profile.contract_type,
            'employee_type': profile.employee_type,
        },
    }


ONBOARDING_WORKFLOW = WorkflowDefinition(
    kind='onboarding',
    steps=(
        StepDescriptor(key='employee_profile', label='Employee profile', validate=validate_profile),
        StepDescriptor(key='documents', label='Required documents', validate=validate_documents),
        StepDescriptor(key='owner', label='Onboarding owner', validate=validate_owner),
        StepDescriptor(key='tasks', label='Onboarding tasks', validate=validate_tasks),
        StepDescriptor(key='review', label='Review and confirm', validate=validate_review),
    ),
    payload_model=OnboardingPayload,
    transitions=ONBOARDING_TRANSITIONS,
    search_fields=lambda p: [p.employee.name, p.employee.position],
    requisition_id=lambda p: p.requisition_id,
    prefill=prefill_from_candidate,
)
