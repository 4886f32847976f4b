"""Typed onboarding payload."""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

DEFAULT_REQUIRED_DOCUMENTS = ['passport', 'national_id', 'certificates', 'bank_info', 'signed_offer']


class TaskStatus(str, Enum):
    PENDING = 'pending'
    IN_PROGRESS = 'in_progress'
    COMPLETED = 'completed'


class EmployeeProfile(BaseModel):
    name: str = ''
    email: Optional[EmailStr] = None
    phone: str = ''
    position: str = ''
    department: str = ''
    manager: str = ''
    national_id: str = ''
    start_date: Optional[date] = None
    joining_location: str = ''
    contract_type: str = ''
    employee_type: str = ''


class CustomDocument(BaseModel):
    id: str
    name: str = Field(min_length=1)
    description: str = ''
    required: bool = False


class OnboardingTask(BaseModel):
    id: str
    title: str = Field(min_length=1)
    assignee: str = ''
    due_date: Optional[date] = None
    status: TaskStatus = TaskStatus.PENDING


class OnboardingPayload(BaseModel):
    """Everything an onboarding carries besides its lifecycle fields."""

    candidate_id: str = ''
    requisition_id: Optional[str] = None
    employee: EmployeeProfile = Field(default_factory=EmployeeProfile)
    owner: str = ''
    required_documents: list[str] = Field(default_factory=lambda: list(DEFAULT_REQUIRED_DOCUMENTS))
    custom_documents: list[CustomDocument] = Field(default_factory=list)
    tasks: list[OnboardingTask] = Field(default_factory=list)
