"""Typed offer payload."""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class ContractType(str, Enum):
    PERMANENT = 'permanent'
    TEMPORARY = 'temporary'
    CONTRACT = 'contract'


class DeliveryChannel(str, Enum):
    EMAIL = 'email'
    WHATSAPP = 'whatsapp'
    SMS = 'sms'
    PORTAL = 'portal'


class SignatureMethod(str, Enum):
    DOCUSIGN = 'docusign'
    ADOBESIGN = 'adobesign'
    MANUAL = 'manual'


class Bonus(BaseModel):
    type: str = Field(min_length=1)
    amount: float = Field(ge=0)


class Compensation(BaseModel):
    base_salary: float = Field(default=0, ge=0)
    housing: float = Field(default=0, ge=0)
    transportation: float = Field(default=0, ge=0)
    other_allowances: float = Field(default=0, ge=0)
    bonuses: list[Bonus] = Field(default_factory=list)

    @property
    def total(self) -> float:
        return self.base_salary + self.housing + self.transportation + self.other_allowances


class OfferPayload(BaseModel):
    """Everything an offer carries besides its lifecycle fields."""

    requisition_id: str = ''
    requisition_title: str = ''
    candidate_id: str = ''
    candidate_name: str = ''
    candidate_email: Optional[EmailStr] = None
    candidate_phone: Optional[str] = None
    department: str = ''
    grade: str = ''
    compensation: Compensation = Field(default_factory=Compensation)
    benefits: list[str] = Field(default_factory=list)
    working_hours: str = ''
    contract_type: ContractType = ContractType.PERMANENT
    probation_period: int = Field(default=3, ge=0, description='Months')
    offer_letter_en: Optional[str] = None
    offer_letter_ar: Optional[str] = None
    delivery_channel: Optional[DeliveryChannel] = None
    expiry_date: Optional[date] = None
    signature_method: Optional[SignatureMethod] = None
