from typing import Optional, Generic, List, TypeVar, Any, Literal
from datetime import date
from pydantic import BaseModel, Field

from hrflow.domain.approval.entities import Approver, ApproverStatus
from hrflow.domain.onboarding.entities import TaskStatus
from hrflow.domain.workflow.entities import RecordStatus


class RecordListQuery(BaseModel):
    """
    Query filters for listing records.

    All fields are optional; an empty query returns the first page of
    every record.
    """

    # Filtering
    status: Optional[RecordStatus] = Field(
        default=None,
        description="Filter by status (omit for all statuses)"
    )

    requisition_id: Optional[str] = Field(
        default=None,
        description="Job requisition the record belongs to"
    )

    creator: Optional[str] = Field(
        default=None,
        description="User who created the record"
    )

    q: Optional[str] = Field(
        default=None,
        description="Case-insensitive search over names and titles"
    )

    created_from: Optional[date] = Field(
        default=None,
        description="Earliest creation date (inclusive)"
    )

    created_to: Optional[date] = Field(
        default=None,
        description="Latest creation date (inclusive)"
    )

    # Pagination
    page: int = Field(
        default=1,
        description="1-indexed page number; pages past the end are empty"
    )

    page_size: Optional[int] = Field(
        default=None,
        description="Records per page (defaults to the configured page size)"
    )


T = TypeVar("T")


class PaginationMeta(BaseModel):
    total: int
    page: int
    page_size: int
    has_next: bool
    has_previous: bool


class PaginatedResponse(BaseModel, Generic[T]):
    data: List[T]
    meta: PaginationMeta


class RecordStatisticsOut(BaseModel):
    total: int
    by_status: dict[str, int]
    sent: int
    approved: int
    signed: int
    expired_or_declined: int
    avg_days_to_sign: Optional[float] = None


# ------------------------------------------------------------
# Record commands
# ------------------------------------------------------------
class ApproverIn(BaseModel):
    name: str
    position: str


class RecordCreate(BaseModel):
    payload: dict[str, Any] = Field(min_length=1)
    approvers: list[ApproverIn] = Field(default_factory=list)


class RecordUpdate(BaseModel):
    payload: dict[str, Any] = Field(min_length=1)
    expected_version: Optional[int] = Field(
        default=None,
        description="Refuse the edit if the record changed since this version"
    )


class StatusChange(BaseModel):
    new_status: RecordStatus
    details: Optional[str] = None


class ApproverDecision(BaseModel):
    status: ApproverStatus
    comment: Optional[str] = None


class ApproverMove(BaseModel):
    direction: Literal["up", "down"]


# ------------------------------------------------------------
# Wizard sessions
# ------------------------------------------------------------
class SessionCreate(BaseModel):
    seed_record_id: Optional[str] = None


class DraftPatch(BaseModel):
    fields: dict[str, Any]


class StepJump(BaseModel):
    step: int


class TemplateChoice(BaseModel):
    template: str


class PrefillRequest(BaseModel):
    candidate_id: str = Field(min_length=1)


class TaskIn(BaseModel):
    title: str
    assignee: str = ""
    due_date: Optional[date] = None


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    assignee: Optional[str] = None
    due_date: Optional[date] = None
    status: Optional[TaskStatus] = None


class SessionView(BaseModel):
    session_id: str
    kind: str
    record_id: Optional[str] = None
    current_step: int
    total_steps: int
    step_key: str
    step_label: str
    progress: float
    can_advance: bool
    is_dirty: bool
    errors: dict[str, str]
    fields: dict[str, Any]
    approval_chain: list[Approver]
    chain_status: RecordStatus
    # Share of completed checklist tasks; onboardings only
    task_progress: Optional[float] = None


class AdvanceResponse(BaseModel):
    committed: bool
    session: Optional[SessionView] = None
    record: Optional[dict[str, Any]] = None


class PrefillResponse(BaseModel):
    outcome: str
    reason: Optional[str] = None
    session: SessionView
