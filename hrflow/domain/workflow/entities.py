# ============================================================
# Business/domain entities
# ============================================================
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Generic, Mapping, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from hrflow.domain.approval.entities import Approver


class RecordStatus(str, Enum):
    DRAFT = "draft"
    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"
    REJECTED = "rejected"
    SENT = "sent"
    SIGNED = "signed"
    DECLINED = "declined"
    EXPIRED = "expired"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class HistoryAction(str, Enum):
    CREATED = "created"
    EDITED = "edited"
    APPROVED = "approved"
    REJECTED = "rejected"
    SENT = "sent"
    SIGNED = "signed"
    DECLINED = "declined"


class HistoryEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    action: HistoryAction
    timestamp: datetime
    actor: str
    details: Optional[str] = None


P = TypeVar("P", bound=BaseModel)


class Record(BaseModel, Generic[P]):
    """A committed, identified work item (an offer or an onboarding)."""
    id: str
    kind: str
    status: RecordStatus
    creator: str
    created_at: datetime
    updated_at: datetime
    payload: P
    approval_chain: list[Approver] = Field(default_factory=list)
    history: list[HistoryEntry]
    version: int = 1


class Draft(BaseModel):
    """The single in-flight record of a wizard session.

    ``fields`` is a partial payload; it is only validated against the typed
    payload model on commit.
    """
    record_id: Optional[str] = None
    base_version: Optional[int] = None
    status: Optional[RecordStatus] = None
    fields: dict[str, Any] = Field(default_factory=dict)
    approval_chain: list[Approver] = Field(default_factory=list)
    current_step: int = 1
    is_dirty: bool = False
    errors: dict[str, str] = Field(default_factory=dict)
    generation: int = 0


@dataclass(frozen=True)
class StepDescriptor:
    key: str
    label: str
    # Returns field -> message for everything blocking "Next"
    validate: Callable[[Draft], dict[str, str]]

    def is_valid(self, draft: Draft) -> bool:
        return not self.validate(draft)


@dataclass(frozen=True)
class WorkflowDefinition:
    """Static description of a wizard and of the records it produces."""
    kind: str
    steps: tuple[StepDescriptor, ...]
    payload_model: type[BaseModel]
    transitions: Mapping[RecordStatus, frozenset[RecordStatus]]
    search_fields: Callable[[Any], list[str]]
    requisition_id: Callable[[Any], Optional[str]]
    prefill: Optional[Callable[[Any], dict[str, Any]]] = None
    record_model: type = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "record_model", Record[self.payload_model])

    @property
    def total_steps(self) -> int:
        return len(self.steps)

    def step(self, number: int) -> StepDescriptor:
        return self.steps[number - 1]
