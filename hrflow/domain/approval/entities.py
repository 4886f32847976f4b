# ============================================================
# Business/domain entities
# ============================================================
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ApproverStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Approver(BaseModel):
    """One link in an approval chain.

    List position implies review order for display only.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    position: str
    status: ApproverStatus = ApproverStatus.PENDING
    timestamp: Optional[datetime] = None
    comment: Optional[str] = None
