# ============================================================
# Candidate profiles used to prefill wizard drafts
# ============================================================
from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class CandidateProfile:
    id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    position: str = ""
    department: str = ""
    manager: str = ""
    national_id: str = ""
    start_date: Optional[date] = None
    joining_location: str = ""
    contract_type: str = ""
    employee_type: str = ""
    requisition_id: Optional[str] = None
    requisition_title: str = ""
