from datetime import date

from hrflow.domain.candidates import CandidateProfile
from hrflow.runtime.prefill import InMemoryCandidateDirectory

SARA = CandidateProfile(
    id="CAND-001",
    name="Sara Ahmed",
    email="sara.ahmed@example.com",
    phone="+966500000001",
    position="Backend Engineer",
    department="Engineering",
    manager="Omar Khalid",
    national_id="1000000001",
    start_date=date(2024, 4, 1),
    joining_location="Riyadh HQ",
    contract_type="permanent",
    employee_type="full_time",
    requisition_id="REQ-100",
    requisition_title="Backend Engineer",
)

LINA = CandidateProfile(
    id="CAND-002",
    name="Lina Haddad",
    email="lina.haddad@example.com",
    position="Product Designer",
    department="Design",
    requisition_id="REQ-200",
    requisition_title="Product Designer",
)


def candidate_directory(delay: float = 0.0) -> InMemoryCandidateDirectory:
    return InMemoryCandidateDirectory([SARA, LINA], delay=delay)
