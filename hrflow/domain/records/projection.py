# ============================================================
# Read-only projections over the record collection
# ============================================================
from dataclasses import dataclass, field
from datetime import date
from typing import Literal, Optional, Sequence, Union

from hrflow.core.errors import ValidationFailed
from hrflow.core.results import Outcome
from hrflow.domain.workflow.entities import (
    HistoryAction,
    Record,
    RecordStatus,
    WorkflowDefinition,
)


@dataclass(frozen=True)
class RecordFilters:
    status: Union[RecordStatus, Literal["all"]] = "all"
    requisition_id: Optional[str] = None
    creator: Optional[str] = None
    search: str = ""
    created_from: Optional[date] = None
    created_to: Optional[date] = None


@dataclass(frozen=True)
class PageMeta:
    total: int
    page: int
    page_size: int
    has_next: bool
    has_previous: bool


@dataclass(frozen=True)
class RecordStatistics:
    total: int
    by_status: dict[str, int] = field(default_factory=dict)
    sent: int = 0
    approved: int = 0
    signed: int = 0
    expired_or_declined: int = 0
    avg_days_to_sign: Optional[float] = None


def apply_filters(
    records: Sequence[Record],
    filters: RecordFilters,
    definition: WorkflowDefinition,
) -> Outcome[list[Record]]:
    """Filter records without reordering or mutating them.

    Search is a case-insensitive substring match over the workflow's
    name/title fields; date bounds are inclusive on ``created_at``.
    """
    if (
        filters.created_from is not None
        and filters.created_to is not None
        and filters.created_from > filters.created_to
    ):
        return Outcome.failure(
            ValidationFailed(
                "created_from must not be after created_to",
                details={
                    "created_from": filters.created_from.isoformat(),
                    "created_to": filters.created_to.isoformat(),
                },
            )
        )

    needle = filters.search.strip().lower()
    matched: list[Record] = []

    for record in records:
        if filters.status != "all" and record.status != filters.status:
            continue
        if (
            filters.requisition_id is not None
            and definition.requisition_id(record.payload) != filters.requisition_id
        ):
            continue
        if filters.creator is not None and record.creator != filters.creator:
            continue
        if needle and not any(
            needle in (text or "").lower() for text in definition.search_fields(record.payload)
        ):
            continue
        created = record.created_at.date()
        if filters.created_from is not None and created < filters.created_from:
            continue
        if filters.created_to is not None and created > filters.created_to:
            continue
        matched.append(record)

    return Outcome.success(matched)


def paginate(records: Sequence[Record], page: int, page_size: int) -> list[Record]:
    """1-indexed slice; pages outside the collection are empty."""
    if page < 1 or page_size < 1:
        return []
    start = (page - 1) * page_size
    return list(records[start:start + page_size])


def page_meta(total: int, page: int, page_size: int) -> PageMeta:
    return PageMeta(
        total=total,
        page=page,
        page_size=page_size,
        has_next=page >= 1 and page * page_size < total,
        has_previous=page > 1,
    )


def record_statistics(records: Sequence[Record]) -> RecordStatistics:
    by_status: dict[str, int] = {}
    for record in records:
        by_status[record.status.value] = by_status.get(record.status.value, 0) + 1

    days_to_sign: list[float] = []
    for record in records:
        signed_at = next(
            (e.timestamp for e in record.history if e.action == HistoryAction.SIGNED),
            None,
        )
        if signed_at is not None:
            days_to_sign.append((signed_at - record.created_at).total_seconds() / 86400)

    return RecordStatistics(
        total=len(records),
        by_status=by_status,
        sent=by_status.get(RecordStatus.SENT.value, 0),
        approved=by_status.get(RecordStatus.APPROVED.value, 0),
        signed=by_status.get(RecordStatus.SIGNED.value, 0),
        expired_or_declined=(
            by_status.get(RecordStatus.EXPIRED.value, 0)
            + by_status.get(RecordStatus.DECLINED.value, 0)
        ),
        avg_days_to_sign=(
            round(sum(days_to_sign) / len(days_to_sign), 1) if days_to_sign else None
        ),
    )
