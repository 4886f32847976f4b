from fastapi import APIRouter, Depends, Response

from hrflow.api.core.container import Container, WorkflowServices, get_container
from hrflow.api.core.dependencies import get_actor, http_error, unwrap
from hrflow.api.schemas import (
    ApproverDecision,
    ApproverIn,
    ApproverMove,
    PaginatedResponse,
    PaginationMeta,
    RecordCreate,
    RecordListQuery,
    RecordStatisticsOut,
    RecordUpdate,
    StatusChange,
)
from hrflow.core.errors import RecordNotFound, ValidationFailed
from hrflow.domain.approval import chain as approval_chain
from hrflow.domain.records.projection import (
    RecordFilters,
    apply_filters,
    page_meta,
    paginate,
    record_statistics,
)
from hrflow.domain.workflow.drafts import DraftStore, draft_slot_keys
from hrflow.domain.workflow.entities import WorkflowDefinition


def build_records_router(kind: str, definition: WorkflowDefinition, tag: str) -> APIRouter:
    """CRUD, status and approver routes for one kind of record."""
    router = APIRouter(prefix=f"/{kind}", tags=[tag])

    def get_services(container: Container = Depends(get_container)) -> WorkflowServices:
        return container.workflow(kind)

    record_model = definition.record_model

    @router.get(
        "",
        summary=f"List {kind}",
        description="Returns records filtered by status, requisition, creator, text and creation date.",
        response_model=PaginatedResponse[record_model],
    )
    async def list_records(
        q: RecordListQuery = Depends(),
        services: WorkflowServices = Depends(get_services),
        container: Container = Depends(get_container),
    ):
        """
        List records with optional filters.

        Query Parameters:
        - status: Filter by record status
        - requisition_id: Filter by job requisition
        - creator: Filter by creator
        - q: Free-text search over names and titles
        - created_from / created_to: Inclusive creation date range
        - page / page_size: Pagination (page is 1-indexed)
        """
        filters = RecordFilters(
            status=q.status or "all",
            requisition_id=q.requisition_id,
            creator=q.creator,
            search=q.q or "",
            created_from=q.created_from,
            created_to=q.created_to,
        )
        page_size = min(
            q.page_size or container.settings.default_page_size,
            container.settings.max_page_size,
        )

        matched = unwrap(apply_filters(services.repository.list(), filters, services.definition))
        meta = page_meta(len(matched), q.page, page_size)

        return PaginatedResponse[record_model](
            data=paginate(matched, q.page, page_size),
            meta=PaginationMeta(
                total=meta.total,
                page=meta.page,
                page_size=meta.page_size,
                has_next=meta.has_next,
                has_previous=meta.has_previous,
            ),
        )

    @router.get("/statistics", response_model=RecordStatisticsOut)
    async def get_statistics(services: WorkflowServices = Depends(get_services)):
        stats = record_statistics(services.repository.list())
        return RecordStatisticsOut(**stats.__dict__)

    @router.get("/{record_id}", response_model=record_model)
    async def get_record(record_id: str, services: WorkflowServices = Depends(get_services)):
        """Get a specific record."""
        record = services.repository.get(record_id)
        if record is None:
            raise http_error(RecordNotFound(services.definition.kind, record_id))
        return record

    @router.post("", status_code=201, response_model=record_model)
    async def create_record(
        body: RecordCreate,
        services: WorkflowServices = Depends(get_services),
        actor: str = Depends(get_actor),
    ):
        """Commit a new record in one call, without a wizard session."""
        _refuse_draft_slots(body.payload)
        chain = []
        for approver in body.approvers:
            chain = unwrap(approval_chain.add_approver(chain, approver.name, approver.position))

        store = DraftStore()
        store.init_draft()
        draft = store.update_draft({**body.payload, "approval_chain": chain})
        return unwrap(services.lifecycle.commit_draft(draft, actor=actor))

    @router.put("/{record_id}", response_model=record_model)
    async def update_record(
        record_id: str,
        body: RecordUpdate,
        services: WorkflowServices = Depends(get_services),
        actor: str = Depends(get_actor),
    ):
        """Commit an edit of a draft record."""
        _refuse_draft_slots(body.payload)
        existing = services.repository.get(record_id)
        if existing is None:
            raise http_error(RecordNotFound(services.definition.kind, record_id))

        store = DraftStore()
        store.init_draft(seed=existing)
        draft = store.update_draft(body.payload)
        if body.expected_version is not None:
            draft = draft.model_copy(update={"base_version": body.expected_version})
        return unwrap(services.lifecycle.commit_draft(draft, actor=actor))

    @router.delete("/{record_id}", status_code=204)
    async def delete_record(record_id: str, services: WorkflowServices = Depends(get_services)):
        """Delete a draft record; anything past draft answers 409."""
        unwrap(services.lifecycle.delete_record(record_id))
        return Response(status_code=204)

    @router.post("/{record_id}/duplicate", status_code=201, response_model=record_model)
    async def duplicate_record(
        record_id: str,
        services: WorkflowServices = Depends(get_services),
        actor: str = Depends(get_actor),
    ):
        return unwrap(services.lifecycle.duplicate_record(record_id, actor=actor))

    @router.patch("/{record_id}/status", response_model=record_model)
    async def change_status(
        record_id: str,
        body: StatusChange,
        services: WorkflowServices = Depends(get_services),
        actor: str = Depends(get_actor),
    ):
        return unwrap(
            services.lifecycle.transition_status(
                record_id, body.new_status, actor=actor, details=body.details
            )
        )

    # -----------------------------------------
    # Approval chain
    # -----------------------------------------

    @router.post("/{record_id}/approvers", status_code=201, response_model=record_model)
    async def add_approver(
        record_id: str,
        body: ApproverIn,
        services: WorkflowServices = Depends(get_services),
        actor: str = Depends(get_actor),
    ):
        return unwrap(
            services.lifecycle.add_approver(record_id, body.name, body.position, actor=actor)
        )

    @router.delete("/{record_id}/approvers/{approver_id}", response_model=record_model)
    async def remove_approver(
        record_id: str,
        approver_id: str,
        services: WorkflowServices = Depends(get_services),
        actor: str = Depends(get_actor),
    ):
        return unwrap(services.lifecycle.remove_approver(record_id, approver_id, actor=actor))

    @router.patch("/{record_id}/approvers/{approver_id}", response_model=record_model)
    async def decide_approver(
        record_id: str,
        approver_id: str,
        body: ApproverDecision,
        services: WorkflowServices = Depends(get_services),
        actor: str = Depends(get_actor),
    ):
        return unwrap(
            services.lifecycle.decide_approver(
                record_id, approver_id, body.status, body.comment, actor=actor
            )
        )

    @router.post("/{record_id}/approvers/{approver_id}/move", response_model=record_model)
    async def move_approver(
        record_id: str,
        approver_id: str,
        body: ApproverMove,
        services: WorkflowServices = Depends(get_services),
        actor: str = Depends(get_actor),
    ):
        return unwrap(
            services.lifecycle.move_approver(record_id, approver_id, body.direction, actor=actor)
        )

    return router


def _refuse_draft_slots(payload: dict) -> None:
    # Approvers go through the approver routes, status through PATCH /status
    slots = draft_slot_keys(payload)
    if slots:
        raise http_error(
            ValidationFailed(f"Cannot set {', '.join(slots)} in the payload", details={"fields": slots})
        )
