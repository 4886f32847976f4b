from fastapi import APIRouter, Depends, Response

from hrflow.api.core.container import Container, WorkflowServices, get_container
from hrflow.api.core.dependencies import get_actor, http_error, unwrap
from hrflow.api.schemas import (
    AdvanceResponse,
    ApproverIn,
    ApproverMove,
    DraftPatch,
    PrefillRequest,
    PrefillResponse,
    SessionCreate,
    SessionView,
    StepJump,
    TemplateChoice,
)
from hrflow.core.errors import RecordNotFound
from hrflow.domain.approval.chain import derive_chain_status
from hrflow.domain.onboarding.tasks import task_progress
from hrflow.runtime.prefill import prefill_session
from hrflow.runtime.sessions import WizardSession


def session_view(session: WizardSession) -> SessionView:
    draft = session.draft
    navigator = session.navigator
    step = navigator.active_step(draft)
    return SessionView(
        session_id=session.session_id,
        kind=session.definition.kind,
        record_id=draft.record_id,
        current_step=draft.current_step,
        total_steps=navigator.total_steps,
        step_key=step.key,
        step_label=step.label,
        progress=navigator.progress_fraction(draft),
        can_advance=navigator.can_advance(draft),
        is_dirty=draft.is_dirty,
        errors=draft.errors,
        fields=draft.fields,
        approval_chain=draft.approval_chain,
        chain_status=derive_chain_status(draft.approval_chain),
        task_progress=(
            task_progress(draft.fields.get("tasks") or [])
            if session.definition.kind == "onboarding"
            else None
        ),
    )


def session_or_404(services: WorkflowServices, session_id: str) -> WizardSession:
    session = services.sessions.get(session_id)
    if session is None:
        raise http_error(RecordNotFound("session", session_id))
    return session


def build_sessions_router(kind: str, tag: str) -> APIRouter:
    """Wizard routes: one session holds one draft until it is committed or cancelled."""
    router = APIRouter(prefix=f"/{kind}/sessions", tags=[tag])

    def get_services(container: Container = Depends(get_container)) -> WorkflowServices:
        return container.workflow(kind)

    @router.post(
        "",
        status_code=201,
        summary="Open a wizard session",
        description="Starts an empty draft, or a draft seeded from an existing draft record.",
        response_model=SessionView,
    )
    async def open_session(
        body: SessionCreate,
        services: WorkflowServices = Depends(get_services),
    ):
        session = unwrap(services.sessions.open(body.seed_record_id))
        return session_view(session)

    @router.get("/{session_id}", response_model=SessionView)
    async def get_session(session_id: str, services: WorkflowServices = Depends(get_services)):
        return session_view(session_or_404(services, session_id))

    @router.patch("/{session_id}", response_model=SessionView)
    async def patch_draft(
        session_id: str,
        body: DraftPatch,
        services: WorkflowServices = Depends(get_services),
    ):
        """Merge fields into the draft. Nothing is validated until the step advances."""
        session = session_or_404(services, session_id)
        unwrap(session.update(body.fields))
        return session_view(session)

    @router.delete("/{session_id}", status_code=204)
    async def cancel_session(session_id: str, services: WorkflowServices = Depends(get_services)):
        """Discard the draft; the record collection is left untouched."""
        session = session_or_404(services, session_id)
        session.cancel()
        services.sessions.close(session_id)
        return Response(status_code=204)

    # -----------------------------------------
    # Navigation
    # -----------------------------------------

    @router.post("/{session_id}/advance", response_model=AdvanceResponse)
    async def advance(
        session_id: str,
        services: WorkflowServices = Depends(get_services),
        actor: str = Depends(get_actor),
    ):
        """
        Validate the active step and move on.

        On the last step the draft is committed: the response carries the
        record and the session is closed.
        """
        session = session_or_404(services, session_id)
        result = unwrap(session.advance(actor=actor))
        if result.committed:
            services.sessions.close(session_id)
            return AdvanceResponse(committed=True, record=result.record.model_dump(mode="json"))
        return AdvanceResponse(committed=False, session=session_view(session))

    @router.post("/{session_id}/retreat", response_model=SessionView)
    async def retreat(session_id: str, services: WorkflowServices = Depends(get_services)):
        session = session_or_404(services, session_id)
        session.retreat()
        return session_view(session)

    @router.post("/{session_id}/jump", response_model=SessionView)
    async def jump(
        session_id: str,
        body: StepJump,
        services: WorkflowServices = Depends(get_services),
    ):
        session = session_or_404(services, session_id)
        unwrap(session.jump_to(body.step))
        return session_view(session)

    @router.post("/{session_id}/save", status_code=201)
    async def save(
        session_id: str,
        services: WorkflowServices = Depends(get_services),
        actor: str = Depends(get_actor),
    ):
        """Commit the draft from whatever step it is on."""
        session = session_or_404(services, session_id)
        record = unwrap(session.save(actor=actor))
        services.sessions.close(session_id)
        return record.model_dump(mode="json")

    # -----------------------------------------
    # Approval chain of the draft
    # -----------------------------------------

    @router.post("/{session_id}/approvers", status_code=201, response_model=SessionView)
    async def add_approver(
        session_id: str,
        body: ApproverIn,
        services: WorkflowServices = Depends(get_services),
    ):
        session = session_or_404(services, session_id)
        unwrap(session.add_approver(body.name, body.position))
        return session_view(session)

    @router.post("/{session_id}/approvers/template", response_model=SessionView)
    async def apply_chain_template(
        session_id: str,
        body: TemplateChoice,
        services: WorkflowServices = Depends(get_services),
    ):
        """Replace the draft's chain with a predefined one."""
        session = session_or_404(services, session_id)
        unwrap(session.apply_chain_template(body.template))
        return session_view(session)

    @router.delete("/{session_id}/approvers/{approver_id}", response_model=SessionView)
    async def remove_approver(
        session_id: str,
        approver_id: str,
        services: WorkflowServices = Depends(get_services),
    ):
        session = session_or_404(services, session_id)
        session.remove_approver(approver_id)
        return session_view(session)

    @router.post("/{session_id}/approvers/{approver_id}/move", response_model=SessionView)
    async def move_approver(
        session_id: str,
        approver_id: str,
        body: ApproverMove,
        services: WorkflowServices = Depends(get_services),
    ):
        session = session_or_404(services, session_id)
        unwrap(session.move_approver(approver_id, body.direction))
        return session_view(session)

    # -----------------------------------------
    # Candidate prefill
    # -----------------------------------------

    @router.post("/{session_id}/prefill", response_model=PrefillResponse)
    async def prefill(
        session_id: str,
        body: PrefillRequest,
        services: WorkflowServices = Depends(get_services),
        container: Container = Depends(get_container),
    ):
        """
        Copy a candidate's profile into the draft.

        The outcome is one of succeeded, failed, cancelled or timed_out; the
        draft is only touched on success.
        """
        session = session_or_404(services, session_id)
        result = await prefill_session(
            session,
            container.candidates,
            body.candidate_id,
            timeout=container.settings.prefill_timeout_seconds,
        )
        return PrefillResponse(
            outcome=result.outcome.value,
            reason=result.reason,
            session=session_view(session),
        )

    return router
