from fastapi import APIRouter, Depends

from hrflow.api.core.container import Container, get_container
from hrflow.api.core.dependencies import unwrap
from hrflow.api.schemas import SessionView, TaskIn, TaskUpdate, TemplateChoice
from hrflow.core.results import Outcome
from hrflow.domain.onboarding import tasks as checklist
from .sessions import session_or_404, session_view

router = APIRouter(prefix="/onboardings/sessions", tags=["Onboardings"])


@router.post("/{session_id}/tasks", status_code=201, response_model=SessionView)
async def add_task(
    session_id: str,
    body: TaskIn,
    container: Container = Depends(get_container),
):
    session = session_or_404(container.workflow("onboardings"), session_id)

    def change(draft):
        added = checklist.add_task(draft.fields.get("tasks") or [], body.model_dump())
        if not added.ok:
            return Outcome.failure(added.error)
        return Outcome.success({"tasks": added.value})

    unwrap(session.update_with(change))
    return session_view(session)


@router.post("/{session_id}/tasks/template", response_model=SessionView)
async def apply_task_template(
    session_id: str,
    body: TemplateChoice,
    container: Container = Depends(get_container),
):
    """Replace the draft's checklist with a predefined one."""
    session = session_or_404(container.workflow("onboardings"), session_id)

    def change(draft):
        built = checklist.apply_task_template(body.template)
        if not built.ok:
            return Outcome.failure(built.error)
        return Outcome.success({"tasks": built.value})

    unwrap(session.update_with(change))
    return session_view(session)


@router.delete("/{session_id}/tasks/{task_id}", response_model=SessionView)
async def remove_task(
    session_id: str,
    task_id: str,
    container: Container = Depends(get_container),
):
    session = session_or_404(container.workflow("onboardings"), session_id)
    session.update_with(
        lambda draft: Outcome.success(
            {"tasks": checklist.remove_task(draft.fields.get("tasks") or [], task_id)}
        )
    )
    return session_view(session)


@router.patch("/{session_id}/tasks/{task_id}", response_model=SessionView)
async def update_task(
    session_id: str,
    task_id: str,
    body: TaskUpdate,
    container: Container = Depends(get_container),
):
    """Change a checklist task; only the fields sent are touched."""
    session = session_or_404(container.workflow("onboardings"), session_id)
    changes = body.model_dump(exclude_unset=True, mode="json")

    def change(draft):
        updated = checklist.update_task(draft.fields.get("tasks") or [], task_id, changes)
        if not updated.ok:
            return Outcome.failure(updated.error)
        return Outcome.success({"tasks": updated.value})

    unwrap(session.update_with(change))
    return session_view(session)
