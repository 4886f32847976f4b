from fastapi import APIRouter, Depends

from hrflow.api.core.container import Container, get_container
from hrflow.api.core.dependencies import unwrap
from hrflow.api.schemas import SessionView
from hrflow.domain.offers.letters import render_offer_letter
from .sessions import session_or_404, session_view

router = APIRouter(prefix="/offers/sessions", tags=["Offers"])


@router.post(
    "/{session_id}/letter/{language}",
    summary="Generate the offer letter",
    description="Fills the letter template for the language from the draft and stores the text in the draft.",
    response_model=SessionView,
)
async def generate_letter(
    session_id: str,
    language: str,
    container: Container = Depends(get_container),
):
    session = session_or_404(container.workflow("offers"), session_id)
    unwrap(
        session.update_with(
            lambda draft: render_offer_letter(draft.fields, language, store=container.letters)
        )
    )
    return session_view(session)
