from fastapi import FastAPI

from hrflow.domain.offers.workflow import OFFER_WORKFLOW
from hrflow.domain.onboarding.workflow import ONBOARDING_WORKFLOW
from .checklists import router as checklists_router
from .letters import router as letters_router
from .records import build_records_router
from .sessions import build_sessions_router


def register_routes(app: FastAPI):
    # Session routes go first so "/offers/sessions/..." never reaches "/offers/{record_id}"
    app.include_router(letters_router, prefix="/v1")
    app.include_router(checklists_router, prefix="/v1")
    app.include_router(build_sessions_router("offers", "Offers"), prefix="/v1")
    app.include_router(build_sessions_router("onboardings", "Onboardings"), prefix="/v1")
    app.include_router(build_records_router("offers", OFFER_WORKFLOW, "Offers"), prefix="/v1")
    app.include_router(build_records_router("onboardings", ONBOARDING_WORKFLOW, "Onboardings"), prefix="/v1")
