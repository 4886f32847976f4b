"""FastAPI service for HR offer and onboarding workflows.

Two kinds of client sit on top of the same engine:
- wizard sessions, which edit one draft step by step until it is committed
- record routes, which list, edit, transition and approve committed records

Important:
- Every recoverable failure comes back as a structured 404, 409 or 422
- State lives in memory; restarting the service starts from an empty collection
"""

from __future__ import annotations

from fastapi import FastAPI

from hrflow.api.routes import register_routes

tags_metadata = [
    {
        "name": "Offers",
        "description": "Offer wizard sessions, offer records, their approval chain and status"
    },
    {
        "name": "Onboardings",
        "description": "Onboarding wizard sessions, task checklists and onboarding records"
    },
]

app = FastAPI(
    title='HR Workflow Engine',
    version='1.0.0',
    description='Stepwise offer and onboarding workflows',
    openapi_tags=tags_metadata
)

# Register all API routes
register_routes(app)
