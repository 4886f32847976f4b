from typing import Any, Optional

from fastapi import Depends, Header, HTTPException

from hrflow.core.errors import (
    PreconditionFailed,
    RecordNotFound,
    ValidationFailed,
    WorkflowError,
)
from hrflow.core.results import Outcome
from .container import Container, get_container


def get_actor(
    x_actor: Optional[str] = Header(default=None),
    container: Container = Depends(get_container),
) -> str:
    """The acting user; falls back to the configured default."""
    return x_actor or container.settings.current_user


def http_error(error: WorkflowError) -> HTTPException:
    detail = {"reason": error.reason, **error.details}
    if isinstance(error, RecordNotFound):
        return HTTPException(status_code=404, detail=detail)
    if isinstance(error, PreconditionFailed):
        return HTTPException(status_code=409, detail=detail)
    if isinstance(error, ValidationFailed):
        return HTTPException(status_code=422, detail=detail)
    return HTTPException(status_code=400, detail=detail)


def unwrap(outcome: Outcome[Any]) -> Any:
    if not outcome.ok:
        raise http_error(outcome.error)
    return outcome.value
