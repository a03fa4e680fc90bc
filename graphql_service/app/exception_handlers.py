"""Problem detail responses for failures outside GraphQL execution.

GraphQL requests never get here. Strawberry answers an unreadable GraphQL body
with a plain-text 400, and anything a data fetcher raises is resolved into a
GraphQL error inside a 200 response. What remains are the non-GraphQL routes
(metrics, GraphiQL, routes an application adds) and failures in the stack
around them. Those are rendered as RFC 7807 problem details carrying the same
``classification`` a GraphQL error for the exception would have, so clients can
treat both kinds of error alike.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from graphql_service.core.exceptions import AppException
from graphql_service.core.schemas.error import ProblemDetail

logger = logging.getLogger(__name__)

PROBLEM_JSON = "application/problem+json"
CLASSIFICATION = "classification"


def _problem_response(
    request: Request, problem: ProblemDetail, members: dict[str, Any]
) -> JSONResponse:
    body = problem.model_dump(exclude_none=True)
    body.update(members)
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        body["request_id"] = request_id
    return JSONResponse(status_code=problem.status, content=body, media_type=PROBLEM_JSON)


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Render a classified exception raised outside a data fetcher.

    ``extra`` entries become extension members next to ``classification``,
    matching the extensions of the equivalent GraphQL error.
    """
    logger.warning(
        "Classified exception outside GraphQL execution",
        extra={
            "path": request.url.path,
            "method": request.method,
            "classification": exc.classification,
            "status_code": exc.status_code,
            "detail": exc.detail,
        },
    )
    problem = ProblemDetail(
        type=exc.type,
        title=exc.title,
        status=exc.status_code,
        detail=exc.detail,
        instance=exc.instance or str(request.url),
    )
    members = {**exc.extra, CLASSIFICATION: exc.classification}
    return _problem_response(request, problem, members)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render an unexpected failure as an ``INTERNAL_ERROR`` without its message."""
    logger.error(
        "Unexpected exception outside GraphQL execution",
        extra={
            "path": request.url.path,
            "method": request.method,
            "exception_type": type(exc).__name__,
        },
        exc_info=exc,
    )
    problem = ProblemDetail(
        type="internal-error",
        title="Internal Server Error",
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="An unexpected error occurred while processing your request",
        instance=str(request.url),
    )
    return _problem_response(request, problem, {CLASSIFICATION: AppException.classification})


def configure_exception_handlers(app: FastAPI) -> None:
    """Register the problem detail exception handlers on ``app``."""
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    logger.debug("Exception handlers configured")
