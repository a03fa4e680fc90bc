"""Interceptor that logs every GraphQL request handled over HTTP or WebSocket."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from graphql_service.features.graphql.web.interceptor import WebInterceptor
from graphql_service.infra.logging.context import remove_from_log_context, set_log_context

if TYPE_CHECKING:
    from graphql_service.features.graphql.web.interceptor import Chain
    from graphql_service.features.graphql.web.io import WebInput, WebOutput

logger = logging.getLogger(__name__)


class RequestLoggingInterceptor(WebInterceptor):
    """Log request start and completion with the operation name.

    The operation name is added to the log context for the duration of the
    request, so log records emitted by data fetchers carry it too. Variables
    are never logged.
    """

    def __init__(self, level: int = logging.INFO) -> None:
        self.level = level

    async def intercept(self, web_input: WebInput, chain: Chain) -> WebOutput:
        operation_name = web_input.operation_name or "anonymous"
        set_log_context(operation_name=operation_name)
        start_time = time.perf_counter()
        logger.debug(
            "GraphQL request started",
            extra={"event": "graphql_request", "uri": web_input.uri, "request_id": web_input.id},
        )
        try:
            output = await chain(web_input)
        except Exception:
            logger.exception(
                "GraphQL request failed",
                extra={
                    "event": "graphql_request",
                    "duration_ms": round((time.perf_counter() - start_time) * 1000, 2),
                },
            )
            raise
        finally:
            remove_from_log_context("operation_name")

        logger.log(
            self.level,
            "GraphQL request completed",
            extra={
                "event": "graphql_request",
                "operation_name": operation_name,
                "duration_ms": round((time.perf_counter() - start_time) * 1000, 2),
                "error_count": len(output.errors),
                "subscription": output.is_subscription,
            },
        )
        return output


__all__ = ["RequestLoggingInterceptor"]
