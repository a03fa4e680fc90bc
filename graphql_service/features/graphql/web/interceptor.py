"""Web interception.

Interceptors wrap the handling of every GraphQL request arriving over HTTP
or WebSocket. Each one receives the ``WebInput`` and the rest of the chain;
it may adjust the input (for instance register an execution input
configurer), call the chain, and adjust the ``WebOutput`` on the way back.

Example:
    class TenantInterceptor(WebInterceptor):
        async def intercept(self, web_input, chain):
            tenant = web_input.headers.get("x-tenant", "public")
            web_input.configure_execution_input(
                lambda current, builder: builder.context({"tenant": tenant}).build()
            )
            output = await chain(web_input)
            return output.transform(lambda builder: builder.response_header("x-tenant", tenant))
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from graphql_service.features.graphql.web.io import WebInput, WebOutput

    Chain = Callable[[WebInput], Awaitable[WebOutput]]


class WebInterceptor(ABC):
    """Hook around the handling of one web GraphQL request."""

    @abstractmethod
    async def intercept(self, web_input: WebInput, chain: Chain) -> WebOutput:
        """Handle ``web_input``, delegating to ``chain`` for the rest of the processing."""

    def and_then(self, interceptor: WebInterceptor) -> WebInterceptor:
        """Compose with ``interceptor``, which runs inside this one."""
        return _ComposedInterceptor(self, interceptor)


class _ComposedInterceptor(WebInterceptor):
    def __init__(self, first: WebInterceptor, second: WebInterceptor) -> None:
        self._first = first
        self._second = second

    async def intercept(self, web_input: WebInput, chain: Chain) -> WebOutput:
        async def next_step(current: WebInput) -> WebOutput:
            return await self._second.intercept(current, chain)

        return await self._first.intercept(web_input, next_step)


__all__ = ["WebInterceptor"]
