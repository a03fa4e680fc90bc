"""Transport-level request and response containers."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import TYPE_CHECKING, Any

from graphql import ExecutionResult

from graphql_service.features.graphql.request import RequestInput

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from graphql import GraphQLError


class WebInput(RequestInput):
    """A GraphQL request received over HTTP or WebSocket.

    Adds the request URI, the headers and, for WebSocket subscriptions, the
    client-assigned operation id. ``ValueError`` is raised when the body has
    no usable ``query``.
    """

    def __init__(
        self,
        uri: str,
        headers: Mapping[str, str],
        body: Mapping[str, Any],
        id: str | None = None,
    ) -> None:
        super().__init__(body.get("query"), body.get("operationName"), body.get("variables"))  # type: ignore[arg-type]
        self._uri = uri
        self._headers = headers
        self._id = id

    @property
    def uri(self) -> str:
        return self._uri

    @property
    def headers(self) -> Mapping[str, str]:
        return self._headers

    @property
    def id(self) -> str | None:
        return self._id

    def __str__(self) -> str:
        prefix = f"id='{self._id}', " if self._id is not None else ""
        return f"{prefix}{super().__str__()}"


class WebOutput:
    """Result of handling a ``WebInput``.

    Wraps the engine's ``ExecutionResult`` plus the response headers
    interceptors want sent back. For a subscription ``data`` is an async
    iterator of per-event results.
    """

    def __init__(
        self,
        web_input: WebInput,
        result: ExecutionResult,
        response_headers: Mapping[str, str] | None = None,
    ) -> None:
        self._web_input = web_input
        self._result = result
        self._response_headers: dict[str, str] = dict(response_headers or {})

    @property
    def web_input(self) -> WebInput:
        return self._web_input

    @property
    def execution_result(self) -> ExecutionResult:
        return self._result

    @property
    def data(self) -> Any:
        return self._result.data

    @property
    def errors(self) -> list[GraphQLError]:
        return list(self._result.errors or [])

    @property
    def extensions(self) -> dict[str, Any] | None:
        return self._result.extensions

    @property
    def is_data_present(self) -> bool:
        return self._result.data is not None

    @property
    def is_subscription(self) -> bool:
        return isinstance(self._result.data, AsyncIterator)

    @property
    def response_headers(self) -> dict[str, str]:
        return self._response_headers

    def transform(self, configure: Callable[[WebOutputBuilder], Any]) -> WebOutput:
        """Return a new output built from a builder seeded with this one."""
        builder = WebOutputBuilder(self)
        configure(builder)
        return builder.build()

    def to_dict(self) -> dict[str, Any]:
        return result_to_dict(self._result)

    def __repr__(self) -> str:
        return f"WebOutput(data={self.data!r}, errors={self.errors!r})"


class WebOutputBuilder:
    def __init__(self, output: WebOutput) -> None:
        self._web_input = output.web_input
        self._data = output.data
        self._errors = output.errors
        self._extensions = output.extensions
        self._headers = dict(output.response_headers)

    def data(self, data: Any) -> WebOutputBuilder:
        self._data = data
        return self

    def errors(self, errors: list[GraphQLError]) -> WebOutputBuilder:
        self._errors = list(errors)
        return self

    def extensions(self, extensions: dict[str, Any] | None) -> WebOutputBuilder:
        self._extensions = extensions
        return self

    def response_header(self, name: str, value: str) -> WebOutputBuilder:
        self._headers[name] = value
        return self

    def build(self) -> WebOutput:
        result = ExecutionResult(self._data, self._errors or None, self._extensions)
        return WebOutput(self._web_input, result, self._headers)


def result_to_dict(result: ExecutionResult) -> dict[str, Any]:
    """Serialize a result: ``errors`` when present, ``data`` when present or error-free."""
    body: dict[str, Any] = {}
    if result.errors:
        body["errors"] = [error.formatted for error in result.errors]
    if result.data is not None or not result.errors:
        body["data"] = result.data
    if result.extensions:
        body["extensions"] = result.extensions
    return body


__all__ = ["WebInput", "WebOutput", "WebOutputBuilder", "result_to_dict"]
