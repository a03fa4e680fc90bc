"""GraphQL request model.

``RequestInput`` mirrors the JSON body of a GraphQL-over-HTTP POST:
``{"query": ..., "operationName": ..., "variables": ...}``. It validates the
query eagerly so malformed requests fail before anything is executed.

Example:
    request = RequestInput('{ project(slug: "spring-graphql") { name } }')
    request.configure_execution_input(
        lambda current, builder: builder.extensions({"tenant": "acme"}).build()
    )
    execution_input = request.to_execution_input()
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from graphql_service.features.graphql.execution.input import (
    ExecutionInput,
    ExecutionInputBuilder,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    ExecutionInputConfigurer = Callable[[ExecutionInput, ExecutionInputBuilder], ExecutionInput]


class RequestInput:
    """Query, operation name and variables of one GraphQL request."""

    def __init__(
        self,
        query: str,
        operation_name: str | None = None,
        variables: Mapping[str, Any] | None = None,
    ) -> None:
        if not isinstance(query, str) or not query.strip():
            msg = "'query' is required"
            raise ValueError(msg)
        if operation_name is not None and not isinstance(operation_name, str):
            msg = "'operationName' must be a string"
            raise ValueError(msg)
        if variables is not None and not isinstance(variables, dict):
            msg = "'variables' must be an object"
            raise ValueError(msg)
        self._query = query
        self._operation_name = operation_name
        self._variables: dict[str, Any] = dict(variables) if variables else {}
        self._configurers: list[ExecutionInputConfigurer] = []

    @classmethod
    def from_map(cls, body: Mapping[str, Any]) -> RequestInput:
        """Create from the wire body keys ``query``, ``operationName`` and ``variables``."""
        return cls(body.get("query"), body.get("operationName"), body.get("variables"))  # type: ignore[arg-type]

    @property
    def query(self) -> str:
        return self._query

    @property
    def operation_name(self) -> str | None:
        return self._operation_name

    @property
    def variables(self) -> dict[str, Any]:
        return self._variables

    def configure_execution_input(self, configurer: ExecutionInputConfigurer) -> None:
        """Register a callback that customizes the engine input.

        Configurers run in registration order inside ``to_execution_input``;
        each receives the input produced by the previous one plus a builder
        seeded from it, and returns the input to continue with.
        """
        self._configurers.append(configurer)

    def to_execution_input(self) -> ExecutionInput:
        execution_input = ExecutionInput(
            query=self._query,
            operation_name=self._operation_name,
            variables=dict(self._variables),
        )
        for configurer in self._configurers:
            current = execution_input
            execution_input = configurer(current, ExecutionInputBuilder.from_input(current))
        return execution_input

    def to_map(self) -> dict[str, Any]:
        """Wire form: ``operationName`` and ``variables`` only when present."""
        body: dict[str, Any] = {"query": self._query}
        if self._operation_name is not None:
            body["operationName"] = self._operation_name
        if self._variables:
            body["variables"] = dict(self._variables)
        return body

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RequestInput):
            return NotImplemented
        return self.to_map() == other.to_map()

    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        text = f"Query='{self._query}'"
        if self._operation_name is not None:
            text += f", Operation='{self._operation_name}'"
        if self._variables:
            text += f", Variables={self._variables}"
        return text

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self})"


__all__ = ["RequestInput"]
