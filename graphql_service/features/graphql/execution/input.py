"""Engine-facing execution input.

``ExecutionInput`` bundles everything one engine invocation needs. It is
immutable; configurers derive new instances through ``transform`` and an
``ExecutionInputBuilder`` seeded from the current input.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable


@dataclass(frozen=True)
class ExecutionInput:
    """Query text, operation name, variables and engine context for one execution.

    ``context`` is the engine context value handed to every field resolver as
    ``info.context``. It is a plain dict created per execution; the
    execution service stores the ambient context snapshot in it.
    """

    query: str
    operation_name: str | None = None
    variables: dict[str, Any] = field(default_factory=dict)
    context: dict[str, Any] = field(default_factory=dict)
    root_value: Any = None
    extensions: dict[str, Any] = field(default_factory=dict)

    def transform(self, configure: Callable[[ExecutionInputBuilder], Any]) -> ExecutionInput:
        """Return a new input built from a builder seeded with this one."""
        builder = ExecutionInputBuilder.from_input(self)
        configure(builder)
        return builder.build()


class ExecutionInputBuilder:
    """Mutable builder for ``ExecutionInput``; every setter returns the builder."""

    def __init__(self, query: str) -> None:
        self._query = query
        self._operation_name: str | None = None
        self._variables: dict[str, Any] = {}
        self._context: dict[str, Any] = {}
        self._root_value: Any = None
        self._extensions: dict[str, Any] = {}

    @classmethod
    def from_input(cls, execution_input: ExecutionInput) -> ExecutionInputBuilder:
        builder = cls(execution_input.query)
        builder._operation_name = execution_input.operation_name
        builder._variables = dict(execution_input.variables)
        # Shared, not copied: one engine context dict per execution
        builder._context = execution_input.context
        builder._root_value = execution_input.root_value
        builder._extensions = dict(execution_input.extensions)
        return builder

    def query(self, query: str) -> ExecutionInputBuilder:
        self._query = query
        return self

    def operation_name(self, operation_name: str | None) -> ExecutionInputBuilder:
        self._operation_name = operation_name
        return self

    def variables(self, variables: dict[str, Any]) -> ExecutionInputBuilder:
        self._variables = dict(variables)
        return self

    def variable(self, name: str, value: Any) -> ExecutionInputBuilder:
        self._variables[name] = value
        return self

    def context(self, values: dict[str, Any]) -> ExecutionInputBuilder:
        """Merge entries into the engine context."""
        self._context.update(values)
        return self

    def root_value(self, root_value: Any) -> ExecutionInputBuilder:
        self._root_value = root_value
        return self

    def extensions(self, extensions: dict[str, Any]) -> ExecutionInputBuilder:
        self._extensions.update(extensions)
        return self

    def build(self) -> ExecutionInput:
        return ExecutionInput(
            query=self._query,
            operation_name=self._operation_name,
            variables=self._variables,
            context=self._context,
            root_value=self._root_value,
            extensions=self._extensions,
        )


__all__ = ["ExecutionInput", "ExecutionInputBuilder"]
