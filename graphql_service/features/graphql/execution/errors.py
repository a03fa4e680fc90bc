"""Error classification for GraphQL errors.

Every error produced by the exception resolution chain carries a
classification under ``extensions["classification"]``, letting clients
branch on a coarse category instead of parsing messages.

The known categories form a closed enum; adopters that need more add a
``CustomErrorType`` rather than editing the enum:

    RATE_LIMITED = CustomErrorType("RATE_LIMITED")

    error = (
        GraphQlErrorBuilder.new_error(info)
        .message("Slow down")
        .error_type(RATE_LIMITED)
        .build()
    )
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Union

from graphql import GraphQLError

if TYPE_CHECKING:
    from graphql import GraphQLResolveInfo

CLASSIFICATION_KEY = "classification"


class ErrorType(str, Enum):
    """Known error classifications."""

    BAD_REQUEST = "BAD_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    UNKNOWN = "UNKNOWN"


@dataclass(frozen=True)
class CustomErrorType:
    """Adopter-defined classification identified by its tag."""

    name: str

    def __post_init__(self) -> None:
        if not self.name:
            msg = "Custom error type name is required"
            raise ValueError(msg)

    @property
    def value(self) -> str:
        return self.name


ErrorClassification = Union[ErrorType, CustomErrorType]


def classification_of(name: str | None) -> ErrorClassification:
    """Map a classification tag back to a known ``ErrorType`` or a custom one."""
    if not name:
        return ErrorType.UNKNOWN
    try:
        return ErrorType(name)
    except ValueError:
        return CustomErrorType(name)


def classification_for_error(error: GraphQLError) -> ErrorClassification:
    """Read the classification of an error, UNKNOWN when it has none."""
    return classification_of((error.extensions or {}).get(CLASSIFICATION_KEY))


class GraphQlErrorBuilder:
    """Build a ``GraphQLError`` located at a field.

    Path and locations are copied from the field's resolve info so the error
    points at the field whose data fetcher failed.
    """

    def __init__(
        self,
        path: list[str | int] | None = None,
        nodes: Any = None,
    ) -> None:
        self._path = path
        self._nodes = nodes
        self._message: str | None = None
        self._error_type: ErrorClassification = ErrorType.INTERNAL_ERROR
        self._extensions: dict[str, Any] = {}
        self._original_error: Exception | None = None

    @classmethod
    def new_error(cls, info: GraphQLResolveInfo | None = None) -> GraphQlErrorBuilder:
        if info is None:
            return cls()
        return cls(path=info.path.as_list(), nodes=info.field_nodes)

    def message(self, message: str, *args: Any) -> GraphQlErrorBuilder:
        self._message = message % args if args else message
        return self

    def error_type(self, error_type: ErrorClassification) -> GraphQlErrorBuilder:
        self._error_type = error_type
        return self

    def extensions(self, extensions: dict[str, Any]) -> GraphQlErrorBuilder:
        self._extensions.update(extensions)
        return self

    def original_error(self, error: Exception) -> GraphQlErrorBuilder:
        self._original_error = error
        return self

    def build(self) -> GraphQLError:
        extensions = {**self._extensions, CLASSIFICATION_KEY: self._error_type.value}
        return GraphQLError(
            self._message or "",
            nodes=self._nodes,
            path=self._path,
            original_error=self._original_error,
            extensions=extensions,
        )


__all__ = [
    "CLASSIFICATION_KEY",
    "CustomErrorType",
    "ErrorClassification",
    "ErrorType",
    "GraphQlErrorBuilder",
    "classification_for_error",
    "classification_of",
]
