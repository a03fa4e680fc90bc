"""Testing support for GraphQL handlers and applications."""

from graphql_service.testing.json_path import JsonPath, PathNotFoundError
from graphql_service.testing.response import (
    EntitySpec,
    ErrorSpec,
    ListEntitySpec,
    PathSpec,
    ResponseError,
    ResponseSpec,
    SubscriptionSpec,
)
from graphql_service.testing.strategies import DirectStrategy, HttpStrategy
from graphql_service.testing.tester import GraphQlTester, RequestSpec

__all__ = [
    "DirectStrategy",
    "EntitySpec",
    "ErrorSpec",
    "GraphQlTester",
    "HttpStrategy",
    "JsonPath",
    "ListEntitySpec",
    "PathNotFoundError",
    "PathSpec",
    "RequestSpec",
    "ResponseError",
    "ResponseSpec",
    "SubscriptionSpec",
]
