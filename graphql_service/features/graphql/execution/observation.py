"""Observation hooks for GraphQL execution.

Observers are notified of request outcomes, data fetcher timings and
reported errors. The Prometheus observer in ``infra.metrics.graphql`` is the
stock implementation; observers must not raise.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterable

    from graphql import GraphQLError

logger = logging.getLogger(__name__)


class Outcome(str, Enum):
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"


@runtime_checkable
class GraphQlObserver(Protocol):
    def request_completed(self, operation: str, outcome: Outcome, duration: float) -> None: ...

    def data_fetcher_completed(self, path: str, outcome: Outcome, duration: float) -> None: ...

    def error_reported(self, error: GraphQLError) -> None: ...


class ObserverGroup:
    """Fans notifications out to several observers, isolating their failures."""

    def __init__(self, observers: Iterable[GraphQlObserver] = ()) -> None:
        self._observers = tuple(observers)

    def __bool__(self) -> bool:
        return bool(self._observers)

    def request_completed(self, operation: str, outcome: Outcome, duration: float) -> None:
        for observer in self._observers:
            try:
                observer.request_completed(operation, outcome, duration)
            except Exception:
                logger.warning("GraphQL observer failed", exc_info=True)

    def data_fetcher_completed(self, path: str, outcome: Outcome, duration: float) -> None:
        for observer in self._observers:
            try:
                observer.data_fetcher_completed(path, outcome, duration)
            except Exception:
                logger.warning("GraphQL observer failed", exc_info=True)

    def errors_reported(self, errors: Iterable[GraphQLError]) -> None:
        for error in errors:
            for observer in self._observers:
                try:
                    observer.error_reported(error)
                except Exception:
                    logger.warning("GraphQL observer failed", exc_info=True)


__all__ = ["GraphQlObserver", "ObserverGroup", "Outcome"]
