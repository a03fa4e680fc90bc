"""Tests for GraphQL over WebSocket (graphql-transport-ws)."""

from __future__ import annotations

import asyncio
import threading
from typing import TYPE_CHECKING, Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from graphql_service.features.graphql.web import WebGraphQlHandler, WebInterceptor
from graphql_service.features.graphql.web.router import create_graphql_router

if TYPE_CHECKING:
    from collections.abc import Iterator

    from starlette.testclient import WebSocketTestSession

    from graphql_service.features.graphql.execution import ExecutionGraphQlService
    from graphql_service.features.graphql.web import WebInput
    from graphql_service.features.graphql.web.interceptor import Chain
    from graphql_service.features.graphql.web.io import WebOutput

PROTOCOL = "graphql-transport-ws"
STALL = "subscription stall { greetings }"


class StallingInterceptor(WebInterceptor):
    """Holds subscriptions open until cancelled."""

    def __init__(self) -> None:
        self.started = threading.Event()
        self.cancelled = threading.Event()

    async def intercept(self, web_input: WebInput, chain: Chain) -> WebOutput:
        if "stall" not in web_input.query:
            return await chain(web_input)
        self.started.set()
        try:
            await asyncio.sleep(30)
        except asyncio.CancelledError:
            self.cancelled.set()
            raise
        return await chain(web_input)


@pytest.fixture
def stalling() -> StallingInterceptor:
    return StallingInterceptor()


@pytest.fixture
def ws_client(
    service: ExecutionGraphQlService, stalling: StallingInterceptor
) -> Iterator[TestClient]:
    handler = WebGraphQlHandler.builder(service).interceptor(stalling).build()
    app = FastAPI()
    app.include_router(
        create_graphql_router(handler, path="/graphql", connection_init_timeout=0.2)
    )
    with TestClient(app) as client:
        yield client


def _connect(client: TestClient) -> Any:
    return client.websocket_connect("/graphql", subprotocols=[PROTOCOL])


def _init(ws: WebSocketTestSession) -> None:
    ws.send_json({"type": "connection_init"})
    assert ws.receive_json() == {"type": "connection_ack"}


def _subscribe(ws: WebSocketTestSession, id: str, query: str, **payload: Any) -> None:
    ws.send_json({"id": id, "type": "subscribe", "payload": {"query": query, **payload}})


def _close_code(ws: WebSocketTestSession) -> tuple[int, str]:
    with pytest.raises(WebSocketDisconnect) as exc_info:
        ws.receive_json()
    return exc_info.value.code, exc_info.value.reason


def test_query_sends_next_then_complete(ws_client: TestClient) -> None:
    with _connect(ws_client) as ws:
        _init(ws)
        _subscribe(
            ws,
            "1",
            "query Project($slug: String!) { project(slug: $slug) { name } }",
            variables={"slug": "spring-graphql"},
        )

        assert ws.receive_json() == {
            "id": "1",
            "type": "next",
            "payload": {"data": {"project": {"name": "Spring GraphQL"}}},
        }
        assert ws.receive_json() == {"id": "1", "type": "complete"}


def test_subscription_streams_one_next_per_event(ws_client: TestClient) -> None:
    with _connect(ws_client) as ws:
        _init(ws)
        _subscribe(ws, "s1", "subscription { greetings }")

        greetings = [ws.receive_json()["payload"]["data"]["greetings"] for _ in range(3)]

        assert greetings == ["Hi", "Bonjour", "Hola"]
        assert ws.receive_json() == {"id": "s1", "type": "complete"}


def test_request_errors_are_sent_as_error_message(ws_client: TestClient) -> None:
    with _connect(ws_client) as ws:
        _init(ws)
        _subscribe(ws, "1", "{ nope }")

        message = ws.receive_json()

        assert message["type"] == "error"
        assert message["id"] == "1"
        assert message["payload"][0]["extensions"]["classification"] == "BAD_REQUEST"


def test_field_errors_stay_in_next_payload(ws_client: TestClient) -> None:
    with _connect(ws_client) as ws:
        _init(ws)
        _subscribe(ws, "1", '{ project(slug: "nope") { name } }')

        payload = ws.receive_json()["payload"]

        assert payload["data"] == {"project": None}
        assert payload["errors"][0]["extensions"]["classification"] == "NOT_FOUND"


def test_ping_is_answered_with_pong(ws_client: TestClient) -> None:
    with _connect(ws_client) as ws:
        _init(ws)
        ws.send_json({"type": "ping"})

        assert ws.receive_json() == {"type": "pong"}


def test_connection_init_timeout_closes_4408(ws_client: TestClient) -> None:
    with _connect(ws_client) as ws:
        assert _close_code(ws) == (4408, "Connection initialisation timeout")


def test_duplicate_init_closes_4429(ws_client: TestClient) -> None:
    with _connect(ws_client) as ws:
        _init(ws)
        ws.send_json({"type": "connection_init"})

        assert _close_code(ws) == (4429, "Too many initialisation requests")


def test_subscribe_before_ack_closes_4401(ws_client: TestClient) -> None:
    with _connect(ws_client) as ws:
        _subscribe(ws, "1", "{ projects { slug } }")

        assert _close_code(ws) == (4401, "Unauthorized")


def test_duplicate_operation_id_closes_4409(
    ws_client: TestClient, stalling: StallingInterceptor
) -> None:
    with _connect(ws_client) as ws:
        _init(ws)
        _subscribe(ws, "dup", STALL)
        assert stalling.started.wait(timeout=2)
        _subscribe(ws, "dup", STALL)

        assert _close_code(ws) == (4409, "Subscriber for dup already exists")


def test_unknown_message_type_closes_4400(ws_client: TestClient) -> None:
    with _connect(ws_client) as ws:
        _init(ws)
        ws.send_json({"type": "bogus"})

        code, _ = _close_code(ws)
        assert code == 4400


def test_disconnect_cancels_running_operations(
    ws_client: TestClient, stalling: StallingInterceptor
) -> None:
    with _connect(ws_client) as ws:
        _init(ws)
        _subscribe(ws, "1", STALL)
        assert stalling.started.wait(timeout=2)

    assert stalling.cancelled.wait(timeout=2)


def test_client_complete_cancels_operation(
    ws_client: TestClient, stalling: StallingInterceptor
) -> None:
    with _connect(ws_client) as ws:
        _init(ws)
        _subscribe(ws, "1", STALL)
        assert stalling.started.wait(timeout=2)
        ws.send_json({"id": "1", "type": "complete"})

        assert stalling.cancelled.wait(timeout=2)
        ws.send_json({"type": "ping"})
        assert ws.receive_json() == {"type": "pong"}
