"""Tests for router registration."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import FastAPI
from fastapi.routing import APIRoute, APIWebSocketRoute
from fastapi.testclient import TestClient

from graphql_service.app.router import setup_routers
from graphql_service.core.settings.app import AppSettings
from graphql_service.core.settings.graphql import GraphQLSettings

if TYPE_CHECKING:
    from graphql_service.features.graphql.web import WebGraphQlHandler


def _app(handler: WebGraphQlHandler, **settings: object) -> FastAPI:
    app = FastAPI()
    setup_routers(
        app,
        handler,
        AppSettings(title="Projects API"),
        GraphQLSettings(metrics_enabled=False, **settings),
    )
    return app


def _paths(app: FastAPI, route_type: type) -> set[str]:
    return {route.path for route in app.routes if isinstance(route, route_type)}


def test_default_routes(handler: WebGraphQlHandler) -> None:
    app = _app(handler)

    assert {"/graphql", "/graphiql"} <= _paths(app, APIRoute)
    assert _paths(app, APIWebSocketRoute) == {"/graphql"}
    assert "/metrics" not in _paths(app, APIRoute)


def test_separate_websocket_path(handler: WebGraphQlHandler) -> None:
    app = _app(handler, websocket_path="/subscriptions")

    assert _paths(app, APIWebSocketRoute) == {"/subscriptions"}


def test_disabled_graphql_registers_nothing(handler: WebGraphQlHandler) -> None:
    app = _app(handler, enabled=False)

    assert "/graphql" not in _paths(app, APIRoute)
    assert not _paths(app, APIWebSocketRoute)


def test_websocket_and_graphiql_can_be_disabled(handler: WebGraphQlHandler) -> None:
    app = _app(handler, websocket_enabled=False, graphiql_enabled=False)

    assert "/graphiql" not in _paths(app, APIRoute)
    assert not _paths(app, APIWebSocketRoute)


def test_graphiql_page_points_at_endpoints(handler: WebGraphQlHandler) -> None:
    client = TestClient(_app(handler, websocket_path="/subscriptions"))

    response = client.get("/graphiql")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert "<title>Projects API · GraphiQL</title>" in response.text
    assert '"url": "/graphql"' in response.text
    assert '"subscriptionUrl": "ws://testserver/subscriptions"' in response.text


def test_websocket_on_separate_path_speaks_graphql_transport_ws(handler: WebGraphQlHandler) -> None:
    client = TestClient(_app(handler, websocket_path="/subscriptions"))

    with client.websocket_connect("/subscriptions", subprotocols=["graphql-transport-ws"]) as ws:
        ws.send_json({"type": "connection_init"})
        assert ws.receive_json() == {"type": "connection_ack"}
        ws.send_json({"id": "1", "type": "subscribe", "payload": {"query": "{ projects { slug } }"}})
        message = ws.receive_json()

    assert message["type"] == "next"
    assert client.post("/subscriptions", json={"query": "{ projects { slug } }"}).status_code == 404
