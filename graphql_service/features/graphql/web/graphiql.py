"""Serve the GraphiQL IDE pointing at the GraphQL endpoint."""

from __future__ import annotations

import html
import json
from typing import Final

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

GRAPHIQL_VERSION: Final = "3.7.1"
_CDN: Final = "https://unpkg.com"


def create_graphiql_router(
    *,
    graphiql_path: str,
    graphql_path: str,
    title: str,
    subscriptions_path: str | None = None,
) -> APIRouter:
    """Expose ``GET {graphiql_path}`` rendering GraphiQL for ``graphql_path``."""
    router = APIRouter()

    @router.get(_normalize_path(graphiql_path), include_in_schema=False, name="graphiql")
    async def graphiql(request: Request) -> HTMLResponse:
        endpoint_url = _build_endpoint_url(request, graphql_path)
        subscription_url = None
        if subscriptions_path is not None:
            subscription_url = _websocket_url(request, subscriptions_path)
        return HTMLResponse(
            render_graphiql_html(
                title=title, endpoint_url=endpoint_url, subscription_url=subscription_url
            )
        )

    return router


def _build_endpoint_url(request: Request, graphql_path: str) -> str:
    """Combine ASGI root_path with the configured GraphQL path."""
    normalized_path = _normalize_path(graphql_path)
    root_path = (request.scope.get("root_path") or "").rstrip("/")
    if not root_path:
        return normalized_path
    return f"{root_path}{normalized_path}"


def _websocket_url(request: Request, path: str) -> str:
    scheme = "wss" if request.url.scheme == "https" else "ws"
    return f"{scheme}://{request.url.netloc}{_build_endpoint_url(request, path)}"


def _normalize_path(path: str) -> str:
    path = path or "/"
    if not path.startswith("/"):
        path = f"/{path}"
    if len(path) > 1 and path.endswith("/"):
        path = path.rstrip("/")
    return path


def render_graphiql_html(*, title: str, endpoint_url: str, subscription_url: str | None) -> str:
    safe_title = html.escape(title)
    fetcher_options: dict[str, object] = {"url": endpoint_url}
    if subscription_url:
        fetcher_options["subscriptionUrl"] = subscription_url
    options_json = json.dumps(fetcher_options).replace("</", "<\\/")
    return f"""<!DOCTYPE html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>{safe_title} · GraphiQL</title>
    <style>body {{ margin: 0; height: 100vh; }} #graphiql {{ height: 100vh; }}</style>
    <link rel="stylesheet" href="{_CDN}/graphiql@{GRAPHIQL_VERSION}/graphiql.min.css" />
  </head>
  <body>
    <div id="graphiql">Loading GraphiQL…</div>
    <script crossorigin src="{_CDN}/react@18/umd/react.production.min.js"></script>
    <script crossorigin src="{_CDN}/react-dom@18/umd/react-dom.production.min.js"></script>
    <script crossorigin src="{_CDN}/graphiql@{GRAPHIQL_VERSION}/graphiql.min.js"></script>
    <script>
      const fetcher = GraphiQL.createFetcher({options_json});
      ReactDOM.createRoot(document.getElementById("graphiql")).render(
        React.createElement(GraphiQL, {{ fetcher }})
      );
    </script>
  </body>
</html>
"""


__all__ = ["create_graphiql_router", "render_graphiql_html"]
