from __future__ import annotations

import os
import time
from typing import Any, Awaitable, Callable

from fastapi import Request, Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

REGISTRY = CollectorRegistry()
REQUESTS = Counter(
    "golfsg_http_requests_total",
    "HTTP requests by route template",
    ["path", "method", "status"],
    registry=REGISTRY,
)
LATENCY = Histogram(
    "golfsg_http_request_seconds",
    "HTTP request latency by route template (seconds)",
    ["path", "method"],
    registry=REGISTRY,
)
SHOTS_DERIVED = Counter(
    "golfsg_shots_derived_total", "Shots derived from shot events", registry=REGISTRY
)
PENALTY_FLAGS = Counter(
    "golfsg_penalty_flags_total",
    "Shots flagged as likely penalties",
    ["rule"],
    registry=REGISTRY,
)
ROUNDS_PROCESSED = Counter(
    "golfsg_rounds_processed_total", "Rounds run through the pipeline", registry=REGISTRY
)
DERIVE_SECONDS = Histogram(
    "golfsg_derive_seconds",
    "Time spent deriving shots for one round (seconds)",
    registry=REGISTRY,
)

BUILD_VERSION = os.getenv("BUILD_VERSION", "dev")
GIT_SHA = os.getenv("GIT_SHA", "unknown")


async def metrics_app(_req: Request | None = None) -> Response:
    data = generate_latest(REGISTRY)
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)


def route_template(scope: dict[str, Any]) -> str:
    """Request path with matched path parameters put back as ``{name}``.

    Every stored round shares the label ``/api/sg/rounds/{round_id}``.
    """

    segments = scope.get("path", "").split("/")
    params = scope.get("path_params") or {}
    for name, value in params.items():
        text = str(value)
        # Parameters sit at the end of the path, so search from the right.
        for index in range(len(segments) - 1, 0, -1):
            if segments[index] == text:
                segments[index] = "{" + name + "}"
                break
    return "/".join(segments)


class MetricsMiddleware:
    """ASGI middleware recording request counts and latency per route."""

    def __init__(self, app: Callable[..., Awaitable[Any]]):
        self.app = app

    async def __call__(
        self,
        scope: dict[str, Any],
        receive: Callable[..., Awaitable[Any]],
        send: Callable[..., Awaitable[Any]],
    ) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        started = time.perf_counter()
        status_code = 500

        async def _record_status(message: dict[str, Any]) -> None:
            nonlocal status_code
            if message.get("type") == "http.response.start":
                status_code = message.get("status", 200)
            await send(message)

        try:
            await self.app(scope, receive, _record_status)
        finally:
            # The router fills path_params in place once a route matches.
            path = route_template(scope)
            method = scope.get("method", "GET")
            LATENCY.labels(path=path, method=method).observe(
                time.perf_counter() - started
            )
            REQUESTS.labels(path=path, method=method, status=str(status_code)).inc()


__all__ = [
    "BUILD_VERSION",
    "DERIVE_SECONDS",
    "GIT_SHA",
    "LATENCY",
    "MetricsMiddleware",
    "PENALTY_FLAGS",
    "REGISTRY",
    "REQUESTS",
    "ROUNDS_PROCESSED",
    "SHOTS_DERIVED",
    "metrics_app",
    "route_template",
]
