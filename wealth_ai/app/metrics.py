from __future__ import annotations

import time

from fastapi import Request
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from starlette.responses import Response

from wealth_ai.app.settings import settings

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
)
CALCULATOR_COUNT = Counter(
    "calculator_requests_total",
    "Calculator invocations",
    ["kind"],
)
CHAT_REPLIES = Counter(
    "chat_replies_total",
    "Chat replies by outcome",
    ["outcome"],
)


async def metrics_middleware(request: Request, call_next):
    if not settings.metrics_enabled:
        return await call_next(request)
    path = request.url.path
    if path == "/metrics":
        return await call_next(request)
    start = time.monotonic()
    status = 500
    try:
        response = await call_next(request)
        status = response.status_code
        return response
    finally:
        duration = time.monotonic() - start
        REQUEST_COUNT.labels(request.method, path, str(status)).inc()
        REQUEST_LATENCY.labels(request.method, path).observe(duration)


def record_calculation(kind: str) -> None:
    if settings.metrics_enabled:
        CALCULATOR_COUNT.labels(kind).inc()


def record_chat_reply(outcome: str) -> None:
    if settings.metrics_enabled:
        CHAT_REPLIES.labels(outcome).inc()


def metrics_response() -> Response:
    if not settings.metrics_enabled:
        return Response(status_code=404)
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
