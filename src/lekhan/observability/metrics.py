from __future__ import annotations

"""Prometheus metrics for the Lekhan API and generation engine.

Adds an HTTP middleware that records request latency per method/path/status,
plus generation counters observed by the content generation service.
"""

import time
from typing import Awaitable, Callable

from prometheus_client import Counter, Histogram
from starlette.requests import Request
from starlette.responses import Response

# Histogram buckets chosen for web latencies (seconds)
REQUEST_LATENCY = Histogram(
    "lekhan_request_latency_seconds",
    "HTTP request latency in seconds",
    labelnames=("method", "path", "status"),
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0),
)

# Backend calls are much slower than requests served from memory
GENERATION_LATENCY = Histogram(
    "lekhan_generation_latency_seconds",
    "Generative backend latency per operation",
    labelnames=("operation", "outcome"),
    buckets=(0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 20.0, 40.0, 80.0),
)

REPORT_FALLBACKS = Counter(
    "lekhan_report_fallbacks_total",
    "Full reports produced by the template fallback",
)

PERSISTENCE_FAILURES = Counter(
    "lekhan_chat_persistence_failures_total",
    "Chat exchanges whose turns could not be stored",
)


def observe_generation(operation: str, outcome: str, elapsed_s: float) -> None:
    GENERATION_LATENCY.labels(operation=operation, outcome=outcome).observe(elapsed_s)


def sanitize_path(path: str) -> str:
    """Reduce high-cardinality paths (e.g., /assistant/sessions/{id}) to a coarse label.

    Keeps the top-level segment only.
    """
    if not path:
        return "/"
    segs = path.split("?")[0].split("/")
    if len(segs) > 1:
        return "/" + segs[1]
    return path


def metrics_middleware_factory() -> Callable[[Request, Callable[[Request], Awaitable[Response]]], Awaitable[Response]]:
    async def middleware(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        # Avoid observing the metrics endpoint itself
        if request.url.path.startswith("/metrics"):
            return await call_next(request)
        start = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start
        REQUEST_LATENCY.labels(
            method=request.method,
            path=sanitize_path(request.url.path),
            status=str(response.status_code),
        ).observe(elapsed)
        return response

    return middleware
