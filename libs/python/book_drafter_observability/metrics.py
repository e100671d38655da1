"""Prometheus metrics for the drafting pipeline and its HTTP surface."""

from __future__ import annotations

from time import perf_counter
from typing import TYPE_CHECKING, Optional

from fastapi import FastAPI, Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

if TYPE_CHECKING:  # pragma: no cover - imported for type checking only
    from book_drafter_providers.base import ProviderResponse

# Sections take seconds to minutes; the default buckets stop at 10s.
_PIPELINE_BUCKETS = (0.5, 1, 2.5, 5, 10, 20, 30, 60, 120, 300, 600)

HTTP_REQUESTS = Counter(
    "book_drafter_http_requests_total",
    "HTTP requests handled, by route template and status",
    labelnames=("service", "method", "route", "status"),
)
HTTP_LATENCY = Histogram(
    "book_drafter_http_request_duration_seconds",
    "HTTP request latency",
    labelnames=("service", "method", "route"),
)

STAGE_DURATION = Histogram(
    "book_drafter_stage_duration_seconds",
    "Duration of one outline, section or references step",
    labelnames=("service", "stage"),
    buckets=_PIPELINE_BUCKETS,
)
STAGE_RUNS = Counter(
    "book_drafter_stage_runs_total",
    "Pipeline steps by outcome",
    labelnames=("service", "stage", "status"),
)

LLM_TOKENS = Counter(
    "book_drafter_llm_tokens_total",
    "Tokens exchanged with the generation service",
    labelnames=("service", "stage", "provider", "token_type"),
)
LLM_COST = Counter(
    "book_drafter_llm_cost_usd_total",
    "Estimated generation cost in USD",
    labelnames=("service", "stage", "provider"),
)
LLM_LATENCY = Histogram(
    "book_drafter_llm_latency_seconds",
    "Latency of generation requests",
    labelnames=("service", "stage", "provider"),
    buckets=_PIPELINE_BUCKETS,
)
GROUNDING_SOURCES = Counter(
    "book_drafter_grounding_sources_total",
    "Search grounding sources returned with generated text",
    labelnames=("service", "stage", "provider"),
)

WORDS_GENERATED = Counter(
    "book_drafter_words_generated_total",
    "Words of prose written into books",
    labelnames=("service",),
)
RUN_PROGRESS = Gauge(
    "book_drafter_run_progress_percent",
    "Completion of the most recently advanced run",
    labelnames=("service",),
)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Count and time every request except scrapes of the metrics endpoint."""

    def __init__(self, app: FastAPI, service_name: str, metrics_path: str = "/metrics") -> None:
        super().__init__(app)
        self.service_name = service_name
        self.metrics_path = metrics_path

    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        if request.url.path == self.metrics_path:
            return await call_next(request)

        start = perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            route = request.scope.get("route")
            template = getattr(route, "path", None) or request.url.path
            HTTP_REQUESTS.labels(
                self.service_name, request.method, template, str(status_code)
            ).inc()
            HTTP_LATENCY.labels(self.service_name, request.method, template).observe(
                perf_counter() - start
            )


def setup_fastapi_metrics(app: FastAPI, service_name: str, endpoint: str = "/metrics") -> None:
    """Install the middleware and expose ``endpoint`` once per app."""

    if getattr(app.state, "metrics_configured", False):
        return

    app.add_middleware(PrometheusMiddleware, service_name=service_name, metrics_path=endpoint)

    @app.get(endpoint, include_in_schema=False)
    async def _metrics_endpoint() -> Response:
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.state.metrics_configured = True


def observe_stage_duration(
    stage: str,
    duration_seconds: float,
    *,
    service_name: str,
    status: str = "success",
) -> None:
    STAGE_DURATION.labels(service_name, stage).observe(max(duration_seconds, 0.0))
    STAGE_RUNS.labels(service_name, stage, status).inc()


def observe_provider_response(
    *,
    stage: str,
    provider: str,
    service_name: str,
    response: Optional["ProviderResponse"],
) -> None:
    """Record tokens, latency, cost and grounding carried by ``response``.

    Fields the provider did not report (``None``) are skipped.
    """

    if response is None:
        return

    labels = (service_name, stage, provider)
    for token_type, count in (
        ("prompt", response.prompt_tokens),
        ("completion", response.completion_tokens),
    ):
        if _measured(count):
            LLM_TOKENS.labels(*labels, token_type).inc(count)
    if _measured(response.latency_ms):
        LLM_LATENCY.labels(*labels).observe(response.latency_ms / 1000)
    if _measured(response.cost_usd):
        LLM_COST.labels(*labels).inc(response.cost_usd)
    if response.grounding:
        GROUNDING_SOURCES.labels(*labels).inc(len(response.grounding))


def observe_generation_progress(
    *,
    service_name: str,
    percentage: float,
    words_added: int = 0,
) -> None:
    RUN_PROGRESS.labels(service_name).set(max(min(percentage, 100.0), 0.0))
    if words_added > 0:
        WORDS_GENERATED.labels(service_name).inc(words_added)


def _measured(value: object) -> bool:
    return isinstance(value, (int, float)) and value >= 0
