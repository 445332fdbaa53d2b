"""Observability module for tracing, metrics, and logging."""

from favicons_proxy.observability.context import TraceContext, bind_trace, current_trace
from favicons_proxy.observability.logging import JsonFormatter, configure_logging
from favicons_proxy.observability.metrics import (
    FAVICON_REQUESTS,
    PROVIDER_ATTEMPTS,
    RESOLVE_LATENCY,
    start_metrics_server,
    track_latency,
)
from favicons_proxy.observability.tracing import (
    TraceContextMiddleware,
    create_span,
    get_tracer,
    init_tracing,
    trace_request,
)


__all__ = [
    "FAVICON_REQUESTS",
    "PROVIDER_ATTEMPTS",
    "RESOLVE_LATENCY",
    "JsonFormatter",
    "TraceContext",
    "TraceContextMiddleware",
    "bind_trace",
    "configure_logging",
    "create_span",
    "current_trace",
    "get_tracer",
    "init_tracing",
    "start_metrics_server",
    "trace_request",
    "track_latency",
]
