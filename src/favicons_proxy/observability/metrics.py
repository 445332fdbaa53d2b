"""Prometheus metrics for favicon resolution."""

from __future__ import annotations

from contextlib import contextmanager
import logging
import time
from typing import TYPE_CHECKING

from prometheus_client import Counter, Histogram, start_http_server


if TYPE_CHECKING:
    from collections.abc import Generator


logger = logging.getLogger(__name__)


FAVICON_REQUESTS = Counter(
    "favicon_requests_total",
    "Favicon lookups by final outcome",
    ["outcome"],
)

PROVIDER_ATTEMPTS = Counter(
    "favicon_provider_attempts_total",
    "Upstream provider attempts by outcome",
    ["provider", "outcome"],
)

RESOLVE_LATENCY = Histogram(
    "favicon_resolve_latency_seconds",
    "Time spent walking the provider chain",
    ["outcome"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 20.0),
)


@contextmanager
def track_latency(outcome_holder: dict[str, str]) -> Generator[None, None, None]:
    """Observe resolve latency, labelled with ``outcome_holder["outcome"]`` on exit."""
    start = time.perf_counter()
    try:
        yield
    finally:
        outcome = outcome_holder.get("outcome", "error")
        RESOLVE_LATENCY.labels(outcome=outcome).observe(time.perf_counter() - start)


def start_metrics_server(port: int, addr: str = "0.0.0.0") -> bool:
    """Expose metrics on a dedicated port; ``0`` disables the exporter."""
    if port <= 0:
        return False
    start_http_server(port, addr=addr)
    logger.info("Prometheus metrics exposed on %s:%d", addr, port)
    return True
