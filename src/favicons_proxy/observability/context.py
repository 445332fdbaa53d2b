"""Per-request trace identity shared by logs and spans.

The identity lives in a ``ContextVar`` so it follows the request task across
``await`` points and into tasks spawned by middleware.
"""

from __future__ import annotations

from contextvars import ContextVar
from dataclasses import dataclass, replace
from uuid import uuid4


@dataclass(frozen=True)
class TraceContext:
    """Trace identity of the request being handled."""

    trace_id: str
    span_id: str
    domain: str | None = None

    def with_span(self, span_id: str) -> TraceContext:
        return replace(self, span_id=span_id)

    def log_fields(self) -> dict[str, str]:
        fields = {"trace_id": self.trace_id, "span_id": self.span_id}
        if self.domain:
            fields["domain"] = self.domain
        return fields


_current: ContextVar[TraceContext | None] = ContextVar("favicons_proxy_trace", default=None)


def new_trace_id() -> str:
    """32 hex chars, the W3C trace-id width."""
    return uuid4().hex


def new_span_id() -> str:
    """16 hex chars, the W3C span-id width."""
    return uuid4().hex[:16]


def current_trace() -> TraceContext:
    """Return the active trace, starting a fresh one if none is bound."""
    ctx = _current.get()
    if ctx is None:
        ctx = TraceContext(trace_id=new_trace_id(), span_id=new_span_id())
        _current.set(ctx)
    return ctx


def bind_trace(trace_id: str, span_id: str | None = None, *, domain: str | None = None) -> TraceContext:
    ctx = TraceContext(trace_id=trace_id, span_id=span_id or new_span_id(), domain=domain)
    _current.set(ctx)
    return ctx


def bind_span(span_id: str) -> TraceContext:
    """Move the active trace to a new span, keeping trace id and domain."""
    ctx = current_trace().with_span(span_id)
    _current.set(ctx)
    return ctx


def clear_trace() -> None:
    _current.set(None)
