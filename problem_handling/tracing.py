from __future__ import annotations

from typing import Protocol

import structlog

UNKNOWN = "unknown"


class Tracer(Protocol):
    def current_trace_id(self) -> str | None: ...

    def current_span_id(self) -> str | None: ...


class NullTracer:
    """Used when no tracing is wired in. Every lookup resolves to ``unknown``."""

    def current_trace_id(self) -> str | None:
        return None

    def current_span_id(self) -> str | None:
        return None


class ContextVarTracer:
    """Reads ids that request middleware bound into the structlog context."""

    def __init__(self, trace_key: str = "trace_id", span_key: str = "span_id") -> None:
        self._trace_key = trace_key
        self._span_key = span_key

    def current_trace_id(self) -> str | None:
        return _lookup(self._trace_key)

    def current_span_id(self) -> str | None:
        return _lookup(self._span_key)


def _lookup(key: str) -> str | None:
    value = structlog.contextvars.get_contextvars().get(key)
    if value is None or value == "":
        return None
    return str(value)


def resolve_trace_ids(tracer: Tracer | None) -> tuple[str, str]:
    if tracer is None:
        return UNKNOWN, UNKNOWN
    return tracer.current_trace_id() or UNKNOWN, tracer.current_span_id() or UNKNOWN
