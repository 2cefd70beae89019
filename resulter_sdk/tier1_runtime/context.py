"""
resulter_sdk.tier1_runtime.context
───────────────────────────────────
Request context: correlation IDs plus the request path and method. The path
is the only thing the normalizer reads from it (to fill problem.instance).

Uses Python contextvars for async-safe, framework-agnostic storage and is
mirrored into structlog contextvars so log calls carry the same fields.
"""
from __future__ import annotations

import uuid
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any

import structlog


# ── Domain model ─────────────────────────────────────────────────────────────

@dataclass
class RequestContext:
    """Per-request metadata available throughout the request lifecycle."""
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    trace_id: str | None = None
    path: str | None = None
    method: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


# ── ContextVar storage ────────────────────────────────────────────────────────

_ctx: ContextVar[RequestContext | None] = ContextVar(
    "resulter_request_context",
    default=None,
)


# ── Public API ────────────────────────────────────────────────────────────────

def get_context() -> RequestContext | None:
    """Return the current request context, or None outside a request."""
    return _ctx.get()


def set_context(ctx: RequestContext) -> None:
    """Set the request context for the current async scope."""
    _ctx.set(ctx)
    structlog.contextvars.bind_contextvars(
        request_id=ctx.request_id,
        trace_id=ctx.trace_id,
        path=ctx.path,
    )


def clear_context() -> None:
    _ctx.set(None)
    structlog.contextvars.clear_contextvars()


def new_context(
    path: str | None = None,
    method: str | None = None,
    trace_id: str | None = None,
    **metadata: Any,
) -> RequestContext:
    """Create and activate a new request context. Returns the new context."""
    ctx = RequestContext(path=path, method=method, trace_id=trace_id, metadata=metadata)
    set_context(ctx)
    return ctx


def get_request_path() -> str | None:
    ctx = get_context()
    return ctx.path if ctx is not None else None


__all__ = [
    "RequestContext",
    "get_context",
    "set_context",
    "clear_context",
    "new_context",
    "get_request_path",
]
