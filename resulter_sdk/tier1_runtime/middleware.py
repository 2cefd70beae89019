"""
resulter_sdk.tier1_runtime.middleware
──────────────────────────────────────
Framework-agnostic middleware. Sets the request context (request id, trace
id, path, method) for every inbound request so problems get their
``instance``, logs request completion, and turns unhandled exceptions into a
rendered failure envelope.

Supports: FastAPI / Starlette (ASGI), Flask / Django (WSGI).
"""
from __future__ import annotations

import sys
import time
import uuid
from typing import Any, Callable

from resulter_sdk.tier0_core.envelope import Envelope
from resulter_sdk.tier0_core.errors import status_code_for
from resulter_sdk.tier0_core.logging import get_logger
from resulter_sdk.tier1_runtime.context import RequestContext, clear_context, set_context
from resulter_sdk.tier1_runtime.render import HttpResponse, render, render_problem

log = get_logger(__name__)


def exception_response(
    exc: BaseException, path: str | None, problem_json: bool = False
) -> HttpResponse:
    """Failure response for an unhandled exception (status from the taxonomy, else 500)."""
    envelope = Envelope.failure(status_code=status_code_for(exc)).add_from_exception(exc, path)
    renderer = render_problem if problem_json else render
    return renderer(envelope, request_path=path)


# ── ASGI middleware ────────────────────────────────────────────────────────

class ResulterASGIMiddleware:
    """
    ASGI middleware that injects a RequestContext for every HTTP request.

    Usage (FastAPI / Starlette)::

        from resulter_sdk import ResulterASGIMiddleware
        app.add_middleware(ResulterASGIMiddleware, problem_json=True)
    """

    def __init__(self, app: Any, problem_json: bool = False) -> None:
        self.app = app
        self.problem_json = problem_json

    async def __call__(self, scope: dict, receive: Any, send: Any) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers", []))
        request_id = (
            headers.get(b"x-request-id", b"").decode()
            or headers.get(b"x-correlation-id", b"").decode()
            or str(uuid.uuid4())
        )
        trace_id = headers.get(b"x-trace-id", b"").decode() or request_id
        path = scope.get("path", "")

        set_context(RequestContext(
            request_id=request_id,
            trace_id=trace_id,
            path=path,
            method=scope.get("method", ""),
        ))

        started = False

        async def send_wrapper(message: dict) -> None:
            nonlocal started
            if message["type"] == "http.response.start":
                started = True
            await send(message)

        start = time.perf_counter()
        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as exc:
            log.exception("request_failed", request_id=request_id, path=path)
            if started:
                raise
            await exception_response(exc, path, self.problem_json).asgi(send)
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            log.info(
                "request_completed",
                request_id=request_id,
                duration_ms=round(duration_ms, 2),
                path=path,
                method=scope.get("method", ""),
            )
            clear_context()


# ── WSGI middleware ────────────────────────────────────────────────────────

class ResulterWSGIMiddleware:
    """
    WSGI middleware that injects a RequestContext for every HTTP request.

    Usage (Flask)::

        from resulter_sdk import ResulterWSGIMiddleware
        app.wsgi_app = ResulterWSGIMiddleware(app.wsgi_app)
    """

    def __init__(self, app: Callable, problem_json: bool = False) -> None:
        self.app = app
        self.problem_json = problem_json

    def __call__(self, environ: dict, start_response: Callable) -> Any:
        request_id = (
            environ.get("HTTP_X_REQUEST_ID")
            or environ.get("HTTP_X_CORRELATION_ID")
            or str(uuid.uuid4())
        )
        trace_id = environ.get("HTTP_X_TRACE_ID") or request_id
        path = environ.get("PATH_INFO", "")

        set_context(RequestContext(
            request_id=request_id,
            trace_id=trace_id,
            path=path,
            method=environ.get("REQUEST_METHOD", ""),
        ))

        start = time.perf_counter()
        try:
            return self.app(environ, start_response)
        except Exception as exc:
            log.exception("request_failed", request_id=request_id, path=path)
            return exception_response(exc, path, self.problem_json).wsgi(
                start_response, sys.exc_info()
            )
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            log.info(
                "request_completed",
                request_id=request_id,
                duration_ms=round(duration_ms, 2),
                path=path,
                method=environ.get("REQUEST_METHOD", ""),
            )
            clear_context()


__all__ = ["ResulterASGIMiddleware", "ResulterWSGIMiddleware", "exception_response"]
