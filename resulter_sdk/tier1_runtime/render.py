"""
resulter_sdk.tier1_runtime.render
──────────────────────────────────
Map an Envelope to a framework-neutral HttpResponse (status, headers, body)
that can be written to any ASGI or WSGI server, or handed to a framework's
own response class (e.g. ``Response(r.body, r.status_code, r.headers)``).

Two body styles:
  - render()          body is the whole envelope (succeeded/statusCode/data/problemDetails)
  - render_problem()  success → body is data; failure → RFC 7807 problem as
                      application/problem+json
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

from resulter_sdk.tier0_core.envelope import Envelope
from resulter_sdk.tier0_core.http import status_phrase
from resulter_sdk.tier1_runtime.context import get_request_path
from resulter_sdk.tier1_runtime.serialize import dumps, serialize

JSON = "application/json"
PROBLEM_JSON = "application/problem+json"

_NO_BODY = frozenset({204, 304})


@dataclass
class HttpResponse:
    """A rendered response, independent of any web framework."""
    status_code: int
    body: bytes = b""
    media_type: str = JSON
    headers: list[tuple[str, str]] = field(default_factory=list)

    def header_items(self) -> list[tuple[str, str]]:
        items = [("content-type", self.media_type), ("content-length", str(len(self.body)))]
        return items + list(self.headers)

    async def asgi(self, send: Callable[[dict], Any]) -> None:
        """Write the response through an ASGI ``send`` callable."""
        await send({
            "type": "http.response.start",
            "status": self.status_code,
            "headers": [(k.encode("latin-1"), v.encode("latin-1")) for k, v in self.header_items()],
        })
        await send({"type": "http.response.body", "body": self.body})

    def wsgi(self, start_response: Callable, exc_info: Any = None) -> list[bytes]:
        """
        Write the response through a WSGI ``start_response`` callable. Pass
        *exc_info* when responding from an error handler (PEP 3333).
        """
        status = f"{self.status_code} {status_phrase(self.status_code)}"
        if exc_info is None:
            start_response(status, self.header_items())
        else:
            start_response(status, self.header_items(), exc_info)
        return [self.body]


def _prepare(
    envelope: Envelope[Any], status_code: int | None, request_path: str | None
) -> int:
    if status_code is not None:
        envelope.status_code = status_code
    status = envelope.resolved_status_code
    if envelope.status_code is None:
        envelope.status_code = status

    problem = envelope.problem
    if problem is not None:
        problem.status = status
        if problem.instance is None:
            problem.instance = request_path or get_request_path()
    return status


def render(
    envelope: Envelope[Any],
    status_code: int | None = None,
    request_path: str | None = None,
) -> HttpResponse:
    """
    Render the full envelope as JSON. *status_code* overrides the envelope's
    status (and its problem's); otherwise the envelope status, the problem
    status, or 200/400 by outcome, in that order.
    """
    status = _prepare(envelope, status_code, request_path)
    return HttpResponse(status_code=status, body=serialize(envelope))


def render_problem(
    envelope: Envelope[Any],
    status_code: int | None = None,
    request_path: str | None = None,
) -> HttpResponse:
    """Render data on success and a bare RFC 7807 problem on failure."""
    status = _prepare(envelope, status_code, request_path)
    if status in _NO_BODY:
        return HttpResponse(status_code=status)
    if envelope.succeeded or envelope.problem is None:
        return HttpResponse(status_code=status, body=dumps(envelope.data))
    return HttpResponse(
        status_code=status,
        body=dumps(envelope.problem.to_dict()),
        media_type=PROBLEM_JSON,
    )


__all__ = ["HttpResponse", "render", "render_problem", "JSON", "PROBLEM_JSON"]
