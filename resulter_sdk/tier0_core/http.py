"""
resulter_sdk.tier0_core.http
─────────────────────────────
HTTP primitives: standard status codes, reason phrases, and the read-only
status code → problem type URI table (RFC 7231/7232/7233/7235/6585 section
references). Shared by the envelope, the normalizer and the renderer so every
problem payload classifies its status the same way.
"""
from __future__ import annotations

from http import HTTPStatus
from types import MappingProxyType
from typing import Mapping


# ── Status code constants ──────────────────────────────────────────────────

class HTTP:
    """Standard HTTP status codes used across the SDK."""

    # 2xx
    OK = 200
    CREATED = 201
    ACCEPTED = 202
    NO_CONTENT = 204

    # 3xx
    MOVED_PERMANENTLY = 301
    FOUND = 302
    NOT_MODIFIED = 304

    # 4xx
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    CONFLICT = 409
    GONE = 410
    UNPROCESSABLE_ENTITY = 422
    TOO_MANY_REQUESTS = 429

    # 5xx
    INTERNAL_SERVER_ERROR = 500
    NOT_IMPLEMENTED = 501
    BAD_GATEWAY = 502
    SERVICE_UNAVAILABLE = 503
    GATEWAY_TIMEOUT = 504


# ── Problem type URIs ──────────────────────────────────────────────────────

_RFC7231 = "https://tools.ietf.org/html/rfc7231"
_RFC7232 = "https://tools.ietf.org/html/rfc7232"
_RFC7233 = "https://tools.ietf.org/html/rfc7233"
_RFC7235 = "https://tools.ietf.org/html/rfc7235"
_RFC6585 = "https://datatracker.ietf.org/doc/html/rfc6585"
_IANA = "https://www.iana.org/assignments/http-status-codes/http-status-codes.xhtml"

DEFAULT_TYPE_URI = _RFC7231
SERVER_ERROR_TYPE_URI = f"{_RFC7231}#section-6.6.1"

STATUS_TYPE_URIS: Mapping[int, str] = MappingProxyType({
    # 1xx
    100: f"{_RFC7231}#section-6.2.1",
    101: f"{_RFC7231}#section-6.2.2",
    102: _IANA,
    103: _IANA,
    # 2xx
    200: f"{_RFC7231}#section-6.3.1",
    201: f"{_RFC7231}#section-6.3.2",
    202: f"{_RFC7231}#section-6.3.3",
    203: f"{_RFC7231}#section-6.3.4",
    204: f"{_RFC7231}#section-6.3.5",
    205: f"{_RFC7231}#section-6.3.6",
    206: f"{_RFC7233}#section-4.1",
    207: _IANA,
    208: _IANA,
    226: _IANA,
    # 3xx
    300: f"{_RFC7231}#section-6.4.1",
    301: f"{_RFC7231}#section-6.4.2",
    302: f"{_RFC7231}#section-6.4.3",
    303: f"{_RFC7231}#section-6.4.4",
    304: f"{_RFC7232}#section-4.1",
    305: f"{_RFC7231}#section-6.4.5",
    307: f"{_RFC7231}#section-6.4.7",
    308: _IANA,
    # 4xx
    400: f"{_RFC7231}#section-6.5.1",
    401: f"{_RFC7235}#section-3.1",
    402: f"{_RFC7231}#section-6.5.2",
    403: f"{_RFC7231}#section-6.5.3",
    404: f"{_RFC7231}#section-6.5.4",
    405: f"{_RFC7231}#section-6.5.5",
    406: f"{_RFC7231}#section-6.5.6",
    407: f"{_RFC7235}#section-3.2",
    408: f"{_RFC7231}#section-6.5.7",
    409: f"{_RFC7231}#section-6.5.8",
    410: f"{_RFC7231}#section-6.5.9",
    411: f"{_RFC7231}#section-6.5.10",
    412: f"{_RFC7232}#section-4.2",
    415: f"{_RFC7231}#section-6.5.13",
    417: f"{_RFC7231}#section-6.5.14",
    421: _IANA,
    422: _IANA,
    423: _IANA,
    424: _IANA,
    426: _IANA,
    428: _RFC6585,
    429: _RFC6585,
    431: _RFC6585,
    451: _IANA,
    # 5xx
    500: SERVER_ERROR_TYPE_URI,
    501: f"{_RFC7231}#section-6.6.2",
    502: f"{_RFC7231}#section-6.6.3",
    503: f"{_RFC7231}#section-6.6.4",
    504: f"{_RFC7231}#section-6.6.5",
})


def type_uri_for(status: int | None) -> str:
    """Return the problem type URI for *status*, or the generic RFC 7231 URI."""
    if status is None:
        return DEFAULT_TYPE_URI
    return STATUS_TYPE_URIS.get(int(status), DEFAULT_TYPE_URI)


def status_phrase(status: int) -> str:
    """Reason phrase for *status* ("Bad Request"), or "Unknown Status"."""
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return "Unknown Status"


__all__ = [
    "HTTP",
    "DEFAULT_TYPE_URI",
    "SERVER_ERROR_TYPE_URI",
    "STATUS_TYPE_URIS",
    "type_uri_for",
    "status_phrase",
]
