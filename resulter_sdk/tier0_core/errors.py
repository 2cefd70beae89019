"""
resulter_sdk.tier0_core.errors
───────────────────────────────
Standard error taxonomy with stable codes, user-safe messages and HTTP
status codes, plus the ProblemFieldsProvider protocol: the explicit way an
exception lists the named fields that end up as problem extensions.

Any exception type can opt in by implementing ``problem_fields()``; plain
exceptions fall back to a default field set (see normalize.add_from_exception).
"""
from __future__ import annotations

from typing import Any, Iterable, Protocol, runtime_checkable


# ── Field exposure protocol ───────────────────────────────────────────────────

@runtime_checkable
class ProblemFieldsProvider(Protocol):
    """Implement this on an exception to control which fields are exposed."""

    def problem_fields(self) -> Iterable[tuple[str, Any]]:
        """Return (name, value) pairs. None values are skipped."""
        ...


# ── Base error ────────────────────────────────────────────────────────────────

class ResulterError(Exception):
    """
    Base class for SDK errors. Every error has:
    - code: stable machine-readable string (snake_case)
    - user_message: safe to surface to end users
    - detail: internal context, never shown to users
    - status_code: HTTP status code for API responses
    """

    status_code: int = 500
    code: str = "internal_error"

    def __init__(
        self,
        code: str | None = None,
        user_message: str = "An unexpected error occurred.",
        detail: str | None = None,
        **metadata: Any,
    ) -> None:
        self.code = code or self.__class__.code
        self.user_message = user_message
        self.detail = detail or user_message
        self.metadata = metadata
        super().__init__(self.detail)

    def problem_fields(self) -> Iterable[tuple[str, Any]]:
        yield "code", self.code
        yield "message", self.user_message
        for key, value in self.metadata.items():
            yield key, value


# ── Typed error classes ───────────────────────────────────────────────────────

class BadRequestError(ResulterError):
    """Malformed request."""
    status_code = 400
    code = "bad_request"


class AuthError(ResulterError):
    """Authentication failure."""
    status_code = 401
    code = "auth_error"


class ForbiddenError(ResulterError):
    """Principal is authenticated but not authorized for this action."""
    status_code = 403
    code = "forbidden"


class NotFoundError(ResulterError):
    """Requested resource does not exist."""
    status_code = 404
    code = "not_found"


class ConflictError(ResulterError):
    """Resource state conflict (e.g., duplicate creation)."""
    status_code = 409
    code = "conflict"


class ValidationError(ResulterError):
    """Input validation failure."""
    status_code = 422
    code = "validation_error"

    def __init__(
        self,
        code: str | None = None,
        user_message: str = "Validation failed.",
        fields: dict | None = None,
        **metadata: Any,
    ) -> None:
        self.fields = fields or {}
        super().__init__(code, user_message, **metadata)

    def problem_fields(self) -> Iterable[tuple[str, Any]]:
        yield from super().problem_fields()
        for name, message in self.fields.items():
            yield name, message


class RateLimitError(ResulterError):
    """Rate limit or quota exceeded."""
    status_code = 429
    code = "rate_limit_exceeded"

    def __init__(
        self,
        code: str | None = None,
        user_message: str = "Too many requests. Please try again later.",
        retry_after: int | None = None,
        **metadata: Any,
    ) -> None:
        self.retry_after = retry_after
        super().__init__(code, user_message, **metadata)

    def problem_fields(self) -> Iterable[tuple[str, Any]]:
        yield from super().problem_fields()
        yield "retry_after", self.retry_after


class UpstreamError(ResulterError):
    """Upstream service failure."""
    status_code = 502
    code = "upstream_error"


class ConfigurationError(ResulterError):
    """Misconfiguration detected at startup."""
    status_code = 500
    code = "configuration_error"


def status_code_for(exc: BaseException) -> int:
    """HTTP status for an arbitrary exception: taxonomy status, else 500."""
    if isinstance(exc, ResulterError):
        return exc.status_code
    return 500


__all__ = [
    "ProblemFieldsProvider",
    "ResulterError",
    "BadRequestError",
    "AuthError",
    "ForbiddenError",
    "NotFoundError",
    "ConflictError",
    "ValidationError",
    "RateLimitError",
    "UpstreamError",
    "ConfigurationError",
    "status_code_for",
]
