"""
resulter_sdk.tier1_runtime.normalize
─────────────────────────────────────
Problem normalizer: builds or merges an envelope's Problem from varied error
sources. Every operation updates the envelope in place and returns it, so
calls chain:

    env = Envelope.failure()
    add_from_key_values(env, "Email", "Email is required.")
    add_from_validation(env, [("user.email", "invalid")])   # "email" key

Merge rules:
  - extensions are additive: the first call to introduce a key wins, later
    calls with the same key are no-ops for that key
  - top-level fields (type/title/detail/status) are overwritable: the last
    call in the chain wins
  - every add_from_* operation seeds a default Problem when none exists and
    never resets an existing one
"""
from __future__ import annotations

import traceback
from typing import Any, Iterable, Mapping, Sequence, TypeVar

from resulter_sdk.tier0_core.config import get_config
from resulter_sdk.tier0_core.envelope import Envelope
from resulter_sdk.tier0_core.http import HTTP, SERVER_ERROR_TYPE_URI, status_phrase, type_uri_for
from resulter_sdk.tier0_core.logging import get_logger
from resulter_sdk.tier0_core.problem import Problem
from resulter_sdk.tier0_core.redact import redact_fields, scrub_string
from resulter_sdk.tier1_runtime import error_dicts
from resulter_sdk.tier1_runtime.context import get_request_path
from resulter_sdk.tier1_runtime.serialize import serialize_exception

E = TypeVar("E", bound=Envelope)

STACK_TRACE_KEY = "stackTrace"

log = get_logger(__name__)


# ── Helpers ──────────────────────────────────────────────────────────────────

def default_problem(status: int) -> Problem:
    """Problem seeded from the status code → type URI table."""
    return Problem(
        type=type_uri_for(status),
        title=get_config().default_title,
        detail=f"A problem occurred ({status} {status_phrase(status)}).",
        status=status,
        instance=None,
        extensions={},
    )


def _ensure_problem(envelope: E) -> Problem:
    if envelope.problem is None:
        with_default_problem(envelope)
    return envelope.problem


def _backfill_status(envelope: Envelope, status: int) -> None:
    if envelope.status_code is None:
        envelope.status_code = status


def _merge(envelope: Envelope, errors: Mapping[str, Any], source: str) -> None:
    problem = _ensure_problem(envelope)
    added = problem.merge_extensions(errors)
    skipped = [key for key in errors if key not in added]
    if skipped:
        log.debug("problem.extensions_skipped", source=source, keys=skipped)


# ── Builders ─────────────────────────────────────────────────────────────────

def with_default_problem(envelope: E) -> E:
    """Replace the envelope's problem with the default for its status (or 400)."""
    status = envelope.status_code if envelope.status_code is not None else HTTP.BAD_REQUEST
    envelope.problem = default_problem(status)
    _backfill_status(envelope, status)
    return envelope


def with_custom_problem(
    envelope: E,
    type: str | None = None,
    title: str | None = None,
    detail: str | None = None,
    status: int | None = None,
    instance: str | None = None,
    extensions: Mapping[str, Any] | None = None,
) -> E:
    """
    Overwrite the given top-level fields (None keeps the current value) and
    merge *extensions* add-if-absent.
    """
    problem = _ensure_problem(envelope)
    if type is not None:
        problem.type = type
    if title is not None:
        problem.title = title
    if detail is not None:
        problem.detail = detail
    if status is not None:
        problem.status = status
        _backfill_status(envelope, status)
    if instance is not None:
        problem.instance = instance
    if extensions:
        _merge(envelope, extensions, "custom")
    return envelope


# ── Error sources ────────────────────────────────────────────────────────────

def add_from_key_values(
    envelope: E, keys: str | Sequence[str], values: Any
) -> E:
    """
    Add errors given as (key, value), (key, [values]), ([keys], shared value)
    or ([keys], [values]) zipped by position.
    """
    _merge(envelope, error_dicts.key_value_errors(keys, values), "key_values")
    return envelope


def add_from_validation(envelope: E, failures: Any) -> E:
    """
    Add field-level validation failures keyed by the last segment of their
    dotted path. Accepts ValidationFailure items, (path, message) tuples or a
    pydantic ValidationError. The first message per key wins.
    """
    errors = error_dicts.validation_errors(failures)
    _ensure_problem(envelope).title = get_config().validation_title
    _merge(envelope, errors, "validation")
    return envelope


def add_from_member_validation(
    envelope: E, message: str | None, member_names: Iterable[str]
) -> E:
    """Add a message-keyed failure listing the member names it applies to."""
    config = get_config()
    errors = error_dicts.member_validation_errors(message, member_names, config.validation_title)
    _ensure_problem(envelope).title = config.validation_title
    _merge(envelope, errors, "member_validation")
    return envelope


def add_from_identity_result(envelope: E, errors: Any) -> E:
    """Add identity-provider errors as {code: [description]}."""
    identity = error_dicts.identity_errors(errors)
    _ensure_problem(envelope).title = get_config().validation_title
    _merge(envelope, identity, "identity")
    return envelope


def add_from_exception(
    envelope: E, exc: BaseException, request_path: str | None = None
) -> E:
    """
    Describe *exc* on the envelope's problem: its named fields become
    single-value extensions, detail is a JSON dump of the exception, status is
    the envelope's status or 500. instance is the request path (argument, else
    the active request context) and is otherwise left None; the traceback goes
    under the "stackTrace" extension only when RESULTER_EXPOSE_STACK_TRACE is on.
    Never raises on unreadable exception fields.
    """
    config = get_config()
    status = envelope.status_code if envelope.status_code is not None else HTTP.INTERNAL_SERVER_ERROR
    _backfill_status(envelope, status)
    problem = _ensure_problem(envelope)

    fields = error_dicts.exception_fields(exc)
    if config.redact_exception_fields:
        fields = redact_fields(fields)
    _merge(envelope, {name: [value] for name, value in fields}, "exception")

    detail = serialize_exception(exc, fields)

    problem.type = SERVER_ERROR_TYPE_URI
    problem.title = config.exception_title
    problem.detail = scrub_string(detail) if config.redact_exception_fields else detail
    problem.status = status
    problem.instance = request_path or get_request_path() or problem.instance

    if config.expose_stack_trace and exc.__traceback__ is not None:
        trace = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        problem.add_extension(STACK_TRACE_KEY, [trace])

    log.info(
        "problem.from_exception",
        exc_type=type(exc).__qualname__,
        instance=problem.instance,
        problem=problem,
    )
    return envelope


__all__ = [
    "STACK_TRACE_KEY",
    "default_problem",
    "with_default_problem",
    "with_custom_problem",
    "add_from_key_values",
    "add_from_validation",
    "add_from_member_validation",
    "add_from_identity_result",
    "add_from_exception",
]
