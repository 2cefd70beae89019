"""
resulter_sdk.tier1_runtime.serialize
─────────────────────────────────────
Envelope and problem serialization. The wire shape of an envelope is

    {"succeeded": ..., "statusCode": ..., "data": ..., "problemDetails": ...}

with problemDetails in RFC 7807 form (type/title/detail/status/instance/
extensions). Payloads that are Pydantic models or dataclasses are dumped to
plain JSON-ready values; anything else json can't encode falls back to str().
"""
from __future__ import annotations

import dataclasses
import json
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

if TYPE_CHECKING:
    from resulter_sdk.tier0_core.envelope import Envelope
    from resulter_sdk.tier0_core.problem import Problem


def to_jsonable(value: Any) -> Any:
    """Convert a payload to plain JSON-ready data."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    return value


def problem_to_dict(problem: Problem | None) -> dict[str, Any] | None:
    if problem is None:
        return None
    return problem.to_dict()


def envelope_to_dict(envelope: Envelope[Any]) -> dict[str, Any]:
    return {
        "succeeded": envelope.succeeded,
        "statusCode": envelope.status_code,
        "data": to_jsonable(envelope.data),
        "problemDetails": problem_to_dict(envelope.problem),
    }


def dumps(obj: Any) -> bytes:
    """Compact UTF-8 JSON bytes."""
    return json.dumps(to_jsonable(obj), default=str, separators=(",", ":")).encode()


def serialize(envelope: Envelope[Any], format: str = "json") -> bytes:
    """
    Serialize an envelope to bytes.

    Usage:
        body = serialize(Envelope.success({"id": "123"}))
    """
    fmt = format.lower()
    if fmt == "json":
        return dumps(envelope_to_dict(envelope))
    raise ValueError(f"Unsupported serialize format: {fmt!r}. Supported: json")


def serialize_exception(exc: BaseException, fields: list[tuple[str, str]]) -> str:
    """
    Structured JSON description of an exception (class, module, message,
    args, named fields, cause chain). Falls back to repr() if anything in the
    exception refuses to serialize; never raises.
    """
    try:
        return json.dumps(_describe(exc, fields), default=repr)
    except Exception:
        try:
            return repr(exc)
        except Exception:
            return type(exc).__qualname__


def _describe(exc: BaseException, fields: list[tuple[str, str]], depth: int = 0) -> dict[str, Any]:
    described: dict[str, Any] = {
        "type": type(exc).__qualname__,
        "module": type(exc).__module__,
        "message": str(exc),
        "args": [repr(arg) for arg in exc.args],
        "fields": dict(fields),
    }
    cause = exc.__cause__ or exc.__context__
    if cause is not None and depth < 5:
        described["cause"] = _describe(cause, [], depth + 1)
    return described


__all__ = [
    "to_jsonable",
    "problem_to_dict",
    "envelope_to_dict",
    "dumps",
    "serialize",
    "serialize_exception",
]
