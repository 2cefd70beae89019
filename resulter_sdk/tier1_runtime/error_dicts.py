"""
resulter_sdk.tier1_runtime.error_dicts
───────────────────────────────────────
Pure builders that turn each supported error source into a
``dict[str, list[str]]`` keyed by field name or error code. The normalizer
merges these into problem extensions with add-if-absent semantics; they are
also usable on their own (e.g. to build a ValidationError's fields).

Within a single dictionary the first value seen for a key wins.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from pydantic import ValidationError as PydanticValidationError

from resulter_sdk.tier0_core.errors import ProblemFieldsProvider
from resulter_sdk.tier0_core.identity import IdentityError, IdentityErrorLike, IdentityResult

_SCALARS = (str, int, float, bool)


# ── Source models ────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ValidationFailure:
    """A field-level validation failure with a dotted/qualified path."""
    path: str
    message: str

    @property
    def key(self) -> str:
        """Last segment of the path: "address.city" -> "city"."""
        return self.path.rsplit(".", 1)[-1]


def _add(errors: dict[str, list[str]], key: str, values: list[str]) -> None:
    if key not in errors:
        errors[key] = values


# ── Key/value pairs ──────────────────────────────────────────────────────────

def _is_many(values: Any) -> bool:
    return isinstance(values, Iterable) and not isinstance(values, (str, bytes))


def key_value_errors(
    keys: str | Sequence[str], values: Any
) -> dict[str, list[str]]:
    """
    One of four shapes:
        ("Email", "required")                  -> {"Email": ["required"]}
        ("Email", ["required", "invalid"])     -> {"Email": ["required", "invalid"]}
        (["Email", "Name"], "required")        -> both keys -> ["required"]
        (["Email", "Name"], ["bad", "empty"])  -> zipped by position

    Any value that is not a list of values counts as a single value:
    ("Age", 5) -> {"Age": ["5"]}.
    """
    errors: dict[str, list[str]] = {}
    if isinstance(keys, str):
        if _is_many(values):
            _add(errors, keys, [str(v) for v in values])
        else:
            _add(errors, keys, [str(values)])
        return errors

    if not _is_many(values):
        for key in keys:
            _add(errors, key, [str(values)])
        return errors

    keys, values = list(keys), list(values)
    if len(keys) != len(values):
        raise ValueError(
            f"keys and values must have the same length, got {len(keys)} and {len(values)}"
        )
    for key, value in zip(keys, values):
        _add(errors, key, [str(value)])
    return errors


# ── Validation results ───────────────────────────────────────────────────────

def failures_from_pydantic(exc: PydanticValidationError) -> list[ValidationFailure]:
    """Flatten a pydantic ValidationError into dotted-path failures."""
    return [
        ValidationFailure(
            path=".".join(str(loc) for loc in err["loc"]) or "__root__",
            message=err["msg"],
        )
        for err in exc.errors()
    ]


def as_failures(source: Any) -> list[ValidationFailure]:
    """Accept ValidationFailure items, (path, message) tuples or a pydantic error."""
    if isinstance(source, PydanticValidationError):
        return failures_from_pydantic(source)
    failures = []
    for item in source:
        if isinstance(item, ValidationFailure):
            failures.append(item)
        else:
            path, message = item
            failures.append(ValidationFailure(path=str(path), message=str(message)))
    return failures


def validation_errors(source: Any) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    for failure in as_failures(source):
        _add(errors, failure.key, [failure.message])
    return errors


def member_validation_errors(
    message: str | None, member_names: Iterable[str], default_message: str
) -> dict[str, list[str]]:
    """The error message is the key; the offending member names are the value."""
    return {message or default_message: [str(name) for name in member_names]}


# ── Identity provider results ────────────────────────────────────────────────

def identity_errors(source: Any) -> dict[str, list[str]]:
    """Accept an IdentityResult, error objects with code/description, or tuples."""
    items = source.errors if isinstance(source, IdentityResult) else source
    errors: dict[str, list[str]] = {}
    for item in items:
        if isinstance(item, tuple):
            error = IdentityError(code=str(item[0]), description=str(item[1]))
        elif isinstance(item, IdentityErrorLike):
            error = item
        else:
            raise TypeError(f"Unsupported identity error: {item!r}")
        _add(errors, error.code, [error.description])
    return errors


# ── Exceptions ───────────────────────────────────────────────────────────────

def _default_fields(exc: BaseException) -> Iterable[tuple[str, Any]]:
    yield "type", type(exc).__qualname__
    # stringified by exception_fields, so a failing __str__ drops only this field
    yield "message", exc
    for name, value in list(getattr(exc, "__dict__", {}).items()):
        if not name.startswith("_") and isinstance(value, _SCALARS):
            yield name, value
    cause = exc.__cause__ or exc.__context__
    if cause is not None:
        try:
            text = f"{type(cause).__qualname__}: {cause}"
        except Exception:
            text = type(cause).__qualname__
        yield "cause", text


def exception_fields(exc: BaseException) -> list[tuple[str, str]]:
    """
    Named, stringified, non-null fields of *exc*. Uses problem_fields() when
    the exception provides it. A field that cannot be read or stringified
    is omitted; this never raises.
    """
    try:
        if isinstance(exc, ProblemFieldsProvider):
            iterator = iter(exc.problem_fields())
        else:
            iterator = iter(_default_fields(exc))
    except Exception:
        return []

    fields: list[tuple[str, str]] = []
    seen: set[str] = set()
    while True:
        try:
            name, value = next(iterator)
        except StopIteration:
            break
        except Exception:
            # an unreadable field ends enumeration; what was collected stays
            break
        if value is None or name in seen:
            continue
        try:
            text = str(value)
        except Exception:
            continue
        seen.add(name)
        fields.append((str(name), text))
    return fields


def exception_errors(exc: BaseException) -> dict[str, list[str]]:
    return {name: [value] for name, value in exception_fields(exc)}


__all__ = [
    "ValidationFailure",
    "key_value_errors",
    "failures_from_pydantic",
    "as_failures",
    "validation_errors",
    "member_validation_errors",
    "identity_errors",
    "exception_fields",
    "exception_errors",
]
