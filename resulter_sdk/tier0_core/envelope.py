"""
resulter_sdk.tier0_core.envelope
─────────────────────────────────
Outcome envelope: whether an operation succeeded, its HTTP status code, the
optional payload, and an optional Problem. One generic type covers both the
typed and the payload-less form (UntypedEnvelope).

Usage:
    env = Envelope.success({"id": "u_123"}, status_code=HTTP.CREATED)

    env = (
        Envelope.failure()
        .add_from_key_values("Email", "Email is required.")
        .add_from_key_values("Password", "Too short.")
    )
"""
from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, Iterable, Mapping, Sequence, TypeVar, get_origin

from resulter_sdk.tier0_core.http import HTTP
from resulter_sdk.tier0_core.problem import Problem

if TYPE_CHECKING:
    from resulter_sdk.tier0_core.errors import ResulterError

T = TypeVar("T")
U = TypeVar("U")


# ── Envelope ─────────────────────────────────────────────────────────────────

@dataclass
class Envelope(Generic[T]):
    """Success/failure wrapper returned by an operation."""
    succeeded: bool
    status_code: int | None = None
    data: T | None = None
    problem: Problem | None = None

    # ── Factories ────────────────────────────────────────────────────────────

    @classmethod
    def create(
        cls,
        succeeded: bool,
        status_code: int | None = None,
        data: T | None = None,
        problem: Problem | None = None,
    ) -> Envelope[T]:
        """
        General constructor. A missing status code is taken from the problem,
        else 200; the resolved value is mirrored onto problem.status if unset.
        """
        if status_code is None:
            status_code = problem.status if problem is not None and problem.status is not None else HTTP.OK
        if problem is not None and problem.status is None:
            problem.status = status_code
        return cls(succeeded=succeeded, status_code=status_code, data=data, problem=problem)

    @classmethod
    def success(cls, data: T | None = None, status_code: int = HTTP.OK) -> Envelope[T]:
        return cls(succeeded=True, status_code=status_code, data=data)

    @classmethod
    def of(cls, data: T) -> Envelope[T]:
        """Wrap a raw value as a 200 success envelope."""
        return cls.success(data)

    @classmethod
    def failure(
        cls,
        problem: Problem | None = None,
        status_code: int = HTTP.BAD_REQUEST,
    ) -> Envelope[T]:
        """
        Failed envelope with *status_code* (400 by default). A given problem
        keeps its own status unless it has none; a default Problem is
        synthesized when none is given.
        """
        env: Envelope[T] = cls(succeeded=False, status_code=status_code, problem=problem)
        if problem is None:
            return env.with_default_problem()
        if problem.status is None:
            problem.status = status_code
        return env

    @classmethod
    def from_error(cls, error: ResulterError, request_path: str | None = None) -> Envelope[T]:
        """Failed envelope for a taxonomy error, carrying its status code."""
        return cls.failure(status_code=error.status_code).add_from_exception(error, request_path)

    # ── Status resolution ────────────────────────────────────────────────────

    @property
    def resolved_status_code(self) -> int:
        if self.status_code is not None:
            return self.status_code
        if self.problem is not None and self.problem.status is not None:
            return self.problem.status
        return HTTP.OK if self.succeeded else HTTP.BAD_REQUEST

    # ── Conversions ──────────────────────────────────────────────────────────

    def as_untyped(self) -> UntypedEnvelope:
        """Drop the payload type; data is carried over as-is."""
        return Envelope(
            succeeded=self.succeeded,
            status_code=self.status_code,
            data=self.data,
            problem=copy.deepcopy(self.problem),
        )

    def cast(self, target: type[U]) -> Envelope[U]:
        """
        Re-type the envelope. Data survives only when it is an instance of
        *target*; otherwise the new envelope carries no payload. Never raises.
        """
        data = self.data if _is_instance(self.data, target) else None
        return Envelope(
            succeeded=self.succeeded,
            status_code=self.status_code,
            data=data,
            problem=copy.deepcopy(self.problem),
        )

    # ── Fluent normalizer chain ──────────────────────────────────────────────

    def with_default_problem(self) -> Envelope[T]:
        from resulter_sdk.tier1_runtime import normalize
        return normalize.with_default_problem(self)

    def with_custom_problem(
        self,
        type: str | None = None,
        title: str | None = None,
        detail: str | None = None,
        status: int | None = None,
        instance: str | None = None,
        extensions: Mapping[str, Any] | None = None,
    ) -> Envelope[T]:
        from resulter_sdk.tier1_runtime import normalize
        return normalize.with_custom_problem(
            self, type=type, title=title, detail=detail,
            status=status, instance=instance, extensions=extensions,
        )

    def add_from_key_values(
        self, keys: str | Sequence[str], values: Any
    ) -> Envelope[T]:
        from resulter_sdk.tier1_runtime import normalize
        return normalize.add_from_key_values(self, keys, values)

    def add_from_validation(self, failures: Any) -> Envelope[T]:
        from resulter_sdk.tier1_runtime import normalize
        return normalize.add_from_validation(self, failures)

    def add_from_member_validation(
        self, message: str | None, member_names: Iterable[str]
    ) -> Envelope[T]:
        from resulter_sdk.tier1_runtime import normalize
        return normalize.add_from_member_validation(self, message, member_names)

    def add_from_identity_result(self, errors: Any) -> Envelope[T]:
        from resulter_sdk.tier1_runtime import normalize
        return normalize.add_from_identity_result(self, errors)

    def add_from_exception(
        self, exc: BaseException, request_path: str | None = None
    ) -> Envelope[T]:
        from resulter_sdk.tier1_runtime import normalize
        return normalize.add_from_exception(self, exc, request_path)


UntypedEnvelope = Envelope[Any]


def _is_instance(value: Any, target: Any) -> bool:
    if value is None:
        return False
    if target is Any or target is object:
        return True
    if target is int and isinstance(value, bool):
        return False
    try:
        return isinstance(value, target)
    except TypeError:
        pass
    # subscripted generics (list[int]) are matched on their origin
    origin = get_origin(target)
    if origin is None:
        return False
    try:
        return isinstance(value, origin)
    except TypeError:
        return False


__all__ = ["Envelope", "UntypedEnvelope"]
