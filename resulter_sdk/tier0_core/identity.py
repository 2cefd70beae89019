"""
resulter_sdk.tier0_core.identity
─────────────────────────────────
Provider-agnostic shape of an identity/auth provider's error result: a list
of (code, description) errors. Provider adapters normalize their own result
objects into IdentityResult; anything exposing ``code`` and ``description``
attributes is accepted as an IdentityError by the normalizer.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable


# ── Domain model ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class IdentityError:
    """A single identity-provider error."""
    code: str
    description: str


@dataclass(frozen=True)
class IdentityResult:
    """Outcome of an identity operation (create user, change password, ...)."""
    succeeded: bool = True
    errors: tuple[IdentityError, ...] = field(default_factory=tuple)

    @classmethod
    def failed(cls, *errors: IdentityError) -> IdentityResult:
        return cls(succeeded=False, errors=tuple(errors))


# ── Error protocol ───────────────────────────────────────────────────────────

@runtime_checkable
class IdentityErrorLike(Protocol):
    """Structural type for provider-specific error objects."""
    code: str
    description: str


__all__ = ["IdentityError", "IdentityResult", "IdentityErrorLike"]
