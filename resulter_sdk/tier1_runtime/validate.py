"""
resulter_sdk.tier1_runtime.validate
────────────────────────────────────
Input/schema validation via Pydantic v2, reported as envelopes instead of
raw Pydantic errors so API responses are always consistent.
"""
from __future__ import annotations

from typing import Any, Type, TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError

from resulter_sdk.tier0_core.envelope import Envelope
from resulter_sdk.tier0_core.errors import ValidationError
from resulter_sdk.tier0_core.http import HTTP
from resulter_sdk.tier1_runtime.error_dicts import failures_from_pydantic

T = TypeVar("T", bound=BaseModel)


def validate_input(
    model: Type[T], data: Any, status_code: int = HTTP.BAD_REQUEST
) -> Envelope[T]:
    """
    Validate raw data against a Pydantic model.
    Returns a success envelope holding the model, or a failure envelope whose
    problem extensions map each failing field to its first message.

    Usage:
        class CreateUser(BaseModel):
            email: str
            name: str

        env = validate_input(CreateUser, request_json)
        if not env.succeeded:
            return render(env)
    """
    try:
        return Envelope.success(model.model_validate(data))
    except PydanticValidationError as exc:
        return Envelope.failure(status_code=status_code).add_from_validation(exc)


def validate_or_raise(model: Type[T], data: Any) -> T:
    """
    Validate and return the model, raising the SDK ValidationError (422) with
    per-field messages on failure. Useful deep in service code where the
    middleware turns the error into a problem response.
    """
    try:
        return model.model_validate(data)
    except PydanticValidationError as exc:
        fields: dict[str, str] = {}
        for failure in failures_from_pydantic(exc):
            fields.setdefault(failure.path, failure.message)
        raise ValidationError(
            code="validation_error",
            user_message="Request validation failed.",
            fields=fields,
        ) from exc


__all__ = ["validate_input", "validate_or_raise"]
