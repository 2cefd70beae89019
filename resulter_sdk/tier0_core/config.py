"""
resulter_sdk.tier0_core.config
───────────────────────────────
Typed configuration with env layering. Reads from .env → environment
variables. All fields are typed via Pydantic.

Minimal stack: pydantic-settings + python-dotenv
"""
from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ResulterConfig(BaseSettings):
    """
    Typed SDK configuration. All env vars are prefixed with RESULTER_.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # ── Application ───────────────────────────────────────────────────────────
    environment: str = Field(default="development", alias="RESULTER_ENV")

    # ── Logging ───────────────────────────────────────────────────────────────
    log_level: str = Field(default="INFO", alias="RESULTER_LOG_LEVEL")
    log_format: str = Field(default="json", alias="RESULTER_LOG_FORMAT")

    # ── Problem texts ─────────────────────────────────────────────────────────
    default_title: str = Field(default="A problem occurred.", alias="RESULTER_DEFAULT_TITLE")
    validation_title: str = Field(
        default="One or more validation errors occurred.",
        alias="RESULTER_VALIDATION_TITLE",
    )
    exception_title: str = Field(
        default="An exception was thrown.", alias="RESULTER_EXCEPTION_TITLE"
    )

    # ── Exception dumps ───────────────────────────────────────────────────────
    expose_stack_trace: bool = Field(default=False, alias="RESULTER_EXPOSE_STACK_TRACE")
    redact_exception_fields: bool = Field(
        default=True, alias="RESULTER_REDACT_EXCEPTION_FIELDS"
    )

    @field_validator("environment")
    @classmethod
    def validate_env(cls, v: str) -> str:
        allowed = {"development", "staging", "production", "test"}
        if v.lower() not in allowed:
            raise ValueError(f"environment must be one of {allowed}, got {v!r}")
        return v.lower()

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        if v.lower() not in {"json", "console"}:
            raise ValueError(f"log_format must be 'json' or 'console', got {v!r}")
        return v.lower()


@lru_cache(maxsize=1)
def get_config() -> ResulterConfig:
    """
    Return the singleton SDK config. Cached after first call.
    Call _reset_config() in tests to pick up new env vars.
    """
    return ResulterConfig()


def _reset_config() -> None:
    """For tests — clear the config cache."""
    get_config.cache_clear()


__all__ = ["ResulterConfig", "get_config"]
