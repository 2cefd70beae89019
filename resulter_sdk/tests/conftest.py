"""
resulter_sdk test configuration.

Tests run against the default problem texts with stack traces hidden.
Override by setting environment variables before running pytest.
"""
from __future__ import annotations

import os

import pytest

# ── Force test settings ───────────────────────────────────────────────────
# These must be set before any resulter_sdk modules are imported.

os.environ.setdefault("RESULTER_ENV", "test")
os.environ.setdefault("RESULTER_LOG_LEVEL", "WARNING")
os.environ.setdefault("RESULTER_LOG_FORMAT", "json")
os.environ.setdefault("RESULTER_EXPOSE_STACK_TRACE", "false")
os.environ.setdefault("RESULTER_REDACT_EXCEPTION_FIELDS", "true")


# ── Fixtures ───────────────────────────────────────────────────────────────

@pytest.fixture(autouse=True)
def reset_module_singletons():
    """
    Reset the cached config and the request context between tests so env
    overrides and request paths never bleed from one test into the next.
    """
    from resulter_sdk.tier0_core.config import _reset_config
    from resulter_sdk.tier1_runtime.context import clear_context

    _reset_config()
    yield
    _reset_config()
    clear_context()


@pytest.fixture
def signup_failure():
    """The canonical two-field failure used across render tests."""
    from resulter_sdk.tier0_core.envelope import Envelope

    return (
        Envelope.failure()
        .add_from_key_values("Email", "Email is required.")
        .add_from_key_values("Password", "Too short.")
    )
