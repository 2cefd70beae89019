"""
resulter_sdk.tier0_core.redact
───────────────────────────────
Secret redaction for everything that leaves the process: exception fields
dumped into problem extensions, the serialized exception detail, and log
records.
"""
from __future__ import annotations

import re
from typing import Any, Iterable

# ── Default redacted key names (case-insensitive) ─────────────────────────

SENSITIVE_KEYS: frozenset[str] = frozenset({
    "password", "passwd", "secret", "token", "api_key", "apikey",
    "access_token", "refresh_token", "private_key", "client_secret",
    "authorization", "x-api-key", "cookie", "session", "ssn",
    "credit_card", "card_number", "cvv", "pin",
})

# ── Regex patterns for inline scrubbing ───────────────────────────────────

_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    # Bearer tokens
    (re.compile(r"Bearer\s+[A-Za-z0-9\-._~+/]+=*", re.I), "Bearer [REDACTED]"),
    # Basic auth
    (re.compile(r"Basic\s+[A-Za-z0-9+/=]+", re.I), "Basic [REDACTED]"),
    # Generic key=value secrets
    (re.compile(
        r"(password|secret|token|api[_-]?key)\s*=\s*[^\s&\"']+",
        re.I,
    ), r"\1=[REDACTED]"),
]

REDACTED = "[REDACTED]"


# ── Public API ─────────────────────────────────────────────────────────────

def is_sensitive(key: str) -> bool:
    return key.lower() in SENSITIVE_KEYS


def redact_fields(fields: Iterable[tuple[str, str]]) -> list[tuple[str, str]]:
    """Replace the value of every sensitive (name, value) pair with REDACTED."""
    return [(name, REDACTED if is_sensitive(name) else value) for name, value in fields]


def scrub_string(text: str) -> str:
    """Apply regex-based scrubbing to an arbitrary string."""
    for pattern, replacement in _PATTERNS:
        text = pattern.sub(replacement, text)
    return text


def structlog_redact_processor(
    logger: Any,
    method: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """structlog processor that redacts sensitive top-level keys."""
    for key in list(event_dict.keys()):
        if is_sensitive(key):
            event_dict[key] = REDACTED
    return event_dict


__all__ = [
    "REDACTED",
    "SENSITIVE_KEYS",
    "is_sensitive",
    "redact_fields",
    "scrub_string",
    "structlog_redact_processor",
]
