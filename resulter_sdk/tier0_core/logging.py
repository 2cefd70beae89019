"""
resulter_sdk.tier0_core.logging
────────────────────────────────
Structured logs for SDK events (problem building, request handling), with
request context injection and redaction.

Records go to the "resulter_sdk" stdlib logger only, so a host application
keeps control of its root logger. A ``problem=`` keyword on a log call is
flattened to its status, type, title and extension keys; extension values
(which can carry user input) never reach the log.

Minimal stack: structlog (stdout JSON or console)
Configure via: RESULTER_LOG_LEVEL, RESULTER_LOG_FORMAT=json|console
"""
from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from resulter_sdk.tier0_core.config import get_config
from resulter_sdk.tier0_core.redact import structlog_redact_processor

SDK_LOGGER = "resulter_sdk"


# ── Processors ────────────────────────────────────────────────────────────────

def flatten_problem(logger: Any, method: str, event_dict: dict) -> dict:
    """Replace a ``problem`` entry with problem_status/type/title/keys."""
    problem = event_dict.pop("problem", None)
    if problem is None:
        return event_dict
    event_dict["problem_status"] = getattr(problem, "status", None)
    event_dict["problem_type"] = getattr(problem, "type", None)
    event_dict["problem_title"] = getattr(problem, "title", None)
    event_dict["problem_keys"] = sorted(getattr(problem, "extensions", None) or {})
    return event_dict


def _shared_processors() -> list[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        flatten_problem,
        structlog_redact_processor,
    ]


def _renderer(log_format: str) -> Any:
    if log_format == "console":
        return structlog.dev.ConsoleRenderer()
    return structlog.processors.JSONRenderer()


# ── Configuration ─────────────────────────────────────────────────────────────

_handler: logging.Handler | None = None


def _configure_structlog() -> None:
    global _handler
    config = get_config()
    level = getattr(logging, config.log_level.upper(), logging.INFO)
    shared = _shared_processors()

    structlog.configure(
        processors=shared + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            _renderer(config.log_format),
        ],
    ))

    # one SDK handler at a time, however often this runs
    sdk_logger = logging.getLogger(SDK_LOGGER)
    if _handler is not None:
        sdk_logger.removeHandler(_handler)
    sdk_logger.addHandler(handler)
    sdk_logger.setLevel(level)
    _handler = handler


# ── Public API ────────────────────────────────────────────────────────────────

_configured = False


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """
    Return a structured logger bound to the given name.

    Usage:
        log = get_logger(__name__)
        log.info("problem.from_exception", exc_type="KeyError", problem=problem)
    """
    global _configured
    if not _configured:
        _configure_structlog()
        _configured = True
    return structlog.get_logger(name or SDK_LOGGER)


__all__ = ["get_logger", "flatten_problem", "SDK_LOGGER"]
