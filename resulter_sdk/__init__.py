"""
resulter_sdk
────────────
Stable top-level exports. Import from here, not from sub-modules directly.
Every name exported here is part of the public API and subject to semver.
"""
from resulter_sdk.tier0_core.http import HTTP, type_uri_for
from resulter_sdk.tier0_core.problem import Problem
from resulter_sdk.tier0_core.envelope import Envelope, UntypedEnvelope
from resulter_sdk.tier0_core.errors import (
    ProblemFieldsProvider,
    ResulterError,
    BadRequestError,
    AuthError,
    ForbiddenError,
    NotFoundError,
    ConflictError,
    ValidationError,
    RateLimitError,
    UpstreamError,
    ConfigurationError,
)
from resulter_sdk.tier0_core.identity import IdentityError, IdentityResult
from resulter_sdk.tier0_core.config import get_config, ResulterConfig
from resulter_sdk.tier0_core.logging import get_logger

from resulter_sdk.tier1_runtime.context import (
    get_context,
    set_context,
    new_context,
    RequestContext,
)
from resulter_sdk.tier1_runtime.error_dicts import ValidationFailure
from resulter_sdk.tier1_runtime.normalize import (
    with_default_problem,
    with_custom_problem,
    add_from_key_values,
    add_from_validation,
    add_from_member_validation,
    add_from_identity_result,
    add_from_exception,
)
from resulter_sdk.tier1_runtime.validate import validate_input, validate_or_raise
from resulter_sdk.tier1_runtime.serialize import serialize, envelope_to_dict
from resulter_sdk.tier1_runtime.render import HttpResponse, render, render_problem
from resulter_sdk.tier1_runtime.middleware import ResulterASGIMiddleware, ResulterWSGIMiddleware

__version__ = "0.1.0"
__all__ = [
    # http
    "HTTP", "type_uri_for",
    # envelope
    "Envelope", "UntypedEnvelope", "Problem",
    # errors
    "ProblemFieldsProvider", "ResulterError", "BadRequestError", "AuthError",
    "ForbiddenError", "NotFoundError", "ConflictError", "ValidationError",
    "RateLimitError", "UpstreamError", "ConfigurationError",
    # identity
    "IdentityError", "IdentityResult",
    # config
    "get_config", "ResulterConfig",
    # logging
    "get_logger",
    # context
    "get_context", "set_context", "new_context", "RequestContext",
    # normalize
    "ValidationFailure",
    "with_default_problem", "with_custom_problem", "add_from_key_values",
    "add_from_validation", "add_from_member_validation",
    "add_from_identity_result", "add_from_exception",
    # validate
    "validate_input", "validate_or_raise",
    # serialize
    "serialize", "envelope_to_dict",
    # render
    "HttpResponse", "render", "render_problem",
    # middleware
    "ResulterASGIMiddleware", "ResulterWSGIMiddleware",
]
