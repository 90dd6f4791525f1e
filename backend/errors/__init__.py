"""
Sitewright Error Handling Module

Provides standardized error codes, exceptions, and response builders
for consistent error handling across the application.

Usage:
    from errors import (
        # Error codes
        ErrorCode,

        # Exceptions
        SitewrightError,
        ValidationError,
        LLMError,
        ExternalServiceError,
        PersistenceError,
        AuthError,

        # Response builders
        error_response,
        format_error_for_user,

        # Decorators
        handle_async_errors,
        log_error,
    )

Example:
    from errors import LLMError

    analysis = parse_json_response(raw)
    if analysis is None:
        raise LLMError(
            "Analysis response was not valid JSON",
            error_type="parse",
            model=model,
        )
"""

from .codes import ErrorCode
from .exceptions import (
    SitewrightError,
    ValidationError,
    LLMError,
    ExternalServiceError,
    PersistenceError,
    AuthError,
)
from .response import (
    error_response,
    format_error_for_user,
)
from .handlers import (
    handle_async_errors,
    log_error,
)

__all__ = [
    # Error codes
    "ErrorCode",
    # Exceptions
    "SitewrightError",
    "ValidationError",
    "LLMError",
    "ExternalServiceError",
    "PersistenceError",
    "AuthError",
    # Response builders
    "error_response",
    "format_error_for_user",
    # Decorators
    "handle_async_errors",
    "log_error",
]
