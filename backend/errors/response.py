"""
Standard response builders for Sitewright.

Provides the failure envelope for the HTTP layer and the assistant-facing
error text stored in conversation history.
"""

import traceback
from .codes import ErrorCode
from .exceptions import SitewrightError


def error_response(error: SitewrightError | Exception, include_stack: bool = False) -> dict:
    """Build the failure envelope returned to callers.

    Args:
        error: The exception to convert to a response
        include_stack: Whether to attach the formatted traceback

    Returns:
        Failure envelope with success=False

    Example:
        >>> from errors import ExternalServiceError, error_response
        >>> err = ExternalServiceError("Generation service returned 429", service="llm", status_code=429)
        >>> error_response(err)
        {"success": False, "error": "Generation service returned 429", "code": "EXTERNAL_LLM_FAILED"}
    """
    if isinstance(error, SitewrightError):
        response = {
            "success": False,
            "error": str(error),
            "code": error.code.value,
        }
    else:
        response = {
            "success": False,
            "error": str(error) or "Internal server error",
            "code": ErrorCode.INTERNAL_UNEXPECTED.value,
        }

    if include_stack:
        response["stack"] = "".join(traceback.format_exception(type(error), error, error.__traceback__))

    return response


def format_error_for_user(error: SitewrightError | Exception) -> str:
    """Format an error as the assistant reply stored in conversation history."""
    if isinstance(error, SitewrightError):
        parts = [f"Sorry, I couldn't complete that request: {error.message}"]
        if error.details:
            parts.append(f"Details: {error.details}")
        if error.recoverable:
            parts.append("Please try again.")
        return " ".join(parts)

    return f"Sorry, I couldn't complete that request: {str(error)}"
