"""
Custom exception hierarchy for Sitewright.

All exceptions inherit from SitewrightError and include:
- code: ErrorCode for categorization
- message: Human-readable error message
- details: Optional additional context
- recoverable: Whether the user can retry/fix the issue
- context: Additional key-value pairs for debugging
"""

from typing import Any, Optional
from .codes import ErrorCode


class SitewrightError(Exception):
    """Base exception for all Sitewright errors.

    Attributes:
        code: The ErrorCode categorizing this error
        message: Human-readable error message
        details: Optional additional context for the user
        recoverable: Whether the error can be resolved by user action
        context: Additional debugging information
    """

    code: ErrorCode = ErrorCode.INTERNAL_UNEXPECTED
    recoverable: bool = False

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        code: Optional[ErrorCode] = None,
        recoverable: Optional[bool] = None,
        **context: Any,
    ):
        self.message = message
        self.details = details
        self.context = context if context else None

        # Allow overriding class defaults
        if code is not None:
            self.code = code
        if recoverable is not None:
            self.recoverable = recoverable

        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message

    def to_dict(self) -> dict:
        """Convert exception to dictionary for JSON serialization."""
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
            "context": self.context,
        }


class ValidationError(SitewrightError):
    """Error during request validation."""

    code = ErrorCode.VALIDATION_MISSING_PARAM
    recoverable = True

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        parameter: Optional[str] = None,
        expected: Optional[str] = None,
        received: Optional[str] = None,
        **context: Any,
    ):
        ctx = {**context}
        if parameter:
            ctx["parameter"] = parameter
        if expected:
            ctx["expected"] = expected
        if received:
            ctx["received"] = received
        code = ErrorCode.VALIDATION_INVALID_TYPE if expected else ErrorCode.VALIDATION_MISSING_PARAM
        super().__init__(message, details, code=code, **ctx)


class LLMError(SitewrightError):
    """Error in the content returned by the generation service."""

    code = ErrorCode.LLM_UNAVAILABLE
    recoverable = False

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        model: Optional[str] = None,
        error_type: Optional[str] = None,
        **context: Any,
    ):
        # Set appropriate code based on error type
        if error_type == "parse":
            code = ErrorCode.LLM_PARSE_FAILED
        elif error_type == "invalid":
            code = ErrorCode.LLM_RESPONSE_INVALID
        else:
            code = ErrorCode.LLM_UNAVAILABLE

        ctx = {**context}
        if model:
            ctx["model"] = model
        super().__init__(message, details, code=code, **ctx)


class ExternalServiceError(SitewrightError):
    """Error with external services (generation gateway, image service, etc.)."""

    code = ErrorCode.EXTERNAL_NETWORK_ERROR
    recoverable = True

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        service: Optional[str] = None,
        status_code: Optional[int] = None,
        **context: Any,
    ):
        # Set appropriate code based on service
        if service == "llm":
            code = ErrorCode.EXTERNAL_LLM_FAILED
        elif service == "image":
            code = ErrorCode.EXTERNAL_IMAGE_FAILED
        else:
            code = ErrorCode.EXTERNAL_NETWORK_ERROR

        self.status_code = status_code

        ctx = {**context}
        if service:
            ctx["service"] = service
        if status_code:
            ctx["status_code"] = status_code
        super().__init__(message, details, code=code, **ctx)


class PersistenceError(SitewrightError):
    """Error reading from or writing to the data store."""

    code = ErrorCode.PERSISTENCE_WRITE_FAILED
    recoverable = True

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        table: Optional[str] = None,
        unavailable: bool = False,
        **context: Any,
    ):
        code = ErrorCode.PERSISTENCE_UNAVAILABLE if unavailable else ErrorCode.PERSISTENCE_WRITE_FAILED
        ctx = {**context}
        if table:
            ctx["table"] = table
        super().__init__(message, details, code=code, **ctx)


class AuthError(SitewrightError):
    """Error resolving a bearer token to a user."""

    code = ErrorCode.AUTH_TOKEN_INVALID
    recoverable = True

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        not_configured: bool = False,
        **context: Any,
    ):
        code = ErrorCode.AUTH_NOT_CONFIGURED if not_configured else ErrorCode.AUTH_TOKEN_INVALID
        super().__init__(message, details, code=code, **context)
