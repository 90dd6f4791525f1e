"""
Error handling decorators and utilities for Sitewright.
"""

import logging
from functools import wraps
from typing import Any, Callable, Optional, TypeVar

from .exceptions import SitewrightError

# Type variable for decorated functions
F = TypeVar("F", bound=Callable[..., Any])


def handle_async_errors(operation: str, default: Any = None, logger: Optional[logging.Logger] = None):
    """Decorator that logs and swallows exceptions from a best-effort coroutine.

    Used where a failure must degrade instead of propagating (context reads,
    history writes). The wrapped coroutine returns ``default`` on error.

    Args:
        operation: Name of the operation for log context
        default: Value returned when the coroutine raises (callables are invoked)
        logger: Optional logger instance (defaults to an operation-specific logger)

    Example:
        >>> @handle_async_errors("load_preferences", default=None)
        ... async def load_preferences(db, user_id):
        ...     return await db.fetchrow(...)
    """

    def decorator(func: F) -> F:
        log = logger or logging.getLogger(f"sitewright.{operation}")

        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return await func(*args, **kwargs)
            except SitewrightError as e:
                log.warning(f"[{operation}] {e.code.value}: {e.message}")
            except Exception as e:
                log.warning(f"[{operation}] Unexpected error: {e}", exc_info=True)
            return default() if callable(default) else default

        return wrapper  # type: ignore

    return decorator


def log_error(
    logger: logging.Logger, error: Exception, context: Optional[str] = None, include_traceback: bool = True
) -> None:
    """Log an error with consistent formatting.

    Args:
        logger: Logger instance to use
        error: The exception to log
        context: Optional context string to prefix the message
        include_traceback: Whether to include the full stack trace

    Example:
        >>> log_error(logger, err, context="Routing")
        # Logs: "[Routing] EXTERNAL_LLM_FAILED: Generation service returned 429"
    """
    if isinstance(error, SitewrightError):
        message = f"{error.code.value}: {error.message}"
    else:
        message = str(error)

    if context:
        message = f"[{context}] {message}"

    logger.error(message, exc_info=include_traceback)
