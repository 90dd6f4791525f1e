"""
Sitewright Logging Configuration - Color-Coded Container Logs

Provides:
- ColorFormatter: ANSI colors per level, short logger name per line
- Event helpers: log_message_in, log_message_out, log_stage, log_llm
- setup_logging(): root handler + library quieting

Usage:
    from logging_config import setup_logging, log_message_in, log_stage
    setup_logging()
    logger = logging.getLogger(__name__)
    log_message_in(logger, "Change the header color", user="anon")

Set NO_COLOR=1 to emit plain text (log shippers, CI).
"""

import logging
import os
import sys
from typing import Union

# ANSI color codes
COLORS = {
    "RESET": "\033[0m",
    "BOLD": "\033[1m",
    "DIM": "\033[2m",
    # Event colors
    "MSG_IN": "\033[96m",  # Cyan - incoming message
    "MSG_OUT": "\033[92m",  # Green - envelope returned
    "STAGE": "\033[95m",  # Magenta - pipeline stages
    "LLM": "\033[94m",  # Blue - gateway calls
    "ERROR": "\033[91m",
    "WARN": "\033[33m",
    "DEBUG": "\033[90m",
}

# Libraries that log every request at INFO
_NOISY_LOGGERS = ("httpx", "httpcore", "openai", "asyncpg", "uvicorn.access")


def _paint(key: str, text: str) -> str:
    return f"{COLORS[key]}{text}{COLORS['RESET']}"


class ColorFormatter(logging.Formatter):
    """Compact one-line format: time [LEVL] module: message."""

    LEVEL_COLORS = {
        logging.DEBUG: "DEBUG",
        logging.WARNING: "WARN",
        logging.ERROR: "ERROR",
        logging.CRITICAL: "ERROR",
    }

    def __init__(self, use_color: bool = True):
        super().__init__()
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        timestamp = self.formatTime(record, "%H:%M:%S")
        level = record.levelname[:4]
        source = record.name.rsplit(".", 1)[-1]
        message = record.getMessage()

        if self.use_color:
            key = self.LEVEL_COLORS.get(record.levelno)
            if key:
                level = _paint(key, level)
            if record.levelno >= logging.CRITICAL:
                level = COLORS["BOLD"] + level
            timestamp = _paint("DIM", timestamp)
            source = _paint("DIM", source)

        formatted = f"{timestamp} [{level}] {source}: {message}"
        if record.exc_info:
            formatted += "\n" + self.formatException(record.exc_info)
        return formatted


def setup_logging(level: Union[int, str] = logging.INFO) -> None:
    """Install the color formatter on the root logger and quiet chatty libraries."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ColorFormatter(use_color=not os.environ.get("NO_COLOR")))

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [handler]

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


# =============================================================================
# EVENT HELPERS
# =============================================================================


def _fields(context: dict) -> str:
    return " ".join(f"{k}={v}" for k, v in context.items())


def log_message_in(logger: logging.Logger, message: str, **context) -> None:
    """Log an incoming chat message (truncated to 80 chars).

    Args:
        logger: Logger instance
        message: User message text
        **context: Extra fields (user, conversation, has_code, ...)
    """
    preview = message[:80] + "..." if len(message) > 80 else message
    logger.info(f"{_paint('MSG_IN', '>>> MESSAGE')} {preview} [{_fields(context)}]")


def log_message_out(
    logger: logging.Logger,
    module: str = "",
    total_ms: int = 0,
    success: bool = True,
) -> None:
    """Log the end of a conversation turn."""
    status = "ok" if success else "failed"
    logger.info(f"{_paint('MSG_OUT', '<<< RESPONSE')} module={module or 'none'} status={status} total={total_ms}ms")


def log_stage(logger: logging.Logger, stage: str, state: str, **context) -> None:
    """Log a pipeline stage event.

    Args:
        logger: Logger instance
        stage: Stage name (context, classify, route)
        state: 'start', 'end' or 'fail'
        **context: Extra fields (intent, module, duration_ms, error)
    """
    ctx = _fields(context)
    if state == "start":
        logger.debug(f"{_paint('STAGE', '>>> STAGE')} {stage} {ctx}")
    elif state == "fail":
        logger.warning(f"{_paint('ERROR', '!!! STAGE')} {stage} failed {ctx}")
    else:
        logger.info(f"{_paint('STAGE', '<<< STAGE')} {stage} {ctx}")


def log_llm(
    logger: logging.Logger,
    state: str,
    model: str = "",
    duration: float = 0,
    operation: str = "",
) -> None:
    """Log a gateway call start or completion (duration in seconds)."""
    label = f"{operation} via {model}" if operation else model
    if state == "start":
        logger.info(f"{_paint('LLM', '>>> LLM')} calling {label}")
    else:
        logger.info(f"{_paint('LLM', '<<< LLM')} {label} completed in {duration:.1f}s")
