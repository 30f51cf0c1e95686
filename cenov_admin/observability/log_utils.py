"""
Structured logging helpers.

Row values and uploaded files never reach the logs verbatim: values are
shortened and CSV payloads are reduced to their size.

Dependencies: logging (stdlib)
System role: Logging helper functions
"""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any

MAX_VALUE_LENGTH = 200


def describe_value(value: Any, max_length: int = MAX_VALUE_LENGTH) -> str:
    """
    Short printable form of a column value or context entry.

    Collections and binary values are replaced by their size, long text
    is cut at max_length.
    """
    if value is None:
        return "None"
    if isinstance(value, (bytes, bytearray, memoryview)):
        return f"<{len(bytes(value))} bytes>"
    if isinstance(value, (list, tuple, set)):
        return f"<{type(value).__name__} of {len(value)}>"
    if isinstance(value, dict):
        return f"<dict of {len(value)} keys>"
    if isinstance(value, (datetime, date)):
        text = value.isoformat()
    elif isinstance(value, Decimal):
        text = format(value, "f")
    else:
        text = str(value)

    if len(text) > max_length:
        return f"{text[:max_length]}... ({len(text)} chars)"
    return text


def describe_csv(content: str | None) -> str:
    """Size of an uploaded CSV, e.g. "csv(12 lines, 2048 chars)"."""
    if content is None:
        return "csv(missing)"
    lines = content.count("\n") + (0 if content.endswith("\n") or not content else 1)
    return f"csv({lines} lines, {len(content)} chars)"


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    **context,
) -> None:
    """
    Log a message with context values passed through describe_value().

    Args:
        logger: Logger instance
        level: Log level (logging.INFO, etc.)
        message: Log message
        **context: Extra fields of the record
    """
    logger.log(level, message, extra={key: describe_value(val) for key, val in context.items()})


def log_exception_with_context(
    logger: logging.Logger,
    message: str,
    exc: Exception,
    **context,
) -> None:
    """Log exc with its traceback, its type and the described context."""
    extra = {key: describe_value(val) for key, val in context.items()}
    extra["error_type"] = type(exc).__name__
    extra["error_msg"] = describe_value(getattr(exc, "message", None) or str(exc))
    logger.exception(message, extra=extra)
