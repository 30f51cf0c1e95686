"""
Request correlation ids.

The id lives in a ContextVar so that every log record emitted while
serving a request, including from awaited service code, carries it.

Dependencies: contextvars
System role: Request tracing across service boundaries
"""

import logging
import uuid
from contextvars import ContextVar

CORRELATION_HEADER = "X-Correlation-ID"

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")


def set_correlation_id(correlation_id: str | None = None) -> str:
    """Store correlation_id, or a fresh uuid4 when none is given, and return it."""
    value = (correlation_id or "").strip() or uuid.uuid4().hex
    _correlation_id.set(value)
    return value


def get_correlation_id() -> str:
    return _correlation_id.get()


def clear_correlation_id() -> None:
    _correlation_id.set("")


class CorrelationIdFilter(logging.Filter):
    """Exposes the current id as record.correlation_id ("-" outside requests)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or "-"
        return True
