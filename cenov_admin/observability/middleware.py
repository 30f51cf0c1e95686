"""
HTTP middleware: correlation id, access log and upload size limit.

Dependencies: fastapi, starlette, cenov_admin.observability
System role: Request/response observability injection
"""

import logging
import time

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from cenov_admin.configs import get_settings
from cenov_admin.observability.correlation import (
    CORRELATION_HEADER,
    clear_correlation_id,
    set_correlation_id,
)

logger = logging.getLogger(__name__)


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    One access record per request.

    The record carries the proxy user so that writes to the catalog can
    be traced back to a person; 5xx answers are logged as errors.
    """

    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        context = {
            "method": request.method,
            "path": request.url.path,
            "user": request.headers.get(get_settings().auth.user_header) or "anonymous",
        }

        try:
            response: Response = await call_next(request)
        except Exception as e:
            logger.exception(
                f"{request.method} {request.url.path} failed",
                extra={**context, "duration_ms": _elapsed_ms(started), "error_type": type(e).__name__},
            )
            raise

        level = logging.ERROR if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            f"{request.method} {request.url.path} {response.status_code}",
            extra={**context, "status_code": response.status_code, "duration_ms": _elapsed_ms(started)},
        )
        return response


class CorrelationMiddleware(BaseHTTPMiddleware):
    """Reuses the caller's X-Correlation-ID or creates one, and echoes it back."""

    async def dispatch(self, request: Request, call_next):
        correlation_id = set_correlation_id(request.headers.get(CORRELATION_HEADER))
        try:
            response: Response = await call_next(request)
        finally:
            clear_correlation_id()
        response.headers[CORRELATION_HEADER] = correlation_id
        return response


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """Answers 413 when Content-Length exceeds max_body_size (CSV uploads, exports)."""

    def __init__(self, app, max_body_size: int) -> None:
        super().__init__(app)
        self.max_body_size = max_body_size

    async def dispatch(self, request: Request, call_next):
        declared = request.headers.get("content-length", "")
        if declared.isdigit() and int(declared) > self.max_body_size:
            logger.warning(
                "Request body too large",
                extra={"path": request.url.path, "content_length": int(declared), "limit": self.max_body_size},
            )
            return JSONResponse(
                status_code=413,
                content={"detail": f"Corps de requête trop volumineux (limite {self.max_body_size} octets)"},
            )
        return await call_next(request)
