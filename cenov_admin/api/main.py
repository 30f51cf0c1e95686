"""
CENOV admin API application.

Assembles the health, explorer, export, import and WordPress routers under
/api/v1 behind the correlation, access log and body size middlewares.

Dependencies: fastapi, cenov_admin.api.routers, uvicorn
System role: API entry point with router assembly and server launch
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from cenov_admin.boundary.db.connection import dispose_registry
from cenov_admin.configs import get_settings
from cenov_admin.core.exceptions import AuthenticationRequiredError
from cenov_admin.observability import configure_logging
from cenov_admin.observability.middleware import (
    BodySizeLimitMiddleware,
    CorrelationMiddleware,
    RequestLoggingMiddleware,
)

from .routers import (
    explorer_router,
    export_router,
    health_router,
    imports_router,
    wordpress_router,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Configures logging on startup and disposes database engines on shutdown.
    """
    configure_logging()
    logger = logging.getLogger("uvicorn")
    logger.info("CENOV admin API starting", extra={"environment": get_settings().environment})

    yield

    await dispose_registry()
    logger.info("Database engines disposed")


async def authentication_required_handler(request: Request, exc: AuthenticationRequiredError) -> JSONResponse:
    """Dependencies requiring a user raise before the route error decorators run."""
    return JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED, content={"detail": exc.message})


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application with routers.

    Returns:
        FastAPI: Configured application instance with all routers registered
    """
    settings = get_settings()
    app = FastAPI(
        title="CENOV Admin API",
        description="Database explorer, exports, catalog CSV import and WordPress export",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_exception_handler(AuthenticationRequiredError, authentication_required_handler)

    # Add observability middleware
    app.add_middleware(BodySizeLimitMiddleware, max_body_size=settings.body_size_limit)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationMiddleware)

    # Register all routers with /api/v1 prefix for versioning
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(explorer_router, prefix="/api/v1")
    app.include_router(export_router, prefix="/api/v1")
    app.include_router(imports_router, prefix="/api/v1")
    app.include_router(wordpress_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "cenov_admin.api.main:app",
        host="0.0.0.0",
        port=8000,
    )
