"""
Health check API endpoints.

Routes: GET /health, GET /health/db

Dependencies: cenov_admin.boundary
System role: Health check HTTP API
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import text

from cenov_admin.boundary.db.connection import DatabaseRegistry, get_registry

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    message: str
    databases: dict[str, str] | None = None


router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Basic health check."""
    return HealthResponse(status="healthy", message="Server Healthy")


@router.get("/db", response_model=HealthResponse)
async def health_check_db(registry: DatabaseRegistry = Depends(get_registry)):
    """
    Run SELECT 1 on every configured database.

    Answers 503 when at least one database is unreachable.
    """
    databases: dict[str, str] = {}
    for database in registry.databases:
        try:
            async with registry.session(database) as session:
                await session.execute(text("SELECT 1"))
            databases[database] = "ok"
        except Exception as e:
            logger.error("Database health check failed", extra={"database": database, "error": str(e)})
            databases[database] = "unreachable"

    if all(state == "ok" for state in databases.values()):
        return HealthResponse(status="healthy", message="Database connection OK", databases=databases)
    body = HealthResponse(status="unhealthy", message="Database connection failed", databases=databases)
    return JSONResponse(status_code=503, content=body.model_dump())
