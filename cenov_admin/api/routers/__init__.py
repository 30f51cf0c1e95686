"""API routers."""

from .explorer import router as explorer_router
from .export import router as export_router
from .health import router as health_router
from .imports import router as imports_router
from .wordpress import router as wordpress_router

__all__ = [
    "explorer_router",
    "export_router",
    "health_router",
    "imports_router",
    "wordpress_router",
]
