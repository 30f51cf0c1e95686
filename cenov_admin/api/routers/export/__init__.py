"""
Export router package.

Exports the router for preview, export and download endpoints.
"""

from .export_router import router

__all__ = ["router"]
