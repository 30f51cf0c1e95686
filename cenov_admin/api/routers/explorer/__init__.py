"""
Explorer router package.

Exports the router for table browsing and row edition endpoints.
"""

from .explorer_router import router

__all__ = ["router"]
