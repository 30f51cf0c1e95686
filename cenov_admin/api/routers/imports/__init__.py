"""
Import router package.

Exports the router for catalog CSV validation, import and templates.
"""

from .imports_router import router

__all__ = ["router"]
