"""
WordPress router package.

Exports the router for the WooCommerce CSV export.
"""

from .wordpress_router import router

__all__ = ["router"]
