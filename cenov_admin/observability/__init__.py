"""
Observability module.

Logging setup, correlation ids and HTTP middleware.
"""

from cenov_admin.observability.logger import configure_logging

__all__ = ["configure_logging"]
