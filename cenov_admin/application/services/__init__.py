"""Service orchestrators."""

from .explorer_service import ExplorerService
from .export_service import ExportService
from .import_service import ImportService
from .wordpress_service import WordPressService

__all__ = [
    "ExplorerService",
    "ExportService",
    "ImportService",
    "WordPressService",
]
