"""API-specific dependencies."""

from .dependencies import (
    get_current_user,
    get_explorer_service,
    get_export_service,
    get_import_service,
    get_metadata_inspector,
    get_settings_dependency,
    get_table_crud,
    get_wordpress_service,
    is_authenticated,
    require_user,
)

__all__ = [
    "get_current_user",
    "get_explorer_service",
    "get_export_service",
    "get_import_service",
    "get_metadata_inspector",
    "get_settings_dependency",
    "get_table_crud",
    "get_wordpress_service",
    "is_authenticated",
    "require_user",
]
