"""
Dependency injection container.

Factory functions for FastAPI dependencies.

Dependencies: cenov_admin.configs, cenov_admin.application, cenov_admin.boundary
System role: DI container for service injection
"""

from functools import lru_cache

from fastapi import Depends, Request

from cenov_admin.application.services import (
    ExplorerService,
    ExportService,
    ImportService,
    WordPressService,
)
from cenov_admin.application.services.explorer_repository import ExplorerRepository
from cenov_admin.application.services.import_orchestrator import ImportOrchestrator
from cenov_admin.application.services.import_repository import ImportRepository
from cenov_admin.application.services.wordpress_repository import WordPressRepository
from cenov_admin.boundary.db.connection import DatabaseRegistry, get_registry
from cenov_admin.boundary.db.CRUD import TableCRUD
from cenov_admin.boundary.db.metadata import MetadataInspector
from cenov_admin.configs import Settings, get_settings
from cenov_admin.core.exceptions import AuthenticationRequiredError


@lru_cache
def get_settings_dependency() -> Settings:
    """Get settings singleton."""
    return get_settings()


def get_metadata_inspector(registry: DatabaseRegistry = Depends(get_registry)) -> MetadataInspector:
    return MetadataInspector(registry)


def get_table_crud(registry: DatabaseRegistry = Depends(get_registry)) -> TableCRUD:
    return TableCRUD(registry)


def get_explorer_service(
    inspector: MetadataInspector = Depends(get_metadata_inspector),
    tables: TableCRUD = Depends(get_table_crud),
) -> ExplorerService:
    """
    Get explorer service instance.

    Args:
        inspector: Table discovery (injected via Depends)
        tables: Reflected-table row access (injected via Depends)

    Returns:
        ExplorerService: Explorer service instance
    """
    return ExplorerService(inspector=inspector, repository=ExplorerRepository(inspector, tables))


def get_export_service(
    inspector: MetadataInspector = Depends(get_metadata_inspector),
    tables: TableCRUD = Depends(get_table_crud),
    settings: Settings = Depends(get_settings_dependency),
) -> ExportService:
    return ExportService(inspector=inspector, tables=tables, settings=settings.export)


def get_import_service(
    registry: DatabaseRegistry = Depends(get_registry),
    settings: Settings = Depends(get_settings_dependency),
) -> ImportService:
    """
    Get import service instance.

    The repository is stateless and shared by the validation passes and
    the orchestrator.
    """
    repository = ImportRepository()
    orchestrator = ImportOrchestrator(registry, repository, settings.imports)
    return ImportService(registry=registry, repository=repository, orchestrator=orchestrator)


def get_wordpress_service(registry: DatabaseRegistry = Depends(get_registry)) -> WordPressService:
    return WordPressService(registry=registry, repository=WordPressRepository())


def get_current_user(
    request: Request,
    settings: Settings = Depends(get_settings_dependency),
) -> str | None:
    """
    User forwarded by the authentication proxy.

    Returns:
        str | None: User identifier, None for anonymous requests
    """
    user = request.headers.get(settings.auth.user_header)
    if user is None or user.strip() == "":
        return None
    return user.strip()


def is_authenticated(user: str | None = Depends(get_current_user)) -> bool:
    return user is not None


def require_user(user: str | None = Depends(get_current_user)) -> str:
    """
    Raises:
        AuthenticationRequiredError: If the request carries no user
    """
    if user is None:
        raise AuthenticationRequiredError()
    return user
