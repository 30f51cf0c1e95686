"""
Application settings.

One Settings object groups the database, authentication proxy, import and
export sections; each section reads its own environment prefix.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from pydantic import Field

from cenov_admin.configs.auth import AuthSettings
from cenov_admin.configs.base import BaseSettings
from cenov_admin.configs.database import DatabaseSettings
from cenov_admin.configs.export import ExportSettings
from cenov_admin.configs.imports import ImportSettings


class Settings(BaseSettings):
    """
    Attributes:
        database: URLs of cenov, cenov_dev and cenov_preprod, pool options
        auth: Header carrying the user set by the authentication proxy
        imports: Catalog import transaction bounds
        export: Preview size and row limit of exports
    """

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    imports: ImportSettings = Field(default_factory=ImportSettings)
    export: ExportSettings = Field(default_factory=ExportSettings)


@lru_cache
def get_settings() -> Settings:
    """
    Settings read once per process; tests call get_settings.cache_clear()
    after changing the environment.
    """
    return Settings()
