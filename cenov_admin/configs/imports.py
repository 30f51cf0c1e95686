"""
Catalog import configuration settings.

Dependencies: pydantic_settings
System role: Import transaction limits
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from cenov_admin.configs.base import BaseSettings


class ImportSettings(BaseSettings):
    """Limits applied to the CSV import transaction."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="IMPORT_",
        case_sensitive=False,
        extra="ignore",
    )

    transaction_timeout: float = Field(default=60.0, gt=0, description="Import transaction timeout in seconds")
    max_wait: float = Field(default=10.0, gt=0, description="Maximum wait for a connection in seconds")
    default_database: str = Field(default="cenov_dev", description="Database used when none is given")
