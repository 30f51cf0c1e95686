"""
Export configuration settings.

Dependencies: pydantic_settings
System role: Export size limits
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from cenov_admin.configs.base import BaseSettings


class ExportSettings(BaseSettings):
    """Preview and row limits for table exports."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="EXPORT_",
        case_sensitive=False,
        extra="ignore",
    )

    preview_rows: int = Field(default=6, gt=0, description="Rows returned per table by the preview")
    preview_binary_length: int = Field(default=50, gt=0, description="Hex characters kept for binary preview values")
    max_row_limit: int = Field(default=1_000_000, gt=0, description="Highest accepted row limit")
