"""
Authentication configuration settings.

Authentication itself is performed by the OIDC (Logto) proxy in front of
the API; the backend only reads the user it forwards.

Dependencies: pydantic_settings
System role: Upstream identity configuration
"""

from pydantic import Field, field_validator
from pydantic_settings import SettingsConfigDict

from cenov_admin.configs.base import BaseSettings


class AuthSettings(BaseSettings):
    """Trusted proxy header and Logto descriptors."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SECRET_LOGTO_",
        case_sensitive=False,
        extra="ignore",
    )

    user_header: str = Field(
        default="X-Forwarded-User",
        description="Header set by the authentication proxy with the signed-in user",
    )
    endpoint: str | None = Field(default=None, description="Logto endpoint URL")
    app_id: str | None = Field(default=None, description="Logto application id")
    app_secret: str | None = Field(default=None, description="Logto application secret")
    cookie_encryption_key: str | None = Field(default=None, description="Session cookie encryption key")
    redirect_uri: str | None = Field(default=None, description="OIDC redirect URI")
    post_logout_uri: str | None = Field(default=None, description="Post logout redirect URI")

    @field_validator("cookie_encryption_key")
    @classmethod
    def _key_length(cls, value: str | None) -> str | None:
        if value is not None and len(value) < 32:
            raise ValueError("SECRET_LOGTO_COOKIE_ENCRYPTION_KEY doit faire au moins 32 caractères")
        return value
