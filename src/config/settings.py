"""
Application configuration using Pydantic settings.

Configuration is loaded from environment variables with sensible defaults.
Using Pydantic's BaseSettings means we get:
- Type validation at startup (fail fast if config is wrong)
- Documentation of what's required vs optional
- Easy testing with different configurations

Mock mode enables local development without a real bucket.
"""

from datetime import timedelta
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    For lists (like api_keys), use comma-separated values in env.
    """

    # API Configuration
    api_title: str = "Tubely API"
    api_version: str = "v1"
    api_keys: str = Field(
        default="dev-key-1,dev-key-2",
        description="Comma-separated API keys. Using a list enables key rotation without downtime."
    )

    # S3 Storage Configuration
    s3_bucket: str = Field(
        default="tubely-videos",
        description="Bucket that uploaded videos are written to"
    )
    s3_region: str = Field(
        default="us-east-1",
        description="Region of the bucket"
    )
    s3_endpoint_url: Optional[str] = Field(
        default=None,
        description="Custom endpoint for S3-compatible stores (R2, MinIO). AWS when unset."
    )
    s3_access_key_id: str = Field(
        default="",
        description="Access key ID. Falls back to the default AWS credential chain when empty."
    )
    s3_secret_access_key: str = Field(
        default="",
        description="Secret access key"
    )
    s3_mock_mode: bool = Field(
        default=False,
        description="Use in-memory mock instead of a real bucket. Enables local dev without object storage."
    )
    presigned_url_ttl_seconds: int = Field(
        default=3600,
        gt=0,
        description="Lifetime of signed video URLs. One hour covers a viewing session."
    )

    # Application Behavior
    max_upload_size_mb: int = Field(
        default=1024,
        description="Maximum video upload size in MB."
    )
    max_thumbnail_size_mb: int = Field(
        default=10,
        description="Maximum thumbnail upload size in MB."
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # CORS
    cors_origins: str = Field(
        default="http://localhost:3000",
        description="Comma-separated list of allowed CORS origins. Use * for development only."
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @property
    def api_keys_list(self) -> list[str]:
        """Parse comma-separated API keys into a list."""
        return [key.strip() for key in self.api_keys.split(",") if key.strip()]

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def presigned_url_ttl(self) -> timedelta:
        return timedelta(seconds=self.presigned_url_ttl_seconds)

    @property
    def max_upload_size_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024

    @property
    def max_thumbnail_size_bytes(self) -> int:
        return self.max_thumbnail_size_mb * 1024 * 1024

    def validate_required_fields(self) -> list[str]:
        """
        Validate that required fields are set based on mock mode settings.

        Returns list of missing required fields.
        This is separate from Pydantic validation because requirements
        depend on whether we're in mock mode.
        """
        missing = []

        if not self.s3_bucket:
            missing.append("S3_BUCKET")

        # Credentials only required if not in mock mode. A key ID without
        # its secret is always a mistake.
        if not self.s3_mock_mode and self.s3_access_key_id and not self.s3_secret_access_key:
            missing.append("S3_SECRET_ACCESS_KEY")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache means we only load settings once per process.
    This is safe because settings don't change during runtime.
    For tests, you can call get_settings.cache_clear() to reset.
    """
    return Settings()
