# src/cloudpdf_api/config/settings.py
from functools import lru_cache
from typing import List, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

STORAGE_MODES = ("local", "presigned")


class Settings(BaseSettings):
    """
    Single source of truth for all application settings.

    Configuration precedence:
    1. Environment variables (highest priority)
    2. .env file (if exists)
    3. Default values in this class (lowest priority)

    Usage:
        from cloudpdf_api.config.settings import get_settings
        settings = get_settings()
        storage_dir = settings.storage_dir
    """

    # Application Settings
    app_name: str = Field(
        default="cloudpdf-api",
        description="Application name"
    )

    # Storage Mode
    storage_mode: str = Field(
        default="local",
        description="File origin: local (disk + Telegram proxy cache) or presigned (S3)"
    )

    # Server
    host: str = Field(default="0.0.0.0", description="Bind address for `cloudpdf serve`")
    port: int = Field(default=3000, description="Network port for `cloudpdf serve`")

    # Local Storage Configuration
    storage_dir: str = Field(
        default="storage",
        description="Directory holding uploaded and cached files"
    )

    db_file: str = Field(
        default="db.json",
        description="Path of the JSON metadata file"
    )

    max_upload_bytes: int = Field(
        default=200 * 1024 * 1024,
        description="Largest accepted direct upload"
    )

    # Telegram Configuration
    bot_token: str = Field(
        default="",
        description="Telegram bot token; Telegram features are disabled when empty"
    )

    telegram_api_base: str = Field(
        default="https://api.telegram.org",
        description="Base URL of the Telegram Bot API"
    )

    telegram_timeout: float = Field(
        default=60.0,
        description="Timeout in seconds for Bot API calls and file downloads"
    )

    cache_telegram_files: bool = Field(
        default=True,
        validation_alias=AliasChoices("cache_telegram_files", "CACHE_TG_FILES"),
        description="Download Telegram files as soon as the webhook reports them"
    )

    # AWS Core Settings
    aws_region: str = Field(
        default="us-east-1",
        validation_alias=AliasChoices("aws_region", "AWS_DEFAULT_REGION"),
    )

    aws_endpoint_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("aws_endpoint_url", "AWS_ENDPOINT_URL"),
    )

    # S3 Configuration
    s3_bucket_name: str = Field(
        default="cloudpdf-documents",
        description="S3 bucket for PDF storage"
    )

    presign_put_expires: int = Field(
        default=900,
        description="Lifetime in seconds of upload URLs"
    )

    presign_get_expires: int = Field(
        default=120,
        description="Lifetime in seconds of download URLs"
    )

    # CORS
    cors_allowed_origins: str = Field(
        default="*",
        description="Comma separated list of allowed origins"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )

    @field_validator("storage_mode")
    @classmethod
    def validate_storage_mode(cls, v: str) -> str:
        """Validate storage mode is one of the allowed values."""
        v = v.strip().lower()
        if v not in STORAGE_MODES:
            raise ValueError(f"Invalid storage_mode: {v}. Must be one of {list(STORAGE_MODES)}")
        return v

    @property
    def allowed_origins(self) -> List[str]:
        return [origin.strip() for origin in self.cors_allowed_origins.split(",") if origin.strip()]

    @property
    def telegram_enabled(self) -> bool:
        return bool(self.bot_token)

    def redacted(self) -> dict:
        """Settings as a dict, safe to print or log."""
        values = self.model_dump()
        if values.get("bot_token"):
            values["bot_token"] = "***"
        return values

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    This ensures we only create one Settings instance per process.
    """
    return Settings()
