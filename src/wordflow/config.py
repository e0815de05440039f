"""Configuration management for the WordFlow translation service."""

from functools import lru_cache
from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, extra="ignore", populate_by_name=True
    )

    # Provider credentials
    gemini_api_key: Optional[str] = Field(None, validation_alias="GEMINI_API_KEY")
    gemini_model: str = Field("gemini-2.0-flash", validation_alias="GEMINI_MODEL")
    openai_compat_api_key: Optional[str] = Field(None, validation_alias="OPENAI_COMPAT_API_KEY")
    openai_compat_model: str = Field("ilmu-preview", validation_alias="OPENAI_COMPAT_MODEL")
    openai_compat_endpoint: str = Field(
        "https://api.ytlailabs.tech/preview/v1", validation_alias="OPENAI_COMPAT_ENDPOINT"
    )
    default_provider: str = Field("gemini", validation_alias="DEFAULT_PROVIDER")

    # API Configuration
    api_host: str = Field("0.0.0.0", validation_alias="API_HOST")
    api_port: int = Field(8000, validation_alias="API_PORT")
    log_level: str = Field("info", validation_alias="LOG_LEVEL")

    # Queue Configuration
    batch_size: int = Field(10, validation_alias="BATCH_SIZE")
    max_batch_size: int = Field(50, validation_alias="MAX_BATCH_SIZE")
    max_retries: int = Field(3, validation_alias="MAX_RETRIES")
    base_backoff_seconds: float = Field(5.0, validation_alias="BASE_BACKOFF_SECONDS")
    # 0 disables the per-batch timeout
    batch_timeout_seconds: float = Field(120.0, validation_alias="BATCH_TIMEOUT_SECONDS")
    default_source_language: str = Field("en", validation_alias="DEFAULT_SOURCE_LANGUAGE")


@lru_cache()
def get_settings() -> Settings:
    """Get the application settings."""
    return Settings()
