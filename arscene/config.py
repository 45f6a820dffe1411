"""Configuration management for AR Scene."""

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="ARSCENE_",
        extra="ignore",
    )

    # Backend
    api_base_url: str = Field(
        default="https://api.wmcyn.online",
        description="Base URL of the backend that stores AR codes and sessions",
    )
    api_token: Optional[str] = Field(default=None, description="Bearer token sent to the backend")
    request_timeout: float = Field(default=10.0, description="Backend request timeout in seconds")

    # Viewer
    viewer_base_url: str = Field(
        default="https://wmcyn.online",
        description="Public base URL that scan codes point at",
    )

    # Paths
    output_dir: Path = Field(default=Path("output"), description="Output directory for generated files")

    # Web server
    web_host: str = Field(default="127.0.0.1", description="Web server host")
    web_port: int = Field(default=9880, description="Web server port")

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def configure(settings: Optional[Settings]) -> None:
    """Override global settings (``None`` resets to environment defaults)."""
    global _settings
    _settings = settings
