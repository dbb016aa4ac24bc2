"""Application configuration settings."""

from typing import Optional
from pydantic import Field, validator
from pydantic_settings import BaseSettings


class BridgeSettings(BaseSettings):
    """Sync bridge configuration."""

    config_file: Optional[str] = Field(default=None, description="Path of the stored remotes configuration")
    local_root: Optional[str] = Field(default=None, description="Local directory synchronised with every remote")
    sync_timeout_seconds: Optional[float] = Field(default=3600.0, description="Per-target subprocess timeout, 0 disables")

    @validator('sync_timeout_seconds')
    def validate_timeout(cls, v):
        if v is not None and v < 0:
            raise ValueError("Timeout must not be negative")
        return v or None

    class Config:
        env_prefix = "BRIDGE_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


class ServerSettings(BaseSettings):
    """Status server configuration."""

    host: str = "127.0.0.1"
    port: int = 8765

    class Config:
        env_prefix = "SERVER_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "console"
    file_path: Optional[str] = None

    class Config:
        env_prefix = "LOG_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


class AppSettings(BaseSettings):
    """Main application settings."""

    name: str = "Rclone Bridge"
    version: str = "1.0.0"
    environment: str = "development"

    # Sub-settings
    bridge: BridgeSettings = Field(default_factory=BridgeSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    class Config:
        env_prefix = "APP_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


# Global settings instance
settings = AppSettings()


def get_settings() -> AppSettings:
    """Get application settings."""
    return settings
