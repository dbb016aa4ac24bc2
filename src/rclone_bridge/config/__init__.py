"""Configuration package for the sync bridge."""

from .settings import (
    BridgeSettings,
    ServerSettings,
    LoggingSettings,
    AppSettings,
    get_settings
)

from .schema import (
    BridgeConfig,
    RemoteConfig,
    EXAMPLE_CONFIG
)

from .loader import (
    ConfigLoader,
    ConfigurationError,
    find_config_file,
    load_config_from_env
)

from .manager import ConfigManager

__all__ = [
    # Environment settings
    "BridgeSettings",
    "ServerSettings",
    "LoggingSettings",
    "AppSettings",
    "get_settings",

    # Stored configuration
    "BridgeConfig",
    "RemoteConfig",
    "EXAMPLE_CONFIG",

    "ConfigLoader",
    "ConfigurationError",
    "find_config_file",
    "load_config_from_env",

    "ConfigManager"
]
