"""Configuration loader for JSON/YAML files and environment variables."""

import os
import json
import yaml
from pathlib import Path
from typing import Dict, Any, Union, List

from pydantic import ValidationError

from .schema import BridgeConfig
from ..utils.logging import get_logger


LEGACY_NAME_KEY = "remoteName"
LEGACY_PATH_KEY = "remotePath"


class ConfigurationError(Exception):
    """Raised when configuration loading or saving fails."""
    pass


class ConfigLoader:
    """Loads, migrates and validates the stored bridge configuration."""

    def __init__(self):
        self.logger = get_logger(self.__class__.__name__)

    def load_from_file(self, file_path: Union[str, Path]) -> BridgeConfig:
        """Load configuration from a JSON or YAML file.

        Args:
            file_path: Path to configuration file

        Returns:
            Validated BridgeConfig object

        Raises:
            ConfigurationError: If file cannot be loaded or validated
        """
        file_path = Path(file_path)

        if not file_path.exists():
            raise ConfigurationError(f"Configuration file not found: {file_path}")

        self.logger.info("Loading configuration from file", file_path=str(file_path))

        suffix = file_path.suffix.lower()
        if suffix not in ('.json', '.yaml', '.yml'):
            raise ConfigurationError(f"Unsupported file format: {file_path.suffix}")

        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                if suffix == '.json':
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML format: {e}")
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON format: {e}")
        except OSError as e:
            raise ConfigurationError(f"Failed to read configuration: {e}")

        return self.load_from_dict(data or {})

    def load_from_dict(self, data: Dict[str, Any]) -> BridgeConfig:
        """Load configuration from a dictionary.

        Args:
            data: Stored configuration blob

        Returns:
            Validated BridgeConfig object
        """
        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration must be a mapping, got {type(data).__name__}")

        data = self._migrate_legacy(data)

        try:
            config = BridgeConfig(**data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}")

        self._apply_env_overrides(config)

        self.logger.info(
            "Configuration loaded",
            remotes_count=len(config.remotes),
            enabled_count=len(config.get_enabled_remotes())
        )

        return config

    def save_to_file(self, config: BridgeConfig, file_path: Union[str, Path]):
        """Save configuration to file, in the format given by its suffix.

        Args:
            config: Configuration to save
            file_path: Output file path (.json, .yaml or .yml)
        """
        file_path = Path(file_path)
        suffix = file_path.suffix.lower()
        if suffix not in ('.json', '.yaml', '.yml'):
            raise ConfigurationError(f"Unsupported file format: {file_path.suffix}")

        data = config.to_stored_dict()

        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(file_path, 'w', encoding='utf-8') as f:
                if suffix == '.json':
                    json.dump(data, f, indent=2, ensure_ascii=False)
                else:
                    yaml.safe_dump(data, f, default_flow_style=False, indent=2, allow_unicode=True)
        except OSError as e:
            raise ConfigurationError(f"Failed to save configuration: {e}")

        self.logger.info("Configuration saved", file_path=str(file_path))

    def create_default_config(self) -> BridgeConfig:
        """Create an empty configuration (no executable, no remotes)."""
        self.logger.info("Created default configuration")
        return self.load_from_dict({})

    def _migrate_legacy(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Turn the single-remote fields of older releases into a remotes list.

        Only applies when ``remotes`` is missing or empty. The legacy keys are
        left in place.
        """
        if data.get("remotes"):
            return data

        legacy_name = data.get(LEGACY_NAME_KEY)
        legacy_path = data.get(LEGACY_PATH_KEY)
        if not (legacy_name or legacy_path):
            return data

        self.logger.info("Migrating legacy single-remote configuration", remote_name=legacy_name)
        return {
            **data,
            "remotes": [
                {
                    "name": legacy_name or "",
                    "path": legacy_path or "",
                    "enable": True,
                }
            ],
        }

    def _apply_env_overrides(self, config: BridgeConfig):
        """Apply environment variable overrides to the loaded configuration.

        BRIDGE_RCLONE_PATH replaces the rclone executable path for this process;
        the stored value is what gets saved.
        """
        rclone_path = os.getenv('BRIDGE_RCLONE_PATH')
        if rclone_path:
            self.logger.info("Applied environment variable overrides", overrides=["rclonePath"])
            config.override_rclone_path(rclone_path)

    def validate_config(self, config: BridgeConfig) -> List[str]:
        """Validate configuration and return list of warnings.

        Args:
            config: Configuration to validate

        Returns:
            List of validation warnings
        """
        warnings = []

        if not config.rclone_path:
            warnings.append("No rclone executable configured")
        else:
            rclone = Path(config.rclone_path).expanduser()
            if not rclone.is_absolute():
                warnings.append(f"rclone path is not absolute: {config.rclone_path}")
            elif not rclone.is_file():
                warnings.append(f"rclone executable not found: {config.rclone_path}")

        names = [remote.name for remote in config.remotes if remote.name]
        if len(names) != len(set(names)):
            warnings.append("Duplicate remote names found")

        for index, remote in enumerate(config.remotes, start=1):
            if not remote.remote_address:
                warnings.append(f"Remote {index} has neither a name nor a 'remote:path' address")

        if not config.get_enabled_remotes():
            warnings.append("No remotes are enabled")

        if warnings:
            self.logger.warning("Configuration validation warnings", warnings=warnings)
        else:
            self.logger.info("Configuration validation passed")

        return warnings


DEFAULT_CONFIG_FILES = (
    './config/bridge.json',
    './config/bridge.yaml',
    './config/bridge.yml',
    './bridge.json',
    './bridge.yaml',
    './bridge.yml',
)


def find_config_file() -> Union[str, None]:
    """Locate the configuration file.

    Looks in this order:
    1. BRIDGE_CONFIG_FILE environment variable
    2. ./config/bridge.{json,yaml,yml}
    3. ./bridge.{json,yaml,yml}
    """
    logger = get_logger("find_config_file")

    config_file = os.getenv('BRIDGE_CONFIG_FILE')
    if config_file:
        if os.path.exists(config_file):
            return config_file
        logger.warning("Specified config file not found", file=config_file)

    for file_path in DEFAULT_CONFIG_FILES:
        if os.path.exists(file_path):
            logger.info("Found configuration file", file=file_path)
            return file_path

    return None


def load_config_from_env() -> BridgeConfig:
    """Load configuration from the first file found, or return the default."""
    loader = ConfigLoader()

    config_file = find_config_file()
    if config_file:
        return loader.load_from_file(config_file)

    get_logger("load_config_from_env").info("No configuration file found, using default configuration")
    return loader.create_default_config()
