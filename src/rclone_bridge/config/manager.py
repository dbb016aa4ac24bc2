"""Configuration manager for editing and persisting the remotes list."""

from datetime import datetime
from typing import List, Optional

from .schema import BridgeConfig, RemoteConfig
from .loader import ConfigLoader, ConfigurationError, find_config_file
from ..utils.logging import get_logger


DEFAULT_CONFIG_FILE = "./config/bridge.json"


class ConfigManager:
    """Loads the stored configuration and applies edits to it.

    Every edit is saved immediately. A run in progress is unaffected because
    the orchestrator works on a snapshot taken when the run started.
    """

    def __init__(self, config_file: Optional[str] = None):
        """Initialize configuration manager.

        Args:
            config_file: Configuration file path; located automatically when omitted
        """
        self.config_file = config_file
        self.loader = ConfigLoader()
        self.logger = get_logger(self.__class__.__name__)

        self._config: Optional[BridgeConfig] = None
        self._config_loaded_at: Optional[datetime] = None

    def load_config(self, force_reload: bool = False) -> BridgeConfig:
        """Load configuration from file or create default.

        Args:
            force_reload: Force reload even if config is already loaded

        Returns:
            Loaded configuration
        """
        if self._config is not None and not force_reload:
            return self._config

        if not self.config_file:
            self.config_file = find_config_file()

        if self.config_file:
            self._config = self.loader.load_from_file(self.config_file)
        else:
            self._config = self.loader.create_default_config()

        self._config_loaded_at = datetime.now()
        self.loader.validate_config(self._config)

        self.logger.info(
            "Configuration ready",
            remotes_count=len(self._config.remotes),
            config_file=self.config_file
        )

        return self._config

    def reload_config(self) -> BridgeConfig:
        return self.load_config(force_reload=True)

    def get_config(self) -> BridgeConfig:
        """Get current configuration, loading it on first use."""
        return self.load_config()

    def save_config(self, config: Optional[BridgeConfig] = None, file_path: Optional[str] = None):
        """Save configuration to file.

        Args:
            config: Configuration to save (defaults to the current one)
            file_path: Output file path (defaults to current config file)
        """
        if config is None:
            config = self.get_config()
        output_path = file_path or self.config_file or DEFAULT_CONFIG_FILE

        self.loader.save_to_file(config, output_path)
        if not self.config_file:
            self.config_file = output_path
        self._config = config

    def set_rclone_path(self, rclone_path: str) -> BridgeConfig:
        config = self.get_config()
        config.update_rclone_path(rclone_path)
        self.save_config(config)
        return config

    def add_remote(self, name: str = "", path: str = "", enable: bool = True) -> RemoteConfig:
        """Append a remote to the end of the list.

        Returns:
            The added remote
        """
        config = self.get_config()
        remote = RemoteConfig(name=name, path=path, enable=enable)
        config.remotes.append(remote)
        self.save_config(config)

        self.logger.info("Added remote", name=remote.name, index=len(config.remotes) - 1)
        return remote

    def update_remote(
        self,
        index: int,
        name: Optional[str] = None,
        path: Optional[str] = None,
        enable: Optional[bool] = None
    ) -> RemoteConfig:
        """Change fields of the remote at ``index``; None leaves a field unchanged."""
        config = self.get_config()
        current = self._get_remote(config, index)

        changes = {}
        if name is not None:
            changes["name"] = name
        if path is not None:
            changes["path"] = path
        if enable is not None:
            changes["enable"] = enable

        updated = RemoteConfig(**{**current.dict(), **changes})
        config.remotes[index] = updated
        self.save_config(config)

        self.logger.info("Updated remote", index=index, fields=sorted(changes))
        return updated

    def set_remote_enabled(self, index: int, enable: bool) -> RemoteConfig:
        return self.update_remote(index, enable=enable)

    def remove_remote(self, index: int) -> RemoteConfig:
        """Remove the remote at ``index``.

        Returns:
            The removed remote
        """
        config = self.get_config()
        self._get_remote(config, index)
        removed = config.remotes.pop(index)
        self.save_config(config)

        self.logger.info("Removed remote", name=removed.name, index=index)
        return removed

    def get_remotes(self) -> List[RemoteConfig]:
        return list(self.get_config().remotes)

    @staticmethod
    def _get_remote(config: BridgeConfig, index: int) -> RemoteConfig:
        if index < 0 or index >= len(config.remotes):
            raise ConfigurationError(f"No remote at index {index}")
        return config.remotes[index]
