"""Configuration loader for archive settings."""

import json
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from mailarchive.errors import ConfigError
from mailarchive.monitoring.logger import get_logger
from .archive_config import ArchiveConfig

logger = get_logger(__name__)


class ConfigLoader:
    """Load and validate archive configuration."""

    DEFAULT_CONFIG_PATHS = [
        Path("~/.mailarchive/config.json"),
        Path("config/mailarchive.json"),
    ]

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize configuration loader.

        Args:
            config_path: Optional custom config file path
        """
        self.config_path = config_path
        self._config: Optional[ArchiveConfig] = None

    def load(self) -> ArchiveConfig:
        """
        Load archive configuration from file.

        The explicit path is used if given, otherwise the first existing
        default path. Without any config file the defaults apply.

        Returns:
            ArchiveConfig instance

        Raises:
            ConfigError: If the config file is not valid JSON or has invalid values
        """
        if self._config is not None:
            return self._config

        config_paths = [self.config_path] if self.config_path else self.DEFAULT_CONFIG_PATHS

        for config_path in config_paths:
            path = config_path.expanduser()
            if not path.exists():
                continue
            try:
                with open(path, "r", encoding="utf-8") as f:
                    config_data = json.load(f)
                if not isinstance(config_data, dict):
                    raise ConfigError(f"Invalid config in {path}: expected a JSON object")
                self._config = ArchiveConfig(**config_data)
            except (json.JSONDecodeError, ValidationError) as e:
                raise ConfigError(f"Invalid config in {path}: {e}") from e

            logger.info("config_loaded", path=str(path))
            return self._config

        self._config = ArchiveConfig()
        return self._config

    def reload(self) -> ArchiveConfig:
        """Reload configuration from file."""
        self._config = None
        return self.load()
