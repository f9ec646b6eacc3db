"""
Normalizer configuration storage.

Settings live in a JSON file in the user's home directory.
"""

import json
import os
import logging
from pathlib import Path
from typing import Optional, Any

from pydantic import ValidationError

from mathnorm.exceptions import ConfigError
from mathnorm.models import NormalizerConfig

logger = logging.getLogger(__name__)

CONFIG_DIR_ENV = "MATHNORM_CONFIG_DIR"


class ConfigManager:
    """Normalizer configuration manager."""

    CONFIG_DIR_NAME = ".mathnorm"
    CONFIG_FILE_NAME = "config.json"

    def __init__(self, config_dir: Optional[Path] = None):
        """
        Args:
            config_dir: Configuration directory.
                        Defaults to $MATHNORM_CONFIG_DIR or ~/.mathnorm/
        """
        if config_dir is None:
            env_dir = os.environ.get(CONFIG_DIR_ENV)
            if env_dir:
                self.config_dir = Path(env_dir)
            else:
                self.config_dir = Path.home() / self.CONFIG_DIR_NAME
        else:
            self.config_dir = Path(config_dir)

        self.config_file = self.config_dir / self.CONFIG_FILE_NAME
        self._config: Optional[NormalizerConfig] = None

    def _ensure_config_dir(self) -> None:
        self.config_dir.mkdir(parents=True, exist_ok=True)

    def load(self) -> NormalizerConfig:
        """
        Load configuration from file.

        Returns:
            Stored configuration, or the defaults when the file is missing
            or unreadable
        """
        if self._config is not None:
            return self._config

        if not self.config_file.exists():
            self._config = NormalizerConfig()
            return self._config

        try:
            with open(self.config_file, "r", encoding="utf-8") as f:
                data = json.load(f)
            self._config = NormalizerConfig(**data)
        except (json.JSONDecodeError, TypeError, ValidationError) as e:
            # Corrupted file - fall back to defaults
            logger.warning(f"Ignoring unreadable config {self.config_file}: {e}")
            self._config = NormalizerConfig()

        return self._config

    def save(self, config: Optional[NormalizerConfig] = None) -> None:
        """
        Save configuration to file.

        Args:
            config: Configuration to save; the current one when omitted
        """
        if config is not None:
            self._config = config

        if self._config is None:
            return

        self._ensure_config_dir()

        with open(self.config_file, "w", encoding="utf-8") as f:
            json.dump(self._config.model_dump(), f, indent=2, ensure_ascii=False)

    def get_config(self) -> NormalizerConfig:
        """Current configuration."""
        if self._config is None:
            return self.load()
        return self._config

    def set_value(self, key: str, value: str) -> NormalizerConfig:
        """
        Set one setting from its command-line string form and save.

        Args:
            key: Field name of NormalizerConfig
            value: Raw value; comma-separated for lists, "none" for no limit

        Returns:
            Updated configuration
        """
        if key not in NormalizerConfig.model_fields:
            raise ConfigError(
                f"Unknown setting: {key}",
                details={"known": sorted(NormalizerConfig.model_fields)}
            )

        data = self.get_config().model_dump()
        data[key] = _parse_value(key, value)

        try:
            config = NormalizerConfig(**data)
        except ValidationError as e:
            raise ConfigError(f"Invalid value for {key}: {value}", details={"errors": e.errors()})

        self.save(config)
        logger.info(f"Setting {key} changed to {data[key]!r}")
        return config

    def reset(self) -> NormalizerConfig:
        """Restore default settings."""
        config = NormalizerConfig()
        self.save(config)
        return config


def _parse_value(key: str, value: str) -> Any:
    if key == "extra_commands":
        return [name.strip().lstrip("\\") for name in value.split(",") if name.strip()]
    if key == "max_input_length" and value.strip().lower() in ("", "none", "off"):
        return None
    return value


_config_manager: Optional[ConfigManager] = None


def get_config_manager(config_dir: Optional[Path] = None) -> ConfigManager:
    """
    Global configuration manager.

    Args:
        config_dir: Configuration directory; replaces the current manager
    """
    global _config_manager

    if _config_manager is None or config_dir is not None:
        _config_manager = ConfigManager(config_dir)

    return _config_manager
