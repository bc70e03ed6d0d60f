"""Configuration loader with strict validation."""

import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

from trainer.utils.path_resolver import get_package_resource_path


DEFAULT_CONFIG_RESOURCE = "config/config.json"

# Top-level sections every configuration file must provide
REQUIRED_SECTIONS = ("logging", "ui", "board", "sound")


class ConfigLoader:
    """Loads the application configuration from a JSON file.

    The loader refuses incomplete configurations instead of silently
    substituting defaults for whole sections. Individual keys inside a
    section are still optional; components read them with ``.get()`` and
    their own defaults.
    """

    def __init__(self, config_path: Optional[Union[str, Path]] = None) -> None:
        """Initialize the loader.

        Args:
            config_path: Optional path to a configuration file. If None,
                         the configuration bundled with the package is used.
        """
        if config_path is None:
            self.config_path = get_package_resource_path(DEFAULT_CONFIG_RESOURCE)
        else:
            self.config_path = Path(config_path)

    def load(self) -> Dict[str, Any]:
        """Load and validate the configuration.

        Returns:
            Configuration dictionary.

        Raises:
            FileNotFoundError: If the configuration file does not exist.
            ValueError: If the file is not valid JSON or a required section is missing.
        """
        if not self.config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        with open(self.config_path, 'r', encoding='utf-8') as f:
            try:
                config = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON in configuration file {self.config_path}: {e}") from e

        self.validate(config)
        return config

    @staticmethod
    def validate(config: Any) -> None:
        """Validate the structure of a configuration dictionary.

        Args:
            config: Parsed configuration.

        Raises:
            ValueError: If the configuration is not a dictionary or a required
                        section is missing or not a dictionary.
        """
        if not isinstance(config, dict):
            raise ValueError("Configuration root must be a JSON object")

        missing = [section for section in REQUIRED_SECTIONS if section not in config]
        if missing:
            raise ValueError(f"Configuration is missing required sections: {', '.join(missing)}")

        for section in REQUIRED_SECTIONS:
            if not isinstance(config[section], dict):
                raise ValueError(f"Configuration section '{section}' must be a JSON object")
