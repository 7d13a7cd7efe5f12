"""
Configuration Manager for the Payout Elasticity Simulator
Location: payout_simulator/config/config_manager.py
"""

import os
import yaml
import logging
from typing import Any, Dict, List, Optional

from ..exceptions import InvalidConfigurationError
from ..models.records import profile_record_to_profile, structure_to_config
from ..models.schemas import CompensationConfig, PerformanceProfile

DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "defaults.yaml")


class ConfigManager:
    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize ConfigManager with the path to the configuration file.

        Args:
            config_path: Path to YAML configuration file (packaged defaults if omitted)
        """
        self.config_path = config_path or DEFAULT_CONFIG_PATH
        self.config = {}
        self.logger = logging.getLogger(__name__)

        # Load configuration on initialization
        self._load_config()

    def _load_config(self) -> None:
        """
        Load configuration from YAML file.
        """
        self.logger.info(f"Loading configuration from: {self.config_path}")

        if not os.path.exists(self.config_path):
            self.logger.error(f"Configuration file not found: {self.config_path}")
            raise InvalidConfigurationError(
                f"Configuration file not found: {self.config_path}", field="config_path"
            )

        try:
            with open(self.config_path, 'r') as config_file:
                self.config = yaml.safe_load(config_file) or {}
        except (OSError, yaml.YAMLError) as e:
            self.logger.exception(f"Error loading configuration: {str(e)}")
            raise InvalidConfigurationError(
                f"Unreadable configuration file {self.config_path}: {e}", field="config_path"
            ) from e

        if not isinstance(self.config, dict):
            self.logger.error(f"Configuration root is not a mapping: {self.config_path}")
            raise InvalidConfigurationError(
                "configuration root must be a mapping", field="config_path"
            )

        if self.config:
            section_keys = list(self.config.keys())
            self.logger.info(f"Configuration loaded successfully with sections: {section_keys}")
        else:
            self.logger.warning("Configuration file is empty")

    def get(self, section: str, key: str = None, default: Any = None) -> Any:
        """
        Get configuration value by section and key.

        Args:
            section: Configuration section
            key: Configuration key (optional)
            default: Default value if key is not found

        Returns:
            Configuration value or default
        """
        try:
            # If no key is provided, return the entire section
            if key is None:
                return self.config.get(section, default)

            # Otherwise, return the specific key from the section
            return self.config.get(section, {}).get(key, default)

        except (AttributeError, KeyError):
            self.logger.warning(f"Configuration value not found for [{section}]{'.'+key if key else ''}")
            return default

    def get_section(self, section: str) -> Dict[str, Any]:
        """
        Get entire configuration section.

        Args:
            section: Configuration section

        Returns:
            Dictionary containing section data or empty dict if not found
        """
        return self.config.get(section) or {}


def available_presets(config_path: Optional[str] = None) -> List[str]:
    return sorted(ConfigManager(config_path).get_section("presets"))


def load_preset(name: str, config_path: Optional[str] = None) -> CompensationConfig:
    """
    Load a named payout structure from the ``presets`` section.

    Raises:
        InvalidConfigurationError: If the preset is unknown or invalid
    """
    manager = ConfigManager(config_path)
    record = manager.get("presets", name.lower())
    if record is None:
        manager.logger.error(f"Unknown payout structure preset: {name}")
        raise InvalidConfigurationError(f"unknown preset {name!r}", field="preset")
    return structure_to_config(record)


def load_profile_preset(name: str, config_path: Optional[str] = None) -> PerformanceProfile:
    """Load a named performance profile from the ``profiles`` section."""
    manager = ConfigManager(config_path)
    record = manager.get("profiles", name.lower())
    if record is None:
        manager.logger.error(f"Unknown performance profile preset: {name}")
        raise InvalidConfigurationError(f"unknown profile {name!r}", field="profile")
    return profile_record_to_profile(record)
