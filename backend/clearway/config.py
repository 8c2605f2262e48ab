"""
Engine Configuration

Loads routing, clearance and forecast settings from the YAML/JSON files
in backend/config (or $CLEARWAY_CONFIG_DIR). Each file becomes a section
named after its stem; components receive their section as a plain dict.
"""

import os
import json
import logging
from pathlib import Path
from typing import Dict, Any, Optional

import yaml

from clearway.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_DIR_ENV = "CLEARWAY_CONFIG_DIR"


class ConfigManager:
    """
    Sectioned engine configuration

    routing.yaml -> 'routing', clearance.yaml -> 'clearance', and so on.
    Values are read with dotted keys ('routing.cache.ttlSeconds'); a
    missing key yields the caller's default so components keep their
    built-in values.
    """

    def __init__(self, config_dir: Optional[str] = None):
        """
        Initialize configuration manager

        Args:
            config_dir: Path to config directory
                (default: $CLEARWAY_CONFIG_DIR, else backend/config)
        """
        config_dir = config_dir or os.getenv(CONFIG_DIR_ENV)
        if config_dir:
            self.config_dir = Path(config_dir)
        else:
            self.config_dir = Path(__file__).parent.parent / "config"

        self.configs: Dict[str, Any] = {}
        self._load_all_configs()

    def _load_all_configs(self):
        """Load all configuration files from config directory"""
        if not self.config_dir.exists():
            logger.warning(f"[CONFIG] Directory not found, using defaults: {self.config_dir}")
            return

        for yaml_file in sorted(self.config_dir.glob("*.yaml")):
            self.configs[yaml_file.stem] = self._load_file(yaml_file, yaml.safe_load)

        for json_file in sorted(self.config_dir.glob("*.json")):
            self.configs[json_file.stem] = self._load_file(json_file, json.load)

    def _load_file(self, path: Path, loader) -> Dict[str, Any]:
        try:
            with open(path, 'r') as f:
                data = loader(f) or {}
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to load {path.name}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"{path.name} must contain a mapping at top level")

        logger.info(f"[CONFIG] Loaded: {path.name}")
        return data

    def get(self, key: str, default: Any = None) -> Any:
        """
        Look up a dotted key across the loaded sections

        Examples:
            config.get('routing.cache.ttlSeconds')
            config.get('clearance.corridor.signalOffsetSeconds')

        Args:
            key: Dot-separated key path
            default: Default value if key not found

        Returns:
            The stored value, or default when any part of the path is absent
        """
        value = self.configs

        for k in key.split('.'):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value

    def get_routing_config(self) -> Dict[str, Any]:
        """Get routing configuration section"""
        return self.configs.get('routing', {})

    def get_clearance_config(self) -> Dict[str, Any]:
        """Get clearance configuration section"""
        return self.configs.get('clearance', {})

    def get_forecast_config(self) -> Dict[str, Any]:
        """Get intersection forecast configuration section"""
        return self.configs.get('forecast', {})

    def reload(self):
        """Re-read the config files, discarding set() overrides"""
        logger.info("[CONFIG] Reloading configuration...")
        self.configs.clear()
        self._load_all_configs()

    def set(self, key: str, value: Any):
        """
        Override a value until the next reload()

        Used by tests and operators to tweak routing or clearance
        settings without touching the files on disk.

        Example:
            config.set('clearance.scenarios.peak-hour.coordinationMode', 'simultaneous')
        """
        *parents, leaf = key.split('.')
        section = self.configs

        for k in parents:
            section = section.setdefault(k, {})

        section[leaf] = value
