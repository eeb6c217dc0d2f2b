# landgrid/config/config.py

import copy
import logging
import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
from . import defaults

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = 'LANDGRID_CONFIG'
CONFIG_FILE_NAME = 'landgrid.yml'


class Config:
    """Configuration manager with YAML override support."""

    def __init__(self, config_file: Optional[Path] = None):
        self.settings = self.load_defaults()
        self.source: Optional[Path] = None

        if config_file is None:
            config_file = self._find_config_file()

        if config_file is not None:
            config_file = Path(config_file)
            if config_file.exists():
                self._load_yaml_config(config_file)
                self.source = config_file
                logger.debug("Loaded configuration from %s", config_file)
            else:
                logger.warning("Config file %s not found - using defaults", config_file)

    def _find_config_file(self) -> Optional[Path]:
        """Find landgrid.yml: environment variable first, then cwd and project root."""
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if env_path:
            return Path(env_path)

        potential_locations = [
            Path.cwd() / CONFIG_FILE_NAME,
            defaults.PROJECT_ROOT / CONFIG_FILE_NAME,
        ]

        for location in potential_locations:
            if location.exists() and location.is_file():
                return location

        return None

    def load_defaults(self) -> Dict[str, Any]:
        """Load default configuration settings."""
        return {
            'grids': defaults.GRIDS.copy(),
            'raster': defaults.RASTER.copy(),
            'dem': defaults.DEM.copy(),
            'stands': defaults.STANDS.copy(),
            'coordinate_transform': defaults.COORDINATE_TRANSFORM.copy(),
            'logging': defaults.LOGGING.copy(),
            'paths': defaults.PATHS.copy(),
        }

    def _load_yaml_config(self, config_file: Path):
        """Load and merge configuration from a YAML file."""
        from ..abstractions.exceptions import ConfigurationError

        try:
            with open(config_file, 'r') as file:
                yaml_config = yaml.safe_load(file)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_file}", e)

        if yaml_config is None:
            return
        if not isinstance(yaml_config, dict):
            raise ConfigurationError(
                f"Top level of {config_file} must be a mapping, got {type(yaml_config).__name__}"
            )
        self._deep_merge(self.settings, yaml_config)

    def _deep_merge(self, base: dict, override: dict):
        """Deep merge override into base dictionary."""
        for key, value in override.items():
            if isinstance(value, dict) and key in base and isinstance(base[key], dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value using dot notation."""
        keys = key.split(".")
        value = self.settings

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value

    def override(self, values: Dict[str, Any]) -> 'Config':
        """Return a copy with ``values`` deep-merged over these settings."""
        clone = copy.copy(self)
        clone.settings = copy.deepcopy(self.settings)
        clone._deep_merge(clone.settings, values)
        return clone

    @property
    def grids(self) -> Dict[str, Any]:
        return self.settings['grids']

    @property
    def raster(self) -> Dict[str, Any]:
        return self.settings['raster']

    @property
    def dem(self) -> Dict[str, Any]:
        return self.settings['dem']

    @property
    def stands(self) -> Dict[str, Any]:
        return self.settings['stands']

    @property
    def coordinate_transform(self) -> Dict[str, Any]:
        return self.settings['coordinate_transform']

    @property
    def logging(self) -> Dict[str, Any]:
        return self.settings['logging']

    @property
    def paths(self) -> Dict[str, Any]:
        return self.settings['paths']


# Global configuration instance
config = Config()
