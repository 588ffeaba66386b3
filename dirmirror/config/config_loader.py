"""
Configuration Loader

Loads the mirror configuration from a YAML file, merges environment
variable overrides and validates the result.

Author: dirmirror Project
License: MIT
"""

import os
import yaml
from pathlib import Path
from typing import Optional, Dict, Any
from dotenv import load_dotenv

from .schema import Config

DEFAULT_CONFIG_PATH = "dirmirror.yaml"


def _env_flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


class ConfigLoader:
    """
    Configuration loader and manager.

    Loads configuration from YAML file, merges with environment variables
    and validates the structure.
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize the configuration loader.

        Args:
            config_path: Path to the configuration file. If None, uses
                $DIRMIRROR_CONFIG or ./dirmirror.yaml
        """
        # Load environment variables from .env if present
        load_dotenv()

        self.config_path = config_path or os.getenv(
            "DIRMIRROR_CONFIG",
            DEFAULT_CONFIG_PATH
        )
        self._config: Optional[Config] = None

    def load(self) -> Config:
        """
        Load and validate configuration.

        Returns:
            Validated Config object

        Raises:
            ValueError: If YAML parsing or configuration validation fails
        """
        config_data = self._load_yaml()
        config_data = self._merge_env_vars(config_data)

        self._config = Config(**config_data)
        return self._config

    def _load_yaml(self) -> Dict[str, Any]:
        """
        Load YAML configuration file.

        Returns:
            Dictionary with configuration data
        """
        config_file = Path(self.config_path)

        if not config_file.exists():
            return self._create_default_config()

        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Failed to parse YAML config: {e}")

        if not isinstance(data, dict):
            raise ValueError(f"Configuration root must be a mapping: {config_file}")
        return data

    def _create_default_config(self) -> Dict[str, Any]:
        """
        Create default configuration structure.

        Returns:
            Default configuration dictionary
        """
        return {
            "app": {
                "log_level": "INFO",
                "log_to_file": False,
                "json_format": False
            },
            "mirror": {
                "max_workers": 4
            },
            "watch": {
                "initial_scan": True,
                "use_polling": False,
                "stop_timeout": 5.0
            },
            "mappings": [
                {"source": "src/imgs", "destination": "dist/imgs"},
                {"source": "src/logos", "destination": "dist/logos"}
            ]
        }

    def _merge_env_vars(self, config_data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge environment variables into configuration.

        Environment variables override config file values.
        Naming convention: SECTION_KEY (e.g., APP_LOG_LEVEL, MIRROR_MAX_WORKERS)

        Args:
            config_data: Configuration dictionary from file

        Returns:
            Merged configuration dictionary
        """
        # App settings
        if os.getenv("APP_LOG_LEVEL"):
            config_data.setdefault("app", {})["log_level"] = os.getenv("APP_LOG_LEVEL").upper()
        if os.getenv("APP_LOG_TO_FILE"):
            config_data.setdefault("app", {})["log_to_file"] = _env_flag(os.getenv("APP_LOG_TO_FILE"))
        if os.getenv("APP_LOG_FILE_PATH"):
            config_data.setdefault("app", {})["log_file_path"] = os.getenv("APP_LOG_FILE_PATH")
        if os.getenv("APP_JSON_LOGS"):
            config_data.setdefault("app", {})["json_format"] = _env_flag(os.getenv("APP_JSON_LOGS"))

        # Bulk operations
        if os.getenv("MIRROR_MAX_WORKERS"):
            config_data.setdefault("mirror", {})["max_workers"] = int(os.getenv("MIRROR_MAX_WORKERS"))

        # Watch mode
        if os.getenv("WATCH_USE_POLLING"):
            config_data.setdefault("watch", {})["use_polling"] = _env_flag(os.getenv("WATCH_USE_POLLING"))
        if os.getenv("WATCH_INITIAL_SCAN"):
            config_data.setdefault("watch", {})["initial_scan"] = _env_flag(os.getenv("WATCH_INITIAL_SCAN"))

        # Additional mappings from env (comma-separated source=destination pairs)
        if os.getenv("ADDITIONAL_MAPPINGS"):
            mappings = config_data.get("mappings")
            if mappings is None:
                mappings = config_data["mappings"] = []
            for pair in os.getenv("ADDITIONAL_MAPPINGS").split(","):
                pair = pair.strip()
                if not pair:
                    continue
                if "=" not in pair:
                    raise ValueError(f"Invalid ADDITIONAL_MAPPINGS entry (expected source=destination): {pair}")
                source, destination = (part.strip() for part in pair.split("=", 1))
                if not any(m.get("source") == source for m in mappings):
                    mappings.append({
                        "source": source,
                        "destination": destination
                    })

        return config_data

    def save(self, config: Config, path: Optional[str] = None) -> None:
        """
        Save configuration to YAML file.

        Args:
            config: Config object to save
            path: Path to save to (uses default if None)
        """
        save_path = Path(path or self.config_path)
        save_path.parent.mkdir(parents=True, exist_ok=True)

        config_dict = config.model_dump(mode="json")

        with open(save_path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(config_dict, f, default_flow_style=False, sort_keys=False)

    def reload(self) -> Config:
        """
        Reload configuration from file.

        Returns:
            Reloaded Config object
        """
        return self.load()

    @property
    def config(self) -> Optional[Config]:
        """Get the current configuration object."""
        return self._config


def load_config(config_path: Optional[str] = None) -> Config:
    """
    Convenience function to load configuration.

    Args:
        config_path: Optional path to config file

    Returns:
        Loaded and validated Config object
    """
    loader = ConfigLoader(config_path)
    return loader.load()
