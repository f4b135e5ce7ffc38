"""Configuration manager for loading migration settings."""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from ..models.service import ApplicationConfig
from ..utils.constants import (
    CONFIG_FILE,
    DEFAULT_CFGS_SUBDIR,
    DEFAULT_COMMAND_TIMEOUT,
    DEFAULT_SEARCH_ROOTS,
    DEFAULT_SERVICE_SCOPE,
    DEFAULT_SYMLINK_MAP_FILE,
    DEFAULT_TUNABLE_SUFFIXES,
)

logger = logging.getLogger(__name__)


class ConfigManager:
    """Manages migrator settings and per-application definitions."""

    SERVICE_SCOPES = ("system", "user")

    def __init__(self, config_file: Optional[Path] = None):
        """Initialize the config manager.

        Args:
            config_file: YAML file to load, defaults to the user config file
        """
        self.config_file = Path(config_file) if config_file else CONFIG_FILE
        self.applications: Dict[str, ApplicationConfig] = {}
        self.settings: Dict[str, Any] = {}
        self._ensure_default_settings()

    def load_config(self) -> bool:
        """Load configuration from file.

        Returns:
            True if config loaded successfully, False otherwise
        """
        if not self.config_file.exists():
            logger.info(f"Config file {self.config_file} not found, using defaults")
            self._load_defaults()
            return False

        try:
            with open(self.config_file, 'r') as f:
                data = yaml.safe_load(f)

            if not data:
                logger.warning("Empty config file, using defaults")
                self._load_defaults()
                return False

            # Validate and load
            if not self._validate_config(data):
                logger.error("Invalid config file, using defaults")
                self._load_defaults()
                return False

            # Load applications
            self.applications = {}
            for name, app_data in (data.get("applications") or {}).items():
                try:
                    self.applications[str(name)] = ApplicationConfig.from_dict(str(name), app_data)
                except (ValueError, AttributeError) as e:
                    logger.error(f"Failed to load application config {name}: {e}")

            # Load settings
            self.settings = data.get("settings") or {}
            self._ensure_default_settings()

            logger.info(f"Loaded {len(self.applications)} applications from {self.config_file}")
            return True

        except yaml.YAMLError as e:
            logger.error(f"YAML parsing error: {e}")
            self._load_defaults()
            return False
        except OSError as e:
            logger.error(f"Failed to load config: {e}")
            self._load_defaults()
            return False

    def get_application(self, name: str) -> Optional[ApplicationConfig]:
        """Get an application's configuration by name.

        Args:
            name: Application name

        Returns:
            ApplicationConfig if configured, None otherwise
        """
        return self.applications.get(name)

    def get_setting(self, key: str, default: Any = None) -> Any:
        """Get a setting value.

        Args:
            key: Setting key
            default: Default value if key not found

        Returns:
            Setting value or default
        """
        return self.settings.get(key, default)

    def get_search_roots(self) -> List[Path]:
        return [Path(root) for root in self.get_setting("search_roots", DEFAULT_SEARCH_ROOTS)]

    def is_user_scope(self) -> bool:
        return self.get_setting("service_scope", DEFAULT_SERVICE_SCOPE) == "user"

    def _validate_config(self, data: dict) -> bool:
        """Validate configuration data structure.

        Args:
            data: Configuration dictionary

        Returns:
            True if valid, False otherwise
        """
        if not isinstance(data, dict):
            logger.error("Config must be a dictionary")
            return False

        if "version" not in data:
            logger.warning("Config missing version, assuming valid")

        applications = data.get("applications")
        if applications is not None and not isinstance(applications, dict):
            logger.error("Applications must be a dictionary")
            return False

        settings = data.get("settings")
        if settings is not None and not isinstance(settings, dict):
            logger.error("Settings must be a dictionary")
            return False

        settings = settings or {}
        for key in ("search_roots", "tunable_suffixes"):
            if key in settings and not self._is_string_list(settings[key]):
                logger.error(f"{key} must be a list of strings")
                return False

        for key in ("cfgs_subdir", "symlink_map_file"):
            if key in settings and not (isinstance(settings[key], str) and settings[key].strip()):
                logger.error(f"{key} must be a non-empty string")
                return False

        if settings.get("service_scope", DEFAULT_SERVICE_SCOPE) not in self.SERVICE_SCOPES:
            logger.error(f"Invalid service_scope: {settings['service_scope']}. Must be 'system' or 'user'")
            return False

        timeout = settings.get("command_timeout", DEFAULT_COMMAND_TIMEOUT)
        if timeout is not None and (isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0):
            logger.error("command_timeout must be a positive number or null")
            return False

        return True

    @staticmethod
    def _is_string_list(value: Any) -> bool:
        return isinstance(value, list) and all(isinstance(item, str) for item in value)

    def _load_defaults(self):
        """Load default configuration."""
        self.applications = {}
        self.settings = {}
        self._ensure_default_settings()
        logger.info("Loaded default configuration")

    def _ensure_default_settings(self):
        """Ensure all default settings exist."""
        defaults = {
            "search_roots": list(DEFAULT_SEARCH_ROOTS),
            "cfgs_subdir": DEFAULT_CFGS_SUBDIR,
            "symlink_map_file": DEFAULT_SYMLINK_MAP_FILE,
            "service_scope": DEFAULT_SERVICE_SCOPE,
            "command_timeout": DEFAULT_COMMAND_TIMEOUT,
            "tunable_suffixes": list(DEFAULT_TUNABLE_SUFFIXES),
        }

        for key, value in defaults.items():
            if key not in self.settings:
                self.settings[key] = value
