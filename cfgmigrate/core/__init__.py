"""Core functionality for configuration migration."""

from .service_manager import ServiceManager
from .config_manager import ConfigManager
from .migrator import Migrator

__all__ = ["ServiceManager", "ConfigManager", "Migrator"]
