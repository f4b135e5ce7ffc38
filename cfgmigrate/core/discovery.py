"""Locating an application's configuration and the units that belong to it."""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Sequence, Union

from ..models.errors import ApplicationNotFoundError, ConfigNotFoundError
from ..utils.constants import DEFAULT_CFGS_SUBDIR, DEFAULT_SEARCH_ROOTS

logger = logging.getLogger(__name__)


def find_application_dir(
    app_name: str,
    search_roots: Sequence[Union[str, Path]] = DEFAULT_SEARCH_ROOTS
) -> Optional[Path]:
    """Search installation roots for a directory named after the application.

    Args:
        app_name: Directory name to look for
        search_roots: Roots to search, in order

    Returns:
        First matching directory, or None
    """
    for root in search_roots:
        candidate = Path(root) / app_name
        logger.debug(f"Looking for {app_name} in {root}")
        if candidate.is_dir():
            logger.info(f"Found {app_name} at {candidate}")
            return candidate
    return None


def locate_config_root(
    app_name: str,
    explicit_dir: Optional[Union[str, Path]] = None,
    search_roots: Sequence[Union[str, Path]] = DEFAULT_SEARCH_ROOTS,
    cfgs_subdir: str = DEFAULT_CFGS_SUBDIR
) -> Path:
    """Resolve the cfgs directory of an application.

    Args:
        app_name: Application name
        explicit_dir: Application directory given by the caller, skips the search
        search_roots: Roots searched when no explicit directory is given
        cfgs_subdir: Relative path of the configuration directory

    Returns:
        Path to the application's cfgs directory

    Raises:
        ApplicationNotFoundError: If no explicit directory was given and none matched
        ConfigNotFoundError: If the application directory has no cfgs subdirectory
    """
    if explicit_dir is not None:
        app_dir = Path(explicit_dir)
        logger.info(f"Using explicit directory {app_dir}")
    else:
        app_dir = find_application_dir(app_name, search_roots)
        if app_dir is None:
            roots = ", ".join(str(r) for r in search_roots)
            raise ApplicationNotFoundError(f"No directory named {app_name!r} under {roots}")

    config_root = app_dir / cfgs_subdir
    if not config_root.is_dir():
        raise ConfigNotFoundError(f"Configuration directory not found: {config_root}")

    return config_root


class ServiceDiscovery(ABC):
    """Strategy for finding the units that belong to an application."""

    def __init__(self, service_manager):
        self.service_manager = service_manager

    @abstractmethod
    def discover(self, app_name: str) -> List[str]:
        """Return the unit names belonging to the application, in order."""


class SubstringServiceDiscovery(ServiceDiscovery):
    """Selects every installed unit whose name contains the application name."""

    def discover(self, app_name: str) -> List[str]:
        units = self.service_manager.list_service_units()
        matches = [unit for unit in units if unit.matches(app_name)]

        for unit in matches:
            logger.info(f"Discovered {unit.name} ({unit.state})")

        return [unit.name for unit in matches]


class ManifestServiceDiscovery(ServiceDiscovery):
    """Uses an explicit unit list configured for the application.

    Units the service manager does not know about are dropped with a warning.
    """

    def __init__(self, service_manager, services: Sequence[str]):
        super().__init__(service_manager)
        self.services = list(services)

    def discover(self, app_name: str) -> List[str]:
        found = []
        for name in self.services:
            if self.service_manager.service_exists(name):
                logger.info(f"Using configured unit {name}")
                found.append(name)
            else:
                logger.warning(f"Configured unit {name} for {app_name} is not installed, skipping")
        return found
