"""Exception hierarchy for configuration migration."""

from typing import Optional


class MigratorError(Exception):
    """Base class for all migration errors."""


class PrivilegeError(MigratorError, PermissionError):
    """Raised when the migrator is not running with root privileges."""


class DiscoveryError(MigratorError):
    """Raised when the application or its configuration cannot be found."""


class ApplicationNotFoundError(DiscoveryError):
    """Raised when no installation directory matches the application name."""


class ConfigNotFoundError(DiscoveryError):
    """Raised when the application directory has no cfgs subdirectory."""


class ServiceError(MigratorError):
    """Base class for service manager failures."""


class ServiceQueryError(ServiceError):
    """Raised when the service manager cannot list its units."""


class ServiceControlError(ServiceError):
    """Raised when a unit fails to stop or start.

    Attributes:
        unit: Name of the unit that failed, if a single unit is involved
        action: Systemctl action that failed (stop, start)
    """

    def __init__(self, message: str, unit: Optional[str] = None, action: Optional[str] = None):
        super().__init__(message)
        self.unit = unit
        self.action = action


class CopyError(MigratorError):
    """Raised when copying the configuration tree fails.

    Attributes:
        path: Filesystem path that could not be copied
    """

    def __init__(self, message: str, path=None):
        super().__init__(message)
        self.path = path


class SymlinkMapError(MigratorError):
    """Raised when a symlink map file cannot be read or is malformed."""


class SymlinkRestoreError(MigratorError):
    """Raised for a single symlink that could not be recreated.

    These are collected and logged, never allowed to stop the remaining
    restorations.
    """

    def __init__(self, message: str, path: str, target: str):
        super().__init__(message)
        self.path = path
        self.target = target
