"""Data models for configuration migration."""

from .errors import (
    ApplicationNotFoundError,
    ConfigNotFoundError,
    CopyError,
    DiscoveryError,
    MigratorError,
    PrivilegeError,
    ServiceControlError,
    ServiceError,
    ServiceQueryError,
    SymlinkMapError,
    SymlinkRestoreError,
)
from .migration import MigrationContext, MigrationResult, MigrationState, RestoreReport
from .service import ApplicationConfig, ServiceStatus, ServiceUnit

__all__ = [
    "ApplicationConfig",
    "ApplicationNotFoundError",
    "ConfigNotFoundError",
    "CopyError",
    "DiscoveryError",
    "MigrationContext",
    "MigrationResult",
    "MigrationState",
    "MigratorError",
    "PrivilegeError",
    "RestoreReport",
    "ServiceControlError",
    "ServiceError",
    "ServiceQueryError",
    "ServiceStatus",
    "ServiceUnit",
    "SymlinkMapError",
    "SymlinkRestoreError",
]
