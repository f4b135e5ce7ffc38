"""Data models for systemd units and per-application settings."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class ServiceStatus(Enum):
    """Enumeration of possible service states."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    FAILED = "failed"
    ACTIVATING = "activating"
    DEACTIVATING = "deactivating"
    UNKNOWN = "unknown"

    @classmethod
    def from_string(cls, status_str: str) -> 'ServiceStatus':
        """Convert a string to ServiceStatus enum.

        Args:
            status_str: Status string from systemctl

        Returns:
            ServiceStatus enum value
        """
        try:
            return cls(status_str.lower())
        except ValueError:
            return cls.UNKNOWN


@dataclass
class ServiceUnit:
    """A service unit as listed by ``systemctl list-unit-files``.

    Attributes:
        name: Unit name including the suffix (e.g., 'nginx.service')
        state: Unit file state (enabled, disabled, static, masked, ...)
        preset: Vendor preset, if systemd reports one
    """

    name: str
    state: str = "unknown"
    preset: Optional[str] = None

    @classmethod
    def from_line(cls, line: str) -> Optional['ServiceUnit']:
        """Parse one row of ``list-unit-files --no-legend`` output.

        Args:
            line: Raw output line

        Returns:
            ServiceUnit, or None for blank lines
        """
        parts = line.split()
        if not parts:
            return None

        return cls(
            name=parts[0],
            state=parts[1] if len(parts) > 1 else "unknown",
            preset=parts[2] if len(parts) > 2 else None
        )

    def is_template(self) -> bool:
        """Check if this is a template unit (e.g., 'getty@.service').

        Returns:
            True for template units, which cannot be started or stopped
        """
        return "@." in self.name

    def matches(self, app_name: str) -> bool:
        """Check if the unit name contains the application name.

        Args:
            app_name: Application name to look for, case-insensitively

        Returns:
            True if the unit belongs to the application
        """
        return app_name.lower() in self.name.lower()


@dataclass
class ApplicationConfig:
    """Per-application migration settings.

    Attributes:
        name: Application name as given on the command line
        services: Explicit unit manifest; empty means substring discovery
        source_dir: Default application directory, overriding the search roots
    """

    name: str
    services: List[str] = field(default_factory=list)
    source_dir: Optional[str] = None

    def __post_init__(self):
        """Validate application configuration after initialization."""
        if not self.name:
            raise ValueError("Application name cannot be empty")

        if not isinstance(self.services, list) or not all(isinstance(s, str) for s in self.services):
            raise ValueError(f"Invalid services for {self.name}: must be a list of unit names")

    def has_manifest(self) -> bool:
        """Check if the application lists its units explicitly.

        Returns:
            True if a unit manifest is configured
        """
        return bool(self.services)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization.

        Returns:
            Dictionary representation of the application config
        """
        result = {"services": list(self.services)}

        if self.source_dir:
            result["dir"] = self.source_dir

        return result

    @classmethod
    def from_dict(cls, name: str, data: dict) -> 'ApplicationConfig':
        """Create ApplicationConfig from dictionary.

        Args:
            name: Application name (the key in the applications mapping)
            data: Dictionary with application configuration

        Returns:
            ApplicationConfig instance
        """
        data = data or {}
        return cls(
            name=name,
            services=data.get("services", []) or [],
            source_dir=data.get("dir")
        )
