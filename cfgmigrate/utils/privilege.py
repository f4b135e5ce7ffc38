"""Privilege helper for root-only service and filesystem operations."""

import logging
import os

from ..models.errors import PrivilegeError

logger = logging.getLogger(__name__)


class PrivilegeHelper:
    """Helper for checking that the migrator runs with root privileges."""

    @staticmethod
    def is_privileged() -> bool:
        """Check if the current process runs as root.

        Returns:
            True if the effective user id is 0, False otherwise
        """
        try:
            return os.geteuid() == 0
        except AttributeError:
            # No geteuid outside POSIX
            return False

    @staticmethod
    def require_privileges(is_privileged=None) -> bool:
        """Ensure the caller is privileged.

        Args:
            is_privileged: Optional callable overriding the privilege check

        Returns:
            True if the caller is privileged

        Raises:
            PrivilegeError: If the caller is not privileged
        """
        check = is_privileged or PrivilegeHelper.is_privileged
        if not check():
            username = PrivilegeHelper.get_current_username()
            logger.error(f"User {username} is not privileged")
            raise PrivilegeError(
                f"cfgmigrate must be run as root (current user: {username})"
            )

        logger.debug("Running with root privileges")
        return True

    @staticmethod
    def get_current_username() -> str:
        """Get the current username.

        Returns:
            Current username
        """
        return os.getenv("SUDO_USER") or os.getenv("USER") or os.getenv("USERNAME") or "unknown"
