"""Utility functions and constants."""

from .constants import *
from .privilege import PrivilegeHelper

__all__ = ["APP_NAME", "CONFIG_DIR", "CONFIG_FILE", "DEFAULT_SEARCH_ROOTS", "DEFAULT_SYMLINK_MAP_FILE", "PrivilegeHelper"]
