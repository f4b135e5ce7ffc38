"""Application constants and configuration."""

from pathlib import Path

# Application metadata
APP_NAME = "cfgmigrate"

# Paths
CONFIG_DIR = Path.home() / ".config" / "cfgmigrate"
CONFIG_FILE = CONFIG_DIR / "config.yaml"

# Conventional installation roots, searched in order
DEFAULT_SEARCH_ROOTS = [
    "/opt",
    "/usr/local",
    "/usr/share",
    "/var/lib",
    "/etc",
]

# Configuration directory expected inside an application directory
DEFAULT_CFGS_SUBDIR = "etc/cfgs"

# Default settings
DEFAULT_SYMLINK_MAP_FILE = "symlink_info.json"
DEFAULT_SERVICE_SCOPE = "system"
DEFAULT_COMMAND_TIMEOUT = 90  # seconds, matches systemd's DefaultTimeoutStopSec
DEFAULT_TUNABLE_SUFFIXES = [".conf", ".cfg", ".ini", ".env", ".properties"]

# Exit codes
EXIT_SUCCESS = 0
EXIT_FAILURE = 1
