#!/usr/bin/env python3
"""Entry point for the cfgmigrate command."""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .core.config_manager import ConfigManager
from .core.discovery import ManifestServiceDiscovery, SubstringServiceDiscovery
from .core.migrator import Migrator
from .core.service_manager import ServiceManager
from .models.migration import MigrationContext
from .utils.constants import APP_NAME, CONFIG_FILE, EXIT_FAILURE


def setup_logging(verbose: bool = False, log_file: Optional[Path] = None) -> bool:
    """Set up application logging.

    Args:
        verbose: Log debug messages
        log_file: Also write the log to this file

    Returns:
        True if logging is set up, False if the log file could not be opened
    """
    handlers = [logging.StreamHandler()]
    log_error = None
    if log_file is not None:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(log_file))
        except OSError as e:
            log_error = e

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )

    if log_error is not None:
        logging.getLogger(__name__).error(f"Cannot open log file {log_file}: {log_error}")
        return False
    return True


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Copy an application's configuration with its systemd services stopped"
    )
    parser.add_argument('app_name',
                        help='Application name, used to find its directory and its units')
    parser.add_argument('--dest', required=True, type=Path,
                        help='Destination directory for the configuration tree')
    parser.add_argument('--dir', dest='source_dir', type=Path,
                        help='Application directory (skips searching the installation roots)')
    parser.add_argument('--symlink-map', type=Path,
                        help='Where to write the symlink map (default: symlink_info.json)')
    parser.add_argument('--config', type=Path, default=CONFIG_FILE,
                        help=f'Settings file (default: {CONFIG_FILE})')
    parser.add_argument('--user', action='store_true',
                        help='Manage user units (systemctl --user)')
    parser.add_argument('--dry-run', action='store_true',
                        help='Report what would be done without changing anything')
    parser.add_argument('--log-file', type=Path,
                        help='Also write the log to this file')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Log debug messages')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def create_migrator(args: argparse.Namespace, config_manager: ConfigManager) -> Migrator:
    """Build a Migrator from parsed arguments and loaded settings.

    Args:
        args: Parsed command line arguments
        config_manager: Loaded settings

    Returns:
        Migrator ready to run
    """
    app_config = config_manager.get_application(args.app_name)

    source_dir = args.source_dir
    if source_dir is None and app_config is not None and app_config.source_dir:
        source_dir = Path(app_config.source_dir)

    symlink_map = args.symlink_map or Path(config_manager.get_setting("symlink_map_file"))

    context = MigrationContext(
        app_name=args.app_name,
        dest_root=args.dest,
        symlink_map_path=symlink_map,
        explicit_dir=source_dir,
        dry_run=args.dry_run
    )

    service_manager = ServiceManager(
        user_scope=args.user or config_manager.is_user_scope(),
        timeout=config_manager.get_setting("command_timeout")
    )

    if app_config is not None and app_config.has_manifest():
        discovery = ManifestServiceDiscovery(service_manager, app_config.services)
    else:
        discovery = SubstringServiceDiscovery(service_manager)

    return Migrator(
        context,
        service_manager,
        discovery=discovery,
        search_roots=config_manager.get_search_roots(),
        cfgs_subdir=config_manager.get_setting("cfgs_subdir"),
        tunable_suffixes=config_manager.get_setting("tunable_suffixes")
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    if not setup_logging(args.verbose, args.log_file):
        return EXIT_FAILURE
    logger = logging.getLogger(__name__)

    config_manager = ConfigManager(args.config)
    config_manager.load_config()

    try:
        migrator = create_migrator(args, config_manager)
    except ValueError as e:
        logger.error(f"Invalid arguments: {e}")
        return EXIT_FAILURE

    result = migrator.run()
    logger.info(f"Finished with exit code {result.exit_code}")
    return result.exit_code


if __name__ == "__main__":
    sys.exit(main())
