"""Migration workflow: discover, quiesce, migrate, resume."""

import logging
from pathlib import Path
from typing import Callable, Optional, Sequence, Union

from ..models.errors import CopyError, MigratorError, ServiceControlError
from ..models.migration import MigrationContext, MigrationResult, MigrationState
from ..utils.constants import DEFAULT_CFGS_SUBDIR, DEFAULT_SEARCH_ROOTS
from ..utils.privilege import PrivilegeHelper
from .copier import copy_tree, persist_symlink_map, restore_symlinks
from .discovery import ServiceDiscovery, SubstringServiceDiscovery, locate_config_root
from .tunables import scan_tunables

logger = logging.getLogger(__name__)


class Migrator:
    """Runs one configuration migration for an application.

    Services are stopped before the configuration is copied and are always
    started again afterwards, whether or not the copy succeeded.
    """

    def __init__(
        self,
        context: MigrationContext,
        service_manager,
        discovery: Optional[ServiceDiscovery] = None,
        search_roots: Sequence[Union[str, Path]] = DEFAULT_SEARCH_ROOTS,
        cfgs_subdir: str = DEFAULT_CFGS_SUBDIR,
        tunable_suffixes: Optional[Sequence[str]] = None,
        privilege_check: Optional[Callable[[], bool]] = None
    ):
        """Initialize the migrator.

        Args:
            context: Execution context for this run
            service_manager: ServiceManager used to query, stop and start units
            discovery: Strategy selecting the application's units
            search_roots: Installation roots searched for the application
            cfgs_subdir: Configuration directory inside the application directory
            tunable_suffixes: File suffixes parsed by the tunable scan
            privilege_check: Callable overriding the root check
        """
        self.context = context
        self.service_manager = service_manager
        self.discovery = discovery or SubstringServiceDiscovery(service_manager)
        self.search_roots = list(search_roots)
        self.cfgs_subdir = cfgs_subdir
        self.tunable_suffixes = tunable_suffixes
        self.privilege_check = privilege_check

    def run(self) -> MigrationResult:
        """Run the whole workflow.

        Returns:
            MigrationResult describing how far the run got and why it stopped
        """
        ctx = self.context
        result = MigrationResult(app_name=ctx.app_name)

        logger.info("=" * 60)
        logger.info(f"Migrating configuration of {ctx.app_name}")
        logger.info("=" * 60)

        try:
            self._check_privileges(result)
            self._discover(result)
        except MigratorError as e:
            logger.error(f"{result.state.value}: {e}")
            result.fail(e)
            return result

        if not result.services:
            result.state = MigrationState.DONE
            result.success = True
            result.message = f"No services found for {ctx.app_name}, nothing to do"
            logger.info(result.message)
            return result

        if ctx.dry_run:
            self._report_plan(result)
            return result

        try:
            self._quiesce(result)
        except ServiceControlError as e:
            logger.error(f"Aborting before any copy: {e}")
            result.fail(e)
            return result

        try:
            self._migrate(result)
        except Exception as e:
            logger.exception(f"Migration of {ctx.app_name} failed: {e}")
            result.migrate_error = e
        finally:
            self._resume(result)

        result.state = MigrationState.DONE
        if result.migrate_error is not None:
            result.success = False
            result.message = f"Migration failed, services were restarted: {result.migrate_error}"
            if result.resume_error is not None:
                result.message += f"; {result.resume_error}"
        elif result.resume_error is not None:
            result.success = False
            result.message = f"Configuration migrated but services did not restart: {result.resume_error}"
        else:
            result.success = True
            result.message = f"Migrated {ctx.config_root} to {ctx.dest_root}"

        log = logger.info if result.success else logger.error
        log(result.message)
        return result

    def _check_privileges(self, result: MigrationResult):
        result.state = MigrationState.INIT
        self.context.privileged = PrivilegeHelper.require_privileges(self.privilege_check)

    def _discover(self, result: MigrationResult):
        """Resolve the configuration root, the destination and the unit set."""
        ctx = self.context
        result.state = MigrationState.DISCOVER

        ctx.config_root = locate_config_root(
            ctx.app_name,
            explicit_dir=ctx.explicit_dir,
            search_roots=self.search_roots,
            cfgs_subdir=self.cfgs_subdir
        )
        logger.info(f"Configuration root: {ctx.config_root}")

        if not ctx.dry_run:
            try:
                ctx.dest_root.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise CopyError(f"Cannot create destination {ctx.dest_root}: {e}", path=ctx.dest_root) from e
            logger.info(f"Destination: {ctx.dest_root}")

        result.services = self.discovery.discover(ctx.app_name)
        logger.info(f"Found {len(result.services)} service(s) for {ctx.app_name}")

    def _report_plan(self, result: MigrationResult):
        ctx = self.context
        logger.info(f"[DRY RUN] Would copy {ctx.config_root} to {ctx.dest_root}")
        logger.info(f"[DRY RUN] Would write symlink map to {ctx.symlink_map_path}")
        for service_name in result.services:
            status = self.service_manager.get_service_status(service_name)
            logger.info(f"[DRY RUN] Would stop and start {service_name} ({status.value})")

        result.state = MigrationState.DONE
        result.success = True
        result.message = f"Dry run: {len(result.services)} service(s) would be restarted"

    def _quiesce(self, result: MigrationResult):
        result.state = MigrationState.QUIESCE
        for service_name in result.services:
            status = self.service_manager.get_service_status(service_name)
            logger.info(f"Stopping {service_name} ({status.value})")

        self.service_manager.stop_services(result.services)

    def _migrate(self, result: MigrationResult):
        """Copy the tree, persist and replay symlinks, report tunables."""
        ctx = self.context
        result.state = MigrationState.MIGRATE

        result.symlink_map = copy_tree(ctx.config_root, ctx.dest_root)

        if result.symlink_map:
            persist_symlink_map(result.symlink_map, ctx.symlink_map_path)
        else:
            logger.info("No symlinks recorded, leaving symlink map untouched")

        # The scan only reports; its failures must not block symlink restoration
        try:
            result.tunables = scan_tunables(ctx.dest_root, self.tunable_suffixes)
        except Exception as e:
            logger.warning(f"Tunable scan of {ctx.dest_root} failed: {e}", exc_info=True)

        report = restore_symlinks(ctx.dest_root, ctx.symlink_map_path)
        result.restore_report = report

        # Entries left over from an earlier run are replayed as they are
        for relative in sorted(set(report.entries) - set(result.symlink_map)):
            logger.warning(f"Restored stale symlink {relative}, not present in {ctx.config_root}")

    def _resume(self, result: MigrationResult):
        result.state = MigrationState.RESUME
        logger.info(f"Starting {len(result.services)} service(s)")
        try:
            self.service_manager.start_services(result.services)
        except ServiceControlError as e:
            logger.error(str(e))
            result.resume_error = e
