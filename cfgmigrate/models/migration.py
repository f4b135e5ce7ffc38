"""Data models describing a single migration run."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional

from ..utils.constants import EXIT_FAILURE, EXIT_SUCCESS
from .errors import SymlinkRestoreError


class MigrationState(Enum):
    """States of the migration workflow, in the order they are entered."""

    INIT = "init"
    DISCOVER = "discover"
    QUIESCE = "quiesce"
    MIGRATE = "migrate"
    RESUME = "resume"
    DONE = "done"


@dataclass
class MigrationContext:
    """Execution context handed to every workflow step.

    Attributes:
        app_name: Application name given by the caller
        dest_root: Destination directory for the configuration tree
        symlink_map_path: Absolute path of the symlink map file
        explicit_dir: Application directory given by the caller, if any
        config_root: Resolved cfgs directory of the application
        privileged: Result of the privilege check
        dry_run: Report the plan without changing anything
    """

    app_name: str
    dest_root: Path
    symlink_map_path: Path
    explicit_dir: Optional[Path] = None
    config_root: Optional[Path] = None
    privileged: bool = False
    dry_run: bool = False

    def __post_init__(self):
        """Normalise paths so later steps never depend on the working directory."""
        if not self.app_name:
            raise ValueError("Application name cannot be empty")

        self.dest_root = Path(self.dest_root).absolute()
        self.symlink_map_path = Path(self.symlink_map_path).absolute()
        if self.explicit_dir is not None:
            self.explicit_dir = Path(self.explicit_dir).absolute()


@dataclass
class RestoreReport:
    """Outcome of replaying a symlink map against a destination tree."""

    restored: List[str] = field(default_factory=list)
    failed: Dict[str, SymlinkRestoreError] = field(default_factory=dict)
    entries: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


@dataclass
class MigrationResult:
    """Outcome of a migration run.

    Attributes:
        app_name: Application that was migrated
        state: Last state the workflow reached
        success: Whether the run completed without a fatal error
        message: Human-readable summary
        services: Units that were discovered (and stopped/started)
        symlink_map: Symlinks recorded while copying
        restore_report: Outcome of the symlink restoration
        tunables: Tunables found in the copied tree, per file
        error: Fatal error that ended the run before the migrate step
        migrate_error: Error raised during the migrate step
        resume_error: Error raised while restarting services
    """

    app_name: str
    state: MigrationState = MigrationState.INIT
    success: bool = False
    message: str = ""
    services: List[str] = field(default_factory=list)
    symlink_map: Dict[str, str] = field(default_factory=dict)
    restore_report: Optional[RestoreReport] = None
    tunables: Dict[str, Dict[str, str]] = field(default_factory=dict)
    error: Optional[BaseException] = None
    migrate_error: Optional[BaseException] = None
    resume_error: Optional[BaseException] = None

    @property
    def exit_code(self) -> int:
        return EXIT_SUCCESS if self.success else EXIT_FAILURE

    def fail(self, error: BaseException, message: Optional[str] = None):
        """Mark the run as failed.

        Args:
            error: Error that ended the run
            message: Optional summary, defaults to the error text
        """
        self.error = error
        self.success = False
        self.message = message or str(error)
