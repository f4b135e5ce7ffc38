"""Tests for data models and errors."""

from pathlib import Path

import pytest

from cfgmigrate.models.errors import PrivilegeError, ServiceControlError, ServiceError
from cfgmigrate.models.migration import MigrationContext, MigrationResult, MigrationState, RestoreReport
from cfgmigrate.models.service import ApplicationConfig, ServiceStatus, ServiceUnit
from cfgmigrate.utils.privilege import PrivilegeHelper


class TestServiceModels:
    """Test cases for unit models."""

    def test_status_from_string(self) -> None:
        """Test known states map and unknown ones fall back."""
        assert ServiceStatus.from_string("Active") == ServiceStatus.ACTIVE
        assert ServiceStatus.from_string("reloading") == ServiceStatus.UNKNOWN

    def test_unit_from_line(self) -> None:
        """Test list-unit-files rows are parsed."""
        unit = ServiceUnit.from_line("sshd.service  enabled  disabled")

        assert unit == ServiceUnit("sshd.service", "enabled", "disabled")
        assert ServiceUnit.from_line("   ") is None
        assert ServiceUnit.from_line("only.service").state == "unknown"

    def test_unit_matching(self) -> None:
        """Test matching is a case-insensitive substring check."""
        unit = ServiceUnit("Foo-MyApp.service")

        assert unit.matches("myapp")
        assert not unit.matches("other")
        assert ServiceUnit("getty@.service").is_template()
        assert not ServiceUnit("getty@tty1.service").is_template()

    def test_application_config_round_trip(self) -> None:
        """Test to_dict and from_dict agree."""
        app = ApplicationConfig("myapp", ["a.service"], "/srv/myapp")

        assert ApplicationConfig.from_dict("myapp", app.to_dict()) == app
        assert ApplicationConfig.from_dict("bare", None).to_dict() == {"services": []}

    def test_application_config_validation(self) -> None:
        """Test invalid application settings are rejected."""
        with pytest.raises(ValueError):
            ApplicationConfig("")
        with pytest.raises(ValueError):
            ApplicationConfig("myapp", services="a.service")


class TestMigrationModels:
    """Test cases for the run models."""

    def test_context_paths_are_absolute(self) -> None:
        """Test relative paths are anchored when the context is built."""
        context = MigrationContext("myapp", Path("dest"), Path("symlink_info.json"), explicit_dir=Path("src"))

        assert context.dest_root.is_absolute()
        assert context.symlink_map_path == Path.cwd() / "symlink_info.json"
        assert context.explicit_dir.is_absolute()

    def test_context_requires_app_name(self) -> None:
        """Test an empty application name is rejected."""
        with pytest.raises(ValueError):
            MigrationContext("", Path("/tmp/dest"), Path("/tmp/map.json"))

    def test_result_exit_code(self) -> None:
        """Test exit codes follow the success flag."""
        result = MigrationResult("myapp")
        assert result.exit_code == 1
        assert result.state == MigrationState.INIT

        result.success = True
        assert result.exit_code == 0

        result.fail(ServiceControlError("boom", unit="a.service", action="stop"))
        assert result.exit_code == 1
        assert result.message == "boom"

    def test_restore_report_ok(self) -> None:
        """Test a report is ok only without failures."""
        assert RestoreReport().ok


class TestPrivileges:
    """Test cases for the privilege check."""

    def test_privilege_error_is_permission_error(self) -> None:
        """Test callers catching PermissionError see the privilege failure."""
        with pytest.raises(PermissionError):
            PrivilegeHelper.require_privileges(lambda: False)

    def test_privileged_caller_passes(self) -> None:
        """Test the check passes for a privileged caller."""
        assert PrivilegeHelper.require_privileges(lambda: True) is True

    def test_error_hierarchy(self) -> None:
        """Test service errors share a base class."""
        assert issubclass(ServiceControlError, ServiceError)
        assert issubclass(PrivilegeError, PermissionError)
