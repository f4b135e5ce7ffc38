"""Pytest configuration and fixtures for cfgmigrate tests."""

import os
from pathlib import Path
from types import SimpleNamespace

import pytest

from cfgmigrate.core.service_manager import ServiceManager
from cfgmigrate.models.errors import ServiceQueryError
from cfgmigrate.models.service import ServiceStatus, ServiceUnit


class FakeServiceManager(ServiceManager):
    """ServiceManager that records systemctl actions instead of running them."""

    def __init__(self, unit_names=(), fail_stop=(), fail_start=(), query_error=False, **kwargs):
        super().__init__(**kwargs)
        self.units = [ServiceUnit(name, "enabled") for name in unit_names]
        self.fail_stop = set(fail_stop)
        self.fail_start = set(fail_start)
        self.query_error = query_error
        self.calls = []

    def list_service_units(self):
        self.calls.append(("list", None))
        if self.query_error:
            raise ServiceQueryError("systemctl is not available")
        return list(self.units)

    def get_service_status(self, service_name):
        return ServiceStatus.ACTIVE

    def service_exists(self, service_name):
        return any(unit.name == service_name for unit in self.units)

    def _execute_systemctl_action(self, action, service_name):
        self.calls.append((action, service_name))
        failing = self.fail_stop if action == "stop" else self.fail_start
        if service_name in failing:
            return False, f"{service_name} refused to {action}"
        return True, None

    def actions(self, action):
        return [name for call, name in self.calls if call == action]


@pytest.fixture
def fake_service_manager():
    """Factory for FakeServiceManager instances."""
    return FakeServiceManager


@pytest.fixture
def app_tree(tmp_path: Path):
    """Create an installed application with a cfgs tree containing symlinks.

    Layout under <tmp>/opt/myapp/etc/cfgs:
        app.conf
        b/target.txt
        a/link -> ../b/target.txt
        shared -> b
        nested/settings.yaml
    """
    search_root = tmp_path / "opt"
    cfgs = search_root / "myapp" / "etc" / "cfgs"
    (cfgs / "a").mkdir(parents=True)
    (cfgs / "b").mkdir()
    (cfgs / "nested").mkdir()

    (cfgs / "app.conf").write_text("[server]\nport = 8080\n# comment\nhost: localhost\n")
    (cfgs / "b" / "target.txt").write_text("target contents\n")
    (cfgs / "nested" / "settings.yaml").write_text("cache:\n  size: 64\n  enabled: true\n")
    os.symlink("../b/target.txt", cfgs / "a" / "link")
    os.symlink("b", cfgs / "shared")

    return SimpleNamespace(
        search_root=search_root,
        app_dir=search_root / "myapp",
        cfgs=cfgs,
        dest=tmp_path / "dest",
        map_path=tmp_path / "symlink_info.json",
    )


def snapshot_tree(root: Path) -> dict:
    """Describe every entry under root: symlink target, file contents or directory."""
    snapshot = {}
    for current, dirnames, filenames in os.walk(root):
        for name in dirnames + filenames:
            path = Path(current) / name
            relative = path.relative_to(root).as_posix()
            if path.is_symlink():
                snapshot[relative] = ("link", os.readlink(path))
            elif path.is_dir():
                snapshot[relative] = ("dir", None)
            else:
                snapshot[relative] = ("file", path.read_bytes())
    return snapshot


@pytest.fixture
def tree_snapshot():
    return snapshot_tree
