"""Tests for the YAML settings loader."""

from pathlib import Path

import pytest

from cfgmigrate.core.config_manager import ConfigManager
from cfgmigrate.utils.constants import DEFAULT_COMMAND_TIMEOUT, DEFAULT_SEARCH_ROOTS, DEFAULT_TUNABLE_SUFFIXES

VALID_CONFIG = """\
version: "1.0"
settings:
  search_roots: [/srv, /opt]
  service_scope: user
  command_timeout: 30
applications:
  myapp:
    services: [myapp-web.service, myapp-worker.service]
    dir: /srv/myapp
  plain: {}
"""


class TestConfigManager:
    """Test cases for ConfigManager."""

    @pytest.fixture
    def config_file(self, tmp_path: Path) -> Path:
        return tmp_path / "config.yaml"

    def test_missing_file_uses_defaults(self, config_file: Path) -> None:
        """Test defaults apply when no file exists."""
        manager = ConfigManager(config_file)

        assert manager.load_config() is False
        assert manager.get_setting("search_roots") == DEFAULT_SEARCH_ROOTS
        assert manager.get_setting("symlink_map_file") == "symlink_info.json"
        assert manager.get_setting("command_timeout") == DEFAULT_COMMAND_TIMEOUT
        assert manager.is_user_scope() is False
        assert manager.applications == {}

    def test_valid_file(self, config_file: Path) -> None:
        """Test settings and applications are loaded, defaults filled in."""
        config_file.write_text(VALID_CONFIG)
        manager = ConfigManager(config_file)

        assert manager.load_config() is True
        assert manager.get_search_roots() == [Path("/srv"), Path("/opt")]
        assert manager.is_user_scope() is True
        assert manager.get_setting("command_timeout") == 30
        assert manager.get_setting("cfgs_subdir") == "etc/cfgs"

        app = manager.get_application("myapp")
        assert app.services == ["myapp-web.service", "myapp-worker.service"]
        assert app.source_dir == "/srv/myapp"
        assert app.has_manifest() is True
        assert manager.get_application("plain").has_manifest() is False
        assert manager.get_application("unknown") is None

    def test_empty_file(self, config_file: Path) -> None:
        """Test an empty file falls back to defaults."""
        config_file.write_text("")
        manager = ConfigManager(config_file)

        assert manager.load_config() is False
        assert manager.get_setting("service_scope") == "system"

    def test_malformed_yaml(self, config_file: Path) -> None:
        """Test unparsable YAML falls back to defaults."""
        config_file.write_text("settings: [unclosed\n")
        manager = ConfigManager(config_file)

        assert manager.load_config() is False
        assert manager.get_setting("search_roots") == DEFAULT_SEARCH_ROOTS

    @pytest.mark.parametrize("body", [
        "settings: [1, 2]\n",
        "applications: [myapp]\n",
        "settings:\n  service_scope: global\n",
        "settings:\n  command_timeout: -1\n",
        "settings:\n  search_roots: /opt\n",
        "settings:\n  search_roots: [/opt, 5]\n",
        "settings:\n  cfgs_subdir: null\n",
        "settings:\n  cfgs_subdir: ''\n",
        "settings:\n  symlink_map_file: null\n",
        "settings:\n  symlink_map_file: [a.json]\n",
        "settings:\n  tunable_suffixes: [5]\n",
        "settings:\n  tunable_suffixes: .conf\n",
    ])
    def test_invalid_structure(self, config_file: Path, body: str) -> None:
        """Test structurally invalid files are rejected."""
        config_file.write_text(body)
        manager = ConfigManager(config_file)

        assert manager.load_config() is False
        assert manager.get_setting("service_scope") == "system"
        assert manager.get_setting("cfgs_subdir") == "etc/cfgs"
        assert manager.get_setting("symlink_map_file") == "symlink_info.json"
        assert manager.get_setting("tunable_suffixes") == DEFAULT_TUNABLE_SUFFIXES

    def test_bad_application_entry_is_skipped(self, config_file: Path) -> None:
        """Test one invalid application does not discard the rest."""
        config_file.write_text(
            "applications:\n  good:\n    services: [a.service]\n  bad:\n    services: not-a-list\n"
        )
        manager = ConfigManager(config_file)

        assert manager.load_config() is True
        assert list(manager.applications) == ["good"]
