"""Priority configuration tests.

These tests verify:
- YAML loading and schema validation
- Config file discovery (env var, then config/node_map.yml)
- Applying configuration to dispatch tables
- Class path lookup
"""

from __future__ import annotations

import textwrap

import pytest

from node_map import (
    ConfigurationError,
    DispatchTables,
    PriorityConfig,
    PriorityConfigPath,
    apply_priority_config,
    import_class,
    load_priority_config,
    parse_priority_config,
)
from node_map.config import CONFIG_PATH_ENV
from tests.sample_handlers import AptPackage, Package, Service, Systemd, Upstart

SAMPLE_CONFIG = textwrap.dedent(
    """\
    resources:
      - name: package
        handlers:
          - tests.sample_handlers.AptPackage
          - tests.sample_handlers.Package
    providers:
      - name: service
        handlers:
          - tests.sample_handlers.Systemd
          - tests.sample_handlers.Upstart
        filters:
          os: linux
          platform_family: ["!rhel"]
    """
)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "node_map.yml"
    path.write_text(SAMPLE_CONFIG)
    return path


class TestLoadPriorityConfig:
    """Tests for load_priority_config()."""

    def test_load(self, config_file):
        config = load_priority_config(config_file)
        assert isinstance(config, PriorityConfig)
        assert config.resources[0].name == "package"
        assert config.providers[0].handlers == [
            "tests.sample_handlers.Systemd",
            "tests.sample_handlers.Upstart",
        ]
        assert config.providers[0].filters.os == "linux"
        assert config.providers[0].filters.platform_family == ["!rhel"]

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yml"
        path.write_text("")
        config = load_priority_config(path)
        assert config.resources == []
        assert config.providers == []

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Cannot read"):
            load_priority_config(tmp_path / "nope.yml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yml"
        path.write_text("providers: [unclosed")
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_priority_config(path)

    def test_unknown_keys_rejected(self):
        with pytest.raises(ConfigurationError):
            parse_priority_config({"providers": [{"name": "x", "handlers": ["a.B"], "priority": 1}]})

    def test_unknown_filter_rejected(self):
        with pytest.raises(ConfigurationError):
            parse_priority_config(
                {"providers": [{"name": "x", "handlers": ["a.B"], "filters": {"distro": "arch"}}]}
            )

    def test_empty_handlers_rejected(self):
        with pytest.raises(ConfigurationError):
            parse_priority_config({"providers": [{"name": "x", "handlers": []}]})

    def test_integer_platform_version(self):
        config = parse_priority_config(
            {"providers": [{"name": "x", "handlers": ["a.B"], "filters": {"platform_version": 7}}]}
        )
        assert config.providers[0].filters.platform_version == 7

    def test_float_platform_version_rejected(self, tmp_path):
        path = tmp_path / "float.yml"
        path.write_text(
            "providers:\n  - name: x\n    handlers: [a.B]\n    filters:\n      platform_version: 10.10\n"
        )
        with pytest.raises(ConfigurationError):
            load_priority_config(path)

    def test_top_level_must_be_mapping(self):
        with pytest.raises(ConfigurationError):
            parse_priority_config(["providers"])


class TestApplyPriorityConfig:
    """Tests for apply_priority_config() and DispatchTables.from_config()."""

    def test_apply(self, config_file, ubuntu_node, centos_node):
        tables = DispatchTables.create()
        count = apply_priority_config(load_priority_config(config_file), tables)

        assert count == 4
        assert tables.get_provider_priority_array(ubuntu_node, "service") == [Systemd, Upstart]
        assert tables.get_provider_priority_array(centos_node, "service") == []
        assert tables.resource_for_node(ubuntu_node, "package") is AptPackage
        assert tables.resource_for_node(centos_node, "package") is Package

    def test_unknown_class_registers_nothing(self):
        config = parse_priority_config(
            {
                "resources": [{"name": "package", "handlers": ["tests.sample_handlers.Package"]}],
                "providers": [{"name": "service", "handlers": ["tests.sample_handlers.Missing"]}],
            }
        )
        tables = DispatchTables.create()
        with pytest.raises(ConfigurationError, match="Missing"):
            apply_priority_config(config, tables)
        assert tables.resources.handlers() == []
        assert tables.providers.handlers() == []

    def test_resource_arrays_cannot_filter_on_action(self):
        config = parse_priority_config(
            {
                "resources": [
                    {
                        "name": "package",
                        "handlers": ["tests.sample_handlers.Package"],
                        "filters": {"action": "install"},
                    }
                ]
            }
        )
        with pytest.raises(ConfigurationError):
            apply_priority_config(config, DispatchTables.create())

    def test_from_config_path(self, config_file, ubuntu_node):
        tables = DispatchTables.from_config(config_file)
        assert tables.provider_for_action(Service(node=ubuntu_node), "start") is Systemd

    def test_from_config_discovery(self, config_file, monkeypatch, ubuntu_node):
        monkeypatch.setenv(CONFIG_PATH_ENV, str(config_file))
        tables = DispatchTables.from_config()
        assert tables.provider_for_action(Service(node=ubuntu_node), "start") is Systemd

    def test_from_config_without_file(self, tmp_path, monkeypatch):
        monkeypatch.delenv(CONFIG_PATH_ENV, raising=False)
        monkeypatch.chdir(tmp_path)
        tables = DispatchTables.from_config()
        assert tables.providers.handlers() == []


class TestPriorityConfigPath:
    """Tests for PriorityConfigPath.find_config_file()."""

    def test_env_var(self, config_file, monkeypatch):
        monkeypatch.setenv(CONFIG_PATH_ENV, str(config_file))
        assert PriorityConfigPath.find_config_file() == config_file

    def test_env_var_missing_file_falls_back(self, tmp_path, monkeypatch):
        (tmp_path / "config").mkdir()
        fallback = tmp_path / "config" / "node_map.yml"
        fallback.write_text(SAMPLE_CONFIG)
        monkeypatch.setenv(CONFIG_PATH_ENV, str(tmp_path / "missing.yml"))
        monkeypatch.chdir(tmp_path)
        assert PriorityConfigPath.find_config_file() == fallback

    def test_not_found(self, tmp_path, monkeypatch):
        monkeypatch.delenv(CONFIG_PATH_ENV, raising=False)
        monkeypatch.chdir(tmp_path)
        assert PriorityConfigPath.find_config_file() is None


class TestImportClass:
    """Tests for import_class()."""

    def test_import(self):
        assert import_class("tests.sample_handlers.Systemd") is Systemd

    @pytest.mark.parametrize(
        "path",
        [
            "Systemd",
            "tests.sample_handlers.Missing",
            "no_such_module_xyz.Thing",
            "tests.sample_handlers.default_hook",
        ],
    )
    def test_failures(self, path):
        with pytest.raises(ConfigurationError):
            import_class(path)
