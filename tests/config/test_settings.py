"""Tests for SvcSettings: TOML source, env vars and CLI flags."""

from __future__ import annotations

from pathlib import Path

import click
import pytest

from svcctl.config.discovery import CONFIG_FILENAME, find_config, user_config_path
from svcctl.config.models import ServiceConfig
from svcctl.config.settings import SvcSettings
from svcctl.domain.models import CustomCommands

pytestmark = pytest.mark.usefixtures("_isolated_config")


class TestDefaults:
    def test_all_defaults(self, tmp_path: Path) -> None:
        settings = SvcSettings.from_cli(start=tmp_path)
        assert settings.config_path is None
        assert settings.json_output is False
        assert settings.executor.default_timeout == 30.0
        assert settings.executor.use_sudo is False
        assert settings.health.max_workers == 8
        assert settings.lifecycle.restart_pause == 2.0
        assert settings.lifecycle.default_strategy is None
        assert settings.services == {}
        assert settings.plugins.enabled is True

    def test_frozen(self, tmp_path: Path) -> None:
        settings = SvcSettings.from_cli(start=tmp_path)
        with pytest.raises(Exception):
            settings.quiet = True  # type: ignore[misc]

    def test_unknown_service_section_is_empty(self, tmp_path: Path) -> None:
        settings = SvcSettings.from_cli(start=tmp_path)
        assert settings.service("redis") == ServiceConfig()


class TestTomlSource:
    def test_sections(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILENAME).write_text(
            "[executor]\nuse_sudo = true\n"
            "[lifecycle]\ndefault_strategy = \"systemd\"\n"
            "[services.colima]\n"
            'strategy = "direct_command"\n'
            'start = ["colima", "start", "--cpu", "4"]\n'
            "[services.myapp]\n"
            'package = "myapp"\n'
            "[services.myapp.health]\n"
            'http_endpoint = "http://localhost:8080/health"\n'
        )
        settings = SvcSettings.from_cli(start=tmp_path)
        assert settings.config_path == tmp_path / CONFIG_FILENAME
        assert settings.executor.use_sudo is True
        assert settings.executor.default_timeout == 30.0
        assert settings.lifecycle.default_strategy == "systemd"
        colima = settings.service("colima")
        assert colima.strategy == "direct_command"
        assert colima.custom_commands() == CustomCommands(start=["colima", "start", "--cpu", "4"])
        health = settings.service("myapp").health
        assert health is not None
        assert health.http_endpoint == "http://localhost:8080/health"

    def test_walks_up(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("[health]\nmax_workers = 2\n")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert find_config(nested) == tmp_path / CONFIG_FILENAME
        assert SvcSettings.from_cli(start=nested).health.max_workers == 2

    def test_explicit_config_path(self, tmp_path: Path) -> None:
        custom = tmp_path / "custom.toml"
        custom.write_text("[lifecycle]\nrestart_pause = 0.5\n")
        settings = SvcSettings.from_cli(config_path=str(custom))
        assert settings.lifecycle.restart_pause == 0.5
        assert settings.config_path == custom

    def test_env_var_config(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        custom = tmp_path / "env.toml"
        custom.write_text("[plugins]\nenabled = false\n")
        monkeypatch.setenv("SVCCTL_CONFIG", str(custom))
        assert SvcSettings.from_cli().plugins.enabled is False

    def test_invalid_toml(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("[executor\n")
        with pytest.raises(click.ClickException, match="Invalid TOML"):
            SvcSettings.from_cli(start=tmp_path)

    def test_custom_commands_none_when_unset(self) -> None:
        assert ServiceConfig(strategy="systemd").custom_commands() is None


class TestDiscovery:
    def test_user_config_defaults_under_home(self, tmp_path: Path) -> None:
        assert user_config_path() == tmp_path / ".config" / "svcctl" / CONFIG_FILENAME

    def test_user_config_honours_xdg(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
        assert user_config_path() == tmp_path / "xdg" / "svcctl" / CONFIG_FILENAME

    def test_falls_back_to_user_config(self, tmp_path: Path) -> None:
        user = user_config_path()
        user.parent.mkdir(parents=True)
        user.write_text('[lifecycle]\ndefault_strategy = "brew_services"\n')
        project = tmp_path / "project"
        project.mkdir()
        assert find_config(project) == user
        settings = SvcSettings.from_cli(start=project)
        assert settings.lifecycle.default_strategy == "brew_services"

    def test_project_config_wins_over_user_config(self, tmp_path: Path) -> None:
        user = user_config_path()
        user.parent.mkdir(parents=True)
        user.write_text("[health]\nmax_workers = 1\n")
        project = tmp_path / "project"
        project.mkdir()
        (project / CONFIG_FILENAME).write_text("[health]\nmax_workers = 3\n")
        assert find_config(project) == project / CONFIG_FILENAME

    def test_missing_env_path_does_not_fall_through(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("[health]\nmax_workers = 2\n")
        monkeypatch.setenv("SVCCTL_CONFIG", str(tmp_path / "missing.toml"))
        assert find_config(tmp_path) is None


class TestPriority:
    def test_cli_flags_override_toml(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("verbose = true\n")
        settings = SvcSettings.from_cli(start=tmp_path, verbose=False, json_output=True)
        assert settings.verbose is False
        assert settings.json_output is True

    def test_env_overrides_toml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("[executor]\ndefault_timeout = 10\n")
        monkeypatch.setenv("SVCCTL_EXECUTOR__DEFAULT_TIMEOUT", "45")
        assert SvcSettings.from_cli(start=tmp_path).executor.default_timeout == 45.0
