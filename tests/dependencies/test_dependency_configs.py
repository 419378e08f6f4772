"""Tests for DependencyConfigManager defaults and host detection."""

from __future__ import annotations

from pathlib import Path

import pytest

from svcctl.dependencies.config import DependencyConfigManager, default_configs
from svcctl.domain.errors import DependencyConfigError
from svcctl.domain.models import DependencyConfig
from svcctl.domain.types import ManagementStrategy


@pytest.fixture
def manager(executor, tmp_path: Path) -> DependencyConfigManager:
    return DependencyConfigManager(executor, which=lambda _: True, home=lambda: tmp_path)


class TestDefaults:
    def test_colima(self) -> None:
        colima = default_configs()["colima"]
        assert colima.strategy is ManagementStrategy.DIRECT_COMMAND
        assert colima.custom_commands is not None
        assert colima.custom_commands.start == ["colima", "start"]
        assert colima.health_check is not None
        assert colima.health_check.timeout == 30.0
        assert colima.auto_detect

    def test_docker(self) -> None:
        docker = default_configs()["docker"]
        assert docker.strategy is ManagementStrategy.AUTO
        assert docker.health_check is not None
        assert docker.health_check.interval == 2.0


class TestRegistry:
    def test_get_returns_copy(self, manager: DependencyConfigManager) -> None:
        config = manager.get_config("colima")
        assert config is not None
        config.metadata["changed"] = "yes"
        again = manager.get_config("colima")
        assert again is not None
        assert "changed" not in again.metadata

    def test_register_and_replace(self, manager: DependencyConfigManager) -> None:
        manager.register_config(DependencyConfig(service_name="lima"))
        manager.register_config(
            DependencyConfig(service_name="docker", strategy=ManagementStrategy.SYSTEMD)
        )
        assert manager.service_names() == ["colima", "docker", "lima"]
        docker = manager.get_config("docker")
        assert docker is not None
        assert docker.strategy is ManagementStrategy.SYSTEMD

    def test_unknown(self, manager: DependencyConfigManager) -> None:
        assert manager.get_config("nope") is None


class TestDetection:
    def test_colima(self, executor, manager: DependencyConfigManager, tmp_path: Path) -> None:
        config_file = tmp_path / ".colima" / "default" / "colima.yaml"
        config_file.parent.mkdir(parents=True)
        config_file.write_text("cpu: 2\n")
        executor.on(
            ["colima", "status"],
            stderr="INFO colima is running using macOS Virtualization.Framework\n"
            "INFO arch: aarch64\nINFO runtime: docker\n",
        )
        config = manager.detect_service_configuration("colima")
        assert config.metadata["config_file"] == str(config_file)
        assert config.metadata["runtime"] == "docker"
        assert config.metadata["category"] == "container_runtime"

    def test_colima_arch_line(self, executor, manager: DependencyConfigManager) -> None:
        executor.on(["colima", "status"], "arch: x86_64\n")
        assert manager.detect_service_configuration("colima").metadata["architecture"] == "x86_64"

    def test_colima_stopped(self, executor, manager: DependencyConfigManager) -> None:
        executor.on(["colima", "status"], exit_code=1)
        with pytest.raises(DependencyConfigError, match="colima is not running"):
            manager.detect_service_configuration("colima")

    def test_colima_missing(self, executor) -> None:
        manager = DependencyConfigManager(executor, which=lambda _: False)
        with pytest.raises(DependencyConfigError, match="colima command not found"):
            manager.detect_service_configuration("colima")

    def test_docker_on_colima(self, executor, manager: DependencyConfigManager) -> None:
        executor.on(["docker", "context", "show"], "colima\n")
        config = manager.detect_service_configuration("docker")
        assert config.metadata["context"] == "colima"
        assert config.metadata["runtime"] == "colima"
        assert config.metadata["dependency"] == "colima"

    def test_docker_launch_error(self, manager: DependencyConfigManager) -> None:
        with pytest.raises(DependencyConfigError, match="cannot inspect docker"):
            manager.detect_service_configuration("docker")

    def test_no_detection_for_other_services(self, manager: DependencyConfigManager) -> None:
        with pytest.raises(
            DependencyConfigError, match="no configuration detection available for service lima"
        ):
            manager.detect_service_configuration("lima")
