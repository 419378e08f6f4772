"""Management settings for services that appear as dependency targets."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from svcctl.domain.errors import DependencyConfigError, ExecutorError
from svcctl.domain.models import CustomCommands, DependencyConfig, DependencyHealthCheck
from svcctl.domain.types import HealthCheckType, ManagementStrategy
from svcctl.infrastructure.cache import LockedStore
from svcctl.infrastructure.executor import is_command_available

if TYPE_CHECKING:
    from collections.abc import Callable

    from svcctl.infrastructure.executor import ExecOpts, Executor, ExecResult

logger = logging.getLogger(__name__)


def default_configs() -> dict[str, DependencyConfig]:
    """Built-in settings for colima and docker."""
    return {
        "colima": DependencyConfig(
            service_name="colima",
            strategy=ManagementStrategy.DIRECT_COMMAND,
            custom_commands=CustomCommands(
                start=["colima", "start"],
                stop=["colima", "stop"],
                restart=["colima", "restart"],
                status=["colima", "status"],
            ),
            health_check=DependencyHealthCheck(
                type=HealthCheckType.COMMAND,
                command="colima status",
                timeout=30.0,
                retries=3,
                interval=5.0,
            ),
            auto_detect=True,
            metadata={
                "description": "Container runtime for Docker on macOS",
                "category": "container_runtime",
            },
        ),
        "docker": DependencyConfig(
            service_name="docker",
            strategy=ManagementStrategy.AUTO,
            health_check=DependencyHealthCheck(
                type=HealthCheckType.COMMAND,
                command="docker version",
                timeout=10.0,
                retries=3,
                interval=2.0,
            ),
            auto_detect=True,
            metadata={
                "description": "Docker client for container management",
                "category": "container_client",
            },
        ),
    }


class DependencyConfigManager:
    """Registry of ``DependencyConfig`` plus live detection for known services."""

    def __init__(
        self,
        executor: Executor,
        *,
        opts: ExecOpts | None = None,
        which: Callable[[str], bool] = is_command_available,
        home: Callable[[], Path] = Path.home,
    ) -> None:
        self._executor = executor
        self._opts = opts
        self._which = which
        self._home = home
        self._configs: LockedStore[str, DependencyConfig] = LockedStore()
        for name, config in default_configs().items():
            self._configs.set(name, config)

    def register_config(self, config: DependencyConfig) -> None:
        """Add or replace the settings for ``config.service_name``."""
        self._configs.set(config.service_name, config)

    def get_config(self, service_name: str) -> DependencyConfig | None:
        config = self._configs.get(service_name)
        return config.model_copy(deep=True) if config is not None else None

    def service_names(self) -> list[str]:
        return sorted(self._configs.keys())

    # ------------------------------------------------------------------
    # Detection
    # ------------------------------------------------------------------

    def _run(self, service_name: str, cmd: str, *args: str) -> ExecResult:
        try:
            result = self._executor.run(cmd, list(args), self._opts)
        except ExecutorError as exc:
            raise DependencyConfigError(f"cannot inspect {service_name}: {exc}") from exc
        return result

    def detect_service_configuration(self, service_name: str) -> DependencyConfig:
        """Inspect the host and return settings for *service_name*."""
        match service_name:
            case "colima":
                return self._detect_colima()
            case "docker":
                return self._detect_docker()
            case _:
                raise DependencyConfigError(
                    f"no configuration detection available for service {service_name}"
                )

    def _detect_colima(self) -> DependencyConfig:
        if not self._which("colima"):
            raise DependencyConfigError("colima command not found")
        result = self._run("colima", "colima", "status")
        if not result.ok:
            raise DependencyConfigError(f"colima is not running: exit code {result.exit_code}")

        config = default_configs()["colima"]
        config_file = self._home() / ".colima" / "default" / "colima.yaml"
        if config_file.exists():
            config.metadata["config_file"] = str(config_file)

        output = result.stdout + result.stderr
        if "runtime: docker" in output:
            config.metadata["runtime"] = "docker"
        for line in output.splitlines():
            line = line.strip()
            if line.startswith("arch:"):
                config.metadata["architecture"] = line.removeprefix("arch:").strip()
                break
        return config

    def _detect_docker(self) -> DependencyConfig:
        if not self._which("docker"):
            raise DependencyConfigError("docker command not found")
        result = self._run("docker", "docker", "context", "show")
        if not result.ok:
            raise DependencyConfigError(
                f"failed to get Docker context: exit code {result.exit_code}"
            )

        config = default_configs()["docker"]
        context = result.stdout.strip()
        config.metadata["context"] = context
        if "colima" in context.lower():
            config.metadata["runtime"] = "colima"
            config.metadata["dependency"] = "colima"
        return config
