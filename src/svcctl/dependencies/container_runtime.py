"""Container runtime dependencies: docker, podman and containerd.

Docker on macOS usually talks to a VM through a forwarded socket; which VM
depends on the active docker context. Docker Desktop owns its own VM and
contributes no edges.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from svcctl.domain.errors import ExecutorError
from svcctl.domain.models import DependencyHealthCheck, ProxyConfig, ServiceDependency
from svcctl.domain.types import DependencyType, HealthCheckType

if TYPE_CHECKING:
    from collections.abc import Callable

    from svcctl.infrastructure.executor import ExecOpts, Executor

logger = logging.getLogger(__name__)

DOCKER_SOCKET = "/var/run/docker.sock"
PODMAN_SOCKET = "/run/podman/podman.sock"


def colima_socket(home: Path) -> str:
    return str(home / ".colima" / "default" / "docker.sock")


def podman_machine_socket(home: Path) -> str:
    return str(
        home
        / ".local/share/containers/podman/machine/podman-machine-default/podman.sock"
    )


def _command_check(command: str) -> DependencyHealthCheck:
    return DependencyHealthCheck(
        type=HealthCheckType.COMMAND,
        command=command,
        timeout=10.0,
        retries=3,
        interval=5.0,
    )


class ContainerRuntimeDetector:
    """Detects proxy and required edges for container runtimes."""

    name = "container-runtime"

    def __init__(
        self,
        executor: Executor,
        *,
        opts: ExecOpts | None = None,
        home: Callable[[], Path] = Path.home,
    ) -> None:
        self._executor = executor
        self._opts = opts
        self._home = home

    def detect_dependencies(self, service_name: str) -> list[ServiceDependency]:
        match service_name.lower():
            case "docker":
                return self._docker()
            case "podman":
                return self._podman()
            case "containerd":
                return self._containerd()
            case _:
                return []

    def _output(self, cmd: str, *args: str) -> str | None:
        """Stdout of a successful command, or None."""
        try:
            result = self._executor.run(cmd, list(args), self._opts)
        except ExecutorError as exc:
            logger.debug("%s", exc)
            return None
        return result.stdout if result.ok else None

    # ------------------------------------------------------------------
    # Docker
    # ------------------------------------------------------------------

    def is_docker_desktop(self) -> bool:
        processes = self._output("ps", "aux")
        if processes is None:
            return False
        return "Docker Desktop" in processes or "com.docker.backend" in processes

    def _docker(self) -> list[ServiceDependency]:
        if self.is_docker_desktop():
            return []
        context = self._output("docker", "context", "show")
        if context is None:
            return []
        context = context.strip().lower()
        if "colima" in context:
            socket_path = colima_socket(self._home())
            return [self._docker_proxy("colima", socket_path, "docker-colima-proxy")]
        if "podman" in context:
            return [
                self._docker_proxy(
                    "podman-machine",
                    podman_machine_socket(self._home()),
                    "docker-podman-machine-proxy",
                )
            ]
        return []

    def _docker_proxy(self, runtime: str, socket_path: str, proxy_kind: str) -> ServiceDependency:
        return ServiceDependency(
            source_service="docker",
            target_service=runtime,
            dependency_type=DependencyType.PROXY,
            proxy_config=ProxyConfig(
                proxy_type="socket",
                proxy_endpoint=DOCKER_SOCKET,
                target_endpoint=socket_path,
                timeout=30.0,
                metadata={"type": proxy_kind},
            ),
            health_check=_command_check("docker version"),
            startup_order=1,
            metadata={"detector": self.name, "runtime": runtime, "socket_path": socket_path},
        )

    # ------------------------------------------------------------------
    # Podman and containerd
    # ------------------------------------------------------------------

    def _podman(self) -> list[ServiceDependency]:
        machines = self._output("podman", "machine", "list")
        if machines is None or "Currently running" not in machines:
            return []
        socket_path = podman_machine_socket(self._home())
        return [
            ServiceDependency(
                source_service="podman",
                target_service="podman-machine",
                dependency_type=DependencyType.PROXY,
                proxy_config=ProxyConfig(
                    proxy_type="socket",
                    proxy_endpoint=PODMAN_SOCKET,
                    target_endpoint=socket_path,
                    timeout=30.0,
                    metadata={"type": "podman-machine-proxy"},
                ),
                health_check=_command_check("podman version"),
                startup_order=1,
                metadata={
                    "detector": self.name,
                    "runtime": "podman-machine",
                    "socket_path": socket_path,
                },
            )
        ]

    def _containerd(self) -> list[ServiceDependency]:
        if self._output("systemctl", "is-active", "containerd") is None:
            return []
        return [
            ServiceDependency(
                source_service="containerd",
                target_service="systemd",
                dependency_type=DependencyType.REQUIRED,
                health_check=_command_check("systemctl is-active containerd"),
                startup_order=1,
                metadata={"detector": self.name, "manager": "systemd"},
            )
        ]
