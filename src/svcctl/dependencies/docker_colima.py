"""Docker-on-Colima proxy detection and setup validation."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from svcctl.dependencies.container_runtime import DOCKER_SOCKET, colima_socket
from svcctl.domain.errors import DependencyConfigError, ExecutorError
from svcctl.domain.models import DependencyHealthCheck, ProxyConfig, ServiceDependency
from svcctl.domain.types import DependencyType, HealthCheckType
from svcctl.infrastructure.executor import is_command_available

if TYPE_CHECKING:
    from collections.abc import Callable

    from svcctl.infrastructure.executor import ExecOpts, Executor, ExecResult

logger = logging.getLogger(__name__)

_COLIMA_CONTEXT_MARKERS = ("colima-default", "colima", "default")


def is_colima_context(context: str) -> bool:
    lowered = context.strip().lower()
    return any(marker in lowered for marker in _COLIMA_CONTEXT_MARKERS)


class DockerColimaDetector:
    """Emits a docker -> colima proxy edge when the docker CLI targets Colima."""

    name = "docker-colima"

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

    def _try(self, cmd: str, *args: str) -> ExecResult | None:
        try:
            return self._executor.run(cmd, list(args), self._opts)
        except ExecutorError as exc:
            logger.debug("%s", exc)
            return None

    def docker_context(self) -> str | None:
        result = self._try("docker", "context", "show")
        if result is None or not result.ok:
            return None
        return result.stdout.strip()

    def is_colima_running(self) -> bool:
        if not self._which("colima"):
            return False
        result = self._try("colima", "status")
        return result is not None and result.ok

    def detect_dependencies(self, service_name: str) -> list[ServiceDependency]:
        if service_name.lower() != "docker":
            return []
        context = self.docker_context()
        if context is None or not is_colima_context(context):
            return []
        if not self.is_colima_running():
            logger.debug("docker context %s looks like Colima but colima is not running", context)
            return []

        socket_path = colima_socket(self._home())
        return [
            ServiceDependency(
                source_service="docker",
                target_service="colima",
                dependency_type=DependencyType.PROXY,
                proxy_config=ProxyConfig(
                    proxy_type="socket",
                    proxy_endpoint=DOCKER_SOCKET,
                    target_endpoint=socket_path,
                    timeout=30.0,
                    metadata={"context": context, "type": "docker-colima-proxy"},
                ),
                health_check=DependencyHealthCheck(
                    type=HealthCheckType.COMMAND,
                    command="docker version",
                    timeout=10.0,
                    retries=3,
                    interval=5.0,
                ),
                startup_order=1,
                metadata={
                    "detector": self.name,
                    "context": context,
                    "socket_path": socket_path,
                    "colima_path": "colima",
                },
            )
        ]

    def validate_docker_colima_setup(self) -> None:
        """Raise ``DependencyConfigError`` unless docker reaches a running Colima."""
        context = self.docker_context()
        if context is None:
            raise DependencyConfigError("failed to get Docker context")
        if not is_colima_context(context):
            raise DependencyConfigError(f"docker context '{context}' is not configured for Colima")
        if not self.is_colima_running():
            raise DependencyConfigError("colima is not running or not available")
        result = self._try("docker", "version")
        if result is None or not result.ok:
            raise DependencyConfigError("docker cannot connect to Colima")
