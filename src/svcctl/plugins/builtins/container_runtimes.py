"""Built-in plugin contributing the container runtime dependency detectors."""

from __future__ import annotations

from typing import TYPE_CHECKING

from svcctl.dependencies.container_runtime import ContainerRuntimeDetector
from svcctl.dependencies.docker_colima import DockerColimaDetector
from svcctl.plugins.manager import hookimpl

if TYPE_CHECKING:
    from svcctl.dependencies.manager import DependencyDetector
    from svcctl.infrastructure.executor import Executor


class ContainerRuntimePlugin:
    """Registers docker/podman/containerd and docker-on-Colima detection."""

    @hookimpl
    def register_dependency_detectors(self, executor: Executor) -> list[DependencyDetector]:
        return [ContainerRuntimeDetector(executor), DockerColimaDetector(executor)]
