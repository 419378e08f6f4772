"""Service dependency detection and ordering."""

from __future__ import annotations

from svcctl.dependencies.config import DependencyConfigManager, default_configs
from svcctl.dependencies.container_runtime import ContainerRuntimeDetector
from svcctl.dependencies.docker_colima import DockerColimaDetector
from svcctl.dependencies.manager import DependencyDetector, DependencyManager

__all__ = [
    "ContainerRuntimeDetector",
    "DependencyConfigManager",
    "DependencyDetector",
    "DependencyManager",
    "DockerColimaDetector",
    "default_configs",
]
