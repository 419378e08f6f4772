"""DependencyService: detection, chains, startup order and dependency configs."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from svcctl.dependencies.docker_colima import DockerColimaDetector
from svcctl.domain.errors import DependencyConfigError, SvcctlError
from svcctl.services.base import BaseService
from svcctl.services.result import ServiceResult
from svcctl.services.telemetry import note, traced

if TYPE_CHECKING:
    from svcctl.domain.models import ServiceDependency

logger = logging.getLogger(__name__)


def _edges(deps: list[ServiceDependency]) -> list[dict[str, Any]]:
    return [dep.model_dump(mode="json") for dep in deps]


class DependencyService(BaseService):
    """Reports how services depend on one another."""

    @traced
    def detect(self, service_name: str) -> ServiceResult:
        """Direct dependencies of *service_name* from every detector."""
        manager = self._runtime.dependencies
        note("detectors", [detector.name for detector in manager.detectors])
        deps = manager.detect_dependencies(service_name)
        return ServiceResult(
            ok=True,
            op="detect",
            data={"service": service_name, "count": len(deps), "items": _edges(deps)},
        )

    @traced
    def chain(self, service_name: str) -> ServiceResult:
        """Every edge reachable from *service_name*."""
        try:
            chain = self._runtime.dependencies.get_dependency_chain(service_name)
        except SvcctlError as exc:
            return self._failure("chain", exc, service=service_name)
        note("edges", len(chain))
        return ServiceResult(
            ok=True,
            op="chain",
            data={"service": service_name, "count": len(chain), "items": _edges(chain)},
        )

    @traced
    def order(self, service_name: str) -> ServiceResult:
        """Services to start before *service_name*, prerequisites first."""
        try:
            order = self._runtime.dependencies.get_startup_order(service_name)
        except SvcctlError as exc:
            return self._failure("order", exc, service=service_name)
        return ServiceResult(
            ok=True,
            op="order",
            data={"service": service_name, "count": len(order), "items": order},
        )

    @traced
    def validate(self, service_name: str) -> ServiceResult:
        """Check the chain is well formed.

        When the chain routes docker through Colima, the live Docker/Colima
        setup is validated as well.
        """
        manager = self._runtime.dependencies
        try:
            chain = manager.validate_dependency_chain(service_name)
            checked = self._validate_colima(chain)
        except SvcctlError as exc:
            return self._failure("validate", exc, service=service_name)
        return ServiceResult(
            ok=True,
            op="validate",
            data={"service": service_name, "valid": True, "edges": len(chain), "checked": checked},
        )

    def _validate_colima(self, chain: list[ServiceDependency]) -> list[str]:
        if not any(d.source_service == "docker" and d.target_service == "colima" for d in chain):
            return []
        checked: list[str] = []
        for detector in self._runtime.dependencies.detectors:
            if isinstance(detector, DockerColimaDetector):
                detector.validate_docker_colima_setup()
                checked.append(detector.name)
        return checked

    @traced
    def config(self, service_name: str) -> ServiceResult:
        """Management settings for a dependency target: detected, else default."""
        configs = self._runtime.dependency_configs
        source = "detected"
        try:
            config = configs.detect_service_configuration(service_name)
        except DependencyConfigError as exc:
            logger.debug("detection for %s failed: %s", service_name, exc)
            config = configs.get_config(service_name)
            source = "default"
            if config is None:
                return self._failure("config", exc, service=service_name)
        return ServiceResult(
            ok=True,
            op="config",
            data={"source": source, **config.model_dump(mode="json")},
        )
