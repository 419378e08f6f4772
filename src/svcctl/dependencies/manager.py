"""Dependency detection, caching and chain resolution.

Detectors contribute ``ServiceDependency`` edges for a service. The manager
fans a query out to every detector, caches the combined result per service
and expands chains recursively with cycle detection.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from svcctl.dependencies.graph import build_dependency_graph, startup_order
from svcctl.domain.errors import CircularDependencyError, DependencyConfigError
from svcctl.domain.types import DependencyType
from svcctl.infrastructure.cache import LockedStore

if TYPE_CHECKING:
    import networkx as nx

    from svcctl.domain.models import ServiceDependency

logger = logging.getLogger(__name__)


@runtime_checkable
class DependencyDetector(Protocol):
    """Source of dependency edges for services it recognises."""

    @property
    def name(self) -> str: ...

    def detect_dependencies(self, service_name: str) -> list[ServiceDependency]: ...


class DependencyManager:
    """Registry of detectors plus a snapshot cache of their answers.

    The cache is never invalidated on its own; every ``detect_dependencies``
    call overwrites the entry for that service.
    """

    def __init__(self, detectors: list[DependencyDetector] | None = None) -> None:
        self._detectors: list[DependencyDetector] = list(detectors or [])
        self._cache: LockedStore[str, list[ServiceDependency]] = LockedStore()

    @property
    def detectors(self) -> list[DependencyDetector]:
        return list(self._detectors)

    def register_detector(self, detector: DependencyDetector) -> None:
        self._detectors.append(detector)

    # ------------------------------------------------------------------
    # Detection
    # ------------------------------------------------------------------

    def detect_dependencies(self, service_name: str) -> list[ServiceDependency]:
        """Query every detector for *service_name*; failing detectors are skipped."""
        found: list[ServiceDependency] = []
        for detector in self._detectors:
            try:
                found.extend(detector.detect_dependencies(service_name))
            except Exception as exc:
                logger.warning(
                    "dependency detector %s failed for %s: %s", detector.name, service_name, exc
                )
        self._cache.set(service_name, list(found))
        return found

    def get_dependencies(self, service_name: str) -> list[ServiceDependency]:
        """Edges cached by the last detection for *service_name*."""
        return list(self._cache.get(service_name) or [])

    # ------------------------------------------------------------------
    # Chains
    # ------------------------------------------------------------------

    def get_dependency_chain(self, service_name: str) -> list[ServiceDependency]:
        """All edges reachable from *service_name*, depth first.

        Raises ``CircularDependencyError`` when a service reappears on its
        own path. Self-edges are kept but not followed.
        """
        chain: list[ServiceDependency] = []
        self._expand(service_name, chain, set())
        return chain

    def _expand(
        self, service_name: str, chain: list[ServiceDependency], visiting: set[str]
    ) -> None:
        if service_name in visiting:
            raise CircularDependencyError(service_name)
        visiting.add(service_name)
        try:
            for dep in self.detect_dependencies(service_name):
                chain.append(dep)
                if dep.target_service and dep.target_service != service_name:
                    self._expand(dep.target_service, chain, visiting)
        finally:
            visiting.discard(service_name)

    def validate_dependency_chain(self, service_name: str) -> list[ServiceDependency]:
        """Return the chain, raising ``DependencyConfigError`` if a required edge has no target."""
        chain = self.get_dependency_chain(service_name)
        for dep in chain:
            if dep.dependency_type is DependencyType.REQUIRED and not dep.target_service:
                raise DependencyConfigError(
                    f"required dependency {dep.source_service} has no target service"
                )
        return chain

    def dependency_graph(self, service_name: str) -> nx.DiGraph:
        return build_dependency_graph(service_name, self.get_dependency_chain(service_name))

    def get_startup_order(self, service_name: str) -> list[str]:
        """Services that must start before *service_name*, prerequisites first."""
        return startup_order(self.dependency_graph(service_name), service_name)
