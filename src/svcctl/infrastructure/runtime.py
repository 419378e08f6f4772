"""Runtime: the single dependency injected into every service.

Owns the command executor, the package/service mapping, the health checker
and the strategy factory, and lazily assembles the platform detector and the
dependency layer (built-in plus plugin detectors). Everything is wired from
one ``SvcSettings``; tests swap in a fake executor and a fixed platform.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import TYPE_CHECKING

from svcctl.dependencies.config import DependencyConfigManager
from svcctl.dependencies.manager import DependencyManager
from svcctl.detectors import new_service_detector
from svcctl.infrastructure.executor import ExecOpts, SystemExecutor
from svcctl.infrastructure.health import HealthChecker
from svcctl.infrastructure.host import current_platform
from svcctl.infrastructure.mapping import default_mapping
from svcctl.services.telemetry import TracingExecutor
from svcctl.strategies.factory import StrategyFactory

if TYPE_CHECKING:
    from collections.abc import Callable

    import httpx

    from svcctl.config.settings import SvcSettings
    from svcctl.detectors.base import BaseServiceDetector
    from svcctl.domain.types import Platform
    from svcctl.infrastructure.executor import Executor
    from svcctl.infrastructure.mapping import PackageServiceMapping
    from svcctl.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


class Runtime:
    """Host-facing collaborators built from settings.

    Parameters:
        settings: Resolved settings.
        executor: Command port; defaults to a ``SystemExecutor``.
        platform: Host platform; defaults to the running interpreter's.
        transport: httpx transport for HTTP health checks.
        sleep: Pause function for restarts and health waits.
        clock: Monotonic clock used to bound health waits.
        load_plugins: Discover entry-point plugins when building the
            dependency layer.
    """

    def __init__(
        self,
        settings: SvcSettings,
        *,
        executor: Executor | None = None,
        platform: Platform | None = None,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
        load_plugins: bool = True,
    ) -> None:
        self._settings = settings
        self._platform = platform or current_platform()
        self._opts = ExecOpts(
            timeout=settings.executor.default_timeout,
            use_sudo=settings.executor.use_sudo,
        )
        self._executor = TracingExecutor(
            executor or SystemExecutor(default_timeout=settings.executor.default_timeout)
        )
        self._mapping = default_mapping()
        self._apply_service_overrides(self._mapping)
        self._health = HealthChecker(
            self._executor,
            transport=transport,
            max_workers=settings.health.max_workers,
        )
        self._strategies = StrategyFactory(
            self._executor,
            platform=self._platform,
            restart_pause=settings.lifecycle.restart_pause,
            opts=self._opts,
            sleep=sleep,
        )
        self._health_strategies = StrategyFactory(
            self._executor,
            platform=self._platform,
            restart_pause=settings.lifecycle.restart_pause,
            opts=ExecOpts(
                timeout=settings.health.timeout,
                use_sudo=settings.executor.use_sudo,
            ),
            sleep=sleep,
        )
        self._sleep = sleep
        self._clock = clock
        self._load_plugins = load_plugins and settings.plugins.enabled
        self._detector: BaseServiceDetector | None = None
        self._dependencies: DependencyManager | None = None
        self._dependency_configs: DependencyConfigManager | None = None
        self._plugins: PluginManager | None = None

    def _apply_service_overrides(self, mapping: PackageServiceMapping) -> None:
        for name, section in self._settings.services.items():
            if section.package:
                current = mapping.get_services_for_package(section.package)
                if name not in current:
                    mapping.add_mapping(section.package, [*current, name])
            if section.health is not None:
                mapping.set_default_health_check(name, section.health)

    # ------------------------------------------------------------------
    # Collaborators
    # ------------------------------------------------------------------

    @property
    def settings(self) -> SvcSettings:
        return self._settings

    @property
    def platform(self) -> Platform:
        return self._platform

    @property
    def executor(self) -> Executor:
        return self._executor

    @property
    def mapping(self) -> PackageServiceMapping:
        return self._mapping

    @property
    def health(self) -> HealthChecker:
        return self._health

    @property
    def strategies(self) -> StrategyFactory:
        return self._strategies

    @property
    def health_strategies(self) -> StrategyFactory:
        """Strategies whose commands are bounded by ``[health].timeout``."""
        return self._health_strategies

    @property
    def sleep(self) -> Callable[[float], None]:
        return self._sleep

    @property
    def clock(self) -> Callable[[], float]:
        return self._clock

    @property
    def detector(self) -> BaseServiceDetector:
        """Platform detector (created lazily on first access)."""
        if self._detector is None:
            self._detector = new_service_detector(
                self._executor,
                self._mapping,
                self._health,
                platform=self._platform,
                opts=self._opts,
            )
        return self._detector

    @property
    def plugins(self) -> PluginManager:
        """Plugin manager: the built-in container plugin plus discovered ones."""
        if self._plugins is None:
            from svcctl.plugins.builtins.container_runtimes import ContainerRuntimePlugin
            from svcctl.plugins.manager import PluginManager

            pm = PluginManager()
            if self._load_plugins:
                local_dir = self._settings.plugins.local_dir
                pm.discover_and_load(local_dir=Path(local_dir).expanduser() if local_dir else None)
            pm.register_plugin(ContainerRuntimePlugin(), name="container-runtimes-builtin")
            self._plugins = pm
        return self._plugins

    @property
    def dependencies(self) -> DependencyManager:
        """Dependency manager seeded with every plugin-contributed detector."""
        if self._dependencies is None:
            self._dependencies = DependencyManager(self.plugins.collect_detectors(self._executor))
            logger.debug(
                "dependency detectors: %s",
                ", ".join(d.name for d in self._dependencies.detectors) or "none",
            )
        return self._dependencies

    @property
    def dependency_configs(self) -> DependencyConfigManager:
        if self._dependency_configs is None:
            manager = DependencyConfigManager(self._executor, opts=self._opts)
            for config in self.plugins.collect_dependency_configs():
                manager.register_config(config)
            self._dependency_configs = manager
        return self._dependency_configs
