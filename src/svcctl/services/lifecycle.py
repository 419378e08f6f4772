"""LifecycleService: start, stop, restart, status and health through strategies.

The effective strategy for a service is the explicit argument, else its
``[services.<name>]`` entry, else ``[lifecycle].default_strategy``, else the
built-in per-service default.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from svcctl.domain.errors import DependencyConfigError, HealthTimeoutError, SvcctlError
from svcctl.domain.models import DependencyConfig
from svcctl.domain.types import BLOCKING_DEPENDENCY_TYPES
from svcctl.services.base import BaseService
from svcctl.services.result import ServiceResult
from svcctl.services.telemetry import note, trace_step, traced
from svcctl.strategies.factory import validate_strategy

if TYPE_CHECKING:
    from collections.abc import Callable

    from svcctl.domain.models import DependencyHealthCheck
    from svcctl.strategies.base import ServiceStrategy
    from svcctl.strategies.factory import StrategyFactory

logger = logging.getLogger(__name__)

DEFAULT_WAIT_TIMEOUT = 120.0
DEFAULT_DEPENDENCY_TIMEOUT = 30.0
DEFAULT_DEPENDENCY_INTERVAL = 5.0


class LifecycleService(BaseService):
    """Drives one service through its lifecycle strategy."""

    def _resolve(
        self,
        service_name: str,
        strategy: str | None,
        factory: StrategyFactory | None = None,
    ) -> ServiceStrategy:
        """Build the effective strategy. Raises ValueError on an unknown name."""
        settings = self._runtime.settings
        section = settings.service(service_name)
        chosen = strategy or section.strategy or settings.lifecycle.default_strategy
        kind = validate_strategy(chosen) if chosen else None
        factory = factory or self._runtime.strategies
        return factory.strategy_for_service(
            service_name, kind, section.custom_commands()
        )

    def _apply(
        self,
        op: str,
        service_name: str,
        strategy: str | None,
        action: Callable[[ServiceStrategy], dict[str, Any]],
    ) -> ServiceResult:
        try:
            lifecycle = self._resolve(service_name, strategy)
        except ValueError as exc:
            return self._error(op, "INVALID_STRATEGY", str(exc), service=service_name)

        strategy_name = str(lifecycle.strategy_name)
        note("strategy", strategy_name)
        try:
            data = action(lifecycle)
        except SvcctlError as exc:
            return self._failure(op, exc, service=service_name, strategy=strategy_name)
        return ServiceResult(
            ok=True,
            op=op,
            data={"service": service_name, "strategy": strategy_name, **data},
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    @traced
    def start(
        self,
        service_name: str,
        *,
        strategy: str | None = None,
        with_dependencies: bool = False,
        wait: bool = False,
        wait_timeout: float = DEFAULT_WAIT_TIMEOUT,
    ) -> ServiceResult:
        """Start *service_name*.

        Args:
            strategy: Explicit strategy name, overriding configuration.
            with_dependencies: Start blocking dependency targets first and
                wait for their edge health checks.
            wait: Poll the strategy's health check until healthy.
            wait_timeout: Upper bound in seconds for ``wait``.
        """

        def action(lifecycle: ServiceStrategy) -> dict[str, Any]:
            started: list[str] = []
            if with_dependencies:
                with trace_step("dependencies"):
                    started = self._start_dependencies(service_name)
            lifecycle.start(service_name)
            if wait:
                checker = self._resolve(service_name, strategy, self._runtime.health_strategies)
                with trace_step("wait"):
                    self._wait_healthy(checker, service_name, wait_timeout)
            return {"dependencies_started": started, "waited": wait}

        return self._apply("start", service_name, strategy, action)

    @traced
    def stop(self, service_name: str, *, strategy: str | None = None) -> ServiceResult:
        def action(lifecycle: ServiceStrategy) -> dict[str, Any]:
            lifecycle.stop(service_name)
            return {}

        return self._apply("stop", service_name, strategy, action)

    @traced
    def restart(self, service_name: str, *, strategy: str | None = None) -> ServiceResult:
        def action(lifecycle: ServiceStrategy) -> dict[str, Any]:
            lifecycle.restart(service_name)
            return {}

        return self._apply("restart", service_name, strategy, action)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @traced
    def status(self, service_name: str, *, strategy: str | None = None) -> ServiceResult:
        def action(lifecycle: ServiceStrategy) -> dict[str, Any]:
            return lifecycle.status_check(service_name).model_dump(mode="json")

        return self._apply("status", service_name, strategy, action)

    @traced
    def health(self, service_name: str, *, strategy: str | None = None) -> ServiceResult:
        def action(lifecycle: ServiceStrategy) -> dict[str, Any]:
            return lifecycle.health_check(service_name).model_dump(mode="json")

        return self._apply("health", service_name, strategy, action)

    # ------------------------------------------------------------------
    # Waiting and dependencies
    # ------------------------------------------------------------------

    def _poll(self, ready: Callable[[], bool], *, timeout: float, interval: float) -> bool:
        """Call *ready* until it returns True or *timeout* seconds pass."""
        clock, sleep = self._runtime.clock, self._runtime.sleep
        deadline = clock() + timeout
        while True:
            if ready():
                return True
            if clock() >= deadline:
                return False
            sleep(interval)

    def _wait_healthy(self, lifecycle: ServiceStrategy, service_name: str, timeout: float) -> None:
        interval = self._runtime.settings.lifecycle.wait_interval

        def ready() -> bool:
            info = lifecycle.health_check(service_name)
            logger.debug("waiting for %s: %s", service_name, info.details)
            return info.healthy

        if not self._poll(ready, timeout=timeout, interval=interval):
            raise HealthTimeoutError(f"timeout waiting for service {service_name} to be healthy")

    def _start_dependencies(self, service_name: str) -> list[str]:
        """Start stopped blocking dependency targets; return those started."""
        started: list[str] = []
        for dep in self._runtime.dependencies.detect_dependencies(service_name):
            target = dep.target_service
            if dep.dependency_type not in BLOCKING_DEPENDENCY_TYPES or not target:
                continue
            if target == service_name:
                continue
            with trace_step(target) as step:
                if not self._runtime.detector.is_running(target):
                    logger.info("starting dependency %s of %s", target, service_name)
                    self._dependency_strategy(target).start(target)
                    started.append(target)
                if step is not None:
                    step.note("started", target in started)
                if dep.health_check is not None:
                    self._wait_dependency(target, dep.health_check)
        return started

    def _dependency_strategy(self, target: str) -> ServiceStrategy:
        """Strategy for a dependency: detected config, else default, else auto."""
        configs = self._runtime.dependency_configs
        try:
            config = configs.detect_service_configuration(target)
        except DependencyConfigError as exc:
            logger.debug("no detected configuration for %s: %s", target, exc)
            config = configs.get_config(target) or DependencyConfig(service_name=target)
        return self._runtime.strategies.create_lifecycle_strategy(
            config.strategy, config.custom_commands, target
        )

    def _wait_dependency(self, target: str, check: DependencyHealthCheck) -> None:
        health = self._runtime.health

        def ready() -> bool:
            result = health.check_dependency(check)
            logger.debug("dependency %s health: %s", target, result.error or "ok")
            return result.healthy

        ok = self._poll(
            ready,
            timeout=check.timeout or DEFAULT_DEPENDENCY_TIMEOUT,
            interval=check.interval or DEFAULT_DEPENDENCY_INTERVAL,
        )
        if not ok:
            raise HealthTimeoutError(
                f"timeout waiting for dependency {target} to be healthy"
            )
