"""Composite strategy trying the concrete variants in preference order."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, NoReturn

from svcctl.domain.errors import StrategyError, SvcctlError
from svcctl.domain.models import CustomCommands, ServiceHealthInfo, ServiceStatusInfo
from svcctl.domain.types import ManagementStrategy, Platform
from svcctl.infrastructure.host import current_platform
from svcctl.strategies.base import ServiceStrategy, pgrep
from svcctl.strategies.brew import BrewServicesStrategy
from svcctl.strategies.direct import DirectCommandStrategy
from svcctl.strategies.launchd import LaunchdStrategy
from svcctl.strategies.process import ProcessOnlyStrategy
from svcctl.strategies.systemd import SystemdStrategy
from svcctl.strategies.windows import WindowsServiceStrategy

if TYPE_CHECKING:
    from svcctl.infrastructure.executor import Executor

logger = logging.getLogger(__name__)

_INIT_SYSTEMS: dict[Platform, type[ServiceStrategy]] = {
    Platform.DARWIN: LaunchdStrategy,
    Platform.LINUX: SystemdStrategy,
    Platform.WINDOWS: WindowsServiceStrategy,
    Platform.GENERIC: LaunchdStrategy,
}

NO_HEALTHY_STRATEGY = "Auto-detection: No strategy found service as healthy"


class AutoStrategy(ServiceStrategy):
    """Try brew services, direct commands, then the host's init system.

    Mutations stop at the first variant that succeeds. When every variant
    fails, ``start`` and ``stop`` accept the outcome if the desired state
    already holds; ``restart`` does not.
    """

    name = ManagementStrategy.AUTO

    def __init__(
        self,
        executor: Executor,
        commands: CustomCommands | None = None,
        *,
        platform: Platform | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(executor, **kwargs)
        init_system = _INIT_SYSTEMS[platform or current_platform()]
        self._candidates: list[ServiceStrategy] = [
            BrewServicesStrategy(executor, **kwargs),
            DirectCommandStrategy(executor, commands, **kwargs),
            init_system(executor, **kwargs),
        ]
        self._process = ProcessOnlyStrategy(executor, **kwargs)

    @property
    def candidates(self) -> list[ServiceStrategy]:
        return list(self._candidates)

    def _start_commands(self, service_name: str) -> list[list[str]]:
        return []

    def _stop_commands(self, service_name: str) -> list[list[str]]:
        return []

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def _first_success(self, op: str, service_name: str) -> StrategyError | None:
        """Run *op* on each candidate; return None on success, else the last error."""
        last: StrategyError | None = None
        for strategy in self._candidates:
            action: Callable[[str], None] = getattr(strategy, op)
            try:
                action(service_name)
            except StrategyError as exc:
                logger.debug("%s %s via %s failed: %s", op, service_name, strategy.name, exc)
                last = exc
                continue
            logger.debug("%s %s via %s succeeded", op, service_name, strategy.name)
            return None
        return last

    def _give_up(self, op: str, service_name: str, last: StrategyError | None) -> NoReturn:
        raise StrategyError(
            f"failed to {op} service {service_name} with any strategy. Last error: {last}"
        ) from last

    def start(self, service_name: str) -> None:
        last = self._first_success("start", service_name)
        if last is None:
            return
        if self.is_running(service_name):
            return
        self._give_up("start", service_name, last)

    def stop(self, service_name: str) -> None:
        last = self._first_success("stop", service_name)
        if last is None:
            return
        if not self.is_running(service_name):
            return
        self._give_up("stop", service_name, last)

    def restart(self, service_name: str) -> None:
        last = self._first_success("restart", service_name)
        if last is not None:
            self._give_up("restart", service_name, last)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def is_running(self, service_name: str) -> bool:
        for strategy in self._candidates:
            try:
                return strategy.is_running(service_name)
            except SvcctlError as exc:
                logger.debug("is_running via %s failed: %s", strategy.name, exc)
        return bool(pgrep(self._executor, service_name, self._opts))

    def health_check(self, service_name: str) -> ServiceHealthInfo:
        for strategy in [*self._candidates, self._process]:
            info = strategy.health_check(service_name)
            if info.healthy:
                return ServiceHealthInfo(
                    healthy=True,
                    details=f"Auto-detected via {strategy.name}: {info.details}",
                    strategy=self.name,
                )
        return ServiceHealthInfo(healthy=False, details=NO_HEALTHY_STRATEGY, strategy=self.name)

    def status_check(self, service_name: str) -> ServiceStatusInfo:
        return ServiceStatusInfo(
            running=self.is_running(service_name),
            enabled=False,
            details="Auto-detected service status",
            strategy=self.name,
        )
