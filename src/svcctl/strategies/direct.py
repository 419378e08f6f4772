"""Caller-supplied command lines (``colima start``, ``podman machine stop`` ...)."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from svcctl.domain.errors import ExecutorError, StrategyError
from svcctl.domain.models import CustomCommands, ServiceHealthInfo, ServiceStatusInfo
from svcctl.domain.patterns import describe_status_output
from svcctl.domain.types import ManagementStrategy
from svcctl.strategies.base import ServiceStrategy, pgrep

if TYPE_CHECKING:
    from svcctl.infrastructure.executor import Executor

logger = logging.getLogger(__name__)

PROCESS_HEALTH_DETAILS = "Process-based health check (no status command configured)"


class DirectCommandStrategy(ServiceStrategy):
    """Runs explicit start/stop/restart/status commands.

    Without a status command, running state falls back to ``pgrep -f``.
    Without a restart command, restart is stop, pause, start.
    """

    name = ManagementStrategy.DIRECT_COMMAND

    def __init__(
        self,
        executor: Executor,
        commands: CustomCommands | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(executor, **kwargs)
        self._commands = commands or CustomCommands()

    @property
    def commands(self) -> CustomCommands:
        return self._commands

    def _start_commands(self, service_name: str) -> list[list[str]]:
        return [self._commands.start] if self._commands.start else []

    def _stop_commands(self, service_name: str) -> list[list[str]]:
        return [self._commands.stop] if self._commands.stop else []

    def _restart_commands(self, service_name: str) -> list[list[str]]:
        return [self._commands.restart] if self._commands.restart else []

    def is_running(self, service_name: str) -> bool:
        if not self._commands.is_configured("status"):
            return bool(pgrep(self._executor, service_name, self._opts))
        try:
            result = self._run(self._commands.status)
        except ExecutorError as exc:
            raise StrategyError(
                f"failed to check service {service_name} status with direct command: {exc}"
            ) from exc
        return result.exit_code == 0

    def health_check(self, service_name: str) -> ServiceHealthInfo:
        if not self._commands.is_configured("status"):
            running = bool(pgrep(self._executor, service_name, self._opts))
            return ServiceHealthInfo(
                healthy=running, details=PROCESS_HEALTH_DETAILS, strategy=self.name
            )

        try:
            result = self._run(self._commands.status)
        except ExecutorError as exc:
            return ServiceHealthInfo(
                healthy=False, details=f"Status command failed: {exc}", strategy=self.name
            )

        healthy = result.exit_code == 0
        details = f"Status command exit code: {result.exit_code}"
        if healthy:
            details += describe_status_output(service_name, result.stdout)
        else:
            details += f", stderr: {result.stderr.strip()}"
        return ServiceHealthInfo(healthy=healthy, details=details, strategy=self.name)

    def status_check(self, service_name: str) -> ServiceStatusInfo:
        return ServiceStatusInfo(
            running=self.is_running(service_name),
            enabled=False,
            details="Direct command service status",
            strategy=self.name,
        )
