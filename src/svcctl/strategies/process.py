"""Observe-only strategy: a service counts as running if its process exists."""

from __future__ import annotations

from svcctl.domain.errors import CapabilityAbsentError
from svcctl.domain.models import ServiceHealthInfo, ServiceStatusInfo
from svcctl.domain.types import ManagementStrategy
from svcctl.strategies.base import ServiceStrategy, pgrep


class ProcessOnlyStrategy(ServiceStrategy):
    name = ManagementStrategy.PROCESS_ONLY

    def _refuse(self, op: str, service_name: str) -> CapabilityAbsentError:
        return CapabilityAbsentError(
            f"process-only strategy cannot {op} service {service_name} - use a different strategy"
        )

    def start(self, service_name: str) -> None:
        raise self._refuse("start", service_name)

    def stop(self, service_name: str) -> None:
        raise self._refuse("stop", service_name)

    def restart(self, service_name: str) -> None:
        raise self._refuse("restart", service_name)

    def _start_commands(self, service_name: str) -> list[list[str]]:
        return []

    def _stop_commands(self, service_name: str) -> list[list[str]]:
        return []

    def is_running(self, service_name: str) -> bool:
        return bool(pgrep(self._executor, service_name, self._opts))

    def health_check(self, service_name: str) -> ServiceHealthInfo:
        pids = pgrep(self._executor, service_name, self._opts)
        if not pids:
            return ServiceHealthInfo(
                healthy=False, details="No matching process found", strategy=self.name
            )
        return ServiceHealthInfo(
            healthy=True,
            details=f"Process found (PIDs: {' '.join(pids)})",
            strategy=self.name,
        )

    def status_check(self, service_name: str) -> ServiceStatusInfo:
        pids = pgrep(self._executor, service_name, self._opts)
        return ServiceStatusInfo(
            running=bool(pids),
            enabled=False,
            process_id=pids[0] if pids else "",
            details="Process-only service status",
            strategy=self.name,
        )
