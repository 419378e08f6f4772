"""Linux systemd via ``systemctl``."""

from __future__ import annotations

from svcctl.domain.errors import ExecutorError, StrategyError
from svcctl.domain.models import ServiceHealthInfo, ServiceStatusInfo
from svcctl.domain.types import ManagementStrategy
from svcctl.strategies.base import ServiceStrategy


def parse_main_pid(stdout: str) -> str:
    """``MainPID=1234`` -> ``"1234"``; ``MainPID=0`` or garbage -> ``""``."""
    _, _, value = stdout.strip().partition("=")
    value = value.strip()
    return value if value.isdigit() and value != "0" else ""


class SystemdStrategy(ServiceStrategy):
    name = ManagementStrategy.SYSTEMD

    def _start_commands(self, service_name: str) -> list[list[str]]:
        return [["systemctl", "start", service_name]]

    def _stop_commands(self, service_name: str) -> list[list[str]]:
        return [["systemctl", "stop", service_name]]

    def _restart_commands(self, service_name: str) -> list[list[str]]:
        return [["systemctl", "restart", service_name]]

    def _query(self, *args: str) -> str:
        try:
            result = self._run(["systemctl", *args])
        except ExecutorError as exc:
            raise StrategyError(f"failed to query systemd: {exc}") from exc
        # is-active / is-enabled exit nonzero for inactive units; stdout is the answer
        return result.stdout.strip()

    def active_state(self, service_name: str) -> str:
        return self._query("is-active", service_name)

    def main_pid(self, service_name: str) -> str:
        return parse_main_pid(self._query("show", service_name, "--property=MainPID"))

    def is_enabled(self, service_name: str) -> bool:
        return self._query("is-enabled", service_name) == "enabled"

    def is_running(self, service_name: str) -> bool:
        return self.active_state(service_name) == "active"

    def health_check(self, service_name: str) -> ServiceHealthInfo:
        try:
            state = self.active_state(service_name)
        except StrategyError as exc:
            return ServiceHealthInfo(healthy=False, details=str(exc), strategy=self.name)
        if state == "active":
            return ServiceHealthInfo(
                healthy=True, details="Service is active in systemd", strategy=self.name
            )
        return ServiceHealthInfo(
            healthy=False,
            details=f"Service state in systemd: {state or 'unknown'}",
            strategy=self.name,
        )

    def status_check(self, service_name: str) -> ServiceStatusInfo:
        running = self.is_running(service_name)
        return ServiceStatusInfo(
            running=running,
            enabled=self.is_enabled(service_name),
            process_id=self.main_pid(service_name) if running else "",
            details="Systemd service status",
            strategy=self.name,
        )
