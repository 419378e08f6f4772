"""Windows Service Control Manager via PowerShell cmdlets."""

from __future__ import annotations

import json
from typing import Any

from svcctl.domain.errors import ExecutorError, StrategyError
from svcctl.domain.models import ServiceHealthInfo, ServiceStatusInfo
from svcctl.domain.types import ManagementStrategy
from svcctl.strategies.base import ServiceStrategy

# ServiceControllerStatus and ServiceStartMode enum values as serialised by
# ConvertTo-Json on Windows PowerShell 5.
_STATUS_NAMES = {
    1: "Stopped",
    2: "StartPending",
    3: "StopPending",
    4: "Running",
    5: "ContinuePending",
    6: "PausePending",
    7: "Paused",
}
_START_TYPE_NAMES = {0: "Boot", 1: "System", 2: "Automatic", 3: "Manual", 4: "Disabled"}


def powershell(script: str) -> list[str]:
    return ["powershell", "-NoProfile", "-NonInteractive", "-Command", script]


def ps_quote(name: str) -> str:
    return "'" + name.replace("'", "''") + "'"


def _enum_name(value: Any, names: dict[int, str]) -> str:
    if isinstance(value, int):
        return names.get(value, str(value))
    return str(value or "")


def parse_service_json(stdout: str) -> tuple[str, str]:
    """Return (status, start_type) names from ``Get-Service | ConvertTo-Json``.

    Numeric and string enum encodings are both understood.
    """
    data = json.loads(stdout)
    if isinstance(data, list):
        data = data[0] if data else {}
    if not isinstance(data, dict):
        raise ValueError("expected a JSON object from Get-Service")
    return (
        _enum_name(data.get("Status"), _STATUS_NAMES),
        _enum_name(data.get("StartType"), _START_TYPE_NAMES),
    )


class WindowsServiceStrategy(ServiceStrategy):
    name = ManagementStrategy.WINDOWS_SERVICE

    def _start_commands(self, service_name: str) -> list[list[str]]:
        return [powershell(f"Start-Service -Name {ps_quote(service_name)}")]

    def _stop_commands(self, service_name: str) -> list[list[str]]:
        return [powershell(f"Stop-Service -Name {ps_quote(service_name)}")]

    def _restart_commands(self, service_name: str) -> list[list[str]]:
        return [powershell(f"Restart-Service -Name {ps_quote(service_name)}")]

    def service_state(self, service_name: str) -> tuple[str, str] | None:
        """(status, start_type), or None when the service does not exist."""
        script = (
            f"Get-Service -Name {ps_quote(service_name)} | "
            "Select-Object Status, StartType | ConvertTo-Json"
        )
        try:
            result = self._run(powershell(script))
        except ExecutorError as exc:
            raise StrategyError(f"failed to query Windows service {service_name}: {exc}") from exc
        if result.exit_code != 0 or not result.stdout.strip():
            return None
        try:
            return parse_service_json(result.stdout)
        except ValueError as exc:
            raise StrategyError(f"unreadable Get-Service output: {exc}") from exc

    def is_running(self, service_name: str) -> bool:
        state = self.service_state(service_name)
        return state is not None and state[0] == "Running"

    def health_check(self, service_name: str) -> ServiceHealthInfo:
        try:
            state = self.service_state(service_name)
        except StrategyError as exc:
            return ServiceHealthInfo(healthy=False, details=str(exc), strategy=self.name)
        if state is None:
            return ServiceHealthInfo(
                healthy=False, details="Service not found", strategy=self.name
            )
        return ServiceHealthInfo(
            healthy=state[0] == "Running",
            details=f"Service status: {state[0]}",
            strategy=self.name,
        )

    def status_check(self, service_name: str) -> ServiceStatusInfo:
        state = self.service_state(service_name)
        status, start_type = state if state is not None else ("", "")
        return ServiceStatusInfo(
            running=status == "Running",
            enabled=start_type == "Automatic",
            details=f"Windows service status: {status or 'not found'}",
            strategy=self.name,
        )
