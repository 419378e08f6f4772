"""Windows detector: Service Control Manager via PowerShell, then Get-Process."""

from __future__ import annotations

import logging

from svcctl.detectors.base import BaseServiceDetector
from svcctl.domain.errors import ExecutorError, ServiceDetectionError
from svcctl.domain.models import ServiceInfo
from svcctl.domain.types import ManagerType, Platform
from svcctl.strategies.windows import parse_service_json, powershell, ps_quote

logger = logging.getLogger(__name__)


class WindowsServiceDetector(BaseServiceDetector):
    platform = Platform.WINDOWS
    package_manager = "winget"

    def _service_state(self, service_name: str) -> tuple[str, str] | None:
        """(status, start_type) from Get-Service, or None if not a service."""
        script = (
            f"Get-Service -Name {ps_quote(service_name)} -ErrorAction SilentlyContinue | "
            "Select-Object Status, StartType | ConvertTo-Json"
        )
        result = self._run(powershell(script))
        if result.exit_code != 0 or not result.stdout.strip():
            return None
        try:
            return parse_service_json(result.stdout)
        except ValueError as exc:
            logger.debug("unreadable Get-Service output: %s", exc)
            return None

    def _process_count(self, service_name: str) -> int:
        script = (
            f"Get-Process -Name {ps_quote(service_name)} -ErrorAction SilentlyContinue | "
            "Measure-Object | Select-Object -ExpandProperty Count"
        )
        out = self._run(powershell(script)).stdout.strip()
        return int(out) if out.isdigit() else 0

    def is_running(self, service_name: str) -> bool:
        try:
            state = self._service_state(service_name)
        except ExecutorError as exc:
            logger.debug("Get-Service failed: %s", exc)
            state = None
        if state is not None:
            return state[0] == "Running"
        try:
            return self._process_count(service_name) > 0
        except ExecutorError:
            return False

    def _inspect(self, service_name: str) -> ServiceInfo:
        info = ServiceInfo(name=service_name, manager_type=ManagerType.WINDOWS)
        try:
            state = self._service_state(service_name)
        except ExecutorError as exc:
            logger.debug("Get-Service failed: %s", exc)
            state = None
        if state is not None:
            status, start_type = state
            info.running = status == "Running"
            info.metadata["windows_status"] = status
            info.metadata["windows_start_type"] = start_type
            return info

        try:
            count = self._process_count(service_name)
        except ExecutorError as exc:
            raise ServiceDetectionError(
                service_name,
                self.platform,
                exc,
                "Service may not be installed or accessible. "
                "Try installing with winget or chocolatey.",
            ) from exc
        info.running = count > 0
        info.manager_type = ManagerType.PROCESS
        return info

    def is_service_enabled(self, service_name: str) -> bool:
        try:
            state = self._service_state(service_name)
        except ExecutorError as exc:
            raise ServiceDetectionError(service_name, self.platform, exc) from exc
        return state is not None and state[1] == "Automatic"

    # ------------------------------------------------------------------
    # Manager operations
    # ------------------------------------------------------------------

    def _cmdlet(self, op: str, service_name: str, script: str) -> None:
        self._execute(op, service_name, powershell(script))

    def start(self, service_name: str) -> None:
        self._cmdlet("start", service_name, f"Start-Service -Name {ps_quote(service_name)}")

    def stop(self, service_name: str) -> None:
        self._cmdlet("stop", service_name, f"Stop-Service -Name {ps_quote(service_name)}")

    def restart(self, service_name: str) -> None:
        self._cmdlet("restart", service_name, f"Restart-Service -Name {ps_quote(service_name)}")

    def enable(self, service_name: str) -> None:
        self._cmdlet(
            "enable",
            service_name,
            f"Set-Service -Name {ps_quote(service_name)} -StartupType Automatic",
        )

    def disable(self, service_name: str) -> None:
        self._cmdlet(
            "disable",
            service_name,
            f"Set-Service -Name {ps_quote(service_name)} -StartupType Disabled",
        )
