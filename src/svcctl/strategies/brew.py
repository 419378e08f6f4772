"""Homebrew's ``brew services`` registry."""

from __future__ import annotations

import json
import logging

from svcctl.domain.errors import ExecutorError, StrategyError
from svcctl.domain.models import ServiceHealthInfo, ServiceStatusInfo
from svcctl.domain.types import ManagementStrategy
from svcctl.strategies.base import ServiceStrategy

logger = logging.getLogger(__name__)


def parse_brew_services(stdout: str) -> dict[str, str]:
    """Map service name to status from ``brew services list --json`` output."""
    entries = json.loads(stdout or "[]")
    if not isinstance(entries, list):
        raise ValueError("expected a JSON array from brew services list")
    return {
        str(e["name"]): str(e.get("status") or "")
        for e in entries
        if isinstance(e, dict) and "name" in e
    }


class BrewServicesStrategy(ServiceStrategy):
    name = ManagementStrategy.BREW_SERVICES

    def _start_commands(self, service_name: str) -> list[list[str]]:
        return [["brew", "services", "start", service_name]]

    def _stop_commands(self, service_name: str) -> list[list[str]]:
        return [["brew", "services", "stop", service_name]]

    def _restart_commands(self, service_name: str) -> list[list[str]]:
        return [["brew", "services", "restart", service_name]]

    def _service_states(self) -> dict[str, str]:
        try:
            result = self._run(["brew", "services", "list", "--json"])
        except ExecutorError as exc:
            raise StrategyError(f"failed to check brew services status: {exc}") from exc
        if result.exit_code != 0:
            raise StrategyError(f"brew services list failed: {result.stderr.strip()}")
        try:
            return parse_brew_services(result.stdout)
        except (ValueError, KeyError) as exc:
            raise StrategyError(f"unreadable brew services output: {exc}") from exc

    def is_running(self, service_name: str) -> bool:
        return self._service_states().get(service_name) == "started"

    def health_check(self, service_name: str) -> ServiceHealthInfo:
        try:
            started = self.is_running(service_name)
        except StrategyError as exc:
            return ServiceHealthInfo(healthy=False, details=str(exc), strategy=self.name)
        details = (
            "Service is started via brew services"
            if started
            else "Service is not started via brew services"
        )
        return ServiceHealthInfo(healthy=started, details=details, strategy=self.name)

    def status_check(self, service_name: str) -> ServiceStatusInfo:
        running = self.is_running(service_name)
        # brew services registers a login item for every started service
        return ServiceStatusInfo(
            running=running,
            enabled=running,
            details="Brew services status",
            strategy=self.name,
        )
