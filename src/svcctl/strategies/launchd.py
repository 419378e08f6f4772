"""macOS launchd via ``launchctl``."""

from __future__ import annotations

import os
import re

from svcctl.domain.errors import ExecutorError, StrategyError
from svcctl.domain.models import ServiceHealthInfo, ServiceStatusInfo
from svcctl.domain.types import ManagementStrategy
from svcctl.strategies.base import ServiceStrategy

SYSTEM_DAEMONS_DIR = "/Library/LaunchDaemons"
USER_AGENTS_DIR = "~/Library/LaunchAgents"

_PLIST_PID = re.compile(r'"PID"\s*=\s*(\d+)\s*;')


def parse_launchctl_pid(stdout: str, label: str) -> str:
    """Extract the PID from ``launchctl list`` output, or "" if not running.

    Understands both the dictionary form printed for a single label and the
    tabular ``PID<TAB>Status<TAB>Label`` form.
    """
    match = _PLIST_PID.search(stdout)
    if match:
        return match.group(1)
    for line in stdout.splitlines():
        fields = line.split()
        if len(fields) >= 3 and fields[-1] == label:
            return fields[0] if fields[0].isdigit() else ""
    return ""


def plist_paths(service_name: str) -> list[str]:
    """System daemon plist first, then the per-user agent plist."""
    return [
        f"{SYSTEM_DAEMONS_DIR}/{service_name}.plist",
        os.path.expanduser(f"{USER_AGENTS_DIR}/{service_name}.plist"),
    ]


class LaunchdStrategy(ServiceStrategy):
    """Loads and unloads jobs with ``launchctl load -w`` / ``unload -w``.

    No native restart: restart is stop, pause, start.
    """

    name = ManagementStrategy.LAUNCHD

    def _start_commands(self, service_name: str) -> list[list[str]]:
        return [["launchctl", "load", "-w", p] for p in plist_paths(service_name)]

    def _stop_commands(self, service_name: str) -> list[list[str]]:
        return [["launchctl", "unload", "-w", p] for p in plist_paths(service_name)]

    def _list(self, service_name: str) -> tuple[bool, str]:
        """Return (loaded, pid) for the job labelled *service_name*."""
        try:
            result = self._run(["launchctl", "list", service_name])
        except ExecutorError as exc:
            raise StrategyError(f"failed to check launchd service {service_name}: {exc}") from exc
        if result.exit_code != 0:
            return False, ""
        return True, parse_launchctl_pid(result.stdout, service_name)

    def is_running(self, service_name: str) -> bool:
        _, pid = self._list(service_name)
        return bool(pid)

    def health_check(self, service_name: str) -> ServiceHealthInfo:
        try:
            loaded, pid = self._list(service_name)
        except StrategyError as exc:
            return ServiceHealthInfo(
                healthy=False, details=f"Failed to run launchctl list: {exc}", strategy=self.name
            )
        if not loaded:
            details = "Service not found in launchd"
        elif pid:
            details = "Service is loaded and running in launchd"
        else:
            details = "Service is loaded but not running in launchd"
        return ServiceHealthInfo(healthy=bool(pid), details=details, strategy=self.name)

    def status_check(self, service_name: str) -> ServiceStatusInfo:
        loaded, pid = self._list(service_name)
        return ServiceStatusInfo(
            running=bool(pid),
            enabled=loaded,
            process_id=pid,
            details="Launchd service status",
            strategy=self.name,
        )
