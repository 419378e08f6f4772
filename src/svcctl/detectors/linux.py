"""Linux detector: systemd, then the process table."""

from __future__ import annotations

import logging

from svcctl.detectors.base import BaseServiceDetector, pgrep_pids
from svcctl.domain.errors import ExecutorError, ServiceDetectionError
from svcctl.domain.models import ServiceInfo
from svcctl.domain.types import ManagerType, Platform
from svcctl.strategies.systemd import parse_main_pid

logger = logging.getLogger(__name__)


class LinuxServiceDetector(BaseServiceDetector):
    platform = Platform.LINUX
    package_manager = "apt"

    def _systemctl(self, *args: str) -> str:
        """Trimmed stdout of ``systemctl ARGS``. Launch errors propagate."""
        return self._run(["systemctl", *args]).stdout.strip()

    def is_running(self, service_name: str) -> bool:
        try:
            if self._systemctl("is-active", service_name) == "active":
                return True
        except ExecutorError as exc:
            logger.debug("systemctl unavailable: %s", exc)
        try:
            return bool(pgrep_pids(self._executor, service_name, self._opts))
        except ExecutorError:
            return False

    def _inspect(self, service_name: str) -> ServiceInfo:
        info = ServiceInfo(name=service_name)
        try:
            state = self._systemctl("is-active", service_name)
        except ExecutorError as exc:
            logger.debug("systemctl unavailable, falling back to pgrep: %s", exc)
        else:
            info.running = state == "active"
            info.manager_type = ManagerType.SYSTEMD
            info.metadata["systemd_status"] = state
            try:
                info.metadata["systemd_enabled"] = self._systemctl("is-enabled", service_name)
                if info.running:
                    info.process_id = parse_main_pid(
                        self._systemctl("show", service_name, "--property=MainPID")
                    )
            except ExecutorError as exc:
                logger.debug("systemctl secondary query failed: %s", exc)
            return info

        try:
            pids = pgrep_pids(self._executor, service_name, self._opts)
        except ExecutorError as exc:
            raise ServiceDetectionError(
                service_name,
                self.platform,
                exc,
                "Service may not be installed or accessible. "
                "Try installing with your package manager.",
            ) from exc
        info.running = bool(pids)
        info.process_id = pids[0] if pids else ""
        return info

    def is_service_enabled(self, service_name: str) -> bool:
        try:
            return self._systemctl("is-enabled", service_name) == "enabled"
        except ExecutorError as exc:
            raise ServiceDetectionError(service_name, self.platform, exc) from exc

    # ------------------------------------------------------------------
    # Manager operations
    # ------------------------------------------------------------------

    def start(self, service_name: str) -> None:
        self._execute("start", service_name, ["systemctl", "start", service_name])

    def stop(self, service_name: str) -> None:
        self._execute("stop", service_name, ["systemctl", "stop", service_name])

    def restart(self, service_name: str) -> None:
        self._execute("restart", service_name, ["systemctl", "restart", service_name])

    def enable(self, service_name: str) -> None:
        self._execute("enable", service_name, ["systemctl", "enable", service_name])

    def disable(self, service_name: str) -> None:
        self._execute("disable", service_name, ["systemctl", "disable", service_name])
