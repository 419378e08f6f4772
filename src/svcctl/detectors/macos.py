"""macOS detector: brew services, then launchd, then the process table."""

from __future__ import annotations

import json
import logging
from typing import Any

from svcctl.detectors.base import BaseServiceDetector, pgrep_pids
from svcctl.domain.errors import ExecutorError, ServiceDetectionError, StrategyError
from svcctl.domain.models import ServiceInfo
from svcctl.domain.types import ManagerType, Platform
from svcctl.infrastructure.cache import LockedStore
from svcctl.strategies.launchd import parse_launchctl_pid, plist_paths

logger = logging.getLogger(__name__)

# Jobs registered under a vendor label rather than the service name.
_SPECIAL_LABELS: dict[str, list[str]] = {
    "postgres": ["org.postgresql.postgres"],
    "postgresql": ["org.postgresql.postgres"],
    "docker": ["com.docker.docker"],
    "docker-desktop": ["com.docker.docker"],
}


def launchd_labels(service_name: str) -> list[str]:
    return [
        service_name,
        f"homebrew.mxcl.{service_name}",
        *_SPECIAL_LABELS.get(service_name, []),
    ]


class MacOSServiceDetector(BaseServiceDetector):
    platform = Platform.DARWIN
    package_manager = "brew"

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._versions: LockedStore[str, str] = LockedStore()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def _brew_entry(self, service_name: str) -> dict[str, Any] | None:
        """The ``brew services list --json`` entry for *service_name*, if any."""
        try:
            result = self._run(["brew", "services", "list", "--json"])
        except ExecutorError as exc:
            logger.debug("brew unavailable: %s", exc)
            return None
        if result.exit_code != 0:
            return None
        try:
            entries = json.loads(result.stdout or "[]")
        except ValueError as exc:
            logger.debug("unreadable brew services output: %s", exc)
            return None
        for entry in entries if isinstance(entries, list) else []:
            if isinstance(entry, dict) and entry.get("name") == service_name:
                return entry
        return None

    def _launchd_job(self, service_name: str) -> tuple[str, str] | None:
        """(label, pid) of the first launchd job matching *service_name*."""
        for label in launchd_labels(service_name):
            try:
                result = self._run(["launchctl", "list", label])
            except ExecutorError as exc:
                logger.debug("launchctl unavailable: %s", exc)
                return None
            if result.exit_code == 0:
                return label, parse_launchctl_pid(result.stdout, label)
        return None

    def is_running(self, service_name: str) -> bool:
        entry = self._brew_entry(service_name)
        if entry is not None:
            return entry.get("status") == "started"
        job = self._launchd_job(service_name)
        if job is not None:
            return bool(job[1])
        try:
            return bool(pgrep_pids(self._executor, service_name, self._opts))
        except ExecutorError:
            return False

    def _inspect(self, service_name: str) -> ServiceInfo:
        info = ServiceInfo(name=service_name)

        entry = self._brew_entry(service_name)
        if entry is not None:
            status = str(entry.get("status") or "")
            info.running = status == "started"
            info.manager_type = ManagerType.BREW
            info.process_id = str(entry.get("pid") or "")
            info.metadata["brew_status"] = status
            info.metadata["brew_user"] = str(entry.get("user") or "")
            if entry.get("exit_code") is not None:
                info.metadata["exit_code"] = str(entry["exit_code"])
            return info

        job = self._launchd_job(service_name)
        if job is not None:
            label, pid = job
            info.running = bool(pid)
            info.manager_type = ManagerType.LAUNCHD
            info.process_id = pid
            info.metadata["launchd_label"] = label
            return info

        try:
            pids = pgrep_pids(self._executor, service_name, self._opts)
        except ExecutorError as exc:
            raise ServiceDetectionError(
                service_name,
                self.platform,
                exc,
                "Service may not be installed or accessible. "
                "Try installing with brew or check service name.",
            ) from exc
        info.running = bool(pids)
        info.process_id = pids[0] if pids else ""
        return info

    def _package_version(self, package_name: str) -> str:
        cached = self._versions.get(package_name)
        if cached is not None:
            return cached
        try:
            result = self._run(["brew", "list", "--versions", package_name])
        except ExecutorError as exc:
            logger.debug("brew list --versions failed: %s", exc)
            return ""
        fields = result.stdout.split()
        if result.exit_code != 0 or len(fields) < 2:
            return ""
        # "postgresql@16 16.2 16.1" lists newest first
        self._versions.set(package_name, fields[1])
        return fields[1]

    def is_service_enabled(self, service_name: str) -> bool:
        entry = self._brew_entry(service_name)
        if entry is not None:
            return entry.get("status") == "started"
        try:
            result = self._run(["launchctl", "list"])
        except ExecutorError as exc:
            raise ServiceDetectionError(service_name, self.platform, exc) from exc
        return any(
            line.split()[-1] in launchd_labels(service_name)
            for line in result.stdout.splitlines()
            if line.strip()
        )

    # ------------------------------------------------------------------
    # Manager operations
    # ------------------------------------------------------------------

    def start(self, service_name: str) -> None:
        self._execute(
            "start",
            service_name,
            ["brew", "services", "start", service_name],
            ["launchctl", "start", service_name],
        )

    def stop(self, service_name: str) -> None:
        self._execute(
            "stop",
            service_name,
            ["brew", "services", "stop", service_name],
            ["launchctl", "stop", service_name],
        )

    def restart(self, service_name: str) -> None:
        try:
            self._execute("restart", service_name, ["brew", "services", "restart", service_name])
            return
        except StrategyError as exc:
            logger.debug("brew restart failed, stopping and starting: %s", exc)
        self.stop(service_name)
        self.start(service_name)

    def enable(self, service_name: str) -> None:
        self._execute(
            "enable",
            service_name,
            ["brew", "services", "start", service_name],
            *(["launchctl", "load", "-w", p] for p in plist_paths(service_name)),
        )

    def disable(self, service_name: str) -> None:
        self._execute(
            "disable",
            service_name,
            ["brew", "services", "stop", service_name],
            *(["launchctl", "unload", "-w", p] for p in plist_paths(service_name)),
        )
