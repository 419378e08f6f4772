"""Fallback detector for hosts without a known service manager.

It can only observe processes; every manager operation is refused.
"""

from __future__ import annotations

import logging
from typing import NoReturn

from svcctl.detectors.base import BaseServiceDetector, pgrep_pids
from svcctl.domain.errors import CapabilityAbsentError, ExecutorError, ServiceDetectionError
from svcctl.domain.models import ServiceInfo
from svcctl.domain.types import Platform

logger = logging.getLogger(__name__)


def _refuse(action: str) -> NoReturn:
    raise CapabilityAbsentError(
        f"generic service detector cannot {action} - use platform-specific detector"
    )


class GenericServiceDetector(BaseServiceDetector):
    platform = Platform.GENERIC
    package_manager = "unknown"

    def _process_running(self, service_name: str) -> bool:
        try:
            return bool(pgrep_pids(self._executor, service_name, self._opts))
        except ExecutorError as exc:
            logger.debug("pgrep unavailable, scanning ps -ef: %s", exc)
        result = self._run(["ps", "-ef"])
        needle = service_name.lower()
        return any(needle in line.lower() for line in result.stdout.splitlines())

    def is_running(self, service_name: str) -> bool:
        try:
            return self._process_running(service_name)
        except ExecutorError as exc:
            raise ServiceDetectionError(service_name, self.platform, exc) from exc

    def _inspect(self, service_name: str) -> ServiceInfo:
        try:
            running = self._process_running(service_name)
        except ExecutorError as exc:
            raise ServiceDetectionError(
                service_name,
                self.platform,
                exc,
                "Service may not be installed or accessible. "
                "Check if the service process is running.",
            ) from exc
        return ServiceInfo(name=service_name, running=running)

    def is_service_enabled(self, service_name: str) -> bool:
        _refuse("check if services are enabled")

    def start(self, service_name: str) -> None:
        _refuse("start services")

    def stop(self, service_name: str) -> None:
        _refuse("stop services")

    def restart(self, service_name: str) -> None:
        _refuse("restart services")

    def enable(self, service_name: str) -> None:
        _refuse("enable services")

    def disable(self, service_name: str) -> None:
        _refuse("disable services")

    def set_service_startup(self, service_name: str, enabled: bool) -> None:
        _refuse("set service startup")
