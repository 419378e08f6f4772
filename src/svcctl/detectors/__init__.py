"""Platform service detectors.

``new_service_detector`` picks the detector for the running host.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from svcctl.detectors.base import BaseServiceDetector
from svcctl.detectors.generic import GenericServiceDetector
from svcctl.detectors.linux import LinuxServiceDetector
from svcctl.detectors.macos import MacOSServiceDetector
from svcctl.detectors.windows import WindowsServiceDetector
from svcctl.domain.types import Platform
from svcctl.infrastructure.executor import SystemExecutor
from svcctl.infrastructure.health import HealthChecker
from svcctl.infrastructure.host import current_platform
from svcctl.infrastructure.mapping import default_mapping

if TYPE_CHECKING:
    from svcctl.infrastructure.executor import ExecOpts, Executor
    from svcctl.infrastructure.mapping import PackageServiceMapping

_DETECTORS: dict[Platform, type[BaseServiceDetector]] = {
    Platform.DARWIN: MacOSServiceDetector,
    Platform.LINUX: LinuxServiceDetector,
    Platform.WINDOWS: WindowsServiceDetector,
    Platform.GENERIC: GenericServiceDetector,
}


def new_service_detector(
    executor: Executor | None = None,
    mapping: PackageServiceMapping | None = None,
    health: HealthChecker | None = None,
    *,
    platform: Platform | None = None,
    opts: ExecOpts | None = None,
) -> BaseServiceDetector:
    """Build the detector for *platform* (default: this host)."""
    executor = executor or SystemExecutor()
    detector_cls = _DETECTORS[platform or current_platform()]
    return detector_cls(
        executor,
        mapping or default_mapping(),
        health or HealthChecker(executor),
        opts=opts,
    )


__all__ = [
    "BaseServiceDetector",
    "GenericServiceDetector",
    "LinuxServiceDetector",
    "MacOSServiceDetector",
    "WindowsServiceDetector",
    "new_service_detector",
]
