"""Platform service detector contract and shared behaviour.

A detector answers "is it running, is it healthy, what package provides
it" for one host platform, and performs the platform's native manager
operations. Subclasses implement the platform queries; the base class assembles
``ServiceInfo`` snapshots and dispatches health checks.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, ClassVar

from svcctl.domain.errors import CommandFailedError, ExecutorError, StrategyError, SvcctlError
from svcctl.domain.models import HealthCheckConfig, HealthResult, PackageInfo, ServiceInfo
from svcctl.infrastructure.executor import ExecOpts, ExecResult, format_command

if TYPE_CHECKING:
    from svcctl.domain.types import Platform
    from svcctl.infrastructure.executor import Executor
    from svcctl.infrastructure.health import HealthChecker
    from svcctl.infrastructure.mapping import PackageServiceMapping

logger = logging.getLogger(__name__)

NO_HEALTH_CONFIG = "no health check configuration available"


class BaseServiceDetector(ABC):
    """Detect and manage services on one platform.

    Parameters:
        executor: Command execution port.
        mapping: Package <-> service registry; supplies default health checks.
        health: Health checker used by ``check_health`` and ``get_service_info``.
        opts: Execution options for every command (``use_sudo`` etc.).
    """

    platform: ClassVar[Platform]
    package_manager: ClassVar[str] = "unknown"

    def __init__(
        self,
        executor: Executor,
        mapping: PackageServiceMapping,
        health: HealthChecker,
        *,
        opts: ExecOpts | None = None,
    ) -> None:
        self._executor = executor
        self._mapping = mapping
        self._health = health
        self._opts = opts or ExecOpts()

    # ------------------------------------------------------------------
    # Platform queries
    # ------------------------------------------------------------------

    @abstractmethod
    def is_running(self, service_name: str) -> bool: ...

    @abstractmethod
    def _inspect(self, service_name: str) -> ServiceInfo:
        """Fill running state, manager type, PID and metadata.

        Raises ``ServiceDetectionError`` when every mechanism failed.
        """

    @abstractmethod
    def is_service_enabled(self, service_name: str) -> bool: ...

    def _package_version(self, package_name: str) -> str:
        """Installed version of *package_name*; "" when unknown."""
        return ""

    # ------------------------------------------------------------------
    # Manager operations
    # ------------------------------------------------------------------

    @abstractmethod
    def start(self, service_name: str) -> None: ...

    @abstractmethod
    def stop(self, service_name: str) -> None: ...

    @abstractmethod
    def restart(self, service_name: str) -> None: ...

    @abstractmethod
    def enable(self, service_name: str) -> None: ...

    @abstractmethod
    def disable(self, service_name: str) -> None: ...

    def set_service_startup(self, service_name: str, enabled: bool) -> None:
        if enabled:
            self.enable(service_name)
        else:
            self.disable(service_name)

    # ------------------------------------------------------------------
    # Shared behaviour
    # ------------------------------------------------------------------

    def get_service_info(self, service_name: str) -> ServiceInfo:
        """Snapshot of *service_name*: state, package, autostart and health."""
        info = self._inspect(service_name)

        package_name = self._mapping.get_package_for_service(service_name)
        if package_name:
            version = self._package_version(package_name)
            info.package = PackageInfo(
                name=package_name, manager=self.package_manager, version=version
            )
            info.version = version

        try:
            info.enabled = self.is_service_enabled(service_name)
        except SvcctlError as exc:
            logger.debug("autostart of %s unknown: %s", service_name, exc)
            info.enabled = False

        if info.running:
            config = self._mapping.get_default_health_check(service_name)
            if config is not None:
                info.healthy = self._health.check_config(config).healthy
        return info

    def get_all_services(self) -> dict[str, ServiceInfo]:
        """Best-effort snapshot of every service the mapping knows about."""
        services: dict[str, ServiceInfo] = {}
        for name in self._mapping.all_services():
            try:
                services[name] = self.get_service_info(name)
            except SvcctlError as exc:
                logger.debug("skipping %s: %s", name, exc)
        return services

    def check_health(
        self, service_name: str, config: HealthCheckConfig | None = None
    ) -> HealthResult:
        """Run *config*, or the mapping default when no override is given."""
        if config is None:
            config = self._mapping.get_default_health_check(service_name)
        if config is None:
            return HealthResult(healthy=False, error=NO_HEALTH_CONFIG)
        return self._health.check_config(config)

    def get_services_for_package(self, package_name: str) -> list[str]:
        return self._mapping.get_services_for_package(package_name)

    def get_package_for_service(self, service_name: str) -> str | None:
        return self._mapping.get_package_for_service(service_name)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _run(self, argv: list[str]) -> ExecResult:
        return self._executor.run(argv[0], argv[1:], self._opts)

    def _execute(self, op: str, service_name: str, *candidates: list[str]) -> None:
        """Run each candidate command until one exits 0.

        Both launch errors and nonzero exits move on to the next candidate;
        the last failure is raised.
        """
        failure: StrategyError | None = None
        cause: ExecutorError | None = None
        for argv in candidates:
            try:
                result = self._run(argv)
            except ExecutorError as exc:
                failure = StrategyError(f"failed to {op} service {service_name}: {exc}")
                cause = exc
                continue
            if result.exit_code == 0:
                return
            logger.debug(
                "%s exited %d: %s",
                format_command(argv[0], argv[1:]),
                result.exit_code,
                result.stderr.strip(),
            )
            cause = None
            failure = CommandFailedError(
                f"failed to {op} service {service_name}: {result.stderr.strip()}",
                exit_code=result.exit_code,
                stderr=result.stderr,
            )
        if failure is not None:
            raise failure from cause


def pgrep_pids(executor: Executor, service_name: str, opts: ExecOpts) -> list[str]:
    """PIDs matching *service_name*. Launch errors propagate as ``ExecutorError``."""
    result = executor.run("pgrep", ["-f", service_name], opts)
    return result.stdout.split() if result.exit_code == 0 else []
