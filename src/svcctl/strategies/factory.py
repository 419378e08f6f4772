"""Resolve strategy names and per-service default commands."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from svcctl.domain.models import CustomCommands
from svcctl.domain.types import ManagementStrategy, Platform, valid_strategies
from svcctl.strategies.auto import AutoStrategy
from svcctl.strategies.brew import BrewServicesStrategy
from svcctl.strategies.direct import DirectCommandStrategy
from svcctl.strategies.launchd import LaunchdStrategy
from svcctl.strategies.process import ProcessOnlyStrategy
from svcctl.strategies.systemd import SystemdStrategy
from svcctl.strategies.windows import WindowsServiceStrategy

if TYPE_CHECKING:
    from svcctl.infrastructure.executor import Executor
    from svcctl.strategies.base import ServiceStrategy

logger = logging.getLogger(__name__)

BREW_SERVICES = frozenset(
    {
        "postgresql", "mysql", "redis", "nginx", "apache", "mongodb",
        "elasticsearch", "kibana", "logstash", "rabbitmq", "memcached",
        "cassandra", "influxdb", "grafana", "prometheus", "consul", "vault",
        "nomad", "docker", "docker-compose",
    }
)  # fmt: skip

DIRECT_COMMAND_SERVICES = frozenset(
    {
        "colima", "docker-desktop", "lima", "podman", "buildah", "skopeo",
        "nerdctl", "containerd", "runc", "crun", "gvisor", "firecracker",
        "qemu", "virtualbox", "vmware", "parallels", "hyperkit", "xhyve",
    }
)  # fmt: skip

# Multi-step restarts are left empty so they decompose into stop + start.
_KNOWN_COMMANDS: dict[str, CustomCommands] = {
    "colima": CustomCommands(
        start=["colima", "start"],
        stop=["colima", "stop"],
        restart=["colima", "restart"],
        status=["colima", "status"],
    ),
    "docker-desktop": CustomCommands(
        start=["open", "-a", "Docker"],
        stop=["killall", "Docker"],
        status=["pgrep", "-f", "Docker"],
    ),
    "lima": CustomCommands(
        start=["limactl", "start", "default"],
        stop=["limactl", "stop", "default"],
        status=["limactl", "list"],
    ),
    "podman": CustomCommands(
        start=["podman", "machine", "start"],
        stop=["podman", "machine", "stop"],
        restart=["podman", "machine", "restart"],
        status=["podman", "machine", "list"],
    ),
}


def validate_strategy(value: str) -> ManagementStrategy:
    """Parse *value* as a strategy name or raise ``ValueError`` listing valid names."""
    try:
        return ManagementStrategy(value)
    except ValueError:
        raise ValueError(
            f"invalid strategy {value!r}, must be one of: {', '.join(valid_strategies())}"
        ) from None


def default_strategy_for_service(service_name: str) -> ManagementStrategy:
    if service_name in BREW_SERVICES:
        return ManagementStrategy.BREW_SERVICES
    if service_name in DIRECT_COMMAND_SERVICES:
        return ManagementStrategy.DIRECT_COMMAND
    return ManagementStrategy.AUTO


def default_commands_for_service(service_name: str) -> CustomCommands:
    """Known commands for well-known runtimes, else ``NAME start`` and friends."""
    known = _KNOWN_COMMANDS.get(service_name)
    if known is not None:
        return known
    return CustomCommands(
        start=[service_name, "start"],
        stop=[service_name, "stop"],
        restart=[service_name, "restart"],
        status=[service_name, "status"],
    )


class StrategyFactory:
    """Builds strategies bound to one executor.

    Extra keyword arguments (``restart_pause``, ``opts``, ``sleep``) are
    forwarded to every strategy constructed.
    """

    def __init__(
        self,
        executor: Executor,
        *,
        platform: Platform | None = None,
        **strategy_kwargs: Any,
    ) -> None:
        self._executor = executor
        self._platform = platform
        self._kwargs = strategy_kwargs

    def create_strategy(
        self,
        strategy: ManagementStrategy | str,
        custom_commands: CustomCommands | None = None,
    ) -> ServiceStrategy:
        """Build the named strategy. Unknown names fall back to ``auto``."""
        try:
            kind = ManagementStrategy(strategy)
        except ValueError:
            logger.debug("unknown strategy %r, falling back to auto", strategy)
            kind = ManagementStrategy.AUTO

        executor, kw = self._executor, self._kwargs
        if kind is ManagementStrategy.BREW_SERVICES:
            return BrewServicesStrategy(executor, **kw)
        if kind is ManagementStrategy.DIRECT_COMMAND:
            return DirectCommandStrategy(executor, custom_commands, **kw)
        if kind is ManagementStrategy.LAUNCHD:
            return LaunchdStrategy(executor, **kw)
        if kind is ManagementStrategy.SYSTEMD:
            return SystemdStrategy(executor, **kw)
        if kind is ManagementStrategy.WINDOWS_SERVICE:
            return WindowsServiceStrategy(executor, **kw)
        if kind is ManagementStrategy.PROCESS_ONLY:
            return ProcessOnlyStrategy(executor, **kw)
        return AutoStrategy(executor, custom_commands, platform=self._platform, **kw)

    def create_lifecycle_strategy(
        self,
        strategy: ManagementStrategy | str,
        custom_commands: CustomCommands | None,
        service_name: str,
    ) -> ServiceStrategy:
        """Like ``create_strategy`` but fills in known direct commands for *service_name*."""
        if strategy == ManagementStrategy.DIRECT_COMMAND and (
            custom_commands is None or custom_commands.is_empty()
        ):
            custom_commands = default_commands_for_service(service_name)
        return self.create_strategy(strategy, custom_commands)

    def strategy_for_service(
        self,
        service_name: str,
        strategy: ManagementStrategy | str | None = None,
        custom_commands: CustomCommands | None = None,
    ) -> ServiceStrategy:
        """Effective strategy: the explicit one, else the per-service default."""
        effective = strategy or default_strategy_for_service(service_name)
        return self.create_lifecycle_strategy(effective, custom_commands, service_name)
