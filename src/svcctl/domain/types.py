"""Classification enums for strategies, platforms and dependency edges.

Every enum is a ``StrEnum`` so values round-trip through TOML, JSON and
CLI choices without conversion.
"""

from __future__ import annotations

from enum import StrEnum


class ManagementStrategy(StrEnum):
    """Mechanism used to manage a service's lifecycle."""

    AUTO = "auto"
    BREW_SERVICES = "brew_services"
    DIRECT_COMMAND = "direct_command"
    LAUNCHD = "launchd"
    SYSTEMD = "systemd"
    WINDOWS_SERVICE = "windows_service"
    PROCESS_ONLY = "process_only"


class Platform(StrEnum):
    """Host operating system family."""

    DARWIN = "darwin"
    LINUX = "linux"
    WINDOWS = "windows"
    GENERIC = "generic"


class ManagerType(StrEnum):
    """Facility that reported a service's state."""

    LAUNCHD = "launchd"
    SYSTEMD = "systemd"
    BREW = "brew"
    WINDOWS = "windows"
    PROCESS = "process"


class DependencyType(StrEnum):
    """Kind of a directed dependency edge between two services."""

    PROXY = "proxy"  # source proxies to target
    FORWARD = "forward"  # source forwards to target
    CONTAINER = "container"  # source runs inside target
    REQUIRED = "required"  # target must be running
    OPTIONAL = "optional"  # source works without target


class HealthCheckType(StrEnum):
    """Kind of a single health check."""

    COMMAND = "command"
    HTTP = "http"
    TCP = "tcp"
    SOCKET = "socket"


# Dependency kinds whose target must be up before the source starts.
BLOCKING_DEPENDENCY_TYPES: frozenset[DependencyType] = frozenset(
    {DependencyType.REQUIRED, DependencyType.PROXY, DependencyType.CONTAINER}
)


def valid_strategies() -> list[str]:
    """Return all strategy values in declaration order."""
    return [str(s) for s in ManagementStrategy]
