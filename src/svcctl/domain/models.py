"""Pydantic models shared by strategies, detectors and the dependency graph.

Most models are frozen value objects. ``ServiceInfo`` is the exception: a
detector fills it in step by step while probing, then hands the snapshot to
the caller. Nothing here is ever persisted.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

from svcctl.domain.types import DependencyType, HealthCheckType, ManagementStrategy

# --- Service snapshots ---


class PackageInfo(BaseModel):
    """System package that provides a service."""

    name: str
    manager: str
    version: str = ""


class ServiceInfo(BaseModel):
    """Point-in-time view of a service as reported by a detector.

    ``enabled`` stays False whenever the facility cannot introspect
    autostart.
    """

    name: str
    running: bool = False
    healthy: bool = False
    enabled: bool = False
    version: str = ""
    process_id: str = ""
    manager_type: str = "process"
    package: PackageInfo | None = None
    ports: list[int] = Field(default_factory=list)
    metadata: dict[str, str] = Field(default_factory=dict)


# --- Health checking ---


class HealthCheckConfig(BaseModel):
    """How to check a service's health.

    When several check fields are set the command wins, then HTTP, then TCP.
    ``retry_count`` and ``retry_interval`` are carried for callers; the checks
    themselves never retry.
    """

    model_config = {"frozen": True}

    command: str = ""
    http_endpoint: str = ""
    expected_status: int = 200
    tcp_host: str = ""
    tcp_port: int = 0
    timeout: float = 5.0
    retry_count: int = 0
    retry_interval: float = 0.0

    @property
    def kind(self) -> HealthCheckType | None:
        """The check type that will run, or None if nothing is configured."""
        if self.command:
            return HealthCheckType.COMMAND
        if self.http_endpoint:
            return HealthCheckType.HTTP
        if self.tcp_host and self.tcp_port > 0:
            return HealthCheckType.TCP
        return None


class HealthResult(BaseModel):
    """Outcome of one health check. ``response_time`` is in seconds."""

    model_config = {"frozen": True}

    healthy: bool
    response_time: float = 0.0
    error: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class HealthCheck(BaseModel):
    """One entry of a batch passed to ``HealthChecker.check_multiple``."""

    model_config = {"frozen": True}

    service_name: str
    type: HealthCheckType
    command: str = ""
    endpoint: str = ""
    expected_status: int = 200
    host: str = ""
    port: int = 0
    timeout: float = 5.0


# --- Strategy inputs and answers ---

CommandOp = Literal["start", "stop", "restart", "status"]


class CustomCommands(BaseModel):
    """Per-service command overrides. An empty list means "not configured"."""

    model_config = {"frozen": True}

    start: list[str] = Field(default_factory=list)
    stop: list[str] = Field(default_factory=list)
    restart: list[str] = Field(default_factory=list)
    status: list[str] = Field(default_factory=list)

    def is_configured(self, op: CommandOp) -> bool:
        return len(getattr(self, op)) > 0

    def is_empty(self) -> bool:
        return not (self.start or self.stop or self.restart or self.status)


class ServiceHealthInfo(BaseModel):
    """Health answer from a lifecycle strategy, tagged with who answered."""

    healthy: bool
    details: str
    strategy: ManagementStrategy


class ServiceStatusInfo(BaseModel):
    """Status answer from a lifecycle strategy, tagged with who answered."""

    running: bool
    enabled: bool = False
    process_id: str = ""
    details: str = ""
    strategy: ManagementStrategy


# --- Dependency graph ---


class ProxyConfig(BaseModel):
    """Endpoint forwarding described by a proxy edge (e.g. socket translation)."""

    model_config = {"frozen": True}

    proxy_type: Literal["socket", "http", "tcp", "unix"] = "socket"
    proxy_endpoint: str
    target_endpoint: str
    health_check_path: str = ""
    health_check_port: int = 0
    timeout: float = 30.0
    metadata: dict[str, str] = Field(default_factory=dict)


class DependencyHealthCheck(BaseModel):
    """Check that confirms a dependency edge works end to end."""

    model_config = {"frozen": True}

    type: HealthCheckType
    command: str = ""
    url: str = ""
    port: int = 0
    socket_path: str = ""
    timeout: float = 10.0
    retries: int = 0
    interval: float = 0.0


class ServiceDependency(BaseModel):
    """Directed edge: ``source_service`` depends on ``target_service``."""

    model_config = {"frozen": True}

    source_service: str
    target_service: str
    dependency_type: DependencyType
    proxy_config: ProxyConfig | None = None
    health_check: DependencyHealthCheck | None = None
    startup_order: int = 0
    metadata: dict[str, str] = Field(default_factory=dict)


class DependencyConfig(BaseModel):
    """How to manage a service that shows up as a dependency target."""

    service_name: str
    strategy: ManagementStrategy = ManagementStrategy.AUTO
    custom_commands: CustomCommands | None = None
    health_check: DependencyHealthCheck | None = None
    auto_detect: bool = False
    metadata: dict[str, str] = Field(default_factory=dict)
