"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, svcctl.toml only contains overrides.
An empty file (or none at all) is a valid configuration.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from svcctl.domain.models import CustomCommands, HealthCheckConfig


class ExecutorConfig(BaseModel):
    """[executor] section."""

    model_config = {"frozen": True}

    default_timeout: float = 30.0
    use_sudo: bool = False


class HealthConfig(BaseModel):
    """[health] section."""

    model_config = {"frozen": True}

    timeout: float = 5.0
    max_workers: int = 8


class LifecycleConfig(BaseModel):
    """[lifecycle] section.

    ``default_strategy`` replaces the per-service default for every service
    without its own ``strategy``.
    """

    model_config = {"frozen": True}

    restart_pause: float = 2.0
    wait_interval: float = 5.0
    default_strategy: str | None = None


class ServiceConfig(BaseModel):
    """[services.<name>] section."""

    model_config = {"frozen": True}

    strategy: str | None = None
    package: str | None = None
    start: list[str] = Field(default_factory=list)
    stop: list[str] = Field(default_factory=list)
    restart: list[str] = Field(default_factory=list)
    status: list[str] = Field(default_factory=list)
    health: HealthCheckConfig | None = None

    def custom_commands(self) -> CustomCommands | None:
        """Command overrides, or None when the section sets none."""
        commands = CustomCommands(
            start=self.start, stop=self.stop, restart=self.restart, status=self.status
        )
        return None if commands.is_empty() else commands


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    enabled: bool = True
    local_dir: str | None = None
