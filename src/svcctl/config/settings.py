"""Unified settings: CLI flags, env vars and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  - CLI flags passed by Click
  2. Env vars     - ``SVCCTL_*`` prefix, ``__`` for nested keys
  3. TOML file    - ``svcctl.toml`` discovered via walk-up
  4. Code defaults - baked into the section models
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from svcctl.config.discovery import find_config
from svcctl.config.models import (
    ExecutorConfig,
    HealthConfig,
    LifecycleConfig,
    PluginsConfig,
    ServiceConfig,
)


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a ``svcctl.toml`` file."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            raw = toml_path.read_text(encoding="utf-8")
            try:
                self._data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                import click

                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise click.ClickException(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


# Thread-local storage for TOML path during construction.
_tls = threading.local()


class SvcSettings(BaseSettings):
    """Unified settings for the svcctl CLI and service layer.

    Stored on the ``AppContext`` in ``click.Context.obj`` at the CLI root.

    Attributes:
        config_path: The TOML file that was loaded, if any.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "SVCCTL_",
        "env_nested_delimiter": "__",
    }

    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    executor: ExecutorConfig = Field(default_factory=ExecutorConfig)
    health: HealthConfig = Field(default_factory=HealthConfig)
    lifecycle: LifecycleConfig = Field(default_factory=LifecycleConfig)
    services: dict[str, ServiceConfig] = Field(default_factory=dict)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    def service(self, service_name: str) -> ServiceConfig:
        """The ``[services.<name>]`` section, or an empty one."""
        return self.services.get(service_name) or ServiceConfig()

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        start: Path | None = None,
        **cli_flags: Any,
    ) -> SvcSettings:
        """Construct settings from a CLI invocation.

        Discovers ``svcctl.toml`` via walk-up from *start* (or uses the
        explicit *config_path*) and merges CLI flags as highest-priority
        overrides.
        """
        toml_path: Path | None = None
        if config_path:
            p = Path(config_path)
            if p.is_file():
                toml_path = p
        else:
            toml_path = find_config(start)

        _tls.toml_path = toml_path
        try:
            return cls(config_path=toml_path, **cli_flags)
        finally:
            _tls.toml_path = None
