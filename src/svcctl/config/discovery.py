"""Locating the svcctl.toml that declares service strategies and health checks.

Search order, first hit wins:

1. ``SVCCTL_CONFIG``: an explicit path. A missing file means no config
   rather than falling through, so a typo never silently loads another
   project's services.
2. Walk up from the working directory, the way git finds ``.git/``, so a
   project can pin the strategies of the services it depends on.
3. The per-user file, ``$XDG_CONFIG_HOME/svcctl/svcctl.toml`` (default
   ``~/.config/svcctl/svcctl.toml``), for machine-wide service settings.

The ``--config`` flag bypasses discovery entirely.
"""

from __future__ import annotations

import os
from pathlib import Path

CONFIG_FILENAME = "svcctl.toml"
CONFIG_ENV_VAR = "SVCCTL_CONFIG"


def user_config_path() -> Path:
    """Per-user svcctl.toml location, whether or not it exists."""
    base = os.environ.get("XDG_CONFIG_HOME")
    root = Path(base) if base else Path.home() / ".config"
    return root / "svcctl" / CONFIG_FILENAME


def _walk_up(start: Path) -> Path | None:
    current = start.resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        if current.parent == current:
            return None
        current = current.parent


def find_config(start: Path | None = None) -> Path | None:
    """Return the svcctl.toml governing *start* (default: cwd), or None."""
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        return p if p.is_file() else None

    found = _walk_up(start or Path.cwd())
    if found is not None:
        return found

    user = user_config_path()
    return user if user.is_file() else None
