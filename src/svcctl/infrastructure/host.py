"""Host platform identification."""

from __future__ import annotations

import sys

from svcctl.domain.types import Platform


def current_platform(sys_platform: str | None = None) -> Platform:
    """Map ``sys.platform`` (or an explicit value) to a ``Platform``."""
    value = sys_platform if sys_platform is not None else sys.platform
    if value == "darwin":
        return Platform.DARWIN
    if value.startswith("linux"):
        return Platform.LINUX
    if value in ("win32", "cygwin"):
        return Platform.WINDOWS
    return Platform.GENERIC
