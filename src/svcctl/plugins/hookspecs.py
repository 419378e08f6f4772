"""Pluggy hook specifications for svcctl extensions.

Both hooks run once, when the dependency layer is assembled. Plugins
contribute dependency detectors and per-service dependency configs.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from svcctl.dependencies.manager import DependencyDetector
    from svcctl.domain.models import DependencyConfig
    from svcctl.infrastructure.executor import Executor

hookspec = pluggy.HookspecMarker("svcctl")


class SvcctlHookSpec:
    """Hook specifications for the svcctl plugin system."""

    @hookspec
    def register_dependency_detectors(self, executor: Executor) -> list[DependencyDetector] | None:
        """Return detectors to add to the DependencyManager.

        *executor* is the command port the rest of the run uses; detectors
        should run their commands through it.
        """

    @hookspec
    def register_dependency_configs(self) -> list[DependencyConfig] | None:
        """Return management settings for services reached as dependencies."""
