"""Plugin discovery, loading and collection of plugin contributions.

Discovery: entry_points (pip-installed) in the ``svcctl.plugins`` group, plus
single-file plugins from an optional local directory.
Capabilities: dependency detectors and dependency configs.
"""

from __future__ import annotations

import importlib.util
import inspect
import logging
import sys
from typing import TYPE_CHECKING

import pluggy

from svcctl.plugins.hookspecs import SvcctlHookSpec

if TYPE_CHECKING:
    from pathlib import Path

    from svcctl.dependencies.manager import DependencyDetector
    from svcctl.domain.models import DependencyConfig
    from svcctl.infrastructure.executor import Executor

PROJECT_NAME = "svcctl"
ENTRY_POINT_GROUP = "svcctl.plugins"

hookimpl = pluggy.HookimplMarker(PROJECT_NAME)

logger = logging.getLogger(__name__)


class PluginManager:
    """Manages plugin discovery, loading and hook dispatch."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(SvcctlHookSpec)
        self._loaded: bool = False

    def discover_and_load(self, *, local_dir: Path | None = None) -> list[str]:
        """Discover plugins from entry points and an optional local directory.

        Returns a list of loaded plugin names.
        """
        self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        self._normalize_plugin_instances()
        if local_dir is not None:
            self._discover_local(local_dir)
        self._loaded = True
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        """Register a plugin instance directly (e.g. built-in plugins)."""
        resolved_name = name or plugin.__class__.__name__
        self._pm.register(plugin, name=resolved_name)
        logger.debug("Registered plugin: %s", resolved_name)

    def unregister(self, plugin: object) -> None:
        self._pm.unregister(plugin)

    @property
    def is_loaded(self) -> bool:
        """Whether discover_and_load() has been called."""
        return self._loaded

    @property
    def hook(self) -> pluggy.HookRelay:
        return self._pm.hook

    def get_plugins(self) -> list[object]:
        return list(self._pm.get_plugins())

    def list_plugin_names(self) -> list[str]:
        return [self._pm.get_name(p) or p.__class__.__name__ for p in self._pm.get_plugins()]

    # ------------------------------------------------------------------
    # Contributions
    # ------------------------------------------------------------------

    def collect_detectors(self, executor: Executor) -> list[DependencyDetector]:
        """Detectors contributed by every plugin, in registration order.

        A plugin whose hook raises, or returns something other than a list,
        is skipped with a warning.
        """
        detectors: list[DependencyDetector] = []
        for plugin, plugin_name in self._plugins_with("register_dependency_detectors"):
            try:
                hook = plugin.register_dependency_detectors  # type: ignore[attr-defined]
                contributed = hook(executor=executor)
            except Exception:
                logger.warning(
                    "Failed to collect dependency detectors from plugin %s",
                    plugin_name,
                    exc_info=True,
                )
                continue
            if contributed is None:
                continue
            if not isinstance(contributed, list):
                logger.warning("Plugin %s returned non-list detector registrations", plugin_name)
                continue
            detectors.extend(contributed)
        return detectors

    def collect_dependency_configs(self) -> list[DependencyConfig]:
        from svcctl.domain.models import DependencyConfig

        configs: list[DependencyConfig] = []
        for plugin, plugin_name in self._plugins_with("register_dependency_configs"):
            try:
                contributed = plugin.register_dependency_configs()  # type: ignore[attr-defined]
            except Exception:
                logger.warning(
                    "Failed to collect dependency configs from plugin %s",
                    plugin_name,
                    exc_info=True,
                )
                continue
            for config in contributed or []:
                if isinstance(config, DependencyConfig):
                    configs.append(config)
                else:
                    logger.warning(
                        "Skipping dependency config %r from plugin %s", config, plugin_name
                    )
        return configs

    def _plugins_with(self, hook_name: str) -> list[tuple[object, str]]:
        found = []
        for plugin in self._pm.get_plugins():
            if getattr(plugin, hook_name, None) is None:
                continue
            found.append((plugin, self._pm.get_name(plugin) or plugin.__class__.__name__))
        return found

    # ------------------------------------------------------------------
    # Local directory discovery
    # ------------------------------------------------------------------

    def _discover_local(self, local_dir: Path) -> None:
        """Scan *local_dir* for single-file Python plugins.

        Each ``*.py`` file (excluding ``_``-prefixed names) is loaded as a
        module. Classes inside it that carry hookimpl-decorated methods are
        instantiated and registered. Failures are logged and skipped.
        """
        if not local_dir.is_dir():
            return

        for py_file in sorted(local_dir.glob("*.py")):
            if py_file.name.startswith("_"):
                continue
            module_name = f"svcctl_local_plugin_{py_file.stem}"
            try:
                spec = importlib.util.spec_from_file_location(module_name, py_file)
                if spec is None or spec.loader is None:
                    logger.warning("Could not create module spec for %s", py_file)
                    continue
                module = importlib.util.module_from_spec(spec)
                sys.modules[module_name] = module
                spec.loader.exec_module(module)
            except Exception:
                logger.warning("Failed to load local plugin %s", py_file, exc_info=True)
                sys.modules.pop(module_name, None)
                continue

            for _attr_name, obj in inspect.getmembers(module, inspect.isclass):
                if obj.__module__ != module_name:
                    continue
                if not self._has_hook_impls(obj):
                    continue
                try:
                    self.register_plugin(obj(), name=module_name)
                except Exception:
                    logger.warning(
                        "Failed to instantiate plugin class %s from %s",
                        obj.__name__,
                        py_file,
                        exc_info=True,
                    )

    def _normalize_plugin_instances(self) -> None:
        """Replace registered plugin classes with instantiated objects.

        Entry-point loading may register a plugin class directly; hook
        dispatch against a class leaves ``self`` unbound.
        """
        for plugin in list(self._pm.get_plugins()):
            if not inspect.isclass(plugin):
                continue
            if not self._has_hook_impls(plugin):
                continue

            plugin_name = self._pm.get_name(plugin) or plugin.__name__
            self._pm.unregister(plugin)

            try:
                instance = plugin()
            except Exception:
                logger.warning(
                    "Failed to instantiate entry-point plugin %s",
                    plugin_name,
                    exc_info=True,
                )
                continue

            self._pm.register(instance, name=plugin_name)
            logger.debug("Instantiated entry-point plugin: %s", plugin_name)

    @staticmethod
    def _has_hook_impls(cls: type) -> bool:
        """Check whether *cls* has any methods decorated with ``@hookimpl``.

        ``HookimplMarker("svcctl")`` sets a ``svcctl_impl`` attribute on
        decorated methods.
        """
        for name in dir(cls):
            if name.startswith("_"):
                continue
            method = getattr(cls, name, None)
            if callable(method) and getattr(method, "svcctl_impl", None):
                return True
        return False
