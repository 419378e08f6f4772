"""Extension layer: plugin system via pluggy.

Discovery: entry_points (pip-installed) via pluggy setuptools entrypoints,
plus an optional local directory of single-file plugins.
INVARIANT: Plugin failures are warnings, never errors.
"""

from svcctl.plugins.hookspecs import hookspec
from svcctl.plugins.manager import PluginManager, hookimpl

__all__ = ["PluginManager", "hookimpl", "hookspec"]
