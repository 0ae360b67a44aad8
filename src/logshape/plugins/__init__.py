"""Extension layer: plugin-provided rule sets via pluggy.

Discovery: entry_points (pip-installed) via pluggy setuptools entrypoints.
INVARIANT: Plugin failures are warnings, never errors.
"""

from logshape.plugins.hookspecs import hookimpl
from logshape.plugins.manager import PluginManager

__all__ = ["PluginManager", "hookimpl"]
