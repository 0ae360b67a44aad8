"""Plugin discovery and rule set collection.

Discovery: entry_points (pip-installed) via pluggy setuptools entrypoints
in the ``logshape.rule_sets`` group, plus plugins registered directly.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any

import pluggy

from logshape.authoring.builders import instantiate_rule_set
from logshape.authoring.rule_sets import EntityRuleSet
from logshape.plugins.hookspecs import LogshapeHookSpec

PROJECT_NAME = "logshape"
ENTRY_POINT_GROUP = "logshape.rule_sets"

logger = logging.getLogger(__name__)


class PluginManager:
    """Manages plugin discovery, loading, and rule set collection.

    INVARIANT: Plugin failures are warnings, never errors.
    """

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(LogshapeHookSpec)
        self._loaded: bool = False

    def discover_and_load(self) -> list[str]:
        """Load entry-point plugins; return the names of all registered plugins."""
        self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        self._normalize_plugin_instances()
        self._loaded = True
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        """Register a plugin instance directly."""
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

    def collect_rule_sets(self) -> list[EntityRuleSet[Any]]:
        """Gather rule sets from every plugin, in registration order.

        Broken contributions are logged and skipped.
        """
        collected: list[EntityRuleSet[Any]] = []
        for plugin_name, plugin in self._pm.list_name_plugin():
            if plugin is None:
                continue
            collected.extend(self._plugin_rule_sets(plugin, plugin_name))
        return collected

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _plugin_rule_sets(plugin: object, plugin_name: str) -> list[EntityRuleSet[Any]]:
        hook = getattr(plugin, "register_rule_sets", None)
        if hook is None:
            return []

        try:
            contributed = hook()
        except Exception:
            logger.warning(
                "Failed to collect rule sets from plugin %s",
                plugin_name,
                exc_info=True,
            )
            return []

        if contributed is None:
            return []
        if not isinstance(contributed, (list, tuple)):
            logger.warning("Plugin %s returned non-list rule set registrations", plugin_name)
            return []

        rule_sets: list[EntityRuleSet[Any]] = []
        for entry in contributed:
            try:
                rule_sets.append(_as_rule_set(entry))
            except TypeError:
                logger.warning(
                    "Skipping rule set %r from plugin %s",
                    entry,
                    plugin_name,
                    exc_info=True,
                )
        return rule_sets

    def _normalize_plugin_instances(self) -> None:
        """Replace registered plugin classes with instantiated objects.

        Entry-point loading may register a plugin class directly. Hook dispatch
        against class objects leaves ``self`` unbound and fails at runtime.
        """
        for plugin in list(self._pm.get_plugins()):
            if not inspect.isclass(plugin):
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


def _as_rule_set(entry: object) -> EntityRuleSet[Any]:
    if isinstance(entry, EntityRuleSet):
        entry.target_type()
        return entry
    if inspect.isclass(entry) and issubclass(entry, EntityRuleSet) and not inspect.isabstract(entry):
        entry.target_type()
        return instantiate_rule_set(entry)
    msg = f"Expected an EntityRuleSet, got {entry!r}"
    raise TypeError(msg)
