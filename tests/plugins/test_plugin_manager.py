"""Tests for PluginManager registration and rule set collection."""

from __future__ import annotations

import logging
from typing import Any

import pytest

from logshape.authoring.builders import DestructuringBuilder, EntityBuilder
from logshape.authoring.rule_sets import EntityRuleSet
from logshape.plugins import hookimpl
from logshape.plugins.manager import ENTRY_POINT_GROUP, PluginManager
from tests.models import Address, Counter


class AddressRules(EntityRuleSet[Address]):
    def configure(self, builder: EntityBuilder[Address]) -> None:
        builder.field("street").ignore()


class CounterRules(EntityRuleSet[Counter]):
    def configure(self, builder: EntityBuilder[Counter]) -> None:
        builder.as_scalar()


class _NeedsArgs(EntityRuleSet[Counter]):
    def __init__(self, prefix: str) -> None:
        self.prefix = prefix

    def configure(self, builder: EntityBuilder[Counter]) -> None:
        pass


class _RuleSetPlugin:
    @hookimpl
    def register_rule_sets(self) -> list[Any]:
        return [AddressRules(), CounterRules]


class _BrokenPlugin:
    @hookimpl
    def register_rule_sets(self) -> list[Any]:
        msg = "plugin exploded"
        raise RuntimeError(msg)


class _NonListPlugin:
    @hookimpl
    def register_rule_sets(self) -> Any:
        return AddressRules()


class _BadEntriesPlugin:
    @hookimpl
    def register_rule_sets(self) -> list[Any]:
        return ["not a rule set", _NeedsArgs, CounterRules()]


class _SilentPlugin:
    @hookimpl
    def register_rule_sets(self) -> None:
        return None


class TestPluginManager:
    def test_hook_relay_accessible(self) -> None:
        assert hasattr(PluginManager().hook, "register_rule_sets")

    def test_entry_point_group(self) -> None:
        assert ENTRY_POINT_GROUP == "logshape.rule_sets"

    def test_register_plugin(self) -> None:
        pm = PluginManager()
        pm.register_plugin(_RuleSetPlugin(), name="rules")
        assert "rules" in pm.list_plugin_names()

    def test_register_plugin_default_name(self) -> None:
        pm = PluginManager()
        pm.register_plugin(_RuleSetPlugin())
        assert "_RuleSetPlugin" in pm.list_plugin_names()

    def test_unregister_plugin(self) -> None:
        pm = PluginManager()
        plugin = _RuleSetPlugin()
        pm.register_plugin(plugin, name="rules")
        pm.unregister(plugin)
        assert "rules" not in pm.list_plugin_names()
        assert plugin not in pm.get_plugins()

    def test_is_loaded_after_discover(self) -> None:
        pm = PluginManager()
        assert pm.is_loaded is False
        pm.discover_and_load()
        assert pm.is_loaded is True

    def test_discover_returns_registered_names(self) -> None:
        pm = PluginManager()
        pm.register_plugin(_RuleSetPlugin(), name="rules")
        assert "rules" in pm.discover_and_load()


class TestCollectRuleSets:
    def test_instances_and_classes_collected(self) -> None:
        pm = PluginManager()
        pm.register_plugin(_RuleSetPlugin())
        collected = pm.collect_rule_sets()
        assert [type(rs) for rs in collected] == [AddressRules, CounterRules]

    def test_no_plugins(self) -> None:
        assert PluginManager().collect_rule_sets() == []

    def test_none_result_ignored(self) -> None:
        pm = PluginManager()
        pm.register_plugin(_SilentPlugin())
        assert pm.collect_rule_sets() == []

    def test_raising_plugin_warns_and_skips(self, caplog: pytest.LogCaptureFixture) -> None:
        pm = PluginManager()
        pm.register_plugin(_BrokenPlugin(), name="broken")
        pm.register_plugin(_RuleSetPlugin(), name="good")
        with caplog.at_level(logging.WARNING, logger="logshape.plugins.manager"):
            collected = pm.collect_rule_sets()
        assert len(collected) == 2
        assert "broken" in caplog.text

    def test_non_list_result_warns(self, caplog: pytest.LogCaptureFixture) -> None:
        pm = PluginManager()
        pm.register_plugin(_NonListPlugin(), name="scalar")
        with caplog.at_level(logging.WARNING, logger="logshape.plugins.manager"):
            assert pm.collect_rule_sets() == []
        assert "non-list" in caplog.text

    def test_bad_entries_skipped_individually(self, caplog: pytest.LogCaptureFixture) -> None:
        pm = PluginManager()
        pm.register_plugin(_BadEntriesPlugin(), name="mixed")
        with caplog.at_level(logging.WARNING, logger="logshape.plugins.manager"):
            collected = pm.collect_rule_sets()
        assert [type(rs) for rs in collected] == [CounterRules]
        skipped = [r for r in caplog.records if r.getMessage().startswith("Skipping rule set")]
        assert len(skipped) == 2

    def test_builder_applies_plugin_rule_sets(self) -> None:
        pm = PluginManager()
        pm.register_plugin(_RuleSetPlugin())
        registry = DestructuringBuilder().apply_plugin_rule_sets(pm).build()
        assert set(registry) == {Address, Counter}


class TestEntryPointNormalization:
    def test_class_plugins_instantiated(self, monkeypatch: pytest.MonkeyPatch) -> None:
        pm = PluginManager()

        def fake_load(group: str) -> int:
            assert group == ENTRY_POINT_GROUP
            pm._pm.register(_RuleSetPlugin, name="class-plugin")
            return 1

        monkeypatch.setattr(pm._pm, "load_setuptools_entrypoints", fake_load)
        names = pm.discover_and_load()

        assert "class-plugin" in names
        plugins = pm.get_plugins()
        assert all(isinstance(p, _RuleSetPlugin) for p in plugins)
        assert len(pm.collect_rule_sets()) == 2
