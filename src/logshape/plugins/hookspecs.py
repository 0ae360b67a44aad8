"""Pluggy hook specifications for logshape extensions.

One setup-time hook lets installed packages contribute rule sets for
their own types, so applications pick them up without wiring each one.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pluggy

if TYPE_CHECKING:
    from logshape.authoring.rule_sets import EntityRuleSet

hookspec = pluggy.HookspecMarker("logshape")
hookimpl = pluggy.HookimplMarker("logshape")


class LogshapeHookSpec:
    """Hook specifications for the logshape plugin system."""

    @hookspec
    def register_rule_sets(self) -> list[EntityRuleSet[Any] | type[EntityRuleSet[Any]]] | None:
        """Return rule set instances (or no-argument rule set classes)."""
