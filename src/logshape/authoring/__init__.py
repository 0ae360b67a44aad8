"""Authoring layer: fluent builders and rule sets that produce the registry."""

from logshape.authoring.builders import (
    DestructuringBuilder,
    EntityBuilder,
    FieldBuilder,
    FieldOptionsBuilder,
    PredicateBuilder,
    discover_rule_sets,
)
from logshape.authoring.rule_sets import EntityRuleSet

__all__ = [
    "DestructuringBuilder",
    "EntityBuilder",
    "EntityRuleSet",
    "FieldBuilder",
    "FieldOptionsBuilder",
    "PredicateBuilder",
    "discover_rule_sets",
]
