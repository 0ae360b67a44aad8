"""Resolution engine: walk an object into a structured value tree.

For each entity the engine looks up the configuration registered for
its exact runtime type:

- no configuration: every field is emitted with default handling;
- a whole-entity transform: the instance becomes a single scalar;
- field rules: each field is emitted, renamed, masked, frozen, ignored
  or recursed into according to its rule and the rule's predicate.

The null-suppression check runs before rule dispatch, so a configured
field whose value is None is dropped when suppression is on.

INVARIANT: a single failing field accessor never aborts the walk.
"""

from __future__ import annotations

import logging
from typing import Any

from logshape.config.settings import DestructuringOptions
from logshape.domain.fields import iter_fields
from logshape.domain.registry import ConfigurationRegistry
from logshape.domain.rules import (
    EntityConfiguration,
    FieldRule,
    IgnoreRule,
    NestedRule,
    Realize,
)
from logshape.domain.values import LogProperty, LogValue, ScalarValue, StructureValue
from logshape.engine.realize import DEFAULT_MAX_DEPTH, ValueRealizer

logger = logging.getLogger(__name__)


class DestructuringEngine:
    """Stateless tree builder over an immutable registry.

    Safe to share across threads once constructed: the registry, the
    options and every rule are read-only, and field accessors are
    cached per type.
    """

    def __init__(
        self,
        registry: ConfigurationRegistry,
        options: DestructuringOptions | None = None,
        *,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        self._registry = registry
        self._options = options or DestructuringOptions()
        self._realizer = ValueRealizer(registry, self._structure_entity, max_depth=max_depth)

    @property
    def registry(self) -> ConfigurationRegistry:
        return self._registry

    @property
    def options(self) -> DestructuringOptions:
        return self._options

    def destructure(self, entity: Any) -> LogValue:
        """Build the tree for *entity*.

        Raises:
            TypeError: If *entity* is None.
        """
        if entity is None:
            msg = "Cannot destructure None; pass the object to log"
            raise TypeError(msg)
        return self._structure_entity(entity, 0)

    def realize(self, value: Any) -> LogValue:
        """Build the tree for any value, scalars and collections included."""
        return self._realizer.realize(value)

    # ------------------------------------------------------------------
    # Tree walk
    # ------------------------------------------------------------------

    def _structure_entity(self, entity: Any, depth: int) -> LogValue:
        config = self._registry.lookup(type(entity))
        if config is None:
            return self._structure_default(entity, depth)
        return self._structure_configured(entity, config, depth)

    def _structure_default(self, entity: Any, depth: int) -> StructureValue:
        realize = self._realizer.bind(depth + 1)
        suppress_nulls = self._options.suppress_null_fields
        properties: list[LogProperty] = []

        for accessor in iter_fields(entity):
            value = accessor.read(entity)
            if value is None and suppress_nulls:
                continue
            properties.append(LogProperty(accessor.name, realize(value)))

        return StructureValue(tuple(properties), self._type_tag(entity))

    def _structure_configured(
        self,
        entity: Any,
        config: EntityConfiguration,
        depth: int,
    ) -> LogValue:
        if config.entity_transform is not None:
            return config.entity_transform.capture(entity)
        if entity is None:
            return ScalarValue.NULL

        realize = self._realizer.bind(depth + 1)
        suppress_nulls = self._options.suppress_null_fields
        properties: list[LogProperty] = []

        for accessor in iter_fields(entity):
            value = accessor.read(entity)
            if value is None and suppress_nulls:
                continue

            name = accessor.name
            rule = config.rule_for(name)
            if rule is None:
                prop: LogProperty | None = LogProperty(name, realize(value))
            elif isinstance(rule, NestedRule):
                prop = self._apply_nested_rule(entity, name, value, rule, realize, depth)
            elif isinstance(rule, FieldRule):
                prop = self._apply_field_rule(entity, name, value, rule, realize)
            else:
                msg = f"Unsupported rule {type(rule).__name__} for field {name!r}"
                raise TypeError(msg)

            if prop is not None:
                properties.append(prop)

        return StructureValue(tuple(properties), self._type_tag(entity))

    @staticmethod
    def _apply_field_rule(
        entity: Any,
        name: str,
        value: Any,
        rule: FieldRule,
        realize: Realize,
    ) -> LogProperty | None:
        if not rule.applies_to(entity):
            return LogProperty(name, realize(value))

        prop = rule.apply(value, realize)
        if prop is not None or isinstance(rule, IgnoreRule):
            return prop

        logger.debug(
            "%s produced no property for %r; falling back to default handling",
            type(rule).__name__,
            name,
        )
        return LogProperty(rule.alias, realize(value))

    def _apply_nested_rule(
        self,
        entity: Any,
        name: str,
        value: Any,
        rule: NestedRule,
        realize: Realize,
        depth: int,
    ) -> LogProperty:
        if not rule.applies_to(entity):
            return LogProperty(name, realize(value))
        return LogProperty(rule.alias, self._structure_configured(value, rule.config, depth + 1))

    def _type_tag(self, entity: Any) -> str | None:
        if self._options.omit_type_label:
            return None
        return type(entity).__name__
