"""Fluent authoring surface producing the configuration registry.

Usage::

    builder = DestructuringBuilder()
    builder.register_type(Employee, lambda e: (
        e.field("passport_number").mask(MaskingOptions(mask_length=6)).with_alias("passport_number"),
        e.field("salary").ignore().apply_when_not_null(),
    ))
    registry = builder.build()

Builders validate eagerly: bad selectors, blank aliases and
non-callable predicates raise at authoring time. ``build()`` hands the
engine an immutable snapshot; later builder calls do not affect it.
"""

from __future__ import annotations

import importlib
import inspect
import logging
import operator
import pkgutil
from collections.abc import Callable
from types import ModuleType
from typing import TYPE_CHECKING, Any, Generic, Self, TypeVar

from logshape.authoring.selectors import FieldSelector, resolve_field_name
from logshape.domain.masking import DefaultMaskingProcessor, MaskingOptions, MaskingProcessor
from logshape.domain.registry import ConfigurationRegistry, RegistryBuilder
from logshape.domain.rules import (
    EntityConfiguration,
    FieldRule,
    IgnoreRule,
    MaskRule,
    NestedRule,
    Predicate,
    RenameRule,
    Rule,
    ScalarRule,
    UnselectedRule,
)

if TYPE_CHECKING:
    from logshape.authoring.rule_sets import EntityRuleSet
    from logshape.plugins.manager import PluginManager

logger = logging.getLogger(__name__)

T = TypeVar("T")

RuleFactory = Callable[[str, Predicate | None], FieldRule]


def _require_alias(alias: str) -> str:
    if not isinstance(alias, str) or not alias.strip():
        msg = "Field alias must be a non-blank string"
        raise ValueError(msg)
    return alias


# ---------------------------------------------------------------------------
# Field-level builders
# ---------------------------------------------------------------------------


class PredicateBuilder(Generic[T]):
    """Make the configured rule conditional on the entity's state.

    When the predicate is false the field is emitted under its own name
    with default handling; the rule is bypassed, not suppressed.
    """

    def __init__(self, field_name: str) -> None:
        self._field_name = field_name
        self._predicate: Predicate | None = None

    def apply_when(self, predicate: Callable[[T], bool]) -> None:
        """Apply the rule only when ``predicate(entity)`` is true."""
        if not callable(predicate):
            msg = f"Predicate for field {self._field_name!r} must be callable"
            raise TypeError(msg)
        self._predicate = predicate

    def apply_when_null(self) -> None:
        """Apply the rule only when the field value is None."""
        getter = operator.attrgetter(self._field_name)
        self._predicate = lambda entity: getter(entity) is None

    def apply_when_not_null(self) -> None:
        """Apply the rule only when the field value is not None."""
        getter = operator.attrgetter(self._field_name)
        self._predicate = lambda entity: getter(entity) is not None

    def _build(self) -> tuple[str | None, Predicate | None]:
        return None, self._predicate


class FieldOptionsBuilder(PredicateBuilder[T]):
    """Predicate options plus an output alias."""

    def __init__(self, field_name: str) -> None:
        super().__init__(field_name)
        self._alias: str | None = None

    def with_alias(self, alias: str) -> Self:
        """Emit the field under *alias* instead of its declared name."""
        self._alias = _require_alias(alias)
        return self

    def _build(self) -> tuple[str | None, Predicate | None]:
        return self._alias, self._predicate


class FieldBuilder(Generic[T]):
    """Choose how one field is rendered. The last option chosen wins."""

    def __init__(self, field_name: str) -> None:
        self._field_name = field_name
        self._make_rule: RuleFactory = lambda alias, predicate: UnselectedRule(
            alias=alias, predicate=predicate
        )
        self._options: PredicateBuilder[T] | None = None

    @property
    def field_name(self) -> str:
        return self._field_name

    def with_alias(self, alias: str) -> PredicateBuilder[T]:
        """Rename the field; its value keeps default handling."""
        alias = _require_alias(alias)
        self._make_rule = lambda _alias, predicate: RenameRule(alias=alias, predicate=predicate)
        return self._set_options(PredicateBuilder(self._field_name))

    def ignore(self) -> PredicateBuilder[T]:
        """Leave the field out of the output."""
        self._make_rule = lambda alias, predicate: IgnoreRule(alias=alias, predicate=predicate)
        return self._set_options(PredicateBuilder(self._field_name))

    def as_scalar(self, mutable: bool = False) -> FieldOptionsBuilder[T]:
        """Log the value as an opaque scalar.

        Args:
            mutable: Capture ``str(value)`` at logging time instead of the
                reference, so later mutation cannot alter the record.
        """
        self._make_rule = lambda alias, predicate: ScalarRule(
            alias=alias, predicate=predicate, mutable=mutable
        )
        return self._set_options(FieldOptionsBuilder(self._field_name))

    def mask(self, masking: MaskingOptions | MaskingProcessor | None = None) -> FieldOptionsBuilder[T]:
        """Mask string (and string collection) values.

        Args:
            masking: ``MaskingOptions`` for the default processor, a custom
                ``MaskingProcessor``, or None for default options.
        """
        processor = _masking_processor(masking)
        self._make_rule = lambda alias, predicate: MaskRule(
            alias=alias, predicate=predicate, processor=processor
        )
        return self._set_options(FieldOptionsBuilder(self._field_name))

    def _set_options(self, options: PredicateBuilder[T]) -> Any:
        self._options = options
        return options

    def _build(self) -> FieldRule:
        alias, predicate = self._options._build() if self._options else (None, None)
        return self._make_rule(alias or self._field_name, predicate)


def _masking_processor(masking: MaskingOptions | MaskingProcessor | None) -> MaskingProcessor:
    if masking is None:
        return DefaultMaskingProcessor()
    if isinstance(masking, MaskingOptions):
        return DefaultMaskingProcessor(masking)
    if isinstance(masking, MaskingProcessor):
        return masking
    msg = f"Expected MaskingOptions or a MaskingProcessor, got {type(masking).__name__}"
    raise TypeError(msg)


# ---------------------------------------------------------------------------
# Entity-level builder
# ---------------------------------------------------------------------------


class EntityBuilder(Generic[T]):
    """Collect the rules for one entity type.

    A field holds at most one rule: configuring it again, simple or
    nested, replaces whatever was there.
    """

    def __init__(self, entity_type: type[T] | None = None) -> None:
        self._entity_type = entity_type
        self._entity_transform: ScalarRule | None = None
        self._fields: dict[str, FieldBuilder[Any] | tuple[EntityBuilder[Any], FieldOptionsBuilder[Any]]] = {}

    @property
    def entity_type(self) -> type[T] | None:
        return self._entity_type

    def as_scalar(self, mutable: bool = False) -> None:
        """Log the whole entity as a scalar; field rules are then unused."""
        self._entity_transform = ScalarRule(alias="", mutable=mutable)

    def field(self, selector: FieldSelector) -> FieldBuilder[T]:
        """Start configuring the field picked by *selector*."""
        name = resolve_field_name(selector)
        builder: FieldBuilder[T] = FieldBuilder(name)
        self._fields[name] = builder
        return builder

    def nested(
        self,
        selector: FieldSelector,
        configure: Callable[[EntityBuilder[Any]], object] | EntityRuleSet[Any],
    ) -> FieldOptionsBuilder[T]:
        """Destructure the field's value with its own rule set.

        Args:
            selector: The field holding the inner entity.
            configure: A callable receiving the inner ``EntityBuilder``, or
                an ``EntityRuleSet`` instance for the inner type.
        """
        from logshape.authoring.rule_sets import EntityRuleSet

        name = resolve_field_name(selector)
        if isinstance(configure, EntityRuleSet):
            inner: EntityBuilder[Any] = EntityBuilder(configure.target_type())
            configure.configure(inner)
        elif callable(configure):
            inner = EntityBuilder()
            configure(inner)
        else:
            msg = f"Nested configuration for {name!r} must be callable or an EntityRuleSet"
            raise TypeError(msg)

        options: FieldOptionsBuilder[T] = FieldOptionsBuilder(name)
        self._fields[name] = (inner, options)
        return options

    def build(self) -> EntityConfiguration:
        rules: dict[str, Rule] = {}
        for name, entry in self._fields.items():
            if isinstance(entry, FieldBuilder):
                rules[name] = entry._build()
                continue
            inner, options = entry
            alias, predicate = options._build()
            rules[name] = NestedRule(alias=alias or name, predicate=predicate, config=inner.build())
        return EntityConfiguration(entity_transform=self._entity_transform, fields=rules)


# ---------------------------------------------------------------------------
# Root builder
# ---------------------------------------------------------------------------


class DestructuringBuilder:
    """Root authoring entry point; registering a type twice replaces it."""

    def __init__(self) -> None:
        self._entities: dict[type, EntityBuilder[Any]] = {}

    def register_type(
        self,
        entity_type: type[T],
        configure: Callable[[EntityBuilder[T]], object],
    ) -> Self:
        """Configure *entity_type* with a callable receiving its builder."""
        if not isinstance(entity_type, type):
            msg = f"Entity type must be a class, got {entity_type!r}"
            raise TypeError(msg)
        if not callable(configure):
            msg = f"Configuration for {entity_type.__qualname__} must be callable"
            raise TypeError(msg)

        builder: EntityBuilder[T] = EntityBuilder(entity_type)
        configure(builder)
        self._entities[entity_type] = builder
        return self

    def apply_rule_set(self, rule_set: EntityRuleSet[Any]) -> Self:
        """Apply a rule set instance for its target type."""
        entity_type = rule_set.target_type()
        builder: EntityBuilder[Any] = EntityBuilder(entity_type)
        rule_set.configure(builder)
        self._entities[entity_type] = builder
        logger.debug("Applied rule set %s for %s", type(rule_set).__qualname__, entity_type.__qualname__)
        return self

    def apply_rule_sets_from_module(self, module: ModuleType | str) -> Self:
        """Apply every concrete ``EntityRuleSet`` defined in *module*.

        Packages are scanned recursively. Rule sets are applied in module
        then class-name order, so the result is deterministic.

        Raises:
            TypeError: If a rule set cannot be constructed without arguments.
        """
        for rule_set_cls in discover_rule_sets(module):
            self.apply_rule_set(instantiate_rule_set(rule_set_cls))
        return self

    def apply_plugin_rule_sets(self, plugin_manager: PluginManager) -> Self:
        """Apply the rule sets contributed by installed plugins."""
        for rule_set in plugin_manager.collect_rule_sets():
            self.apply_rule_set(rule_set)
        return self

    def build(self) -> ConfigurationRegistry:
        """Freeze everything registered so far into a registry."""
        registry = RegistryBuilder()
        for entity_type, builder in self._entities.items():
            registry.register(entity_type, builder.build())
        return registry.freeze()


# ---------------------------------------------------------------------------
# Rule set discovery
# ---------------------------------------------------------------------------


def discover_rule_sets(module: ModuleType | str) -> list[type[EntityRuleSet[Any]]]:
    """Return the concrete rule set classes defined in *module* (recursively)."""
    from logshape.authoring.rule_sets import EntityRuleSet

    root = importlib.import_module(module) if isinstance(module, str) else module
    modules = [root]
    if hasattr(root, "__path__"):
        for info in sorted(
            pkgutil.walk_packages(root.__path__, prefix=f"{root.__name__}."),
            key=lambda i: i.name,
        ):
            modules.append(importlib.import_module(info.name))

    found: list[type[EntityRuleSet[Any]]] = []
    for mod in modules:
        for _attr_name, obj in inspect.getmembers(mod, inspect.isclass):
            if obj.__module__ != mod.__name__:
                continue  # skip imported classes
            if not issubclass(obj, EntityRuleSet) or inspect.isabstract(obj):
                continue
            found.append(obj)
    return found


def instantiate_rule_set(rule_set_cls: type[EntityRuleSet[Any]]) -> EntityRuleSet[Any]:
    """Create a rule set via its no-argument constructor."""
    try:
        signature = inspect.signature(rule_set_cls)
    except (TypeError, ValueError):
        signature = None
    if signature is not None:
        required = [
            p
            for p in signature.parameters.values()
            if p.default is inspect.Parameter.empty
            and p.kind not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
        ]
        if required:
            msg = (
                f"Rule set {rule_set_cls.__qualname__} must be constructible without "
                f"arguments (requires: {', '.join(p.name for p in required)})"
            )
            raise TypeError(msg)
    return rule_set_cls()
