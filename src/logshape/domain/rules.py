"""Field rules and per-entity configuration.

A rule describes how one field of one entity type is rendered. Simple
rules (:class:`FieldRule` subclasses) turn a raw value into a single
``LogProperty`` (or nothing); :class:`NestedRule` points at an
independent :class:`EntityConfiguration` for the field's own value.

Every rule carries the output ``alias`` (defaulted to the field name by
the builder) and an optional ``predicate`` evaluated against the whole
entity instance, never the field value alone.

INVARIANT: rules and configurations are immutable once built.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping, Sequence, Set
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from logshape.domain.masking import MaskingProcessor
from logshape.domain.values import LogProperty, LogValue, ScalarValue, SequenceValue

Predicate = Callable[[Any], bool]
Realize = Callable[[Any], LogValue]

UNSELECTED_PLACEHOLDER = "Property destructuring option has not been selected."


@dataclass(frozen=True, kw_only=True)
class Rule:
    """Attributes shared by every rule variant."""

    alias: str
    predicate: Predicate | None = None

    def applies_to(self, entity: Any) -> bool:
        """Whether the rule is active for *entity* (no predicate = always)."""
        if self.predicate is None:
            return True
        return bool(self.predicate(entity))


@dataclass(frozen=True, kw_only=True)
class FieldRule(Rule, ABC):
    """A rule rendering a field value in place."""

    @abstractmethod
    def apply(self, value: Any, realize: Realize) -> LogProperty | None:
        """Render *value* under ``self.alias``; None means "no property"."""
        ...


@dataclass(frozen=True, kw_only=True)
class IgnoreRule(FieldRule):
    """Drop the field from the output."""

    def apply(self, value: Any, realize: Realize) -> LogProperty | None:
        return None


@dataclass(frozen=True, kw_only=True)
class RenameRule(FieldRule):
    """Emit the field under ``alias`` with default value handling."""

    def apply(self, value: Any, realize: Realize) -> LogProperty | None:
        return LogProperty(self.alias, realize(value))


@dataclass(frozen=True, kw_only=True)
class ScalarRule(FieldRule):
    """Freeze the value as an opaque scalar.

    With ``mutable=True`` the value's ``str()`` is captured instead of
    the reference, so later mutation of the source cannot change the
    logged snapshot. Also used as the whole-entity transform.
    """

    mutable: bool = False

    def capture(self, value: Any) -> ScalarValue:
        if value is None:
            return ScalarValue.NULL
        return ScalarValue(str(value) if self.mutable else value)

    def apply(self, value: Any, realize: Realize) -> LogProperty | None:
        return LogProperty(self.alias, self.capture(value))


@dataclass(frozen=True, kw_only=True)
class MaskRule(FieldRule):
    """Mask strings and string collections; other values pass through."""

    processor: MaskingProcessor

    def apply(self, value: Any, realize: Realize) -> LogProperty | None:
        if value is None:
            return LogProperty(self.alias, ScalarValue.NULL)
        if isinstance(value, str):
            return LogProperty(self.alias, ScalarValue(self._mask(value)))

        items = _string_items(value)
        if items is None:
            return LogProperty(self.alias, realize(value))
        masked = tuple(ScalarValue(self._mask(item)) for item in items)
        return LogProperty(self.alias, SequenceValue(masked))

    def _mask(self, value: str | None) -> str | None:
        masked = self.processor.try_mask(value)
        return value if masked is None else masked


@dataclass(frozen=True, kw_only=True)
class UnselectedRule(FieldRule):
    """A field was selected for configuration but no option was chosen."""

    def apply(self, value: Any, realize: Realize) -> LogProperty | None:
        return LogProperty(self.alias, realize(UNSELECTED_PLACEHOLDER))


@dataclass(frozen=True, kw_only=True)
class NestedRule(Rule):
    """Destructure the field value with its own configuration."""

    config: EntityConfiguration


@dataclass(frozen=True)
class EntityConfiguration:
    """Rules for one entity type.

    Either ``entity_transform`` is set (the whole instance becomes a
    scalar and field rules are not consulted) or ``fields`` maps field
    names to rules.
    """

    entity_transform: ScalarRule | None = None
    fields: Mapping[str, Rule] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    def rule_for(self, field_name: str) -> Rule | None:
        return self.fields.get(field_name)


def _string_items(value: Any) -> list[str | None] | None:
    """Return the elements of a string collection, or None if *value* is not one.

    Only sequences and sets qualify; mappings, byte strings and one-shot
    iterators do not. ``None`` elements are kept (the processor declines
    them).
    """
    if isinstance(value, (str, bytes, bytearray)) or not isinstance(value, (Sequence, Set)):
        return None
    items = list(value)
    if all(item is None or isinstance(item, str) for item in items):
        return items
    return None
