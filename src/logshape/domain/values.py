"""Structured value tree: the output of destructuring.

Three node kinds mirror what a structured log sink can render:

- ``ScalarValue``: an opaque value; the sink decides its text form.
- ``SequenceValue``: an ordered list of nodes.
- ``StructureValue``: ordered ``(name, node)`` pairs plus an optional
  type tag (the entity's class name).

Nodes are immutable and created fresh per destructure call.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any, ClassVar


@dataclass(frozen=True, slots=True)
class ScalarValue:
    """A leaf node wrapping a single value (``None`` for null)."""

    value: Any = None

    NULL: ClassVar[ScalarValue]


ScalarValue.NULL = ScalarValue(None)


@dataclass(frozen=True, slots=True)
class SequenceValue:
    """An ordered collection of nodes."""

    elements: tuple[LogValue, ...] = ()

    def __iter__(self) -> Iterator[LogValue]:
        return iter(self.elements)

    def __len__(self) -> int:
        return len(self.elements)


@dataclass(frozen=True, slots=True)
class LogProperty:
    """A named node inside a :class:`StructureValue`."""

    name: str
    value: LogValue


@dataclass(frozen=True, slots=True)
class StructureValue:
    """Ordered named properties with an optional type tag.

    Attributes:
        properties: ``LogProperty`` pairs in field-enumeration order.
        type_tag: Class name of the destructured entity, or None when
            type labels are omitted (or for mapping-derived structures).
    """

    properties: tuple[LogProperty, ...] = ()
    type_tag: str | None = None

    @property
    def names(self) -> list[str]:
        return [prop.name for prop in self.properties]

    def as_dict(self) -> dict[str, LogValue]:
        """Return ``{name: node}``; later duplicates win."""
        return {prop.name: prop.value for prop in self.properties}

    def get(self, name: str) -> LogValue | None:
        for prop in self.properties:
            if prop.name == name:
                return prop.value
        return None

    def __contains__(self, name: object) -> bool:
        return any(prop.name == name for prop in self.properties)


LogValue = ScalarValue | SequenceValue | StructureValue

LOG_VALUE_TYPES: tuple[type, ...] = (ScalarValue, SequenceValue, StructureValue)
