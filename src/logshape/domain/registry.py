"""Configuration registry: runtime type to entity configuration.

Built in two phases: a mutable :class:`RegistryBuilder` collects
registrations (last write wins per type), then :meth:`RegistryBuilder.freeze`
produces the read-only :class:`ConfigurationRegistry` the engine consumes.

Resolution is by exact runtime type; subclasses do not inherit a
parent's configuration.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from types import MappingProxyType

from logshape.domain.rules import EntityConfiguration


class ConfigurationRegistry:
    """Immutable ``type -> EntityConfiguration`` mapping."""

    def __init__(self, entries: Mapping[type, EntityConfiguration] | None = None) -> None:
        self._entries: Mapping[type, EntityConfiguration] = MappingProxyType(dict(entries or {}))

    def lookup(self, entity_type: type) -> EntityConfiguration | None:
        """Return the configuration for exactly *entity_type*, or None."""
        return self._entries.get(entity_type)

    def is_configured(self, entity_type: type) -> bool:
        return entity_type in self._entries

    @property
    def types(self) -> list[type]:
        return list(self._entries)

    def __contains__(self, entity_type: object) -> bool:
        return entity_type in self._entries

    def __iter__(self) -> Iterator[type]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        names = ", ".join(t.__qualname__ for t in self._entries)
        return f"ConfigurationRegistry([{names}])"


class RegistryBuilder:
    """Mutable staging area for registrations."""

    def __init__(self) -> None:
        self._entries: dict[type, EntityConfiguration] = {}

    def register(self, entity_type: type, config: EntityConfiguration) -> None:
        """Store *config* for *entity_type*, replacing any earlier entry."""
        if not isinstance(entity_type, type):
            msg = f"Entity type must be a class, got {entity_type!r}"
            raise TypeError(msg)
        self._entries[entity_type] = config

    def freeze(self) -> ConfigurationRegistry:
        return ConfigurationRegistry(self._entries)
