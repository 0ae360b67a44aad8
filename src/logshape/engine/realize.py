"""Default value realization: raw values to tree nodes.

The realizer handles every value no explicit rule governs:

- ``None`` -> the null scalar
- scalars (numbers, strings, bytes, dates, UUIDs, enums, paths) -> ``ScalarValue``
- existing tree nodes -> passed through
- configured entity types -> back into the engine
- mappings -> ``StructureValue`` without a type tag
- sequences, sets and iterators -> ``SequenceValue``
- anything else -> back into the engine (default field walk)

Re-entering the engine keeps nested values consistent with the
top-level rules. A depth guard bounds self-referencing graphs.
"""

from __future__ import annotations

import datetime
import functools
import logging
import uuid
from collections.abc import Callable, Iterator, Mapping, Sequence, Set
from decimal import Decimal
from enum import Enum
from fractions import Fraction
from pathlib import PurePath
from typing import Any

from logshape.domain.registry import ConfigurationRegistry
from logshape.domain.values import (
    LOG_VALUE_TYPES,
    LogProperty,
    LogValue,
    ScalarValue,
    SequenceValue,
    StructureValue,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 10

SCALAR_TYPES: tuple[type, ...] = (
    str,
    bytes,
    bytearray,
    bool,
    int,
    float,
    complex,
    Decimal,
    Fraction,
    uuid.UUID,
    datetime.date,
    datetime.time,
    datetime.timedelta,
    datetime.tzinfo,
    Enum,
    PurePath,
)

StructureEntity = Callable[[Any, int], LogValue]


class ValueRealizer:
    """Turn raw values into tree nodes, delegating entities to the engine.

    Parameters:
        registry: Used to route configured types straight to the engine,
            even when they are also iterable.
        structure_entity: Engine callback ``(entity, depth) -> node``.
        max_depth: Nesting depth past which values are captured as their
            ``str()`` instead of being walked.
    """

    def __init__(
        self,
        registry: ConfigurationRegistry,
        structure_entity: StructureEntity,
        *,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        self._registry = registry
        self._structure_entity = structure_entity
        self._max_depth = max_depth

    @property
    def max_depth(self) -> int:
        return self._max_depth

    def realize(self, value: Any, depth: int = 0) -> LogValue:
        if value is None:
            return ScalarValue.NULL
        if isinstance(value, LOG_VALUE_TYPES):
            return value
        if isinstance(value, SCALAR_TYPES):
            return ScalarValue(value)

        if depth > self._max_depth:
            logger.debug(
                "Depth limit %d reached at %s; capturing as text",
                self._max_depth,
                type(value).__qualname__,
            )
            return ScalarValue(str(value))

        if self._registry.is_configured(type(value)):
            return self._structure_entity(value, depth)
        if isinstance(value, Mapping):
            return StructureValue(
                tuple(LogProperty(str(key), self.realize(item, depth + 1)) for key, item in value.items())
            )
        if isinstance(value, (Sequence, Set, Iterator)):
            return SequenceValue(tuple(self.realize(item, depth + 1) for item in value))
        return self._structure_entity(value, depth)

    def bind(self, depth: int) -> Callable[[Any], LogValue]:
        """Return a one-argument realizer fixed at *depth*."""
        return functools.partial(self.realize, depth=depth)
