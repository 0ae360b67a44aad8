"""Field enumeration and safe field access.

Fields are the public, readable instance attributes of an entity type,
discovered by walking the MRO from the most-derived class to its bases.
At each level the fields are, in declaration order:

- annotated attributes (``ClassVar``/``InitVar`` and ``_``-prefixed
  names excluded),
- public properties with a getter (including ``cached_property``),
- public ``__slots__`` entries.

The class body keeps the position of defaults and descriptors but not of
bare annotations, so an annotation without a default is placed right
after the annotated field declared before it (or first in the level).

A name seen at a more-derived level hides the same name on a base.
Attributes set only on the instance (plain classes assigning in
``__init__``) follow the declared fields in insertion order.

The declared field list is built once per type and cached; accessors
are ``operator.attrgetter`` callables shared by every call.
"""

from __future__ import annotations

import functools
import inspect
import logging
import operator
import sys
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any, ClassVar, get_origin

logger = logging.getLogger(__name__)

ACCESSOR_FAILURE_TEMPLATE = "The property accessor threw an exception: '{}'."

# Framework bases whose own members are not entity data.
_SKIPPED_MODULES = frozenset({"builtins", "typing", "abc", "_collections_abc"})
_SKIPPED_MODULE_PREFIXES = ("pydantic.", "pydantic_core.")

_CLASS_LEVEL_MARKERS = ("ClassVar", "typing.ClassVar", "InitVar", "dataclasses.InitVar")


@dataclass(frozen=True, slots=True)
class FieldAccessor:
    """A named, pre-built getter for one field."""

    name: str
    getter: Callable[[Any], Any]

    def read(self, instance: Any) -> Any:
        """Read the field, isolating accessor failures.

        A raising getter never aborts destructuring: the failure is
        logged at DEBUG and a diagnostic placeholder string is returned.
        """
        try:
            return self.getter(instance)
        except Exception as exc:
            logger.debug(
                "Field accessor %s.%s raised %s",
                type(instance).__qualname__,
                self.name,
                type(exc).__name__,
                exc_info=True,
            )
            return ACCESSOR_FAILURE_TEMPLATE.format(type(exc).__name__)


if sys.version_info >= (3, 14):
    import annotationlib

    def _own_annotations(cls: type) -> dict[str, Any]:
        return annotationlib.get_annotations(cls, format=annotationlib.Format.FORWARDREF)

else:

    def _own_annotations(cls: type) -> dict[str, Any]:
        return inspect.get_annotations(cls)


def _is_public(name: str) -> bool:
    return bool(name) and not name.startswith("_")


def _is_class_level(annotation: Any) -> bool:
    """True for ``ClassVar``/``InitVar`` annotations, evaluated or not."""
    text = getattr(annotation, "__forward_arg__", annotation)
    if isinstance(text, str):
        return text.startswith(_CLASS_LEVEL_MARKERS)
    if annotation is ClassVar or get_origin(annotation) is ClassVar:
        return True
    return type(annotation).__name__ == "InitVar"


def _is_readable_descriptor(attr: Any) -> bool:
    if isinstance(attr, property):
        return attr.fget is not None
    return isinstance(attr, functools.cached_property) or inspect.ismemberdescriptor(attr)


def _skips(cls: type) -> bool:
    module = getattr(cls, "__module__", "") or ""
    return cls is object or module in _SKIPPED_MODULES or module.startswith(_SKIPPED_MODULE_PREFIXES)


def _level_names(cls: type) -> list[str]:
    """Field names declared directly on *cls*, in declaration order."""
    namespace = vars(cls)
    position = {name: index for index, name in enumerate(namespace)}
    annotated = [
        name
        for name, annotation in _own_annotations(cls).items()
        if _is_public(name) and not _is_class_level(annotation)
    ]
    known = set(annotated)
    descriptors = [
        name
        for name, attr in namespace.items()
        if _is_public(name) and name not in known and _is_readable_descriptor(attr)
    ]

    names: list[str] = []
    pending = iter(descriptors)
    upcoming = next(pending, None)
    for name in annotated:
        # slot descriptors generated for annotated fields sit after the class body
        if name in position and not inspect.ismemberdescriptor(namespace[name]):
            while upcoming is not None and position[upcoming] < position[name]:
                names.append(upcoming)
                upcoming = next(pending, None)
        names.append(name)
    if upcoming is not None:
        names.append(upcoming)
        names.extend(pending)
    return names


@functools.lru_cache(maxsize=None)
def declared_fields(cls: type) -> tuple[FieldAccessor, ...]:
    """Return the declared fields of *cls*, most-derived level first."""
    seen: set[str] = set()
    accessors: list[FieldAccessor] = []
    for level in cls.__mro__:
        if _skips(level):
            continue
        for name in _level_names(level):
            if name in seen:
                continue
            seen.add(name)
            accessors.append(_accessor(name))
    return tuple(accessors)


@functools.lru_cache(maxsize=None)
def _declared_names(cls: type) -> frozenset[str]:
    return frozenset(accessor.name for accessor in declared_fields(cls))


@functools.lru_cache(maxsize=4096)
def _accessor(name: str) -> FieldAccessor:
    return FieldAccessor(name, operator.attrgetter(name))


def iter_fields(instance: Any) -> Iterator[FieldAccessor]:
    """Yield accessors for every field of *instance* in output order."""
    cls = type(instance)
    yield from declared_fields(cls)

    instance_dict = getattr(instance, "__dict__", None)
    if not instance_dict:
        return
    known = _declared_names(cls)
    for name in list(instance_dict):
        if _is_public(name) and name not in known:
            yield _accessor(name)


def field_names(instance: Any) -> list[str]:
    """Names of the fields :func:`iter_fields` would yield for *instance*."""
    return [accessor.name for accessor in iter_fields(instance)]
