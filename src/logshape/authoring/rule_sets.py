"""Reusable per-type rule sets.

A rule set bundles the configuration of one entity type in a class, so
it can be applied by hand, discovered in a module/package, or shipped
by a plugin::

    class EmployeeRuleSet(EntityRuleSet[Employee]):
        def configure(self, builder: EntityBuilder[Employee]) -> None:
            builder.field(lambda e: e.salary).ignore().apply_when_not_null()

The target type comes from the generic parameter, or from an explicit
``entity_type`` class attribute when the class is not parameterized.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar, Generic, TypeVar, get_args, get_origin

if TYPE_CHECKING:
    from logshape.authoring.builders import EntityBuilder

T = TypeVar("T")


class EntityRuleSet(ABC, Generic[T]):
    """Abstract base for the rules of a single entity type."""

    entity_type: ClassVar[type | None] = None

    @abstractmethod
    def configure(self, builder: EntityBuilder[T]) -> None:
        """Declare the field rules for the target type on *builder*."""
        ...

    @classmethod
    def target_type(cls) -> type:
        """The entity type this rule set configures.

        Raises:
            TypeError: If neither ``entity_type`` nor a concrete generic
                parameter identifies a class.
        """
        if cls.entity_type is not None:
            return cls.entity_type

        for klass in cls.__mro__:
            for base in klass.__dict__.get("__orig_bases__", ()):
                origin = get_origin(base)
                if not (isinstance(origin, type) and issubclass(origin, EntityRuleSet)):
                    continue
                args: tuple[Any, ...] = get_args(base)
                if args and isinstance(args[0], type):
                    return args[0]

        msg = (
            f"Rule set {cls.__qualname__} does not declare its entity type; "
            "subclass EntityRuleSet[YourType] or set entity_type"
        )
        raise TypeError(msg)
