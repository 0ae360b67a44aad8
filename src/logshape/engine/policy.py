"""DestructuringPolicy: application-facing entry point.

Subclass, declare rules in :meth:`configure`, construct once at startup
and share. The registry is built in the constructor and never changes
afterwards::

    class AppPolicy(DestructuringPolicy):
        def configure(self, builder: DestructuringBuilder) -> None:
            builder.apply_rule_sets_from_module("myapp.logging_rules")

    policy = AppPolicy(DestructuringOptions(omit_type_label=True))
    tree = policy.destructure(request)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from logshape.authoring.builders import DestructuringBuilder
from logshape.config.settings import DestructuringOptions
from logshape.domain.registry import ConfigurationRegistry
from logshape.domain.values import LogValue
from logshape.engine.realize import DEFAULT_MAX_DEPTH
from logshape.engine.resolver import DestructuringEngine


class DestructuringPolicy(ABC):
    """Abstract base binding a rule configuration to an engine.

    Parameters:
        options: Global options; defaults load from ``LOGSHAPE_*`` env vars.
        max_depth: Nesting depth guard for default value handling.
        **overrides: Option fields overriding *options*
            (e.g. ``suppress_null_fields=True``).
    """

    def __init__(
        self,
        options: DestructuringOptions | None = None,
        *,
        max_depth: int = DEFAULT_MAX_DEPTH,
        **overrides: Any,
    ) -> None:
        resolved = options or DestructuringOptions()
        if overrides:
            resolved = DestructuringOptions(**{**resolved.model_dump(), **overrides})

        builder = DestructuringBuilder()
        self.configure(builder)
        self._engine = DestructuringEngine(builder.build(), resolved, max_depth=max_depth)

    @abstractmethod
    def configure(self, builder: DestructuringBuilder) -> None:
        """Register entity rules on *builder*. Called once, from ``__init__``."""
        ...

    @property
    def engine(self) -> DestructuringEngine:
        return self._engine

    @property
    def registry(self) -> ConfigurationRegistry:
        return self._engine.registry

    @property
    def options(self) -> DestructuringOptions:
        return self._engine.options

    def destructure(self, entity: Any) -> LogValue:
        """Structure *entity* into a value tree (``None`` is rejected)."""
        return self._engine.destructure(entity)

    def realize(self, value: Any) -> LogValue:
        """Structure any value, including ``None``, scalars and collections."""
        return self._engine.realize(value)
