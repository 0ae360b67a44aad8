"""Shared pytest fixtures and test helpers for logshape tests."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from logshape.authoring.builders import DestructuringBuilder, EntityBuilder
from logshape.config.settings import DestructuringOptions
from logshape.domain.values import LogValue, ScalarValue, SequenceValue, StructureValue
from logshape.engine.resolver import DestructuringEngine


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep ``LOGSHAPE_*`` variables from the developer's shell out of tests."""
    monkeypatch.delenv("LOGSHAPE_OMIT_TYPE_LABEL", raising=False)
    monkeypatch.delenv("LOGSHAPE_SUPPRESS_NULL_FIELDS", raising=False)


@pytest.fixture
def builder() -> DestructuringBuilder:
    return DestructuringBuilder()


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def make_engine(
    registrations: dict[type, Callable[[EntityBuilder[Any]], object]] | None = None,
    **options: Any,
) -> DestructuringEngine:
    """Build an engine from ``{type: configure}`` plus option overrides."""
    builder = DestructuringBuilder()
    for entity_type, configure in (registrations or {}).items():
        builder.register_type(entity_type, configure)
    return DestructuringEngine(builder.build(), DestructuringOptions(**options))


def plain(node: LogValue) -> Any:
    """Collapse a tree into builtins, keeping the type tag under ``_type``."""
    if isinstance(node, ScalarValue):
        return node.value
    if isinstance(node, SequenceValue):
        return [plain(element) for element in node.elements]
    assert isinstance(node, StructureValue)
    result: dict[str, Any] = {}
    if node.type_tag is not None:
        result["_type"] = node.type_tag
    for prop in node.properties:
        result[prop.name] = plain(prop.value)
    return result
