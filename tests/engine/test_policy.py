"""Tests for DestructuringPolicy construction and delegation."""

from __future__ import annotations

import pytest

from logshape.authoring.builders import DestructuringBuilder
from logshape.config.settings import DestructuringOptions
from logshape.domain.values import ScalarValue, StructureValue
from logshape.engine.policy import DestructuringPolicy
from tests.models import Counter, Employee


class EmployeePolicy(DestructuringPolicy):
    def configure(self, builder: DestructuringBuilder) -> None:
        builder.register_type(Employee, lambda e: e.field("salary").ignore())


class TestDestructuringPolicy:
    def test_abstract(self) -> None:
        with pytest.raises(TypeError):
            DestructuringPolicy()  # type: ignore[abstract]

    def test_configure_builds_registry(self) -> None:
        policy = EmployeePolicy()
        assert Employee in policy.registry
        tree = policy.destructure(Employee(id=1, name="Ann", salary=5))
        assert isinstance(tree, StructureValue)
        assert "salary" not in tree

    def test_default_options(self) -> None:
        policy = EmployeePolicy()
        assert policy.options == DestructuringOptions()

    def test_explicit_options(self) -> None:
        policy = EmployeePolicy(DestructuringOptions(omit_type_label=True))
        tree = policy.destructure(Counter("a", 1))
        assert isinstance(tree, StructureValue)
        assert tree.type_tag is None

    def test_keyword_overrides_merge_with_options(self) -> None:
        policy = EmployeePolicy(DestructuringOptions(omit_type_label=True), suppress_null_fields=True)
        assert policy.options.omit_type_label is True
        assert policy.options.suppress_null_fields is True

    def test_options_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOGSHAPE_SUPPRESS_NULL_FIELDS", "true")
        tree = EmployeePolicy().destructure(Employee(id=1, name="Ann"))
        assert isinstance(tree, StructureValue)
        assert "department" not in tree

    def test_destructure_none_rejected(self) -> None:
        with pytest.raises(TypeError):
            EmployeePolicy().destructure(None)

    def test_realize_accepts_none(self) -> None:
        assert EmployeePolicy().realize(None) == ScalarValue.NULL

    def test_max_depth_forwarded(self) -> None:
        policy = EmployeePolicy(max_depth=0)
        assert policy.realize([[1]]) == policy.engine.realize([[1]])
        tree = policy.realize([[1]])
        assert tree.elements[0] == ScalarValue("[1]")  # type: ignore[union-attr]

    def test_configure_called_once(self) -> None:
        calls: list[DestructuringBuilder] = []

        class CountingPolicy(DestructuringPolicy):
            def configure(self, builder: DestructuringBuilder) -> None:
                calls.append(builder)

        policy = CountingPolicy()
        policy.destructure(Counter("a", 1))
        policy.destructure(Counter("b", 2))
        assert len(calls) == 1
