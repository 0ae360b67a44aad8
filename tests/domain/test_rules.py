"""Tests for field rule semantics, independent of the engine."""

from __future__ import annotations

from typing import Any

import pytest

from logshape.domain.masking import DefaultMaskingProcessor, MaskingOptions
from logshape.domain.rules import (
    UNSELECTED_PLACEHOLDER,
    EntityConfiguration,
    IgnoreRule,
    MaskRule,
    RenameRule,
    ScalarRule,
    UnselectedRule,
)
from logshape.domain.values import LogProperty, LogValue, ScalarValue, SequenceValue
from tests.models import Mutable


def _realize(value: Any) -> LogValue:
    if isinstance(value, list):
        return SequenceValue(tuple(ScalarValue(v) for v in value))
    return ScalarValue(value)


class _RefusingProcessor:
    def try_mask(self, value: str | None) -> str | None:
        return None


class TestRulePredicate:
    def test_no_predicate_always_applies(self) -> None:
        assert RenameRule(alias="x").applies_to(object())

    def test_predicate_receives_entity(self) -> None:
        seen: list[Any] = []
        rule = RenameRule(alias="x", predicate=lambda e: seen.append(e) or True)
        entity = object()
        assert rule.applies_to(entity)
        assert seen == [entity]

    def test_predicate_failure_propagates(self) -> None:
        rule = RenameRule(alias="x", predicate=lambda e: e.missing)
        with pytest.raises(AttributeError):
            rule.applies_to(object())


class TestSimpleRules:
    def test_ignore_produces_nothing(self) -> None:
        assert IgnoreRule(alias="salary").apply(100, _realize) is None

    def test_rename_uses_realize(self) -> None:
        prop = RenameRule(alias="full_name").apply("Ann", _realize)
        assert prop == LogProperty("full_name", ScalarValue("Ann"))

    def test_rename_null(self) -> None:
        prop = RenameRule(alias="dept").apply(None, _realize)
        assert prop == LogProperty("dept", ScalarValue(None))

    def test_scalar_keeps_reference(self) -> None:
        payload = Mutable(["a"])
        prop = ScalarRule(alias="payload").apply(payload, _realize)
        assert prop is not None
        assert prop.value.value is payload  # type: ignore[union-attr]

    def test_mutable_scalar_snapshots_text(self) -> None:
        payload = Mutable(["a", "b"])
        prop = ScalarRule(alias="payload", mutable=True).apply(payload, _realize)
        payload.items.append("c")
        assert prop == LogProperty("payload", ScalarValue("a,b"))

    def test_scalar_null(self) -> None:
        assert ScalarRule(alias="x", mutable=True).capture(None) is ScalarValue.NULL

    def test_unselected_emits_placeholder(self) -> None:
        prop = UnselectedRule(alias="id").apply(7, _realize)
        assert prop == LogProperty("id", ScalarValue(UNSELECTED_PLACEHOLDER))


class TestMaskRule:
    def test_masks_string(self) -> None:
        rule = MaskRule(alias="pw", processor=DefaultMaskingProcessor(MaskingOptions(mask_length=4)))
        assert rule.apply("hunter2", _realize) == LogProperty("pw", ScalarValue("****"))

    def test_declined_mask_keeps_original(self) -> None:
        rule = MaskRule(alias="pw", processor=_RefusingProcessor())
        assert rule.apply("hunter2", _realize) == LogProperty("pw", ScalarValue("hunter2"))

    def test_blank_string_left_as_is(self) -> None:
        rule = MaskRule(alias="pw", processor=DefaultMaskingProcessor())
        assert rule.apply("  ", _realize) == LogProperty("pw", ScalarValue("  "))

    def test_null(self) -> None:
        rule = MaskRule(alias="pw", processor=DefaultMaskingProcessor())
        assert rule.apply(None, _realize) == LogProperty("pw", ScalarValue.NULL)

    def test_string_list_masked_elementwise(self) -> None:
        rule = MaskRule(alias="tags", processor=DefaultMaskingProcessor())
        prop = rule.apply(["First", "Second", "Third"], _realize)
        assert prop == LogProperty("tags", SequenceValue((ScalarValue("*" * 10),) * 3))

    def test_string_set_masked(self) -> None:
        rule = MaskRule(alias="tags", processor=DefaultMaskingProcessor(MaskingOptions(mask_length=2)))
        prop = rule.apply(frozenset({"a", "b"}), _realize)
        assert prop is not None
        assert prop.value == SequenceValue((ScalarValue("**"), ScalarValue("**")))

    def test_non_string_value_realized(self) -> None:
        rule = MaskRule(alias="salary", processor=DefaultMaskingProcessor())
        assert rule.apply(100, _realize) == LogProperty("salary", ScalarValue(100))

    def test_mixed_list_realized(self) -> None:
        rule = MaskRule(alias="mixed", processor=DefaultMaskingProcessor())
        prop = rule.apply(["a", 1], _realize)
        assert prop == LogProperty("mixed", SequenceValue((ScalarValue("a"), ScalarValue(1))))


class TestEntityConfiguration:
    def test_fields_read_only(self) -> None:
        config = EntityConfiguration(fields={"id": IgnoreRule(alias="id")})
        with pytest.raises(TypeError):
            config.fields["name"] = IgnoreRule(alias="name")  # type: ignore[index]

    def test_source_mapping_copied(self) -> None:
        source = {"id": IgnoreRule(alias="id")}
        config = EntityConfiguration(fields=source)
        source.clear()
        assert config.rule_for("id") == IgnoreRule(alias="id")

    def test_rule_for_unknown_field(self) -> None:
        assert EntityConfiguration().rule_for("missing") is None
