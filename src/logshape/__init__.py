"""logshape: rule-driven destructuring of objects into structured log values."""

from logshape.authoring.builders import DestructuringBuilder, EntityBuilder
from logshape.authoring.rule_sets import EntityRuleSet
from logshape.config.settings import DestructuringOptions
from logshape.domain.masking import DefaultMaskingProcessor, MaskingOptions, MaskingProcessor
from logshape.domain.values import LogProperty, LogValue, ScalarValue, SequenceValue, StructureValue
from logshape.engine.policy import DestructuringPolicy
from logshape.engine.resolver import DestructuringEngine
from logshape.output.processors import DestructuringProcessor
from logshape.output.renderers import render
from logshape.plugins.manager import PluginManager

__version__ = "0.1.0"

__all__ = [
    "DefaultMaskingProcessor",
    "DestructuringBuilder",
    "DestructuringEngine",
    "DestructuringOptions",
    "DestructuringPolicy",
    "DestructuringProcessor",
    "EntityBuilder",
    "EntityRuleSet",
    "LogProperty",
    "LogValue",
    "MaskingOptions",
    "MaskingProcessor",
    "PluginManager",
    "ScalarValue",
    "SequenceValue",
    "StructureValue",
    "render",
]
