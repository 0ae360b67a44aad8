"""Engine layer: the resolution engine, its value realizer and the policy base."""

from logshape.engine.policy import DestructuringPolicy
from logshape.engine.realize import ValueRealizer
from logshape.engine.resolver import DestructuringEngine

__all__ = ["DestructuringEngine", "DestructuringPolicy", "ValueRealizer"]
