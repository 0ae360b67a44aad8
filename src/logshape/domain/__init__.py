"""Domain layer: the value tree and the rules that produce it.

This layer depends only on stdlib and pydantic.
It must never import from engine, authoring, plugins, output, or config.
"""
