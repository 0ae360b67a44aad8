"""Render value trees into builtin Python containers.

Sinks such as structlog's ``JSONRenderer`` expect plain dicts and lists;
this adapter flattens the tree:

- ``StructureValue`` -> ``dict`` (type tag under ``type_key`` when present)
- ``SequenceValue`` -> ``list``
- ``ScalarValue`` -> the wrapped value
"""

from __future__ import annotations

from typing import Any

from logshape.domain.values import LogValue, ScalarValue, SequenceValue, StructureValue

DEFAULT_TYPE_KEY = "_type"


def render(node: LogValue, *, type_key: str | None = DEFAULT_TYPE_KEY) -> Any:
    """Convert *node* into dicts, lists and scalars.

    Args:
        node: The tree to render.
        type_key: Key for the structure's type tag; None drops tags.
    """
    if isinstance(node, ScalarValue):
        return node.value
    if isinstance(node, SequenceValue):
        return [render(element, type_key=type_key) for element in node.elements]
    if isinstance(node, StructureValue):
        rendered: dict[str, Any] = {}
        if type_key is not None and node.type_tag is not None:
            rendered[type_key] = node.type_tag
        for prop in node.properties:
            rendered[prop.name] = render(prop.value, type_key=type_key)
        return rendered
    msg = f"Not a value tree node: {type(node).__name__}"
    raise TypeError(msg)
