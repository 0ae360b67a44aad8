"""Field selectors: resolve ``"name"`` or ``lambda e: e.name`` to a field name.

Lambda selectors are evaluated once against a recording proxy, so the
entity type is never instantiated. Only single-level access is allowed:
``"address.city"`` and ``lambda e: e.address.city`` are rejected with a
pointer to nested-entity configuration instead.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

FieldSelector = str | Callable[[Any], Any]


class _PathRecorder:
    """Records the attribute chain a selector lambda walks."""

    __slots__ = ("_path",)

    def __init__(self, path: list[str]) -> None:
        object.__setattr__(self, "_path", path)

    def __getattr__(self, name: str) -> _PathRecorder:
        self._path.append(name)
        return self

    def __setattr__(self, name: str, value: Any) -> None:
        msg = "Field selectors must only read an attribute"
        raise TypeError(msg)


def resolve_field_name(selector: FieldSelector) -> str:
    """Return the single field name *selector* designates.

    Raises:
        ValueError: For empty, private, or multi-segment selectors, and
            lambdas that do anything other than read one attribute.
        TypeError: If *selector* is neither a string nor a callable.
    """
    if isinstance(selector, str):
        path = selector.strip().split(".")
    elif callable(selector):
        path = _record_path(selector)
    else:
        msg = f"Field selector must be a name or a callable, got {type(selector).__name__}"
        raise TypeError(msg)

    if len(path) > 1:
        dotted = ".".join(path)
        msg = (
            f"Nested field paths are not allowed ({dotted!r}). Select a single-level "
            "field or configure the inner entity with nested()"
        )
        raise ValueError(msg)

    name = path[0] if path else ""
    if not name:
        msg = "Field selector must name a field"
        raise ValueError(msg)
    if name.startswith("_"):
        msg = f"Field {name!r} is private and never destructured"
        raise ValueError(msg)
    return name


def _record_path(selector: Callable[[Any], Any]) -> list[str]:
    path: list[str] = []
    recorder = _PathRecorder(path)
    try:
        result = selector(recorder)
    except Exception as exc:
        msg = "Field selector must be a plain attribute access such as 'lambda e: e.name'"
        raise ValueError(msg) from exc
    if result is not recorder:
        msg = "Field selector must return the selected attribute, e.g. 'lambda e: e.name'"
        raise ValueError(msg)
    return path
