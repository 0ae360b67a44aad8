"""structlog processor applying a destructuring policy to event dicts.

Keys carrying the destructure prefix (``@`` by default) are replaced by
the rendered tree under the bare key, mirroring the ``{@value}``
capture operator of message-template loggers::

    log.info("employee.updated", **{"@employee": request})
    # -> {"event": "employee.updated", "employee": {"_type": "...", ...}}

Keys without the prefix pass through untouched. A value whose
destructuring raises is replaced by a placeholder and a warning is
logged; the log call itself never fails.
"""

from __future__ import annotations

import logging
from collections.abc import MutableMapping
from typing import TYPE_CHECKING, Any

from logshape.output.renderers import DEFAULT_TYPE_KEY, render

if TYPE_CHECKING:
    from logshape.engine.policy import DestructuringPolicy

DEFAULT_PREFIX = "@"

CAPTURE_FAILURE_TEMPLATE = "Capturing the property value threw an exception: '{}'."

logger = logging.getLogger(__name__)


class DestructuringProcessor:
    """Destructure prefixed event-dict values with *policy*.

    Parameters:
        policy: The policy holding the rule registry.
        prefix: Marker identifying values to destructure.
        type_key: Output key for type tags (None to drop them).
    """

    def __init__(
        self,
        policy: DestructuringPolicy,
        *,
        prefix: str = DEFAULT_PREFIX,
        type_key: str | None = DEFAULT_TYPE_KEY,
    ) -> None:
        if not prefix:
            msg = "Destructure prefix must not be empty"
            raise ValueError(msg)
        self._policy = policy
        self._prefix = prefix
        self._type_key = type_key

    def __call__(
        self,
        logger: Any,
        method_name: str,
        event_dict: MutableMapping[str, Any],
    ) -> MutableMapping[str, Any]:
        marked = [key for key in event_dict if isinstance(key, str) and key.startswith(self._prefix)]
        for key in marked:
            value = event_dict.pop(key)
            event_dict[key[len(self._prefix) :]] = self._capture(key, value)
        return event_dict

    def _capture(self, key: str, value: Any) -> Any:
        try:
            return render(self._policy.realize(value), type_key=self._type_key)
        except Exception as exc:
            logger.warning(
                "Failed to destructure %s (%s)",
                key,
                type(value).__qualname__,
                exc_info=True,
            )
            return CAPTURE_FAILURE_TEMPLATE.format(type(exc).__name__)
