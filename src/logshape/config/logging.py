"""Route structlog and stdlib records through one formatter on stderr.

Records render as console text unless ``log_json`` is set, in which case
each record is one JSON object per line. A policy, when passed, adds a
:class:`DestructuringProcessor` to the processors both logger families
share, so ``@``-prefixed values are shaped before rendering.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

import structlog

from logshape.output.processors import DestructuringProcessor

if TYPE_CHECKING:
    from logshape.engine.policy import DestructuringPolicy

PACKAGE_LOGGER = "logshape"


def _shared_chain(policy: DestructuringPolicy | None) -> list[structlog.types.Processor]:
    chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if policy is not None:
        chain.append(DestructuringProcessor(policy))
    return chain


def _final_renderer(log_json: bool) -> structlog.types.Processor:
    if log_json:
        # captured values may still hold objects json cannot encode
        return structlog.processors.JSONRenderer(default=str)
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
    policy: DestructuringPolicy | None = None,
) -> None:
    """Install a single stderr handler on the root logger.

    Calling it again replaces the previous handler.

    Args:
        verbose: Let ``logshape`` loggers emit DEBUG records; otherwise WARNING and up.
        log_json: Render JSON lines rather than console text.
        policy: Policy used to destructure ``@``-prefixed event values.
    """
    chain = _shared_chain(policy)

    structlog.configure(
        processors=[*chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=chain,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _final_renderer(log_json),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.WARNING)

    logging.getLogger(PACKAGE_LOGGER).setLevel(logging.DEBUG if verbose else logging.WARNING)
