"""Logging setup: structlog events and stdlib records share one stderr handler.

stdout carries command results only.  ``--log-json`` switches the handler
to one JSON object per line; ``-v`` lowers the ``maelstrom`` logger to DEBUG.
Third-party loggers stay at WARNING.
"""

from __future__ import annotations

import logging
import sys

import structlog

_PRE_CHAIN: tuple[structlog.types.Processor, ...] = (
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
)


def _stderr_handler(log_json: bool) -> logging.Handler:
    final: structlog.types.Processor
    if log_json:
        final = structlog.processors.JSONRenderer()
    else:
        final = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=list(_PRE_CHAIN),
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, final],
        )
    )
    return handler


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> None:
    """Route all logging to stderr; safe to call more than once."""
    structlog.configure(
        processors=[*_PRE_CHAIN, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    root = logging.getLogger()
    root.handlers[:] = [_stderr_handler(log_json)]
    root.setLevel(logging.WARNING)
    logging.getLogger("maelstrom").setLevel(logging.DEBUG if verbose else logging.WARNING)
