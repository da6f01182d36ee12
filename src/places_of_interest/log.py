"""Structured logging setup for hosts embedding the engine."""

import logging

import structlog
from structlog.types import Processor


def configure_logging(level: int = logging.INFO, json: bool = False) -> None:
    """Route structlog through the standard library logging module.

    Console output suits a terminal; ``json=True`` emits one JSON object per
    line for hosts that collect logs.
    """
    logging.basicConfig(format="%(message)s", level=level)

    renderer: Processor = (
        structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
