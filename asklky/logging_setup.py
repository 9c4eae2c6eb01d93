"""structlog configuration shared by the web app and the terminal client."""
import logging
import sys

import structlog

from asklky import config


def configure_logging(level: str = None, fmt: str = None) -> None:
    """Configure structlog on top of the stdlib logging machinery.

    Args:
        level: Log level name (defaults to config.LOG_LEVEL)
        fmt: "json" or "console" (defaults to config.LOG_FORMAT)
    """
    level = (level or config.LOG_LEVEL).upper()
    fmt = fmt or config.LOG_FORMAT

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level, logging.INFO),
    )

    renderer = (
        structlog.dev.ConsoleRenderer()
        if fmt == "console"
        else structlog.processors.JSONRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
    )
