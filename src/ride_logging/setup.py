"""Root logger configuration for the ride service."""

import logging
import sys
from typing import TextIO

from .filters import ContextFilter, DefaultCorrelationFilter, PIIFilter
from .formatters import DevFormatter, JSONFormatter

HANDLER_NAME = "ride-service"

QUIET_LOGGERS = ("sqlalchemy.engine", "uvicorn.access", "httpx")


def setup_logging(
    level: str = "INFO",
    json_output: bool = False,
    environment: str = "development",
    stream: TextIO | None = None,
) -> logging.Handler:
    """Install the service handler on the root logger.

    Calling again replaces the handler installed earlier; handlers added
    by other code (test capture, uvicorn) are left alone.
    """
    root = logging.getLogger()
    for existing in [h for h in root.handlers if h.get_name() == HANDLER_NAME]:
        root.removeHandler(existing)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(JSONFormatter(environment) if json_output else DevFormatter())
    for log_filter in (ContextFilter(), DefaultCorrelationFilter(), PIIFilter()):
        handler.addFilter(log_filter)

    root.addHandler(handler)
    root.setLevel(level.upper())
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return handler
