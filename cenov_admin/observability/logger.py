"""
Logger configuration.

A single stdout handler with the correlation id in every line; the level
comes from LOG_LEVEL.

Dependencies: logging (stdlib), cenov_admin.configs
System role: Centralized logging configuration
"""

import logging
import sys

from cenov_admin.configs import get_settings
from cenov_admin.observability.correlation import CorrelationIdFilter

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(correlation_id)s] %(message)s"

# Libraries that log every statement or request at INFO
_QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "asyncio", "openpyxl")


def configure_logging(level: int | None = None) -> None:
    """
    Install the stdout handler on the root logger, replacing existing ones.

    Args:
        level: Root log level, defaults to the configured LOG_LEVEL
    """
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(CorrelationIdFilter())
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    root_logger.addHandler(handler)
    root_logger.setLevel(get_settings().logging_level if level is None else level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
