from __future__ import annotations
import logging
import sys

from loguru import logger
from .config import config

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level}</level> | "
    "{extra[component]} | {message}"
)

# Records emitted without a bound component (uvicorn, third-party) still format
logger.remove()
logger.configure(extra={"component": "app"})
logger.add(
    sys.stdout,
    level=config.log_level,
    enqueue=True,
    backtrace=False,
    diagnose=False,
    colorize=True,
    format=LOG_FORMAT,
)
logger.add(
    config.log_file,
    rotation="20 MB",
    retention="14 days",
    compression="zip",
    level=config.log_level,
    enqueue=True,
    serialize=True,  # JSON logs for better analysis
)


class InterceptHandler(logging.Handler):
    """Forward standard-library log records (uvicorn, elastic_transport) to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.bind(component=record.name).opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def route_stdlib_logging(*names: str) -> None:
    """Send the named stdlib loggers through loguru instead of their own handlers."""
    handler = InterceptHandler()
    for name in names:
        std_logger = logging.getLogger(name)
        std_logger.handlers = [handler]
        std_logger.propagate = False


def get_logger(name: str = "app"):
    return logger.bind(component=name)
