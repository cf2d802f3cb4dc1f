"""
Unified logging configuration using Loguru.

Intercepts standard library logging and routes it through Loguru.
Configures file rotation, retention, and compression.

The library never calls this on import; hosts call ``setup_logging()`` once
at startup.
"""

import logging
import sys
from pathlib import Path

from loguru import logger

from tracksync.config import Settings, settings as default_settings


class InterceptHandler(logging.Handler):
    """
    Default handler from examples in loguru documentation.
    See https://loguru.readthedocs.io/en/stable/overview.html#entirely-compatible-with-standard-logging
    """

    def emit(self, record: logging.LogRecord) -> None:
        # Get corresponding Loguru level if it exists
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where originated the logged message
        frame, depth = logging.currentframe(), 2
        while frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(config: Settings | None = None) -> None:
    """Route stdlib logging through Loguru and install console/file sinks."""
    config = config or default_settings

    logging.root.handlers = [InterceptHandler()]
    logging.root.setLevel(logging.DEBUG if config.debug else logging.INFO)

    # httpx logs every request at INFO; keep it but through the same sinks
    for name in list(logging.root.manager.loggerDict.keys()):
        logging.getLogger(name).handlers = []
        logging.getLogger(name).propagate = True

    logger.remove()

    # 1. Console handler (stderr)
    logger.add(
        sys.stderr,
        level="DEBUG" if config.debug else "INFO",
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
    )

    # 2. File handler
    if config.log_file:
        log_file = Path(config.log_file).expanduser()
        log_file.parent.mkdir(parents=True, exist_ok=True)

        logger.add(
            str(log_file),
            rotation="10 MB",
            retention="1 week",
            compression="zip",
            level="DEBUG",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
            enqueue=True,
            backtrace=True,
            diagnose=True,
        )

    logger.info("Logging initialized via Loguru")
