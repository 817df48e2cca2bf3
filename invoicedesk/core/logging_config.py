# invoicedesk/core/logging_config.py

import logging
import sys

from loguru import logger

from invoicedesk.core.config import settings

_CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - "
    "<level>{message}</level>"
)

# Loggers that install their own handlers and must be pointed at loguru
_ROUTED = ("uvicorn", "uvicorn.error", "uvicorn.access")

# Per-library floor; our service loggers stay at the configured level
_QUIET = {
    "uvicorn.access": logging.WARNING,
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
}


class InterceptHandler(logging.Handler):
    """Forward stdlib records (service modules, uvicorn, httpx) to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Skip the logging module's own frames so loguru reports the caller
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(level: str | None = None, json: bool | None = None) -> None:
    """
    Install a single loguru stdout sink and route stdlib logging into it.

    ``json`` switches the sink to loguru's serialized records (one JSON
    object per line) for log shippers; both default to the settings.
    """
    level = (level or settings.LOG_LEVEL).upper()
    json = settings.LOG_JSON if json is None else json

    logger.remove()
    if json:
        logger.add(sys.stdout, level=level, serialize=True, backtrace=False, diagnose=False)
    else:
        logger.add(
            sys.stdout,
            format=_CONSOLE_FORMAT,
            level=level,
            colorize=True,
            backtrace=settings.DEBUG,
            diagnose=False,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=getattr(logging, level, logging.INFO), force=True)
    for name in _ROUTED:
        logging.getLogger(name).handlers = [InterceptHandler()]
    for name, floor in _QUIET.items():
        logging.getLogger(name).setLevel(floor)
