"""Logging configuration and utilities."""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

import structlog
import colorlog
from structlog.typing import Processor


# Loggers that only matter when debugging the host server
NOISY_LOGGERS = ("aiohttp.access", "aiohttp.server", "asyncio")

LOG_COLORS = {
    'DEBUG': 'cyan',
    'INFO': 'green',
    'WARNING': 'yellow',
    'ERROR': 'red',
    'CRITICAL': 'red,bg_white',
}


def setup_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    log_file: Optional[str] = None
) -> None:
    """Configure structlog on top of the standard library root logger.

    Arguments override the ``LOG_*`` settings. Calling this again replaces
    the handlers installed by the previous call.
    """
    from ..config.settings import get_settings

    settings = get_settings()

    level_name = (log_level or settings.logging.level).upper()
    format_type = log_format or settings.logging.format
    file_path = log_file or settings.logging.file_path
    level = getattr(logging, level_name, logging.INFO)

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
    root_logger.setLevel(level)

    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if format_type == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        # Colour comes from the colorlog handler
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    if file_path:
        root_logger.addHandler(create_file_handler(file_path, level))
    root_logger.addHandler(create_console_handler(level))

    if level > logging.DEBUG:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


def create_file_handler(file_path: str, level: int) -> logging.Handler:
    """Rotating file handler; rendered structlog lines are written as-is."""
    Path(file_path).parent.mkdir(parents=True, exist_ok=True)

    file_handler = logging.handlers.RotatingFileHandler(
        file_path,
        maxBytes=5 * 1024 * 1024,  # 5MB
        backupCount=3,
        encoding="utf-8"
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter("%(message)s"))
    return file_handler


def create_console_handler(level: int) -> logging.Handler:
    """Coloured handler on stderr, leaving stdout to sync reports."""
    console_handler = colorlog.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(
        colorlog.ColoredFormatter("%(log_color)s%(message)s", reset=True, log_colors=LOG_COLORS)
    )
    return console_handler


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


def log_async_execution_time(func):
    """Decorator to log how long an async call took.

    Success is logged at debug level; failures are logged as warnings and
    re-raised.
    """
    import time
    import functools

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        logger = get_logger(func.__qualname__)
        start_time = time.monotonic()

        try:
            result = await func(*args, **kwargs)
        except Exception as e:
            logger.warning(
                "Call failed",
                function=func.__qualname__,
                elapsed=f"{time.monotonic() - start_time:.3f}s",
                error=str(e)
            )
            raise

        logger.debug(
            "Call finished",
            function=func.__qualname__,
            elapsed=f"{time.monotonic() - start_time:.3f}s"
        )
        return result

    return wrapper
