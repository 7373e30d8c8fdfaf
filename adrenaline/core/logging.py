"""
Logging configuration

Engine modules log through the standard library; the host process calls
``setup_logging`` once to hand those records to loguru sinks.
"""
import logging
import sys
from pathlib import Path
from typing import Optional

from loguru import logger
from adrenaline.core.config import settings

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[source]}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[source]}:{function}:{line} - {message}"

# standard-library loggers that must reach loguru through the root
FORWARDED_LOGGERS = ("adrenaline", "uvicorn", "fastapi")


class InterceptHandler(logging.Handler):
    """
    Forward standard-library records to loguru, keeping the caller's frame
    and the originating logger name as ``extra[source]``.
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # walk past the logging module's own frames
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).bind(source=record.name).log(
            level, record.getMessage()
        )


def file_logging_enabled() -> bool:
    return settings.LOG_TO_FILE or settings.ENVIRONMENT == "production"


def _intercept_standard_logging(level: str) -> None:
    logging.root.handlers = [InterceptHandler()]
    logging.root.setLevel(level)

    for name in list(logging.root.manager.loggerDict):
        if name.startswith(FORWARDED_LOGGERS):
            std_logger = logging.getLogger(name)
            std_logger.handlers = []
            std_logger.propagate = True


def setup_logging(level: Optional[str] = None, log_dir: Optional[str] = None) -> None:
    """
    Install loguru sinks from settings.

    Console output is colored text, or JSON lines when ``LOG_JSON`` is set.
    A daily-rotated file sink is added in production, when ``LOG_TO_FILE``
    is set, or when ``log_dir`` is passed explicitly.
    """
    level = (level or settings.LOG_LEVEL).upper()

    logger.remove()
    logger.configure(extra={"source": "adrenaline"})

    logger.add(
        sys.stdout,
        level=level,
        enqueue=True,
        colorize=not settings.LOG_JSON,
        serialize=settings.LOG_JSON,
        format=CONSOLE_FORMAT,
    )

    if log_dir or file_logging_enabled():
        directory = Path(log_dir or settings.LOG_DIR)
        directory.mkdir(parents=True, exist_ok=True)
        logger.add(
            directory / "adrenaline_{time:YYYY-MM-DD}.log",
            level=level,
            rotation="00:00",
            retention=settings.LOG_RETENTION,
            enqueue=True,
            serialize=settings.LOG_JSON,
            format=FILE_FORMAT,
        )

    _intercept_standard_logging(level)

    logger.info(
        f"Logging configured - level {level}, environment {settings.ENVIRONMENT}, "
        f"file sink {'on' if log_dir or file_logging_enabled() else 'off'}"
    )
