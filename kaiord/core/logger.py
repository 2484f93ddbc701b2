"""Logger configuration for kaiord."""

import sys
from pathlib import Path
from typing import Any, Protocol

from loguru import logger

from kaiord.config.settings import Settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message} | {extra}"


def setup_logger(
    level: str = "INFO",
    log_file: str | None = None,
    rotation: str = "10 MB",
    retention: str = "7 days",
) -> None:
    """Configure loguru with a stderr sink and an optional rotating file sink.

    Library modules only call ``logger``; configuring sinks is left to the
    application (the CLI calls this once at startup).

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to log file. If None, only console logging.
        rotation: Log rotation size (e.g., "10 MB", "1 day")
        retention: Log retention period (e.g., "7 days", "1 month")
    """
    logger.remove()

    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level, colorize=True)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        # File sink keeps structured context from logger calls in {extra}
        logger.add(
            log_path,
            format=FILE_FORMAT,
            level=level,
            rotation=rotation,
            retention=retention,
            compression="zip",
            backtrace=True,
            diagnose=False,
        )

    logger.debug(f"Logger initialized with level={level}")


def setup_logger_from_settings(config: Settings, debug: bool = False) -> None:
    setup_logger(level="DEBUG" if debug else config.log_level, log_file=config.log_file)


class StructuredLogger(Protocol):
    """Logger accepted by the TCX pipeline; loguru's ``logger`` satisfies it.

    Context is passed as keyword arguments and is not consumed by the caller.
    """

    def debug(self, message: str, **context: Any) -> None: ...

    def info(self, message: str, **context: Any) -> None: ...

    def warning(self, message: str, **context: Any) -> None: ...

    def error(self, message: str, **context: Any) -> None: ...
