"""
Logging setup for the scollector package.

Modules log through logging.getLogger(__name__); call configure_logging()
once at application startup to attach handlers.
"""

import logging
from pathlib import Path
from typing import Optional, Union


DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Package root logger
logger = logging.getLogger("scollector")


def configure_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Path] = None,
    format_string: Optional[str] = None,
    handler: Optional[logging.Handler] = None,
):
    """
    Configure logging for the scollector package.

    Args:
        level: Logging level (default: INFO). Level names are accepted.
        log_file: Optional file to also write log records to.
        format_string: Optional custom format string.
        handler: Optional custom handler (default: StreamHandler).

    Example:
        from scollector.core.log import configure_logging
        configure_logging(level=logging.DEBUG)
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    formatter = logging.Formatter(format_string or DEFAULT_FORMAT)

    # Replace handlers from a previous call
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
        existing.close()

    if handler is None:
        handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    if log_file:
        log_file = Path(log_file).expanduser()
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.setLevel(level)
    return logger
