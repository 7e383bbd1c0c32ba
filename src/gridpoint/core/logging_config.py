"""
GridPoint Logging Configuration

Every module logs under the ``gridpoint`` namespace, so the whole pipeline
(crop, aggregate, subset, extract) is controlled from one logger. Nothing is
printed until :func:`setup_logging` or :func:`set_log_level` is called.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

PACKAGE_LOGGER = 'gridpoint'

DEFAULT_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DEFAULT_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

LevelSpec = Union[int, str]


def _coerce_level(level: LevelSpec, fallback: int) -> int:
    """Map a level name such as 'debug' to its logging constant."""
    if isinstance(level, str):
        return getattr(logging, level.upper(), fallback)
    return level


def get_logger(name: str) -> logging.Logger:
    """
    Get a module logger nested under the package logger.

    Args:
        name: Dotted module path relative to the package, e.g.
              'coordinates.crs_handler' (an already qualified name is kept)

    Returns:
        logging.Logger: Logger instance
    """
    if name == PACKAGE_LOGGER or name.startswith(f'{PACKAGE_LOGGER}.'):
        return logging.getLogger(name)
    return logging.getLogger(f'{PACKAGE_LOGGER}.{name}')


def setup_logging(
    level: LevelSpec = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
    format_string: Optional[str] = None,
    date_format: Optional[str] = None
) -> logging.Logger:
    """
    Send GridPoint log messages to stdout and, optionally, a file.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        level: Logging level name or constant
        log_file: Optional log file path (parent directories are created)
        format_string: Message format (default: time, logger, level, message)
        date_format: Timestamp format

    Returns:
        logging.Logger: The package logger

    Examples:
        >>> from gridpoint import setup_logging
        >>> setup_logging()                      # stage summaries
        >>> setup_logging(level='DEBUG')         # per-bucket and CRS details
        >>> setup_logging(log_file='runs/extract.log')
    """
    level = _coerce_level(level, logging.INFO)
    formatter = logging.Formatter(
        format_string or DEFAULT_LOG_FORMAT,
        datefmt=date_format or DEFAULT_DATE_FORMAT
    )

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path))

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    logger.handlers.clear()
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    # Handlers are ours; keep messages out of the root logger
    logger.propagate = False

    if log_file:
        logger.info("Logging to file: %s", log_file)
    return logger


def set_log_level(level: LevelSpec) -> None:
    """
    Change the level of the package logger and its handlers.

    Args:
        level: Logging level name or constant

    Examples:
        >>> from gridpoint import set_log_level
        >>> set_log_level('DEBUG')
    """
    level = _coerce_level(level, logging.WARNING)
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(level)


# Silent until configured
_package_logger = logging.getLogger(PACKAGE_LOGGER)
if not _package_logger.handlers:
    _package_logger.addHandler(logging.NullHandler())
_package_logger.setLevel(logging.WARNING)
