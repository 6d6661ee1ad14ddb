"""
sftime Logging Configuration

All sftime modules log below the ``sftime`` logger: re-derived designations
and joins at DEBUG, conversions at INFO, dropped time columns and replaced
adapters at WARNING. The package is silent until ``setup_logging`` attaches
handlers.
"""

import logging
import sys
import warnings
from pathlib import Path
from typing import Optional, Union

from .exceptions import MetadataLossWarning, ParameterError

LOGGER_NAME = 'sftime'
WARNINGS_LOGGER_NAME = 'py.warnings'

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DEFAULT_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

_LEVEL_NAMES = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


def _coerce_level(level: Union[int, str]) -> int:
    """Turn a level name or number into a logging level number."""
    if isinstance(level, str):
        name = level.upper()
        if name not in _LEVEL_NAMES:
            raise ParameterError('level', level, f"Must be one of {', '.join(_LEVEL_NAMES)}")
        return getattr(logging, name)
    return int(level)


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
    format_string: Optional[str] = None,
    date_format: Optional[str] = None,
    capture_warnings: bool = False,
) -> logging.Logger:
    """
    Configure logging for sftime.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
               Can be string or logging constant
        log_file: Optional path to log file
        format_string: Custom format string for log messages
        date_format: Custom date format string
        capture_warnings: Route ``MetadataLossWarning`` (and any other Python
            warning) into the same handlers

    Returns:
        logging.Logger: Configured ``sftime`` logger

    Raises:
        ParameterError: If the level name is unknown

    Examples:
        >>> from sftime import setup_logging
        >>> setup_logging()

        # See every metadata re-derivation
        >>> setup_logging(level='DEBUG')

        # Keep a record of exports that discarded the time designation
        >>> setup_logging(log_file='sftime.log', capture_warnings=True)
    """
    level = _coerce_level(level)
    formatter = logging.Formatter(
        format_string or DEFAULT_FORMAT,
        datefmt=date_format or DEFAULT_DATE_FORMAT,
    )

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Clear existing handlers to avoid duplicates
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

        logger.info(f"Logging to file: {log_path}")

    logger.propagate = False

    if capture_warnings:
        logging.captureWarnings(True)
        # Metadata loss is reported on every export, not once per call site
        warnings.simplefilter('always', MetadataLossWarning)
        warnings_logger = logging.getLogger(WARNINGS_LOGGER_NAME)
        warnings_logger.handlers[:] = list(logger.handlers)
        warnings_logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get the logger of an sftime module.

    Args:
        name: Dotted module path below the package, e.g. ``'processing.operations'``;
              names already starting with ``sftime`` are used as given

    Returns:
        logging.Logger: Logger instance

    Examples:
        >>> logger = get_logger('conversion.cube')
        >>> logger.name
        'sftime.conversion.cube'
    """
    if name == LOGGER_NAME or name.startswith(f'{LOGGER_NAME}.'):
        return logging.getLogger(name)
    return logging.getLogger(f'{LOGGER_NAME}.{name}')


# Quiet until configured: only warnings and errors, and no output handler
_default_logger = logging.getLogger(LOGGER_NAME)
if not _default_logger.handlers:
    _default_logger.addHandler(logging.NullHandler())
_default_logger.setLevel(logging.WARNING)


def set_log_level(level: Union[int, str]) -> None:
    """
    Change the level of the sftime logger and its handlers.

    Raises:
        ParameterError: If the level name is unknown

    Examples:
        >>> from sftime import set_log_level
        >>> set_log_level('DEBUG')
    """
    level = _coerce_level(level)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    for handler in logger.handlers:
        handler.setLevel(level)
