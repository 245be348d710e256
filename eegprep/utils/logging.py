"""
Logging Utilities
=================

This module provides centralized logging configuration for eegprep.

Every module logs through its own ``logging.getLogger(__name__)``; nothing
is printed. Applications call ``setup_logging`` once to decide where those
records go.

Log Levels Used:
---------------
- DEBUG: Filter designs, per-step timings
- INFO: Completed operations (referenced, filtered, epoched, detected)
- WARNING: Recoverable conditions (events skipped at recording edges,
  high filter orders)

Example Usage:
    ```python
    from eegprep.utils.logging import get_logger, setup_logging

    setup_logging(level='INFO', log_file='logs/eegprep.log')

    logger = get_logger(__name__)
    logger.info("Processing started")
    ```
"""

import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Union
from functools import wraps
import time


# =============================================================================
# CONSTANTS
# =============================================================================

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DETAILED_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'

# Color codes for console output
COLORS = {
    'DEBUG': '\033[36m',      # Cyan
    'INFO': '\033[32m',       # Green
    'WARNING': '\033[33m',    # Yellow
    'ERROR': '\033[31m',      # Red
    'CRITICAL': '\033[35m',   # Magenta
    'RESET': '\033[0m'
}


# =============================================================================
# CUSTOM FORMATTER WITH COLORS
# =============================================================================

class ColoredFormatter(logging.Formatter):
    """
    Formatter that adds colors to log levels for console output.
    """

    def __init__(self, fmt: str = DEFAULT_FORMAT, use_colors: bool = True):
        super().__init__(fmt)
        self.use_colors = use_colors and sys.stdout.isatty()

    def format(self, record: logging.LogRecord) -> str:
        original_levelname = record.levelname

        if self.use_colors:
            color = COLORS.get(record.levelname, '')
            reset = COLORS['RESET']
            record.levelname = f"{color}{record.levelname}{reset}"

        result = super().format(record)

        record.levelname = original_levelname

        return result


# =============================================================================
# LOGGING SETUP
# =============================================================================

def setup_logging(
    level: Union[str, int] = 'INFO',
    log_file: Optional[str] = None,
    console: bool = True,
    use_colors: bool = True,
    format_string: str = DEFAULT_FORMAT,
    detailed: bool = False
) -> None:
    """
    Configure the root logger.

    Should be called once at application startup.

    Args:
        level: Log level ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')
        log_file: Optional file path for logging
        console: Whether to log to console
        use_colors: Whether to use colored console output
        format_string: Log format string
        detailed: If True, use detailed format with file/line info
    """
    if detailed:
        format_string = DETAILED_FORMAT

    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = []

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(ColoredFormatter(format_string, use_colors))
        root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(format_string))
        root_logger.addHandler(file_handler)

    root_logger.info(f"Logging configured: level={logging.getLevelName(level)}")


def setup_logging_from_config(settings: Optional[Dict[str, Any]], **kwargs) -> None:
    """
    Configure logging from the ``logging`` section of a configuration.

    Args:
        settings: Mapping with optional keys ``level``, ``file`` and
            ``detailed`` (e.g. ``config.get_section('logging')``)
        **kwargs: Passed through to ``setup_logging``

    Example:
        >>> setup_logging_from_config(load_config('configs/default.yaml').get_section('logging'))
    """
    settings = settings or {}
    setup_logging(
        level=settings.get('level') or 'INFO',
        log_file=settings.get('file'),
        detailed=bool(settings.get('detailed', False)),
        **kwargs
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a specific module.

    Args:
        name: Logger name (typically __name__ of the module)
    """
    return logging.getLogger(name)


def set_level(level: Union[str, int], logger_name: Optional[str] = None) -> None:
    """
    Set log level for a specific logger, or the root logger if None.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    logging.getLogger(logger_name).setLevel(level)


# =============================================================================
# PERFORMANCE LOGGING DECORATORS
# =============================================================================

def log_execution_time(logger: Optional[logging.Logger] = None,
                       level: int = logging.DEBUG):
    """
    Decorator to log function execution time.

    Args:
        logger: Logger to use (the function's module logger if None)
        level: Log level for timing messages

    Example:
        >>> @log_execution_time()
        ... def filter_recording(recording, ...):
        ...     ...
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            log = logger or logging.getLogger(func.__module__)

            start_time = time.time()
            result = func(*args, **kwargs)
            elapsed = time.time() - start_time

            log.log(level, f"{func.__name__} executed in {elapsed:.3f}s")
            return result

        return wrapper
    return decorator


# =============================================================================
# CONTEXT MANAGER FOR TEMPORARY LOG LEVEL
# =============================================================================

class LogLevel:
    """
    Context manager for temporarily changing log level.

    Example:
        >>> with LogLevel('DEBUG', 'eegprep.preprocessing'):
        ...     filtered = filter_recording(recording, 'fir', 1.0, 40.0)
    """

    def __init__(self, level: Union[str, int], logger_name: Optional[str] = None):
        self.level = level if isinstance(level, int) else getattr(logging, level.upper())
        self.logger_name = logger_name
        self.original_level = None

    def __enter__(self):
        logger = logging.getLogger(self.logger_name)
        self.original_level = logger.level
        logger.setLevel(self.level)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        logger = logging.getLogger(self.logger_name)
        logger.setLevel(self.original_level)
        return False
