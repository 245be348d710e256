"""
Utilities Module
================

Common utility functions for eegprep.

Available Modules:
-----------------
- logging: Centralized logging configuration
- validation: Input validation helpers

Example Usage:
    ```python
    from eegprep.utils import setup_logging, get_logger

    setup_logging(level='INFO')
    logger = get_logger(__name__)
    ```
"""

# =============================================================================
# Logging Utilities
# =============================================================================
from eegprep.utils.logging import (
    setup_logging,
    setup_logging_from_config,
    get_logger,
    set_level,
    log_execution_time,
    LogLevel,
    ColoredFormatter,
)

# =============================================================================
# Validation Utilities
# =============================================================================
from eegprep.utils.validation import (
    check_type,
    check_range,
    check_positive,
    validate_array,
    validate_time_window,
    validate_config,
    validate_config_value,
)

# =============================================================================
# Module Exports
# =============================================================================
__all__ = [
    # Logging
    'setup_logging',
    'setup_logging_from_config',
    'get_logger',
    'set_level',
    'log_execution_time',
    'LogLevel',
    'ColoredFormatter',

    # Validation
    'check_type',
    'check_range',
    'check_positive',
    'validate_array',
    'validate_time_window',
    'validate_config',
    'validate_config_value',
]
