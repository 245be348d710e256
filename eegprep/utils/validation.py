"""
Validation Utilities
====================

This module provides validation functions for eegprep.

Validation Categories:
---------------------
1. Type Validation: Check argument types
2. Range Validation: Check numeric ranges
3. Array Validation: Check numpy array shapes and values
4. Config Validation: Validate configuration dictionaries
5. Window Validation: Check (start, end) time windows

Example Usage:
    ```python
    from eegprep.utils.validation import validate_array, validate_time_window

    validate_array(samples, expected_ndim=2, name='samples')
    tmin, tmax = validate_time_window((-0.2, 0.8), name='time_lim')
    ```
"""

from typing import (
    Dict, List, Optional, Any, Union, Tuple, Type
)
import numpy as np
import logging

from eegprep.core.exceptions import DataValidationError

logger = logging.getLogger(__name__)


# =============================================================================
# BASIC TYPE CHECKING
# =============================================================================

def check_type(value: Any,
               expected_type: Union[Type, Tuple[Type, ...]],
               name: str = 'value') -> None:
    """
    Check if value is of expected type.

    Raises:
        TypeError: If type doesn't match

    Example:
        >>> check_type(samples, np.ndarray, 'samples')
    """
    if not isinstance(value, expected_type):
        if isinstance(expected_type, tuple):
            expected_str = ' or '.join(t.__name__ for t in expected_type)
        else:
            expected_str = expected_type.__name__

        raise TypeError(
            f"'{name}' must be {expected_str}, got {type(value).__name__}"
        )


# =============================================================================
# NUMERIC VALIDATION
# =============================================================================

def check_range(value: Union[int, float],
                min_val: Optional[Union[int, float]] = None,
                max_val: Optional[Union[int, float]] = None,
                name: str = 'value',
                inclusive: bool = True) -> None:
    """
    Check if value is within range.

    Raises:
        ValueError: If value is out of range

    Example:
        >>> check_range(threshold, min_val=0.0, name='threshold', inclusive=False)
    """
    if min_val is not None:
        if inclusive and value < min_val:
            raise ValueError(f"'{name}' must be >= {min_val}, got {value}")
        elif not inclusive and value <= min_val:
            raise ValueError(f"'{name}' must be > {min_val}, got {value}")

    if max_val is not None:
        if inclusive and value > max_val:
            raise ValueError(f"'{name}' must be <= {max_val}, got {value}")
        elif not inclusive and value >= max_val:
            raise ValueError(f"'{name}' must be < {max_val}, got {value}")


def check_positive(value: Union[int, float],
                   name: str = 'value',
                   allow_zero: bool = False) -> None:
    """
    Check if value is positive.

    Raises:
        ValueError: If value is not positive
    """
    if allow_zero:
        if value < 0:
            raise ValueError(f"'{name}' must be non-negative, got {value}")
    else:
        if value <= 0:
            raise ValueError(f"'{name}' must be positive, got {value}")


# =============================================================================
# ARRAY VALIDATION
# =============================================================================

def validate_array(array: np.ndarray,
                   expected_ndim: Optional[int] = None,
                   min_samples: Optional[int] = None,
                   allow_nan: bool = False,
                   allow_inf: bool = False,
                   name: str = 'array') -> None:
    """
    Validate numpy array properties.

    Args:
        array: Array to validate
        expected_ndim: Expected number of dimensions
        min_samples: Minimum size of the first dimension
        allow_nan: Whether NaN values are allowed
        allow_inf: Whether Inf values are allowed
        name: Name of the array

    Raises:
        TypeError: If not a numpy array
        ValueError: If array doesn't meet criteria
    """
    if not isinstance(array, np.ndarray):
        raise TypeError(f"'{name}' must be a numpy array, got {type(array).__name__}")

    if expected_ndim is not None and array.ndim != expected_ndim:
        raise ValueError(
            f"'{name}' must be {expected_ndim}D, got {array.ndim}D (shape={array.shape})"
        )

    if min_samples is not None and array.shape[0] < min_samples:
        raise ValueError(
            f"'{name}' must have at least {min_samples} samples, "
            f"got {array.shape[0]}"
        )

    if not allow_nan and np.any(np.isnan(array)):
        raise ValueError(f"'{name}' contains NaN values")

    if not allow_inf and np.any(np.isinf(array)):
        raise ValueError(f"'{name}' contains Inf values")


# =============================================================================
# TIME WINDOWS
# =============================================================================

def validate_time_window(window: Any,
                         allow_open: bool = False,
                         name: str = 'window') -> Tuple[Optional[float], Optional[float]]:
    """
    Validate a (start, end) window in seconds.

    Args:
        window: Two-element sequence
        allow_open: Whether None may stand for an open bound
        name: Name of the window

    Returns:
        Tuple of floats (or None for open bounds)

    Raises:
        DataValidationError: If the window is malformed or empty
    """
    try:
        start, end = window
    except (TypeError, ValueError):
        raise DataValidationError(name, '(start, end) pair', repr(window)) from None

    if not allow_open and (start is None or end is None):
        raise DataValidationError(name, 'both bounds given', repr(window))

    start = None if start is None else float(start)
    end = None if end is None else float(end)

    if start is not None and end is not None and start >= end:
        raise DataValidationError(name, 'start < end', f"({start}, {end})")

    return start, end


# =============================================================================
# CONFIGURATION VALIDATION
# =============================================================================

def validate_config(config: Dict[str, Any],
                    required_keys: Optional[List[str]] = None,
                    optional_keys: Optional[List[str]] = None,
                    strict: bool = False,
                    name: str = 'config') -> None:
    """
    Validate configuration dictionary.

    Args:
        config: Configuration dictionary
        required_keys: Keys that must be present
        optional_keys: Keys that are allowed but not required
        strict: If True, raise error for unexpected keys
        name: Name of the config

    Raises:
        TypeError: If config is not a dict
        ValueError: If required keys missing or unknown keys present (strict mode)
    """
    if not isinstance(config, dict):
        raise TypeError(f"'{name}' must be a dictionary, got {type(config).__name__}")

    if required_keys:
        missing = set(required_keys) - set(config.keys())
        if missing:
            raise ValueError(f"'{name}' missing required keys: {sorted(missing)}")

    if strict:
        allowed = set(required_keys or []) | set(optional_keys or [])
        unknown = set(config.keys()) - allowed
        if unknown:
            raise ValueError(f"'{name}' has unknown keys: {sorted(unknown)}")


def validate_config_value(config: Dict[str, Any],
                          key: str,
                          expected_type: Optional[Union[Type, Tuple[Type, ...]]] = None,
                          min_val: Optional[Union[int, float]] = None,
                          max_val: Optional[Union[int, float]] = None,
                          choices: Optional[List[Any]] = None) -> None:
    """
    Validate a specific configuration value.

    Missing keys are not an error; defaults apply.
    """
    if key not in config:
        return

    value = config[key]

    if expected_type is not None:
        check_type(value, expected_type, name=key)

    if min_val is not None or max_val is not None:
        check_range(value, min_val=min_val, max_val=max_val, name=key)

    if choices is not None and value not in choices:
        raise ValueError(f"'{key}' must be one of {choices}, got {value}")
