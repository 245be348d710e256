"""
Custom Exceptions
=================

This module defines all custom exceptions for the eegprep engine.

Exception Hierarchy:
-------------------
EEGPrepError (Base)
├── DataError
│   ├── DataValidationError
│   ├── ShapeMismatchError
│   ├── UnknownChannelError
│   └── NoMatchingEventsError
├── ProcessingError
│   └── InvalidFilterSpecError
└── ConfigurationError
    ├── ConfigNotFoundError
    └── ConfigValidationError

Every error aborts the operation that raised it; no partially transformed
Recording or EpochSet is ever returned.

Example Usage:
    ```python
    from eegprep.core.exceptions import UnknownChannelError

    try:
        referenced = reference(recording, ['M1', 'M2'])
    except UnknownChannelError as e:
        logger.error(f"Cannot re-reference: {e}")
    ```
"""

from typing import List, Optional, Sequence


# =============================================================================
# BASE EXCEPTION
# =============================================================================

class EEGPrepError(Exception):
    """
    Base exception for all eegprep errors.

    Provides consistent error message formatting.

    Attributes:
        message: Error message
        details: Additional error details
        suggestion: Suggestion for fixing the error
    """

    def __init__(self,
                 message: str,
                 details: str = '',
                 suggestion: str = ''):
        self.message = message
        self.details = details
        self.suggestion = suggestion

        full_message = message
        if details:
            full_message += f"\nDetails: {details}"
        if suggestion:
            full_message += f"\nSuggestion: {suggestion}"

        super().__init__(full_message)


# =============================================================================
# DATA ERRORS
# =============================================================================

class DataError(EEGPrepError):
    """Base exception for data-related errors."""
    pass


class DataValidationError(DataError):
    """Raised when a value violates a data-model or parameter contract."""

    def __init__(self,
                 field: str,
                 expected: str,
                 actual: str):
        message = f"Data validation failed for '{field}'"
        details = f"Expected: {expected}, Got: {actual}"
        suggestion = "Check the input data and call parameters."

        super().__init__(message, details, suggestion)
        self.field = field
        self.expected = expected
        self.actual = actual


class ShapeMismatchError(DataError):
    """
    Raised on an internal shape invariant violation.

    This is a programming-contract failure (e.g. channel labels that do not
    match the number of matrix columns), not a user input problem.
    """

    def __init__(self,
                 what: str,
                 expected: object,
                 actual: object):
        message = f"Shape mismatch in {what}"
        details = f"Expected: {expected}, Got: {actual}"
        suggestion = "The producer of this object broke the data-model contract."

        super().__init__(message, details, suggestion)
        self.what = what
        self.expected = expected
        self.actual = actual


class UnknownChannelError(DataError):
    """Raised when an operation names channels absent from the channel set."""

    def __init__(self,
                 channels: Sequence[str],
                 available_channels: Optional[Sequence[str]] = None):
        channels = list(channels)
        if len(channels) == 1:
            message = f"Channel '{channels[0]}' not found"
        else:
            message = f"Channels {channels} not found"
        details = f"Available channels: {list(available_channels)}" if available_channels else ""
        suggestion = "Check channel name spelling or select from available channels."

        super().__init__(message, details, suggestion)
        self.channels: List[str] = channels
        self.available_channels = list(available_channels) if available_channels else []


class NoMatchingEventsError(DataError):
    """Raised when epoching finds zero events for every requested code."""

    def __init__(self,
                 event_codes: Sequence[int],
                 available_codes: Optional[Sequence[int]] = None):
        message = f"No events match the requested codes {list(event_codes)}"
        details = f"Event codes present: {sorted(available_codes)}" if available_codes else \
            "The recording has no events."
        suggestion = "Check the event codes against recording.get_event_counts()."

        super().__init__(message, details, suggestion)
        self.event_codes = list(event_codes)
        self.available_codes = sorted(available_codes) if available_codes else []


# =============================================================================
# PROCESSING ERRORS
# =============================================================================

class ProcessingError(EEGPrepError):
    """Base exception for signal processing errors."""
    pass


class InvalidFilterSpecError(ProcessingError):
    """Raised when a filter cannot be designed from the given parameters."""

    def __init__(self,
                 reason: str,
                 method: str = ''):
        message = f"Invalid filter specification{f' for {method!r}' if method else ''}"
        details = reason
        suggestion = "Check filter parameters (cutoffs below Nyquist, low < high, order >= 1)."

        super().__init__(message, details, suggestion)
        self.reason = reason
        self.method = method


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================

class ConfigurationError(EEGPrepError):
    """Base exception for configuration errors."""
    pass


class ConfigNotFoundError(ConfigurationError):
    """Raised when configuration file is not found."""

    def __init__(self, path: str):
        message = f"Configuration file not found: '{path}'"
        details = "The specified configuration file does not exist."
        suggestion = "Check the file path or create the configuration file."

        super().__init__(message, details, suggestion)
        self.path = path


class ConfigValidationError(ConfigurationError):
    """Raised when configuration validation fails."""

    def __init__(self,
                 key: str,
                 expected: str,
                 actual: str = ''):
        message = f"Invalid configuration value for '{key}'"
        details = f"Expected: {expected}"
        if actual:
            details += f", Got: {actual}"
        suggestion = "Update the configuration with a valid value."

        super().__init__(message, details, suggestion)
        self.key = key


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    # Base
    'EEGPrepError',

    # Data
    'DataError',
    'DataValidationError',
    'ShapeMismatchError',
    'UnknownChannelError',
    'NoMatchingEventsError',

    # Processing
    'ProcessingError',
    'InvalidFilterSpecError',

    # Configuration
    'ConfigurationError',
    'ConfigNotFoundError',
    'ConfigValidationError',
]
