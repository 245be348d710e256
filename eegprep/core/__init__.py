"""
Core Module
===========

This is the core module of eegprep, containing:
- Data types for continuous recordings and epochs
- The abstract interface for pipeline steps
- Configuration management
- Custom exceptions

Quick Start:
-----------
```python
from eegprep.core import (
    Recording, EventMarker, EpochSet,
    ConfigManager, load_config,
    UnknownChannelError, InvalidFilterSpecError
)

config = load_config('configs/default.yaml')
print(config.get('filter.high_freq'))  # 40.0
```
"""

# =============================================================================
# Exceptions
# =============================================================================
from eegprep.core.exceptions import (
    # Base
    EEGPrepError,

    # Data
    DataError,
    DataValidationError,
    ShapeMismatchError,
    UnknownChannelError,
    NoMatchingEventsError,

    # Processing
    ProcessingError,
    InvalidFilterSpecError,

    # Configuration
    ConfigurationError,
    ConfigNotFoundError,
    ConfigValidationError,
)

# =============================================================================
# Data Types
# =============================================================================
from eegprep.core.types import (
    Recording,
    EventMarker,
    EpochSet,
    EpochMeta,
)

# =============================================================================
# Interfaces
# =============================================================================
from eegprep.core.interfaces import IPreprocessor

# =============================================================================
# Configuration
# =============================================================================
from eegprep.core.config import (
    ConfigManager,
    DEFAULT_CONFIG,
    load_config,
)

# =============================================================================
# Module Exports
# =============================================================================
__all__ = [
    # Data Types
    'Recording',
    'EventMarker',
    'EpochSet',
    'EpochMeta',

    # Interfaces
    'IPreprocessor',

    # Configuration
    'ConfigManager',
    'DEFAULT_CONFIG',
    'load_config',

    # All Exceptions
    'EEGPrepError',
    'DataError',
    'DataValidationError',
    'ShapeMismatchError',
    'UnknownChannelError',
    'NoMatchingEventsError',
    'ProcessingError',
    'InvalidFilterSpecError',
    'ConfigurationError',
    'ConfigNotFoundError',
    'ConfigValidationError',
]
