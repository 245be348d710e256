"""
Configuration Manager
=====================

This module implements configuration management for eegprep.

The configuration manager is responsible for:
- Loading configuration from YAML/JSON files
- Merging files over built-in defaults
- Providing typed, dot-notation access to values
- Validating the preprocessing settings before a pipeline is built

Configuration Hierarchy:
-----------------------
1. Built-in defaults (``DEFAULT_CONFIG``, mirrored by configs/default.yaml)
2. Files passed to ``load`` (later files override earlier ones)
3. Runtime overrides (``set`` / ``update``)

A ConfigManager is an ordinary object: create one, load files into it and
pass it to ``create_pipeline_from_config``. Nothing in eegprep reads
configuration from global state.

Configuration Structure:
-----------------------
    logging:    level, file, detailed
    reference:  enabled, ref_channels
    notch:      enabled, notch_freq, quality_factor, remove_harmonics
    filter:     enabled, method, low_freq, high_freq, order
    epoching:   event_codes, epoch_labels, time_lim, baseline
    artifacts:  enabled, statistics, thresholds, exclude_channels

Example Usage:
    ```python
    from eegprep.core.config import ConfigManager

    config = ConfigManager()
    config.load('configs/default.yaml')
    config.load('configs/oddball.yaml')      # Merges with existing

    config.get('filter.high_freq')             # 40.0
    config.get_float('filter.low_freq', 0.5)
    config.set('epoching.event_codes', [1, 2])

    errors = config.validate()
    ```
"""

from typing import Dict, List, Optional, Any, Union
from pathlib import Path
import yaml
import json
import logging
from copy import deepcopy

from eegprep.core.exceptions import ConfigNotFoundError, ConfigValidationError

# Configure logging
logger = logging.getLogger(__name__)


DEFAULT_CONFIG: Dict[str, Any] = {
    'logging': {
        'level': 'INFO',
        'file': None,
        'detailed': False,
    },
    'reference': {
        'enabled': True,
        'ref_channels': 'average',
    },
    'notch': {
        'enabled': False,
        'notch_freq': 50.0,
        'quality_factor': 30.0,
        'remove_harmonics': False,
    },
    'filter': {
        'enabled': True,
        'method': 'iir',
        'low_freq': 1.0,
        'high_freq': 40.0,
        'order': 4,
    },
    'epoching': {
        'event_codes': [],
        'epoch_labels': None,
        'time_lim': [-0.2, 0.8],
        'baseline': [None, 0.0],
    },
    'artifacts': {
        'enabled': True,
        'statistics': ['variance', 'range', 'kurtosis', 'deviation'],
        'thresholds': 3.0,
        'exclude_channels': [],
    },
}

SUPPORTED_SUFFIXES = ('.yaml', '.yml', '.json')


class ConfigManager:
    """
    Hierarchical configuration for a preprocessing run.

    Attributes:
        _config: Nested configuration dictionary
        _sources: Which file (or 'default'/'runtime') set each key
        _loaded_files: Files loaded, in order
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None, use_defaults: bool = True):
        """
        Create a configuration.

        Args:
            config: Initial values merged over the defaults
            use_defaults: Start from DEFAULT_CONFIG (otherwise empty)
        """
        self._config: Dict[str, Any] = deepcopy(DEFAULT_CONFIG) if use_defaults else {}
        self._sources: Dict[str, str] = {}
        self._loaded_files: List[str] = []

        if config:
            self._merge_config(config, 'runtime')

        logger.debug("ConfigManager initialized")

    # =========================================================================
    # LOADING CONFIGURATION
    # =========================================================================

    def load(self,
             path: Union[str, Path],
             merge: bool = True) -> 'ConfigManager':
        """
        Load configuration from a file.

        Args:
            path: Path to configuration file (YAML or JSON)
            merge: If True, merge with existing config. If False, replace.

        Returns:
            Self for method chaining

        Raises:
            ConfigNotFoundError: If file doesn't exist
            ConfigValidationError: If the format is unsupported or the file
                does not hold a mapping

        Example:
            >>> config.load('configs/default.yaml')
        """
        path = Path(path)

        if not path.exists():
            raise ConfigNotFoundError(str(path))

        suffix = path.suffix.lower()
        if suffix not in SUPPORTED_SUFFIXES:
            raise ConfigValidationError('path', f"one of {SUPPORTED_SUFFIXES}", suffix)

        with open(path, 'r') as f:
            if suffix == '.json':
                data = json.load(f)
            else:
                data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ConfigValidationError(str(path), 'a mapping at top level', type(data).__name__)

        if merge:
            self._merge_config(data, str(path))
        else:
            self._config = data
            self._sources = {key: str(path) for key in data}

        self._loaded_files.append(str(path))
        logger.info(f"Loaded configuration from {path}")

        return self

    def _merge_config(self,
                      new_config: Dict[str, Any],
                      source: str) -> None:
        """Deep merge new configuration into existing."""
        def deep_merge(base: Dict, update: Dict, prefix: str = '') -> Dict:
            for key, value in update.items():
                full_key = f"{prefix}.{key}" if prefix else key

                if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                    deep_merge(base[key], value, full_key)
                else:
                    base[key] = deepcopy(value)
                    self._sources[full_key] = source

            return base

        deep_merge(self._config, new_config)

    # =========================================================================
    # ACCESSING CONFIGURATION
    # =========================================================================

    def get(self,
            key: str,
            default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Example:
            >>> config.get('filter.order')
            4
            >>> config.get('nonexistent', default='fallback')
            'fallback'
        """
        value = self._config

        try:
            for k in key.split('.'):
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def get_int(self, key: str, default: int = 0) -> int:
        """Get configuration value as integer."""
        value = self.get(key, default)
        return int(value) if value is not None else default

    def get_float(self, key: str, default: float = 0.0) -> float:
        """Get configuration value as float."""
        value = self.get(key, default)
        return float(value) if value is not None else default

    def get_bool(self, key: str, default: bool = False) -> bool:
        """Get configuration value as boolean."""
        value = self.get(key, default)
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.lower() in ('true', 'yes', '1', 'on')
        return bool(value) if value is not None else default

    def get_list(self, key: str, default: Optional[List] = None) -> List:
        """Get configuration value as list."""
        value = self.get(key, default)
        if value is None:
            return default or []
        if isinstance(value, (list, tuple)):
            return list(value)
        return [value]

    def get_section(self, key: str) -> Dict[str, Any]:
        """
        Get a configuration section as a dictionary (deep copy).

        Example:
            >>> config.get_section('filter')['method']
            'iir'
        """
        value = self.get(key, {})
        return deepcopy(value) if isinstance(value, dict) else {}

    def get_source(self, key: str) -> str:
        """Get the source (file) where a value was defined."""
        return self._sources.get(key, 'default')

    # =========================================================================
    # MODIFYING CONFIGURATION
    # =========================================================================

    def set(self,
            key: str,
            value: Any,
            source: str = 'runtime') -> 'ConfigManager':
        """
        Set a configuration value.

        Example:
            >>> config.set('filter.high_freq', 30.0)
        """
        keys = key.split('.')
        config = self._config

        for k in keys[:-1]:
            if not isinstance(config.get(k), dict):
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value
        self._sources[key] = source

        logger.debug(f"Set {key} = {value}")
        return self

    def update(self,
               values: Dict[str, Any],
               source: str = 'runtime') -> 'ConfigManager':
        """Update multiple configuration values given as dot-notation keys."""
        for key, value in values.items():
            self.set(key, value, source)
        return self

    # =========================================================================
    # SAVING CONFIGURATION
    # =========================================================================

    def save(self,
             path: Union[str, Path],
             sections: Optional[List[str]] = None) -> None:
        """
        Save configuration to a file.

        Args:
            path: Output file path (.yaml, .yml or .json)
            sections: If specified, only save these sections
        """
        path = Path(path)

        if sections:
            data = {s: self.get_section(s) for s in sections}
        else:
            data = deepcopy(self._config)

        suffix = path.suffix.lower()
        if suffix not in SUPPORTED_SUFFIXES:
            raise ConfigValidationError('path', f"one of {SUPPORTED_SUFFIXES}", suffix)

        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, 'w') as f:
            if suffix == '.json':
                json.dump(data, f, indent=2)
            else:
                yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)

        logger.info(f"Saved configuration to {path}")

    def export(self) -> Dict[str, Any]:
        """Export full configuration as a dictionary (deep copy)."""
        return deepcopy(self._config)

    # =========================================================================
    # VALIDATION
    # =========================================================================

    def validate(self, raise_on_error: bool = False) -> List[str]:
        """
        Check the preprocessing settings.

        Args:
            raise_on_error: Raise on the first problem instead of
                returning the list

        Returns:
            List of validation errors (empty if valid)

        Raises:
            ConfigValidationError: If raise_on_error and a value is invalid
        """
        errors: List[ConfigValidationError] = []

        def check(condition: bool, key: str, expected: str) -> None:
            if not condition:
                errors.append(ConfigValidationError(key, expected, repr(self.get(key))))

        method = self.get('filter.method')
        check(method in ('iir', 'fir'), 'filter.method', "'iir' or 'fir'")

        order = self.get('filter.order')
        check(
            isinstance(order, int) and not isinstance(order, bool) and order > 0,
            'filter.order', 'a positive integer'
        )

        low, high = self.get('filter.low_freq'), self.get('filter.high_freq')
        for key, value in (('filter.low_freq', low), ('filter.high_freq', high)):
            check(value is None or (_is_number(value) and value >= 0), key, 'None or a number >= 0')
        if _is_number(low) and _is_number(high) and low > 0:
            check(low < high, 'filter.low_freq', 'below filter.high_freq')

        time_lim = self.get('epoching.time_lim')
        check(
            _is_pair(time_lim, allow_none=False) and time_lim[0] < time_lim[1],
            'epoching.time_lim', '[tmin, tmax] with tmin < tmax'
        )

        baseline = self.get('epoching.baseline')
        check(baseline is None or _is_pair(baseline, allow_none=True), 'epoching.baseline', 'None or [b0, b1]')

        codes = self.get('epoching.event_codes', [])
        check(
            isinstance(codes, list) and all(isinstance(c, int) for c in codes),
            'epoching.event_codes', 'a list of integers'
        )

        labels = self.get('epoching.epoch_labels')
        check(
            labels is None or (isinstance(labels, list) and len(labels) == len(codes or [])),
            'epoching.epoch_labels', 'None or one label per event code'
        )

        thresholds = self.get('artifacts.thresholds')
        if isinstance(thresholds, dict):
            valid = all(_is_number(v) and v > 0 for v in thresholds.values())
        else:
            valid = _is_number(thresholds) and thresholds > 0
        check(valid, 'artifacts.thresholds', 'a positive number or mapping of positive numbers')

        if errors and raise_on_error:
            raise errors[0]

        for error in errors:
            logger.warning(f"Configuration problem: {error.key}")

        return [str(error) for error in errors]

    # =========================================================================
    # UTILITY METHODS
    # =========================================================================

    def summary(self) -> str:
        """Get configuration summary."""
        lines = [
            "Configuration Summary",
            "=" * 40,
            f"Loaded files: {len(self._loaded_files)}",
        ]

        for file in self._loaded_files:
            lines.append(f"  - {file}")

        lines.append("\nKey Settings:")
        lines.append(f"  - Reference: {self.get('reference.ref_channels')}")
        lines.append(
            f"  - Filter: {self.get('filter.method')} "
            f"{self.get('filter.low_freq')}-{self.get('filter.high_freq')} Hz, "
            f"order {self.get('filter.order')}"
        )
        lines.append(
            f"  - Epochs: codes {self.get('epoching.event_codes')}, "
            f"time_lim {self.get('epoching.time_lim')}, baseline {self.get('epoching.baseline')}"
        )
        lines.append(f"  - Artifact thresholds: {self.get('artifacts.thresholds')}")

        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"ConfigManager(files={len(self._loaded_files)})"

    def __getitem__(self, key: str) -> Any:
        """Allow dict-style access: config['key']."""
        return self.get(key)

    def __setitem__(self, key: str, value: Any) -> None:
        """Allow dict-style setting: config['key'] = value."""
        self.set(key, value)

    def __contains__(self, key: str) -> bool:
        """Allow 'key in config' syntax."""
        sentinel = object()
        return self.get(key, sentinel) is not sentinel


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_pair(value: Any, allow_none: bool) -> bool:
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        return False
    return all(_is_number(v) or (allow_none and v is None) for v in value)


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def load_config(path: Union[str, Path]) -> ConfigManager:
    """
    Load configuration from file over the defaults.

    Args:
        path: Configuration file path

    Returns:
        New ConfigManager instance
    """
    return ConfigManager().load(path)
