"""
Frequency Filter Step
=====================

Pipeline adapter for ``eegprep.preprocessing.filtering.filter_recording``.

The filter is designed from the Recording's own sample rate at processing
time. When the common pipeline config carries ``sampling_rate`` the
specification is also checked against it during ``initialize``, so an
impossible cutoff fails before any data is touched.

Usage Example:
    ```python
    from eegprep.preprocessing.steps import FrequencyFilter

    bandpass = FrequencyFilter()
    bandpass.initialize({
        'method': 'iir',
        'low_freq': 1.0,
        'high_freq': 40.0,
        'order': 4
    })
    filtered = bandpass.process(recording)
    ```
"""

from typing import Dict, Any, Optional
import logging

from eegprep.core.interfaces.i_preprocessor import IPreprocessor
from eegprep.core.types import Recording
from eegprep.preprocessing.filtering import (
    DEFAULT_ORDER, IIR, METHODS, design_filter, filter_recording
)
from eegprep.utils.validation import validate_config_value


# Configure module logger
logger = logging.getLogger(__name__)


class FrequencyFilter(IPreprocessor):
    """
    Zero-phase high-pass, low-pass or band-pass filter.

    Attributes:
        _method (str): 'iir' (Butterworth) or 'fir' (windowed sinc)
        _low_freq (float): High-pass edge in Hz, or None
        _high_freq (float): Low-pass edge in Hz, or None
        _order (int): Filter order

    Default Configuration:
        - method: 'iir'
        - low_freq: 1.0 Hz (removes slow drift)
        - high_freq: 40.0 Hz (removes muscle noise and line noise)
        - order: 4

    Example:
        >>> step = FrequencyFilter()
        >>> step.initialize({'low_freq': 0.5, 'high_freq': None, 'method': 'fir'})
        >>> highpassed = step.process(recording)
    """

    input_types = (Recording,)

    def __init__(self):
        """Initialize the frequency filter."""
        self._method: str = IIR
        self._low_freq: Optional[float] = 1.0
        self._high_freq: Optional[float] = 40.0
        self._order: int = DEFAULT_ORDER

        self._is_initialized: bool = False

        logger.debug("FrequencyFilter instantiated")

    # =========================================================================
    # ABSTRACT PROPERTY IMPLEMENTATIONS
    # =========================================================================

    @property
    def name(self) -> str:
        """
        Unique identifier for this step.

        Returns:
            str: 'frequency_filter'
        """
        return "frequency_filter"

    # =========================================================================
    # ABSTRACT METHOD IMPLEMENTATIONS
    # =========================================================================

    def initialize(self, config: Dict[str, Any]) -> None:
        """
        Initialize the filter with configuration.

        Args:
            config: Configuration dictionary with keys:
                - 'method' (str, optional): 'iir' or 'fir' (default: 'iir')
                - 'low_freq' (float, optional): High-pass edge (default: 1.0 Hz)
                - 'high_freq' (float, optional): Low-pass edge (default: 40.0 Hz)
                - 'order' (int, optional): Filter order (default: 4)
                - 'sampling_rate' (float, optional): Checks the design early

        Raises:
            TypeError, ValueError: If a value has the wrong type or range
            InvalidFilterSpecError: If the design is impossible at
                ``sampling_rate``
        """
        validate_config_value(config, 'method', str, choices=list(METHODS))
        validate_config_value(config, 'order', int, min_val=1)
        validate_config_value(config, 'low_freq', (int, float, type(None)))
        validate_config_value(config, 'high_freq', (int, float, type(None)))

        self._method = config.get('method', IIR)
        self._low_freq = self._as_freq(config.get('low_freq', 1.0))
        self._high_freq = self._as_freq(config.get('high_freq', 40.0))
        self._order = int(config.get('order', DEFAULT_ORDER))

        if 'sampling_rate' in config:
            design_filter(
                float(config['sampling_rate']),
                self._method, self._low_freq, self._high_freq, self._order
            )

        self._is_initialized = True
        logger.info(
            f"FrequencyFilter initialized: {self._method} "
            f"{self._low_freq}-{self._high_freq} Hz, order={self._order}"
        )

    def process(self, data: Recording, **kwargs) -> Recording:
        """
        Filter every channel of the recording.

        Raises:
            RuntimeError: If the filter is not initialized
            InvalidFilterSpecError: If the design is invalid for the
                recording's sample rate
        """
        if not self._is_initialized:
            raise RuntimeError(
                "FrequencyFilter not initialized. Call initialize() first."
            )

        self.validate_input(data)
        return filter_recording(
            data, self._method, self._low_freq, self._high_freq, self._order
        )

    def get_params(self) -> Dict[str, Any]:
        return {
            'method': self._method,
            'low_freq': self._low_freq,
            'high_freq': self._high_freq,
            'order': self._order,
        }

    def set_params(self, **params) -> 'FrequencyFilter':
        """
        Set filter parameters.

        Example:
            >>> step.set_params(low_freq=0.1, high_freq=30.0)
        """
        if 'method' in params:
            self._method = params['method']
        if 'low_freq' in params:
            self._low_freq = self._as_freq(params['low_freq'])
        if 'high_freq' in params:
            self._high_freq = self._as_freq(params['high_freq'])
        if 'order' in params:
            self._order = int(params['order'])
        return self

    @staticmethod
    def _as_freq(value: Optional[float]) -> Optional[float]:
        return None if value is None else float(value)
