"""
Notch Filter Step
=================

Removes power-line interference with zero-phase IIR notches, optionally at
harmonics of the line frequency as well.

Power Line Frequencies:
- Europe, Asia, Africa, Australia: 50 Hz
- Americas, parts of Japan: 60 Hz

Usage Example:
    ```python
    from eegprep.preprocessing.steps import NotchFilter

    notch = NotchFilter()
    notch.initialize({'notch_freq': 60.0, 'remove_harmonics': True})
    clean = notch.process(recording)
    ```
"""

from typing import Dict, Any, List
import logging

from eegprep.core.interfaces.i_preprocessor import IPreprocessor
from eegprep.core.types import Recording
from eegprep.preprocessing.filtering import notch_filter
from eegprep.utils.validation import validate_config_value


# Configure module logger
logger = logging.getLogger(__name__)


class NotchFilter(IPreprocessor):
    """
    IIR notch filter for removing power line interference.

    Attributes:
        _notch_freq (float): Center frequency of the notch in Hz
        _quality_factor (float): Q factor controlling notch bandwidth
        _remove_harmonics (bool): Whether to also filter harmonics
        _max_harmonic (int): Highest harmonic to remove

    Harmonics at or above the recording's Nyquist frequency are skipped.
    """

    input_types = (Recording,)

    def __init__(self):
        """Initialize the notch filter."""
        self._notch_freq: float = 50.0
        self._quality_factor: float = 30.0
        self._remove_harmonics: bool = False
        self._max_harmonic: int = 3

        self._is_initialized: bool = False

        logger.debug("NotchFilter instantiated")

    @property
    def name(self) -> str:
        return "notch_filter"

    def initialize(self, config: Dict[str, Any]) -> None:
        """
        Initialize the notch filter with configuration.

        Args:
            config: Configuration dictionary with keys:
                - 'notch_freq' (float, optional): Notch frequency (default: 50.0 Hz)
                - 'quality_factor' (float, optional): Q factor (default: 30)
                - 'remove_harmonics' (bool, optional): Remove harmonics (default: False)
                - 'max_harmonic' (int, optional): Max harmonic order (default: 3)

        Raises:
            TypeError, ValueError: If parameters are invalid
        """
        validate_config_value(config, 'notch_freq', (int, float), min_val=0)
        validate_config_value(config, 'quality_factor', (int, float), min_val=0)
        validate_config_value(config, 'remove_harmonics', bool)
        validate_config_value(config, 'max_harmonic', int, min_val=1)

        self._notch_freq = float(config.get('notch_freq', 50.0))
        self._quality_factor = float(config.get('quality_factor', 30.0))
        self._remove_harmonics = config.get('remove_harmonics', False)
        self._max_harmonic = int(config.get('max_harmonic', 3))

        self._is_initialized = True

        harmonics_info = f", harmonics up to {self._max_harmonic}x" if self._remove_harmonics else ""
        logger.info(
            f"NotchFilter initialized: {self._notch_freq} Hz, "
            f"Q={self._quality_factor}{harmonics_info}"
        )

    def process(self, data: Recording, **kwargs) -> Recording:
        """
        Apply the notch (and harmonic notches) to the recording.

        Raises:
            RuntimeError: If the filter is not initialized
            InvalidFilterSpecError: If the base frequency is not below Nyquist
        """
        if not self._is_initialized:
            raise RuntimeError("NotchFilter not initialized. Call initialize() first.")

        self.validate_input(data)

        result = data
        for freq in self.frequencies(data.nyquist):
            result = notch_filter(result, freq, self._quality_factor)
        return result

    def frequencies(self, nyquist: float) -> List[float]:
        """Notch frequencies that will be applied below ``nyquist``."""
        if not self._remove_harmonics:
            return [self._notch_freq]

        freqs = [self._notch_freq]
        for harmonic in range(2, self._max_harmonic + 1):
            freq = self._notch_freq * harmonic
            if freq >= nyquist:
                logger.debug(f"Skipping harmonic {freq} Hz (>= Nyquist {nyquist} Hz)")
                break
            freqs.append(freq)
        return freqs

    def get_params(self) -> Dict[str, Any]:
        return {
            'notch_freq': self._notch_freq,
            'quality_factor': self._quality_factor,
            'remove_harmonics': self._remove_harmonics,
            'max_harmonic': self._max_harmonic,
        }

    def set_params(self, **params) -> 'NotchFilter':
        if 'notch_freq' in params:
            self._notch_freq = float(params['notch_freq'])
        if 'quality_factor' in params:
            self._quality_factor = float(params['quality_factor'])
        if 'remove_harmonics' in params:
            self._remove_harmonics = bool(params['remove_harmonics'])
        if 'max_harmonic' in params:
            self._max_harmonic = int(params['max_harmonic'])
        return self
