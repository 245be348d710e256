"""
Epocher Step
============

Pipeline adapter for ``eegprep.preprocessing.epoching.epoch``. Turns a
Recording into an EpochSet, so it sits between the continuous-data steps
and the artifact detector.

Usage Example:
    ```python
    from eegprep.preprocessing.steps import Epocher

    epocher = Epocher()
    epocher.initialize({
        'event_codes': [1, 2],
        'epoch_labels': ['target', 'standard'],
        'time_lim': [-0.2, 0.8],
        'baseline': [None, 0.0]
    })
    epochs = epocher.process(recording)
    ```
"""

from typing import Dict, Any, List, Optional, Tuple
import logging

from eegprep.core.exceptions import DataValidationError
from eegprep.core.interfaces.i_preprocessor import IPreprocessor
from eegprep.core.types import Recording, EpochSet
from eegprep.preprocessing.epoching import DEFAULT_TIME_LIM, Window, epoch
from eegprep.utils.validation import validate_time_window


logger = logging.getLogger(__name__)


class Epocher(IPreprocessor):
    """
    Cut event-locked epochs from a Recording.

    Attributes:
        _event_codes: Codes of the events to epoch around
        _epoch_labels: Condition label per code, or None
        _time_lim: (tmin, tmax) in seconds
        _baseline: Optional (b0, b1) baseline window
    """

    input_types = (Recording,)

    def __init__(self):
        self._event_codes: List[int] = []
        self._epoch_labels: Optional[List[str]] = None
        self._time_lim: Tuple[float, float] = DEFAULT_TIME_LIM
        self._baseline: Optional[Window] = None

        self._is_initialized: bool = False

        logger.debug("Epocher instantiated")

    @property
    def name(self) -> str:
        return "epocher"

    def initialize(self, config: Dict[str, Any]) -> None:
        """
        Configure epoching.

        Args:
            config: Configuration dictionary with keys:
                - 'event_codes' (int or list, required): Event codes
                - 'epoch_labels' (list, optional): Label per code
                - 'time_lim' (pair, optional): (tmin, tmax), default (-0.2, 0.8)
                - 'baseline' (pair or None, optional): Baseline window

        Raises:
            DataValidationError: If a value is missing or malformed
        """
        if 'event_codes' not in config:
            raise DataValidationError('event_codes', 'at least one event code', 'missing')

        self.set_params(**{
            key: config[key]
            for key in ('event_codes', 'epoch_labels', 'time_lim', 'baseline')
            if key in config
        })
        self._is_initialized = True

        logger.info(
            f"Epocher initialized: codes={self._event_codes}, "
            f"time_lim={self._time_lim}, baseline={self._baseline}"
        )

    def process(self, data: Recording, **kwargs) -> EpochSet:
        """
        Epoch the recording.

        Raises:
            RuntimeError: If the step is not initialized
            NoMatchingEventsError: If no event carries a requested code
        """
        if not self._is_initialized:
            raise RuntimeError("Epocher not initialized. Call initialize() first.")

        self.validate_input(data)
        return epoch(
            data,
            self._event_codes,
            self._epoch_labels,
            self._time_lim,
            self._baseline
        )

    def get_params(self) -> Dict[str, Any]:
        return {
            'event_codes': list(self._event_codes),
            'epoch_labels': list(self._epoch_labels) if self._epoch_labels is not None else None,
            'time_lim': self._time_lim,
            'baseline': self._baseline,
        }

    def set_params(self, **params) -> 'Epocher':
        if 'event_codes' in params:
            codes = params['event_codes']
            self._event_codes = [int(codes)] if isinstance(codes, int) else [int(c) for c in codes]
            if not self._event_codes:
                raise DataValidationError('event_codes', 'at least one event code', '[]')
        if 'epoch_labels' in params:
            labels = params['epoch_labels']
            self._epoch_labels = None if labels is None else [str(label) for label in labels]
        if 'time_lim' in params:
            self._time_lim = validate_time_window(params['time_lim'], name='time_lim')
        if 'baseline' in params:
            baseline = params['baseline']
            self._baseline = (
                None if baseline is None
                else validate_time_window(baseline, allow_open=True, name='baseline')
            )

        if self._epoch_labels is not None and len(self._epoch_labels) != len(self._event_codes):
            raise DataValidationError(
                'epoch_labels',
                f"{len(self._event_codes)} labels (one per event code)",
                len(self._epoch_labels)
            )
        return self
