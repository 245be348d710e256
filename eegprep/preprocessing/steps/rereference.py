"""
Re-reference Step
=================

Pipeline adapter for ``eegprep.preprocessing.referencing.reference``.

Usage Example:
    ```python
    from eegprep.preprocessing.steps import ReReference

    car = ReReference()
    car.initialize({'ref_channels': 'average'})
    referenced = car.process(recording)

    mastoids = ReReference()
    mastoids.initialize({'ref_channels': ['M1', 'M2']})
    ```
"""

from typing import Dict, Any, List, Union
import logging

from eegprep.core.exceptions import DataValidationError
from eegprep.core.interfaces.i_preprocessor import IPreprocessor
from eegprep.core.types import Recording
from eegprep.preprocessing.referencing import AVERAGE, RefChannels, reference


logger = logging.getLogger(__name__)


class ReReference(IPreprocessor):
    """
    Re-reference a Recording to the common average or a channel subset.

    Attributes:
        _ref_channels: 'average' or a list of reference channel labels
    """

    input_types = (Recording,)

    def __init__(self):
        """Initialize with the common average reference."""
        self._ref_channels: Union[str, List[str]] = AVERAGE
        self._is_initialized: bool = False

        logger.debug("ReReference instantiated")

    @property
    def name(self) -> str:
        return "rereference"

    def initialize(self, config: Dict[str, Any]) -> None:
        """
        Configure the reference.

        Args:
            config: Configuration dictionary with keys:
                - 'ref_channels' (str or list, optional): 'average' (default)
                  or the labels of the reference channels

        Raises:
            DataValidationError: If ref_channels is empty or malformed
        """
        self._ref_channels = self._normalize(config.get('ref_channels', AVERAGE))
        self._is_initialized = True

        logger.info(f"ReReference initialized: ref_channels={self._ref_channels}")

    def process(self, data: Recording, **kwargs) -> Recording:
        """
        Re-reference the recording.

        Raises:
            RuntimeError: If the step is not initialized
            UnknownChannelError: If a reference channel is absent
        """
        if not self._is_initialized:
            raise RuntimeError("ReReference not initialized. Call initialize() first.")

        self.validate_input(data)
        return reference(data, self._ref_channels)

    def get_params(self) -> Dict[str, Any]:
        return {'ref_channels': self._ref_channels}

    def set_params(self, **params) -> 'ReReference':
        if 'ref_channels' in params:
            self._ref_channels = self._normalize(params['ref_channels'])
        return self

    @staticmethod
    def _normalize(ref_channels: RefChannels) -> Union[str, List[str]]:
        if isinstance(ref_channels, str):
            return ref_channels if ref_channels == AVERAGE else [ref_channels]

        labels = list(ref_channels)
        if not labels:
            raise DataValidationError('ref_channels', "'average' or a non-empty list", '[]')
        return labels
