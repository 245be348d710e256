"""
Artifact Detector Step
======================

Pipeline adapter for ``eegprep.preprocessing.artifacts.detect_artifacts``.
Operates on EpochSets; the report of the most recent run is kept on
``last_report``.

Usage Example:
    ```python
    from eegprep.preprocessing.steps import ArtifactDetector

    detector = ArtifactDetector()
    detector.initialize({'thresholds': 3.0, 'exclude_channels': ['EOG']})
    flagged = detector.process(epochs)
    print(detector.last_report.summary())
    ```
"""

from typing import Dict, Any, List, Optional, Tuple
import logging

from eegprep.core.interfaces.i_preprocessor import IPreprocessor
from eegprep.core.types import EpochSet
from eegprep.preprocessing.artifacts import (
    DEFAULT_STATISTICS, STATISTICS, ArtifactReport, Thresholds,
    detect_artifacts, resolve_thresholds
)
from eegprep.utils.validation import validate_config_value


logger = logging.getLogger(__name__)


class ArtifactDetector(IPreprocessor):
    """
    Flag outlier epochs and channels with z-scored statistics.

    Attributes:
        _exclude_channels: Channels left out of detection
        _thresholds: Single threshold or per-statistic mapping
        _statistics: Active statistics
        last_report: ArtifactReport from the latest ``process`` call
    """

    input_types = (EpochSet,)

    def __init__(self):
        self._exclude_channels: List[str] = []
        self._thresholds: Optional[Thresholds] = None
        self._statistics: Tuple[str, ...] = DEFAULT_STATISTICS

        self.last_report: Optional[ArtifactReport] = None
        self._is_initialized: bool = False

        logger.debug("ArtifactDetector instantiated")

    @property
    def name(self) -> str:
        return "artifact_detector"

    def initialize(self, config: Dict[str, Any]) -> None:
        """
        Configure detection.

        Args:
            config: Configuration dictionary with keys:
                - 'exclude_channels' (list, optional): Channels to ignore
                - 'thresholds' (float or dict, optional): z thresholds (default 3.0)
                - 'statistics' (list, optional): Subset of
                  variance/range/kurtosis/deviation

        Raises:
            TypeError, ValueError: If a value has the wrong type or range
        """
        validate_config_value(config, 'exclude_channels', (list, tuple))
        validate_config_value(config, 'thresholds', (int, float, dict, type(None)))
        validate_config_value(config, 'statistics', (list, tuple))

        self.set_params(**{
            key: config[key]
            for key in ('exclude_channels', 'thresholds', 'statistics')
            if key in config
        })
        # Surface bad thresholds now rather than at the first epoch set
        resolve_thresholds(self._thresholds, self._statistics)

        self._is_initialized = True
        logger.info(
            f"ArtifactDetector initialized: statistics={list(self._statistics)}, "
            f"thresholds={self._thresholds}, exclude={self._exclude_channels}"
        )

    def process(self, data: EpochSet, **kwargs) -> EpochSet:
        """
        Flag artifacts in the epoch set.

        Returns:
            EpochSet sharing the input data with updated flags
        """
        if not self._is_initialized:
            raise RuntimeError("ArtifactDetector not initialized. Call initialize() first.")

        self.validate_input(data)
        flagged, self.last_report = detect_artifacts(
            data,
            exclude_channels=self._exclude_channels,
            thresholds=self._thresholds,
            statistics=self._statistics
        )
        return flagged

    def get_params(self) -> Dict[str, Any]:
        return {
            'statistics': list(self._statistics),
            'thresholds': self._thresholds,
            'exclude_channels': list(self._exclude_channels),
        }

    def set_params(self, **params) -> 'ArtifactDetector':
        if 'exclude_channels' in params:
            self._exclude_channels = list(params['exclude_channels'] or [])
        if 'thresholds' in params:
            thresholds = params['thresholds']
            self._thresholds = dict(thresholds) if isinstance(thresholds, dict) else thresholds
        if 'statistics' in params:
            statistics = tuple(params['statistics'])
            unknown = [name for name in statistics if name not in STATISTICS]
            if unknown or not statistics:
                raise ValueError(f"'statistics' must be a non-empty subset of {STATISTICS}, got {statistics}")
            self._statistics = statistics
        return self
