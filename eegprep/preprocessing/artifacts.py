"""
Artifact Detection
==================

This module flags outlier epochs and channels in an EpochSet using z-scored
summary statistics (FASTER-style detection).

Statistics (per epoch and channel, computed over timepoints):
------------------------------------------------------------
- variance: Signal variance
- range: Peak-to-peak amplitude
- kurtosis: Fisher (excess) kurtosis; peaky transients such as blinks
  score high
- deviation: Mean amplitude of the epoch minus that channel's mean
  across all epochs

Detection Levels:
----------------
1. Epoch level: each statistic is averaged across included channels and
   z-scored across epochs. Outliers get ``EpochMeta.rejected = True``.
2. Channel level: each statistic is averaged across epochs and z-scored
   across included channels; deviation uses the channel's overall mean
   instead. Outliers are added to ``EpochSet.bad_channels``.
3. Epoch x channel level: each channel's statistic is z-scored across
   epochs. Outliers are added to that epoch's ``EpochMeta.bad_channels``.

A unit is flagged when ``|z| > threshold`` for any active statistic.
z-scores use the population mean and standard deviation; a statistic with
zero spread scores 0 everywhere.

Rejection is soft: the data array is never modified or copied.

Usage Example:
    ```python
    from eegprep.preprocessing.artifacts import detect_artifacts

    flagged, report = detect_artifacts(
        epochs,
        exclude_channels=['EOG'],
        thresholds={'variance': 3.0, 'kurtosis': 4.0}
    )
    print(report.summary())
    clean = flagged.get_data(include_rejected=False)
    ```
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any, Sequence, Tuple, Union
import numpy as np
from scipy import stats
import logging

from eegprep.core.exceptions import DataValidationError
from eegprep.core.types import EpochSet
from eegprep.utils.logging import log_execution_time
from eegprep.utils.validation import check_positive


# Configure module logger
logger = logging.getLogger(__name__)

STATISTICS = ('variance', 'range', 'kurtosis', 'deviation')
DEFAULT_STATISTICS = STATISTICS
DEFAULT_THRESHOLD = 3.0

Thresholds = Union[float, Dict[str, float]]


# =============================================================================
# STATISTICS
# =============================================================================

def compute_statistics(data: np.ndarray,
                       statistics: Sequence[str] = DEFAULT_STATISTICS) -> Dict[str, np.ndarray]:
    """
    Compute per-epoch, per-channel statistics over timepoints.

    Args:
        data: Epoch array, shape (n_epochs, n_times, n_channels)
        statistics: Names of the statistics to compute

    Returns:
        Dict mapping statistic name to an (n_epochs, n_channels) array
    """
    results: Dict[str, np.ndarray] = {}

    for name in statistics:
        if name == 'variance':
            results[name] = np.var(data, axis=1)
        elif name == 'range':
            results[name] = np.ptp(data, axis=1)
        elif name == 'kurtosis':
            # Flat signals have undefined kurtosis; score them as normal
            with np.errstate(divide='ignore', invalid='ignore'):
                values = stats.kurtosis(data, axis=1, fisher=True)
            results[name] = np.nan_to_num(values, nan=0.0)
        elif name == 'deviation':
            epoch_means = np.mean(data, axis=1)
            results[name] = epoch_means - np.mean(epoch_means, axis=0, keepdims=True)
        else:
            raise DataValidationError('statistics', f"names from {STATISTICS}", name)

    return results


def zscore(values: np.ndarray, axis: int = 0) -> np.ndarray:
    """
    Population z-score along an axis; zero spread gives 0.

    Example:
        >>> zscore(np.array([1.0, 1.0, 1.0]))
        array([0., 0., 0.])
    """
    values = np.asarray(values, dtype=float)
    if values.size == 0:
        return values.copy()

    mean = np.mean(values, axis=axis, keepdims=True)
    std = np.std(values, axis=axis, keepdims=True)

    # Rounding noise on constant input must not turn into large scores
    tolerance = np.finfo(float).eps * np.maximum(np.abs(mean), 1.0) * 16
    spread = std > tolerance
    return np.where(spread, (values - mean) / np.where(spread, std, 1.0), 0.0)


def resolve_thresholds(thresholds: Optional[Thresholds],
                       statistics: Sequence[str]) -> Dict[str, float]:
    """
    Expand a threshold specification into one value per statistic.

    Raises:
        DataValidationError: If a mapping names an inactive statistic
        ValueError: If a threshold is not positive
    """
    if thresholds is None:
        resolved = {name: DEFAULT_THRESHOLD for name in statistics}
    elif isinstance(thresholds, dict):
        unknown = [name for name in thresholds if name not in statistics]
        if unknown:
            raise DataValidationError('thresholds', f"keys from {list(statistics)}", unknown)
        resolved = {name: float(thresholds.get(name, DEFAULT_THRESHOLD)) for name in statistics}
    else:
        resolved = {name: float(thresholds) for name in statistics}

    for name, value in resolved.items():
        check_positive(value, name=f"thresholds[{name}]")

    return resolved


# =============================================================================
# REPORT
# =============================================================================

@dataclass
class ArtifactReport:
    """
    Scores and decisions from one artifact detection run.

    Attributes:
        statistics: Active statistics, in evaluation order
        thresholds: Threshold used per statistic
        included_channels: Channels that took part in detection
        excluded_channels: Channels left out of detection
        epoch_scores: statistic -> (n_epochs,) z-scores
        channel_scores: statistic -> (n_included,) z-scores
        epoch_channel_scores: statistic -> (n_epochs, n_included) z-scores
        rejected_epochs: Indices of epochs flagged by this run
        bad_channels: Channels flagged across the set
        epoch_bad_channels: Channels flagged within each epoch
    """
    statistics: Tuple[str, ...]
    thresholds: Dict[str, float]
    included_channels: List[str]
    excluded_channels: List[str] = field(default_factory=list)
    epoch_scores: Dict[str, np.ndarray] = field(default_factory=dict)
    channel_scores: Dict[str, np.ndarray] = field(default_factory=dict)
    epoch_channel_scores: Dict[str, np.ndarray] = field(default_factory=dict)
    rejected_epochs: List[int] = field(default_factory=list)
    bad_channels: List[str] = field(default_factory=list)
    epoch_bad_channels: List[List[str]] = field(default_factory=list)

    @property
    def n_epochs(self) -> int:
        return len(self.epoch_bad_channels)

    @property
    def n_rejected(self) -> int:
        return len(self.rejected_epochs)

    def summary(self) -> str:
        """Human-readable summary of the detection run."""
        n_epoch_channel = sum(len(chs) for chs in self.epoch_bad_channels)
        lines = [
            "Artifact Detection",
            "=" * 40,
            f"Epochs: {self.n_epochs}",
            f"Channels: {len(self.included_channels)} included, "
            f"{len(self.excluded_channels)} excluded",
            f"Statistics: {', '.join(self.statistics)}",
            "",
            f"Rejected epochs: {self.n_rejected} {self.rejected_epochs}",
            f"Bad channels: {self.bad_channels or 'none'}",
            f"Epoch-channel outliers: {n_epoch_channel}",
            "",
            "Thresholds:",
        ]
        for name in self.statistics:
            lines.append(f"  {name}: {self.thresholds[name]}")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'statistics': list(self.statistics),
            'thresholds': dict(self.thresholds),
            'included_channels': list(self.included_channels),
            'excluded_channels': list(self.excluded_channels),
            'rejected_epochs': list(self.rejected_epochs),
            'bad_channels': list(self.bad_channels),
            'epoch_bad_channels': [list(chs) for chs in self.epoch_bad_channels],
        }


# =============================================================================
# DETECTION
# =============================================================================

def _flags(scores: Dict[str, np.ndarray], thresholds: Dict[str, float], shape: Tuple[int, ...]) -> np.ndarray:
    """True wherever any statistic's |z| exceeds its threshold."""
    flagged = np.zeros(shape, dtype=bool)
    for name, z in scores.items():
        flagged |= np.abs(z) > thresholds[name]
    return flagged


def _channel_values(name: str, values: np.ndarray, data: np.ndarray) -> np.ndarray:
    """
    Per-channel value of a statistic, to be scored across channels.

    Deviations average to zero over epochs, so for ``deviation`` the channel
    mean over all epochs is returned instead.
    """
    if name == 'deviation':
        return np.mean(data, axis=(0, 1))
    return values.mean(axis=0)


@log_execution_time()
def detect_artifacts(epoch_set: EpochSet,
                     exclude_channels: Optional[Sequence[str]] = None,
                     thresholds: Optional[Thresholds] = None,
                     statistics: Sequence[str] = DEFAULT_STATISTICS) -> Tuple[EpochSet, ArtifactReport]:
    """
    Flag outlier epochs and channels.

    Args:
        epoch_set: Input epochs (unchanged)
        exclude_channels: Channels left out of all statistics and never
            flagged (e.g. EOG)
        thresholds: One z threshold for every statistic, or a mapping
            statistic -> threshold; defaults to 3.0
        statistics: Active statistics

    Returns:
        Tuple of (EpochSet with updated flags sharing the input data array,
        ArtifactReport)

    Raises:
        UnknownChannelError: If an excluded channel is absent
        DataValidationError: If a statistic name is unknown

    Example:
        >>> flagged, report = detect_artifacts(epochs, exclude_channels=['EOG'])
        >>> flagged.data is epochs.data
        True
    """
    statistics = tuple(statistics)
    unknown = [name for name in statistics if name not in STATISTICS]
    if unknown or not statistics:
        raise DataValidationError('statistics', f"non-empty subset of {STATISTICS}", list(statistics))

    excluded = list(exclude_channels or [])
    epoch_set.channel_indices(excluded)
    resolved = resolve_thresholds(thresholds, statistics)

    excluded_set = set(excluded)
    included = [ch for ch in epoch_set.channel_labels if ch not in excluded_set]
    included_idx = epoch_set.channel_indices(included)
    n_epochs = epoch_set.n_epochs

    report = ArtifactReport(
        statistics=statistics,
        thresholds=resolved,
        included_channels=included,
        excluded_channels=excluded,
        epoch_bad_channels=[[] for _ in range(n_epochs)],
    )

    if n_epochs == 0 or not included:
        logger.warning(
            f"Artifact detection skipped: {n_epochs} epochs, "
            f"{len(included)} included channels"
        )
        return epoch_set._replace(), report

    data = epoch_set.data[:, :, included_idx]
    values = compute_statistics(data, statistics)

    # Epoch level: mean across channels, scored across epochs
    report.epoch_scores = {name: zscore(v.mean(axis=1)) for name, v in values.items()}
    epoch_flags = _flags(report.epoch_scores, resolved, (n_epochs,))

    # Channel level: mean across epochs, scored across channels
    report.channel_scores = {
        name: zscore(_channel_values(name, v, data))
        for name, v in values.items()
    }
    channel_flags = _flags(report.channel_scores, resolved, (len(included),))

    # Epoch x channel level: each channel scored across epochs
    report.epoch_channel_scores = {name: zscore(v, axis=0) for name, v in values.items()}
    cell_flags = _flags(report.epoch_channel_scores, resolved, (n_epochs, len(included)))

    report.rejected_epochs = [int(i) for i in np.flatnonzero(epoch_flags)]
    report.bad_channels = [included[i] for i in np.flatnonzero(channel_flags)]
    report.epoch_bad_channels = [
        [included[j] for j in np.flatnonzero(cell_flags[i])] for i in range(n_epochs)
    ]

    epoch_meta = []
    for i, meta in enumerate(epoch_set.epoch_meta):
        meta = meta.copy()
        meta.rejected = meta.rejected or bool(epoch_flags[i])
        meta.bad_channels = meta.bad_channels + [
            ch for ch in report.epoch_bad_channels[i] if ch not in meta.bad_channels
        ]
        epoch_meta.append(meta)

    bad_channels = epoch_set.bad_channels + [
        ch for ch in report.bad_channels if ch not in epoch_set.bad_channels
    ]

    metadata = dict(epoch_set.metadata)
    metadata['artifacts'] = report.to_dict()

    logger.info(
        f"Artifact detection: {report.n_rejected}/{n_epochs} epochs rejected, "
        f"bad channels {report.bad_channels or 'none'}"
    )

    flagged = epoch_set._replace(
        epoch_meta=epoch_meta,
        bad_channels=bad_channels,
        metadata=metadata,
    )
    return flagged, report
