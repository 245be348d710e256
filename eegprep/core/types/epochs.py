"""
Epoch Types
===========

This module defines the event-locked epoch container produced by the
Epocher and annotated by the ArtifactDetector.

Data Types:
----------
1. EpochMeta: Per-epoch record (originating event, label, rejection flag)
2. EpochSet: 3D epoch array plus shared time grid and channel metadata

Layout:
------
``EpochSet.data`` is indexed ``[epoch, timepoint, channel]``. Every epoch
shares the same ``times`` grid (seconds relative to event onset).

Rejection is a soft delete: flagged epochs stay in ``data`` until
``purge_rejected()`` is called, so consumers choose their own inclusion
policy.
"""

from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Any, Sequence, Tuple
import numpy as np

from eegprep.core.exceptions import ShapeMismatchError, UnknownChannelError
from eegprep.core.types.recording import EventMarker, Location


@dataclass
class EpochMeta:
    """
    Metadata for a single epoch.

    Attributes:
        event_code: Code of the originating event
        event_label: Label carried by the originating event
        event_sample: Sample index of the originating event in the recording
        label: Condition label assigned at epoching time
        rejected: Soft-rejection flag (set by artifact detection)
        tag: Arbitrary consumer annotation
        bad_channels: Channels flagged as outliers within this epoch
    """
    event_code: int
    event_label: str = ''
    event_sample: int = 0
    label: str = ''
    rejected: bool = False
    tag: Any = None
    bad_channels: List[str] = field(default_factory=list)

    def copy(self) -> 'EpochMeta':
        return replace(self, bad_channels=list(self.bad_channels))


@dataclass
class EpochSet:
    """
    Container for event-locked epochs.

    Attributes:
        data: Epoch array, shape (n_epochs, n_times, n_channels)
        times: Time offsets in seconds relative to event onset
        sample_rate: Sampling frequency in Hz
        channel_labels: Channel names, one per last-axis index
        epoch_meta: One EpochMeta per epoch
        channel_locations: Optional label -> (x, y[, z]) mapping
        bad_channels: Channels rejected across the whole set
        skipped_events: Matching events dropped because their window fell
            outside the recording
        baseline: Baseline window applied, if any
        metadata: Processing history
    """
    data: np.ndarray
    times: np.ndarray
    sample_rate: float
    channel_labels: List[str]
    epoch_meta: List[EpochMeta] = field(default_factory=list)
    channel_locations: Optional[Dict[str, Location]] = None
    bad_channels: List[str] = field(default_factory=list)
    skipped_events: List[EventMarker] = field(default_factory=list)
    baseline: Optional[Tuple[Optional[float], Optional[float]]] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Validate shape invariants."""
        self.data = np.asarray(self.data, dtype=float)
        self.times = np.asarray(self.times, dtype=float)
        self.channel_labels = list(self.channel_labels)
        self.epoch_meta = list(self.epoch_meta)

        if self.data.ndim != 3:
            raise ShapeMismatchError(
                'EpochSet.data', '3D (epochs, times, channels)', f"{self.data.ndim}D"
            )
        if len(self.times) != self.data.shape[1]:
            raise ShapeMismatchError('EpochSet.times', self.data.shape[1], len(self.times))
        if len(self.channel_labels) != self.data.shape[2]:
            raise ShapeMismatchError(
                'EpochSet.channel_labels', self.data.shape[2], len(self.channel_labels)
            )
        if len(self.epoch_meta) != self.data.shape[0]:
            raise ShapeMismatchError('EpochSet.epoch_meta', self.data.shape[0], len(self.epoch_meta))

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def n_epochs(self) -> int:
        return self.data.shape[0]

    @property
    def n_times(self) -> int:
        return self.data.shape[1]

    @property
    def n_channels(self) -> int:
        return self.data.shape[2]

    @property
    def n_skipped(self) -> int:
        """Number of matching events skipped by the boundary check."""
        return len(self.skipped_events)

    @property
    def rejected_mask(self) -> np.ndarray:
        """Boolean array, True where an epoch is flagged as rejected."""
        return np.array([meta.rejected for meta in self.epoch_meta], dtype=bool)

    @property
    def n_rejected(self) -> int:
        return int(self.rejected_mask.sum())

    @property
    def labels(self) -> List[str]:
        """Condition label of each epoch."""
        return [meta.label for meta in self.epoch_meta]

    # =========================================================================
    # DATA ACCESS
    # =========================================================================

    def channel_indices(self, labels: Sequence[str]) -> List[int]:
        """Resolve channel labels to last-axis indices."""
        missing = [label for label in labels if label not in self.channel_labels]
        if missing:
            raise UnknownChannelError(missing, self.channel_labels)
        return [self.channel_labels.index(label) for label in labels]

    def get_data(self, include_rejected: bool = True) -> np.ndarray:
        """
        Get the epoch array.

        Args:
            include_rejected: If False, rejected epochs are left out

        Returns:
            np.ndarray: Shape (n_selected_epochs, n_times, n_channels)
        """
        if include_rejected:
            return self.data
        return self.data[~self.rejected_mask]

    def get_epochs_by_label(self, label: str) -> np.ndarray:
        """Indices of the epochs carrying a condition label."""
        return np.array([i for i, meta in enumerate(self.epoch_meta) if meta.label == label], dtype=int)

    # =========================================================================
    # SELECTION (returns new EpochSets)
    # =========================================================================

    def purge_rejected(self) -> 'EpochSet':
        """Create a new EpochSet with rejected epochs removed."""
        keep = ~self.rejected_mask
        return self._replace(
            data=self.data[keep].copy(),
            epoch_meta=[meta.copy() for meta, kept in zip(self.epoch_meta, keep) if kept],
        )

    def select_channels(self, labels: Sequence[str]) -> 'EpochSet':
        """Create a new EpochSet holding only the given channels, in that order."""
        indices = self.channel_indices(labels)
        selected = set(labels)
        locations = None
        if self.channel_locations is not None:
            locations = {k: v for k, v in self.channel_locations.items() if k in selected}
        return self._replace(
            data=self.data[:, :, indices].copy(),
            channel_labels=list(labels),
            channel_locations=locations,
            bad_channels=[ch for ch in self.bad_channels if ch in selected],
            epoch_meta=[
                replace(meta, bad_channels=[ch for ch in meta.bad_channels if ch in selected])
                for meta in self.epoch_meta
            ],
        )

    def drop_channels(self, labels: Sequence[str]) -> 'EpochSet':
        """Create a new EpochSet without the given channels."""
        self.channel_indices(labels)
        dropped = set(labels)
        return self.select_channels([ch for ch in self.channel_labels if ch not in dropped])

    def copy(self) -> 'EpochSet':
        """Create a deep copy."""
        return self._replace(data=self.data.copy())

    def _replace(self, **changes: Any) -> 'EpochSet':
        fields = {
            'data': self.data,
            'times': self.times.copy(),
            'sample_rate': self.sample_rate,
            'channel_labels': list(self.channel_labels),
            'epoch_meta': [meta.copy() for meta in self.epoch_meta],
            'channel_locations': (
                dict(self.channel_locations) if self.channel_locations is not None else None
            ),
            'bad_channels': list(self.bad_channels),
            'skipped_events': list(self.skipped_events),
            'baseline': self.baseline,
            'metadata': dict(self.metadata),
        }
        fields.update(changes)
        return EpochSet(**fields)

    def get_info(self) -> Dict[str, Any]:
        """Get summary information."""
        label_counts: Dict[str, int] = {}
        for meta in self.epoch_meta:
            label_counts[meta.label] = label_counts.get(meta.label, 0) + 1
        return {
            'n_epochs': self.n_epochs,
            'n_times': self.n_times,
            'n_channels': self.n_channels,
            'tmin': float(self.times[0]) if self.n_times else None,
            'tmax': float(self.times[-1]) if self.n_times else None,
            'sample_rate': self.sample_rate,
            'label_counts': label_counts,
            'n_rejected': self.n_rejected,
            'n_skipped': self.n_skipped,
            'bad_channels': list(self.bad_channels),
            'baseline': self.baseline,
        }

    def __repr__(self) -> str:
        return (
            f"EpochSet("
            f"epochs={self.n_epochs}, "
            f"times={self.n_times}, "
            f"channels={self.n_channels}, "
            f"rejected={self.n_rejected})"
        )
