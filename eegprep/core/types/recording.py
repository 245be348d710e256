"""
Continuous Recording Types
==========================

This module defines the data types for continuous multichannel recordings.

Data Types:
----------
1. EventMarker: A single (sample, code, label) event on the timeline
2. Recording: Continuous signal matrix plus events and channel metadata

Layout:
------
``Recording.samples`` is a dense float matrix with one row per time sample
and one column per channel, i.e. shape ``(n_samples, n_channels)``. All
transforms in ``eegprep.preprocessing`` return a new Recording; none of them
mutate the one they receive.

Example Usage:
    ```python
    from eegprep.core.types import Recording, EventMarker

    recording = Recording(
        samples=samples,            # Shape: (n_samples, n_channels)
        sample_rate=256.0,
        channel_labels=['Fz', 'Cz', 'Pz', 'Oz'],
        events=[EventMarker(sample=1000, code=1, label='target')]
    )

    print(f"Duration: {recording.duration_seconds:.1f}s")
    print(recording.get_event_counts())
    ```
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any, Sequence, Tuple
import numpy as np

from eegprep.core.exceptions import (
    DataValidationError,
    ShapeMismatchError,
    UnknownChannelError,
)


Location = Tuple[float, ...]


@dataclass(frozen=True)
class EventMarker:
    """
    A single event on a recording's timeline.

    Attributes:
        sample: Sample index where the event occurred
        code: Event code/type
        label: Human-readable label
    """
    sample: int
    code: int
    label: str = ''

    def __repr__(self) -> str:
        return f"EventMarker(sample={self.sample}, code={self.code}, label='{self.label}')"


@dataclass
class Recording:
    """
    Container for a continuous multichannel recording.

    Attributes:
        samples: Signal matrix, shape (n_samples, n_channels)
        sample_rate: Sampling frequency in Hz
        channel_labels: Unique channel names, one per column
        events: Event markers sorted by sample index
        channel_locations: Optional label -> (x, y[, z]) mapping
        metadata: Processing history and free-form annotations
    """
    samples: np.ndarray
    sample_rate: float
    channel_labels: List[str] = field(default_factory=list)
    events: List[EventMarker] = field(default_factory=list)
    channel_locations: Optional[Dict[str, Location]] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Validate the data-model invariants."""
        self.samples = np.asarray(self.samples, dtype=float)

        if self.samples.ndim != 2:
            raise ShapeMismatchError(
                'Recording.samples', '2D (samples, channels)', f"{self.samples.ndim}D"
            )

        if not self.channel_labels:
            self.channel_labels = [f"Ch{i+1}" for i in range(self.samples.shape[1])]
        self.channel_labels = list(self.channel_labels)

        if len(self.channel_labels) != self.samples.shape[1]:
            raise ShapeMismatchError(
                'Recording.channel_labels',
                f"{self.samples.shape[1]} labels",
                f"{len(self.channel_labels)} labels"
            )

        if len(set(self.channel_labels)) != len(self.channel_labels):
            duplicates = sorted({
                label for label in self.channel_labels
                if self.channel_labels.count(label) > 1
            })
            raise DataValidationError(
                'channel_labels', 'unique channel names', f"duplicates {duplicates}"
            )

        if not self.sample_rate or self.sample_rate <= 0:
            raise DataValidationError(
                'sample_rate', 'a positive frequency in Hz', str(self.sample_rate)
            )
        self.sample_rate = float(self.sample_rate)

        self.events = list(self.events)
        previous = -1
        for event in self.events:
            if not 0 <= event.sample < self.n_samples:
                raise DataValidationError(
                    'events', f"sample index in [0, {self.n_samples})", repr(event)
                )
            if event.sample < previous:
                raise DataValidationError(
                    'events', 'events sorted by sample index', repr(event)
                )
            previous = event.sample

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def n_samples(self) -> int:
        """Number of time samples."""
        return self.samples.shape[0]

    @property
    def n_channels(self) -> int:
        """Number of channels."""
        return self.samples.shape[1]

    @property
    def duration_seconds(self) -> float:
        """Total duration in seconds."""
        return self.n_samples / self.sample_rate

    @property
    def nyquist(self) -> float:
        """Nyquist frequency (half the sample rate)."""
        return self.sample_rate / 2.0

    @property
    def n_events(self) -> int:
        """Number of events."""
        return len(self.events)

    @property
    def shape(self) -> Tuple[int, int]:
        """Signal shape (n_samples, n_channels)."""
        return self.samples.shape

    @property
    def times(self) -> np.ndarray:
        """Time axis in seconds."""
        return np.arange(self.n_samples) / self.sample_rate

    # =========================================================================
    # CHANNEL ACCESS
    # =========================================================================

    def channel_indices(self, labels: Sequence[str]) -> List[int]:
        """
        Resolve channel labels to column indices.

        Raises:
            UnknownChannelError: If any label is absent (all missing labels
                are reported together)
        """
        missing = [label for label in labels if label not in self.channel_labels]
        if missing:
            raise UnknownChannelError(missing, self.channel_labels)
        return [self.channel_labels.index(label) for label in labels]

    def get_channel(self, label: str) -> np.ndarray:
        """Get the samples of one channel, shape (n_samples,)."""
        return self.samples[:, self.channel_indices([label])[0]]

    def select_channels(self, labels: Sequence[str]) -> 'Recording':
        """Create a new Recording holding only the given channels, in that order."""
        indices = self.channel_indices(labels)
        return self._replace(
            samples=self.samples[:, indices].copy(),
            channel_labels=list(labels),
            channel_locations=self._locations_for(labels),
        )

    def drop_channels(self, labels: Sequence[str]) -> 'Recording':
        """Create a new Recording without the given channels."""
        self.channel_indices(labels)
        dropped = set(labels)
        keep = [label for label in self.channel_labels if label not in dropped]
        return self.select_channels(keep)

    # =========================================================================
    # EVENT METHODS
    # =========================================================================

    def event_time(self, event: EventMarker) -> float:
        """Onset of an event in seconds."""
        return event.sample / self.sample_rate

    def get_events_by_code(self, code: int) -> List[EventMarker]:
        """Get all events with a specific code."""
        return [e for e in self.events if e.code == code]

    def get_event_counts(self) -> Dict[int, int]:
        """Get count of each event type."""
        counts: Dict[int, int] = {}
        for event in self.events:
            counts[event.code] = counts.get(event.code, 0) + 1
        return counts

    # =========================================================================
    # COPY-ON-WRITE CONSTRUCTORS
    # =========================================================================

    def with_samples(self, samples: np.ndarray, **metadata: Any) -> 'Recording':
        """
        Create a new Recording with replaced samples and extra metadata.

        The new matrix must keep the original shape; every other field is
        carried over unchanged.
        """
        samples = np.asarray(samples, dtype=float)
        if samples.shape != self.samples.shape:
            raise ShapeMismatchError('Recording.with_samples', self.samples.shape, samples.shape)
        return self._replace(samples=samples, metadata={**self.metadata, **metadata})

    def with_locations(self, locations: Dict[str, Location]) -> 'Recording':
        """Create a new Recording with channel locations attached."""
        self.channel_indices(list(locations))
        merged = dict(self.channel_locations or {})
        merged.update({label: tuple(float(v) for v in loc) for label, loc in locations.items()})
        return self._replace(channel_locations=merged)

    def copy(self) -> 'Recording':
        """Create a deep copy."""
        return self._replace(samples=self.samples.copy())

    def _replace(self, **changes: Any) -> 'Recording':
        fields = {
            'samples': self.samples,
            'sample_rate': self.sample_rate,
            'channel_labels': list(self.channel_labels),
            'events': list(self.events),
            'channel_locations': (
                dict(self.channel_locations) if self.channel_locations is not None else None
            ),
            'metadata': dict(self.metadata),
        }
        fields.update(changes)
        return Recording(**fields)

    def _locations_for(self, labels: Sequence[str]) -> Optional[Dict[str, Location]]:
        if self.channel_locations is None:
            return None
        return {
            label: self.channel_locations[label]
            for label in labels if label in self.channel_locations
        }

    # =========================================================================
    # SERIALIZATION
    # =========================================================================

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            'samples': self.samples.tolist(),
            'sample_rate': self.sample_rate,
            'channel_labels': list(self.channel_labels),
            'events': [
                {'sample': e.sample, 'code': e.code, 'label': e.label}
                for e in self.events
            ],
            'channel_locations': (
                {k: list(v) for k, v in self.channel_locations.items()}
                if self.channel_locations is not None else None
            ),
            'metadata': self.metadata,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Recording':
        """Create from dictionary."""
        locations = data.get('channel_locations')
        return cls(
            samples=np.array(data['samples'], dtype=float),
            sample_rate=data['sample_rate'],
            channel_labels=data.get('channel_labels', []),
            events=[
                EventMarker(sample=e['sample'], code=e['code'], label=e.get('label', ''))
                for e in data.get('events', [])
            ],
            channel_locations=(
                {k: tuple(v) for k, v in locations.items()} if locations is not None else None
            ),
            metadata=data.get('metadata', {}),
        )

    def get_info(self) -> Dict[str, Any]:
        """Get summary information."""
        return {
            'n_channels': self.n_channels,
            'n_samples': self.n_samples,
            'sample_rate': self.sample_rate,
            'duration_seconds': self.duration_seconds,
            'n_events': self.n_events,
            'event_counts': self.get_event_counts(),
            'channel_labels': list(self.channel_labels),
            'has_locations': self.channel_locations is not None,
        }

    def __repr__(self) -> str:
        return (
            f"Recording("
            f"shape={self.shape}, "
            f"sr={self.sample_rate}Hz, "
            f"duration={self.duration_seconds:.1f}s, "
            f"events={self.n_events})"
        )
