"""
Core Types Module
=================

This module exports the core data types of the eegprep engine.

Available Types:
---------------
- Recording: Continuous multichannel signal with events and channel metadata
- EventMarker: Event on a recording's timeline
- EpochSet: Event-locked epochs sharing one time grid
- EpochMeta: Per-epoch metadata (origin, label, rejection flag)

Example Usage:
    ```python
    from eegprep.core.types import Recording, EventMarker

    recording = Recording(
        samples=samples,            # (n_samples, n_channels)
        sample_rate=256,
        channel_labels=['Fz', 'Cz', 'Pz', 'Oz'],
        events=[EventMarker(1000, 1), EventMarker(2000, 1)]
    )
    ```
"""

from eegprep.core.types.recording import (
    Recording,
    EventMarker,
)
from eegprep.core.types.epochs import (
    EpochSet,
    EpochMeta,
)

__all__ = [
    'Recording',
    'EventMarker',
    'EpochSet',
    'EpochMeta',
]
