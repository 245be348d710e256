"""
eegprep
=======

EEG signal processing and epoching engine: re-referencing, zero-phase
frequency filtering, event-locked epoching with baseline correction, and
z-score artifact detection.

Quick Start:
-----------
```python
import numpy as np
import eegprep
from eegprep import Recording, EventMarker

eegprep.setup_logging(level='INFO')

recording = Recording(
    samples=np.random.randn(2560, 4),
    sample_rate=256,
    channel_labels=['Fz', 'Cz', 'Pz', 'Oz'],
    events=[EventMarker(1000, 1), EventMarker(2000, 1)]
)

rec = eegprep.reference(recording, 'average')
rec = eegprep.filter_recording(rec, 'iir', low_freq=1.0, high_freq=40.0)
epochs = eegprep.epoch(rec, [1], ['cond'], (-0.1, 0.4), (-0.1, 0.0))
epochs, report = eegprep.detect_artifacts(epochs)
```

Project Structure:
-----------------
eegprep/
├── core/               # Types, interfaces, config, exceptions
├── preprocessing/      # Operations, pipeline steps, pipeline
└── utils/              # Utilities (logging, validation)
"""

# Version
__version__ = '1.0.0'

from eegprep import core
from eegprep import utils

from eegprep.core import (
    # Configuration
    ConfigManager,
    load_config,

    # Types
    Recording,
    EventMarker,
    EpochSet,
    EpochMeta,

    # Base exception
    EEGPrepError,
)

from eegprep.preprocessing import (
    reference,
    filter_recording,
    notch_filter,
    epoch,
    baseline_correct,
    detect_artifacts,
    ArtifactReport,
    PreprocessingPipeline,
    create_standard_pipeline,
    create_pipeline_from_config,
)

from eegprep.utils import (
    setup_logging,
    setup_logging_from_config,
    get_logger,
)

__all__ = [
    # Modules
    'core',
    'utils',

    # Configuration
    'ConfigManager',
    'load_config',

    # Types
    'Recording',
    'EventMarker',
    'EpochSet',
    'EpochMeta',
    'EEGPrepError',

    # Operations
    'reference',
    'filter_recording',
    'notch_filter',
    'epoch',
    'baseline_correct',
    'detect_artifacts',
    'ArtifactReport',

    # Pipeline
    'PreprocessingPipeline',
    'create_standard_pipeline',
    'create_pipeline_from_config',

    # Logging
    'setup_logging',
    'setup_logging_from_config',
    'get_logger',

    # Version
    '__version__',
]
