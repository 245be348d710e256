"""
Preprocessing Module
====================

The four core operations, their pipeline step adapters, and the pipeline
that composes them.

Module Structure:
----------------
- referencing.py: ``reference`` (common average or channel subset)
- filtering.py: ``filter_recording``, ``notch_filter``, ``design_filter``
- epoching.py: ``epoch``, ``baseline_correct``
- artifacts.py: ``detect_artifacts``, ``ArtifactReport``
- steps/: IPreprocessor adapters for each operation
- pipeline.py: ``PreprocessingPipeline`` and factories

Usage Examples:
    ```python
    # Method 1: Call the operations directly
    from eegprep.preprocessing import reference, filter_recording, epoch, detect_artifacts

    rec = reference(recording, 'average')
    rec = filter_recording(rec, 'iir', low_freq=1.0, high_freq=40.0, order=4)
    epochs = epoch(rec, [1, 2], ['target', 'standard'], (-0.2, 0.8), (None, 0.0))
    epochs, report = detect_artifacts(epochs, exclude_channels=['EOG'])

    # Method 2: Use the standard pipeline factory
    from eegprep.preprocessing import create_standard_pipeline

    pipeline = create_standard_pipeline(event_codes=[1, 2], epoch_labels=['target', 'standard'])
    epochs = pipeline.process(recording)

    # Method 3: Build from configuration
    from eegprep.core import load_config
    from eegprep.preprocessing import create_pipeline_from_config

    pipeline = create_pipeline_from_config(load_config('configs/default.yaml'))
    ```
"""

# Core operations
from eegprep.preprocessing.referencing import reference, reference_signal, AVERAGE
from eegprep.preprocessing.filtering import (
    FilterDesign,
    design_filter,
    filter_recording,
    notch_filter,
)
from eegprep.preprocessing.epoching import epoch, baseline_correct, compute_times
from eegprep.preprocessing.artifacts import (
    ArtifactReport,
    compute_statistics,
    detect_artifacts,
    zscore,
)

# Pipeline
from eegprep.preprocessing.pipeline import (
    PreprocessingPipeline,
    create_standard_pipeline,
    create_pipeline_from_config,
)

# Steps
from eegprep.preprocessing.steps import (
    ReReference,
    NotchFilter,
    FrequencyFilter,
    Epocher,
    ArtifactDetector,
)

__all__ = [
    # Operations
    'reference',
    'reference_signal',
    'AVERAGE',
    'FilterDesign',
    'design_filter',
    'filter_recording',
    'notch_filter',
    'epoch',
    'baseline_correct',
    'compute_times',
    'ArtifactReport',
    'compute_statistics',
    'detect_artifacts',
    'zscore',

    # Pipeline
    'PreprocessingPipeline',
    'create_standard_pipeline',
    'create_pipeline_from_config',

    # Steps
    'ReReference',
    'NotchFilter',
    'FrequencyFilter',
    'Epocher',
    'ArtifactDetector',
]
