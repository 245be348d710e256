"""
Preprocessing Steps Module
==========================

Pipeline adapters around the core operations. Each step implements the
IPreprocessor interface and can be used standalone or composed into a
PreprocessingPipeline.

Available Steps:
---------------
- ReReference: Common average or channel-subset reference (Recording)
- NotchFilter: IIR notch for line noise, 50/60 Hz (Recording)
- FrequencyFilter: Zero-phase IIR/FIR high/low/band-pass (Recording)
- Epocher: Event-locked epoching with baseline correction (Recording -> EpochSet)
- ArtifactDetector: z-score outlier flagging (EpochSet)

Typical Order:
-------------
1. ReReference: 'average'
2. FrequencyFilter: 1-40 Hz
3. Epocher: (-0.2, 0.8) s around the events of interest
4. ArtifactDetector: |z| > 3
"""

from eegprep.preprocessing.steps.rereference import ReReference
from eegprep.preprocessing.steps.notch_filter import NotchFilter
from eegprep.preprocessing.steps.frequency_filter import FrequencyFilter
from eegprep.preprocessing.steps.epocher import Epocher
from eegprep.preprocessing.steps.artifact_detector import ArtifactDetector

__all__ = [
    'ReReference',
    'NotchFilter',
    'FrequencyFilter',
    'Epocher',
    'ArtifactDetector',
]
