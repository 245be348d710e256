"""
Core Interfaces Module
======================

Abstract interfaces of the eegprep engine.

Available Interfaces:
--------------------
- IPreprocessor: Interface for pipeline steps (referencing, filtering,
  epoching, artifact detection)
"""

from eegprep.core.interfaces.i_preprocessor import IPreprocessor

__all__ = [
    'IPreprocessor',
]
