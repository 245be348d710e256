"""
IPreprocessor Interface
=======================

This module defines the abstract interface for pipeline steps.

The four core operations (``reference``, ``filter_recording``, ``epoch``,
``detect_artifacts``) are plain functions. Steps implementing IPreprocessor
wrap one of them so it can be configured once and composed in a
``PreprocessingPipeline``:

    Recording -> ReReference -> FrequencyFilter -> Epocher -> ArtifactDetector -> EpochSet

Design Principles:
- Each step is a separate class implementing IPreprocessor
- Steps are stateless: the same input always gives the same output
- ``process`` returns a new object and never mutates its input

Pipeline Composition:
    ```python
    pipeline = PreprocessingPipeline()
    pipeline.add_step(ReReference(), {'ref_channels': 'average'})
    pipeline.add_step(FrequencyFilter(), {'low_freq': 1.0, 'high_freq': 40.0})
    pipeline.add_step(Epocher(), {'event_codes': [1], 'time_lim': (-0.2, 0.8)})
    pipeline.initialize({})

    epochs = pipeline.process(recording)
    ```
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, Tuple, Type, Union

from eegprep.core.types import Recording, EpochSet


StepData = Union[Recording, EpochSet]


class IPreprocessor(ABC):
    """
    Abstract interface for preprocessing steps.

    Subclasses declare which data type they accept through ``input_types``
    so a pipeline fails early when steps are chained in the wrong order.
    """

    input_types: Tuple[Type, ...] = (Recording,)

    # =========================================================================
    # ABSTRACT PROPERTIES
    # =========================================================================

    @property
    @abstractmethod
    def name(self) -> str:
        """
        Unique identifier for this preprocessing step.

        Returns:
            str: Step name (e.g., "rereference", "frequency_filter")
        """
        pass

    # =========================================================================
    # ABSTRACT METHODS
    # =========================================================================

    @abstractmethod
    def initialize(self, config: Dict[str, Any]) -> None:
        """
        Initialize the step with configuration parameters.

        Args:
            config: Step-specific settings

        Raises:
            EEGPrepError: If the configuration is invalid
        """
        pass

    @abstractmethod
    def process(self, data: StepData, **kwargs) -> StepData:
        """
        Apply the step to its input and return a new object.

        Args:
            data: Recording or EpochSet, depending on the step

        Returns:
            The transformed Recording or EpochSet
        """
        pass

    @abstractmethod
    def get_params(self) -> Dict[str, Any]:
        """Get current step parameters."""
        pass

    @abstractmethod
    def set_params(self, **params) -> 'IPreprocessor':
        """
        Set step parameters.

        Returns:
            Self for method chaining
        """
        pass

    # =========================================================================
    # UTILITY METHODS
    # =========================================================================

    def validate_input(self, data: StepData) -> None:
        """
        Check that the step received the data type it operates on.

        Raises:
            TypeError: If the input type is not accepted
        """
        if not isinstance(data, self.input_types):
            expected = ' or '.join(t.__name__ for t in self.input_types)
            raise TypeError(
                f"{self.__class__.__name__} expects {expected}, "
                f"got {type(data).__name__}"
            )

    def __repr__(self) -> str:
        """String representation of the step."""
        params = self.get_params()
        param_str = ", ".join(f"{k}={v}" for k, v in list(params.items())[:3])
        return f"{self.__class__.__name__}({param_str})"

    def __call__(self, data: StepData, **kwargs) -> StepData:
        """Equivalent to calling process()."""
        return self.process(data, **kwargs)
