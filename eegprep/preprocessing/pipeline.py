"""
Preprocessing Pipeline
======================

This module composes preprocessing steps into a sequential pipeline.

Pipeline Execution Flow:
    Recording -> ReReference -> [NotchFilter] -> FrequencyFilter -> Epocher -> ArtifactDetector -> EpochSet

Each step's output becomes the next step's input. Steps declare the data
type they accept, so putting an EpochSet step before the Epocher fails with
a TypeError on the first ``process`` call. Errors raised by a step propagate
unchanged; no partial result is returned.

Features:
---------
- Sequential step execution with per-step timing
- Step-wise debugging (``process_step``, ``process_up_to``)
- Configurable from a dict or a ConfigManager

Usage Example:
    ```python
    from eegprep.preprocessing import create_standard_pipeline

    pipeline = create_standard_pipeline(
        low_freq=1.0,
        high_freq=40.0,
        event_codes=[1, 2],
        epoch_labels=['target', 'standard'],
        time_lim=(-0.2, 0.8),
        baseline=(None, 0.0)
    )
    epochs = pipeline.process(recording)
    print(pipeline.summary())
    ```
"""

from typing import Dict, List, Optional, Any, Sequence, Tuple, Union
import logging
import time

from eegprep.core.config import ConfigManager
from eegprep.core.interfaces.i_preprocessor import IPreprocessor, StepData
from eegprep.preprocessing.artifacts import DEFAULT_STATISTICS, Thresholds
from eegprep.preprocessing.epoching import DEFAULT_TIME_LIM, Window
from eegprep.preprocessing.filtering import DEFAULT_ORDER, IIR
from eegprep.preprocessing.referencing import AVERAGE, RefChannels


# Configure module logger
logger = logging.getLogger(__name__)


class PreprocessingPipeline:
    """
    Composable preprocessing pipeline.

    Attributes:
        _steps (List): List of (name, preprocessor, config) tuples
        _common_config (Dict): Configuration shared across all steps
        _is_initialized (bool): Whether pipeline has been initialized
        _verbose (bool): Log each step as it runs
        _timing (bool): Log execution time per step

    Example:
        >>> pipeline = PreprocessingPipeline()
        >>> pipeline.add_step(ReReference(), {'ref_channels': 'average'})
        >>> pipeline.add_step(FrequencyFilter(), {'low_freq': 1.0, 'high_freq': 40.0})
        >>> pipeline.initialize()
        >>> filtered = pipeline.process(recording)
    """

    def __init__(self, verbose: bool = False, timing: bool = False):
        """
        Initialize the preprocessing pipeline.

        Args:
            verbose: Enable verbose logging
            timing: Log execution time for each step
        """
        self._steps: List[Tuple[str, IPreprocessor, Dict[str, Any]]] = []
        self._common_config: Dict[str, Any] = {}

        self._is_initialized: bool = False
        self._verbose: bool = verbose
        self._timing: bool = timing

        self._execution_times: Dict[str, float] = {}

        logger.debug("PreprocessingPipeline instantiated")

    # =========================================================================
    # PIPELINE CONSTRUCTION
    # =========================================================================

    def add_step(
        self,
        preprocessor: IPreprocessor,
        config: Optional[Dict[str, Any]] = None,
        name: Optional[str] = None
    ) -> 'PreprocessingPipeline':
        """
        Add a preprocessing step to the pipeline.

        Steps are executed in the order they are added.

        Args:
            preprocessor: Preprocessor instance implementing IPreprocessor
            config: Step-specific configuration (merged with common config)
            name: Optional name for the step (defaults to preprocessor.name)

        Returns:
            Self for method chaining

        Raises:
            TypeError: If preprocessor doesn't implement IPreprocessor
        """
        if not isinstance(preprocessor, IPreprocessor):
            raise TypeError(
                f"Expected IPreprocessor, got {type(preprocessor).__name__}"
            )

        self._steps.append((self._unique_name(name or preprocessor.name), preprocessor, config or {}))
        logger.debug(f"Added step '{self._steps[-1][0]}' to pipeline")

        self._is_initialized = False
        return self

    def insert_step(
        self,
        index: int,
        preprocessor: IPreprocessor,
        config: Optional[Dict[str, Any]] = None,
        name: Optional[str] = None
    ) -> 'PreprocessingPipeline':
        """
        Insert a preprocessing step at a specific position.

        Args:
            index: Position to insert at (0 = first)
            preprocessor: Preprocessor instance
            config: Step-specific configuration
            name: Optional step name

        Returns:
            Self for method chaining
        """
        if not isinstance(preprocessor, IPreprocessor):
            raise TypeError(
                f"Expected IPreprocessor, got {type(preprocessor).__name__}"
            )

        name = self._unique_name(name or preprocessor.name)
        self._steps.insert(index, (name, preprocessor, config or {}))
        self._is_initialized = False

        logger.debug(f"Inserted step '{name}' at position {index}")
        return self

    def remove_step(self, name_or_index: Union[str, int]) -> 'PreprocessingPipeline':
        """
        Remove a step from the pipeline.

        Raises:
            ValueError: If step not found
        """
        if isinstance(name_or_index, int):
            if 0 <= name_or_index < len(self._steps):
                removed = self._steps.pop(name_or_index)
                logger.debug(f"Removed step '{removed[0]}' from position {name_or_index}")
            else:
                raise ValueError(f"Invalid index: {name_or_index}")
        else:
            for i, (name, _, _) in enumerate(self._steps):
                if name == name_or_index:
                    self._steps.pop(i)
                    logger.debug(f"Removed step '{name}'")
                    break
            else:
                raise ValueError(f"Step not found: {name_or_index}")

        self._is_initialized = False
        return self

    def clear(self) -> 'PreprocessingPipeline':
        """Remove all steps from the pipeline."""
        self._steps.clear()
        self._is_initialized = False
        logger.debug("Pipeline cleared")
        return self

    def _unique_name(self, name: str) -> str:
        existing = {n for n, _, _ in self._steps}
        if name not in existing:
            return name
        count = 2
        while f"{name}_{count}" in existing:
            count += 1
        return f"{name}_{count}"

    # =========================================================================
    # INITIALIZATION
    # =========================================================================

    def initialize(self, config: Optional[Dict[str, Any]] = None) -> 'PreprocessingPipeline':
        """
        Initialize the pipeline and all steps.

        Args:
            config: Common configuration merged under each step's own
                config (e.g. ``sampling_rate`` to check filter designs early)

        Returns:
            Self for method chaining
        """
        logger.info(f"Initializing pipeline with {len(self._steps)} steps")

        self._common_config = config or {}

        for name, preprocessor, step_config in self._steps:
            merged_config = {**self._common_config, **step_config}

            try:
                preprocessor.initialize(merged_config)
                logger.debug(f"Initialized step '{name}'")
            except Exception as e:
                logger.error(f"Failed to initialize step '{name}': {e}")
                raise

        self._is_initialized = True
        logger.info("Pipeline initialization complete")

        return self

    # =========================================================================
    # PROCESSING
    # =========================================================================

    def process(self, data: StepData, **kwargs) -> StepData:
        """
        Process data through the entire pipeline.

        Args:
            data: Recording (or EpochSet for epoch-only pipelines)
            **kwargs: Additional arguments passed to each step

        Returns:
            Output of the last step

        Raises:
            RuntimeError: If pipeline not initialized
        """
        if not self._is_initialized:
            raise RuntimeError(
                "Pipeline not initialized. Call initialize() first."
            )

        if len(self._steps) == 0:
            logger.warning("Pipeline has no steps, returning input unchanged")
            return data

        self._execution_times.clear()

        current_data = data

        for name, preprocessor, _ in self._steps:
            if self._verbose:
                logger.info(f"Executing step: {name}")

            start_time = time.time()

            try:
                current_data = preprocessor.process(current_data, **kwargs)
            except Exception as e:
                logger.error(f"Step '{name}' failed: {e}")
                raise

            elapsed = time.time() - start_time
            self._execution_times[name] = elapsed

            if self._timing:
                logger.info(f"Step '{name}' completed in {elapsed:.3f}s")

        return current_data

    def process_step(self, data: StepData, step_name: str, **kwargs) -> StepData:
        """
        Process data through a single step.

        Raises:
            ValueError: If step not found
        """
        preprocessor, _ = self.get_step(step_name)
        return preprocessor.process(data, **kwargs)

    def process_up_to(self, data: StepData, step_name: str, **kwargs) -> StepData:
        """
        Process data up to (and including) a specific step.

        Raises:
            ValueError: If step not found
        """
        self.get_step(step_name)

        current_data = data
        for name, preprocessor, _ in self._steps:
            current_data = preprocessor.process(current_data, **kwargs)
            if name == step_name:
                break
        return current_data

    # =========================================================================
    # INSPECTION
    # =========================================================================

    def get_steps(self) -> List[str]:
        """Get list of step names in execution order."""
        return [name for name, _, _ in self._steps]

    def get_step(self, name: str) -> Tuple[IPreprocessor, Dict[str, Any]]:
        """
        Get a specific step by name.

        Returns:
            Tuple of (preprocessor, config)

        Raises:
            ValueError: If step not found
        """
        for step_name, preprocessor, config in self._steps:
            if step_name == name:
                return preprocessor, config

        raise ValueError(f"Step not found: {name}")

    def get_step_params(self, name: str) -> Dict[str, Any]:
        """Get parameters for a specific step."""
        preprocessor, _ = self.get_step(name)
        return preprocessor.get_params()

    def get_execution_times(self) -> Dict[str, float]:
        """Get execution time for each step (from last process() call)."""
        return self._execution_times.copy()

    def get_total_time(self) -> float:
        """Get total execution time from last process() call."""
        return sum(self._execution_times.values())

    def get_config(self) -> Dict[str, Any]:
        """
        Get the full pipeline configuration.

        The result can be passed back to ``create_pipeline_from_config``.
        """
        return {
            'common': self._common_config.copy(),
            'steps': [
                {
                    'name': name,
                    'type': preprocessor.name,
                    'config': config.copy()
                }
                for name, preprocessor, config in self._steps
            ]
        }

    def summary(self) -> str:
        """Get a human-readable summary of the pipeline."""
        lines = [
            "Preprocessing Pipeline",
            "=" * 40,
            f"Steps: {len(self._steps)}",
            f"Initialized: {self._is_initialized}",
            ""
        ]

        for i, (name, preprocessor, _) in enumerate(self._steps):
            lines.append(f"  {i+1}. {name} ({preprocessor.name})")
            for k, v in preprocessor.get_params().items():
                lines.append(f"      {k}: {v}")

        if self._execution_times:
            lines.append("")
            lines.append("Last Execution:")
            for name, elapsed in self._execution_times.items():
                lines.append(f"  {name}: {elapsed:.3f}s")
            lines.append(f"  Total: {self.get_total_time():.3f}s")

        return "\n".join(lines)

    # =========================================================================
    # SPECIAL METHODS
    # =========================================================================

    def __len__(self) -> int:
        """Number of steps in the pipeline."""
        return len(self._steps)

    def __iter__(self):
        """Iterate over (name, preprocessor, config) tuples."""
        for step in self._steps:
            yield step

    def __getitem__(self, key: Union[int, str]) -> Tuple[str, IPreprocessor, Dict]:
        """Get step by index or name."""
        if isinstance(key, int):
            return self._steps[key]
        for step in self._steps:
            if step[0] == key:
                return step
        raise KeyError(f"Step not found: {key}")

    def __repr__(self) -> str:
        steps = " -> ".join(name for name, _, _ in self._steps) if self._steps else "empty"
        status = "initialized" if self._is_initialized else "not initialized"
        return f"PreprocessingPipeline({steps}) [{status}]"

    def __call__(self, data: StepData, **kwargs) -> StepData:
        """Allow using pipeline as callable."""
        return self.process(data, **kwargs)


# =============================================================================
# FACTORY FUNCTIONS
# =============================================================================

def create_standard_pipeline(
    ref_channels: Optional[RefChannels] = AVERAGE,
    method: str = IIR,
    low_freq: Optional[float] = 1.0,
    high_freq: Optional[float] = 40.0,
    order: int = DEFAULT_ORDER,
    notch_freq: Optional[float] = None,
    event_codes: Optional[Sequence[int]] = None,
    epoch_labels: Optional[Sequence[str]] = None,
    time_lim: Tuple[float, float] = DEFAULT_TIME_LIM,
    baseline: Optional[Window] = (None, 0.0),
    thresholds: Optional[Thresholds] = 3.0,
    exclude_channels: Optional[Sequence[str]] = None,
    detect: bool = True
) -> PreprocessingPipeline:
    """
    Create the standard ERP preprocessing pipeline.

    1. Re-reference (skipped if ref_channels is None)
    2. Notch filter (only if notch_freq is given)
    3. Frequency filter (skipped if both cutoffs are None)
    4. Epoching (only if event_codes is given)
    5. Artifact detection (after epoching, if detect)

    Returns:
        Initialized PreprocessingPipeline

    Example:
        >>> pipeline = create_standard_pipeline(event_codes=[1], epoch_labels=['cond'])
        >>> epochs = pipeline.process(recording)
    """
    from eegprep.preprocessing.steps import (
        ReReference, NotchFilter, FrequencyFilter, Epocher, ArtifactDetector
    )

    pipeline = PreprocessingPipeline(verbose=False, timing=True)

    if ref_channels is not None:
        pipeline.add_step(ReReference(), {'ref_channels': ref_channels}, name='reference')

    if notch_freq is not None:
        pipeline.add_step(NotchFilter(), {'notch_freq': notch_freq}, name='notch')

    if low_freq is not None or high_freq is not None:
        pipeline.add_step(
            FrequencyFilter(),
            {'method': method, 'low_freq': low_freq, 'high_freq': high_freq, 'order': order},
            name='filter'
        )

    if event_codes:
        pipeline.add_step(
            Epocher(),
            {
                'event_codes': list(event_codes),
                'epoch_labels': epoch_labels,
                'time_lim': time_lim,
                'baseline': baseline,
            },
            name='epoch'
        )

        if detect:
            pipeline.add_step(
                ArtifactDetector(),
                {
                    'thresholds': thresholds,
                    'exclude_channels': list(exclude_channels or []),
                    'statistics': list(DEFAULT_STATISTICS),
                },
                name='artifacts'
            )

    pipeline.initialize()

    return pipeline


def create_pipeline_from_config(config: Union[Dict[str, Any], ConfigManager]) -> PreprocessingPipeline:
    """
    Create a pipeline from configuration.

    Two layouts are accepted:

    1. Explicit steps (as produced by ``PreprocessingPipeline.get_config``):
        {
            'common': {...},
            'steps': [
                {'type': 'rereference', 'config': {...}},
                {'type': 'frequency_filter', 'config': {...}},
                ...
            ]
        }

    2. Sectioned settings (configs/default.yaml, or a ConfigManager): the
       ``reference``, ``notch``, ``filter``, ``epoching`` and ``artifacts``
       sections, each honoured when present and enabled. Epoching (and with it artifact
       detection) is added only when ``epoching.event_codes`` is non-empty.

    Returns:
        Initialized PreprocessingPipeline

    Raises:
        ValueError: If a step type is unknown
    """
    from eegprep.preprocessing.steps import (
        ReReference, NotchFilter, FrequencyFilter, Epocher, ArtifactDetector
    )

    if isinstance(config, ConfigManager):
        config = config.export()

    step_classes = {
        'rereference': ReReference,
        'reference': ReReference,
        'notch_filter': NotchFilter,
        'notch': NotchFilter,
        'frequency_filter': FrequencyFilter,
        'filter': FrequencyFilter,
        'epocher': Epocher,
        'epoch': Epocher,
        'artifact_detector': ArtifactDetector,
        'artifacts': ArtifactDetector,
    }

    pipeline = PreprocessingPipeline(timing=True)

    if 'steps' in config:
        for step_config in config.get('steps', []):
            step_type = step_config.get('type', '')
            step_name = step_config.get('name', step_type)
            step_params = step_config.get('config', {})

            if step_type not in step_classes:
                raise ValueError(f"Unknown step type: {step_type}")

            pipeline.add_step(step_classes[step_type](), step_params, name=step_name)

        pipeline.initialize(config.get('common', {}))
        return pipeline

    for section in ('reference', 'notch', 'filter'):
        if section not in config:
            continue
        settings = dict(config[section] or {})
        if not settings.pop('enabled', section != 'notch'):
            continue
        pipeline.add_step(step_classes[section](), settings, name=section)

    epoching = dict(config.get('epoching') or {})
    if epoching.get('event_codes'):
        pipeline.add_step(Epocher(), epoching, name='epoch')

        artifacts = dict(config.get('artifacts') or {})
        if 'artifacts' in config and artifacts.pop('enabled', True):
            pipeline.add_step(ArtifactDetector(), artifacts, name='artifacts')
    else:
        logger.info("No epoching.event_codes configured; pipeline stops at continuous data")

    pipeline.initialize()
    return pipeline
