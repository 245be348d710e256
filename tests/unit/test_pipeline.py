"""
Unit Tests for the Preprocessing Pipeline
=========================================

Test Coverage:
- Pipeline steps (ReReference, NotchFilter, FrequencyFilter, Epocher,
  ArtifactDetector)
- PreprocessingPipeline construction, execution and inspection
- create_standard_pipeline / create_pipeline_from_config
"""

import pytest
import numpy as np

from eegprep.core.config import ConfigManager
from eegprep.core.types import Recording, EventMarker, EpochSet
from eegprep.core.exceptions import (
    DataValidationError,
    InvalidFilterSpecError,
    NoMatchingEventsError,
    UnknownChannelError,
)
from eegprep.preprocessing import (
    ArtifactReport,
    PreprocessingPipeline,
    create_pipeline_from_config,
    create_standard_pipeline,
    detect_artifacts,
    epoch,
    filter_recording,
    reference,
)
from eegprep.preprocessing.steps import (
    ArtifactDetector,
    Epocher,
    FrequencyFilter,
    NotchFilter,
    ReReference,
)


FS = 256.0


@pytest.fixture
def recording():
    """8-channel, 256 Hz, 20 s recording with alternating codes 1 and 2."""
    rng = np.random.default_rng(20)
    t = np.arange(5120) / FS
    samples = rng.standard_normal((5120, 8)) + np.sin(2 * np.pi * 10 * t)[:, np.newaxis]
    events = [
        EventMarker(sample, 1 if i % 2 == 0 else 2)
        for i, sample in enumerate(range(512, 4700, 256))
    ]
    return Recording(
        samples=samples,
        sample_rate=FS,
        channel_labels=['Fp1', 'Fp2', 'F3', 'F4', 'C3', 'C4', 'P3', 'P4'],
        events=events,
    )


# =============================================================================
# STEPS
# =============================================================================

class TestSteps:
    """Test cases for the individual pipeline steps."""

    def test_not_initialized(self, recording):
        """Test every step refuses to run before initialize()."""
        for step in (ReReference(), NotchFilter(), FrequencyFilter(), Epocher()):
            with pytest.raises(RuntimeError):
                step.process(recording)

    def test_rereference(self, recording):
        """Test the step matches the operation."""
        step = ReReference()
        step.initialize({'ref_channels': ['C3', 'C4']})

        np.testing.assert_allclose(
            step.process(recording).samples, reference(recording, ['C3', 'C4']).samples
        )
        assert step.get_params() == {'ref_channels': ['C3', 'C4']}

    def test_rereference_single_label(self):
        """Test a bare label becomes a one-channel reference."""
        step = ReReference()
        step.initialize({'ref_channels': 'Cz'})
        assert step.get_params()['ref_channels'] == ['Cz']

        with pytest.raises(DataValidationError):
            step.set_params(ref_channels=[])

    def test_frequency_filter(self, recording):
        """Test the step matches the operation."""
        step = FrequencyFilter()
        step.initialize({'method': 'fir', 'low_freq': None, 'high_freq': 30.0})

        expected = filter_recording(recording, 'fir', None, 30.0)
        np.testing.assert_allclose(step.process(recording).samples, expected.samples)
        assert step.get_params()['method'] == 'fir'

    def test_frequency_filter_config_validation(self):
        """Test malformed configuration values are rejected."""
        with pytest.raises(ValueError):
            FrequencyFilter().initialize({'method': 'chebyshev'})
        with pytest.raises(TypeError):
            FrequencyFilter().initialize({'order': 'four'})

    def test_frequency_filter_early_check(self):
        """Test a known sampling rate checks the design at initialize()."""
        with pytest.raises(InvalidFilterSpecError):
            FrequencyFilter().initialize({'high_freq': 200.0, 'sampling_rate': FS})

    def test_notch_harmonics(self):
        """Test harmonics at or above Nyquist are skipped."""
        step = NotchFilter()
        step.initialize({'notch_freq': 50.0, 'remove_harmonics': True, 'max_harmonic': 5})

        assert step.frequencies(128.0) == [50.0, 100.0]
        step.set_params(remove_harmonics=False)
        assert step.frequencies(128.0) == [50.0]

    def test_notch_history(self, recording):
        """Test each notch frequency is recorded."""
        step = NotchFilter()
        step.initialize({'notch_freq': 50.0, 'remove_harmonics': True, 'max_harmonic': 2})
        notched = step.process(recording)

        assert [f['freq'] for f in notched.metadata['filters']] == [50.0, 100.0]

    def test_epocher_requires_codes(self):
        """Test event_codes must be configured."""
        with pytest.raises(DataValidationError):
            Epocher().initialize({})
        with pytest.raises(DataValidationError):
            Epocher().initialize({'event_codes': []})

    def test_epocher_validates_windows(self):
        """Test windows and labels are checked at initialize()."""
        with pytest.raises(DataValidationError):
            Epocher().initialize({'event_codes': [1], 'time_lim': (0.5, 0.1)})
        with pytest.raises(DataValidationError):
            Epocher().initialize({'event_codes': [1, 2], 'epoch_labels': ['a']})

    def test_epocher(self, recording):
        """Test the step matches the operation."""
        step = Epocher()
        step.initialize({
            'event_codes': [1, 2],
            'epoch_labels': ['target', 'standard'],
            'time_lim': [-0.1, 0.4],
            'baseline': [None, 0.0],
        })
        epochs = step.process(recording)
        expected = epoch(recording, [1, 2], ['target', 'standard'], (-0.1, 0.4), (None, 0.0))

        np.testing.assert_allclose(epochs.data, expected.data)
        assert epochs.labels == expected.labels
        assert step.get_params()['time_lim'] == (-0.1, 0.4)

    def test_artifact_detector(self, recording):
        """Test the step keeps the latest report."""
        epochs = epoch(recording, [1, 2], time_lim=(-0.1, 0.4))
        step = ArtifactDetector()
        step.initialize({'thresholds': {'variance': 2.5}, 'statistics': ['variance', 'range']})

        flagged = step.process(epochs)
        assert isinstance(step.last_report, ArtifactReport)
        assert step.last_report.thresholds == {'variance': 2.5, 'range': 3.0}
        assert flagged.data is epochs.data

    def test_artifact_detector_config_validation(self):
        """Test thresholds and statistics are checked at initialize()."""
        with pytest.raises(ValueError):
            ArtifactDetector().initialize({'thresholds': -1.0})
        with pytest.raises(ValueError):
            ArtifactDetector().initialize({'statistics': ['entropy']})

    def test_input_type_checked(self, recording):
        """Test steps reject the wrong data type."""
        step = ArtifactDetector()
        step.initialize({})
        with pytest.raises(TypeError):
            step.process(recording)


# =============================================================================
# PIPELINE
# =============================================================================

class TestPreprocessingPipeline:
    """Test cases for PreprocessingPipeline."""

    def test_add_step_chaining(self):
        """Test steps are added in order."""
        pipeline = (
            PreprocessingPipeline()
            .add_step(ReReference())
            .add_step(FrequencyFilter(), {'low_freq': 1.0, 'high_freq': 30.0})
        )
        assert pipeline.get_steps() == ['rereference', 'frequency_filter']
        assert len(pipeline) == 2

    def test_add_step_type_check(self):
        """Test only IPreprocessor instances are accepted."""
        with pytest.raises(TypeError):
            PreprocessingPipeline().add_step(lambda data: data)

    def test_duplicate_names(self):
        """Test repeated step names get a numeric suffix."""
        pipeline = PreprocessingPipeline()
        pipeline.add_step(FrequencyFilter()).add_step(FrequencyFilter())
        assert pipeline.get_steps() == ['frequency_filter', 'frequency_filter_2']

    def test_insert_and_remove(self):
        """Test insert_step / remove_step."""
        pipeline = PreprocessingPipeline().add_step(FrequencyFilter())
        pipeline.insert_step(0, NotchFilter(), {'notch_freq': 60.0})
        assert pipeline.get_steps() == ['notch_filter', 'frequency_filter']

        pipeline.remove_step('notch_filter')
        assert pipeline.get_steps() == ['frequency_filter']
        pipeline.remove_step(0)
        assert len(pipeline) == 0

        with pytest.raises(ValueError):
            pipeline.remove_step('missing')
        with pytest.raises(ValueError):
            pipeline.remove_step(3)

    def test_not_initialized(self, recording):
        """Test process() requires initialize()."""
        pipeline = PreprocessingPipeline().add_step(ReReference())
        with pytest.raises(RuntimeError):
            pipeline.process(recording)

    def test_modification_requires_reinitialize(self, recording):
        """Test adding a step resets the initialized state."""
        pipeline = PreprocessingPipeline().add_step(ReReference()).initialize()
        pipeline.add_step(FrequencyFilter())
        with pytest.raises(RuntimeError):
            pipeline.process(recording)

    def test_empty_pipeline(self, recording):
        """Test an empty pipeline returns its input."""
        pipeline = PreprocessingPipeline().initialize()
        assert pipeline.process(recording) is recording

    def test_continuous_only(self, recording):
        """Test a pipeline without epoching returns a Recording."""
        pipeline = PreprocessingPipeline()
        pipeline.add_step(ReReference()).add_step(FrequencyFilter()).initialize()

        result = pipeline(recording)
        assert isinstance(result, Recording)
        assert result.metadata['reference'] == 'average'
        assert len(result.metadata['filters']) == 1

    def test_wrong_step_order(self, recording):
        """Test an EpochSet step before epoching fails with TypeError."""
        pipeline = PreprocessingPipeline()
        pipeline.add_step(ArtifactDetector()).add_step(ReReference()).initialize()

        with pytest.raises(TypeError, match='ArtifactDetector expects EpochSet'):
            pipeline.process(recording)

    def test_errors_propagate_unchanged(self, recording):
        """Test typed errors surface from process()."""
        pipeline = PreprocessingPipeline()
        pipeline.add_step(ReReference(), {'ref_channels': ['Cz']}).initialize()
        with pytest.raises(UnknownChannelError):
            pipeline.process(recording)

        pipeline = PreprocessingPipeline()
        pipeline.add_step(FrequencyFilter(), {'high_freq': 200.0}).initialize()
        with pytest.raises(InvalidFilterSpecError):
            pipeline.process(recording)

    def test_common_config(self):
        """Test common config reaches every step."""
        pipeline = PreprocessingPipeline().add_step(FrequencyFilter(), {'high_freq': 200.0})
        with pytest.raises(InvalidFilterSpecError):
            pipeline.initialize({'sampling_rate': FS})

    def test_process_up_to(self, recording):
        """Test partial execution for debugging."""
        pipeline = create_standard_pipeline(event_codes=[1])

        referenced = pipeline.process_step(recording, 'reference')
        filtered = pipeline.process_up_to(recording, 'filter')
        assert isinstance(referenced, Recording)
        assert isinstance(filtered, Recording)
        assert len(filtered.metadata['filters']) == 1

        with pytest.raises(ValueError):
            pipeline.process_up_to(recording, 'missing')

    def test_inspection(self, recording):
        """Test timing, parameters and summary."""
        pipeline = create_standard_pipeline(event_codes=[1], epoch_labels=['cond'])
        pipeline.process(recording)

        assert set(pipeline.get_execution_times()) == set(pipeline.get_steps())
        assert pipeline.get_total_time() >= 0.0
        assert pipeline.get_step_params('filter')['high_freq'] == 40.0
        assert 'Preprocessing Pipeline' in pipeline.summary()
        assert 'initialized' in repr(pipeline)
        assert pipeline['epoch'][1].name == 'epocher'
        with pytest.raises(KeyError):
            pipeline['missing']


# =============================================================================
# FACTORIES
# =============================================================================

class TestStandardPipeline:
    """Test cases for create_standard_pipeline."""

    def test_steps(self):
        """Test the default step sequence."""
        pipeline = create_standard_pipeline(event_codes=[1, 2], notch_freq=50.0)
        assert pipeline.get_steps() == ['reference', 'notch', 'filter', 'epoch', 'artifacts']

    def test_without_epoching(self):
        """Test no event codes means no epoching or detection."""
        pipeline = create_standard_pipeline()
        assert pipeline.get_steps() == ['reference', 'filter']

    def test_optional_steps(self):
        """Test reference, filter and detection can be left out."""
        pipeline = create_standard_pipeline(
            ref_channels=None, low_freq=None, high_freq=None, event_codes=[1], detect=False
        )
        assert pipeline.get_steps() == ['epoch']

    def test_end_to_end(self, recording):
        """Test a Recording becomes a flagged EpochSet."""
        pipeline = create_standard_pipeline(
            event_codes=[1, 2],
            epoch_labels=['target', 'standard'],
            time_lim=(-0.2, 0.8),
            baseline=(None, 0.0)
        )
        epochs = pipeline.process(recording)

        assert isinstance(epochs, EpochSet)
        assert epochs.n_epochs == 17
        assert epochs.n_times == 257
        assert epochs.labels.count('target') == 9
        assert 'artifacts' in epochs.metadata
        assert epochs.metadata['reference'] == 'average'

        report = pipeline.get_step('artifacts')[0].last_report
        assert report.n_epochs == 17

    def test_matches_manual_chain(self, recording):
        """Test the pipeline equals calling the operations in turn."""
        pipeline = create_standard_pipeline(
            event_codes=[1], epoch_labels=['cond'], time_lim=(-0.1, 0.4), baseline=(-0.1, 0.0)
        )
        from_pipeline = pipeline.process(recording)

        rec = reference(recording, 'average')
        rec = filter_recording(rec, 'iir', 1.0, 40.0, order=4)
        manual = epoch(rec, [1], ['cond'], (-0.1, 0.4), (-0.1, 0.0))
        manual, _ = detect_artifacts(manual, thresholds=3.0)

        np.testing.assert_allclose(from_pipeline.data, manual.data)
        np.testing.assert_array_equal(from_pipeline.rejected_mask, manual.rejected_mask)
        assert from_pipeline.bad_channels == manual.bad_channels

    def test_no_matching_events(self, recording):
        """Test the epoching error surfaces unchanged."""
        pipeline = create_standard_pipeline(event_codes=[9])
        with pytest.raises(NoMatchingEventsError):
            pipeline.process(recording)

    def test_excluded_channels(self, recording):
        """Test exclude_channels reaches the detector."""
        pipeline = create_standard_pipeline(event_codes=[1], exclude_channels=['Fp1', 'Fp2'])
        pipeline.process(recording)

        report = pipeline.get_step('artifacts')[0].last_report
        assert report.excluded_channels == ['Fp1', 'Fp2']


class TestPipelineFromConfig:
    """Test cases for create_pipeline_from_config."""

    def test_round_trip(self, recording):
        """Test get_config() rebuilds an equivalent pipeline."""
        original = create_standard_pipeline(
            event_codes=[1], epoch_labels=['cond'], time_lim=(-0.1, 0.4)
        )
        rebuilt = create_pipeline_from_config(original.get_config())

        assert rebuilt.get_steps() == original.get_steps()
        for name in original.get_steps():
            assert rebuilt.get_step_params(name) == original.get_step_params(name)

        np.testing.assert_allclose(rebuilt.process(recording).data, original.process(recording).data)

    def test_unknown_step_type(self):
        """Test unknown step types are rejected."""
        with pytest.raises(ValueError):
            create_pipeline_from_config({'steps': [{'type': 'ica'}]})

    def test_default_config(self, recording):
        """Test the defaults give a continuous-only pipeline."""
        pipeline = create_pipeline_from_config(ConfigManager())

        assert pipeline.get_steps() == ['reference', 'filter']
        assert isinstance(pipeline.process(recording), Recording)

    def test_sectioned_config(self, recording):
        """Test a ConfigManager with event codes builds the full pipeline."""
        config = ConfigManager({
            'notch': {'enabled': True, 'notch_freq': 60.0},
            'epoching': {
                'event_codes': [1, 2],
                'epoch_labels': ['target', 'standard'],
                'time_lim': [-0.1, 0.4],
            },
            'artifacts': {'thresholds': {'kurtosis': 5.0}},
        })
        pipeline = create_pipeline_from_config(config)

        assert pipeline.get_steps() == ['reference', 'notch', 'filter', 'epoch', 'artifacts']
        assert pipeline.get_step_params('notch')['notch_freq'] == 60.0
        assert pipeline.get_step_params('artifacts')['thresholds'] == {'kurtosis': 5.0}

        epochs = pipeline.process(recording)
        assert epochs.n_epochs == 17
        assert epochs.baseline == (None, 0.0)

    def test_disabled_sections(self):
        """Test enabled: false leaves a step out."""
        config = ConfigManager({
            'reference': {'enabled': False},
            'epoching': {'event_codes': [1]},
            'artifacts': {'enabled': False},
        })
        pipeline = create_pipeline_from_config(config)
        assert pipeline.get_steps() == ['filter', 'epoch']

    def test_plain_dict(self):
        """Test a plain sectioned dict is accepted."""
        pipeline = create_pipeline_from_config({'filter': {'method': 'fir', 'high_freq': 30.0}})
        assert pipeline.get_steps() == ['filter']
        assert pipeline.get_step_params('filter')['method'] == 'fir'
