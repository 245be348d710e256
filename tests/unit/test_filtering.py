"""
Unit Tests for Frequency Filtering
==================================

Test Coverage:
- filter_recording (iir/fir; high/low/band-pass)
- Zero-phase behavior and edge handling
- Parameter validation
- design_filter / FilterDesign
- notch_filter
"""

import logging

import pytest
import numpy as np
from scipy import signal as scipy_signal

from eegprep.core.types import Recording, EventMarker
from eegprep.core.exceptions import InvalidFilterSpecError
from eegprep.preprocessing.filtering import (
    FilterDesign,
    design_filter,
    filter_recording,
    fir_numtaps,
    notch_filter,
)


FS = 256.0


def make_recording(signal_fn, n_samples=2560, n_channels=3):
    """Recording whose channels all carry signal_fn(t)."""
    t = np.arange(n_samples) / FS
    samples = np.column_stack([signal_fn(t) for _ in range(n_channels)])
    return Recording(samples=samples, sample_rate=FS, events=[EventMarker(1000, 1)])


def amplitude_at(x, freq, fs=FS):
    """Amplitude of a sinusoid at freq (x must span whole cycles)."""
    t = np.arange(len(x)) / fs
    return 2 * np.abs(np.mean(x * np.exp(-2j * np.pi * freq * t)))


class TestFilterRecording:
    """Test cases for filter_recording."""

    def test_bandpass_keeps_passband(self):
        """Test a 5 + 15 + 50 Hz mix band-passed at 8-30 Hz peaks at 15 Hz."""
        rec = make_recording(lambda t: (
            np.sin(2 * np.pi * 5 * t) +
            np.sin(2 * np.pi * 15 * t) +
            np.sin(2 * np.pi * 50 * t)
        ))
        filtered = filter_recording(rec, 'iir', low_freq=8.0, high_freq=30.0, order=4)

        assert filtered.shape == rec.shape
        freqs, psd = scipy_signal.welch(filtered.samples[:, 0], fs=FS, nperseg=512)
        peak_freq = freqs[np.argmax(psd)]
        assert 13 < peak_freq < 17

    @pytest.mark.parametrize('method', ['iir', 'fir'])
    def test_lowpass_attenuates_stopband(self, method):
        """Test a 50 Hz component is removed by a 20 Hz low-pass."""
        rec = make_recording(lambda t: np.sin(2 * np.pi * 5 * t) + np.sin(2 * np.pi * 50 * t))
        filtered = filter_recording(rec, method, high_freq=20.0)

        # Central 6 s: whole cycles of both components, far from the edges
        center = filtered.samples[512:-512, 0]
        assert amplitude_at(center, 50.0) < 0.01
        assert amplitude_at(center, 5.0) > 0.95

    @pytest.mark.parametrize('method', ['iir', 'fir'])
    def test_highpass_removes_offset(self, method):
        """Test a DC offset is removed by a 1 Hz high-pass."""
        rec = make_recording(lambda t: 5.0 + np.sin(2 * np.pi * 10 * t), n_samples=5120)
        filtered = filter_recording(rec, method, low_freq=1.0)

        center = filtered.samples[1024:-1024, 0]
        assert abs(center.mean()) < 0.05
        assert amplitude_at(center, 10.0) > 0.95

    def test_zero_low_freq_means_lowpass(self):
        """Test low_freq=0 disables the high-pass."""
        rec = make_recording(lambda t: 5.0 + np.sin(2 * np.pi * 2 * t))
        filtered = filter_recording(rec, 'iir', low_freq=0, high_freq=40.0)

        assert filtered.metadata['filters'][-1]['btype'] == 'lowpass'
        assert filtered.samples[512:-512, 0].mean() == pytest.approx(5.0, abs=0.05)

    def test_input_unchanged(self):
        """Test the input recording is not modified."""
        rec = make_recording(lambda t: np.sin(2 * np.pi * 10 * t))
        original = rec.samples.copy()
        filter_recording(rec, 'iir', 1.0, 40.0)
        np.testing.assert_array_equal(rec.samples, original)

    def test_channels_are_independent(self):
        """Test filtering one channel does not depend on the others."""
        rng = np.random.default_rng(2)
        samples = rng.standard_normal((1024, 3))
        rec = Recording(samples=samples, sample_rate=FS)
        single = Recording(samples=samples[:, [1]], sample_rate=FS)

        multi_out = filter_recording(rec, 'iir', 1.0, 40.0)
        single_out = filter_recording(single, 'iir', 1.0, 40.0)
        np.testing.assert_allclose(multi_out.samples[:, 1], single_out.samples[:, 0], atol=1e-12)

    def test_metadata_history(self):
        """Test each filter is appended to the processing history."""
        rec = make_recording(lambda t: np.sin(2 * np.pi * 10 * t))
        once = filter_recording(rec, 'iir', 1.0, 40.0)
        twice = filter_recording(once, 'fir', high_freq=30.0)

        assert [f['method'] for f in twice.metadata['filters']] == ['iir', 'fir']
        assert 'filters' not in rec.metadata


class TestZeroPhase:
    """Test that filtering does not shift signals in time."""

    @pytest.mark.parametrize('method', ['iir', 'fir'])
    def test_impulse_peak_preserved(self, method):
        """Test an impulse's peak stays within one sample."""
        samples = np.zeros((2048, 1))
        samples[1000, 0] = 1.0
        rec = Recording(samples=samples, sample_rate=FS)

        filtered = filter_recording(rec, method, high_freq=30.0)
        assert abs(int(np.argmax(filtered.samples[:, 0])) - 1000) <= 1

    @pytest.mark.parametrize('method', ['iir', 'fir'])
    def test_sinusoid_phase_preserved(self, method):
        """Test an in-band sinusoid keeps its phase."""
        rec = make_recording(lambda t: np.sin(2 * np.pi * 10 * t), n_samples=5120)
        filtered = filter_recording(rec, method, low_freq=1.0, high_freq=40.0)

        np.testing.assert_allclose(
            filtered.samples[1536:-1536, 0], rec.samples[1536:-1536, 0], atol=0.05
        )

    def test_short_recording(self):
        """Test recordings shorter than the padding are still filtered."""
        rng = np.random.default_rng(3)
        rec = Recording(samples=rng.standard_normal((20, 2)), sample_rate=FS)
        filtered = filter_recording(rec, 'fir', high_freq=30.0)
        assert filtered.shape == (20, 2)
        assert np.all(np.isfinite(filtered.samples))


class TestFilterValidation:
    """Test cases for parameter validation."""

    @pytest.fixture
    def rec(self):
        rng = np.random.default_rng(4)
        return Recording(samples=rng.standard_normal((512, 2)), sample_rate=FS)

    def test_cutoff_at_sample_rate(self, rec):
        """Test low_freq=0, high_freq=sample_rate is rejected."""
        with pytest.raises(InvalidFilterSpecError):
            filter_recording(rec, 'iir', low_freq=0, high_freq=FS)

    def test_cutoff_at_nyquist(self, rec):
        """Test a cutoff at exactly Nyquist is rejected."""
        with pytest.raises(InvalidFilterSpecError):
            filter_recording(rec, 'iir', high_freq=FS / 2)
        with pytest.raises(InvalidFilterSpecError):
            filter_recording(rec, 'fir', low_freq=FS / 2)

    def test_low_not_below_high(self, rec):
        """Test low_freq >= high_freq is rejected."""
        with pytest.raises(InvalidFilterSpecError):
            filter_recording(rec, 'iir', low_freq=30.0, high_freq=30.0)
        with pytest.raises(InvalidFilterSpecError):
            filter_recording(rec, 'iir', low_freq=40.0, high_freq=10.0)

    def test_negative_cutoff(self, rec):
        """Test negative cutoffs are rejected."""
        with pytest.raises(InvalidFilterSpecError):
            filter_recording(rec, 'iir', low_freq=-1.0, high_freq=30.0)

    def test_order(self, rec):
        """Test non-positive orders are rejected."""
        with pytest.raises(InvalidFilterSpecError):
            filter_recording(rec, 'iir', 1.0, 30.0, order=0)
        with pytest.raises(InvalidFilterSpecError):
            filter_recording(rec, 'fir', 1.0, 30.0, order=-2)

    def test_unknown_method(self, rec):
        """Test unknown methods are rejected."""
        with pytest.raises(InvalidFilterSpecError):
            filter_recording(rec, 'butter', 1.0, 30.0)

    def test_no_cutoffs(self, rec):
        """Test at least one cutoff is required."""
        with pytest.raises(InvalidFilterSpecError):
            filter_recording(rec, 'iir')

    def test_single_sample(self):
        """Test a one-sample recording cannot be filtered."""
        rec = Recording(samples=np.zeros((1, 2)), sample_rate=FS)
        with pytest.raises(InvalidFilterSpecError):
            filter_recording(rec, 'iir', 1.0, 30.0)

    def test_nan_samples(self):
        """Test NaN input is rejected."""
        samples = np.zeros((100, 2))
        samples[10, 1] = np.nan
        rec = Recording(samples=samples, sample_rate=FS)
        with pytest.raises(ValueError):
            filter_recording(rec, 'iir', 1.0, 30.0)

    def test_high_order_warning(self, rec, caplog):
        """Test a warning is logged for high IIR orders."""
        with caplog.at_level(logging.WARNING, logger='eegprep.preprocessing.filtering'):
            filter_recording(rec, 'iir', high_freq=30.0, order=12)
        assert 'High filter order' in caplog.text


class TestFilterDesign:
    """Test cases for design_filter and FilterDesign."""

    def test_iir_design(self):
        """Test Butterworth SOS design."""
        design = design_filter(FS, 'iir', 1.0, 40.0, order=4)

        assert isinstance(design, FilterDesign)
        assert design.btype == 'bandpass'
        # A band-pass of order 4 has 8 poles, i.e. 4 sections
        assert design.coefficients.shape == (4, 6)
        assert design.kernel_length == 9

    def test_fir_design_is_odd_and_symmetric(self):
        """Test FIR kernels are type I linear phase."""
        design = design_filter(FS, 'fir', 1.0, 40.0, order=4)

        assert len(design.coefficients) % 2 == 1
        np.testing.assert_allclose(design.coefficients, design.coefficients[::-1])

    def test_fir_numtaps(self):
        """Test the FIR length rule."""
        assert fir_numtaps(4, 256.0, 1.0) == 1025
        assert fir_numtaps(4, 256.0, 20.0) == 53
        assert fir_numtaps(1, 20.0, 9.0) == 3

    def test_frequency_response(self):
        """Test the reported magnitude response of a 40 Hz low-pass."""
        design = design_filter(FS, 'iir', high_freq=40.0, order=4)
        freqs, magnitude_db = design.frequency_response(n_points=1024)

        assert len(freqs) == 1024
        assert magnitude_db[np.argmin(np.abs(freqs - 5.0))] > -0.5
        assert magnitude_db[np.argmin(np.abs(freqs - 100.0))] < -20.0

    def test_padlen(self):
        """Test padding is capped by the signal length."""
        design = design_filter(FS, 'fir', high_freq=30.0, order=4)
        assert design.padlen(10000) == 3 * design.kernel_length
        assert design.padlen(50) == 49


class TestNotchFilter:
    """Test cases for notch_filter."""

    def test_removes_line_noise(self):
        """Test 50 Hz is removed while 10 Hz passes."""
        rec = make_recording(lambda t: np.sin(2 * np.pi * 10 * t) + np.sin(2 * np.pi * 50 * t))
        filtered = notch_filter(rec, 50.0, quality_factor=30.0)

        center = filtered.samples[512:-512, 0]
        assert amplitude_at(center, 50.0) < 0.05
        assert amplitude_at(center, 10.0) > 0.95
        assert filtered.metadata['filters'][-1]['method'] == 'notch'

    def test_invalid_frequency(self):
        """Test the notch must lie below Nyquist."""
        rec = make_recording(lambda t: np.sin(2 * np.pi * 10 * t))
        with pytest.raises(InvalidFilterSpecError):
            notch_filter(rec, 200.0)
        with pytest.raises(InvalidFilterSpecError):
            notch_filter(rec, 50.0, quality_factor=0)
