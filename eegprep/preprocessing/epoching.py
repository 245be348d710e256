"""
Epoching
========

This module cuts a continuous Recording into fixed-length windows locked to
event onsets and optionally baseline-corrects them.

Window Arithmetic:
-----------------
For an event at sample ``s`` and ``time_lim = (tmin, tmax)`` seconds:

    offset  = round(tmin * sample_rate)
    n_times = round((tmax - tmin) * sample_rate) + 1
    window  = samples[s + offset : s + offset + n_times]
    times   = (arange(n_times) + offset) / sample_rate

so every epoch has the same length and shares one ``times`` grid.

Boundary Policy:
---------------
Events whose window would start before sample 0 or end after the last sample
are skipped. Each skip is logged as a warning and the event is kept in
``EpochSet.skipped_events``; skipping is never an error.

If no event matches any requested code, ``NoMatchingEventsError`` is raised.
If events matched but every one of them was skipped, the result is an empty
EpochSet (zero epochs, ``n_skipped > 0``).

Baseline Correction:
-------------------
``baseline = (b0, b1)`` in seconds, ``None`` meaning the corresponding edge
of the epoch. For every epoch and channel the mean over ``b0 <= t <= b1`` is
subtracted from all timepoints.

Usage Example:
    ```python
    from eegprep.preprocessing.epoching import epoch

    epochs = epoch(
        recording,
        event_codes=[1, 2],
        epoch_labels=['target', 'standard'],
        time_lim=(-0.2, 0.8),
        baseline=(None, 0.0)
    )
    target = epochs.get_epochs_by_label('target')
    ```
"""

from typing import Dict, List, Optional, Sequence, Tuple, Union
import numpy as np
import logging

from eegprep.core.exceptions import DataValidationError, NoMatchingEventsError
from eegprep.core.types import Recording, EventMarker, EpochSet, EpochMeta
from eegprep.utils.logging import log_execution_time
from eegprep.utils.validation import validate_time_window


# Configure module logger
logger = logging.getLogger(__name__)

DEFAULT_TIME_LIM = (-0.2, 0.8)

Window = Tuple[Optional[float], Optional[float]]


# =============================================================================
# TIME GRID
# =============================================================================

def window_samples(time_lim: Tuple[float, float], sample_rate: float) -> Tuple[int, int]:
    """
    Convert an epoch window in seconds to sample units.

    Returns:
        Tuple of (offset of the first sample relative to the event, n_times)
    """
    tmin, tmax = validate_time_window(time_lim, name='time_lim')
    offset = int(round(tmin * sample_rate))
    n_times = int(round((tmax - tmin) * sample_rate)) + 1
    return offset, n_times


def compute_times(time_lim: Tuple[float, float], sample_rate: float) -> np.ndarray:
    """Time offsets in seconds of every timepoint in an epoch."""
    offset, n_times = window_samples(time_lim, sample_rate)
    return (np.arange(n_times) + offset) / sample_rate


def _baseline_mask(times: np.ndarray, baseline: Window, sample_rate: float) -> np.ndarray:
    """
    Boolean mask of the timepoints inside a baseline window.

    Baseline bounds are rounded to the nearest sample, the same rule that
    places the epoch window, so a bound equal to an epoch edge selects that
    edge's sample.

    Raises:
        DataValidationError: If the window lies outside the epoch or selects
            no timepoints
    """
    b0, b1 = validate_time_window(baseline, allow_open=True, name='baseline')
    samples = np.round(times * sample_rate).astype(int)
    first, last = int(samples[0]), int(samples[-1])

    start = first if b0 is None else int(round(b0 * sample_rate))
    end = last if b1 is None else int(round(b1 * sample_rate))

    if start < first:
        raise DataValidationError('baseline', f"start >= {times[0]}", b0)
    if end > last:
        raise DataValidationError('baseline', f"end <= {times[-1]}", b1)

    mask = (samples >= start) & (samples <= end)

    if not mask.any():
        raise DataValidationError(
            'baseline', 'at least one timepoint in the window', f"({b0}, {b1})"
        )
    return mask


# =============================================================================
# BASELINE CORRECTION
# =============================================================================

def baseline_correct(epoch_set: EpochSet, baseline: Window = (None, 0.0)) -> EpochSet:
    """
    Subtract the per-epoch, per-channel baseline mean.

    Args:
        epoch_set: Input epochs (unchanged)
        baseline: (b0, b1) in seconds; None means the epoch edge

    Returns:
        New EpochSet with corrected data and ``baseline`` recorded

    Raises:
        DataValidationError: If the window is outside the epoch or empty

    Example:
        >>> corrected = baseline_correct(epochs, (-0.2, 0.0))
        >>> mask = (corrected.times >= -0.2) & (corrected.times <= 0.0)
        >>> np.allclose(corrected.data[:, mask, :].mean(axis=1), 0)
        True
    """
    times = epoch_set.times
    mask = _baseline_mask(times, baseline, epoch_set.sample_rate)
    corrected = epoch_set.data - epoch_set.data[:, mask, :].mean(axis=1, keepdims=True)

    logger.debug(
        f"Baseline-corrected {epoch_set.n_epochs} epochs over "
        f"{int(mask.sum())} timepoints"
    )
    return epoch_set._replace(data=corrected, baseline=tuple(baseline))


# =============================================================================
# EPOCHING
# =============================================================================

def _resolve_labels(event_codes: Sequence[int],
                    epoch_labels: Optional[Sequence[str]]) -> Dict[int, str]:
    """Map each requested event code to its condition label."""
    if epoch_labels is None:
        return {code: str(code) for code in event_codes}

    if len(epoch_labels) != len(event_codes):
        raise DataValidationError(
            'epoch_labels',
            f"{len(event_codes)} labels (one per event code)",
            len(epoch_labels)
        )
    return dict(zip(event_codes, epoch_labels))


@log_execution_time()
def epoch(recording: Recording,
          event_codes: Union[int, Sequence[int]],
          epoch_labels: Optional[Sequence[str]] = None,
          time_lim: Tuple[float, float] = DEFAULT_TIME_LIM,
          baseline: Optional[Window] = None) -> EpochSet:
    """
    Extract event-locked epochs from a recording.

    Args:
        recording: Continuous recording (unchanged)
        event_codes: Codes of the events to epoch around
        epoch_labels: Condition label per code, positionally; None uses
            ``str(code)``
        time_lim: (tmin, tmax) in seconds relative to event onset
        baseline: Optional (b0, b1) baseline window in seconds

    Returns:
        EpochSet with one epoch per in-bounds matching event, in recording
        order

    Raises:
        DataValidationError: If time_lim, baseline or epoch_labels is invalid
        NoMatchingEventsError: If no event carries any requested code

    Example:
        >>> epochs = epoch(recording, [1], ['cond'], (-0.1, 0.4), (-0.1, 0.0))
        >>> epochs.n_epochs
        2
    """
    if isinstance(event_codes, (int, np.integer)):
        event_codes = [int(event_codes)]
    event_codes = list(event_codes)
    if not event_codes:
        raise DataValidationError('event_codes', 'at least one event code', '[]')

    labels = _resolve_labels(event_codes, epoch_labels)
    tmin, tmax = validate_time_window(time_lim, name='time_lim')
    sample_rate = recording.sample_rate

    offset, n_times = window_samples((tmin, tmax), sample_rate)
    times = (np.arange(n_times) + offset) / sample_rate

    mask = None
    if baseline is not None:
        mask = _baseline_mask(times, baseline, sample_rate)

    matched = [event for event in recording.events if event.code in labels]
    if not matched:
        raise NoMatchingEventsError(event_codes, sorted(recording.get_event_counts()))

    kept: List[EventMarker] = []
    skipped: List[EventMarker] = []
    for event in matched:
        start = event.sample + offset
        if start < 0 or start + n_times > recording.n_samples:
            logger.warning(
                f"Skipping event code={event.code} at sample {event.sample}: "
                f"window [{start}, {start + n_times}) exceeds recording "
                f"[0, {recording.n_samples})"
            )
            skipped.append(event)
        else:
            kept.append(event)

    starts = np.array([event.sample + offset for event in kept], dtype=int)
    index = starts[:, np.newaxis] + np.arange(n_times)[np.newaxis, :]
    data = recording.samples[index]

    if mask is not None:
        data = data - data[:, mask, :].mean(axis=1, keepdims=True)

    epoch_meta = [
        EpochMeta(
            event_code=event.code,
            event_label=event.label,
            event_sample=event.sample,
            label=labels[event.code],
        )
        for event in kept
    ]

    metadata = dict(recording.metadata)
    metadata['epoching'] = {
        'event_codes': event_codes,
        'epoch_labels': [labels[code] for code in event_codes],
        'time_lim': (tmin, tmax),
    }

    epoch_set = EpochSet(
        data=data.reshape(len(kept), n_times, recording.n_channels),
        times=times,
        sample_rate=sample_rate,
        channel_labels=list(recording.channel_labels),
        epoch_meta=epoch_meta,
        channel_locations=(
            dict(recording.channel_locations)
            if recording.channel_locations is not None else None
        ),
        skipped_events=skipped,
        baseline=tuple(baseline) if baseline is not None else None,
        metadata=metadata,
    )

    if not kept:
        logger.warning(
            f"All {len(matched)} matching events were skipped at the recording "
            "boundaries; returning an empty EpochSet"
        )
    logger.info(
        f"Extracted {epoch_set.n_epochs} epochs ({n_times} timepoints, "
        f"{len(skipped)} skipped) for codes {event_codes}"
    )
    return epoch_set
