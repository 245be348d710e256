"""
Re-referencing
==============

Recomputes every channel relative to a reference set:

    new[:, ch] = old[:, ch] - mean(old[:, ref_channels], axis=1)

``ref_channels="average"`` uses every channel present in the Recording at
call time (common average reference). A list of labels uses that subset;
the reference channels themselves are kept in the output.

Re-referencing composes: referencing to M1/M2 and then to the average is the
same as referencing to the average directly, because the average of a
re-referenced montage shifts by the same per-sample constant.
"""

from typing import List, Sequence, Union
import numpy as np
import logging

from eegprep.core.exceptions import DataValidationError
from eegprep.core.types import Recording
from eegprep.utils.logging import log_execution_time


logger = logging.getLogger(__name__)

AVERAGE = 'average'

RefChannels = Union[str, Sequence[str]]


def resolve_reference(recording: Recording, ref_channels: RefChannels) -> List[str]:
    """
    Turn a reference specification into a list of channel labels.

    Raises:
        UnknownChannelError: If a named channel is absent
        DataValidationError: If the reference is empty or malformed
    """
    if isinstance(ref_channels, str):
        if ref_channels == AVERAGE:
            return list(recording.channel_labels)
        # A single label given as a bare string
        ref_channels = [ref_channels]

    labels = list(ref_channels)
    if not labels:
        raise DataValidationError('ref_channels', "'average' or a non-empty list", '[]')

    recording.channel_indices(labels)
    return labels


@log_execution_time()
def reference(recording: Recording, ref_channels: RefChannels = AVERAGE) -> Recording:
    """
    Re-reference a recording.

    Args:
        recording: Input recording (unchanged)
        ref_channels: 'average' or the labels of the reference channels

    Returns:
        New Recording with re-referenced samples; ``metadata['reference']``
        records the reference used

    Raises:
        UnknownChannelError: If any named reference channel is absent

    Example:
        >>> car = reference(recording, 'average')
        >>> np.allclose(car.samples.mean(axis=1), 0)
        True
    """
    labels = resolve_reference(recording, ref_channels)
    indices = recording.channel_indices(labels)

    ref_signal = recording.samples[:, indices].mean(axis=1, keepdims=True)
    referenced = recording.samples - ref_signal

    is_average = isinstance(ref_channels, str) and ref_channels == AVERAGE
    logger.info(
        f"Re-referenced {recording.n_channels} channels to "
        f"{AVERAGE if is_average else labels}"
    )

    return recording.with_samples(
        referenced,
        reference=AVERAGE if is_average else labels
    )


def reference_signal(recording: Recording, ref_channels: RefChannels = AVERAGE) -> np.ndarray:
    """The per-sample reference that ``reference`` subtracts, shape (n_samples,)."""
    indices = recording.channel_indices(resolve_reference(recording, ref_channels))
    return recording.samples[:, indices].mean(axis=1)
