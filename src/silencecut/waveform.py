"""Waveform peak extraction for display."""

import logging

import numpy as np

from silencecut.analysis import FULL_SCALE, to_mono
from silencecut.errors import BucketTooSmallError, EmptyInputError
from silencecut.types import WaveformData

logger = logging.getLogger(__name__)


def extract_peaks(
    samples: np.ndarray,
    sample_rate: int,
    channels: int = 1,
    bucket_ms: int = 10,
) -> WaveformData:
    """Downsample interleaved int16 samples to one peak per bucket.

    Channels are averaged to mono, then each bucket of ``bucket_ms``
    milliseconds contributes its maximum absolute amplitude divided by
    32768, so peaks lie in [0, 1].

    Raises:
        BucketTooSmallError: if a bucket holds no samples.
        EmptyInputError: if there are no samples.
    """
    samples_per_bucket = int(sample_rate * bucket_ms / 1000)
    if samples_per_bucket <= 0:
        raise BucketTooSmallError(
            f"Bucket of {bucket_ms} ms is too small for {sample_rate} Hz"
        )

    if len(samples) == 0:
        raise EmptyInputError("No samples to extract waveform from")

    channels = max(1, channels)
    duration = len(samples) / sample_rate / channels

    # int32 so that |-32768| does not overflow
    mono = np.abs(to_mono(samples, channels).astype(np.int32))

    n_full = len(mono) // samples_per_bucket
    peaks = mono[: n_full * samples_per_bucket].reshape(n_full, samples_per_bucket).max(axis=1)
    remainder = mono[n_full * samples_per_bucket:]
    if len(remainder):
        peaks = np.append(peaks, remainder.max())

    normalized = (peaks / FULL_SCALE).tolist()
    logger.info(f"Extracted {len(normalized)} waveform peaks for {duration:.2f}s audio")

    return WaveformData(peaks=normalized, duration=duration, bucket_ms=bucket_ms)
