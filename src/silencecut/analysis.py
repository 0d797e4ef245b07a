"""Audio analysis: WAV I/O, mono mixdown, RMS energy and silence detection.

Sample buffers are numpy int16 arrays at 16-bit full scale; all level maths
runs in float64. WAV I/O uses scipy.io.wavfile so analysis never needs ffmpeg.
"""

import logging
import math
from pathlib import Path

import numpy as np
import scipy.io.wavfile as wavfile

from silencecut.errors import DecodeError, EmptyInputError, SampleRateTooLowError
from silencecut.types import SilenceDetectionConfig

logger = logging.getLogger(__name__)

# int16 full scale used as the 0 dBFS reference
FULL_SCALE = 32768.0

# Analysis window length in seconds
WINDOW_SECONDS = 0.01


# ---------------------------------------------------------------------------
# WAV I/O
# ---------------------------------------------------------------------------

def read_wav(path: str | Path) -> tuple[np.ndarray, int, int]:
    """Read a 16-bit PCM WAV file and return (samples, sample_rate, channels).

    Multi-channel data is returned interleaved (frame by frame) as a flat
    int16 array, the layout an extractor pipe would produce.

    Raises:
        DecodeError: if the file is missing, unreadable or not 16-bit PCM.
    """
    path = Path(path)
    if not path.exists():
        raise DecodeError(f"Audio file not found: {path}")

    try:
        sr, data = wavfile.read(str(path))
    except (ValueError, OSError) as e:
        raise DecodeError(f"Failed to read WAV file {path}: {e}") from e

    if data.dtype != np.int16:
        raise DecodeError(f"Expected 16-bit PCM in {path}, got {data.dtype}")

    channels = 1 if data.ndim == 1 else data.shape[1]
    return data.reshape(-1), int(sr), channels


def to_mono(samples: np.ndarray, channels: int) -> np.ndarray:
    """Average interleaved channels down to a mono int16 buffer.

    The average truncates toward zero, matching integer division. A trailing
    partial frame is dropped.
    """
    samples = np.asarray(samples, dtype=np.int16)
    if channels <= 1:
        return samples

    n_frames = len(samples) // channels
    frames = samples[: n_frames * channels].reshape(n_frames, channels)
    sums = frames.astype(np.int32).sum(axis=1)
    return np.fix(sums / channels).astype(np.int16)


# ---------------------------------------------------------------------------
# RMS Energy
# ---------------------------------------------------------------------------

def compute_rms(samples: np.ndarray) -> float:
    """Compute RMS of a sample buffer. Returns 0.0 for an empty buffer."""
    if len(samples) == 0:
        return 0.0
    x = np.asarray(samples, dtype=np.float64)
    return float(np.sqrt(np.mean(x ** 2)))


def compute_rms_windows(samples: np.ndarray, window: int) -> np.ndarray:
    """Compute RMS over consecutive, non-overlapping windows.

    The last window may be shorter than ``window``. Returns one value per
    window.
    """
    x = np.asarray(samples, dtype=np.float64)
    n_full = len(x) // window

    rms = np.sqrt(np.mean(x[: n_full * window].reshape(n_full, window) ** 2, axis=1))
    remainder = x[n_full * window:]
    if len(remainder):
        rms = np.append(rms, compute_rms(remainder))
    return rms


def db_to_amplitude(threshold_db: float) -> float:
    """Convert a dBFS level to an int16-scale amplitude."""
    return FULL_SCALE * 10 ** (threshold_db / 20)


def window_length(sample_rate: int) -> int:
    """Samples in one 10 ms analysis window, rounding half up."""
    return int(math.floor(sample_rate * WINDOW_SECONDS + 0.5))


# ---------------------------------------------------------------------------
# Silence Detection
# ---------------------------------------------------------------------------

def detect_silence(
    samples: np.ndarray,
    sample_rate: int,
    config: SilenceDetectionConfig | None = None,
) -> list[tuple[float, float]]:
    """Find silent stretches in a mono int16 buffer.

    Audio is split into 10 ms windows. A run of windows whose RMS is below
    the threshold becomes one (start, end) interval in seconds, reported only
    when it lasts at least ``config.min_silence_duration``. Boundaries fall
    on window starts; a run still open at the end of the buffer closes at the
    buffer duration.

    Raises:
        EmptyInputError: if ``samples`` is empty.
        SampleRateTooLowError: if a 10 ms window rounds to zero samples.
    """
    if config is None:
        config = SilenceDetectionConfig()

    if len(samples) == 0:
        raise EmptyInputError("No samples to analyze")

    window = window_length(sample_rate)
    if window == 0:
        raise SampleRateTooLowError(
            f"Sample rate {sample_rate} Hz is too low for a 10 ms analysis window"
        )

    threshold = db_to_amplitude(config.threshold_db)
    logger.debug(
        f"Threshold {config.threshold_db} dB = amplitude {threshold:.2f}, "
        f"window {window} samples"
    )

    silent = compute_rms_windows(samples, window) < threshold

    ranges: list[tuple[float, float]] = []
    silence_start: float | None = None

    for i, is_silent in enumerate(silent):
        time = (i * window) / sample_rate
        if is_silent and silence_start is None:
            silence_start = time
        elif not is_silent and silence_start is not None:
            if time - silence_start >= config.min_silence_duration:
                ranges.append((silence_start, time))
            silence_start = None

    if silence_start is not None:
        end_time = len(samples) / sample_rate
        if end_time - silence_start >= config.min_silence_duration:
            ranges.append((silence_start, end_time))

    logger.info(f"Detected {len(ranges)} silence ranges")
    for i, (start, end) in enumerate(ranges):
        logger.debug(f"  Silence {i + 1}: {start:.2f}s - {end:.2f}s ({end - start:.2f}s)")

    return ranges
