"""Video processing pipeline: probe, extract, detect, split."""

import logging
from dataclasses import dataclass
from pathlib import Path

from silencecut.analysis import detect_silence, read_wav, to_mono
from silencecut.audio import extract_audio_cached, probe_duration
from silencecut.timeline import Timeline
from silencecut.types import SilenceDetectionConfig

logger = logging.getLogger(__name__)


@dataclass
class ProcessResult:
    """Output of :func:`process_video`."""
    timeline: Timeline
    wav_path: Path


def process_video(
    source_path: str | Path,
    config: SilenceDetectionConfig | None = None,
    work_dir: str | Path | None = None,
    use_cache: bool = True,
) -> ProcessResult:
    """Build a silence-split timeline for a video file.

    The extracted WAV is kept so callers can draw a waveform from it; its
    path is also stored on the timeline as ``audio_path``.
    """
    source_path = Path(source_path)
    if config is None:
        config = SilenceDetectionConfig()
    logger.info(f"Starting video processing pipeline for: {source_path}")
    logger.info(
        f"Threshold: {config.threshold_db} dB, "
        f"Min duration: {config.min_silence_duration} s"
    )

    duration = probe_duration(source_path)

    wav_path = extract_audio_cached(source_path, work_dir, use_cache=use_cache)
    samples, sr, channels = read_wav(wav_path)
    silence_ranges = detect_silence(to_mono(samples, channels), sr, config)

    timeline = Timeline(duration, source_path)
    timeline.audio_path = str(wav_path)
    timeline.split_by_silence(silence_ranges)

    logger.info("Pipeline completed successfully")
    return ProcessResult(timeline=timeline, wav_path=wav_path)
