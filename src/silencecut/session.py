"""Editor session: the single owner of one Timeline.

All commands take the session lock, mutate the owned Timeline and hand back
a deep copy, so callers on other threads never share mutable state with the
session.
"""

import copy
import logging
import threading
from collections.abc import Iterator
from dataclasses import replace
from pathlib import Path

from silencecut.analysis import read_wav
from silencecut.errors import NoTimelineLoadedError
from silencecut.export import render
from silencecut.pipeline import process_video
from silencecut.timeline import Timeline
from silencecut.types import ExportProgress, SilenceDetectionConfig, WaveformData
from silencecut.waveform import extract_peaks

logger = logging.getLogger(__name__)


class EditorSession:
    """Serialized command interface over one loaded video."""

    def __init__(
        self,
        config: SilenceDetectionConfig | None = None,
        work_dir: str | Path | None = None,
        use_cache: bool = True,
    ):
        self._lock = threading.Lock()
        self._timeline: Timeline | None = None
        self._wav_path: Path | None = None
        self._config = config if config is not None else SilenceDetectionConfig()
        self._work_dir = work_dir
        self._use_cache = use_cache

    def _require_timeline(self) -> Timeline:
        if self._timeline is None:
            raise NoTimelineLoadedError("No timeline loaded")
        return self._timeline

    # --- loading ---

    def process_video(self, source_path: str | Path) -> Timeline:
        """Analyze a video with the current config and make it the session's timeline."""
        logger.info(f"Processing video: {source_path}")
        config = self.get_silence_config()

        # Analysis runs outside the lock; only the swap is serialized
        result = process_video(
            source_path, config, work_dir=self._work_dir, use_cache=self._use_cache,
        )
        with self._lock:
            self._timeline = result.timeline
            self._wav_path = result.wav_path
            return copy.deepcopy(self._timeline)

    def rerun_analysis(self) -> Timeline:
        """Re-detect silence on the loaded video with the current config."""
        with self._lock:
            source_path = self._require_timeline().source_path
            config = self._config
        logger.info(
            f"Re-running analysis with threshold={config.threshold_db} dB, "
            f"min_duration={config.min_silence_duration} s"
        )
        return self.process_video(source_path)

    # --- config ---

    def get_silence_config(self) -> SilenceDetectionConfig:
        with self._lock:
            return replace(self._config)

    def update_silence_config(self, threshold_db: float, min_silence_duration: float) -> None:
        logger.info(
            f"Updating silence config: threshold={threshold_db} dB, "
            f"min_duration={min_silence_duration} s"
        )
        with self._lock:
            self._config = SilenceDetectionConfig(
                threshold_db=threshold_db,
                min_silence_duration=min_silence_duration,
            )

    # --- queries ---

    def get_timeline(self) -> Timeline:
        with self._lock:
            return copy.deepcopy(self._require_timeline())

    def get_source_path(self) -> str:
        with self._lock:
            return self._require_timeline().source_path

    def get_segment_at_time(self, source_time: float) -> int:
        with self._lock:
            return self._require_timeline().segment_at_source_time(source_time)

    def get_waveform_data(self, bucket_ms: int = 10) -> WaveformData:
        with self._lock:
            wav_path = self._wav_path
        if wav_path is None:
            raise NoTimelineLoadedError("No audio data available")
        samples, sr, channels = read_wav(wav_path)
        return extract_peaks(samples, sr, channels, bucket_ms)

    # --- edits ---

    def delete_silence_clips(self) -> Timeline:
        with self._lock:
            timeline = self._require_timeline()
            timeline.delete_silence_clips()
            timeline.recalculate_timeline_times()
            return copy.deepcopy(timeline)

    def toggle_segment(self, index: int) -> Timeline:
        with self._lock:
            timeline = self._require_timeline()
            timeline.toggle_segment_include(index)
            return copy.deepcopy(timeline)

    def remove_segment(self, index: int) -> Timeline:
        with self._lock:
            timeline = self._require_timeline()
            timeline.remove_segment(index)
            return copy.deepcopy(timeline)

    def merge_segments(self, index: int) -> Timeline:
        with self._lock:
            timeline = self._require_timeline()
            timeline.merge_segments(index)
            return copy.deepcopy(timeline)

    def adjust_segment_boundary(self, index: int, new_time: float) -> Timeline:
        with self._lock:
            timeline = self._require_timeline()
            timeline.adjust_segment_boundary(index, new_time)
            return copy.deepcopy(timeline)

    def set_cut_softness(self, percent: int) -> Timeline:
        with self._lock:
            timeline = self._require_timeline()
            timeline.apply_softness(percent)
            return copy.deepcopy(timeline)

    # --- export ---

    def export(self, output_path: str | Path) -> Iterator[ExportProgress]:
        """Render the current timeline. Clips are snapshotted under the lock."""
        logger.info(f"Exporting video to: {output_path}")
        with self._lock:
            timeline = self._require_timeline()
            clips = copy.deepcopy(timeline.clips)
            source_path = timeline.source_path
        return render(clips, source_path, output_path)
