"""Core data types for silencecut."""

from dataclasses import asdict, dataclass


@dataclass
class Clip:
    """One segment of the edited video.

    A clip maps a span of the gap-free playback timeline onto a span of the
    original source file. Both spans always have the same length; only the
    timeline position moves when earlier clips are removed.
    """
    timeline_start: float   # seconds, playback timeline
    timeline_end: float     # seconds, playback timeline
    source_start: float     # seconds, original file
    source_end: float       # seconds, original file
    is_silence: bool = False
    include: bool = True    # export checkbox

    @classmethod
    def new(cls, source_start: float, source_end: float, is_silence: bool) -> "Clip":
        """Create a clip whose timeline span equals its source span.

        Content is included by default, silence excluded.
        """
        return cls(
            timeline_start=source_start,
            timeline_end=source_end,
            source_start=source_start,
            source_end=source_end,
            is_silence=is_silence,
            include=not is_silence,
        )

    @property
    def duration(self) -> float:
        return self.source_end - self.source_start

    def is_valid(self) -> bool:
        return (
            self.source_start >= 0.0
            and self.source_end > self.source_start
            and self.timeline_start >= 0.0
            and self.timeline_end > self.timeline_start
        )

    def contains_timeline_time(self, time: float) -> bool:
        """Half-open check: [timeline_start, timeline_end)."""
        return self.timeline_start <= time < self.timeline_end

    def contains_source_time(self, time: float) -> bool:
        """Half-open check: [source_start, source_end)."""
        return self.source_start <= time < self.source_end

    def timeline_to_source(self, timeline_time: float) -> float:
        """Map a timeline time inside this clip to source time."""
        return self.source_start + (timeline_time - self.timeline_start)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class SilenceDetectionConfig:
    """Silence detector settings."""
    threshold_db: float = -35.0         # dBFS, relative to int16 full scale
    min_silence_duration: float = 0.3   # seconds; shorter runs are ignored


@dataclass
class WaveformData:
    """Downsampled peaks for waveform display."""
    peaks: list[float]      # max |amplitude| per bucket, normalized to [0, 1]
    duration: float         # seconds
    bucket_ms: int

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ExportProgress:
    """One progress event emitted while rendering."""
    percentage: float
    current_time: float     # seconds of output written so far
    total_duration: float   # seconds of included clips
