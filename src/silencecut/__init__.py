"""silencecut — silence detection and timeline editing for recorded video."""

from silencecut.analysis import detect_silence
from silencecut.timeline import Timeline
from silencecut.types import Clip, SilenceDetectionConfig

__all__ = ["Clip", "SilenceDetectionConfig", "Timeline", "detect_silence"]
