"""Timeline of clips over one source video.

The timeline is a contiguous playback view over source ranges that may have
gaps once clips are removed. Clip order is load-bearing: every editing
operation addresses clips by position.
"""

import logging
from pathlib import Path

from silencecut.errors import (
    BoundaryOutOfRangeError,
    IndexOutOfBoundsError,
    NoNextSegmentError,
    SegmentNotFoundError,
)
from silencecut.softness import soften_silence_ranges
from silencecut.types import Clip

logger = logging.getLogger(__name__)


class Timeline:
    """Ordered, editable clip list for one source video.

    Not thread-safe. Share it through a single owner such as
    :class:`silencecut.session.EditorSession`.
    """

    def __init__(self, total_duration: float, source_path: str | Path):
        self.total_duration = total_duration
        self.source_path = str(source_path)
        self.audio_path: str | None = None
        self.raw_silence_ranges: list[tuple[float, float]] = []
        self.clips: list[Clip] = self._full_clip()

    def _full_clip(self) -> list[Clip]:
        if self.total_duration <= 0:
            return []
        return [Clip.new(0.0, self.total_duration, False)]

    def __len__(self) -> int:
        return len(self.clips)

    def __repr__(self) -> str:
        return (
            f"Timeline(source_path={self.source_path!r}, "
            f"total_duration={self.total_duration}, clips={len(self.clips)})"
        )

    # ------------------------------------------------------------------
    # Splitting
    # ------------------------------------------------------------------

    def split_by_silence(self, silence_ranges: list[tuple[float, float]]) -> None:
        """Split content clips at the given silence ranges.

        The ranges are kept as ``raw_silence_ranges`` for later softness
        changes. Timeline positions are left equal to source positions; call
        :meth:`recalculate_timeline_times` once clips are removed.
        """
        self.raw_silence_ranges = [(float(s), float(e)) for s, e in silence_ranges]
        self._apply_silence_splitting(self.raw_silence_ranges)

    def _apply_silence_splitting(self, silence_ranges: list[tuple[float, float]]) -> None:
        logger.info(f"Splitting timeline with {len(silence_ranges)} silence ranges")

        current = list(self.clips)
        for silence_start, silence_end in sorted(silence_ranges, key=lambda r: r[0]):
            split: list[Clip] = []
            for clip in current:
                if clip.is_silence:
                    split.append(clip)
                    continue

                if silence_end <= clip.source_start or silence_start >= clip.source_end:
                    split.append(clip)
                    continue

                if silence_start > clip.source_start:
                    split.append(Clip.new(clip.source_start, silence_start, False))

                split.append(Clip.new(
                    max(silence_start, clip.source_start),
                    min(silence_end, clip.source_end),
                    True,
                ))

                if silence_end < clip.source_end:
                    split.append(Clip.new(silence_end, clip.source_end, False))
            current = split

        self.clips = current
        logger.info(f"Timeline now has {len(self.clips)} clips after splitting")

    # ------------------------------------------------------------------
    # Structural edits
    # ------------------------------------------------------------------

    def recalculate_timeline_times(self) -> None:
        """Lay clips end to end from 0 on the playback timeline.

        Must run after any change to clip count or source spans.
        """
        position = 0.0
        for clip in self.clips:
            duration = clip.duration
            clip.timeline_start = position
            clip.timeline_end = position + duration
            position = clip.timeline_end

        logger.info(
            f"Recalculated timeline: {len(self.clips)} clips, total duration {position:.2f}s"
        )

    def delete_silence_clips(self) -> int:
        """Drop every silence clip. Returns the number removed.

        Timeline positions are stale until :meth:`recalculate_timeline_times`.
        """
        before = len(self.clips)
        self.clips = [clip for clip in self.clips if not clip.is_silence]
        removed = before - len(self.clips)
        logger.info(f"Deleted {removed} silence clips, {len(self.clips)} clips remaining")
        return removed

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self.clips):
            raise IndexOutOfBoundsError(f"Segment index {index} out of bounds")

    def toggle_segment_include(self, index: int) -> None:
        self._check_index(index)
        clip = self.clips[index]
        clip.include = not clip.include
        logger.info(f"Toggled segment {index} include to {clip.include}")

    def remove_segment(self, index: int) -> None:
        self._check_index(index)
        del self.clips[index]
        self.recalculate_timeline_times()
        logger.info(f"Removed segment {index}, {len(self.clips)} segments remaining")

    def merge_segments(self, index: int) -> None:
        """Merge clip ``index`` with the clip after it.

        The merged clip keeps the first clip's ``is_silence`` and ``include``.
        """
        self._check_index(index)
        if index + 1 >= len(self.clips):
            raise NoNextSegmentError("Cannot merge: no next segment")

        following = self.clips.pop(index + 1)
        self.clips[index].source_end = following.source_end
        self.recalculate_timeline_times()
        logger.info(
            f"Merged segments {index} and {index + 1}, {len(self.clips)} segments remaining"
        )

    def adjust_segment_boundary(self, index: int, new_time: float) -> None:
        """Move the source boundary between clip ``index`` and ``index + 1``.

        ``new_time`` must lie strictly inside the span covered by both clips
        so that neither collapses to zero length.
        """
        if index < 0 or index + 1 >= len(self.clips):
            raise NoNextSegmentError("Cannot adjust boundary: no next segment")

        current_start = self.clips[index].source_start
        next_end = self.clips[index + 1].source_end
        if not (current_start < new_time < next_end):
            raise BoundaryOutOfRangeError(
                f"New time {new_time:.2f} is out of bounds "
                f"({current_start:.2f} - {next_end:.2f})"
            )

        self.clips[index].source_end = new_time
        self.clips[index + 1].source_start = new_time
        self.recalculate_timeline_times()
        logger.info(f"Adjusted boundary between {index} and {index + 1} to {new_time:.2f}")

    # ------------------------------------------------------------------
    # Softness
    # ------------------------------------------------------------------

    def apply_softness(self, softness_percent: int) -> None:
        """Rebuild clips from the raw silence ranges with softness padding.

        Always starts over from one full-length clip and the untouched
        detector output, so repeated calls never compound.
        """
        softened = soften_silence_ranges(self.raw_silence_ranges, softness_percent)
        logger.info(f"Applying cut softness: {softness_percent}%")

        self.clips = self._full_clip()
        self._apply_silence_splitting(softened)
        self.recalculate_timeline_times()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def timeline_duration(self) -> float:
        return sum(clip.duration for clip in self.clips)

    def included_clips(self) -> list[Clip]:
        return [clip for clip in self.clips if clip.include]

    def included_duration(self) -> float:
        """Duration of the clips that will be exported."""
        return sum(clip.duration for clip in self.included_clips())

    def segment_at_source_time(self, source_time: float) -> int:
        for i, clip in enumerate(self.clips):
            if clip.contains_source_time(source_time):
                return i
        raise SegmentNotFoundError(f"Time {source_time:.2f}s not within any segment")

    def segment_at_timeline_time(self, timeline_time: float) -> int:
        for i, clip in enumerate(self.clips):
            if clip.contains_timeline_time(timeline_time):
                return i
        raise SegmentNotFoundError(f"Time {timeline_time:.2f}s not within any segment")

    def to_dict(self) -> dict:
        return {
            "source_path": self.source_path,
            "audio_path": self.audio_path,
            "total_duration": self.total_duration,
            "raw_silence_ranges": [list(r) for r in self.raw_silence_ranges],
            "clips": [clip.to_dict() for clip in self.clips],
        }
