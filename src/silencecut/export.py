"""Render the edited video with ffmpeg.

Included clips are cut from the source with trim/atrim and joined with the
concat filter in a single ffmpeg pass. Progress is read from ffmpeg's
``-progress`` output and yielded as :class:`ExportProgress` events.
"""

import logging
import subprocess
from collections.abc import Iterator
from pathlib import Path

from silencecut.audio import ffmpeg_binary
from silencecut.errors import ExportError
from silencecut.types import Clip, ExportProgress

logger = logging.getLogger(__name__)

_PROGRESS_KEY = "out_time_us="


def build_filter_complex(clips: list[Clip]) -> str:
    """Build a filter graph that trims each clip and concatenates them."""
    if not clips:
        raise ExportError("Cannot build filter graph: no clips")

    video_filters = []
    audio_filters = []
    concat_inputs = []
    for i, clip in enumerate(clips):
        video_filters.append(
            f"[0:v]trim=start={clip.source_start:.6f}:end={clip.source_end:.6f},"
            f"setpts=PTS-STARTPTS[v{i}]"
        )
        audio_filters.append(
            f"[0:a]atrim=start={clip.source_start:.6f}:end={clip.source_end:.6f},"
            f"asetpts=PTS-STARTPTS[a{i}]"
        )
        concat_inputs.append(f"[v{i}][a{i}]")

    parts = video_filters + audio_filters
    parts.append("".join(concat_inputs) + f"concat=n={len(clips)}:v=1:a=1[outv][outa]")
    return ";".join(parts)


def build_render_command(
    clips: list[Clip], source_path: Path, output_path: Path
) -> list[str]:
    return [
        ffmpeg_binary(),
        "-i", str(source_path),
        "-filter_complex", build_filter_complex(clips),
        "-map", "[outv]",
        "-map", "[outa]",
        "-c:v", "libx264",
        "-preset", "medium",
        "-crf", "23",
        "-c:a", "aac",
        "-b:a", "192k",
        "-progress", "pipe:2",
        "-y",
        str(output_path),
    ]


def parse_progress_line(line: str, total_duration: float) -> ExportProgress | None:
    """Turn an ``out_time_us=`` progress line into an event, else None."""
    line = line.strip()
    if not line.startswith(_PROGRESS_KEY):
        return None
    try:
        time_us = int(line[len(_PROGRESS_KEY):])
    except ValueError:
        # ffmpeg reports N/A before the first frame
        return None

    current_time = time_us / 1_000_000
    percentage = 100.0
    if total_duration > 0:
        percentage = min(current_time / total_duration * 100, 100.0)
    return ExportProgress(
        percentage=percentage,
        current_time=current_time,
        total_duration=total_duration,
    )


def render(
    clips: list[Clip],
    source_path: str | Path,
    output_path: str | Path,
) -> Iterator[ExportProgress]:
    """Render the included clips of ``clips`` into ``output_path``.

    Validation happens immediately; the returned iterator starts ffmpeg on
    first iteration, and closing it early terminates the encoder.

    Raises:
        ExportError: if no clip is included, the source is missing, or
            ffmpeg fails.
    """
    included = [clip for clip in clips if clip.include]
    logger.info(f"Exporting {len(included)} of {len(clips)} clips (include=true)")
    if not included:
        raise ExportError("Cannot export: no clips are included")

    source_path = Path(source_path)
    output_path = Path(output_path)
    if not source_path.exists():
        raise ExportError(f"Source video file not found: {source_path}")

    total_duration = sum(clip.duration for clip in included)
    cmd = build_render_command(included, source_path, output_path)
    logger.debug(f"FFmpeg filter: {cmd[cmd.index('-filter_complex') + 1]}")
    return _run_render(cmd, total_duration, output_path)


def _run_render(
    cmd: list[str], total_duration: float, output_path: Path
) -> Iterator[ExportProgress]:
    try:
        proc = subprocess.Popen(
            cmd,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
            text=True,
        )
    except FileNotFoundError as e:
        raise ExportError(f"Failed to execute FFmpeg: {e}") from e

    tail: list[str] = []
    try:
        for line in proc.stderr:
            progress = parse_progress_line(line, total_duration)
            if progress is not None:
                yield progress
            else:
                tail = (tail + [line.rstrip()])[-20:]
        returncode = proc.wait()
    finally:
        if proc.poll() is None:
            proc.terminate()
            proc.wait()
        proc.stderr.close()

    if returncode != 0:
        raise ExportError("FFmpeg export failed:\n" + "\n".join(tail))

    logger.info(f"Video export completed successfully: {output_path}")
