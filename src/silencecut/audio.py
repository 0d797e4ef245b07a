"""Media I/O via ffmpeg/ffprobe."""

import json
import logging
import os
import shutil
import subprocess
import tempfile
from pathlib import Path

import numpy as np

from silencecut.analysis import read_wav
from silencecut.cache import file_hash, get_cached_audio, store_audio_cache
from silencecut.errors import DecodeError, ProbeError

logger = logging.getLogger(__name__)

# Sample rate used for analysis audio
EXTRACT_SAMPLE_RATE = 44100


def ffmpeg_binary() -> str:
    return os.environ.get("SILENCECUT_FFMPEG", "ffmpeg")


def ffprobe_binary() -> str:
    return os.environ.get("SILENCECUT_FFPROBE", "ffprobe")


def _run_ffprobe(path: Path, *args: str) -> str:
    """Run ffprobe and return stdout."""
    if not path.exists():
        raise ProbeError(f"File not found: {path}")
    cmd = [
        ffprobe_binary(), "-v", "error", "-print_format", "json",
        *args, str(path),
    ]
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, timeout=30)
    except FileNotFoundError as e:
        raise ProbeError(
            "FFprobe not found. Please ensure FFmpeg (with FFprobe) is installed."
        ) from e
    if result.returncode != 0:
        raise ProbeError(f"FFprobe failed: {result.stderr.strip()}")
    return result.stdout


def probe_duration(path: str | Path) -> float:
    """Get media duration in seconds."""
    path = Path(path)
    output = _run_ffprobe(path, "-show_format", "-show_streams")
    try:
        data = json.loads(output)
    except json.JSONDecodeError as e:
        raise ProbeError(f"Failed to parse ffprobe output for {path}: {e}") from e

    # Try format duration first, fall back to first stream that has one
    dur = data.get("format", {}).get("duration")
    if dur is None:
        for stream in data.get("streams", []):
            if "duration" in stream:
                dur = stream["duration"]
                break
    if dur is None:
        raise ProbeError(f"No duration reported for {path}")

    try:
        duration = float(dur)
    except ValueError as e:
        raise ProbeError(f"Failed to parse duration {dur!r}: {e}") from e

    logger.info(f"Duration of {path.name}: {duration:.2f} seconds")
    return duration


def extract_audio(
    input_path: str | Path,
    output_path: str | Path,
    sample_rate: int = EXTRACT_SAMPLE_RATE,
) -> Path:
    """Extract the audio track to 16-bit mono PCM WAV."""
    input_path = Path(input_path)
    output_path = Path(output_path)
    if not input_path.exists():
        raise DecodeError(f"Video file not found: {input_path}")

    output_path.parent.mkdir(parents=True, exist_ok=True)
    cmd = [
        ffmpeg_binary(), "-y", "-i", str(input_path),
        "-vn", "-acodec", "pcm_s16le", "-ar", str(sample_rate), "-ac", "1",
        str(output_path),
    ]
    logger.info(f"Extracting audio from {input_path} to {output_path}")
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, timeout=600)
    except FileNotFoundError as e:
        raise DecodeError(
            "FFmpeg not found. Please ensure FFmpeg is installed and in your PATH."
        ) from e
    if result.returncode != 0:
        raise DecodeError(f"FFmpeg failed: {result.stderr.strip()}")
    return output_path


def extract_audio_cached(
    input_path: str | Path,
    work_dir: str | Path | None = None,
    use_cache: bool = True,
) -> Path:
    """Extract audio to a WAV, reusing a cached extraction when available."""
    input_path = Path(input_path)
    if not input_path.exists():
        raise DecodeError(f"Video file not found: {input_path}")

    if work_dir is None:
        work_dir = Path(tempfile.gettempdir()) / "silencecut"
    work_dir = Path(work_dir)
    wav_path = work_dir / f"{input_path.stem}_audio.wav"

    if use_cache:
        input_hash = file_hash(input_path)
        cached = get_cached_audio(input_hash)
        if cached is not None:
            work_dir.mkdir(parents=True, exist_ok=True)
            shutil.copy2(cached, wav_path)
            return wav_path
        extract_audio(input_path, wav_path)
        store_audio_cache(input_hash, wav_path)
        return wav_path

    return extract_audio(input_path, wav_path)


def decode_audio(
    source_path: str | Path,
    work_dir: str | Path | None = None,
    use_cache: bool = True,
) -> tuple[np.ndarray, int, int]:
    """Decode a media file's audio to (int16 samples, sample_rate, channels)."""
    wav_path = extract_audio_cached(source_path, work_dir, use_cache=use_cache)
    samples, sr, channels = read_wav(wav_path)
    logger.info(f"Read {len(samples)} samples at {sr} Hz, {channels} channel(s)")
    return samples, sr, channels
