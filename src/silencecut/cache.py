"""File-based cache for extracted analysis audio."""

import hashlib
import logging
import os
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)

CACHE_DIR = Path(os.environ.get("SILENCECUT_CACHE_DIR", "~/.cache/silencecut")).expanduser()


def file_hash(path: Path) -> str:
    """Compute SHA-256 hash of a file's contents."""
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            h.update(chunk)
    return h.hexdigest()


def _extract_cache_path(input_hash: str) -> Path:
    return CACHE_DIR / "extract" / f"{input_hash}.wav"


def get_cached_audio(input_hash: str) -> Path | None:
    """Return cached extracted audio path, or None if not cached."""
    path = _extract_cache_path(input_hash)
    if path.exists() and path.stat().st_size > 0:
        logger.info(f"Cache hit: audio extraction ({input_hash[:12]}...)")
        return path
    return None


def store_audio_cache(input_hash: str, audio_path: Path) -> Path:
    """Copy extracted audio into cache. Returns the cache path."""
    dest = _extract_cache_path(input_hash)
    dest.parent.mkdir(parents=True, exist_ok=True)
    tmp = dest.with_suffix(".tmp")
    shutil.copy2(audio_path, tmp)
    os.replace(tmp, dest)
    logger.info(f"Cached audio extraction ({input_hash[:12]}...)")
    return dest


def clear_cache() -> int:
    """Remove all cached extractions. Returns the number of files removed."""
    extract_dir = CACHE_DIR / "extract"
    if not extract_dir.exists():
        return 0
    removed = 0
    for path in extract_dir.glob("*.wav"):
        path.unlink()
        removed += 1
    logger.info(f"Cleared {removed} cached extraction(s)")
    return removed
