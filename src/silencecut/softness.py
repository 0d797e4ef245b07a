"""Cut softness: shrink silence ranges to leave natural pauses around cuts.

Softness only ever shrinks a silence range from both ends, so padding can
never reach into detected speech.
"""

# Share of preserved silence kept before / after the cut
PRE_SHARE = 0.4
POST_SHARE = 0.6

# Padding clamps in seconds
MIN_PRE_PADDING = 0.03
MAX_PRE_PADDING = 0.2
MIN_POST_PADDING = 0.05
MAX_POST_PADDING = 0.3


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(value, high))


def padding_for(duration: float, percent: int) -> tuple[float, float]:
    """Return (pre_padding, post_padding) for a silence of ``duration`` seconds."""
    preserved = duration * (percent / 100)
    pre = _clamp(preserved * PRE_SHARE, MIN_PRE_PADDING, MAX_PRE_PADDING)
    post = _clamp(preserved * POST_SHARE, MIN_POST_PADDING, MAX_POST_PADDING)
    return pre, post


def soften_silence_ranges(
    ranges: list[tuple[float, float]],
    percent: int,
) -> list[tuple[float, float]]:
    """Shrink each silence range by softness padding.

    At 0% the ranges are returned unchanged. Otherwise each range loses
    ``pre`` seconds at its start and ``post`` seconds at its end; a range the
    padding consumes entirely is dropped and its stretch stays content.

    Raises:
        ValueError: if ``percent`` is outside 0-100.
    """
    if not 0 <= percent <= 100:
        raise ValueError(f"Softness must be between 0 and 100, got {percent}")

    if percent == 0:
        return list(ranges)

    softened = []
    for start, end in ranges:
        pre, post = padding_for(end - start, percent)
        new_start = start + pre
        new_end = end - post
        if new_start >= new_end:
            continue
        softened.append((new_start, new_end))
    return softened
