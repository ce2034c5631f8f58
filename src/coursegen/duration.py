"""Duration codec for YouTube's ``PT#H#M#S`` notation and related labels."""

import re

LONG_VIDEO_SECONDS = 30 * 60

_DURATION_RE = re.compile(r"PT(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?")


def parse_duration_to_seconds(raw: str) -> int:
    """Parse a ``PT1H2M3S`` style duration into whole seconds.

    Missing components count as zero; input without a ``PT`` prefix yields 0.
    """
    match = _DURATION_RE.search(raw or "")
    if not match:
        return 0
    hours, minutes, seconds = (int(part or 0) for part in match.groups())
    return hours * 3600 + minutes * 60 + seconds


def format_seconds_to_duration(seconds: int) -> str:
    """Format seconds as a ``PT`` duration, omitting zero components."""
    seconds = max(int(seconds), 0)
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)

    result = "PT"
    if hours:
        result += f"{hours}H"
    if minutes:
        result += f"{minutes}M"
    if secs:
        result += f"{secs}S"
    return result


def is_long_video(raw: str) -> bool:
    """True for crash-course length videos (30 minutes or more)."""
    return parse_duration_to_seconds(raw) >= LONG_VIDEO_SECONDS


def parse_time_string_to_seconds(token: str) -> int:
    """Convert a clock token (``MM:SS`` or ``HH:MM:SS``) to seconds.

    Returns 0 for anything that is not two or three numeric fields.
    """
    try:
        parts = [int(p) for p in token.split(":")]
    except ValueError:
        return 0

    if len(parts) == 2:
        return parts[0] * 60 + parts[1]
    if len(parts) == 3:
        return parts[0] * 3600 + parts[1] * 60 + parts[2]
    return 0


def format_clock(seconds: int) -> str:
    """Format seconds as ``M:SS`` or ``H:MM:SS``."""
    seconds = max(int(seconds), 0)
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def format_view_count(raw: str | int) -> str:
    """Human label for a view count, e.g. ``1.2M views``."""
    try:
        count = int(raw)
    except (TypeError, ValueError):
        count = 0

    if count >= 1_000_000:
        return f"{count / 1_000_000:.1f}M views"
    if count >= 1_000:
        return f"{count / 1_000:.1f}K views"
    return f"{count} views"
