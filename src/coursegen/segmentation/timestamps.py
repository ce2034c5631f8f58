"""Chapter marker extraction from free-text video descriptions."""

import re

from coursegen.duration import parse_time_string_to_seconds
from coursegen.models import ChapterMarker

# Time tokens only match at digit boundaries so "1:02:03" is never re-read as "02:03".
_MMSS = r"(?<![\d:])(\d{1,2}:\d{2})(?![\d:])"
_HHMMSS = r"(?<![\d:])(\d{1,2}:\d{2}:\d{2})(?![\d:])"

# Applied in order; for equal offsets the earlier pattern's match is kept.
TIMESTAMP_PATTERNS = (
    re.compile(_MMSS + r"[ \t]+(.+)"),                       # 0:00 Introduction
    re.compile(_MMSS + r"[ \t]*-[ \t]*(.+)"),                # 00:00 - Introduction
    re.compile(r"\[(\d{1,2}:\d{2})\][ \t]*(.+)"),            # [0:00] Introduction
    re.compile(_HHMMSS + r"[ \t]+(.+)"),                     # 0:00:00 Introduction
    re.compile(_HHMMSS + r"[ \t]*-[ \t]*(.+)"),              # 00:00:00 - Introduction
    re.compile(r"\[(\d{1,2}:\d{2}:\d{2})\][ \t]*(.+)"),      # [0:00:00] Introduction
)

_TITLE_SEPARATORS = "-–—:|"


def _clean_title(raw: str) -> str:
    return raw.strip().lstrip(_TITLE_SEPARATORS).strip()


def extract_timestamps(description: str) -> list[ChapterMarker]:
    """Find chapter markers such as ``5:30 Setup`` in a description.

    Returns markers sorted by offset with one marker per offset (the
    first match found wins). Matches with an empty title are dropped.
    """
    if not description:
        return []

    found: list[ChapterMarker] = []
    for pattern in TIMESTAMP_PATTERNS:
        for match in pattern.finditer(description):
            title = _clean_title(match.group(2))
            if not title:
                continue
            offset = parse_time_string_to_seconds(match.group(1))
            found.append(ChapterMarker(offset=offset, title=title))

    found.sort(key=lambda marker: marker.offset)

    markers: list[ChapterMarker] = []
    for marker in found:
        if markers and markers[-1].offset == marker.offset:
            continue
        markers.append(marker)
    return markers
