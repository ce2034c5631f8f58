"""Split a long video into segments, by chapter markers or evenly."""

import logging

from coursegen.models import ChapterMarker, Segment
from coursegen.segmentation.timestamps import extract_timestamps

logger = logging.getLogger(__name__)

DEFAULT_SEGMENT_COUNT = 5

# First entry whose keywords occur in the lowercased query supplies the titles.
CURRICULUM_TABLE: tuple[tuple[tuple[str, ...], tuple[str, ...]], ...] = (
    (("react",), (
        "Components & JSX",
        "State & Props",
        "Hooks & Effects",
        "Routing & Navigation",
        "Deployment & Best Practices",
    )),
    (("javascript",), (
        "Variables & Functions",
        "Objects & Arrays",
        "DOM Manipulation",
        "Async Programming",
        "Modern ES6+ Features",
    )),
    (("python",), (
        "Syntax & Variables",
        "Data Structures",
        "Functions & Classes",
        "File Handling & Libraries",
        "Advanced Concepts",
    )),
    (("html", "css"), (
        "HTML Basics",
        "CSS Styling",
        "Responsive Design",
        "Advanced CSS",
        "Modern Web Development",
    )),
    (("node",), (
        "Node.js Basics",
        "Express.js Framework",
        "Database Integration",
        "API Development",
        "Production Deployment",
    )),
)

GENERIC_CURRICULUM = (
    "Introduction & Setup",
    "Basic Concepts",
    "Core Features",
    "Advanced Topics",
    "Best Practices & Conclusion",
)


def segment_titles(query: str, count: int = DEFAULT_SEGMENT_COUNT) -> list[str]:
    """Pick ``count`` segment titles for a topic, padding with ``Part n``."""
    topic = query.lower()
    curriculum = GENERIC_CURRICULUM
    for keywords, titles in CURRICULUM_TABLE:
        if any(keyword in topic for keyword in keywords):
            curriculum = titles
            break
    return [
        curriculum[i] if i < len(curriculum) else f"Part {i + 1}"
        for i in range(count)
    ]


def segments_from_markers(markers: list[ChapterMarker], total_seconds: int) -> list[Segment]:
    """One segment per marker, each running until the next marker.

    The last segment ends at ``total_seconds``. Markers at or beyond the
    end of the video are ignored.
    """
    usable = [m for m in markers if m.offset < total_seconds]
    if len(usable) < len(markers):
        logger.debug("Ignoring %d marker(s) past the end of the video", len(markers) - len(usable))

    segments = []
    for i, marker in enumerate(usable):
        end = usable[i + 1].offset if i + 1 < len(usable) else total_seconds
        segments.append(Segment(start=marker.offset, end=end, title=marker.title))
    return segments


def equal_segments(
    total_seconds: int, query: str, count: int = DEFAULT_SEGMENT_COUNT
) -> list[Segment]:
    """Split evenly into ``count`` parts; the last part absorbs the remainder."""
    width = total_seconds // count
    titles = segment_titles(query, count)

    segments = []
    for i in range(count):
        start = i * width
        end = total_seconds if i == count - 1 else min((i + 1) * width, total_seconds)
        if end <= start:
            continue
        segments.append(Segment(start=start, end=end, title=titles[i]))
    return segments


def build_segments(
    description: str,
    total_seconds: int,
    query: str,
    count: int = DEFAULT_SEGMENT_COUNT,
) -> list[Segment]:
    """Segment a video from its description chapters, or evenly if it has none."""
    markers = extract_timestamps(description)
    if markers:
        segments = segments_from_markers(markers, total_seconds)
        if segments:
            return segments
    return equal_segments(total_seconds, query, count)
