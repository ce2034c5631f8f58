"""Keyword-based difficulty scoring and ordering."""

from enum import IntEnum
from operator import attrgetter
from typing import Callable, Iterable, TypeVar

T = TypeVar("T")


class DifficultyLevel(IntEnum):
    BEGINNER = 0
    INTERMEDIATE = 1
    ADVANCED = 2

    @property
    def label(self) -> str:
        return self.name.capitalize()


BEGINNER_KEYWORDS = (
    "beginner", "basics", "introduction", "getting started", "tutorial",
    "learn", "how to", "step by step", "for beginners",
)
INTERMEDIATE_KEYWORDS = (
    "intermediate", "advanced", "deep dive", "master", "complete guide",
    "comprehensive", "in-depth",
)
EXPERT_KEYWORDS = (
    "expert", "professional", "production", "enterprise", "optimization",
    "performance", "architecture",
)

# Checked in order; the first table with a hit decides the level.
DIFFICULTY_TABLE: tuple[tuple[tuple[str, ...], DifficultyLevel], ...] = (
    (BEGINNER_KEYWORDS, DifficultyLevel.BEGINNER),
    (EXPERT_KEYWORDS, DifficultyLevel.ADVANCED),
    (INTERMEDIATE_KEYWORDS, DifficultyLevel.INTERMEDIATE),
)

DEFAULT_LEVEL = DifficultyLevel.INTERMEDIATE


def classify_difficulty(title: str, description: str = "") -> DifficultyLevel:
    """Score a title/description pair as beginner, intermediate or advanced.

    Beginner keywords take precedence over expert ones, which take
    precedence over intermediate ones. Text with no keyword at all is
    treated as intermediate.
    """
    text = f"{title} {description}".lower()
    for keywords, level in DIFFICULTY_TABLE:
        if any(keyword in text for keyword in keywords):
            return level
    return DEFAULT_LEVEL


def sort_by_difficulty(
    items: Iterable[T], key: Callable[[T], int] = attrgetter("difficulty")
) -> list[T]:
    """Order items beginner first; equal levels keep their input order."""
    return sorted(items, key=key)
