"""Domain models for coursegen."""

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from coursegen.difficulty import DifficultyLevel
from coursegen.duration import (
    format_clock,
    format_view_count,
    parse_duration_to_seconds,
)

_THUMBNAIL_FILES = {"default": "default.jpg", "medium": "mqdefault.jpg", "high": "hqdefault.jpg"}


class Thumbnails(BaseModel):
    """Thumbnail URLs in the three sizes the provider publishes."""

    model_config = ConfigDict(frozen=True)

    default: str = ""
    medium: str = ""
    high: str = ""

    @classmethod
    def for_video(cls, video_id: str, provided: dict | None = None) -> "Thumbnails":
        """Build from a provider ``thumbnails`` object, filling gaps with public URLs."""
        provided = provided or {}
        urls = {}
        for size, filename in _THUMBNAIL_FILES.items():
            entry = provided.get(size) or {}
            urls[size] = entry.get("url") or f"https://img.youtube.com/vi/{video_id}/{filename}"
        return cls(**urls)


class SearchCandidate(BaseModel):
    """A video returned by the provider, enriched with details and statistics."""

    model_config = ConfigDict(frozen=True)

    video_id: str
    title: str
    description: str = ""
    channel: str = ""
    published_at: str = ""
    thumbnails: Thumbnails = Field(default_factory=Thumbnails)
    duration: str = ""  # raw PT notation, e.g. "PT1H2M3S"
    view_count: str = "0"

    @classmethod
    def from_api_item(cls, item: dict) -> "SearchCandidate":
        """Parse one ``videos.list`` item (snippet, contentDetails, statistics)."""
        video_id = item["id"]
        snippet = item.get("snippet") or {}
        details = item.get("contentDetails") or {}
        statistics = item.get("statistics") or {}
        return cls(
            video_id=video_id,
            title=snippet.get("title", ""),
            description=snippet.get("description", "") or "",
            channel=snippet.get("channelTitle", "") or "",
            published_at=snippet.get("publishedAt", "") or "",
            thumbnails=Thumbnails.for_video(video_id, snippet.get("thumbnails")),
            duration=details.get("duration", "") or "",
            view_count=str(statistics.get("viewCount", "0") or "0"),
        )

    @property
    def duration_seconds(self) -> int:
        return parse_duration_to_seconds(self.duration)

    @property
    def views(self) -> int:
        """View count as an integer; unparseable counts are 0."""
        try:
            return int(self.view_count)
        except ValueError:
            return 0

    @property
    def url(self) -> str:
        return f"https://www.youtube.com/watch?v={self.video_id}"


class ChapterMarker(BaseModel):
    """A chapter marker parsed from a video description."""

    model_config = ConfigDict(frozen=True)

    offset: int = Field(ge=0)  # seconds from the start of the video
    title: str = Field(min_length=1)


class Segment(BaseModel):
    """A bounded time range of a video, presented as one learning unit."""

    model_config = ConfigDict(frozen=True)

    start: int = Field(ge=0)
    end: int
    title: str

    @model_validator(mode="after")
    def _check_bounds(self) -> "Segment":
        if self.end <= self.start:
            raise ValueError(f"segment end ({self.end}) must be after start ({self.start})")
        return self

    @computed_field
    @property
    def duration(self) -> int:
        """Length in seconds."""
        return self.end - self.start


class VideoResult(BaseModel):
    """One entry of a generated course: a whole video or one of its segments."""

    model_config = ConfigDict(frozen=True)

    video_id: str
    title: str
    description: str = ""
    channel: str = ""
    published_at: str = ""
    thumbnails: Thumbnails = Field(default_factory=Thumbnails)
    duration: str = ""  # PT notation of this entry's length
    view_count: str = "0"
    difficulty: DifficultyLevel = DifficultyLevel.INTERMEDIATE
    start_seconds: int | None = None
    end_seconds: int | None = None

    @computed_field
    @property
    def url(self) -> str:
        """Watch URL, starting at the segment offset when there is one."""
        base = f"https://www.youtube.com/watch?v={self.video_id}"
        if self.start_seconds:
            return f"{base}&t={self.start_seconds}s"
        return base

    @computed_field
    @property
    def difficulty_label(self) -> str:
        return self.difficulty.label

    @computed_field
    @property
    def duration_label(self) -> str:
        return format_clock(parse_duration_to_seconds(self.duration))

    @computed_field
    @property
    def views_label(self) -> str:
        return format_view_count(self.view_count)
