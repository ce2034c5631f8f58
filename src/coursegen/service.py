"""Core business logic for coursegen: prompt in, ordered course out."""

import logging

from pydantic import ValidationError

from coursegen.config import settings
from coursegen.difficulty import classify_difficulty, sort_by_difficulty
from coursegen.duration import format_seconds_to_duration, is_long_video
from coursegen.ingestion.gateway import QuotaExceededError, RequestGateway
from coursegen.ingestion.youtube import YouTubeClient
from coursegen.models import SearchCandidate, VideoResult
from coursegen.segmentation.segments import build_segments

logger = logging.getLogger(__name__)


class InvalidPromptError(Exception):
    """Raised when the learning topic is missing, blank or not a string."""


class CourseService:
    """Core service layer — single orchestration point for course generation.

    The HTTP route, the MCP tool and the CLI are thin wrappers over this
    class. The YouTube client (and through it the shared request gateway)
    is injected for testability.
    """

    QUERY_SUFFIXES = ("crash course", "complete course", "full tutorial", "course tutorial")

    def __init__(
        self,
        client: YouTubeClient | None = None,
        segment_count: int | None = None,
        excerpt_length: int | None = None,
    ) -> None:
        self._client = client or default_client()
        self._segment_count = segment_count or settings.segment_count
        self._excerpt_length = excerpt_length or settings.excerpt_length

    @property
    def client(self) -> YouTubeClient:
        return self._client

    async def build_course(self, prompt: object) -> list[VideoResult]:
        """Find the best crash course for a topic and split it into ordered segments.

        Args:
            prompt: Free-text learning topic.

        Returns:
            VideoResult list sorted beginner first; empty when nothing
            suitable is found, the provider fails or no API key is set.

        Raises:
            InvalidPromptError: If the prompt is not a non-blank string.
            QuotaExceededError: If the provider quota is exhausted.
        """
        topic = validate_prompt(prompt)

        if not self._client.available:
            logger.warning("YouTube API key not configured; returning no videos for '%s'", topic)
            return []

        try:
            video = await self.find_best_video(topic)
        except QuotaExceededError:
            raise
        except Exception:
            logger.exception("Video search failed for '%s'", topic)
            return []

        if video is None:
            logger.info("No videos found for query: %s", topic)
            return []

        logger.info("Selected '%s' (%s, %d views)", video.title, video.video_id, video.views)
        results = self.segment_video(video, topic)
        logger.info("Built %d segment(s) for '%s'", len(results), topic)
        return results

    async def find_best_video(self, topic: str) -> SearchCandidate | None:
        """Return the most viewed long video across all query variants.

        Raises:
            QuotaExceededError: If the provider quota is exhausted.
        """
        best: SearchCandidate | None = None

        for query in self.queries_for(topic):
            try:
                ids = await self._client.search(query)
                if not ids:
                    continue
                candidates = await self._client.video_details(ids)
            except (KeyError, TypeError, AttributeError, ValidationError) as e:
                logger.warning("Unexpected provider payload for query '%s': %s", query, e)
                continue

            for candidate in candidates:
                if not is_long_video(candidate.duration):
                    continue
                if best is None or candidate.views > best.views:
                    best = candidate

        return best

    def segment_video(self, video: SearchCandidate, topic: str) -> list[VideoResult]:
        """Split a selected video into difficulty-ordered VideoResults."""
        segments = build_segments(
            video.description, video.duration_seconds, topic, count=self._segment_count
        )
        excerpt = video.description[: self._excerpt_length]

        results = []
        for i, segment in enumerate(segments, 1):
            description = f"Segment {i}: {excerpt}..."
            results.append(VideoResult(
                video_id=video.video_id,
                title=segment.title,
                description=description,
                channel=video.channel,
                published_at=video.published_at,
                thumbnails=video.thumbnails,
                duration=format_seconds_to_duration(segment.duration),
                view_count=video.view_count,
                difficulty=classify_difficulty(segment.title, description),
                start_seconds=segment.start,
                end_seconds=segment.end,
            ))
        return sort_by_difficulty(results)

    @classmethod
    def queries_for(cls, topic: str) -> list[str]:
        """Search query variants for a topic, in the order they are issued."""
        return [f"{topic} {suffix}" for suffix in cls.QUERY_SUFFIXES]


def validate_prompt(prompt: object) -> str:
    """Return the stripped prompt, or raise InvalidPromptError."""
    if not isinstance(prompt, str) or not prompt.strip():
        raise InvalidPromptError("Valid prompt is required")
    return prompt.strip()


def default_client() -> YouTubeClient:
    """Create a YouTube client and gateway from settings."""
    gateway = RequestGateway(
        max_requests_per_minute=settings.max_requests_per_minute,
        min_interval=settings.min_request_interval,
    )
    return YouTubeClient(
        api_key=settings.youtube_api_key,
        gateway=gateway,
        max_results=settings.search_max_results,
        timeout=settings.request_timeout,
        max_retries=settings.max_retries,
        backoff_multiplier=settings.backoff_multiplier,
    )
