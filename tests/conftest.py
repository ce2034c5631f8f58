# tests/conftest.py
"""Shared fixtures for coursegen tests."""

import pytest

from coursegen.ingestion.gateway import ProviderReply, RequestGateway
from coursegen.models import SearchCandidate, Thumbnails


class FakeClock:
    """Monotonic clock whose sleep advances time instantly."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class ScriptedCall:
    """Provider call returning scripted replies (or raising scripted errors) in order."""

    def __init__(self, *outcomes) -> None:
        self._outcomes = list(outcomes)
        self.calls = 0

    async def __call__(self) -> ProviderReply:
        self.calls += 1
        outcome = self._outcomes.pop(0) if len(self._outcomes) > 1 else self._outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class StubClient:
    """Stands in for YouTubeClient with canned search and detail results."""

    def __init__(self, results: dict[str, list[SearchCandidate]] | None = None, available: bool = True) -> None:
        self._results = results or {}
        self._available = available
        self.searches: list[str] = []
        self.gateway = RequestGateway()

    @property
    def available(self) -> bool:
        return self._available

    async def search(self, query: str) -> list[str]:
        self.searches.append(query)
        return [c.video_id for c in self._results.get(query, [])]

    async def video_details(self, video_ids: list[str]) -> list[SearchCandidate]:
        by_id = {c.video_id: c for cs in self._results.values() for c in cs}
        return [by_id[v] for v in video_ids if v in by_id]


def make_candidate(video_id: str, views: int, duration: str = "PT1H", description: str = "") -> SearchCandidate:
    return SearchCandidate(
        video_id=video_id,
        title=f"Video {video_id}",
        description=description,
        channel="EduChannel",
        published_at="2024-01-15T10:00:00Z",
        thumbnails=Thumbnails.for_video(video_id),
        duration=duration,
        view_count=str(views),
    )


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def gateway(fake_clock):
    """RequestGateway running on fake time with no minimum spacing."""
    return RequestGateway(min_interval=0.0, clock=fake_clock, sleep=fake_clock.sleep)


@pytest.fixture
def sample_item():
    """A videos.list item as returned by the YouTube Data API."""
    return {
        "id": "rfscVS0vtbw",
        "snippet": {
            "title": "Learn Python - Full Course for Beginners",
            "description": "0:00 Introduction\n3:05 Installing Python\n1:02:30 Functions",
            "channelTitle": "freeCodeCamp.org",
            "publishedAt": "2018-07-11T18:00:42Z",
            "thumbnails": {
                "default": {"url": "https://i.ytimg.com/vi/rfscVS0vtbw/default.jpg"},
                "high": {"url": "https://i.ytimg.com/vi/rfscVS0vtbw/hqdefault.jpg"},
            },
        },
        "contentDetails": {"duration": "PT4H26M52S"},
        "statistics": {"viewCount": "45000000"},
    }


@pytest.fixture
def sample_candidate(sample_item):
    return SearchCandidate.from_api_item(sample_item)


@pytest.fixture
def candidate_factory():
    return make_candidate


@pytest.fixture
def scripted_call():
    return ScriptedCall


@pytest.fixture
def stub_client_factory():
    return StubClient
