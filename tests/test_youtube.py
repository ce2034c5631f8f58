# tests/test_youtube.py
"""Tests for the YouTube Data API client."""

import asyncio
import io
import json
from unittest.mock import MagicMock, patch
from urllib.error import HTTPError, URLError
from urllib.parse import parse_qs, urlparse

import pytest

from coursegen.ingestion.gateway import QuotaExceededError
from coursegen.ingestion.youtube import YouTubeClient


def _response(body, status=200, headers=None):
    resp = MagicMock()
    resp.status = status
    resp.read.return_value = json.dumps(body).encode()
    resp.headers.items.return_value = list((headers or {}).items())
    cm = MagicMock()
    cm.__enter__.return_value = resp
    cm.__exit__.return_value = False
    return cm


def _http_error(status, body, headers=None):
    return HTTPError(
        "https://www.googleapis.com/youtube/v3/search", status, "error",
        headers or {}, io.BytesIO(json.dumps(body).encode()),
    )


def _query(mock_urlopen, call_index=0):
    request = mock_urlopen.call_args_list[call_index][0][0]
    parsed = urlparse(request.full_url)
    return parsed.path, {k: v[0] for k, v in parse_qs(parsed.query).items()}


@pytest.fixture
def client(gateway):
    return YouTubeClient(api_key="test-key", gateway=gateway, max_results=5, timeout=5.0, max_retries=1)


class TestAvailability:
    def test_available_with_key(self, client):
        assert client.available

    def test_unavailable_without_key(self, gateway):
        assert not YouTubeClient(api_key=None, gateway=gateway).available
        assert not YouTubeClient(api_key="", gateway=gateway).available


class TestSearch:
    @patch("coursegen.ingestion.youtube.urlopen")
    def test_returns_video_ids(self, mock_urlopen, client):
        mock_urlopen.return_value = _response({
            "items": [
                {"id": {"videoId": "aaa"}},
                {"id": {"channelId": "not-a-video"}},
                {"id": {"videoId": "bbb"}},
            ]
        })
        ids = asyncio.run(client.search("python crash course"))
        assert ids == ["aaa", "bbb"]

    @patch("coursegen.ingestion.youtube.urlopen")
    def test_request_parameters(self, mock_urlopen, client):
        mock_urlopen.return_value = _response({"items": []})
        asyncio.run(client.search("python crash course"))
        path, params = _query(mock_urlopen)
        assert path == "/youtube/v3/search"
        assert params["q"] == "python crash course"
        assert params["type"] == "video"
        assert params["videoDuration"] == "long"
        assert params["videoDefinition"] == "high"
        assert params["order"] == "relevance"
        assert params["maxResults"] == "5"
        assert params["key"] == "test-key"
        assert mock_urlopen.call_args.kwargs["timeout"] == 5.0

    @patch("coursegen.ingestion.youtube.urlopen")
    def test_server_error_yields_empty(self, mock_urlopen, client):
        mock_urlopen.side_effect = _http_error(500, {"error": {"message": "Backend Error"}})
        assert asyncio.run(client.search("x")) == []
        assert mock_urlopen.call_count == 2  # first attempt plus one retry

    @patch("coursegen.ingestion.youtube.urlopen")
    def test_network_error_yields_empty(self, mock_urlopen, client):
        mock_urlopen.side_effect = URLError("unreachable")
        assert asyncio.run(client.search("x")) == []

    @patch("coursegen.ingestion.youtube.urlopen")
    def test_quota_error_raises(self, mock_urlopen, client):
        mock_urlopen.side_effect = _http_error(
            403, {"error": {"message": "You have exceeded your quota.", "errors": [{"reason": "quotaExceeded"}]}}
        )
        with pytest.raises(QuotaExceededError):
            asyncio.run(client.search("x"))
        assert mock_urlopen.call_count == 1

    @patch("coursegen.ingestion.youtube.urlopen")
    def test_rate_limit_then_success(self, mock_urlopen, client, fake_clock):
        mock_urlopen.side_effect = [
            _http_error(429, {}, headers={"Retry-After": "3"}),
            _response({"items": [{"id": {"videoId": "aaa"}}]}),
        ]
        assert asyncio.run(client.search("x")) == ["aaa"]
        assert 3.0 in fake_clock.sleeps


class TestVideoDetails:
    @patch("coursegen.ingestion.youtube.urlopen")
    def test_parses_candidates(self, mock_urlopen, client, sample_item):
        mock_urlopen.return_value = _response({"items": [sample_item]})
        candidates = asyncio.run(client.video_details(["rfscVS0vtbw"]))
        assert len(candidates) == 1
        assert candidates[0].title == "Learn Python - Full Course for Beginners"
        assert candidates[0].views == 45_000_000

    @patch("coursegen.ingestion.youtube.urlopen")
    def test_request_parameters(self, mock_urlopen, client):
        mock_urlopen.return_value = _response({"items": []})
        asyncio.run(client.video_details(["a", "b"]))
        path, params = _query(mock_urlopen)
        assert path == "/youtube/v3/videos"
        assert params["id"] == "a,b"
        assert params["part"] == "snippet,contentDetails,statistics"

    @patch("coursegen.ingestion.youtube.urlopen")
    def test_malformed_items_skipped(self, mock_urlopen, client, sample_item):
        mock_urlopen.return_value = _response({"items": [{"snippet": {}}, sample_item]})
        candidates = asyncio.run(client.video_details(["x", "rfscVS0vtbw"]))
        assert [c.video_id for c in candidates] == ["rfscVS0vtbw"]

    @patch("coursegen.ingestion.youtube.urlopen")
    def test_empty_ids_skip_request(self, mock_urlopen, client):
        assert asyncio.run(client.video_details([])) == []
        mock_urlopen.assert_not_called()

    @patch("coursegen.ingestion.youtube.urlopen")
    def test_failure_yields_empty(self, mock_urlopen, client):
        mock_urlopen.side_effect = _http_error(400, {"error": {"message": "Bad Request"}})
        assert asyncio.run(client.video_details(["a"])) == []
        assert mock_urlopen.call_count == 1
