"""YouTube Data API v3 client, routed through the request gateway."""

import asyncio
import json
import logging
from urllib.error import HTTPError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from pydantic import ValidationError

from coursegen.ingestion.gateway import GatewayResponse, ProviderReply, RequestGateway
from coursegen.models import SearchCandidate

logger = logging.getLogger(__name__)


class YouTubeClient:
    """Searches YouTube and fetches video details via the Data API.

    Single responsibility: turn queries and video ids into
    SearchCandidate models. All HTTP goes through the shared
    RequestGateway; the blocking urllib call runs in a worker thread.
    """

    _API_ROOT = "https://www.googleapis.com/youtube/v3"

    def __init__(
        self,
        api_key: str | None,
        gateway: RequestGateway,
        max_results: int = 5,
        timeout: float = 30.0,
        max_retries: int = 3,
        backoff_multiplier: float = 2.0,
    ) -> None:
        self._api_key = api_key
        self._gateway = gateway
        self._max_results = max_results
        self._timeout = timeout
        self._max_retries = max_retries
        self._backoff_multiplier = backoff_multiplier

    @property
    def available(self) -> bool:
        """Check if an API key is configured."""
        return bool(self._api_key)

    @property
    def gateway(self) -> RequestGateway:
        return self._gateway

    async def search(self, query: str) -> list[str]:
        """Search for long, HD, relevance-ordered videos and return their ids.

        Provider failures are logged and yield an empty list.

        Raises:
            QuotaExceededError: If the provider quota is exhausted.
        """
        response = await self._call("search", {
            "part": "snippet",
            "q": query,
            "type": "video",
            "videoDuration": "long",
            "videoDefinition": "high",
            "relevanceLanguage": "en",
            "maxResults": self._max_results,
            "order": "relevance",
        })
        if not response.ok:
            logger.warning("Search failed for query '%s': %s", query, response.error)
            return []

        ids = []
        for item in (response.data or {}).get("items", []):
            video_id = (item.get("id") or {}).get("videoId")
            if video_id:
                ids.append(video_id)
        return ids

    async def video_details(self, video_ids: list[str]) -> list[SearchCandidate]:
        """Fetch snippet, duration and statistics for a batch of ids.

        Raises:
            QuotaExceededError: If the provider quota is exhausted.
        """
        if not video_ids:
            return []

        response = await self._call("videos", {
            "part": "snippet,contentDetails,statistics",
            "id": ",".join(video_ids),
        })
        if not response.ok:
            logger.warning("Details request failed for %s: %s", video_ids, response.error)
            return []

        candidates = []
        for item in (response.data or {}).get("items", []):
            try:
                candidates.append(SearchCandidate.from_api_item(item))
            except (KeyError, TypeError, ValidationError) as e:
                logger.warning("Skipping malformed video item: %s", e)
        return candidates

    async def _call(self, endpoint: str, params: dict) -> GatewayResponse:
        url = f"{self._API_ROOT}/{endpoint}?{urlencode({**params, 'key': self._api_key})}"
        return await self._gateway.throttle(
            lambda: asyncio.to_thread(self._fetch, url),
            max_retries=self._max_retries,
            backoff_multiplier=self._backoff_multiplier,
        )

    def _fetch(self, url: str) -> ProviderReply:
        """Perform one GET and return the status, JSON body and headers.

        HTTP error statuses are returned, not raised, so the gateway can
        decide how to handle them. Network errors propagate.
        """
        request = Request(url, headers={"Accept": "application/json"})
        try:
            with urlopen(request, timeout=self._timeout) as resp:
                return ProviderReply(
                    status=resp.status,
                    body=_parse_json(resp.read()),
                    headers=dict(resp.headers.items()),
                )
        except HTTPError as e:
            return ProviderReply(
                status=e.code,
                body=_parse_json(e.read()),
                headers=dict(e.headers.items()) if e.headers else {},
            )


def _parse_json(raw: bytes) -> dict:
    try:
        return json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        return {}
