"""Rate-limited request gateway for calls to the video provider.

Every outbound provider call goes through a single ``RequestGateway``
instance, which keeps a sliding window of recent dispatches, spaces
requests apart, honours ``Retry-After`` on 429 responses, backs off
exponentially on transient failures and stops at once when the
provider reports that the quota is exhausted.
"""

import asyncio
import logging
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Mapping

logger = logging.getLogger(__name__)

QUOTA_MESSAGE = "YouTube API quota exceeded. Please try again later."

_QUOTA_REASONS = {"quotaexceeded", "dailylimitexceeded"}
_NON_RETRYABLE_STATUSES = {400, 401}


class QuotaExceededError(Exception):
    """Raised when the provider rejects a call because the quota is used up."""


@dataclass(frozen=True)
class ProviderReply:
    """Raw outcome of one HTTP exchange with the provider."""

    status: int
    body: Any = None
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


@dataclass(frozen=True)
class GatewayResponse:
    """Result of a throttled call: parsed data on success, an error message otherwise."""

    status: int
    data: Any = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and 200 <= self.status < 300


@dataclass(frozen=True)
class GatewayStats:
    total_requests: int
    requests_in_window: int
    last_request_at: float | None


ProviderCall = Callable[[], Awaitable[ProviderReply]]


class RequestGateway:
    """Throttles and retries provider calls.

    Construct one per process and share it between every client that talks
    to the provider; the window and spacing checks are serialised with an
    ``asyncio.Lock`` so concurrent callers cannot overrun the limit.
    ``clock`` and ``sleep`` are injectable so tests can run on fake time.
    """

    def __init__(
        self,
        max_requests_per_minute: int = 50,
        min_interval: float = 0.1,
        window_seconds: float = 60.0,
        buffer_seconds: float = 1.0,
        default_retry_after: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._max_requests = max_requests_per_minute
        self._min_interval = min_interval
        self._window = window_seconds
        self._buffer = buffer_seconds
        self._default_retry_after = default_retry_after
        self._clock = clock
        self._sleep = sleep

        self._request_times: deque[float] = deque()
        self._last_request_at: float | None = None
        self._total_requests = 0
        self._lock = asyncio.Lock()

    async def throttle(
        self,
        call: ProviderCall,
        delay: float | None = None,
        max_retries: int = 3,
        backoff_multiplier: float = 2.0,
    ) -> GatewayResponse:
        """Run ``call`` within the rate limit, retrying transient failures.

        A 429 reply waits for the provider's ``Retry-After`` hint and moves
        on to the next attempt without growing the backoff delay. Other
        failures wait ``delay`` seconds, multiplied by ``backoff_multiplier``
        after every retry. 400 and 401 replies are not retried.

        Args:
            call: Coroutine factory performing one HTTP exchange.
            delay: Initial backoff delay in seconds (defaults to the minimum
                request interval).
            max_retries: Retries after the first attempt.
            backoff_multiplier: Growth factor of the backoff delay.

        Returns:
            GatewayResponse with the parsed body, or with status 500 and the
            last error message once retries are exhausted.

        Raises:
            QuotaExceededError: If the provider reports quota exhaustion.
        """
        delay = self._min_interval if delay is None else delay
        last_error: str | None = None

        for attempt in range(max_retries + 1):
            try:
                reply = await self._dispatch(call)
            except Exception as e:
                last_error = str(e) or type(e).__name__
                logger.warning(
                    "Provider call failed (attempt %d/%d): %s", attempt + 1, max_retries + 1, last_error
                )
            else:
                if reply.status == 429:
                    wait = self._retry_after(reply)
                    last_error = "HTTP 429: rate limited by provider"
                    logger.warning("Rate limited. Retrying after %.1fs", wait)
                    await self._sleep(wait)
                    continue

                if reply.status == 403 and is_quota_error(reply.body):
                    logger.error("Provider quota exhausted")
                    raise QuotaExceededError(QUOTA_MESSAGE)

                if reply.ok:
                    return GatewayResponse(status=reply.status, data=reply.body)

                last_error = error_message(reply)
                logger.warning(
                    "Provider call failed (attempt %d/%d): %s", attempt + 1, max_retries + 1, last_error
                )
                if reply.status in _NON_RETRYABLE_STATUSES:
                    break

            if attempt < max_retries:
                await self._sleep(delay)
                delay *= backoff_multiplier

        logger.error("Provider call gave up: %s", last_error)
        return GatewayResponse(
            status=500, error=last_error or "API call failed after all retries"
        )

    def stats(self) -> GatewayStats:
        """Snapshot of request counters."""
        self._prune(self._clock())
        return GatewayStats(
            total_requests=self._total_requests,
            requests_in_window=len(self._request_times),
            last_request_at=self._last_request_at,
        )

    async def _dispatch(self, call: ProviderCall) -> ProviderReply:
        """Wait for a free slot, perform the call and record it."""
        async with self._lock:
            await self._wait_for_slot()
            reply = await call()
            self._record(self._clock())
            return reply

    async def _wait_for_slot(self) -> None:
        now = self._clock()
        self._prune(now)
        while len(self._request_times) >= self._max_requests:
            wait = self._window - (now - self._request_times[0]) + self._buffer
            logger.info("Rate limit reached. Waiting %.1fs", wait)
            await self._sleep(wait)
            now = self._clock()
            self._prune(now)

        if self._last_request_at is not None:
            since_last = now - self._last_request_at
            if since_last < self._min_interval:
                await self._sleep(self._min_interval - since_last)

    def _prune(self, now: float) -> None:
        cutoff = now - self._window
        while self._request_times and self._request_times[0] < cutoff:
            self._request_times.popleft()

    def _record(self, now: float) -> None:
        self._request_times.append(now)
        self._last_request_at = now
        self._total_requests += 1

    def _retry_after(self, reply: ProviderReply) -> float:
        headers = {k.lower(): v for k, v in (reply.headers or {}).items()}
        value = headers.get("retry-after")
        if value is None:
            return self._default_retry_after
        try:
            return max(float(value), 0.0)
        except ValueError:
            return self._default_retry_after


def is_quota_error(body: Any) -> bool:
    """Whether a provider error body signals quota exhaustion."""
    if not isinstance(body, dict):
        return False
    error = body.get("error")
    if not isinstance(error, dict):
        return False
    if "quota" in str(error.get("message", "")).lower():
        return True
    for detail in error.get("errors") or []:
        if isinstance(detail, dict) and str(detail.get("reason", "")).lower() in _QUOTA_REASONS:
            return True
    return False


def error_message(reply: ProviderReply) -> str:
    """Best error text for a failed reply."""
    if isinstance(reply.body, dict):
        error = reply.body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return f"HTTP {reply.status}"
