"""Client for the Top 250 movies feed (tv-api.com).

One GET per call, no retry, no pagination. Every failure is raised as a
FetchError so the sync engine can treat them uniformly:
- network: transport errors and timeouts
- bad_response: non-2xx status, or an error payload with no items
- decode: body is not JSON or does not match the feed envelope
"""

import asyncio
import json
import logging

import httpx
from pydantic import ValidationError as PydanticValidationError

from top_movies.errors import FetchError
from top_movies.schemas.movie import FeedResponse, Movie
from top_movies.settings import get_settings

logger = logging.getLogger("uvicorn.error")


class FeedClient:
    """Client for the remote Top 250 feed."""

    def __init__(
        self,
        url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize client with feed URL and timeout (defaults from settings)."""
        settings = get_settings()
        self.url = url or settings.feed_url
        self.timeout = timeout if timeout is not None else settings.feed_timeout_seconds
        self._transport = transport
        self._http_client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        return self._http_client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def fetch_feed(self) -> list[Movie]:
        """Fetch and decode the current Top 250 list.

        Returns:
            Movies in feed order.

        Raises:
            FetchError: on any transport, status, or decode failure.
        """
        client = await self._get_client()
        logger.info(f"Fetching Top 250 feed (timeout={self.timeout}s)")

        try:
            # httpx timeouts are per phase; bound the whole round trip too.
            response = await asyncio.wait_for(client.get(self.url), timeout=self.timeout)
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            raise FetchError("network", f"Feed request timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise FetchError("network", f"Feed request failed: {e}") from e

        if response.status_code < 200 or response.status_code >= 300:
            logger.error(f"Feed API error: {response.status_code} - {response.text[:200]}")
            raise FetchError("bad_response", f"Feed returned HTTP {response.status_code}")

        movies = self._parse_feed(response.content)
        logger.info(f"Feed fetched: {len(movies)} movies")
        return movies

    def _parse_feed(self, content: bytes) -> list[Movie]:
        try:
            data = json.loads(content)
        except ValueError as e:
            raise FetchError("decode", f"Feed body is not JSON: {e}") from e

        if not isinstance(data, dict):
            raise FetchError("decode", "Feed body is not a JSON object")

        # tv-api.com reports bad keys / quota as 200 with errorMessage and empty items
        error_message = data.get("errorMessage")
        if error_message and not data.get("items"):
            raise FetchError("bad_response", f"Feed error: {error_message}")

        try:
            envelope = FeedResponse.model_validate(data)
        except PydanticValidationError as e:
            raise FetchError("decode", f"Feed payload does not match schema: {e}") from e
        return envelope.items
