"""Thumbnail loading for list rows.

Image bytes are fetched by URL, independently of the list sync. A failed load
only means a row without a thumbnail, so fetch() returns None instead of
raising.
"""

import logging

import httpx

from top_movies.settings import get_settings

logger = logging.getLogger("uvicorn.error")

RESIZED_SUFFIX = "._V0_UX600_.jpg"


def resized_image_url(image_url: str) -> str:
    """Rewrite an IMDb image URL to its 600px-wide variant.

    "https://m.media-amazon.com/images/M/abc._V1_UX128_CR0,3,128,176_AL_.jpg"
    -> "https://m.media-amazon.com/images/M/abc._V0_UX600_.jpg"
    """
    return image_url.split("._", 1)[0] + RESIZED_SUFFIX


class ImageLoader:
    """Fetches image bytes keyed by URL."""

    def __init__(
        self,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.timeout = timeout if timeout is not None else get_settings().image_timeout_seconds
        self._transport = transport
        self._http_client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
                follow_redirects=True,
            )
        return self._http_client

    async def close(self) -> None:
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def fetch(self, url: str) -> bytes | None:
        if not url.startswith(("http://", "https://")):
            logger.debug(f"Skipping image with unsupported URL: {url!r}")
            return None

        client = await self._get_client()
        try:
            response = await client.get(url)
        except httpx.HTTPError as e:
            logger.debug(f"Image fetch failed for {url}: {e}")
            return None

        if response.status_code != 200 or not response.content:
            logger.debug(f"Image fetch for {url} returned {response.status_code}")
            return None
        return response.content
