"""Redis fast cache for the movie list.

Holds a JSON snapshot of the last merged list (plain feed records, no user
ratings) so the UI can paint before the local store answers.

The cache is advisory:
- save() never raises; failures are logged and dropped
- load() returns None on miss, Redis errors, or a corrupt payload
- with no Redis configured, save() is a no-op and load() always misses

TTL policies:
- Movie list snapshot: 7 days (settings.cache_ttl_seconds)
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from typing import Any

from pydantic import ValidationError as PydanticValidationError
import redis.asyncio as redis
from redis.exceptions import RedisError

from top_movies.errors import CacheError
from top_movies.schemas.movie import Movie

# TTL constants (in seconds)
TTL_MOVIE_LIST = 604800  # 7 days

# Key prefixes
PREFIX_MOVIES = "movies:"

logger = logging.getLogger("uvicorn.error")


def create_redis(redis_url: str) -> redis.Redis | None:
    """Create a Redis client, or None if no URL is configured."""
    if not redis_url:
        return None
    return redis.from_url(
        redis_url,
        encoding="utf-8",
        decode_responses=True,
        socket_connect_timeout=5,
        socket_timeout=5,
    )


class MovieCache:
    """Best-effort snapshot of the movie list under a single key."""

    def __init__(
        self,
        client: redis.Redis | None,
        key: str = f"{PREFIX_MOVIES}top250",
        ttl: int = TTL_MOVIE_LIST,
    ):
        self._redis = client
        self.key = key
        self.ttl = ttl

    @property
    def enabled(self) -> bool:
        return self._redis is not None

    async def close(self) -> None:
        """Close Redis connection."""
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None

    async def save(self, movies: Iterable[Movie]) -> None:
        """Store the snapshot. Failures are logged, never raised."""
        try:
            await self._set_json([movie.to_wire() for movie in movies])
        except CacheError as e:
            logger.warning(f"Movie cache write failed: {e}")

    async def load(self) -> list[Movie] | None:
        """Load the snapshot, or None if absent or unreadable."""
        try:
            payload = await self._get_json()
        except CacheError as e:
            logger.warning(f"Movie cache read failed: {e}")
            return None
        if payload is None:
            return None

        if not isinstance(payload, list):
            logger.warning(f"Movie cache payload under {self.key} is not a list, ignoring")
            return None
        try:
            return [Movie.model_validate(item) for item in payload]
        except PydanticValidationError as e:
            logger.warning(f"Movie cache payload under {self.key} is corrupt, ignoring: {e}")
            return None

    async def clear(self) -> None:
        if self._redis is None:
            return
        try:
            await self._redis.delete(self.key)
        except RedisError as e:
            logger.warning(f"Movie cache clear failed: {e}")

    async def _get_json(self) -> Any:
        if self._redis is None:
            return None
        try:
            value = await self._redis.get(self.key)
        except RedisError as e:
            raise CacheError(str(e)) from e
        if not value:
            return None
        try:
            return json.loads(value)
        except (TypeError, ValueError) as e:
            raise CacheError(f"invalid JSON under {self.key}: {e}") from e

    async def _set_json(self, value: list[dict[str, str]]) -> None:
        if self._redis is None:
            return
        try:
            await self._redis.setex(self.key, self.ttl, json.dumps(value, ensure_ascii=False))
        except (RedisError, TypeError, ValueError) as e:
            raise CacheError(str(e)) from e
