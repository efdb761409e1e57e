"""Composition root: builds one sync session and its collaborators.

Used by the API lifespan and by scripts. Every collaborator is constructed
here and passed down explicitly.
"""

from dataclasses import dataclass
import logging

import httpx
import redis.asyncio as redis

from top_movies.services.feed_client import FeedClient
from top_movies.services.images import ImageLoader
from top_movies.services.sync import MovieSyncEngine
from top_movies.settings import Settings, get_settings
from top_movies.stores.database import Database
from top_movies.stores.movie_store import MovieStore
from top_movies.stores.redis import MovieCache, create_redis

logger = logging.getLogger("uvicorn.error")


@dataclass
class Components:
    db: Database
    store: MovieStore
    cache: MovieCache
    client: FeedClient
    images: ImageLoader
    engine: MovieSyncEngine

    async def aclose(self) -> None:
        """Close the session first so no late write races the shutdown."""
        await self.engine.close()
        await self.client.close()
        await self.images.close()
        await self.cache.close()
        await self.db.close()


def build_components(
    settings: Settings | None = None,
    *,
    redis_client: redis.Redis | None = None,
    feed_transport: httpx.AsyncBaseTransport | None = None,
    image_transport: httpx.AsyncBaseTransport | None = None,
) -> Components:
    settings = settings or get_settings()

    db = Database(settings.async_database_url, echo=settings.debug)
    store = MovieStore(db)
    if redis_client is None:
        redis_client = create_redis(settings.redis_url)
    cache = MovieCache(redis_client, key=settings.cache_key, ttl=settings.cache_ttl_seconds)
    if not cache.enabled:
        logger.info("Fast cache disabled (REDIS_URL is empty)")

    client = FeedClient(
        url=settings.feed_url,
        timeout=settings.feed_timeout_seconds,
        transport=feed_transport,
    )
    images = ImageLoader(timeout=settings.image_timeout_seconds, transport=image_transport)
    engine = MovieSyncEngine(store=store, cache=cache, client=client)
    return Components(db=db, store=store, cache=cache, client=client, images=images, engine=engine)
