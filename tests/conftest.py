"""Shared fixtures: temp SQLite store, fake Redis cache, engines over mocked feeds."""

import fakeredis
import httpx
import pytest

from top_movies.services.feed_client import FeedClient
from top_movies.services.sync import MovieSyncEngine
from top_movies.stores.database import Database
from top_movies.stores.movie_store import MovieStore
from top_movies.stores.redis import MovieCache

from tests.factories import CACHE_KEY, FEED_URL


@pytest.fixture
async def db(tmp_path):
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'movies.db'}")
    await database.create_tables()
    yield database
    await database.close()


@pytest.fixture
def store(db: Database) -> MovieStore:
    return MovieStore(db)


@pytest.fixture
async def redis_client():
    client = fakeredis.FakeAsyncRedis(decode_responses=True)
    await client.flushall()
    yield client
    await client.aclose()


@pytest.fixture
def cache(redis_client) -> MovieCache:
    return MovieCache(redis_client, key=CACHE_KEY, ttl=60)


@pytest.fixture
async def make_engine(store: MovieStore, cache: MovieCache):
    """Build engines over the shared store/cache with a given feed transport."""
    engines: list[MovieSyncEngine] = []

    def _make(transport: httpx.AsyncBaseTransport) -> MovieSyncEngine:
        client = FeedClient(url=FEED_URL, timeout=5.0, transport=transport)
        engine = MovieSyncEngine(store=store, cache=cache, client=client)
        engines.append(engine)
        return engine

    yield _make

    for engine in engines:
        await engine.close()
        await engine.client.close()
