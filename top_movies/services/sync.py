"""Sync engine: fast cache -> local store -> remote feed.

One engine per screen session. It owns the visible list and is the only
writer to the local store and fast cache for that session.

Flow on activate():
1. Serve the fast cache snapshot (if any) as a provisional list
2. Serve the local store as the authoritative list
3. Refresh from the remote feed in the background:
   upsert (user ratings preserved) -> re-read store -> refresh fast cache

Failure policy:
- Feed failures during refresh are logged; the last list stays visible
- Store read failures are raised and mark the session unavailable; a later
  successful read by rate/remove clears the mark
- Store write failures (rate/remove) are raised; the visible list is only
  replaced after the write has committed

Concurrency:
- Store/cache mutations are serialized by one asyncio.Lock; a rate, remove or
  merge that arrives while another is running waits for it
- At most one feed refresh is in flight; refresh() returns the running task
- close() bumps a generation counter and cancels the refresh, so a late feed
  response never writes to the store or cache
- The visible list is an immutable tuple, replaced in one assignment
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum

from top_movies.errors import FetchError, SessionClosedError, StorageError
from top_movies.schemas.movie import RatedMovie
from top_movies.services.feed_client import FeedClient
from top_movies.services.rating import validate_user_rating
from top_movies.stores.movie_store import MovieStore
from top_movies.stores.redis import MovieCache

logger = logging.getLogger("uvicorn.error")

MovieList = tuple[RatedMovie, ...]
Listener = Callable[[MovieList], None]


class SyncState(str, Enum):
    IDLE = "idle"
    CACHE_SERVED = "cache_served"
    STORAGE_SERVED = "storage_served"
    REFRESHING = "refreshing"
    RECONCILED = "reconciled"
    CLOSED = "closed"


@dataclass
class RefreshStats:
    ok: bool = False
    fetched: int = 0
    inserted: int = 0
    updated: int = 0
    discarded: bool = False
    error: str | None = None


class MovieSyncEngine:
    """Reconciles the feed, the local store and the fast cache into one list."""

    def __init__(self, store: MovieStore, cache: MovieCache, client: FeedClient):
        self.store = store
        self.cache = cache
        self.client = client

        self._visible: MovieList = ()
        self._state = SyncState.IDLE
        # Last state that reflects what is visible; REFRESHING falls back to it
        self._served_state = SyncState.IDLE
        self._lock = asyncio.Lock()
        self._generation = 0
        self._refresh_task: asyncio.Task[RefreshStats] | None = None
        self._listeners: list[Listener] = []

        self.unavailable = False
        self.last_refresh_error: Exception | None = None

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def refresh_task(self) -> asyncio.Task[RefreshStats] | None:
        return self._refresh_task

    def visible_list(self) -> MovieList:
        """Current list for presentation, in store order."""
        return self._visible

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call listener with the new list every time it is replaced.

        Returns:
            A function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ============================================================
    # Session lifecycle
    # ============================================================

    async def activate(self) -> asyncio.Task[RefreshStats]:
        """Serve cache, then store, then start a background feed refresh.

        Returns:
            The background refresh task.

        Raises:
            StorageError: if the local store cannot be read. The session is
                marked unavailable and no refresh is started.
        """
        self._ensure_open()
        async with self._lock:
            self._ensure_open()

            cached = await self.cache.load()
            if cached is not None:
                logger.info(f"Serving {len(cached)} movies from fast cache")
                self._publish(tuple(RatedMovie.from_movie(movie) for movie in cached))
                self._serve(SyncState.CACHE_SERVED)

            try:
                stored = await self.store.fetch_all()
            except StorageError:
                logger.error("Local store unavailable on activate")
                self.unavailable = True
                self._publish(self._visible)
                raise

            self.unavailable = False
            logger.info(f"Serving {len(stored)} movies from local store")
            self._publish(tuple(stored))
            self._serve(SyncState.STORAGE_SERVED)

        return self.refresh()

    def refresh(self) -> asyncio.Task[RefreshStats]:
        """Start a background feed refresh, or return the one in flight."""
        self._ensure_open()
        if self._refresh_task is not None and not self._refresh_task.done():
            return self._refresh_task

        self._state = SyncState.REFRESHING
        self._refresh_task = asyncio.create_task(
            self._run_refresh(self._generation),
            name="top-movies-refresh",
        )
        return self._refresh_task

    async def close(self) -> None:
        """Tear the session down; pending feed results are discarded."""
        if self._state is SyncState.CLOSED:
            return
        self._generation += 1
        self._state = SyncState.CLOSED
        self._listeners.clear()

        task = self._refresh_task
        if task is not None and not task.done():
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
        logger.info("Sync session closed")

    # ============================================================
    # User intents
    # ============================================================

    async def rate(self, movie_id: str, value: str) -> RatedMovie:
        """Set the user's rating for a movie.

        If the rating is saved but the list cannot be re-read, the saved row
        is patched into the visible list and the session is marked
        unavailable; the call still succeeds.

        Raises:
            ValidationError: value is not an integer string in [1, 10].
                Raised before the store is touched.
            StorageError: not_found for an unknown id, io on write failure.
        """
        self._ensure_open()
        rating = validate_user_rating(value)

        async with self._lock:
            self._ensure_open()
            updated = await self.store.set_user_rating(movie_id, rating)
            try:
                movies = await self.store.fetch_all()
            except StorageError as e:
                logger.warning(f"Rating for {movie_id} saved but re-reading the store failed: {e}")
                self.unavailable = True
                self._publish(updated if movie.id == movie_id else movie for movie in self._visible)
                return updated

            self._publish(movies)
            self._storage_served()
            await self.cache.save(movie.to_movie() for movie in movies)

        logger.info(f"Rated movie {movie_id}: {rating}")
        return updated

    async def remove(self, movie_id: str) -> None:
        """Delete a movie permanently.

        When the visible list came from the store, the entry is dropped in
        place, which matches what a full re-read would return. Otherwise
        (nothing served yet, or only the cache) the store is re-read.

        Raises:
            StorageError: not_found for an unknown id, io on write failure.
        """
        self._ensure_open()
        async with self._lock:
            self._ensure_open()
            await self.store.delete(movie_id)

            if self._visible_is_stored():
                remaining = tuple(movie for movie in self._visible if movie.id != movie_id)
            else:
                try:
                    remaining = tuple(await self.store.fetch_all())
                except StorageError as e:
                    logger.warning(f"Movie {movie_id} deleted but re-reading the store failed: {e}")
                    self.unavailable = True
                    self._publish(movie for movie in self._visible if movie.id != movie_id)
                    return

            self._publish(remaining)
            self._storage_served()
            await self.cache.save(movie.to_movie() for movie in remaining)

        logger.info(f"Removed movie {movie_id}")

    # ============================================================
    # Internals
    # ============================================================

    async def _run_refresh(self, generation: int) -> RefreshStats:
        try:
            movies = await self.client.fetch_feed()
        except FetchError as e:
            logger.warning(f"Feed refresh failed ({e.kind}): {e}")
            return self._refresh_failed(generation, e)
        except Exception as e:
            logger.exception("Feed refresh crashed")
            return self._refresh_failed(generation, e)

        async with self._lock:
            if generation != self._generation:
                logger.info("Session closed during refresh, discarding feed result")
                return RefreshStats(discarded=True, fetched=len(movies))

            try:
                upserted = await self.store.upsert_many(movies)
                merged = await self.store.fetch_all()
            except StorageError as e:
                logger.warning(f"Merging feed into local store failed: {e}")
                return self._refresh_failed(generation, e)

            self.unavailable = False
            self.last_refresh_error = None
            self._publish(tuple(merged))
            self._serve(SyncState.RECONCILED)
            await self.cache.save(movie.to_movie() for movie in merged)

        logger.info(
            f"Feed reconciled: fetched={len(movies)}, inserted={upserted.inserted}, "
            f"updated={upserted.updated}, visible={len(merged)}"
        )
        return RefreshStats(
            ok=True,
            fetched=len(movies),
            inserted=upserted.inserted,
            updated=upserted.updated,
        )

    def _refresh_failed(self, generation: int, error: Exception) -> RefreshStats:
        if generation == self._generation:
            self.last_refresh_error = error
            if self._served_state is SyncState.RECONCILED:
                self._state = SyncState.STORAGE_SERVED
            else:
                self._state = self._served_state
        return RefreshStats(ok=False, error=str(error))

    def _serve(self, state: SyncState) -> None:
        self._served_state = state
        self._state = state

    def _storage_served(self) -> None:
        """Record a successful store read by rate/remove."""
        self.unavailable = False
        if self._served_state in (SyncState.IDLE, SyncState.CACHE_SERVED):
            self._served_state = SyncState.STORAGE_SERVED
        # A running refresh keeps REFRESHING until it settles
        if self._state in (SyncState.IDLE, SyncState.CACHE_SERVED):
            self._state = SyncState.STORAGE_SERVED

    def _visible_is_stored(self) -> bool:
        return not self.unavailable and self._served_state in (
            SyncState.STORAGE_SERVED,
            SyncState.RECONCILED,
        )

    def _publish(self, movies: Iterable[RatedMovie]) -> None:
        self._visible = tuple(movies)
        for listener in list(self._listeners):
            try:
                listener(self._visible)
            except Exception:
                logger.exception("Movie list listener failed")

    def _ensure_open(self) -> None:
        if self._state is SyncState.CLOSED:
            raise SessionClosedError("Sync session is closed")
