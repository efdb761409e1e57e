"""Movies repository over the local database.

The local store is the source of truth for the visible list:
- fetch_all() returns rows in insertion order
- upsert/upsert_many overwrite feed fields, never user_rating
- set_user_rating/delete fail with StorageError(not_found) for unknown ids

Every mutating call commits before returning; SQLAlchemy failures surface as
StorageError(io).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from top_movies.errors import StorageError
from top_movies.models import StoredMovie
from top_movies.schemas.movie import Movie, RatedMovie
from top_movies.stores.database import Database

logger = logging.getLogger("uvicorn.error")


@dataclass
class UpsertStats:
    inserted: int = 0
    updated: int = 0


class MovieStore:
    """Durable, queryable collection of movies keyed by feed id."""

    def __init__(self, db: Database):
        self.db = db

    async def fetch_all(self) -> list[RatedMovie]:
        try:
            async with self.db.session() as session:
                result = await session.execute(select(StoredMovie).order_by(StoredMovie.pk))
                return [row.to_rated() for row in result.scalars()]
        except SQLAlchemyError as e:
            logger.error(f"Local store read failed: {e}")
            raise StorageError("io", f"Failed to read movies: {e}") from e

    async def get(self, movie_id: str) -> RatedMovie | None:
        try:
            async with self.db.session() as session:
                row = await self._find(session, movie_id)
                return row.to_rated() if row else None
        except SQLAlchemyError as e:
            raise StorageError("io", f"Failed to read movie {movie_id}: {e}") from e

    async def upsert(self, movie: Movie) -> UpsertStats:
        return await self.upsert_many([movie])

    async def upsert_many(self, movies: Iterable[Movie]) -> UpsertStats:
        """Merge feed records in one transaction.

        Existing rows get their feed fields overwritten and keep user_rating;
        unknown ids are inserted with no user rating. If the same id appears
        twice, the later record wins.
        """
        latest: dict[str, Movie] = {}
        for movie in movies:
            latest.pop(movie.id, None)
            latest[movie.id] = movie

        stats = UpsertStats()
        if not latest:
            return stats

        try:
            async with self.db.session() as session:
                result = await session.execute(
                    select(StoredMovie).where(StoredMovie.movie_id.in_(list(latest)))
                )
                existing = {row.movie_id: row for row in result.scalars()}

                for movie_id, movie in latest.items():
                    row = existing.get(movie_id)
                    if row is not None:
                        row.apply_feed(movie)
                        stats.updated += 1
                    else:
                        session.add(StoredMovie.from_movie(movie))
                        stats.inserted += 1
        except SQLAlchemyError as e:
            logger.error(f"Local store upsert failed: {e}")
            raise StorageError("io", f"Failed to upsert movies: {e}") from e

        logger.info(f"Upserted movies: inserted={stats.inserted}, updated={stats.updated}")
        return stats

    async def set_user_rating(self, movie_id: str, rating: str) -> RatedMovie:
        try:
            async with self.db.session() as session:
                row = await self._find(session, movie_id)
                if row is None:
                    raise StorageError.not_found(movie_id)
                row.user_rating = rating
                # Session commits on exit; build the view before leaving
                rated = row.to_rated()
        except SQLAlchemyError as e:
            logger.error(f"Saving user rating for {movie_id} failed: {e}")
            raise StorageError("io", f"Failed to save rating for {movie_id}: {e}") from e
        return rated

    async def delete(self, movie_id: str) -> None:
        try:
            async with self.db.session() as session:
                row = await self._find(session, movie_id)
                if row is None:
                    raise StorageError.not_found(movie_id)
                await session.delete(row)
        except SQLAlchemyError as e:
            logger.error(f"Deleting movie {movie_id} failed: {e}")
            raise StorageError("io", f"Failed to delete {movie_id}: {e}") from e

    @staticmethod
    async def _find(session, movie_id: str) -> StoredMovie | None:
        result = await session.execute(select(StoredMovie).where(StoredMovie.movie_id == movie_id))
        return result.scalar_one_or_none()
