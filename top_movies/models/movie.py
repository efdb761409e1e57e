"""StoredMovie model.

One row per movie id from the Top 250 feed. Feed fields are overwritten on
every refresh; user_rating is local-only and never touched by a refresh.
"""

from datetime import datetime

from sqlalchemy import DateTime, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from top_movies.schemas.movie import Movie, RatedMovie
from top_movies.stores.database import Base


class StoredMovie(Base):
    """Persisted movie with the user's own rating."""

    __tablename__ = "movies"

    # Surrogate key; gives a stable insertion order for the visible list
    pk: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    # Stable feed id (e.g., "tt0111161")
    movie_id: Mapped[str] = mapped_column(String(50), unique=True, index=True)

    # Feed fields, stored as the feed sends them (strings)
    rank: Mapped[str] = mapped_column(String(20))
    title: Mapped[str] = mapped_column(String(500))
    full_title: Mapped[str] = mapped_column(String(500))
    year: Mapped[str] = mapped_column(String(20))
    image: Mapped[str] = mapped_column(Text)
    rating_value: Mapped[str] = mapped_column(String(20))
    rating_count: Mapped[str] = mapped_column(String(20))

    # Local-only
    user_rating: Mapped[str | None] = mapped_column(String(2), default=None)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    @classmethod
    def from_movie(cls, movie: Movie) -> "StoredMovie":
        return cls(
            movie_id=movie.id,
            rank=movie.rank,
            title=movie.title,
            full_title=movie.full_title,
            year=movie.year,
            image=movie.image,
            rating_value=movie.rating_value,
            rating_count=movie.rating_count,
            user_rating=None,
        )

    def apply_feed(self, movie: Movie) -> None:
        """Overwrite feed fields from a fresh record. user_rating is kept."""
        self.rank = movie.rank
        self.title = movie.title
        self.full_title = movie.full_title
        self.year = movie.year
        self.image = movie.image
        self.rating_value = movie.rating_value
        self.rating_count = movie.rating_count

    def to_rated(self) -> RatedMovie:
        return RatedMovie(
            id=self.movie_id,
            rank=self.rank,
            title=self.title,
            full_title=self.full_title,
            year=self.year,
            image=self.image,
            rating_value=self.rating_value,
            rating_count=self.rating_count,
            user_rating=self.user_rating,
        )

    def __repr__(self) -> str:
        return f"<StoredMovie {self.movie_id}>"
