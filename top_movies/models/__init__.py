"""SQLAlchemy ORM models.

Models represent database tables:
- movies: Top 250 feed rows with the local user rating
"""

from top_movies.models.movie import StoredMovie

__all__ = ["StoredMovie"]
