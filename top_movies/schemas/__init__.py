"""Pydantic schemas for API request/response validation."""

from top_movies.schemas.common import ErrorDetail, ErrorResponse
from top_movies.schemas.movie import (
    FeedResponse,
    Movie,
    MovieListResponse,
    RatedMovie,
    RatingRequest,
    RefreshResponse,
)

__all__ = [
    "ErrorDetail",
    "ErrorResponse",
    "FeedResponse",
    "Movie",
    "MovieListResponse",
    "RatedMovie",
    "RatingRequest",
    "RefreshResponse",
]
