"""Schemas for Top 250 movies: feed records, rated rows, and API payloads."""

from typing import Literal

from pydantic import BaseModel, Field


class Movie(BaseModel):
    """A single movie as provided by the Top 250 feed.

    All fields are kept as strings, exactly as the feed sends them
    (rank "1", imDbRating "9.2", imDbRatingCount "2651547").
    """

    id: str = Field(min_length=1)
    rank: str
    title: str
    full_title: str = Field(alias="fullTitle")
    year: str
    image: str
    rating_value: str = Field(alias="imDbRating")
    rating_count: str = Field(alias="imDbRatingCount")

    model_config = {"populate_by_name": True, "frozen": True, "coerce_numbers_to_str": True}

    def to_wire(self) -> dict[str, str]:
        """Serialize with the feed's field names."""
        return self.model_dump(by_alias=True, include=set(Movie.model_fields))


class RatedMovie(Movie):
    """A stored movie: feed fields plus the local-only user rating."""

    user_rating: str | None = Field(alias="userRating", default=None)

    @classmethod
    def from_movie(cls, movie: Movie, user_rating: str | None = None) -> "RatedMovie":
        return cls(**movie.model_dump(), user_rating=user_rating)

    def to_movie(self) -> Movie:
        """Rating-independent projection, as stored in the fast cache."""
        return Movie(**self.model_dump(exclude={"user_rating"}))

    @property
    def description(self) -> str:
        return (
            f"{self.title} ({self.year})\n"
            f"Rating: {self.rating_value}⭐\n"
            f"({self.rating_count} votes)"
        )


class FeedResponse(BaseModel):
    """Top 250 feed envelope: { "items": [...], "errorMessage": "" }."""

    items: list[Movie]
    error_message: str | None = Field(alias="errorMessage", default=None)

    model_config = {"populate_by_name": True}


class MovieListResponse(BaseModel):
    """Response payload for GET /v1/movies."""

    state: str
    unavailable: bool = False
    count: int = Field(ge=0)
    items: list[RatedMovie]


class RatingRequest(BaseModel):
    """Request body for PUT /v1/movies/{movie_id}/rating.

    Kept as a string: validation happens in the sync engine so that the
    HTTP surface and direct callers share the same rules.
    """

    rating: str


class RefreshResponse(BaseModel):
    status: Literal["started"]
    state: str
