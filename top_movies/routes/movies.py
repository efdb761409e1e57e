"""Movie list endpoints.

GET    /v1/movies                     - current visible list
POST   /v1/movies/refresh             - start a background feed refresh
PUT    /v1/movies/{movieId}/rating    - set the user rating (1-10)
DELETE /v1/movies/{movieId}           - delete a movie
GET    /v1/movies/{movieId}/image     - resized thumbnail bytes

Routers are thin: the sync engine owns all state and policy.
"""

from typing import Annotated

from fastapi import APIRouter, HTTPException, Path, Request, Response

from top_movies.bootstrap import Components
from top_movies.schemas.common import ErrorResponse
from top_movies.schemas.movie import MovieListResponse, RatedMovie, RatingRequest, RefreshResponse
from top_movies.services.images import resized_image_url

router = APIRouter()

MovieId = Annotated[
    str,
    Path(description="Feed movie id", min_length=1, max_length=50, examples=["tt0111161"]),
]

ERROR_RESPONSES = {
    404: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


def _components(request: Request) -> Components:
    components = getattr(request.app.state, "components", None)
    if components is None:
        raise HTTPException(status_code=503, detail="Sync session not initialized")
    return components


@router.get("", response_model=MovieListResponse)
async def list_movies(request: Request) -> MovieListResponse:
    """Get the movies currently visible to the user, in store order."""
    engine = _components(request).engine
    items = engine.visible_list()
    return MovieListResponse(
        state=engine.state.value,
        unavailable=engine.unavailable,
        count=len(items),
        items=list(items),
    )


@router.post("/refresh", response_model=RefreshResponse, status_code=202)
async def refresh_movies(request: Request) -> RefreshResponse:
    """Start a background refresh from the remote feed.

    Returns immediately; the list is replaced when the refresh completes.
    """
    engine = _components(request).engine
    engine.refresh()
    return RefreshResponse(status="started", state=engine.state.value)


@router.put("/{movie_id}/rating", response_model=RatedMovie, responses=ERROR_RESPONSES)
async def rate_movie(request: Request, movie_id: MovieId, body: RatingRequest) -> RatedMovie:
    """Set the user's own rating for a movie (whole number 1-10)."""
    engine = _components(request).engine
    return await engine.rate(movie_id, body.rating)


@router.delete("/{movie_id}", status_code=204, responses=ERROR_RESPONSES)
async def delete_movie(request: Request, movie_id: MovieId) -> Response:
    """Delete a movie from the local store."""
    engine = _components(request).engine
    await engine.remove(movie_id)
    return Response(status_code=204)


@router.get("/{movie_id}/image")
async def movie_image(request: Request, movie_id: MovieId) -> Response:
    """Get the resized thumbnail for a movie."""
    components = _components(request)
    movie = next((m for m in components.engine.visible_list() if m.id == movie_id), None)
    if movie is None:
        raise HTTPException(status_code=404, detail=f"Movie {movie_id} not found")

    content = await components.images.fetch(resized_image_url(movie.image))
    if content is None:
        raise HTTPException(status_code=404, detail=f"Image for {movie_id} unavailable")
    return Response(content=content, media_type="image/jpeg")
