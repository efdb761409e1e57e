"""API routes."""

from fastapi import APIRouter

from top_movies.routes import movies

api_router = APIRouter()

# Movie list endpoints (presentation adapter over the sync engine)
api_router.include_router(movies.router, prefix="/v1/movies", tags=["movies"])
