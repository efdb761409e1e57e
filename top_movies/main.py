"""FastAPI application entry point.

Top Movies API - local-first Top 250 list with user ratings.
"""

from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from top_movies.bootstrap import Components, build_components
from top_movies.errors import SessionClosedError, StorageError, ValidationError
from top_movies.routes import api_router
from top_movies.schemas.common import ErrorCode, ErrorResponse
from top_movies.settings import get_settings

logger = logging.getLogger("uvicorn.error")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Handles startup and shutdown events.
    """
    # Startup
    settings = get_settings()
    components: Components | None = getattr(app.state, "components", None)
    if components is None:
        components = build_components(settings)
        app.state.components = components

    # Initialize local store (the session reports "unavailable" if this fails)
    try:
        await components.db.create_tables()
        await components.db.ping()
        logger.info("Local store ready")
    except Exception:
        logger.exception("Local store init failed")

    if settings.auto_refresh_on_startup:
        try:
            await components.engine.activate()
        except StorageError:
            logger.exception("Sync session activation failed")

    yield

    # Shutdown
    await components.aclose()


def _error(status_code: int, code: ErrorCode, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse.build(code, message).model_dump(),
    )


def create_app(components: Components | None = None) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        components: Prebuilt session components (tests). Built on startup if omitted.
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Top 250 movies with local user ratings",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )
    if components is not None:
        app.state.components = components

    @app.exception_handler(ValidationError)
    async def rating_validation_handler(request: Request, exc: ValidationError) -> JSONResponse:
        return _error(422, exc.kind.upper(), str(exc))

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
        if exc.kind == "not_found":
            return _error(404, "NOT_FOUND", str(exc))
        return _error(503, "STORAGE_UNAVAILABLE", "Local store unavailable")

    @app.exception_handler(SessionClosedError)
    async def session_closed_handler(request: Request, exc: SessionClosedError) -> JSONResponse:
        return _error(503, "SESSION_CLOSED", str(exc))

    # Exception handler for structured error format
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Global exception handler returning structured error format."""
        return _error(500, "INTERNAL_ERROR", str(exc) if settings.debug else "Internal server error")

    # Health check endpoint
    @app.get("/health", tags=["health"])
    async def health_check() -> dict[str, bool]:
        """Health check endpoint."""
        return {"ok": True}

    # Include API routes
    app.include_router(api_router)

    return app


# Application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "top_movies.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
