import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from playlist_api.core.config import settings
from playlist_api.core.logger import setup_logging
from playlist_api.middleware.cors import configure_cors
from playlist_api.middleware.logging import RequestLoggerMiddleware
from playlist_api.middleware import error_handler
from playlist_api.utils.errors import AppError

# Routers
from playlist_api.routers import auth as auth_router
from playlist_api.routers import users as users_router
from playlist_api.routers import health as health_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.SEED_ON_STARTUP:
        from playlist_api.core.database import SessionLocal
        from playlist_api.services.seeder import AuthSeeder

        db = SessionLocal()
        try:
            AuthSeeder(db).seed()
        finally:
            db.close()
    logger.info("Playlist Player API started (env=%s)", settings.ENV)
    yield


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance."""
    setup_logging()
    description = (
        "Playlist Player API.\n\n"
        "This service provides account registration, login and refresh-token sessions."
    )

    openapi_tags = [
        {"name": "authentication", "description": "Register, login, refresh access tokens and logout."},
        {"name": "users", "description": "User profiles and administration."},
        {"name": "health", "description": "Health checks and service status endpoints."},
    ]

    app = FastAPI(
        title="Playlist Player API",
        version="0.1.0",
        description=description,
        openapi_tags=openapi_tags,
        lifespan=lifespan,
    )

    # Middleware
    configure_cors(app)
    app.add_middleware(RequestLoggerMiddleware)

    # Exception handlers
    app.add_exception_handler(AppError, error_handler.app_error_handler)
    app.add_exception_handler(StarletteHTTPException, error_handler.http_exception_handler)
    app.add_exception_handler(RequestValidationError, error_handler.validation_exception_handler)

    # Include routers
    app.include_router(health_router.router)
    app.include_router(auth_router.router)
    app.include_router(users_router.router)

    return app


app = create_app()
