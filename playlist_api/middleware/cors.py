"""CORS configuration."""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from playlist_api.core.config import settings


def configure_cors(app: FastAPI) -> None:
    origins = settings.cors_origins
    if not origins:
        return
    # Credentials are required so the browser sends the refresh token cookie
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition"],
    )
