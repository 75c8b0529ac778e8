"""Application logging setup."""
import logging
import logging.config

from playlist_api.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(level: str | None = None) -> None:
    """Configure console logging for the app and uvicorn loggers."""
    level = (level or settings.LOG_LEVEL or "INFO").upper()
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {"format": LOG_FORMAT},
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                },
            },
            "loggers": {
                "playlist_api": {"handlers": ["console"], "level": level, "propagate": False},
                "uvicorn.error": {"level": level},
                "uvicorn.access": {"level": level},
            },
            "root": {"handlers": ["console"], "level": "WARNING"},
        }
    )
