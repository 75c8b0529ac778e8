import os
from typing import Optional, List
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


class Settings:
    ENV: str = os.getenv("ENV", "local")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Database
    DATABASE_URL: Optional[str] = os.getenv("DATABASE_URL")
    DATABASE_ECHO: bool = _env_bool("DATABASE_ECHO", "False")
    DATABASE_POOL_SIZE: int = int(os.getenv("DATABASE_POOL_SIZE", 20))
    DATABASE_MAX_OVERFLOW: int = int(os.getenv("DATABASE_MAX_OVERFLOW", 10))

    # JWT / Security
    SECRET_KEY: Optional[str] = os.getenv("SECRET_KEY")
    ALGORITHM: str = os.getenv("ALGORITHM", "HS256")
    JWT_VALID_ISSUER: str = os.getenv("JWT_VALID_ISSUER", "playlist-player-api")
    JWT_VALID_AUDIENCE: str = os.getenv("JWT_VALID_AUDIENCE", "playlist-player-clients")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 20))
    SESSION_EXPIRE_DAYS: int = int(os.getenv("SESSION_EXPIRE_DAYS", 3))

    # Refresh token cookie
    REFRESH_COOKIE_NAME: str = os.getenv("REFRESH_COOKIE_NAME", "RefreshToken")
    # Must be true behind HTTPS in production
    REFRESH_COOKIE_SECURE: bool = _env_bool(
        "REFRESH_COOKIE_SECURE",
        "True" if os.getenv("ENV", "local") == "production" else "False",
    )

    # CORS
    BACKEND_CORS_ORIGINS: Optional[str] = os.getenv("BACKEND_CORS_ORIGINS", "http://localhost:3000")

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = _env_bool("RATE_LIMIT_ENABLED", "True")
    RATE_LIMIT_REQUESTS: int = int(os.getenv("RATE_LIMIT_REQUESTS", 100))
    RATE_LIMIT_PERIOD_SECONDS: int = int(os.getenv("RATE_LIMIT_PERIOD_SECONDS", 60))

    # Seeding
    SEED_ON_STARTUP: bool = _env_bool("SEED_ON_STARTUP", "True")
    ADMIN_USERNAME: str = os.getenv("ADMIN_USERNAME", "admin")
    ADMIN_EMAIL: str = os.getenv("ADMIN_EMAIL", "admin@admin.com")
    ADMIN_PASSWORD: Optional[str] = os.getenv("ADMIN_PASSWORD")

    @property
    def cors_origins(self) -> List[str]:
        if not self.BACKEND_CORS_ORIGINS:
            return []
        return [o.strip() for o in self.BACKEND_CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()
