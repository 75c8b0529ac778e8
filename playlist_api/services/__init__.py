"""Service layer package."""

__all__ = [
    "auth_service",
    "session_service",
    "token_service",
    "seeder",
]
