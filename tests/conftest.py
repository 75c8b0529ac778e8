"""Pytest fixtures for async FastAPI testing.

Loads `.env.test`, initializes a clean test database with seeded roles, and
provides an `AsyncClient` for integration tests.
"""
import pathlib
import uuid

import pytest
from dotenv import load_dotenv

ROOT = pathlib.Path(__file__).resolve().parent.parent

# Settings are read when playlist_api.core.config is first imported, so the
# test environment has to be in place before any app module loads.
load_dotenv(dotenv_path=str(ROOT / ".env.test"), override=True)


@pytest.fixture(scope="session")
def prepare_database():
    """Create clean schema for the test session and seed the role catalogue."""
    from playlist_api.core.database import engine, Base, SessionLocal
    from playlist_api.services.seeder import AuthSeeder

    # Drop / create all tables to ensure clean DB
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        AuthSeeder(db).seed()
    finally:
        db.close()

    yield

    # Teardown: drop all tables
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session(prepare_database):
    """Yield a SQLAlchemy session for direct DB access in tests."""
    from playlist_api.core.database import SessionLocal

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def token_service():
    from playlist_api.core.config import settings
    from playlist_api.services.token_service import TokenService

    return TokenService.from_settings(settings)


@pytest.fixture
def make_user(db_session):
    """Create a user with the MusicUser role directly in the database."""
    from playlist_api.core.security import hash_password
    from playlist_api.models.user import Role, User

    def _make(password: str = "StrongPassw0rd!", user_name: str | None = None):
        user_name = user_name or f"user-{uuid.uuid4().hex[:8]}"
        user = User(
            user_name=user_name,
            email=f"{user_name}@example.com",
            password_hash=hash_password(password),
        )
        role = db_session.query(Role).filter(Role.name == "MusicUser").first()
        user.roles.append(role)
        db_session.add(user)
        db_session.commit()
        return user

    return _make


@pytest.fixture
async def async_client(prepare_database):
    """Provide an httpx AsyncClient configured with the FastAPI app."""
    from httpx import ASGITransport, AsyncClient
    from playlist_api.main import create_app

    app = create_app()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        yield client
