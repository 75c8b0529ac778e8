"""Integration tests for account, login, refresh and logout routes.

These tests run against the FastAPI app using the SQLite database
configured by `.env.test`.
"""
import asyncio
import uuid
from datetime import datetime, timedelta, timezone
from http.cookies import SimpleCookie

import pytest

COOKIE = "RefreshToken"
PASSWORD = "StrongPassw0rd!"


def _refresh_cookie(response):
    """Return the RefreshToken morsel from the response's Set-Cookie headers."""
    for header in response.headers.get_list("set-cookie"):
        cookie = SimpleCookie()
        cookie.load(header)
        if COOKIE in cookie:
            return cookie[COOKIE]
    return None


def _use_refresh_cookie(client, token):
    client.cookies.clear()
    if token is not None:
        client.cookies.set(COOKIE, token)


async def _register(client, user_name=None, password=PASSWORD, email=None):
    user_name = user_name or f"user-{uuid.uuid4().hex[:8]}"
    payload = {
        "userName": user_name,
        "email": email or f"{user_name}@example.com",
        "password": password,
    }
    r = await client.post("/api/accounts", json=payload)
    return r, user_name


async def _register_and_login(client):
    r, user_name = await _register(client)
    assert r.status_code == 201, r.text
    r = await client.post("/api/login", json={"userName": user_name, "password": PASSWORD})
    assert r.status_code == 200, r.text
    return r, user_name


async def test_login_scenario_alice(async_client, db_session, token_service):
    r, _ = await _register(async_client, user_name="alice", password="Secret123!")
    assert r.status_code == 201

    r = await async_client.post("/api/login", json={"userName": "alice", "password": "Secret123!"})
    assert r.status_code == 200
    access_token = r.json().get("accessToken")
    assert isinstance(access_token, str) and access_token

    cookie = _refresh_cookie(r)
    assert cookie is not None and cookie.value
    assert cookie["httponly"] is True
    assert cookie["samesite"].lower() == "lax"
    assert cookie["expires"]

    from playlist_api.models.user import User
    from playlist_api.models.session import UserSession

    alice = db_session.query(User).filter(User.user_name == "alice").first()
    claims = token_service.decode_access_token(access_token)
    assert claims["sub"] == alice.id
    assert claims["username"] == "alice"
    assert claims["roles"] == ["MusicUser"]

    refresh_claims = token_service.try_parse_refresh_token(cookie.value)
    session = db_session.get(UserSession, refresh_claims["session_id"])
    assert session is not None
    assert session.user_id == alice.id
    assert session.is_revoked is False
    # Only a digest of the refresh token is stored
    assert session.last_refresh_token != cookie.value


async def test_register_returns_created_user(async_client):
    r, user_name = await _register(async_client)
    assert r.status_code == 201
    body = r.json()
    assert body["success"] is True
    assert body["data"]["userName"] == user_name
    assert body["data"]["roles"] == ["MusicUser"]
    assert body["data"]["userId"]


async def test_register_duplicate_username_bob(async_client, db_session):
    r, _ = await _register(async_client, user_name="bob", email="bob@example.com")
    assert r.status_code == 201

    r, _ = await _register(async_client, user_name="bob", email="bob2@example.com")
    assert r.status_code == 422
    body = r.json()
    assert body["kind"] == "validation_failed"
    assert "Username already taken" in body["detail"]
    assert body["errors"]["userName"] == ["Username already taken"]

    from playlist_api.models.user import User
    from playlist_api.models.session import UserSession

    users = db_session.query(User).filter(User.user_name == "bob").all()
    assert len(users) == 1
    assert db_session.query(User).filter(User.email == "bob2@example.com").first() is None
    assert db_session.query(UserSession).filter(UserSession.user_id == users[0].id).count() == 0


async def test_register_duplicate_email(async_client):
    email = f"dup-{uuid.uuid4().hex[:8]}@example.com"
    r, _ = await _register(async_client, email=email)
    assert r.status_code == 201

    r, _ = await _register(async_client, email=email)
    assert r.status_code == 422
    assert r.json()["errors"]["email"] == ["Email already taken"]


@pytest.mark.parametrize(
    "payload, field",
    [
        ({"userName": "ab", "email": "short@example.com", "password": PASSWORD}, "userName"),
        ({"userName": "valid-name", "email": "not-an-email", "password": PASSWORD}, "email"),
        ({"userName": "valid-name", "email": "weak@example.com", "password": "alllowercase1!"}, "password"),
        ({"userName": "valid-name", "email": "weak@example.com", "password": "NoSpecial123"}, "password"),
    ],
)
async def test_register_validation_errors(async_client, payload, field):
    r = await async_client.post("/api/accounts", json=payload)
    assert r.status_code == 422
    body = r.json()
    assert body["kind"] == "validation_failed"
    assert field in body["errors"]


async def test_login_unknown_user(async_client):
    r = await async_client.post("/api/login", json={"userName": "nobody-here", "password": PASSWORD})
    assert r.status_code == 422
    assert r.json()["kind"] == "not_found"
    assert _refresh_cookie(r) is None


async def test_login_invalid_password(async_client, make_user):
    user = make_user(password="RightPassword123!")

    r = await async_client.post("/api/login", json={"userName": user.user_name, "password": "WrongPass1!"})
    assert r.status_code == 422
    assert r.json()["kind"] == "invalid_credentials"
    assert _refresh_cookie(r) is None


async def test_refresh_without_cookie(async_client):
    _use_refresh_cookie(async_client, None)
    r = await async_client.post("/api/accessToken")
    assert r.status_code == 422
    assert r.json()["kind"] == "invalid_refresh_token"


async def test_refresh_with_expired_token(async_client, token_service):
    login, _ = await _register_and_login(async_client)
    claims = token_service.try_parse_refresh_token(_refresh_cookie(login).value)

    expired = token_service.create_refresh_token(
        claims["session_id"],
        claims["sub"],
        datetime.now(timezone.utc) - timedelta(minutes=5),
    )
    _use_refresh_cookie(async_client, expired)

    r = await async_client.post("/api/accessToken")
    assert r.status_code == 422
    assert r.json()["kind"] == "invalid_refresh_token"


async def test_refresh_with_malformed_token(async_client):
    _use_refresh_cookie(async_client, "not-a-jwt")
    r = await async_client.post("/api/accessToken")
    assert r.status_code == 422


async def test_refresh_rotates_and_rejects_replay(async_client, token_service):
    login, user_name = await _register_and_login(async_client)
    old_token = _refresh_cookie(login).value
    session_id = token_service.try_parse_refresh_token(old_token)["session_id"]

    _use_refresh_cookie(async_client, old_token)
    r = await async_client.post("/api/accessToken")
    assert r.status_code == 200, r.text
    claims = token_service.decode_access_token(r.json()["accessToken"])
    assert claims["username"] == user_name

    new_token = _refresh_cookie(r).value
    assert new_token != old_token
    assert token_service.try_parse_refresh_token(new_token)["session_id"] == session_id

    # Replaying the superseded token fails even though it has not expired
    _use_refresh_cookie(async_client, old_token)
    r = await async_client.post("/api/accessToken")
    assert r.status_code == 422

    # The current token still works
    _use_refresh_cookie(async_client, new_token)
    r = await async_client.post("/api/accessToken")
    assert r.status_code == 200


async def test_gathered_refreshes_with_same_token_only_one_succeeds(async_client):
    login, _ = await _register_and_login(async_client)
    token = _refresh_cookie(login).value
    _use_refresh_cookie(async_client, token)

    first, second = await asyncio.gather(
        async_client.post("/api/accessToken"),
        async_client.post("/api/accessToken"),
    )
    assert sorted([first.status_code, second.status_code]) == [200, 422]


async def test_interleaved_refresh_loses_rotation(make_user, token_service):
    from playlist_api.core.database import SessionLocal
    from playlist_api.services.auth_service import AuthService
    from playlist_api.services.session_service import SessionService
    from playlist_api.utils.errors import SessionInvalidError

    user = make_user(password=PASSWORD)
    db_a, db_b = SessionLocal(), SessionLocal()
    try:
        auth_a = AuthService(db_a, token_service, SessionService(db_a))
        token = auth_a.login(user.user_name, PASSWORD)["refresh_token"]

        sessions_b = SessionService(db_b)
        auth_b = AuthService(db_b, token_service, sessions_b)
        won = {}
        validate = sessions_b.is_session_valid

        # B passes validation, then A rotates before B writes
        def validate_then_let_a_rotate(session_id, refresh_token):
            valid = validate(session_id, refresh_token)
            won["a"] = auth_a.refresh(token)
            return valid

        sessions_b.is_session_valid = validate_then_let_a_rotate
        with pytest.raises(SessionInvalidError):
            auth_b.refresh(token)

        with SessionLocal() as db_check:
            stored = SessionService(db_check)
            assert stored.is_session_valid(won["a"]["session_id"], won["a"]["refresh_token"])
            assert not stored.is_session_valid(won["a"]["session_id"], token)
    finally:
        db_a.close()
        db_b.close()


async def test_logout_then_refresh_fails(async_client):
    login, _ = await _register_and_login(async_client)
    token = _refresh_cookie(login).value
    _use_refresh_cookie(async_client, token)

    r = await async_client.post("/api/logout")
    assert r.status_code == 200
    assert r.json().get("success") is True
    cleared = _refresh_cookie(r)
    assert cleared is not None
    assert cleared.value == ""

    _use_refresh_cookie(async_client, token)
    r = await async_client.post("/api/accessToken")
    assert r.status_code == 422


async def test_logout_without_cookie(async_client):
    _use_refresh_cookie(async_client, None)
    r = await async_client.post("/api/logout")
    assert r.status_code == 422
    assert r.json()["kind"] == "invalid_refresh_token"


async def test_logout_with_invalid_token(async_client):
    _use_refresh_cookie(async_client, "garbage")
    r = await async_client.post("/api/logout")
    assert r.status_code == 422


async def test_refresh_failure_bodies_are_uniform(async_client, token_service):
    login, _ = await _register_and_login(async_client)
    old_token = _refresh_cookie(login).value
    _use_refresh_cookie(async_client, old_token)
    r = await async_client.post("/api/accessToken")
    assert r.status_code == 200

    _use_refresh_cookie(async_client, None)
    missing = await async_client.post("/api/accessToken")
    _use_refresh_cookie(async_client, "garbage")
    malformed = await async_client.post("/api/accessToken")
    _use_refresh_cookie(async_client, old_token)
    replayed = await async_client.post("/api/accessToken")

    assert missing.json() == malformed.json() == replayed.json()


async def test_register_missing_role_rolls_back(db_session, token_service):
    from playlist_api.models.user import User
    from playlist_api.services.auth_service import AuthService
    from playlist_api.services.session_service import SessionService
    from playlist_api.utils.errors import ValidationFailedError

    auth = AuthService(db_session, token_service, SessionService(db_session))
    user_name = f"norole-{uuid.uuid4().hex[:8]}"

    with pytest.raises(ValidationFailedError) as exc:
        auth.register(user_name, f"{user_name}@example.com", PASSWORD, role="Ghost")
    assert "role" in exc.value.errors

    assert db_session.query(User).filter(User.user_name == user_name).first() is None


async def test_register_unexpected_error_rolls_back(db_session, token_service, monkeypatch):
    from playlist_api.models.user import Role, User
    from playlist_api.services.auth_service import AuthService
    from playlist_api.services.session_service import SessionService

    auth = AuthService(db_session, token_service, SessionService(db_session))
    user_name = f"boom-{uuid.uuid4().hex[:8]}"
    original_query = db_session.query

    # Fail the role lookup, which runs after the user row has been flushed
    def _query(model, *args, **kwargs):
        if model is Role:
            raise RuntimeError("role lookup failed")
        return original_query(model, *args, **kwargs)

    monkeypatch.setattr(db_session, "query", _query)
    with pytest.raises(RuntimeError):
        auth.register(user_name, f"{user_name}@example.com", PASSWORD)
    monkeypatch.undo()

    assert db_session.query(User).filter(User.user_name == user_name).first() is None


async def test_register_lost_email_race_reports_email(db_session, token_service, monkeypatch):
    from playlist_api.core.database import SessionLocal
    from playlist_api.core.security import hash_password
    from playlist_api.models.user import User
    from playlist_api.services import auth_service as auth_module
    from playlist_api.services.auth_service import AuthService
    from playlist_api.services.session_service import SessionService
    from playlist_api.utils.errors import ValidationFailedError

    suffix = uuid.uuid4().hex[:8]
    email = f"race-{suffix}@example.com"

    # Another registration commits the same email after the duplicate check has passed
    def hash_after_competing_insert(password):
        with SessionLocal() as other:
            other.add(User(user_name=f"winner-{suffix}", email=email, password_hash=hash_password(password)))
            other.commit()
        return hash_password(password)

    monkeypatch.setattr(auth_module, "hash_password", hash_after_competing_insert)
    auth = AuthService(db_session, token_service, SessionService(db_session))

    with pytest.raises(ValidationFailedError) as exc:
        auth.register(f"loser-{suffix}", email, PASSWORD)

    assert exc.value.errors == {"email": ["Email already taken"]}
    assert db_session.query(User).filter(User.user_name == f"loser-{suffix}").first() is None
