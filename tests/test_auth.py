import uuid

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from scored.config import settings
from scored.exceptions import InvalidUsernameError
from scored.services.auth_service import (
    decode_access_token,
    hash_password,
    issue_access_token,
    register_user,
    validate_username,
    verify_password,
)

PASSWORD = "TestPass123!"


def _bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def test_issue_access_token():
    user_id = uuid.uuid4()
    tokens = issue_access_token(user_id)
    assert tokens["token_type"] == "bearer"
    assert tokens["expires_in"] == settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
    assert decode_access_token(tokens["access_token"]) == user_id


def test_decode_rejects_garbage():
    with pytest.raises(ValueError):
        decode_access_token("not.a.token")


@pytest.mark.parametrize("username", ["abc", "a_b-c", "A" * 20, "  padded  "])
def test_validate_username_accepts(username):
    assert validate_username(username) == username.strip()


@pytest.mark.parametrize("username", ["ab", "A" * 21, "has space", "dots.here", "émile", ""])
def test_validate_username_rejects(username):
    with pytest.raises(InvalidUsernameError):
        validate_username(username)


@pytest.mark.asyncio
async def test_register_user_defaults_name(db_session: AsyncSession):
    user = await register_user(db_session, "dana@example.com", PASSWORD)
    assert user.name == "dana"
    assert user.username is None
    assert user.password_hash != PASSWORD


# --- HTTP ---


@pytest.mark.asyncio
async def test_register_then_profile(anon_client):
    response = await anon_client.post(
        "/auth/register",
        json={
            "email": "dana@example.com",
            "password": PASSWORD,
            "name": "Dana Diaz",
            "username": "dana",
        },
    )
    assert response.status_code == 200
    token = response.json()["access_token"]

    response = await anon_client.get("/auth/user-profile", headers=_bearer(token))
    assert response.status_code == 200
    data = response.json()
    assert data["email"] == "dana@example.com"
    assert data["name"] == "Dana Diaz"
    assert data["username"] == "dana"


@pytest.mark.asyncio
async def test_register_duplicate_email(anon_client, test_user):
    response = await anon_client.post(
        "/auth/register", json={"email": "alice@example.com", "password": PASSWORD}
    )
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_register_duplicate_username(anon_client, test_user):
    response = await anon_client.post(
        "/auth/register",
        json={"email": "other@example.com", "password": PASSWORD, "username": "alice"},
    )
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_register_invalid_input(anon_client):
    response = await anon_client.post(
        "/auth/register", json={"email": "not-an-email", "password": PASSWORD}
    )
    assert response.status_code == 400

    response = await anon_client.post(
        "/auth/register", json={"email": "dana@example.com", "password": "short"}
    )
    assert response.status_code == 400

    response = await anon_client.post(
        "/auth/register",
        json={"email": "dana@example.com", "password": PASSWORD, "username": "x"},
    )
    assert response.status_code == 400


@pytest.mark.asyncio
@pytest.mark.parametrize("login", ["alice@example.com", "alice"])
async def test_login_by_email_or_username(anon_client, test_user, login):
    response = await anon_client.post(
        "/auth/login", json={"login": login, "password": PASSWORD}
    )
    assert response.status_code == 200
    token = response.json()["access_token"]
    assert decode_access_token(token) == test_user.id


@pytest.mark.asyncio
async def test_login_wrong_password(anon_client, test_user):
    response = await anon_client.post(
        "/auth/login", json={"login": "alice", "password": "WrongPass123!"}
    )
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid email or password"


@pytest.mark.asyncio
async def test_login_unknown_user(anon_client):
    response = await anon_client.post(
        "/auth/login", json={"login": "nobody", "password": PASSWORD}
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_email_by_username(anon_client, test_user):
    response = await anon_client.post("/auth/email-by-username", json={"username": "alice"})
    assert response.status_code == 200
    assert response.json() == {"email": "alice@example.com"}


@pytest.mark.asyncio
async def test_email_by_username_unknown(anon_client):
    response = await anon_client.post("/auth/email-by-username", json={"username": "ghost"})
    assert response.status_code == 404
    assert response.json()["detail"] == "Username not found"


@pytest.mark.asyncio
async def test_email_by_username_missing(anon_client):
    response = await anon_client.post("/auth/email-by-username", json={})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_update_username(client):
    response = await client.post("/auth/update-username", json={"newUsername": " alice_2 "})
    assert response.status_code == 200
    assert response.json() == {"success": True, "username": "alice_2"}

    response = await client.get("/auth/user-profile")
    assert response.status_code == 200
    assert response.json()["username"] == "alice_2"


@pytest.mark.asyncio
async def test_update_username_to_current_value(client):
    response = await client.post("/auth/update-username", json={"newUsername": "alice"})
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_update_username_taken(client, second_user):
    response = await client.post("/auth/update-username", json={"newUsername": "bob"})
    assert response.status_code == 409
    assert response.json()["detail"] == "Username is already taken"


@pytest.mark.asyncio
async def test_update_username_invalid(client):
    response = await client.post("/auth/update-username", json={"newUsername": "no way"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_session_required(anon_client):
    response = await anon_client.get("/auth/user-profile")
    assert response.status_code == 401

    response = await anon_client.post(
        "/auth/update-username",
        json={"newUsername": "whoever"},
        headers=_bearer("garbage"),
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_token_for_deleted_user_rejected(anon_client):
    token = issue_access_token(uuid.uuid4())["access_token"]
    response = await anon_client.get("/auth/user-profile", headers=_bearer(token))
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_health(anon_client):
    response = await anon_client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


# --- bcrypt input limit ---


def test_verify_rejects_overlong_password():
    hashed = hash_password(PASSWORD)
    assert verify_password(PASSWORD, hashed)
    assert not verify_password("x" * 100, hashed)


@pytest.mark.asyncio
@pytest.mark.parametrize("password", ["x" * 100, "é" * 40])
async def test_register_overlong_password(anon_client, password):
    response = await anon_client.post(
        "/auth/register", json={"email": "dana@example.com", "password": password}
    )
    assert response.status_code == 400
    assert "truncate" not in response.text


@pytest.mark.asyncio
async def test_register_password_at_byte_limit(anon_client):
    response = await anon_client.post(
        "/auth/register", json={"email": "dana@example.com", "password": "x" * 72}
    )
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_login_overlong_password(anon_client, test_user):
    response = await anon_client.post(
        "/auth/login", json={"login": "alice", "password": "x" * 100}
    )
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid email or password"
