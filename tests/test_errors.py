import pytest
from httpx import ASGITransport, AsyncClient

from scored.main import app
from scored.services import friend_service


@pytest.mark.asyncio
async def test_unexpected_error_returns_generic_500(client, monkeypatch, caplog):
    async def broken_get_friends(db, user_id):
        raise RuntimeError("could not reach db-primary.internal:5432")

    monkeypatch.setattr(friend_service, "get_friends", broken_get_friends)

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        response = await ac.get("/friends", params={"action": "friends"})

    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error"}
    assert "db-primary" not in response.text
    assert "Unhandled error on GET /friends" in caplog.text


@pytest.mark.asyncio
async def test_domain_error_keeps_its_status(client, second_user):
    response = await client.get(
        "/friends", params={"action": "friend-scores", "friendId": str(second_user.id)}
    )
    assert response.status_code == 403
    assert response.json() == {"detail": "Not friends with this user"}
