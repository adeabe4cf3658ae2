"""Token revocation against an in-memory stand-in for Redis."""

import time

import pytest
from httpx import AsyncClient

from app.auth import revocation
from app.auth.jwt import create_access_token
from app.auth.revocation import TokenRevocation
from app.models.user import User


class FakeRedis:
    """The handful of Redis commands TokenRevocation uses."""

    def __init__(self):
        self.store: dict[str, str] = {}

    async def setex(self, key, ttl, value):
        self.store[key] = value

    async def exists(self, key):
        return 1 if key in self.store else 0

    async def get(self, key):
        return self.store.get(key)


@pytest.fixture
def fake_redis(monkeypatch) -> FakeRedis:
    fake = FakeRedis()

    async def _get_redis():
        return fake

    monkeypatch.setattr(revocation, "get_redis", _get_redis)
    return fake


@pytest.mark.auth
@pytest.mark.asyncio
class TestTokenRevocation:

    async def test_logout_revokes_token(
        self, client: AsyncClient, customer_headers: dict, fake_redis: FakeRedis
    ):
        assert (await client.get("/api/auth/me", headers=customer_headers)).status_code == 200

        response = await client.post("/api/auth/logout", headers=customer_headers)
        assert response.status_code == 200
        assert response.json()["message"] == "Logged out"

        after = await client.get("/api/auth/me", headers=customer_headers)
        assert after.status_code == 401
        assert "revoked" in after.json()["error"].lower()

    async def test_expired_token_is_not_stored(self, fake_redis: FakeRedis):
        assert await TokenRevocation.revoke_token("tok", time.time() - 10) is True
        assert fake_redis.store == {}

    async def test_user_revocation_only_hits_older_tokens(self, fake_redis: FakeRedis):
        await TokenRevocation.revoke_all_user_tokens("user-1")

        assert await TokenRevocation.is_user_revoked("user-1", time.time() - 60) is True
        assert await TokenRevocation.is_user_revoked("user-1", time.time() + 60) is False
        assert await TokenRevocation.is_user_revoked("user-2", time.time() - 60) is False

    async def test_password_change_ends_existing_sessions(
        self,
        client: AsyncClient,
        customer_user: User,
        fake_redis: FakeRedis,
    ):
        old_token = create_access_token(user_id=customer_user.id, role="customer")
        headers = {"Authorization": f"Bearer {old_token}"}
        # Password changed after the token was issued
        fake_redis.store[f"revoked:user:{customer_user.id}"] = str(int(time.time()) + 5)

        response = await client.get("/api/auth/me", headers=headers)
        assert response.status_code == 401

    async def test_disabled_without_redis(self):
        assert await TokenRevocation.revoke_token("tok", time.time() + 60) is False
        assert await TokenRevocation.is_revoked("tok") is False
