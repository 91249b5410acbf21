"""
System smoke tests: the HTTP surface end to end over ASGI.

The app's database session, settings and dispatcher are pointed at the
per-test SQLite database.
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from imageboard.config import get_settings
from imageboard.database import get_db
from imageboard.main import app

API = "/api/v1"


@pytest_asyncio.fixture
async def client(settings, session_factory, api):
    async def _get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_settings] = lambda: settings
    app.state.api = api
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()
        del app.state.api


async def register_and_login(client: AsyncClient, name: str, password: str = "secret-password") -> dict:
    response = await client.post(
        f"{API}/jobs/register-user",
        json={"arguments": {"new-user-name": name, "new-password": password}},
    )
    assert response.status_code == 201, response.text
    response = await client.post(f"{API}/auth/login", json={"name": name, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


class TestApiSmoke:
    """End-to-end checks through FastAPI."""

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"
        assert "X-Request-ID" in response.headers

    @pytest.mark.asyncio
    async def test_register_returns_user(self, client):
        response = await client.post(
            f"{API}/jobs/register-user",
            json={"arguments": {"new-user-name": "alice", "new-password": "secret-password"}},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["result"]["name"] == "alice"
        assert body["result"]["access_rank"] == "admin"
        assert "error" not in body

    @pytest.mark.asyncio
    async def test_missing_arguments(self, client):
        response = await client.post(f"{API}/jobs/register-user", json={"arguments": {}})

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["kind"] == "ValidationError"
        assert error["missing"] == ["new-user-name", "new-password"]

    @pytest.mark.asyncio
    async def test_unknown_job(self, client):
        response = await client.post(f"{API}/jobs/frobnicate", json={"arguments": {}})

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_login_failures(self, client):
        await register_and_login(client, "alice")

        response = await client.post(f"{API}/auth/login", json={"name": "alice", "password": "wrong-password"})

        assert response.status_code == 401
        assert response.json()["kind"] == "AuthenticationError"

    @pytest.mark.asyncio
    async def test_invalid_token(self, client):
        response = await client.post(
            f"{API}/jobs/register-user",
            json={"arguments": {"new-user-name": "alice", "new-password": "secret-password"}},
            headers={"Authorization": "Bearer not-a-token"},
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_merge_tags_needs_privilege(self, client, seed_tags):
        await seed_tags({"cat": [1], "kitty": [2]})
        admin_headers = await register_and_login(client, "root")
        user_headers = await register_and_login(client, "bob")
        payload = {"arguments": {"source-tag-name": "cat", "target-tag-name": "kitty"}}

        anonymous = await client.post(f"{API}/jobs/merge-tags", json=payload)
        registered = await client.post(f"{API}/jobs/merge-tags", json=payload, headers=user_headers)
        merged = await client.post(f"{API}/jobs/merge-tags", json=payload, headers=admin_headers)
        repeated = await client.post(f"{API}/jobs/merge-tags", json=payload, headers=admin_headers)

        assert anonymous.status_code == 403
        assert registered.status_code == 403
        assert merged.status_code == 200
        assert merged.json()["result"] == {
            "name": "kitty",
            "category": "default",
            "aliases": ["cat"],
            "usage_count": 2,
        }
        assert repeated.status_code == 404
        assert repeated.json()["error"]["kind"] == "NotFoundError"
