"""Pytest configuration and fixtures."""
import os

os.environ.setdefault("MONGODB_URL", "mongodb://localhost:27017")
os.environ.setdefault("JWT_SECRET", "test-secret-key")

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import PyMongoError

from app.main import app
from app.config import settings


@pytest_asyncio.fixture
async def app_client():
    """
    Create a test client backed by a throwaway database.

    Skips when MongoDB is not reachable. The app lifespan does not run under
    ASGITransport, so no OpenAI client is configured and the AI endpoints
    answer with their fallback content.
    """
    test_client = AsyncIOMotorClient(settings.mongodb_url, serverSelectionTimeoutMS=1000)
    try:
        await test_client.admin.command("ping")
    except PyMongoError:
        test_client.close()
        pytest.skip("MongoDB is not reachable")

    test_db_name = f"{settings.mongodb_db_name}_test"
    test_db = test_client[test_db_name]

    from app.database import database
    original_db = database.db
    database.db = test_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client

    await test_client.drop_database(test_db_name)

    database.db = original_db
    test_client.close()


@pytest_asyncio.fixture
async def register_user(app_client):
    """Return a helper that registers a user and returns (auth headers, user JSON)."""

    async def _register(email: str, full_name: str = "Test User", password: str = "password123"):
        response = await app_client.post(
            "/auth/register",
            json={"email": email, "password": password, "full_name": full_name},
        )
        assert response.status_code == 201
        login_response = await app_client.post(
            "/auth/login", json={"email": email, "password": password}
        )
        token = login_response.json()["access_token"]
        return {"Authorization": f"Bearer {token}"}, response.json()

    return _register
