"""Test fixtures for the hotel reporting backend."""
import os

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

os.environ.setdefault("FIREBASE_DATABASE_URL", "http://firebase.test")

from auth import get_current_user
from database import get_db
from main import app
from services.result_cache import DEFAULT_TTL_SECONDS, result_cache

from factories import FakeStore

TEST_USER = {
    "id": "uid-manager",
    "email": "manager@example.com",
    "name": "Casey Manager",
    "role": "hotel_manager",
}


@pytest.fixture(autouse=True)
def clear_result_cache():
    """Cached results must not leak between tests."""
    result_cache.invalidate_all()
    yield
    result_cache.invalidate_all()
    result_cache.ttl_seconds = DEFAULT_TTL_SECONDS


@pytest.fixture()
def store() -> FakeStore:
    return FakeStore()


@pytest_asyncio.fixture()
async def client(store: FakeStore):
    """Async client against the app with the store and auth overridden."""
    app.dependency_overrides[get_db] = lambda: store
    app.dependency_overrides[get_current_user] = lambda: TEST_USER

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client

    app.dependency_overrides.clear()
