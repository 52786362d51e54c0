"""Realtime Database REST client tests."""
import json

import httpx
import pytest

from services.firebase_client import FirebaseAPIError, FirebaseClient

pytestmark = pytest.mark.asyncio

DB_URL = "https://minima-hotel.firebaseio.test"


def _client(handler, auth_token="secret"):
    return FirebaseClient(database_url=DB_URL + "/", auth_token=auth_token, transport=httpx.MockTransport(handler))


async def test_get_collection_returns_record_map():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"-Nb1": {"status": "paid"}, "-Nb2": {"status": "pending"}})

    async with _client(handler) as db:
        records = await db.get_collection("bookings")

    assert set(records) == {"-Nb1", "-Nb2"}
    assert seen[0].url.path == "/bookings.json"
    assert seen[0].url.params["auth"] == "secret"


async def test_missing_node_is_empty():
    async with _client(lambda request: httpx.Response(200, content=b"null")) as db:
        assert await db.get_collection("goals") == {}


async def test_array_node_becomes_map():
    async with _client(lambda request: httpx.Response(200, json=[None, {"name": "Deluxe"}, {"name": "Suite"}])) as db:
        assert await db.get_collection("rooms") == {"1": {"name": "Deluxe"}, "2": {"name": "Suite"}}


async def test_scalar_node_is_empty():
    async with _client(lambda request: httpx.Response(200, json="oops")) as db:
        assert await db.get_collection("rooms") == {}


async def test_error_status_raises():
    async with _client(lambda request: httpx.Response(401, json={"error": "Permission denied"})) as db:
        with pytest.raises(FirebaseAPIError):
            await db.get_collection("bookings")


async def test_transport_error_raises():
    def handler(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    async with _client(handler) as db:
        with pytest.raises(FirebaseAPIError):
            await db.get_collection("bookings")
        assert await db.test_connection() is False


async def test_get_latest_query():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"-La": {"action": "login"}})

    async with _client(handler, auth_token=None) as db:
        await db.get_latest("audit_logs", "timestamp", 50)

    params = seen[0].url.params
    assert params["orderBy"] == '"timestamp"'
    assert params["limitToLast"] == "50"
    assert "auth" not in params


async def test_writes():
    seen = []

    def handler(request):
        seen.append((request.method, request.url.path, json.loads(request.content) if request.content else None))
        if request.method == "POST":
            return httpx.Response(200, json={"name": "-Ngoal1"})
        return httpx.Response(200, content=b"null")

    async with _client(handler) as db:
        key = await db.push("goals", {"type": "revenue"})
        await db.update("scheduled_reports/s1", {"enabled": False})
        await db.set("settings/data_refresh", {"autoRefresh": True})
        await db.delete("goals/-Ngoal1")

    assert key == "-Ngoal1"
    assert [(method, path) for method, path, _ in seen] == [
        ("POST", "/goals.json"),
        ("PATCH", "/scheduled_reports/s1.json"),
        ("PUT", "/settings/data_refresh.json"),
        ("DELETE", "/goals/-Ngoal1.json"),
    ]
    assert seen[1][2] == {"enabled": False}


async def test_push_without_key_raises():
    async with _client(lambda request: httpx.Response(200, json={})) as db:
        with pytest.raises(FirebaseAPIError):
            await db.push("goals", {"type": "revenue"})


async def test_non_json_body_is_a_store_error():
    def handler(request):
        return httpx.Response(200, content=b"<html>Service temporarily unavailable</html>")

    async with _client(handler) as db:
        with pytest.raises(FirebaseAPIError, match="invalid JSON"):
            await db.get_collection("bookings")
        assert await db.test_connection() is False
