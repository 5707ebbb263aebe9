"""
Integration tests for the REST API endpoints.

Uses an in-memory SQLite database and the static location table.  The DB
session and location store dependencies are overridden so the routes run
against test-friendly backends.
"""

from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from limits import parse

from ridebook.api.app import create_app
from ridebook.api.dependencies import get_db, get_location_store, get_trip_service
from ridebook.api.middleware import limiter
from ridebook.config import settings
from ridebook.domain.errors import StorageError

PASSENGER = {"X-Actor-Id": "101", "X-Actor-Role": "passenger"}
OTHER_PASSENGER = {"X-Actor-Id": "102", "X-Actor-Role": "passenger"}
DRIVER = {"X-Actor-Id": "201", "X-Actor-Role": "driver"}
OTHER_DRIVER = {"X-Actor-Id": "202", "X-Actor-Role": "driver"}


# ── Fixture ───────────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def app(session_factory, location_store):
    async def _test_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app = create_app()
    app.dependency_overrides[get_db] = _test_db
    app.dependency_overrides[get_location_store] = lambda: location_store
    limiter.reset()
    return app


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def _book(client, src=1, dst=2, ride_class="car", headers=PASSENGER, **extra):
    return await client.post(
        "/api/v1/trips",
        json={
            "from_location_id": src,
            "to_location_id": dst,
            "ride_class": ride_class,
            **extra,
        },
        headers=headers,
    )


async def _booked_id(client, **kw) -> int:
    resp = await _book(client, **kw)
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]["id"]


# ── Tests ─────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    resp = await client.get("/api/v1/admin/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_book_trip_returns_201(client: AsyncClient):
    resp = await _book(client)
    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    data = body["data"]
    assert data["status"] == "pending"
    assert data["driver_id"] is None
    assert data["user_id"] == 101
    assert data["fare"] == 475
    assert data["ride_class"] == "car"


@pytest.mark.asyncio
async def test_book_same_location(client: AsyncClient):
    resp = await _book(client, src=3, dst=3)
    assert resp.status_code == 400
    assert resp.json() == {
        "success": False,
        "message": "Pickup and destination cannot be the same",
    }


@pytest.mark.asyncio
async def test_book_unknown_location(client: AsyncClient):
    resp = await _book(client, src=1, dst=77)
    assert resp.status_code == 400
    assert resp.json()["message"] == "Invalid destination location"


@pytest.mark.asyncio
async def test_book_invalid_ride_class(client: AsyncClient):
    resp = await _book(client, ride_class="helicopter")
    assert resp.status_code == 400
    assert resp.json()["success"] is False
    assert "ride_class" in resp.json()["message"]


@pytest.mark.asyncio
async def test_book_requires_identity(client: AsyncClient):
    resp = await _book(client, headers={})
    assert resp.status_code == 401
    assert resp.json()["success"] is False


@pytest.mark.asyncio
async def test_book_rejects_bad_role(client: AsyncClient):
    resp = await _book(client, headers={"X-Actor-Id": "5", "X-Actor-Role": "admin"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_drivers_cannot_book(client: AsyncClient):
    resp = await _book(client, headers=DRIVER)
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_idempotency_key(client: AsyncClient):
    first = await _book(client, idempotency_key="unique-key-123")
    second = await _book(client, idempotency_key="unique-key-123")
    assert first.status_code == second.status_code == 201
    assert first.json()["data"]["id"] == second.json()["data"]["id"]


@pytest.mark.asyncio
async def test_idempotency_key_does_not_leak_other_passengers_trip(client: AsyncClient):
    first = await _book(client, idempotency_key="k1")
    other = await _book(
        client, src=3, dst=4, ride_class="bike", headers=OTHER_PASSENGER,
        idempotency_key="k1",
    )
    assert other.status_code == 201
    data = other.json()["data"]
    assert data["id"] != first.json()["data"]["id"]
    assert data["user_id"] == 102
    assert (data["from_location_id"], data["to_location_id"]) == (3, 4)


@pytest.mark.asyncio
async def test_list_trips_with_limit(client: AsyncClient):
    ids = [await _booked_id(client, dst=d) for d in (2, 3, 4)]
    await _booked_id(client, headers=OTHER_PASSENGER)

    resp = await client.get("/api/v1/trips", headers=PASSENGER)
    assert resp.status_code == 200
    assert [t["id"] for t in resp.json()["data"]] == list(reversed(ids))

    resp = await client.get("/api/v1/trips?limit=1", headers=PASSENGER)
    assert [t["id"] for t in resp.json()["data"]] == [ids[-1]]


@pytest.mark.asyncio
async def test_list_trips_rejects_zero_limit(client: AsyncClient):
    resp = await client.get("/api/v1/trips?limit=0", headers=PASSENGER)
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_pending_requires_driver(client: AsyncClient):
    resp = await client.get("/api/v1/trips/pending", headers=PASSENGER)
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_pending_pool(client: AsyncClient):
    waiting = await _booked_id(client, dst=2)
    taken = await _booked_id(client, dst=3)
    await client.patch(f"/api/v1/trips/{taken}/accept", headers=DRIVER)

    resp = await client.get("/api/v1/trips/pending", headers=OTHER_DRIVER)
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert [t["id"] for t in data] == [waiting]
    assert all(t["status"] == "pending" for t in data)


@pytest.mark.asyncio
async def test_accept_then_conflict(client: AsyncClient):
    trip_id = await _booked_id(client)

    resp = await client.patch(f"/api/v1/trips/{trip_id}/accept", headers=DRIVER)
    assert resp.status_code == 200
    assert resp.json()["data"]["status"] == "accepted"
    assert resp.json()["data"]["driver_id"] == 201

    resp = await client.patch(f"/api/v1/trips/{trip_id}/accept", headers=OTHER_DRIVER)
    assert resp.status_code == 409
    assert resp.json() == {"success": False, "message": "Trip is no longer available"}

    resp = await client.get(f"/api/v1/trips/{trip_id}", headers=PASSENGER)
    assert resp.json()["data"]["driver_id"] == 201


@pytest.mark.asyncio
async def test_accept_requires_driver(client: AsyncClient):
    trip_id = await _booked_id(client)
    resp = await client.patch(f"/api/v1/trips/{trip_id}/accept", headers=OTHER_PASSENGER)
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_accept_missing_trip(client: AsyncClient):
    resp = await client.patch("/api/v1/trips/9999/accept", headers=DRIVER)
    assert resp.status_code == 404
    assert resp.json()["message"] == "Trip not found"


@pytest.mark.asyncio
async def test_status_lifecycle(client: AsyncClient):
    trip_id = await _booked_id(client)
    await client.patch(f"/api/v1/trips/{trip_id}/accept", headers=DRIVER)

    resp = await client.patch(
        f"/api/v1/trips/{trip_id}/status", json={"status": "in_progress"}, headers=DRIVER
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["status"] == "in_progress"
    assert resp.json()["data"]["start_time"] is not None

    resp = await client.patch(
        f"/api/v1/trips/{trip_id}/status", json={"status": "completed"}, headers=PASSENGER
    )
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["status"] == "completed"
    assert data["start_time"] is not None
    assert data["end_time"] is not None


@pytest.mark.asyncio
async def test_pending_to_completed_is_rejected(client: AsyncClient):
    trip_id = await _booked_id(client)
    resp = await client.patch(
        f"/api/v1/trips/{trip_id}/status", json={"status": "completed"}, headers=PASSENGER
    )
    assert resp.status_code == 400
    assert resp.json()["success"] is False
    assert "pending" in resp.json()["message"]


@pytest.mark.asyncio
async def test_status_update_by_stranger(client: AsyncClient):
    trip_id = await _booked_id(client)
    resp = await client.patch(
        f"/api/v1/trips/{trip_id}/status", json={"status": "cancelled"}, headers=OTHER_PASSENGER
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_get_trip_access(client: AsyncClient):
    trip_id = await _booked_id(client)
    assert (await client.get(f"/api/v1/trips/{trip_id}", headers=PASSENGER)).status_code == 200
    assert (await client.get(f"/api/v1/trips/{trip_id}", headers=OTHER_PASSENGER)).status_code == 403
    assert (await client.get("/api/v1/trips/9999", headers=PASSENGER)).status_code == 404


@pytest.mark.asyncio
async def test_active_trips(client: AsyncClient):
    active = await _booked_id(client, dst=2)
    await _booked_id(client, dst=3)
    await client.patch(f"/api/v1/trips/{active}/accept", headers=DRIVER)

    for headers in (PASSENGER, DRIVER):
        resp = await client.get("/api/v1/trips/active", headers=headers)
        assert resp.status_code == 200
        assert [t["id"] for t in resp.json()["data"]] == [active]

    resp = await client.get("/api/v1/trips/active", headers=OTHER_DRIVER)
    assert resp.json()["data"] == []


@pytest.mark.asyncio
async def test_fare_quote(client: AsyncClient):
    resp = await client.get(
        "/api/v1/fares/quote",
        params={"from_location_id": 1, "to_location_id": 2, "ride_class": "car"},
    )
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["base_price"] == 100
    assert data["distance_price"] == 375
    assert data["total_price"] == 475
    assert data["distance_km"] == 15


@pytest.mark.asyncio
async def test_fare_quote_invalid_ride_class(client: AsyncClient):
    resp = await client.get(
        "/api/v1/fares/quote",
        params={"from_location_id": 1, "to_location_id": 2, "ride_class": "jet"},
    )
    assert resp.status_code == 400
    assert resp.json()["success"] is False


@pytest.mark.asyncio
async def test_fare_quote_missing_params(client: AsyncClient):
    resp = await client.get("/api/v1/fares/quote", params={"from_location_id": 1})
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_storage_error_maps_to_500(app, client: AsyncClient):
    failing = AsyncMock()
    failing.list_pending = AsyncMock(side_effect=StorageError("disk on fire"))
    app.dependency_overrides[get_trip_service] = lambda: failing

    resp = await client.get("/api/v1/trips/pending", headers=DRIVER)
    assert resp.status_code == 500
    assert resp.json() == {"success": False, "message": "Storage failure"}


@pytest.mark.asyncio
async def test_rate_limit_returns_429_envelope(client: AsyncClient):
    allowed = parse(settings.rate_limit).amount
    for _ in range(allowed):
        resp = await client.get("/api/v1/trips/active", headers=PASSENGER)
        assert resp.status_code == 200

    resp = await client.get("/api/v1/trips/active", headers=PASSENGER)
    assert resp.status_code == 429
    body = resp.json()
    assert body["success"] is False
    assert body["message"].startswith("Rate limit exceeded")
