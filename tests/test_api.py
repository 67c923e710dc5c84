"""
Integration tests for the REST API endpoints.

Uses an in-memory SQLite database with test models that replace PostGIS
Geometry columns with plain String columns.  Repositories are overridden
so the routes use test-friendly models, and Redis is replaced by a mock.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.api.middleware import limiter
from src.domain.demo_data import demo_network_elements
from tests.conftest import (
    SQLiteBase,
    TestSessionFactory,
    test_engine,
    TestConnectionPathRepository as ConnectionRepo,
    TestNetworkElementRepository as ElementRepo,
)

BONANJO = {
    "id": "CO-DOUALA-01",
    "name": "Central Office Bonanjo",
    "category": "central_office",
    "location": {"latitude": 4.0511, "longitude": 9.7679},
}
CLIENT = {"latitude": 4.0611, "longitude": 9.7579}
WAYPOINTS = [
    {"latitude": 4.0536, "longitude": 9.7654},
    {"latitude": 4.0561, "longitude": 9.7629},
    {"latitude": 4.0586, "longitude": 9.7604},
]


def _body(**overrides) -> dict:
    body = {
        "start_point": BONANJO,
        "client_location": CLIENT,
        "waypoints": WAYPOINTS,
        "installation_type": "aerial",
        "fiber_count": 2,
        "client_name": "Jean Mballa",
        "region": "Littoral",
    }
    body.update(overrides)
    return body


# ── Fixture ───────────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def client():
    """AsyncClient backed by SQLite + test models."""
    async with test_engine.begin() as conn:
        await conn.run_sync(SQLiteBase.metadata.create_all)

    # Seed
    async with TestSessionFactory() as session:
        repo = ElementRepo(session)
        for element in demo_network_elements():
            await repo.create(element)
        await session.commit()

    redis = AsyncMock()
    redis.set = AsyncMock(return_value=True)
    redis.eval = AsyncMock(return_value=1)

    # Override repos at the module level where routes import them
    with (
        patch("src.api.routes.connections.ConnectionPathRepository", ConnectionRepo),
        patch("src.api.routes.connections.NetworkElementRepository", ElementRepo),
        patch("src.api.routes.network_elements.NetworkElementRepository", ElementRepo),
    ):
        # DB session dependency
        async def _test_db():
            async with TestSessionFactory() as session:
                try:
                    yield session
                    await session.commit()
                except Exception:
                    await session.rollback()
                    raise

        async def _test_redis():
            return redis

        from src.api.app import create_app
        from src.api.dependencies import get_db
        from src.infrastructure.redis_client import get_redis

        app = create_app()
        app.dependency_overrides[get_db] = _test_db
        app.dependency_overrides[get_redis] = _test_redis
        limiter.enabled = False

        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            ac.redis_mock = redis
            yield ac

        limiter.enabled = True

    async with test_engine.begin() as conn:
        await conn.run_sync(SQLiteBase.metadata.drop_all)
    await test_engine.dispose()


async def _create(client: AsyncClient, **overrides) -> dict:
    resp = await client.post("/api/v1/connections", json=_body(**overrides))
    assert resp.status_code == 201, resp.text
    return resp.json()


# ── Admin ─────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    resp = await client.get("/api/v1/admin/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_cost_model(client: AsyncClient):
    resp = await client.get("/api/v1/admin/cost-model")
    assert resp.status_code == 200
    data = resp.json()
    assert data["currency"] == "XAF"
    assert data["rates"] == {"aerial": 700.0, "underground": 1200.0, "mixed": 950.0}


# ── Preview ───────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_preview_does_not_save(client: AsyncClient):
    resp = await client.post("/api/v1/connections/preview", json=_body())
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "simulated"
    assert len(data["path"]) == 5
    assert len(data["derived_poles"]) == 3
    assert data["drop_cable"]["type"] == "cable"
    assert data["estimated_cost"] == pytest.approx(data["total_distance_m"] * 700)

    listing = await client.get("/api/v1/connections")
    assert listing.json() == []


@pytest.mark.asyncio
async def test_preview_mixed_has_no_poles(client: AsyncClient):
    resp = await client.post(
        "/api/v1/connections/preview",
        json=_body(installation_type="mixed", waypoints=WAYPOINTS[:2]),
    )
    assert resp.status_code == 200
    assert resp.json()["derived_poles"] == []


# ── Create ────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_create_connection_returns_201(client: AsyncClient):
    data = await _create(client)
    assert data["id"] is not None
    assert data["status"] == "simulated"
    assert data["fiber_count"] == 2
    assert len(data["waypoints"]) == 3
    assert data["total_distance_m"] == pytest.approx(1570.6, abs=5)

    types = [e["type"] for e in data["last_mile_elements"]]
    assert types == ["pole", "pole", "pole", "cable"]
    assert all(e["source_connection_id"] == data["id"] for e in data["last_mile_elements"])
    assert all(e["status"] == "planned" for e in data["last_mile_elements"])


@pytest.mark.asyncio
async def test_created_poles_join_inventory(client: AsyncClient):
    await _create(client)
    resp = await client.get("/api/v1/network-elements", params={"type": "pole"})
    assert resp.status_code == 200
    assert len(resp.json()) == 3


@pytest.mark.asyncio
async def test_underground_creates_only_drop_cable(client: AsyncClient):
    data = await _create(client, installation_type="underground")
    assert [e["type"] for e in data["last_mile_elements"]] == ["cable"]
    assert data["estimated_cost"] == pytest.approx(data["total_distance_m"] * 1200)


@pytest.mark.asyncio
async def test_idempotency_key(client: AsyncClient):
    body = _body(idempotency_key="unique-key-123")
    resp1 = await client.post("/api/v1/connections", json=body)
    resp2 = await client.post("/api/v1/connections", json=body)
    assert resp1.status_code == 201
    assert resp2.status_code == 201
    assert resp1.json()["id"] == resp2.json()["id"]
    assert len(resp2.json()["last_mile_elements"]) == 4

    poles = await client.get("/api/v1/network-elements", params={"type": "pole"})
    assert len(poles.json()) == 3


# ── Validation errors ─────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_missing_start_point_is_422(client: AsyncClient):
    resp = await client.post("/api/v1/connections", json=_body(start_point=None))
    assert resp.status_code == 422
    assert resp.json()["error"] == "MissingEndpoint"


@pytest.mark.asyncio
async def test_blank_client_name_is_422(client: AsyncClient):
    resp = await client.post("/api/v1/connections", json=_body(client_name="  "))
    assert resp.status_code == 422
    assert resp.json()["error"] == "InvalidInput"


@pytest.mark.asyncio
async def test_zero_fibers_is_422(client: AsyncClient):
    resp = await client.post("/api/v1/connections/preview", json=_body(fiber_count=0))
    assert resp.status_code == 422
    assert resp.json()["error"] == "InvalidInput"


@pytest.mark.asyncio
async def test_unknown_installation_type_is_422(client: AsyncClient):
    resp = await client.post(
        "/api/v1/connections", json=_body(installation_type="teleport")
    )
    assert resp.status_code == 422
    assert resp.json()["error"] == "InvalidConfiguration"


@pytest.mark.asyncio
async def test_out_of_range_coordinates_rejected(client: AsyncClient):
    resp = await client.post(
        "/api/v1/connections/preview",
        json=_body(client_location={"latitude": 120, "longitude": 9.75}),
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_missing_installation_type_is_422(client: AsyncClient):
    body = _body()
    del body["installation_type"]
    for url in ("/api/v1/connections/preview", "/api/v1/connections"):
        resp = await client.post(url, json=body)
        assert resp.status_code == 422
        assert resp.json()["error"] == "InvalidConfiguration"

    listing = await client.get("/api/v1/connections")
    assert listing.json() == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "field, value",
    [
        ("client_name", "x" * 201),
        ("client_id", "x" * 65),
        ("region", "x" * 81),
        ("department", "x" * 81),
        ("commune", "x" * 81),
        ("fiber_count", 2**31),
        ("fiber_count", 10**10),
    ],
)
async def test_values_too_large_for_storage_are_422(client: AsyncClient, field, value):
    resp = await client.post("/api/v1/connections", json=_body(**{field: value}))
    assert resp.status_code == 422
    assert resp.json()["detail"][0]["loc"] == ["body", field]


@pytest.mark.asyncio
async def test_too_many_waypoints_is_422(client: AsyncClient):
    waypoints = [{"latitude": 4.0561, "longitude": 9.7629}] * 1001
    resp = await client.post(
        "/api/v1/connections/preview", json=_body(waypoints=waypoints)
    )
    assert resp.status_code == 422
    assert resp.json()["detail"][0]["loc"] == ["body", "waypoints"]


@pytest.mark.asyncio
async def test_values_at_storage_limits_are_saved(client: AsyncClient):
    data = await _create(
        client, client_name="N" * 200, region="R" * 80, fiber_count=2**31 - 1
    )
    assert data["client_name"] == "N" * 200
    assert data["fiber_count"] == 2**31 - 1
    assert all(len(e["name"]) <= 255 for e in data["last_mile_elements"])


@pytest.mark.asyncio
async def test_element_region_too_long_is_422(client: AsyncClient):
    resp = await client.post(
        "/api/v1/network-elements",
        json={
            "type": "chamber",
            "name": "Chamber L2T Akwa",
            "location": {"latitude": 4.0450, "longitude": 9.7700},
            "region": "x" * 81,
        },
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_idempotency_key_saved_by_concurrent_request(client: AsyncClient):
    first = await _create(client, idempotency_key="race-key")

    # The guard lookup misses, as it does when another request commits
    # between the lookup and the insert.
    original = ConnectionRepo.get_by_idempotency_key
    lookups = []

    async def _lookup_after_first_miss(self, key):
        lookups.append(key)
        if len(lookups) == 1:
            return None
        return await original(self, key)

    with patch.object(
        ConnectionRepo, "get_by_idempotency_key", _lookup_after_first_miss
    ):
        resp = await client.post(
            "/api/v1/connections", json=_body(idempotency_key="race-key")
        )

    assert resp.status_code == 201, resp.text
    assert resp.json()["id"] == first["id"]
    assert len(resp.json()["last_mile_elements"]) == 4
    assert len(lookups) == 2

    listing = await client.get("/api/v1/connections")
    assert len(listing.json()) == 1
    poles = await client.get("/api/v1/network-elements", params={"type": "pole"})
    assert len(poles.json()) == 3


# ── Read / list / delete ──────────────────────────────────────────────


@pytest.mark.asyncio
async def test_get_connection(client: AsyncClient):
    created = await _create(client)
    resp = await client.get(f"/api/v1/connections/{created['id']}")
    assert resp.status_code == 200
    assert resp.json()["client_name"] == "Jean Mballa"


@pytest.mark.asyncio
async def test_get_connection_not_found(client: AsyncClient):
    resp = await client.get("/api/v1/connections/9999")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_list_with_search(client: AsyncClient):
    await _create(client, client_name="Jean Mballa")
    await _create(client, client_name="CAMTECH SARL")
    resp = await client.get("/api/v1/connections", params={"search": "camtech"})
    assert [c["client_name"] for c in resp.json()] == ["CAMTECH SARL"]


@pytest.mark.asyncio
async def test_summary(client: AsyncClient):
    a = await _create(client)
    b = await _create(client, installation_type="underground")
    resp = await client.get("/api/v1/connections/summary")
    assert resp.status_code == 200
    data = resp.json()
    assert data["total_simulations"] == 2
    assert data["total_cost"] == pytest.approx(a["estimated_cost"] + b["estimated_cost"])
    assert data["approved"] == 0


@pytest.mark.asyncio
async def test_delete_connection(client: AsyncClient):
    created = await _create(client)
    resp = await client.delete(f"/api/v1/connections/{created['id']}")
    assert resp.status_code == 204
    assert (await client.get(f"/api/v1/connections/{created['id']}")).status_code == 404


# ── Status lifecycle ──────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_status_lifecycle(client: AsyncClient):
    created = await _create(client)
    url = f"/api/v1/connections/{created['id']}/status"
    for status in ("approved", "in_progress", "completed"):
        resp = await client.patch(url, json={"status": status})
        assert resp.status_code == 200, resp.text
        assert resp.json()["status"] == status
    # lock released after each change
    assert client.redis_mock.eval.await_count == 3


@pytest.mark.asyncio
async def test_skipping_approval_is_409(client: AsyncClient):
    created = await _create(client)
    resp = await client.patch(
        f"/api/v1/connections/{created['id']}/status", json={"status": "completed"}
    )
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_status_change_while_locked_is_409(client: AsyncClient):
    created = await _create(client)
    client.redis_mock.set.return_value = False
    resp = await client.patch(
        f"/api/v1/connections/{created['id']}/status", json={"status": "approved"}
    )
    assert resp.status_code == 409
    assert "Could not acquire lock" in resp.json()["detail"]


@pytest.mark.asyncio
async def test_status_of_missing_connection_is_404(client: AsyncClient):
    resp = await client.patch(
        "/api/v1/connections/9999/status", json={"status": "approved"}
    )
    assert resp.status_code == 404


# ── Start points ──────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_nearest_start_points(client: AsyncClient):
    resp = await client.get(
        "/api/v1/connections/start-points",
        params={"lat": 4.0650, "lng": 9.7540, "limit": 2},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert 1 <= len(data) <= 2
    assert data[0]["name"] == "Optical Splice Makepe"
    distances = [c["distance_m"] for c in data]
    assert distances == sorted(distances)


@pytest.mark.asyncio
async def test_start_points_fall_back_when_nothing_nearby(client: AsyncClient):
    # Yaounde: no start points within the search rings
    resp = await client.get(
        "/api/v1/connections/start-points", params={"lat": 3.8480, "lng": 11.5021}
    )
    assert resp.status_code == 200
    assert len(resp.json()) == 3


# ── Network elements ──────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_element_crud(client: AsyncClient):
    resp = await client.post(
        "/api/v1/network-elements",
        json={
            "type": "chamber",
            "name": "Chamber L2T Akwa",
            "location": {"latitude": 4.0450, "longitude": 9.7700},
            "region": "Littoral",
            "properties": {"chamber_type": "L2T"},
        },
    )
    assert resp.status_code == 201
    element = resp.json()
    assert element["status"] == "planned"
    assert element["h3_cell"]

    url = f"/api/v1/network-elements/{element['id']}"
    resp = await client.patch(
        url,
        json={"status": "active", "location": {"latitude": 4.0460, "longitude": 9.7710}},
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "active"
    assert resp.json()["latitude"] == 4.0460
    assert resp.json()["name"] == "Chamber L2T Akwa"

    assert (await client.delete(url)).status_code == 204
    assert (await client.get(url)).status_code == 404


@pytest.mark.asyncio
async def test_element_filters(client: AsyncClient):
    resp = await client.get(
        "/api/v1/network-elements", params={"type": "dslam", "region": "Centre"}
    )
    assert resp.status_code == 200
    data = resp.json()
    assert len(data) == 1
    assert data[0]["name"] == "Main DSLAM Centre"


@pytest.mark.asyncio
async def test_unknown_element_type_rejected(client: AsyncClient):
    resp = await client.post(
        "/api/v1/network-elements",
        json={
            "type": "warp_gate",
            "name": "X",
            "location": {"latitude": 4.0, "longitude": 9.7},
        },
    )
    assert resp.status_code == 422
