"""
Shared test fixtures.

Uses an in-memory SQLite database (via aiosqlite) so tests run without
Docker / PostgreSQL / Redis.  PostGIS-specific features (Geometry columns)
are mocked by using plain String columns in the test models, and the
repositories are subclassed to point at those models.
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy import JSON, Column, DateTime, Float, Integer, String, func
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from src.domain.entities import GeoPoint, StartPoint
from src.domain.enums import StartPointCategory
from src.infrastructure.repositories import (
    ConnectionPathRepository,
    NetworkElementRepository,
)


# ── Test DB (SQLite in-memory) ────────────────────────────────────────

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"

# One shared connection, otherwise every session sees its own empty DB
test_engine = create_async_engine(
    TEST_DB_URL,
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionFactory = async_sessionmaker(
    test_engine, class_=AsyncSession, expire_on_commit=False
)


class SQLiteBase(DeclarativeBase):
    pass


# Mirror the production models but without PostGIS Geometry columns
# (SQLite doesn't support them).

class TestNetworkElementModel(SQLiteBase):
    __tablename__ = "network_elements"
    id = Column(Integer, primary_key=True, autoincrement=True)
    type = Column(String(40), nullable=False)
    name = Column(String(255), nullable=False)
    location = Column(String, nullable=True)  # stub for Geometry
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    h3_cell = Column(String(20), nullable=True)
    status = Column(String(20), default="planned", nullable=False)
    network_layer = Column(String(20), default="access", nullable=False)
    criticality = Column(String(20), default="medium", nullable=False)
    region = Column(String(80), default="")
    department = Column(String(80), default="")
    commune = Column(String(80), default="")
    properties = Column(JSON, default=dict)
    source_connection_id = Column(Integer, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class TestConnectionPathModel(SQLiteBase):
    __tablename__ = "connection_paths"
    id = Column(Integer, primary_key=True, autoincrement=True)
    client_id = Column(String(64), nullable=True)
    client_name = Column(String(200), nullable=False)
    start_point_id = Column(String(64), nullable=False)
    start_point_name = Column(String(200), nullable=False)
    start_point_category = Column(String(40), nullable=False)
    start_lat = Column(Float, nullable=False)
    start_lng = Column(Float, nullable=False)
    client_point = Column(String, nullable=True)  # stub for Geometry
    client_lat = Column(Float, nullable=False)
    client_lng = Column(Float, nullable=False)
    waypoints = Column(JSON, nullable=False, default=list)
    installation_type = Column(String(20), nullable=False)
    fiber_count = Column(Integer, default=1, nullable=False)
    total_distance_m = Column(Float, nullable=False)
    estimated_cost = Column(Float, nullable=False)
    currency = Column(String(8), default="XAF", nullable=False)
    status = Column(String(20), default="simulated", nullable=False)
    idempotency_key = Column(String(64), unique=True, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


def _wkt_point(lat: float, lng: float) -> str:
    return f"POINT({lng} {lat})"


class TestNetworkElementRepository(NetworkElementRepository):
    """``NetworkElementRepository`` bound to the SQLite-friendly model."""

    model = TestNetworkElementModel

    def _point(self, lat, lng):
        return _wkt_point(lat, lng)


class TestConnectionPathRepository(ConnectionPathRepository):
    """``ConnectionPathRepository`` bound to the SQLite-friendly model."""

    model = TestConnectionPathModel

    def _point(self, lat, lng):
        return _wkt_point(lat, lng)


# ── Fixtures ──────────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create tables, yield a session, then drop everything."""
    async with test_engine.begin() as conn:
        await conn.run_sync(SQLiteBase.metadata.create_all)

    async with TestSessionFactory() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(SQLiteBase.metadata.drop_all)
    # Connections are bound to the event loop of the test that opened them
    await test_engine.dispose()


@pytest.fixture
def bonanjo() -> StartPoint:
    return StartPoint(
        id="CO-DOUALA-01",
        name="Central Office Bonanjo",
        category=StartPointCategory.CENTRAL_OFFICE,
        location=GeoPoint(4.0511, 9.7679),
    )


@pytest.fixture
def client_location() -> GeoPoint:
    return GeoPoint(4.0611, 9.7579)


@pytest.fixture
def three_waypoints() -> list[GeoPoint]:
    return [
        GeoPoint(4.0536, 9.7654),
        GeoPoint(4.0561, 9.7629),
        GeoPoint(4.0586, 9.7604),
    ]
