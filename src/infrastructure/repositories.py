"""
Repository Pattern -- abstracts DB access so domain logic stays DB-agnostic.

Each repository receives an ``AsyncSession`` (unit-of-work) and exposes
create / read / update / delete by id plus the list queries the API needs.
The ORM model and the point constructor are class attributes so the test
suite can swap in SQLite-friendly models.
"""

from __future__ import annotations

from typing import Any, Iterable

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import ConnectionPathModel, NetworkElementModel
from src.config import settings
from src.domain.entities import ConnectionPath, GeoPoint, NetworkElement, StartPoint
from src.domain.enums import (
    START_POINT_ELEMENT_TYPES,
    ConnectionStatus,
    StartPointCategory,
)
from src.domain.spatial import h3_cell


def _value(x: Any) -> Any:
    return getattr(x, "value", x)


def make_point(lat: float, lng: float):
    """PostGIS point expression (x = longitude, y = latitude)."""
    from geoalchemy2.functions import ST_MakePoint

    return func.ST_SetSRID(ST_MakePoint(lng, lat), 4326)


class NetworkElementRepository:
    model = NetworkElementModel

    def __init__(self, session: AsyncSession):
        self.session = session

    def _point(self, lat: float, lng: float):
        return make_point(lat, lng)

    async def create(
        self, element: NetworkElement, source_connection_id: int | None = None
    ):
        loc = element.location
        row = self.model(
            type=_value(element.type),
            name=element.name,
            location=self._point(loc.latitude, loc.longitude),
            latitude=loc.latitude,
            longitude=loc.longitude,
            h3_cell=h3_cell(loc, settings.h3_resolution),
            status=_value(element.status),
            network_layer=_value(element.network_layer),
            criticality=_value(element.criticality),
            region=element.region,
            department=element.department,
            commune=element.commune,
            properties=dict(element.properties),
            source_connection_id=source_connection_id,
        )
        self.session.add(row)
        await self.session.flush()
        await self.session.refresh(row)
        return row

    async def get_by_id(self, element_id: int):
        return await self.session.get(self.model, element_id)

    async def get_elements(
        self,
        *,
        type: str | None = None,
        region: str | None = None,
        status: str | None = None,
        north: float | None = None,
        south: float | None = None,
        east: float | None = None,
        west: float | None = None,
    ) -> list:
        m = self.model
        query = select(m).order_by(m.id)
        if type and type != "all":
            query = query.where(m.type == type)
        if region:
            query = query.where(m.region == region)
        if status:
            query = query.where(m.status == status)
        if south is not None:
            query = query.where(m.latitude >= south)
        if north is not None:
            query = query.where(m.latitude <= north)
        if west is not None:
            query = query.where(m.longitude >= west)
        if east is not None:
            query = query.where(m.longitude <= east)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_by_source_connection(self, connection_id: int) -> list:
        m = self.model
        result = await self.session.execute(
            select(m).where(m.source_connection_id == connection_id).order_by(m.id)
        )
        return list(result.scalars().all())

    async def update(self, row, changes: dict[str, Any]):
        """Apply a partial update in place; moving an element re-indexes it."""
        location = changes.pop("location", None)
        for name, value in changes.items():
            setattr(row, name, _value(value))
        if location is not None:
            lat, lng = location.latitude, location.longitude
            row.latitude = lat
            row.longitude = lng
            row.location = self._point(lat, lng)
            row.h3_cell = h3_cell(location, settings.h3_resolution)
        await self.session.flush()
        await self.session.refresh(row)
        return row

    async def delete(self, row) -> None:
        await self.session.delete(row)
        await self.session.flush()

    async def get_start_point_candidates(
        self, cells: Iterable[str] | None = None
    ) -> list:
        m = self.model
        query = select(m).where(
            m.type.in_([t.value for t in START_POINT_ELEMENT_TYPES])
        )
        if cells is not None:
            query = query.where(m.h3_cell.in_(list(cells)))
        result = await self.session.execute(query.order_by(m.id))
        return list(result.scalars().all())

    @staticmethod
    def to_start_point(row) -> StartPoint:
        return StartPoint(
            id=str(row.id),
            name=row.name,
            category=StartPointCategory(row.type),
            location=GeoPoint(row.latitude, row.longitude),
        )


class ConnectionPathRepository:
    model = ConnectionPathModel

    def __init__(self, session: AsyncSession):
        self.session = session

    def _point(self, lat: float, lng: float):
        return make_point(lat, lng)

    async def create(
        self, path: ConnectionPath, idempotency_key: str | None = None
    ):
        sp, client = path.start_point, path.client_location
        row = self.model(
            client_id=path.client_id,
            client_name=path.client_name,
            start_point_id=sp.id,
            start_point_name=sp.name,
            start_point_category=_value(sp.category),
            start_lat=sp.location.latitude,
            start_lng=sp.location.longitude,
            client_point=self._point(client.latitude, client.longitude),
            client_lat=client.latitude,
            client_lng=client.longitude,
            waypoints=[
                {"latitude": p.latitude, "longitude": p.longitude}
                for p in path.waypoints
            ],
            installation_type=path.installation_type,
            fiber_count=path.fiber_count,
            total_distance_m=path.total_distance_m,
            estimated_cost=path.estimated_cost,
            currency=path.currency,
            status=_value(path.status),
            idempotency_key=idempotency_key,
        )
        self.session.add(row)
        await self.session.flush()
        await self.session.refresh(row)
        return row

    async def get_by_id(self, connection_id: int):
        return await self.session.get(self.model, connection_id)

    async def get_by_idempotency_key(self, key: str):
        result = await self.session.execute(
            select(self.model).where(self.model.idempotency_key == key)
        )
        return result.scalar_one_or_none()

    async def get_connections(
        self, *, status: str | None = None, search: str | None = None
    ) -> list:
        m = self.model
        query = select(m).order_by(m.id)
        if status and status != "all":
            query = query.where(m.status == status)
        if search:
            pattern = f"%{search}%"
            query = query.where(
                or_(m.client_name.ilike(pattern), m.start_point_name.ilike(pattern))
            )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def set_status(self, row, status: ConnectionStatus):
        row.status = status.value
        await self.session.flush()
        await self.session.refresh(row)
        return row

    async def delete(self, row) -> None:
        await self.session.delete(row)
        await self.session.flush()

    async def summary(self) -> dict[str, Any]:
        m = self.model
        result = await self.session.execute(
            select(
                func.count(m.id),
                func.coalesce(func.sum(m.total_distance_m), 0.0),
                func.coalesce(func.sum(m.estimated_cost), 0.0),
            )
        )
        count, distance, cost = result.one()
        approved = await self.session.execute(
            select(func.count(m.id)).where(
                m.status == ConnectionStatus.APPROVED.value
            )
        )
        return {
            "total_simulations": count or 0,
            "total_distance_m": float(distance or 0.0),
            "total_cost": float(cost or 0.0),
            "approved": approved.scalar() or 0,
        }

    @staticmethod
    def to_entity(row) -> ConnectionPath:
        """Rebuild the domain object from a stored row (derived elements omitted)."""
        return ConnectionPath(
            id=row.id,
            start_point=StartPoint(
                id=row.start_point_id,
                name=row.start_point_name,
                category=StartPointCategory(row.start_point_category),
                location=GeoPoint(row.start_lat, row.start_lng),
            ),
            client_location=GeoPoint(row.client_lat, row.client_lng),
            client_name=row.client_name,
            client_id=row.client_id,
            installation_type=row.installation_type,
            waypoints=tuple(
                GeoPoint(p["latitude"], p["longitude"]) for p in row.waypoints or []
            ),
            fiber_count=row.fiber_count,
            total_distance_m=row.total_distance_m,
            estimated_cost=row.estimated_cost,
            currency=row.currency,
            status=ConnectionStatus(row.status),
            created_at=row.created_at,
        )

