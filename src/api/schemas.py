"""Pydantic request / response schemas for the REST API."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from src.domain.entities import ConnectionPath, GeoPoint, NetworkElement, StartPoint
from src.domain.enums import (
    ConnectionStatus,
    Criticality,
    ElementStatus,
    ElementType,
    NetworkLayer,
    StartPointCategory,
)


# Largest value a 32-bit INTEGER column holds
MAX_FIBER_COUNT = 2**31 - 1
# Keeps derived element names ("Pole {n} - {client}") within 255 chars
MAX_WAYPOINTS = 1000


# ── Shared ────────────────────────────────────────────────────────────


class GeoPointSchema(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)

    def to_domain(self) -> GeoPoint:
        return GeoPoint(self.latitude, self.longitude)


class StartPointSchema(BaseModel):
    id: str = Field(..., min_length=1, max_length=64)
    name: str = Field(..., max_length=200)
    category: StartPointCategory
    location: GeoPointSchema

    def to_domain(self) -> StartPoint:
        return StartPoint(
            id=self.id,
            name=self.name,
            category=self.category,
            location=self.location.to_domain(),
        )


# ── Requests ──────────────────────────────────────────────────────────


class ConnectionCreateRequest(BaseModel):
    # Endpoints, name, fiber count and installation type are checked by the
    # domain builder so the API reports the same errors as the core.
    start_point: Optional[StartPointSchema] = None
    client_location: Optional[GeoPointSchema] = None
    waypoints: list[GeoPointSchema] = Field([], max_length=MAX_WAYPOINTS)
    installation_type: Optional[str] = None
    fiber_count: int = Field(1, le=MAX_FIBER_COUNT)
    client_name: str = Field("", max_length=200)
    client_id: Optional[str] = Field(None, max_length=64)
    region: str = Field("", max_length=80)
    department: str = Field("", max_length=80)
    commune: str = Field("", max_length=80)
    idempotency_key: Optional[str] = Field(
        None,
        max_length=64,
        description="Client-generated UUID to prevent saving a simulation twice on retries.",
    )


class ConnectionStatusUpdate(BaseModel):
    status: ConnectionStatus


class NetworkElementCreateRequest(BaseModel):
    type: ElementType
    name: str = Field(..., min_length=1, max_length=200)
    location: GeoPointSchema
    status: ElementStatus = ElementStatus.PLANNED
    network_layer: NetworkLayer = NetworkLayer.ACCESS
    criticality: Criticality = Criticality.MEDIUM
    region: str = Field("", max_length=80)
    department: str = Field("", max_length=80)
    commune: str = Field("", max_length=80)
    properties: dict[str, Any] = {}

    def to_domain(self) -> NetworkElement:
        return NetworkElement(
            type=self.type,
            name=self.name,
            location=self.location.to_domain(),
            status=self.status,
            network_layer=self.network_layer,
            criticality=self.criticality,
            region=self.region,
            department=self.department,
            commune=self.commune,
            properties=dict(self.properties),
        )


class NetworkElementUpdateRequest(BaseModel):
    type: Optional[ElementType] = None
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    location: Optional[GeoPointSchema] = None
    status: Optional[ElementStatus] = None
    network_layer: Optional[NetworkLayer] = None
    criticality: Optional[Criticality] = None
    region: Optional[str] = Field(None, max_length=80)
    department: Optional[str] = Field(None, max_length=80)
    commune: Optional[str] = Field(None, max_length=80)
    properties: Optional[dict[str, Any]] = None


# ── Responses ─────────────────────────────────────────────────────────


class NetworkElementResponse(BaseModel):
    id: int
    type: ElementType
    name: str
    latitude: float
    longitude: float
    h3_cell: Optional[str] = None
    status: ElementStatus
    network_layer: NetworkLayer
    criticality: Criticality
    region: Optional[str] = ""
    department: Optional[str] = ""
    commune: Optional[str] = ""
    properties: dict[str, Any] = {}
    source_connection_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class PlannedElementResponse(BaseModel):
    """A derived element that has not been saved yet."""

    type: ElementType
    name: str
    latitude: float
    longitude: float
    status: ElementStatus
    network_layer: NetworkLayer
    properties: dict[str, Any] = {}

    @classmethod
    def from_entity(cls, element: NetworkElement) -> "PlannedElementResponse":
        return cls(
            type=element.type,
            name=element.name,
            latitude=element.location.latitude,
            longitude=element.location.longitude,
            status=element.status,
            network_layer=element.network_layer,
            properties=element.properties,
        )


class ConnectionPreviewResponse(BaseModel):
    client_name: str
    start_point_id: str
    installation_type: str
    fiber_count: int
    path: list[GeoPointSchema]
    total_distance_m: float
    estimated_cost: float
    currency: str
    status: ConnectionStatus
    derived_poles: list[PlannedElementResponse] = []
    drop_cable: Optional[PlannedElementResponse] = None

    @classmethod
    def from_entity(cls, path: ConnectionPath) -> "ConnectionPreviewResponse":
        return cls(
            client_name=path.client_name,
            start_point_id=path.start_point.id,
            installation_type=path.installation_type,
            fiber_count=path.fiber_count,
            path=[
                GeoPointSchema(latitude=p.latitude, longitude=p.longitude)
                for p in path.path
            ],
            total_distance_m=path.total_distance_m,
            estimated_cost=path.estimated_cost,
            currency=path.currency,
            status=path.status,
            derived_poles=[
                PlannedElementResponse.from_entity(p) for p in path.derived_poles
            ],
            drop_cable=(
                PlannedElementResponse.from_entity(path.drop_cable)
                if path.drop_cable
                else None
            ),
        )


class ConnectionResponse(BaseModel):
    id: int
    client_id: Optional[str] = None
    client_name: str
    start_point_id: str
    start_point_name: str
    start_point_category: StartPointCategory
    start_lat: float
    start_lng: float
    client_lat: float
    client_lng: float
    waypoints: list[GeoPointSchema] = []
    installation_type: str
    fiber_count: int
    total_distance_m: float
    estimated_cost: float
    currency: str
    status: ConnectionStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ConnectionCreatedResponse(ConnectionResponse):
    last_mile_elements: list[NetworkElementResponse] = []


class ConnectionSummaryResponse(BaseModel):
    total_simulations: int
    total_distance_m: float
    total_cost: float
    approved: int


class StartPointCandidateResponse(BaseModel):
    id: str
    name: str
    category: StartPointCategory
    latitude: float
    longitude: float
    distance_m: float


class CostModelResponse(BaseModel):
    currency: str
    rates: dict[str, float]


class HealthResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    detail: str
