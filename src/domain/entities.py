"""
Domain entities with business logic.

Patterns used
-------------
- **State Pattern** on ``ConnectionPath``: enforces the linear lifecycle
  (SIMULATED -> APPROVED -> IN_PROGRESS -> COMPLETED).
- ``GeoPoint`` and ``StartPoint`` are immutable value objects; a
  connection only holds a read-only snapshot of its start point.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from .enums import (
    CONNECTION_TRANSITIONS,
    ConnectionStatus,
    Criticality,
    ElementStatus,
    ElementType,
    NetworkLayer,
    StartPointCategory,
)
from .errors import InvalidStateTransition


# ── Value Objects ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float

    def is_valid(self) -> bool:
        return -90.0 <= self.latitude <= 90.0 and -180.0 <= self.longitude <= 180.0


@dataclass(frozen=True)
class StartPoint:
    """Reference to an existing aggregation point; not owned by the path."""

    id: str
    name: str
    category: StartPointCategory
    location: GeoPoint


# ── Entities ──────────────────────────────────────────────────────────


@dataclass
class NetworkElement:
    id: Optional[int] = None
    type: ElementType = ElementType.CABLE
    name: str = ""
    location: GeoPoint = field(default_factory=lambda: GeoPoint(0, 0))
    status: ElementStatus = ElementStatus.PLANNED
    network_layer: NetworkLayer = NetworkLayer.ACCESS
    criticality: Criticality = Criticality.MEDIUM
    region: str = ""
    department: str = ""
    commune: str = ""
    properties: dict[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class ConnectionPath:
    start_point: StartPoint
    client_location: GeoPoint
    client_name: str
    installation_type: str
    total_distance_m: float
    estimated_cost: float
    waypoints: tuple[GeoPoint, ...] = ()
    fiber_count: int = 1
    currency: str = "XAF"
    client_id: Optional[str] = None
    status: ConnectionStatus = ConnectionStatus.SIMULATED
    derived_poles: list[NetworkElement] = field(default_factory=list)
    drop_cable: Optional[NetworkElement] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    @property
    def path(self) -> list[GeoPoint]:
        """Full polyline: start point, trace waypoints, then the client."""
        return [self.start_point.location, *self.waypoints, self.client_location]

    @property
    def last_mile_elements(self) -> list[NetworkElement]:
        elements = list(self.derived_poles)
        if self.drop_cable is not None:
            elements.append(self.drop_cable)
        return elements

    def transition_to(self, new_status: ConnectionStatus) -> None:
        """Move to *new_status* if the transition is legal, else raise."""
        allowed = CONNECTION_TRANSITIONS.get(self.status, set())
        if new_status not in allowed:
            raise InvalidStateTransition(
                f"Cannot transition from {self.status.value} to {new_status.value}"
            )
        self.status = new_status
