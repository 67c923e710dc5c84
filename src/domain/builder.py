"""
Connection Path Builder
=======================

Turns a simulation request (start point, traced waypoints, client
location, installation options) into a ``ConnectionPath``:

1. **Validate** endpoints, client name, fiber count, coordinates and
   installation type.
2. **Assemble** the full polyline ``[start] + waypoints + [client]``.
3. **Measure** it with the path accumulator and **price** it with the
   cost model.
4. **Derive** the planned last-mile elements: one pole per waypoint for
   aerial builds (never for the endpoints) and one drop cable.

Pure function: ids of derived elements are left ``None`` and nothing is
persisted.  Complexity: O(w) where w = number of waypoints.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from .costing import DEFAULT_COST_MODEL, CostModel
from .distance import compute_path_distance
from .entities import ConnectionPath, GeoPoint, NetworkElement, StartPoint
from .enums import (
    ConnectionStatus,
    Criticality,
    ElementStatus,
    ElementType,
    InstallationType,
    NetworkLayer,
)
from .errors import InvalidInput, MissingEndpoint

POLE_HEIGHT_M = 12


@dataclass(frozen=True)
class ConnectionPathInput:
    start_point: Optional[StartPoint]
    client_location: Optional[GeoPoint]
    installation_type: str
    client_name: str
    waypoints: Sequence[GeoPoint] = ()
    fiber_count: int = 1
    client_id: Optional[str] = None
    region: str = ""
    department: str = ""
    commune: str = ""


def build_connection_path(
    data: ConnectionPathInput, cost_model: CostModel = DEFAULT_COST_MODEL
) -> ConnectionPath:
    """Validate *data* and return a fully computed, unsaved ``ConnectionPath``."""
    if data.start_point is None or data.client_location is None:
        raise MissingEndpoint(
            "A start point and a client location are both required"
        )

    client_name = (data.client_name or "").strip()
    if not client_name:
        raise InvalidInput("Client name must not be blank")

    fiber_count = data.fiber_count
    if isinstance(fiber_count, bool) or not isinstance(fiber_count, int) or fiber_count < 1:
        raise InvalidInput(f"Fiber count must be a positive integer, got {fiber_count!r}")

    waypoints = tuple(data.waypoints or ())
    path = [data.start_point.location, *waypoints, data.client_location]
    for point in path:
        if not point.is_valid():
            raise InvalidInput(
                f"Coordinates out of range: ({point.latitude}, {point.longitude})"
            )

    rate = cost_model.cost_per_meter(data.installation_type)
    installation_type = getattr(data.installation_type, "value", data.installation_type)

    distance = compute_path_distance(path)

    return ConnectionPath(
        start_point=data.start_point,
        client_location=data.client_location,
        client_name=client_name,
        client_id=data.client_id,
        installation_type=installation_type,
        waypoints=waypoints,
        fiber_count=fiber_count,
        total_distance_m=distance,
        estimated_cost=distance * rate,
        currency=cost_model.currency,
        status=ConnectionStatus.SIMULATED,
        derived_poles=derive_poles(
            waypoints, installation_type, client_name, data
        ),
        drop_cable=_drop_cable(
            data.client_location, distance, fiber_count,
            installation_type, client_name, data,
        ),
    )


def derive_poles(
    waypoints: Sequence[GeoPoint],
    installation_type: str,
    client_name: str,
    data: Optional[ConnectionPathInput] = None,
) -> list[NetworkElement]:
    """
    One planned pole per trace waypoint, aerial builds only.

    The start point and the client sit on existing infrastructure, so the
    pole count is ``len(waypoints)``, not the path length.
    """
    if installation_type != InstallationType.AERIAL.value:
        return []
    return [
        NetworkElement(
            type=ElementType.POLE,
            name=f"Pole {index} - {client_name}",
            location=point,
            status=ElementStatus.PLANNED,
            network_layer=NetworkLayer.ACCESS,
            criticality=Criticality.MEDIUM,
            region=data.region if data else "",
            department=data.department if data else "",
            commune=data.commune if data else "",
            properties={
                "pole_type": "concrete",
                "material": "concrete",
                "height_m": POLE_HEIGHT_M,
            },
        )
        for index, point in enumerate(waypoints, start=1)
    ]


def _drop_cable(
    client_location: GeoPoint,
    length_m: float,
    fiber_count: int,
    installation_type: str,
    client_name: str,
    data: ConnectionPathInput,
) -> NetworkElement:
    return NetworkElement(
        type=ElementType.CABLE,
        name=f"Drop Cable - {client_name}",
        location=client_location,
        status=ElementStatus.PLANNED,
        network_layer=NetworkLayer.CLIENT,
        criticality=Criticality.MEDIUM,
        region=data.region,
        department=data.department,
        commune=data.commune,
        properties={
            "length_m": length_m,
            "fiber_count": fiber_count,
            "cable_type": "single_mode",
            "installation": installation_type,
            "network_type": "ftth_gpon",
        },
    )
