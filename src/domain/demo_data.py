"""
Demo dataset factories.

Each call builds fresh objects, so callers (``seed.py``, tests) can mutate
what they get without affecting anyone else.  Coordinates are around
Douala, Cameroon; costs are in XAF.
"""

from __future__ import annotations

from .builder import ConnectionPathInput
from .entities import GeoPoint, NetworkElement, StartPoint
from .enums import (
    Criticality,
    ElementStatus,
    ElementType,
    InstallationType,
    NetworkLayer,
    StartPointCategory,
)

BONANJO_CO = GeoPoint(4.0511, 9.7679)

REGION_HUBS = [
    # (region, lat, lng, clients)
    ("Adamaoua", 6.5000, 12.5000, 45),
    ("Centre", 3.8480, 11.5021, 1089),
    ("Est", 4.5000, 14.0000, 78),
    ("Extreme-Nord", 10.5000, 14.5000, 123),
    ("Littoral", 4.0511, 9.7679, 1247),
    ("Nord", 8.5000, 13.5000, 156),
    ("Nord-Ouest", 6.2000, 10.2000, 234),
    ("Ouest", 5.4737, 10.4176, 345),
    ("Sud", 2.9167, 11.5167, 89),
    ("Sud-Ouest", 4.1500, 9.2500, 167),
]


def demo_start_points() -> list[StartPoint]:
    return [
        StartPoint(
            id="CO-DOUALA-01",
            name="Central Office Bonanjo",
            category=StartPointCategory.CENTRAL_OFFICE,
            location=BONANJO_CO,
        ),
        StartPoint(
            id="SPL-MAKEPE-01",
            name="Optical Splice Makepe",
            category=StartPointCategory.OPTICAL_SPLICE,
            location=GeoPoint(4.0661, 9.7529),
        ),
        StartPoint(
            id="JB-AKWA-01",
            name="Junction Box Akwa",
            category=StartPointCategory.JUNCTION_BOX,
            location=GeoPoint(4.0411, 9.7779),
        ),
    ]


def _slug(region: str) -> str:
    return "".join(ch for ch in region.lower() if ch.isalpha())


def demo_network_elements() -> list[NetworkElement]:
    """Start points of the Douala area plus one DSLAM and one backbone link per region."""
    elements = [
        NetworkElement(
            type=ElementType(sp.category.value),
            name=sp.name,
            location=sp.location,
            status=ElementStatus.ACTIVE,
            network_layer=(
                NetworkLayer.BACKBONE
                if sp.category is StartPointCategory.CENTRAL_OFFICE
                else NetworkLayer.ACCESS
            ),
            criticality=Criticality.HIGH,
            region="Littoral",
            department="Wouri",
            commune="Douala 1er",
            properties={"reference": sp.id},
        )
        for sp in demo_start_points()
    ]

    for index, (region, lat, lng, clients) in enumerate(REGION_HUBS, start=1):
        elements.append(
            NetworkElement(
                type=ElementType.DSLAM,
                name=f"Main DSLAM {region}",
                location=GeoPoint(lat, lng),
                status=ElementStatus.ACTIVE,
                network_layer=NetworkLayer.ACCESS,
                criticality=Criticality.HIGH,
                region=region,
                department="Principal",
                commune="Centre-ville",
                properties={
                    "reference": f"dslam-{_slug(region)}-001",
                    "model": "MA5608T",
                    "manufacturer": "Huawei",
                    "serial_number": f"HW-MA5608T-{index:03d}",
                    "capacity": 1000,
                    "current_load": clients,
                    "ports": 48,
                },
            )
        )
        elements.append(
            NetworkElement(
                type=ElementType.CABLE,
                name=f"Backbone Link {region}",
                location=GeoPoint(lat + 0.01, lng + 0.01),
                status=ElementStatus.ACTIVE,
                network_layer=NetworkLayer.BACKBONE,
                criticality=Criticality.CRITICAL,
                region=region,
                department="Principal",
                commune="Centre-ville",
                properties={
                    "reference": f"cable-backbone-{_slug(region)}-001",
                    "fiber_count": 144,
                    "cable_type": "single_mode",
                    "installation": InstallationType.UNDERGROUND.value,
                    "manufacturer": "Corning",
                    "network_type": "backbone_national",
                },
            )
        )
    return elements


def demo_connection_inputs() -> list[ConnectionPathInput]:
    bonanjo, makepe, _ = demo_start_points()
    return [
        ConnectionPathInput(
            start_point=bonanjo,
            client_location=GeoPoint(4.0611, 9.7579),
            waypoints=(GeoPoint(4.0561, 9.7629),),
            installation_type=InstallationType.AERIAL.value,
            client_name="Jean Mballa - Residential",
            client_id="CL-001",
            fiber_count=1,
            region="Littoral",
            department="Wouri",
            commune="Douala 1er",
        ),
        ConnectionPathInput(
            start_point=makepe,
            client_location=GeoPoint(4.0711, 9.7479),
            waypoints=(GeoPoint(4.0686, 9.7504),),
            installation_type=InstallationType.UNDERGROUND.value,
            client_name="CAMTECH SARL - Business",
            client_id="CL-002",
            fiber_count=2,
            region="Littoral",
            department="Wouri",
            commune="Douala 5eme",
        ),
    ]
