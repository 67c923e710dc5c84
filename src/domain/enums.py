"""Domain enumerations and state-transition rules."""

import enum


class ConnectionStatus(str, enum.Enum):
    SIMULATED = "simulated"
    APPROVED = "approved"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


# State machine: maps current status -> set of valid next statuses
CONNECTION_TRANSITIONS: dict[ConnectionStatus, set[ConnectionStatus]] = {
    ConnectionStatus.SIMULATED: {ConnectionStatus.APPROVED},
    ConnectionStatus.APPROVED: {ConnectionStatus.IN_PROGRESS},
    ConnectionStatus.IN_PROGRESS: {ConnectionStatus.COMPLETED},
    ConnectionStatus.COMPLETED: set(),
}


class InstallationType(str, enum.Enum):
    AERIAL = "aerial"
    UNDERGROUND = "underground"
    MIXED = "mixed"


class StartPointCategory(str, enum.Enum):
    CENTRAL_OFFICE = "central_office"
    OPTICAL_SPLICE = "optical_splice"
    JUNCTION_BOX = "junction_box"


class ElementType(str, enum.Enum):
    # Passive plant
    CABLE = "cable"
    POLE = "pole"
    CONDUIT = "conduit"
    CHAMBER = "chamber"
    # Aggregation points
    CENTRAL_OFFICE = "central_office"
    OPTICAL_SPLICE = "optical_splice"
    JUNCTION_BOX = "junction_box"
    # Active / distribution equipment
    DSLAM = "dslam"
    DISTRIBUTION_POINT = "distribution_point"
    SPLITTER = "splitter"
    FAT = "fat"
    ODF = "odf"
    ROUTER = "router"
    SWITCH = "switch"
    POP = "pop"
    CLIENT_EQUIPMENT = "client_equipment"
    CPE = "cpe"


START_POINT_ELEMENT_TYPES: frozenset[ElementType] = frozenset(
    ElementType(c.value) for c in StartPointCategory
)


class ElementStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    MAINTENANCE = "maintenance"
    FAULT = "fault"
    PLANNED = "planned"


class NetworkLayer(str, enum.Enum):
    BACKBONE = "backbone"
    METROPOLITAN = "metropolitan"
    ACCESS = "access"
    CLIENT = "client"


class Criticality(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"
