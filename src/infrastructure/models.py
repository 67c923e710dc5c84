"""
SQLAlchemy ORM models  (maps to PostgreSQL + PostGIS).

Tables
------
* ``network_elements``  -- inventory of cables, poles, equipment and
  aggregation points
* ``connection_paths``  -- saved last-mile simulations

Enumerated fields are stored as their lowercase string values.

Indexes
-------
* **GIST** on geometry columns (location, client_point) for spatial queries.
* **B-Tree** on ``type``, ``status``, ``region``, ``h3_cell`` and
  ``idempotency_key`` for the list filters and the start-point search.
"""

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Float,
    Index,
    Integer,
    String,
    func,
)
from geoalchemy2 import Geometry

from .database import Base


class NetworkElementModel(Base):
    __tablename__ = "network_elements"

    id = Column(Integer, primary_key=True, autoincrement=True)
    type = Column(String(40), nullable=False)
    name = Column(String(255), nullable=False)

    # Stored as PostGIS geometry for spatial indexing
    location = Column(Geometry("POINT", srid=4326), nullable=False)
    # Also stored as plain floats for fast reads (avoids ST_X / ST_Y)
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
    # Connection that planned this element; not a foreign key, connections
    # may be deleted while their elements stay in the inventory.
    source_connection_id = Column(Integer, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        Index("idx_elements_location", "location", postgresql_using="gist"),
        Index("idx_elements_type", "type"),
        Index("idx_elements_status", "status"),
        Index("idx_elements_region", "region"),
        Index("idx_elements_cell", "h3_cell"),
    )


class ConnectionPathModel(Base):
    __tablename__ = "connection_paths"

    id = Column(Integer, primary_key=True, autoincrement=True)
    client_id = Column(String(64), nullable=True)
    client_name = Column(String(200), nullable=False)

    # Snapshot of the start point at simulation time
    start_point_id = Column(String(64), nullable=False)
    start_point_name = Column(String(200), nullable=False)
    start_point_category = Column(String(40), nullable=False)
    start_lat = Column(Float, nullable=False)
    start_lng = Column(Float, nullable=False)

    client_point = Column(Geometry("POINT", srid=4326), nullable=False)
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

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        Index("idx_connections_client_point", "client_point", postgresql_using="gist"),
        Index("idx_connections_status", "status"),
        Index("idx_connections_idempotency", "idempotency_key"),
    )
