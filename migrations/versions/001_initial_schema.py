"""Initial schema with PostGIS extension, network inventory and connections.

Revision ID: 001
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa
from geoalchemy2 import Geometry


revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Enable PostGIS extension
    op.execute("CREATE EXTENSION IF NOT EXISTS postgis")

    # ── network_elements ──────────────────────────────────────────────
    op.create_table(
        "network_elements",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("type", sa.String(40), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("location", Geometry("POINT", srid=4326), nullable=False),
        sa.Column("latitude", sa.Float, nullable=False),
        sa.Column("longitude", sa.Float, nullable=False),
        sa.Column("h3_cell", sa.String(20), nullable=True),
        sa.Column("status", sa.String(20), default="planned", nullable=False),
        sa.Column("network_layer", sa.String(20), default="access", nullable=False),
        sa.Column("criticality", sa.String(20), default="medium", nullable=False),
        sa.Column("region", sa.String(80), default=""),
        sa.Column("department", sa.String(80), default=""),
        sa.Column("commune", sa.String(80), default=""),
        sa.Column("properties", sa.JSON, default=dict),
        sa.Column("source_connection_id", sa.Integer, nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )
    op.create_index(
        "idx_elements_location",
        "network_elements",
        ["location"],
        postgresql_using="gist",
    )
    op.create_index("idx_elements_type", "network_elements", ["type"])
    op.create_index("idx_elements_status", "network_elements", ["status"])
    op.create_index("idx_elements_region", "network_elements", ["region"])
    op.create_index("idx_elements_cell", "network_elements", ["h3_cell"])

    # ── connection_paths ──────────────────────────────────────────────
    op.create_table(
        "connection_paths",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("client_id", sa.String(64), nullable=True),
        sa.Column("client_name", sa.String(200), nullable=False),
        sa.Column("start_point_id", sa.String(64), nullable=False),
        sa.Column("start_point_name", sa.String(200), nullable=False),
        sa.Column("start_point_category", sa.String(40), nullable=False),
        sa.Column("start_lat", sa.Float, nullable=False),
        sa.Column("start_lng", sa.Float, nullable=False),
        sa.Column(
            "client_point", Geometry("POINT", srid=4326), nullable=False
        ),
        sa.Column("client_lat", sa.Float, nullable=False),
        sa.Column("client_lng", sa.Float, nullable=False),
        sa.Column("waypoints", sa.JSON, nullable=False),
        sa.Column("installation_type", sa.String(20), nullable=False),
        sa.Column("fiber_count", sa.Integer, default=1, nullable=False),
        sa.Column("total_distance_m", sa.Float, nullable=False),
        sa.Column("estimated_cost", sa.Float, nullable=False),
        sa.Column("currency", sa.String(8), default="XAF", nullable=False),
        sa.Column("status", sa.String(20), default="simulated", nullable=False),
        sa.Column("idempotency_key", sa.String(64), unique=True, nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )
    op.create_index(
        "idx_connections_client_point",
        "connection_paths",
        ["client_point"],
        postgresql_using="gist",
    )
    op.create_index("idx_connections_status", "connection_paths", ["status"])
    op.create_index(
        "idx_connections_idempotency", "connection_paths", ["idempotency_key"]
    )


def downgrade() -> None:
    op.drop_table("connection_paths")
    op.drop_table("network_elements")
