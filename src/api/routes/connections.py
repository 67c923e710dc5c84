"""
Connection simulator endpoints
==============================

POST   /api/v1/connections/preview       -- compute a simulation without saving
POST   /api/v1/connections               -- compute and save a simulation
GET    /api/v1/connections               -- list (status filter, text search)
GET    /api/v1/connections/summary       -- totals across saved simulations
GET    /api/v1/connections/start-points  -- nearest aggregation points to a client
GET    /api/v1/connections/{id}          -- one saved simulation
PATCH  /api/v1/connections/{id}/status   -- advance the lifecycle
DELETE /api/v1/connections/{id}          -- hard delete
"""

from __future__ import annotations

import logging
from typing import Optional

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_cost_model, get_db
from src.api.middleware import limiter
from src.api.schemas import (
    ConnectionCreateRequest,
    ConnectionCreatedResponse,
    ConnectionPreviewResponse,
    ConnectionResponse,
    ConnectionStatusUpdate,
    ConnectionSummaryResponse,
    NetworkElementResponse,
    StartPointCandidateResponse,
)
from src.config import settings
from src.domain.builder import ConnectionPathInput, build_connection_path
from src.domain.costing import CostModel
from src.domain.entities import GeoPoint
from src.domain.spatial import rank_start_points, search_cells
from src.infrastructure.locks import DistributedLock
from src.infrastructure.redis_client import get_redis
from src.infrastructure.repositories import (
    ConnectionPathRepository,
    NetworkElementRepository,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/connections", tags=["connections"])


def _to_input(body: ConnectionCreateRequest) -> ConnectionPathInput:
    return ConnectionPathInput(
        start_point=body.start_point.to_domain() if body.start_point else None,
        client_location=(
            body.client_location.to_domain() if body.client_location else None
        ),
        waypoints=tuple(p.to_domain() for p in body.waypoints),
        installation_type=body.installation_type,
        fiber_count=body.fiber_count,
        client_name=body.client_name,
        client_id=body.client_id,
        region=body.region,
        department=body.department,
        commune=body.commune,
    )


def _created_response(row, elements) -> ConnectionCreatedResponse:
    base = ConnectionResponse.model_validate(row)
    return ConnectionCreatedResponse(
        **base.model_dump(),
        last_mile_elements=[NetworkElementResponse.model_validate(e) for e in elements],
    )


async def _get_or_404(repo: ConnectionPathRepository, connection_id: int):
    row = await repo.get_by_id(connection_id)
    if not row:
        raise HTTPException(status_code=404, detail="Connection not found")
    return row


@router.post(
    "/preview",
    response_model=ConnectionPreviewResponse,
    summary="Compute distance, cost and planned elements without saving",
)
@limiter.limit(settings.rate_limit)
async def preview_connection(
    request: Request,
    body: ConnectionCreateRequest,
    cost_model: CostModel = Depends(get_cost_model),
):
    path = build_connection_path(_to_input(body), cost_model)
    return ConnectionPreviewResponse.from_entity(path)


@router.post(
    "",
    status_code=201,
    response_model=ConnectionCreatedResponse,
    summary="Save a connection simulation",
    description=(
        "Builds the connection, stores it with status ``simulated`` and adds "
        "its planned last-mile elements (poles, drop cable) to the network "
        "inventory."
    ),
)
@limiter.limit(settings.rate_limit)
async def create_connection(
    request: Request,
    body: ConnectionCreateRequest,
    db: AsyncSession = Depends(get_db),
    cost_model: CostModel = Depends(get_cost_model),
):
    repo = ConnectionPathRepository(db)
    element_repo = NetworkElementRepository(db)

    # ── Idempotency guard ─────────────────────────────────────────
    if body.idempotency_key:
        existing = await repo.get_by_idempotency_key(body.idempotency_key)
        if existing:
            elements = await element_repo.get_by_source_connection(existing.id)
            return _created_response(existing, elements)

    path = build_connection_path(_to_input(body), cost_model)
    try:
        row = await repo.create(path, idempotency_key=body.idempotency_key)
    except IntegrityError:
        if not body.idempotency_key:
            raise
        # A concurrent request with the same key was saved first
        await db.rollback()
        existing = await repo.get_by_idempotency_key(body.idempotency_key)
        if existing is None:
            raise
        logger.info(
            "Idempotency key %r already used by connection %d",
            body.idempotency_key,
            existing.id,
        )
        elements = await element_repo.get_by_source_connection(existing.id)
        return _created_response(existing, elements)

    elements = []
    for element in path.last_mile_elements:
        elements.append(await element_repo.create(element, source_connection_id=row.id))

    logger.info(
        "Saved connection %d for %r: %.1f m, %.0f %s, %d planned elements",
        row.id,
        path.client_name,
        path.total_distance_m,
        path.estimated_cost,
        path.currency,
        len(elements),
    )
    return _created_response(row, elements)


@router.get(
    "",
    response_model=list[ConnectionResponse],
    summary="List saved simulations",
)
@limiter.limit(settings.rate_limit)
async def list_connections(
    request: Request,
    status: Optional[str] = None,
    search: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    return await ConnectionPathRepository(db).get_connections(
        status=status, search=search
    )


@router.get(
    "/summary",
    response_model=ConnectionSummaryResponse,
    summary="Totals across saved simulations",
)
@limiter.limit(settings.rate_limit)
async def connections_summary(
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    return await ConnectionPathRepository(db).summary()


@router.get(
    "/start-points",
    response_model=list[StartPointCandidateResponse],
    summary="Nearest aggregation points to a client location",
)
@limiter.limit(settings.rate_limit)
async def nearest_start_points(
    request: Request,
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    limit: int = Query(5, ge=1, le=50),
    db: AsyncSession = Depends(get_db),
):
    client = GeoPoint(lat, lng)
    repo = NetworkElementRepository(db)

    cells = search_cells(
        client, settings.h3_resolution, settings.start_point_search_rings
    )
    rows = await repo.get_start_point_candidates(cells)
    if not rows:
        # Nothing in the neighbourhood: rank every known start point
        rows = await repo.get_start_point_candidates()

    ranked = rank_start_points(
        client, [repo.to_start_point(r) for r in rows], limit=limit
    )
    return [
        StartPointCandidateResponse(
            id=sp.id,
            name=sp.name,
            category=sp.category,
            latitude=sp.location.latitude,
            longitude=sp.location.longitude,
            distance_m=distance,
        )
        for sp, distance in ranked
    ]


@router.get(
    "/{connection_id}",
    response_model=ConnectionResponse,
    summary="Get a saved simulation",
)
@limiter.limit(settings.rate_limit)
async def get_connection(
    request: Request,
    connection_id: int,
    db: AsyncSession = Depends(get_db),
):
    return await _get_or_404(ConnectionPathRepository(db), connection_id)


@router.patch(
    "/{connection_id}/status",
    response_model=ConnectionResponse,
    summary="Advance a simulation through its lifecycle",
    description=(
        "simulated -> approved -> in_progress -> completed. Any other move "
        "returns 409."
    ),
)
@limiter.limit(settings.rate_limit)
async def update_connection_status(
    request: Request,
    connection_id: int,
    body: ConnectionStatusUpdate,
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
):
    repo = ConnectionPathRepository(db)
    lock = DistributedLock.for_connection(
        redis, connection_id, settings.status_lock_ttl_seconds
    )
    async with lock:
        row = await _get_or_404(repo, connection_id)
        connection = repo.to_entity(row)
        previous = connection.status
        connection.transition_to(body.status)
        row = await repo.set_status(row, connection.status)
        await db.commit()

    logger.info(
        "Connection %d: %s -> %s",
        connection_id,
        previous.value,
        connection.status.value,
    )
    return row


@router.delete(
    "/{connection_id}",
    status_code=204,
    summary="Delete a saved simulation",
)
@limiter.limit(settings.rate_limit)
async def delete_connection(
    request: Request,
    connection_id: int,
    db: AsyncSession = Depends(get_db),
):
    repo = ConnectionPathRepository(db)
    row = await _get_or_404(repo, connection_id)
    await repo.delete(row)
    logger.info("Deleted connection %d", connection_id)
    return Response(status_code=204)
