"""
Network inventory endpoints
===========================

POST   /api/v1/network-elements        -- add an element
GET    /api/v1/network-elements        -- list (type, region, status, bounding box)
GET    /api/v1/network-elements/{id}   -- one element
PATCH  /api/v1/network-elements/{id}   -- partial update
DELETE /api/v1/network-elements/{id}   -- hard delete

Connections that reference an element are not checked on update or delete.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_db
from src.api.middleware import limiter
from src.api.schemas import (
    NetworkElementCreateRequest,
    NetworkElementResponse,
    NetworkElementUpdateRequest,
)
from src.config import settings
from src.infrastructure.repositories import NetworkElementRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/network-elements", tags=["network-elements"])


async def _get_or_404(repo: NetworkElementRepository, element_id: int):
    row = await repo.get_by_id(element_id)
    if not row:
        raise HTTPException(status_code=404, detail="Network element not found")
    return row


@router.post(
    "",
    status_code=201,
    response_model=NetworkElementResponse,
    summary="Add a network element",
)
@limiter.limit(settings.rate_limit)
async def create_element(
    request: Request,
    body: NetworkElementCreateRequest,
    db: AsyncSession = Depends(get_db),
):
    row = await NetworkElementRepository(db).create(body.to_domain())
    logger.info("Created %s element %d (%s)", row.type, row.id, row.name)
    return row


@router.get(
    "",
    response_model=list[NetworkElementResponse],
    summary="List network elements",
)
@limiter.limit(settings.rate_limit)
async def list_elements(
    request: Request,
    type: Optional[str] = None,
    region: Optional[str] = None,
    status: Optional[str] = None,
    north: Optional[float] = Query(None, ge=-90, le=90),
    south: Optional[float] = Query(None, ge=-90, le=90),
    east: Optional[float] = Query(None, ge=-180, le=180),
    west: Optional[float] = Query(None, ge=-180, le=180),
    db: AsyncSession = Depends(get_db),
):
    return await NetworkElementRepository(db).get_elements(
        type=type,
        region=region,
        status=status,
        north=north,
        south=south,
        east=east,
        west=west,
    )


@router.get(
    "/{element_id}",
    response_model=NetworkElementResponse,
    summary="Get a network element",
)
@limiter.limit(settings.rate_limit)
async def get_element(
    request: Request,
    element_id: int,
    db: AsyncSession = Depends(get_db),
):
    return await _get_or_404(NetworkElementRepository(db), element_id)


@router.patch(
    "/{element_id}",
    response_model=NetworkElementResponse,
    summary="Update a network element",
)
@limiter.limit(settings.rate_limit)
async def update_element(
    request: Request,
    element_id: int,
    body: NetworkElementUpdateRequest,
    db: AsyncSession = Depends(get_db),
):
    repo = NetworkElementRepository(db)
    row = await _get_or_404(repo, element_id)

    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    if body.location is not None:
        changes["location"] = body.location.to_domain()

    return await repo.update(row, changes)


@router.delete(
    "/{element_id}",
    status_code=204,
    summary="Delete a network element",
)
@limiter.limit(settings.rate_limit)
async def delete_element(
    request: Request,
    element_id: int,
    db: AsyncSession = Depends(get_db),
):
    repo = NetworkElementRepository(db)
    row = await _get_or_404(repo, element_id)
    await repo.delete(row)
    logger.info("Deleted network element %d", element_id)
    return Response(status_code=204)
