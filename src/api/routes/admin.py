"""
Admin / observability endpoints
===============================

GET /api/v1/admin/health      -- simple health check
GET /api/v1/admin/cost-model  -- installation rates currently in effect
"""

from fastapi import APIRouter, Depends, Request

from src.api.dependencies import get_cost_model
from src.api.middleware import limiter
from src.api.schemas import CostModelResponse, HealthResponse
from src.config import settings
from src.domain.costing import CostModel

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health():
    return HealthResponse()


@router.get(
    "/cost-model",
    response_model=CostModelResponse,
    summary="Cost per meter by installation type",
)
@limiter.limit(settings.rate_limit)
async def cost_model(
    request: Request,
    model: CostModel = Depends(get_cost_model),
):
    return CostModelResponse(currency=model.currency, rates=dict(model.rates))
