"""
Portfolio API Routes
Current valuations for the configured positions
"""

from typing import List

from fastapi import APIRouter, Depends, Response

from app.api.dependencies import get_valuation_service
from app.domain.schemas.portfolio import (
    PortfolioSummarySchema,
    RefreshConfigSchema,
    ValuationRecordSchema,
)
from app.services.portfolio_service import PortfolioValuationService

router = APIRouter()


def _cache_headers(response: Response, service: PortfolioValuationService) -> None:
    response.headers["Cache-Control"] = f"max-age={int(service.refresh_interval_seconds)}"


@router.get("", response_model=List[ValuationRecordSchema])
async def current_valuations(
    response: Response,
    service: PortfolioValuationService = Depends(get_valuation_service),
):
    """
    Valuation record for every configured position, in configuration order.

    Always 200: when no upstream source answers, prices are simulated.
    """
    records = await service.get_current_valuations()
    _cache_headers(response, service)
    return [ValuationRecordSchema.from_record(r) for r in records]


@router.get("/summary", response_model=PortfolioSummarySchema)
async def portfolio_summary(
    response: Response,
    service: PortfolioValuationService = Depends(get_valuation_service),
):
    """Portfolio totals and per-sector breakdown of the current batch."""
    records = await service.get_current_valuations()
    _cache_headers(response, service)
    return PortfolioSummarySchema.build(
        totals=service.engine.totals(records),
        sectors=service.engine.summarize_by_sector(records),
        as_of=service.as_of,
    )


@router.get("/config", response_model=RefreshConfigSchema)
async def refresh_config(service: PortfolioValuationService = Depends(get_valuation_service)):
    """Polling period for dashboards; equals the cache max age."""
    return RefreshConfigSchema(refresh_interval_seconds=int(service.refresh_interval_seconds))
