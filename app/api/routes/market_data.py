"""
Market Data routes - quote source status.
"""

from dataclasses import asdict

from fastapi import APIRouter, Depends

from app.api.dependencies import get_valuation_service
from app.domain.schemas.portfolio import MarketDataStatusSchema
from app.services.portfolio_service import PortfolioValuationService

router = APIRouter()


@router.get("/status", response_model=MarketDataStatusSchema)
async def market_data_status(service: PortfolioValuationService = Depends(get_valuation_service)):
    """Configured source order, last outcome per source and where each price came from."""
    resolver = service.resolver
    trace = resolver.get_last_sources()
    return MarketDataStatusSchema(
        sources=resolver.source_names,
        last_outcomes=trace["sources"],
        price_sources=trace["prices"],
        cache=asdict(service.cache.stats),
    )
