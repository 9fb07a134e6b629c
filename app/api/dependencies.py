from fastapi import HTTPException, Request

from app.services.portfolio_service import PortfolioValuationService


def get_valuation_service(request: Request) -> PortfolioValuationService:
    service = getattr(request.app.state, "valuation_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Valuation service not initialized")
    return service
