from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/ready")
def ready(request: Request):
    service = getattr(request.app.state, "valuation_service", None)
    return {
        "status": "ready" if service is not None else "not_ready",
        "positions": len(service.positions) if service is not None else 0,
    }
