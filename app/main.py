"""
FastAPI Main Application
Serves current portfolio valuations backed by the quote fallback chain
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from pathlib import Path
import logging
from typing import AsyncGenerator

from app.config import settings
from app.core.logging import setup_logging
from app.domain.services.config_engine import ConfigEngine
from app.infrastructure.cache.valuation_cache import ValuationCache
from app.infrastructure.market_data.provider_factory import get_quote_resolver
from app.services.portfolio_service import PortfolioValuationService

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent


def _positions_path() -> Path:
    path = Path(settings.POSITIONS_FILE)
    return path if path.is_absolute() else PROJECT_ROOT / path


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager
    Builds the valuation pipeline on startup, releases HTTP clients on shutdown
    """
    setup_logging(
        settings.LOG_LEVEL,
        log_file=settings.LOG_FILE,
        max_bytes=settings.LOG_MAX_BYTES,
        backup_count=settings.LOG_BACKUP_COUNT,
    )

    logger.info("=" * 60)
    logger.info("🚀 Starting Portfolio Pulse")
    logger.info("=" * 60)

    positions_path = _positions_path()
    config_engine = ConfigEngine(positions_path.parent, positions_path.name)
    config_engine.load_all()
    logger.info(f"📊 Loaded {len(config_engine.positions)} positions from {positions_path}")

    pacing = settings.scrape_pacing_seconds(len(config_engine.universe.tickers))
    if pacing >= settings.SCRAPE_TIMEOUT_SECONDS:
        logger.warning(
            f"⚠️  SCRAPE_TIMEOUT_SECONDS={settings.SCRAPE_TIMEOUT_SECONDS} does not cover "
            f"{pacing:.1f}s of per-symbol pacing; scraping sources will time out"
        )

    resolver = get_quote_resolver(settings)
    logger.info(f"🔗 Quote sources (priority order): {', '.join(resolver.source_names) or 'none'}")

    app.state.valuation_service = PortfolioValuationService(
        positions=config_engine.positions,
        resolver=resolver,
        refresh_interval_seconds=settings.REFRESH_INTERVAL_SECONDS,
        cache=ValuationCache(),
    )
    logger.info(f"⏱️  Refresh interval: {settings.REFRESH_INTERVAL_SECONDS}s")

    yield

    logger.info("🛑 Shutting down Portfolio Pulse...")
    await resolver.close()
    logger.info("👋 Shutdown complete")


# Create FastAPI app
app = FastAPI(
    title="Portfolio Pulse",
    description="Live valuations for a static stock portfolio",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)


# Import and include routers
from app.api.routes import health, market_data, portfolio  # noqa: E402

app.include_router(health.router, tags=["Health"])
app.include_router(portfolio.router, prefix="/api/v1/portfolio", tags=["Portfolio"])
app.include_router(market_data.router, prefix="/api/v1/market-data", tags=["Market Data"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host=settings.API_HOST, port=settings.API_PORT, reload=settings.DEBUG)
