from decimal import Decimal
from typing import AsyncGenerator, Dict, List

import pytest
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport

from app.api.routes import health, market_data, portfolio
from app.domain.models import Position
from app.infrastructure.cache.valuation_cache import ValuationCache
from app.infrastructure.market_data.exceptions import SourceUnavailable
from app.infrastructure.market_data.provider_chain import ChainedQuoteResolver
from app.infrastructure.market_data.types import Quote
from app.services.portfolio_service import PortfolioValuationService


class FakeQuoteSource:
    """Quote source returning canned quotes (or failing) and counting calls."""

    def __init__(self, name: str, quotes: Dict[str, Quote] = None, error: Exception = None, timeout_seconds: float = 5.0):
        self.name = name
        self.timeout_seconds = timeout_seconds
        self._quotes = quotes or {}
        self._error = error
        self.calls: List[List[str]] = []
        self.closed = False

    async def fetch(self, tickers: List[str]) -> Dict[str, Quote]:
        self.calls.append(list(tickers))
        if self._error is not None:
            raise self._error
        return dict(self._quotes)

    async def close(self) -> None:
        self.closed = True


class StubRandom:
    """Returns queued values from uniform(), ignoring the bounds."""

    def __init__(self, *values: float):
        self._values = list(values)

    def uniform(self, a: float, b: float) -> float:
        return self._values.pop(0)


class FixedClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def positions() -> List[Position]:
    return [
        Position(id=1, name="HDFC Bank", ticker="HDFCBANK", sector="Financials", quantity=10, buy_price=Decimal("100")),
        Position(id=2, name="Tata Power", ticker="TATAPOWER", sector="Power", quantity=20, buy_price=Decimal("50")),
        Position(id=3, name="ICICI Bank", ticker="ICICIBANK", sector="Financials", quantity=5, buy_price=Decimal("200")),
    ]


@pytest.fixture
def fake_source_cls():
    return FakeQuoteSource


@pytest.fixture
def stub_random_cls():
    return StubRandom


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def healthy_source() -> FakeQuoteSource:
    return FakeQuoteSource(
        "primary",
        quotes={
            "HDFCBANK": Quote("HDFCBANK", Decimal("120"), Decimal("25")),
            "TATAPOWER": Quote("TATAPOWER", Decimal("45"), Decimal("30")),
            "ICICIBANK": Quote("ICICIBANK", Decimal("210"), Decimal("18.5")),
        },
    )


@pytest.fixture
def valuation_service(positions, healthy_source, clock) -> PortfolioValuationService:
    resolver = ChainedQuoteResolver([
        FakeQuoteSource("down", error=SourceUnavailable("down", "HTTP 503")),
        healthy_source,
    ])
    return PortfolioValuationService(
        positions=positions,
        resolver=resolver,
        refresh_interval_seconds=15,
        cache=ValuationCache(clock=clock),
    )


@pytest.fixture
def app(valuation_service) -> FastAPI:
    app = FastAPI()
    app.include_router(health.router, tags=["Health"])
    app.include_router(portfolio.router, prefix="/api/v1/portfolio", tags=["Portfolio"])
    app.include_router(market_data.router, prefix="/api/v1/market-data", tags=["Market Data"])
    app.state.valuation_service = valuation_service
    return app


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
