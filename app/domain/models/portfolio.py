"""
DOMAIN MODELS - POSITIONS & VALUATIONS

Immutable structures representing static holdings and their valuations.
No network access. No caching.
"""

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class Position:
    """
    A static holding supplied by configuration.
    """
    id: int
    name: str
    ticker: str
    sector: str
    quantity: int
    buy_price: Decimal

    def __post_init__(self) -> None:
        if not self.ticker:
            raise ValueError(f"Position {self.id}: ticker is required")
        if self.quantity <= 0:
            raise ValueError(f"Position {self.id}: quantity must be positive, got {self.quantity}")
        if self.buy_price <= 0:
            raise ValueError(f"Position {self.id}: buy_price must be positive, got {self.buy_price}")

    @property
    def investment_value(self) -> Decimal:
        return self.buy_price * self.quantity


@dataclass(frozen=True)
class ValuationRecord:
    """
    One position valued at a resolved market price.

    price_source names where current_price came from: a quote source name,
    "simulated", or "buy_price" when the winning source had no quote.
    """
    id: int
    name: str
    ticker: str
    sector: str
    quantity: int
    buy_price: Decimal
    current_price: Decimal
    pe_ratio: Decimal
    investment_value: Decimal
    current_value: Decimal
    gain_loss: Decimal
    portfolio_share_percent: Decimal
    price_source: str


@dataclass(frozen=True)
class SectorSummary:
    sector: str
    investment_value: Decimal
    current_value: Decimal

    @property
    def gain_loss(self) -> Decimal:
        return self.current_value - self.investment_value


@dataclass(frozen=True)
class PortfolioTotals:
    investment_value: Decimal
    current_value: Decimal

    @property
    def gain_loss(self) -> Decimal:
        return self.current_value - self.investment_value
