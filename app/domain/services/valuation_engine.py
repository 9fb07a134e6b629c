"""
VALUATION ENGINE
Turn a position and a resolved price into valuation figures

RESPONSIBILITIES:
- Per-position investment / current value / gain-loss
- Portfolio share over the whole batch (second pass)
- Sector and portfolio totals

RULES:
❌ No network access
❌ No failure modes (every input yields a record)
✅ Negative or missing price falls back to buy price
✅ Missing P/E reported as 0
"""

from dataclasses import replace
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional, Sequence

from app.domain.models import (
    PortfolioTotals,
    Position,
    SectorSummary,
    ValuationRecord,
)

HUNDRED = Decimal("100")
SHARE_QUANT = Decimal("0.01")


class ValuationEngine:
    """
    Valuation Engine
    Pure arithmetic over positions and prices
    """

    def compute(
        self,
        position: Position,
        price: Optional[Decimal],
        pe_ratio: Optional[Decimal],
        price_source: str,
    ) -> ValuationRecord:
        """
        Value a single position.

        Args:
            position: Static holding
            price: Resolved market price (None when no quote exists)
            pe_ratio: Trailing P/E (None when unknown)
            price_source: Provenance label for the price

        Returns:
            ValuationRecord with portfolio_share_percent left at 0;
            call apply_portfolio_share() on the full batch afterwards.
        """
        if price is None or price < 0:
            price = position.buy_price
            price_source = "buy_price"
        if pe_ratio is None or pe_ratio < 0:
            pe_ratio = Decimal("0")

        investment_value = position.investment_value
        current_value = price * position.quantity

        return ValuationRecord(
            id=position.id,
            name=position.name,
            ticker=position.ticker,
            sector=position.sector,
            quantity=position.quantity,
            buy_price=position.buy_price,
            current_price=price,
            pe_ratio=pe_ratio,
            investment_value=investment_value,
            current_value=current_value,
            gain_loss=current_value - investment_value,
            portfolio_share_percent=Decimal("0"),
            price_source=price_source,
        )

    def apply_portfolio_share(self, records: Sequence[ValuationRecord]) -> List[ValuationRecord]:
        """
        Fill portfolio_share_percent for every record of a batch.

        Shares are 0 for all records when the portfolio is worth nothing.
        """
        total = sum((r.current_value for r in records), Decimal("0"))
        if total <= 0:
            return [replace(r, portfolio_share_percent=Decimal("0")) for r in records]

        return [
            replace(
                r,
                portfolio_share_percent=(r.current_value / total * HUNDRED).quantize(
                    SHARE_QUANT, rounding=ROUND_HALF_UP
                ),
            )
            for r in records
        ]

    def summarize_by_sector(self, records: Sequence[ValuationRecord]) -> List[SectorSummary]:
        """Aggregate records by sector, keeping first-seen sector order."""
        invested: Dict[str, Decimal] = {}
        value: Dict[str, Decimal] = {}
        for record in records:
            invested[record.sector] = invested.get(record.sector, Decimal("0")) + record.investment_value
            value[record.sector] = value.get(record.sector, Decimal("0")) + record.current_value

        return [
            SectorSummary(sector=sector, investment_value=invested[sector], current_value=value[sector])
            for sector in invested
        ]

    def totals(self, records: Sequence[ValuationRecord]) -> PortfolioTotals:
        return PortfolioTotals(
            investment_value=sum((r.investment_value for r in records), Decimal("0")),
            current_value=sum((r.current_value for r in records), Decimal("0")),
        )
