from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from app.domain.models import PortfolioTotals, SectorSummary, ValuationRecord


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ValuationRecordSchema(CamelModel):
    id: int
    name: str
    ticker: str
    sector: str
    quantity: int
    buy_price: float
    current_price: float
    pe_ratio: float
    investment_value: float
    current_value: float
    gain_loss: float
    portfolio_share_percent: float
    price_source: str

    @classmethod
    def from_record(cls, record: ValuationRecord) -> "ValuationRecordSchema":
        return cls(
            id=record.id,
            name=record.name,
            ticker=record.ticker,
            sector=record.sector,
            quantity=record.quantity,
            buy_price=float(record.buy_price),
            current_price=float(record.current_price),
            pe_ratio=float(record.pe_ratio),
            investment_value=float(record.investment_value),
            current_value=float(record.current_value),
            gain_loss=float(record.gain_loss),
            portfolio_share_percent=float(record.portfolio_share_percent),
            price_source=record.price_source,
        )


class SectorSummarySchema(CamelModel):
    sector: str
    investment_value: float
    current_value: float
    gain_loss: float

    @classmethod
    def from_summary(cls, summary: SectorSummary) -> "SectorSummarySchema":
        return cls(
            sector=summary.sector,
            investment_value=float(summary.investment_value),
            current_value=float(summary.current_value),
            gain_loss=float(summary.gain_loss),
        )


class PortfolioSummarySchema(CamelModel):
    investment_value: float
    current_value: float
    gain_loss: float
    sectors: List[SectorSummarySchema]
    as_of: Optional[datetime] = None

    @classmethod
    def build(
        cls,
        totals: PortfolioTotals,
        sectors: List[SectorSummary],
        as_of: Optional[datetime],
    ) -> "PortfolioSummarySchema":
        return cls(
            investment_value=float(totals.investment_value),
            current_value=float(totals.current_value),
            gain_loss=float(totals.gain_loss),
            sectors=[SectorSummarySchema.from_summary(s) for s in sectors],
            as_of=as_of,
        )


class RefreshConfigSchema(CamelModel):
    refresh_interval_seconds: int


class MarketDataStatusSchema(CamelModel):
    sources: List[str]
    last_outcomes: Dict[str, Dict[str, object]]
    price_sources: Dict[str, str]
    cache: Dict[str, int]
