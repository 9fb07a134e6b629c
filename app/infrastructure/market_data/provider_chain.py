"""
Provider chain - try sources in priority order, simulate when all fail.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence, Tuple

from app.domain.models import Position, ValuationRecord
from app.domain.services.valuation_engine import ValuationEngine
from app.infrastructure.market_data.exceptions import (
    AllSourcesExhausted,
    NoQuoteForTicker,
    SourceUnavailable,
)
from app.infrastructure.market_data.simulator import SimulatedQuoteGenerator
from app.infrastructure.market_data.types import Quote, QuoteSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceOutcome:
    ok: bool
    detail: str
    at: datetime


class ChainedQuoteResolver:
    """
    Resolve valuations for a batch of positions.

    Sources are tried one at a time in list order. The first source with at
    least one priced quote wins and no other source is consulted; positions it
    has no price for are valued at buy price. When every source fails, every
    position gets a simulated quote. resolve() never raises.
    """

    def __init__(
        self,
        sources: Sequence[QuoteSource],
        simulator: Optional[SimulatedQuoteGenerator] = None,
        engine: Optional[ValuationEngine] = None,
    ):
        self.sources = list(sources)
        self.simulator = simulator or SimulatedQuoteGenerator()
        self.engine = engine or ValuationEngine()
        self.last_price_sources: Dict[str, str] = {}
        self.last_outcomes: Dict[str, SourceOutcome] = {}

    @property
    def source_names(self) -> List[str]:
        return [source.name for source in self.sources]

    def get_last_sources(self) -> Dict[str, object]:
        return {
            "prices": dict(self.last_price_sources),
            "sources": {
                name: {"ok": o.ok, "detail": o.detail, "at": o.at.isoformat()}
                for name, o in self.last_outcomes.items()
            },
        }

    async def resolve(self, positions: Sequence[Position]) -> List[ValuationRecord]:
        if not positions:
            return []

        tickers = list(dict.fromkeys(p.ticker for p in positions))
        try:
            source_name, quotes = await self._first_available(tickers)
        except AllSourcesExhausted as exc:
            logger.warning(f"{exc}; serving simulated quotes for {len(positions)} positions")
            records = self._simulate(positions)
        else:
            records = [self._value(position, quotes, source_name) for position in positions]

        self.last_price_sources = {r.ticker: r.price_source for r in records}
        return self.engine.apply_portfolio_share(records)

    async def _first_available(self, tickers: List[str]) -> Tuple[str, Dict[str, Quote]]:
        for source in self.sources:
            try:
                quotes = await asyncio.wait_for(source.fetch(tickers), timeout=source.timeout_seconds)
            except asyncio.TimeoutError:
                self._record(source.name, False, f"timed out after {source.timeout_seconds}s")
                continue
            except SourceUnavailable as exc:
                self._record(source.name, False, exc.reason)
                continue
            except Exception as exc:
                logger.exception(f"Quote source '{source.name}' raised unexpectedly")
                self._record(source.name, False, f"unexpected error: {exc!r}")
                continue

            priced = sum(1 for q in (quotes or {}).values() if q.has_price)
            if not priced:
                self._record(source.name, False, "no usable quotes")
                continue

            self._record(source.name, True, f"{priced}/{len(tickers)} quotes")
            return source.name, quotes

        raise AllSourcesExhausted(self.source_names)

    def _value(self, position: Position, quotes: Dict[str, Quote], source_name: str) -> ValuationRecord:
        try:
            quote = self._require_quote(position.ticker, quotes, source_name)
        except NoQuoteForTicker as exc:
            logger.debug(f"{exc}; using buy price")
            return self.engine.compute(position, None, None, "buy_price")
        return self.engine.compute(position, quote.price, quote.pe_ratio, source_name)

    @staticmethod
    def _require_quote(ticker: str, quotes: Dict[str, Quote], source_name: str) -> Quote:
        quote = quotes.get(ticker)
        if quote is None or not quote.has_price:
            raise NoQuoteForTicker(ticker, source_name)
        return quote

    def _simulate(self, positions: Sequence[Position]) -> List[ValuationRecord]:
        records = []
        for position in positions:
            quote = self.simulator.simulate(position)
            records.append(self.engine.compute(position, quote.price, quote.pe_ratio, self.simulator.name))
        return records

    def _record(self, name: str, ok: bool, detail: str) -> None:
        self.last_outcomes[name] = SourceOutcome(ok=ok, detail=detail, at=datetime.now(tz=timezone.utc))
        if ok:
            logger.info(f"Quote source '{name}' succeeded: {detail}")
        else:
            logger.warning(f"Quote source '{name}' unavailable: {detail}")

    async def close(self) -> None:
        for source in self.sources:
            try:
                await source.close()
            except Exception as exc:
                logger.debug(f"Closing quote source '{source.name}' failed: {exc}")
