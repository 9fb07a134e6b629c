"""
Portfolio valuation service.

Entry point for "current valuations": serves the cached batch while fresh,
otherwise resolves quotes for every configured position once.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from app.domain.models import Position, ValuationRecord
from app.domain.services.valuation_engine import ValuationEngine
from app.infrastructure.cache.valuation_cache import ValuationCache
from app.infrastructure.market_data.provider_chain import ChainedQuoteResolver

logger = logging.getLogger(__name__)

CACHE_KEY = "portfolio"


class PortfolioValuationService:
    def __init__(
        self,
        positions: Sequence[Position],
        resolver: ChainedQuoteResolver,
        refresh_interval_seconds: float,
        cache: Optional[ValuationCache[ValuationRecord]] = None,
        engine: Optional[ValuationEngine] = None,
    ):
        self.positions = tuple(positions)
        self.resolver = resolver
        self.refresh_interval_seconds = refresh_interval_seconds
        self.cache = cache or ValuationCache()
        self.engine = engine or ValuationEngine()
        self.as_of: Optional[datetime] = None

    async def get_current_valuations(self) -> List[ValuationRecord]:
        batch = await self.cache.get(CACHE_KEY, self.refresh_interval_seconds, self._refresh)
        return list(batch)

    async def _refresh(self) -> List[ValuationRecord]:
        records = await self.resolver.resolve(self.positions)
        self.as_of = datetime.now(tz=timezone.utc)
        logger.info(f"Valued {len(records)} positions")
        return records
