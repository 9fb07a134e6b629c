"""
NSE India quote source
Per-symbol JSON quotes from nseindia.com

The quote API refuses requests without session cookies, so the home page is
visited before the first ticker loop and again after a 401/403.
"""

import json
import logging
from typing import Dict, Optional

import httpx

from app.infrastructure.market_data.base import PerSymbolQuoteSource, SymbolMap
from app.infrastructure.market_data.exceptions import SourceUnavailable
from app.infrastructure.market_data.types import Quote, to_decimal

logger = logging.getLogger(__name__)


def nse_symbol_rule(ticker: str) -> str:
    """NSE wants the bare symbol: RELIANCE.NS -> RELIANCE"""
    for suffix in (".NS", ".BO"):
        if ticker.upper().endswith(suffix):
            return ticker[: -len(suffix)]
    return ticker


class NSEIndiaProvider(PerSymbolQuoteSource):
    """
    NSE India quote source

    Fetches last traded price and symbol P/E for equities, one ticker at a time
    """

    name = "nse"
    SESSION_STATUSES = (401, 403)
    accept = "application/json, text/javascript, */*; q=0.01"

    def __init__(
        self,
        base_url: str = "https://www.nseindia.com",
        symbol_overrides: Optional[Dict[str, str]] = None,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.base_url = base_url.rstrip("/")
        self.quote_url = f"{self.base_url}/api/quote-equity"
        self.symbols = SymbolMap(nse_symbol_rule, symbol_overrides)
        self._headers["Referer"] = f"{self.base_url}/"
        self._warmed_up = False

    async def _prepare(self) -> None:
        """Get cookies by visiting homepage"""
        if self._warmed_up:
            return
        response = await self._get(self.base_url)
        if response.status_code != 200:
            logger.warning(f"Could not initialize NSE session: HTTP {response.status_code}")
            return
        self._warmed_up = True

    async def _fetch_one(self, ticker: str) -> Optional[Quote]:
        symbol = self.symbols.to_source(ticker)
        response = await self._get(self.quote_url, params={"symbol": symbol})
        if not self._check_status(response, symbol):
            return None

        # Some NSE responses return invalid/binary payloads
        try:
            data = json.loads(response.content.decode("utf-8"))
        except (UnicodeDecodeError, ValueError):
            logger.debug(f"NSE non-JSON or invalid payload for {symbol}")
            return None
        if not isinstance(data, dict):
            return None

        price_info = data.get("priceInfo")
        metadata = data.get("metadata")
        if not isinstance(price_info, dict):
            price_info = {}
        if not isinstance(metadata, dict):
            metadata = {}
        # Try different price fields
        price = to_decimal(
            price_info.get("lastPrice")
            or price_info.get("close")
            or data.get("lastPrice")
        )
        if price is None:
            return None

        return Quote(
            symbol=ticker,
            price=price,
            pe_ratio=to_decimal(metadata.get("pdSymbolPe")),
        )

    def _check_status(self, response: httpx.Response, symbol: str) -> bool:
        if response.status_code in self.SESSION_STATUSES:
            # Session cookies expired; warm up again on the next fetch
            self._warmed_up = False
            if self._client is not None:
                self._client.cookies.clear()
            raise SourceUnavailable(self.name, f"HTTP {response.status_code} for {symbol}")
        return super()._check_status(response, symbol)

    async def close(self) -> None:
        await super().close()
        self._warmed_up = False
