"""
YFinance quote source
Async-safe Yahoo Finance access through the yfinance library
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Tuple

import yfinance as yf

from app.infrastructure.market_data.base import SymbolMap
from app.infrastructure.market_data.exceptions import SourceUnavailable
from app.infrastructure.market_data.types import Quote, missing_quotes, to_decimal
from app.infrastructure.market_data.yahoo_quote_provider import yahoo_symbol_rule

logger = logging.getLogger(__name__)


class YFinanceProvider:
    """
    yfinance data source
    Blocking library calls are offloaded to a worker thread
    """

    name = "yfinance"

    def __init__(
        self,
        exchange: str = "NSE",
        symbol_overrides: Optional[Dict[str, str]] = None,
        timeout_seconds: float = 20.0,
        fetch_pe: bool = True,
    ):
        self.timeout_seconds = timeout_seconds
        self.fetch_pe = fetch_pe
        self.symbols = SymbolMap(yahoo_symbol_rule(exchange), symbol_overrides)

    async def fetch(self, tickers: List[str]) -> Dict[str, Quote]:
        symbol_to_ticker = self.symbols.build(tickers)
        try:
            raw = await asyncio.to_thread(self._load, list(symbol_to_ticker))
        except Exception as exc:
            raise SourceUnavailable(self.name, f"yfinance error: {exc!r}")

        quotes = missing_quotes(tickers)
        for symbol, (price, pe_ratio) in raw.items():
            ticker = symbol_to_ticker.get(symbol)
            if ticker is None:
                continue
            quotes[ticker] = Quote(symbol=ticker, price=to_decimal(price), pe_ratio=to_decimal(pe_ratio))

        if not any(q.has_price for q in quotes.values()):
            raise SourceUnavailable(self.name, "no usable quotes")
        return quotes

    def _load(self, symbols: List[str]) -> Dict[str, Tuple[Any, Any]]:
        """Blocking: last price (and trailing P/E) per Yahoo symbol"""
        batch = yf.Tickers(" ".join(symbols))
        loaded: Dict[str, Tuple[Any, Any]] = {}

        for symbol in symbols:
            ticker = batch.tickers.get(symbol.upper())
            if ticker is None:
                continue
            try:
                price = ticker.fast_info.last_price
            except Exception as exc:
                logger.debug(f"yfinance: no price for {symbol}: {exc}")
                continue

            pe_ratio = None
            if self.fetch_pe:
                try:
                    pe_ratio = (ticker.info or {}).get("trailingPE")
                except Exception as exc:
                    logger.debug(f"yfinance: no P/E for {symbol}: {exc}")
            loaded[symbol] = (price, pe_ratio)

        return loaded

    async def close(self) -> None:
        return None
