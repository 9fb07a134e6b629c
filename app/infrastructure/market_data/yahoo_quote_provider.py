"""
Yahoo Finance bulk quote source.

One request for the whole ticker list against the (unofficial) v7 quote
endpoint. The endpoint may change shape or block IPs without notice, which
is why it sits in a fallback chain.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

import httpx

from app.infrastructure.market_data.base import HttpQuoteSource, SymbolMap
from app.infrastructure.market_data.exceptions import SourceUnavailable
from app.infrastructure.market_data.types import Quote, missing_quotes, to_decimal

logger = logging.getLogger(__name__)


EXCHANGE_SUFFIXES: Dict[str, str] = {
    "NSE": ".NS",
    "BSE": ".BO",
    "NASDAQ": "",
    "NYSE": "",
    "LSE": ".L",
    "XETRA": ".DE",
}


def yahoo_symbol_rule(exchange: str):
    suffix = EXCHANGE_SUFFIXES.get(exchange.upper(), "")

    def rule(ticker: str) -> str:
        # Already qualified (RELIANCE.NS) or an index (^NSEI)
        if "." in ticker or ticker.startswith("^"):
            return ticker
        return f"{ticker}{suffix}"

    return rule


class YahooQuoteProvider(HttpQuoteSource):
    """
    Bulk quotes from query2.finance.yahoo.com.

    Response shape:
        {"quoteResponse": {"result": [{"symbol": "TCS.NS",
                                       "regularMarketPrice": 3500.5,
                                       "trailingPE": 29.1}, ...],
                           "error": null}}
    """

    name = "yahoo"

    def __init__(
        self,
        quote_url: str = "https://query2.finance.yahoo.com/v7/finance/quote",
        exchange: str = "NSE",
        symbol_overrides: Optional[Dict[str, str]] = None,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.quote_url = quote_url
        self.symbols = SymbolMap(yahoo_symbol_rule(exchange), symbol_overrides)

    async def fetch(self, tickers: List[str]) -> Dict[str, Quote]:
        symbol_to_ticker = self.symbols.build(tickers)
        response = await self._get(self.quote_url, params={"symbols": ",".join(symbol_to_ticker)})

        if response.status_code != 200:
            raise SourceUnavailable(self.name, f"HTTP {response.status_code}")

        results = self._parse_results(response)
        by_symbol = {symbol.upper(): ticker for symbol, ticker in symbol_to_ticker.items()}
        quotes = missing_quotes(tickers)
        for item in results:
            if not isinstance(item, dict):
                continue
            ticker = by_symbol.get(str(item.get("symbol", "")).upper())
            if ticker is None:
                continue
            quotes[ticker] = Quote(
                symbol=ticker,
                price=to_decimal(item.get("regularMarketPrice")),
                pe_ratio=to_decimal(item.get("trailingPE")),
            )

        if not any(q.has_price for q in quotes.values()):
            raise SourceUnavailable(self.name, "response contained no usable quotes")

        logger.debug(f"yahoo: {sum(q.has_price for q in quotes.values())}/{len(tickers)} quotes")
        return quotes

    def _parse_results(self, response: httpx.Response) -> list:
        try:
            data = response.json()
        except ValueError as exc:
            raise SourceUnavailable(self.name, f"malformed JSON: {exc}")

        if not isinstance(data, dict):
            raise SourceUnavailable(self.name, "unexpected payload type")

        body = data.get("quoteResponse")
        results = body.get("result") if isinstance(body, dict) else None
        if not isinstance(results, list):
            raise SourceUnavailable(self.name, "missing quoteResponse.result")
        return results
