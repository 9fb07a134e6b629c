"""
Google Finance quote source
Scrapes one quote page per ticker (no public JSON API exists)

Page markup changes without notice; selectors are kept in one place.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional

from bs4 import BeautifulSoup

from app.infrastructure.market_data.base import PerSymbolQuoteSource, SymbolMap
from app.infrastructure.market_data.types import Quote, to_decimal

logger = logging.getLogger(__name__)

PRICE_ATTR = "data-last-price"
PRICE_SELECTOR = "div.YMlKec.fxKbKc"
STAT_ROW_SELECTOR = "div.gyFHrc"
STAT_LABEL_SELECTOR = "div.mfs7Fc"
STAT_VALUE_SELECTOR = "div.P6K39c"
PE_LABEL = "p/e ratio"


def google_symbol_rule(exchange: str):
    def rule(ticker: str) -> str:
        base = ticker.split(".", 1)[0]
        return f"{base}:{exchange.upper()}"

    return rule


def parse_quote_page(html: str) -> Dict[str, Optional[str]]:
    """Extract raw price and P/E strings from a quote page."""
    soup = BeautifulSoup(html, "html.parser")

    price = None
    tagged = soup.find(attrs={PRICE_ATTR: True})
    if tagged is not None:
        price = tagged.get(PRICE_ATTR)
    if not price:
        node = soup.select_one(PRICE_SELECTOR)
        price = node.get_text(strip=True) if node else None

    pe_ratio = None
    for row in soup.select(STAT_ROW_SELECTOR):
        label = row.select_one(STAT_LABEL_SELECTOR)
        value = row.select_one(STAT_VALUE_SELECTOR)
        if label and value and label.get_text(strip=True).lower() == PE_LABEL:
            pe_ratio = value.get_text(strip=True)
            break

    return {"price": price, "pe_ratio": pe_ratio}


class GoogleFinanceProvider(PerSymbolQuoteSource):
    """Per-ticker HTML scrape of google.com/finance/quote/TICKER:EXCHANGE"""

    name = "google_finance"
    accept = "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8"

    def __init__(
        self,
        quote_url: str = "https://www.google.com/finance/quote",
        exchange: str = "NSE",
        symbol_overrides: Optional[Dict[str, str]] = None,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.quote_url = quote_url.rstrip("/")
        self.symbols = SymbolMap(google_symbol_rule(exchange), symbol_overrides)

    async def _fetch_one(self, ticker: str) -> Optional[Quote]:
        symbol = self.symbols.to_source(ticker)
        response = await self._get(f"{self.quote_url}/{symbol}")
        if not self._check_status(response, symbol):
            return None

        raw = parse_quote_page(response.text)
        price = to_decimal(raw["price"])
        if price is None:
            logger.debug(f"google_finance: price not found on page for {symbol}")
            return None

        return Quote(symbol=ticker, price=price, pe_ratio=to_decimal(raw["pe_ratio"]))
