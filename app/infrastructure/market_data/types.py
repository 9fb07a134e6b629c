"""
Quote source protocol and the normalized quote shape.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Protocol

PRICE_QUANT = Decimal("0.01")


@dataclass(frozen=True)
class Quote:
    symbol: str
    price: Optional[Decimal] = None
    pe_ratio: Optional[Decimal] = None

    @property
    def has_price(self) -> bool:
        return self.price is not None


class QuoteSource(Protocol):
    name: str
    timeout_seconds: float

    async def fetch(self, tickers: List[str]) -> Dict[str, Quote]:
        """
        Quotes keyed by canonical ticker, one entry per requested ticker.

        Tickers the source had nothing for map to a Quote without a price.
        Raises SourceUnavailable when the source as a whole failed.
        """
        ...

    async def close(self) -> None:
        ...


def to_decimal(value: Any) -> Optional[Decimal]:
    """
    Normalize an upstream number to a non-negative 2dp Decimal.

    Returns None for missing, non-numeric, NaN and negative values.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip().replace(",", "").lstrip("₹$€£")
        if not value:
            return None
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    if not number.is_finite():
        return None
    if number < 0:
        return None
    return number.quantize(PRICE_QUANT)


def missing_quotes(tickers: List[str]) -> Dict[str, Quote]:
    return {ticker: Quote(symbol=ticker) for ticker in tickers}
