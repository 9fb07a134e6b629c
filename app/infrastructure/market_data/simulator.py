"""
Simulated quotes for when every real source is down.

Prices drift -2%..+5% around the buy price so the dashboard shows a mix of
gains and losses without ever showing an implausible number.
"""

from __future__ import annotations

import random
from decimal import Decimal, ROUND_CEILING, ROUND_FLOOR, ROUND_HALF_UP
from typing import Optional, Protocol

from app.domain.models import Position
from app.infrastructure.market_data.types import PRICE_QUANT, Quote

PRICE_DRIFT_MIN = -0.02
PRICE_DRIFT_MAX = 0.05
PE_MIN = 20.0
PE_MAX = 35.0


class RandomSource(Protocol):
    def uniform(self, a: float, b: float) -> float:
        ...


class SimulatedQuoteGenerator:
    name = "simulated"

    def __init__(self, rng: Optional[RandomSource] = None):
        self._rng = rng or random.Random()

    def simulate(self, position: Position) -> Quote:
        drift = Decimal(str(self._rng.uniform(PRICE_DRIFT_MIN, PRICE_DRIFT_MAX)))
        price = (position.buy_price * (1 + drift)).quantize(PRICE_QUANT, rounding=ROUND_HALF_UP)

        # Rounding must not push the price outside the band
        low = (position.buy_price * (1 + Decimal(str(PRICE_DRIFT_MIN)))).quantize(PRICE_QUANT, rounding=ROUND_CEILING)
        high = (position.buy_price * (1 + Decimal(str(PRICE_DRIFT_MAX)))).quantize(PRICE_QUANT, rounding=ROUND_FLOOR)
        price = min(max(price, low), high)

        pe_ratio = Decimal(str(self._rng.uniform(PE_MIN, PE_MAX))).quantize(PRICE_QUANT, rounding=ROUND_HALF_UP)
        pe_ratio = min(max(pe_ratio, Decimal(str(PE_MIN))), Decimal(str(PE_MAX)))

        return Quote(symbol=position.ticker, price=price, pe_ratio=pe_ratio)
