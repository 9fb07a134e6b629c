from decimal import Decimal
from types import SimpleNamespace

import pytest

from app.infrastructure.market_data import yfinance_provider
from app.infrastructure.market_data.exceptions import SourceUnavailable
from app.infrastructure.market_data.yfinance_provider import YFinanceProvider


class BrokenInfo:
    @property
    def last_price(self):
        raise KeyError("lastPrice")


def _fake_tickers(data):
    """Stand-in for yf.Tickers built from {symbol: (price, info)}"""

    class FakeTickers:
        requested = []

        def __init__(self, symbols: str):
            FakeTickers.requested.append(symbols)
            self.tickers = {}
            for symbol in symbols.split():
                if symbol not in data:
                    continue
                price, info = data[symbol]
                fast_info = BrokenInfo() if price is None else SimpleNamespace(last_price=price)
                self.tickers[symbol] = SimpleNamespace(fast_info=fast_info, info=info)

    return FakeTickers


@pytest.mark.asyncio
async def test_fetch_reads_price_and_pe(monkeypatch):
    fake = _fake_tickers({
        "TCS.NS": (3500.456, {"trailingPE": 28.1}),
        "INFY.NS": (1500, {}),
        "AFFLE.NS": (None, {}),
    })
    monkeypatch.setattr(yfinance_provider.yf, "Tickers", fake)

    quotes = await YFinanceProvider().fetch(["TCS", "INFY", "AFFLE"])

    assert fake.requested == ["TCS.NS INFY.NS AFFLE.NS"]
    assert quotes["TCS"].price == Decimal("3500.46")
    assert quotes["TCS"].pe_ratio == Decimal("28.10")
    assert quotes["INFY"].pe_ratio is None
    assert not quotes["AFFLE"].has_price


@pytest.mark.asyncio
async def test_pe_lookup_can_be_disabled(monkeypatch):
    monkeypatch.setattr(yfinance_provider.yf, "Tickers", _fake_tickers({"TCS.NS": (10, {"trailingPE": 5})}))

    quotes = await YFinanceProvider(fetch_pe=False).fetch(["TCS"])

    assert quotes["TCS"].pe_ratio is None


@pytest.mark.asyncio
async def test_library_failure_is_source_unavailable(monkeypatch):
    def explode(symbols):
        raise ConnectionError("rate limited")

    monkeypatch.setattr(yfinance_provider.yf, "Tickers", explode)

    with pytest.raises(SourceUnavailable, match="yfinance error"):
        await YFinanceProvider().fetch(["TCS"])


@pytest.mark.asyncio
async def test_no_prices_is_source_unavailable(monkeypatch):
    monkeypatch.setattr(yfinance_provider.yf, "Tickers", _fake_tickers({}))

    with pytest.raises(SourceUnavailable, match="no usable quotes"):
        await YFinanceProvider().fetch(["TCS"])
