"""
Quote source factory (config-driven).
"""

from __future__ import annotations

import random
from typing import List, Optional

from app.config import Settings, settings as default_settings
from app.infrastructure.market_data.google_finance_provider import GoogleFinanceProvider
from app.infrastructure.market_data.nse_india_provider import NSEIndiaProvider
from app.infrastructure.market_data.provider_chain import ChainedQuoteResolver
from app.infrastructure.market_data.simulator import SimulatedQuoteGenerator
from app.infrastructure.market_data.types import QuoteSource
from app.infrastructure.market_data.yahoo_quote_provider import YahooQuoteProvider
from app.infrastructure.market_data.yfinance_provider import YFinanceProvider

SOURCE_NAMES = ("yahoo", "nse", "google_finance", "yfinance")


def _build_source(name: str, config: Settings, rng: random.Random) -> QuoteSource:
    name = (name or "").strip().lower()
    overrides = config.symbol_overrides

    if name == "yahoo":
        return YahooQuoteProvider(
            quote_url=config.YAHOO_QUOTE_URL,
            exchange=config.DEFAULT_EXCHANGE,
            symbol_overrides=overrides,
            timeout_seconds=config.SOURCE_TIMEOUT_SECONDS,
            user_agent=config.USER_AGENT,
        )

    pacing = dict(
        delay_min_ms=config.SCRAPE_DELAY_MIN_MS,
        delay_max_ms=config.SCRAPE_DELAY_MAX_MS,
        rng=rng,
        timeout_seconds=config.SCRAPE_TIMEOUT_SECONDS,
        user_agent=config.USER_AGENT,
    )
    if name == "nse":
        return NSEIndiaProvider(base_url=config.NSE_BASE_URL, symbol_overrides=overrides, **pacing)
    if name == "google_finance":
        return GoogleFinanceProvider(
            quote_url=config.GOOGLE_FINANCE_URL,
            exchange=config.DEFAULT_EXCHANGE,
            symbol_overrides=overrides,
            **pacing,
        )
    if name == "yfinance":
        return YFinanceProvider(
            exchange=config.DEFAULT_EXCHANGE,
            symbol_overrides=overrides,
            timeout_seconds=config.SCRAPE_TIMEOUT_SECONDS,
        )

    raise ValueError(f"Unknown quote source '{name}'. Expected one of: {', '.join(SOURCE_NAMES)}")


def build_quote_sources(config: Optional[Settings] = None, rng: Optional[random.Random] = None) -> List[QuoteSource]:
    config = config or default_settings
    rng = rng or random.Random()

    names = [n.strip().lower() for n in config.QUOTE_SOURCES if n and n.strip()]
    if len(names) != len(set(names)):
        raise ValueError(f"Duplicate quote sources configured: {config.QUOTE_SOURCES}")
    return [_build_source(name, config, rng) for name in names]


def get_quote_resolver(config: Optional[Settings] = None, rng: Optional[random.Random] = None) -> ChainedQuoteResolver:
    sources = build_quote_sources(config, rng)
    return ChainedQuoteResolver(sources, simulator=SimulatedQuoteGenerator(rng))
