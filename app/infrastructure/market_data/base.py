"""
Shared plumbing for HTTP quote sources.

- Browser-like request headers (some upstreams reject bare clients)
- One lazily created httpx.AsyncClient per source
- Canonical ticker <-> source symbol translation
- Randomized pacing between per-symbol requests
"""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Awaitable, Callable, Dict, Iterable, List, Optional

import httpx

from app.config import DEFAULT_USER_AGENT
from app.infrastructure.market_data.exceptions import SourceUnavailable
from app.infrastructure.market_data.types import Quote, missing_quotes

logger = logging.getLogger(__name__)


def browser_headers(user_agent: str = DEFAULT_USER_AGENT, accept: str = "application/json") -> Dict[str, str]:
    return {
        "User-Agent": user_agent,
        "Accept": accept,
        "Accept-Language": "en-US,en;q=0.9",
    }


class SymbolMap:
    """
    Translate canonical tickers to one source's symbol format and back.

    Overrides win over the source's own rule.
    """

    def __init__(self, rule, overrides: Optional[Dict[str, str]] = None):
        self._rule = rule
        self._overrides = {k.upper(): v.upper() for k, v in (overrides or {}).items()}

    def to_source(self, ticker: str) -> str:
        return self._overrides.get(ticker.upper()) or self._rule(ticker)

    def build(self, tickers: Iterable[str]) -> Dict[str, str]:
        """{source symbol: canonical ticker}, preserving request order."""
        return {self.to_source(ticker): ticker for ticker in tickers}


class HttpQuoteSource:
    """Base for quote sources talking to an upstream over httpx."""

    name = "http"
    accept = "application/json"

    def __init__(
        self,
        timeout_seconds: float = 10.0,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout_seconds = timeout_seconds
        self._headers = browser_headers(user_agent, self.accept)
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers=self._headers,
                timeout=self.timeout_seconds,
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def _get(self, url: str, params: Optional[Dict[str, str]] = None) -> httpx.Response:
        """GET that converts transport failures into SourceUnavailable."""
        client = await self._get_client()
        try:
            return await client.get(url, params=params)
        except httpx.TimeoutException as exc:
            raise SourceUnavailable(self.name, f"timeout: {exc!r}")
        except httpx.HTTPError as exc:
            raise SourceUnavailable(self.name, f"transport error: {exc!r}")

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


class PerSymbolQuoteSource(HttpQuoteSource):
    """
    Source that needs one request per ticker.

    Tickers are fetched sequentially with a random pause between requests.
    Throttling (403/429), server errors and transport failures abort the source;
    anything else wrong with one ticker is a miss for that ticker only.
    """

    ABORT_STATUSES = (403, 429)

    def __init__(
        self,
        delay_min_ms: int = 500,
        delay_max_ms: int = 1500,
        rng: Optional[random.Random] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
        **kwargs,
    ):
        super().__init__(**kwargs)
        if delay_min_ms > delay_max_ms:
            raise ValueError("delay_min_ms cannot exceed delay_max_ms")
        self.delay_min_ms = delay_min_ms
        self.delay_max_ms = delay_max_ms
        self._rng = rng or random.Random()
        self._sleep = sleep or asyncio.sleep

    async def _pause(self) -> None:
        delay_ms = self._rng.uniform(self.delay_min_ms, self.delay_max_ms)
        await self._sleep(delay_ms / 1000)

    async def fetch(self, tickers: List[str]) -> Dict[str, Quote]:
        quotes = missing_quotes(tickers)
        await self._prepare()

        for index, ticker in enumerate(tickers):
            if index:
                await self._pause()
            quote = await self._fetch_one(ticker)
            if quote is not None:
                quotes[ticker] = quote
            else:
                logger.debug(f"{self.name}: no quote for {ticker}")

        if not any(q.has_price for q in quotes.values()):
            raise SourceUnavailable(self.name, "no usable quotes")
        return quotes

    async def _prepare(self) -> None:
        """Hook run once before the per-ticker loop."""
        return None

    async def _fetch_one(self, ticker: str) -> Optional[Quote]:
        raise NotImplementedError

    def _check_status(self, response: httpx.Response, symbol: str) -> bool:
        """False for a per-ticker miss; raises when the whole source should stop."""
        if response.status_code in self.ABORT_STATUSES:
            raise SourceUnavailable(self.name, f"HTTP {response.status_code} for {symbol}")
        if response.status_code >= 500:
            raise SourceUnavailable(self.name, f"HTTP {response.status_code} for {symbol}")
        if response.status_code != 200:
            logger.debug(f"{self.name}: HTTP {response.status_code} for {symbol}")
            return False
        return True
