"""
Quote resolution errors.

None of these reach the API: each is recovered one tier up.
- SourceUnavailable -> next quote source
- NoQuoteForTicker -> buy price for that position
- AllSourcesExhausted -> simulated quotes
"""

from __future__ import annotations

from typing import Sequence


class QuoteError(Exception):
    """Base class for quote resolution errors."""


class SourceUnavailable(QuoteError):
    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Quote source '{source}' unavailable: {reason}")


class NoQuoteForTicker(QuoteError):
    def __init__(self, ticker: str, source: str):
        self.ticker = ticker
        self.source = source
        super().__init__(f"No quote for {ticker} from '{source}'")


class AllSourcesExhausted(QuoteError):
    def __init__(self, sources: Sequence[str]):
        self.sources = list(sources)
        super().__init__(f"All quote sources failed: {', '.join(self.sources) or 'none configured'}")
