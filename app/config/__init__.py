"""
Application Settings
Load from environment variables
"""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Dict, List


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class Settings(BaseSettings):
    """Application settings from environment"""

    # ======================
    # Application
    # ======================
    APP_ENV: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000

    # ======================
    # Logging
    # ======================
    LOG_FILE: str = "logs/app.log"
    LOG_MAX_BYTES: int = 10_485_760
    LOG_BACKUP_COUNT: int = 5

    # ======================
    # Portfolio
    # ======================
    POSITIONS_FILE: str = "config/positions.yml"

    # Cache max age and UI polling period (kept equal)
    REFRESH_INTERVAL_SECONDS: int = Field(default=15, ge=1)

    # ======================
    # Quote sources (priority = list order)
    # ======================
    # From the environment as JSON: QUOTE_SOURCES='["yahoo","nse"]'
    QUOTE_SOURCES: List[str] = ["yahoo", "nse", "google_finance", "yfinance"]
    DEFAULT_EXCHANGE: str = "NSE"

    # Format: SYMBOL_OVERRIDES="M&M=M&M.NS,BAJAJ-AUTO=BAJAJ-AUTO.NS"
    SYMBOL_OVERRIDES: str = ""

    YAHOO_QUOTE_URL: str = "https://query2.finance.yahoo.com/v7/finance/quote"
    NSE_BASE_URL: str = "https://www.nseindia.com"
    GOOGLE_FINANCE_URL: str = "https://www.google.com/finance/quote"

    # Bulk sources answer in one round trip; scrapers pay the per-ticker delay.
    # Callers wait behind one refresh, which can take the sum of all source
    # timeouts when every source hangs.
    SOURCE_TIMEOUT_SECONDS: float = Field(default=10.0, gt=0)
    SCRAPE_TIMEOUT_SECONDS: float = Field(default=45.0, gt=0)
    SCRAPE_DELAY_MIN_MS: int = Field(default=500, ge=0)
    SCRAPE_DELAY_MAX_MS: int = Field(default=1500, ge=0)

    USER_AGENT: str = DEFAULT_USER_AGENT

    # ======================
    # Pydantic v2 config
    # ======================
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="forbid",
    )

    @model_validator(mode="after")
    def validate_scrape_delay(self) -> "Settings":
        if self.SCRAPE_DELAY_MIN_MS > self.SCRAPE_DELAY_MAX_MS:
            raise ValueError(
                f"SCRAPE_DELAY_MIN_MS ({self.SCRAPE_DELAY_MIN_MS}) cannot exceed "
                f"SCRAPE_DELAY_MAX_MS ({self.SCRAPE_DELAY_MAX_MS})"
            )
        return self

    def scrape_pacing_seconds(self, ticker_count: int) -> float:
        """Worst-case total pause of one per-symbol pass over ticker_count tickers."""
        return max(ticker_count - 1, 0) * self.SCRAPE_DELAY_MAX_MS / 1000

    @property
    def symbol_overrides(self) -> Dict[str, str]:
        """Parse SYMBOL_OVERRIDES into {canonical ticker: source symbol}."""
        overrides: Dict[str, str] = {}
        for pair in self.SYMBOL_OVERRIDES.split(","):
            pair = pair.strip()
            if not pair or "=" not in pair:
                continue
            key, value = pair.split("=", 1)
            key = key.strip().upper()
            value = value.strip()
            if key and value:
                overrides[key] = value
        return overrides


settings = Settings()
