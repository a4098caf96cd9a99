"""Service configuration using Pydantic Settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

SPREADSHEET_URL = "https://imgpfunds.com/wp-content/uploads/pdfs/holdings/DBMF-Holdings.xlsx"

BROWSER_UA = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)


class Settings(BaseSettings):
    """Settings loaded from environment variables (prefix HOLDINGS_)."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="HOLDINGS_", case_sensitive=False)

    # Holdings spreadsheet
    spreadsheet_url: str = SPREADSHEET_URL
    spreadsheet_timeout_seconds: float = 30.0
    header_row: int = 5

    # Quote sources
    yahoo_chart_url: str = "https://query1.finance.yahoo.com/v8/finance/chart/{symbol}"
    barchart_quotes_url: str = "https://www.barchart.com/futures/quotes/{root}*0/futures-prices"
    quote_concurrency: int = 10
    quote_timeout_seconds: float = 10.0
    user_agent: str = BROWSER_UA

    # Response
    cache_max_age: int = 300

    # Logging
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
