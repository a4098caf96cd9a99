from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, List, Optional
from urllib.parse import quote
import logging
import math
import re

import requests

from app.core.config import get_settings
from app.models.schemas import NA, QuoteResult, ResolvedSymbol
from app.services.symbols import resolve_symbol

logger = logging.getLogger(__name__)

_LEADING_NUMBER_RE = re.compile(r"\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)")
_PERCENT_CHANGE_RE = re.compile(r'"percentChange":"([^"]+)"')


def parse_leading_number(text) -> Optional[float]:
    """Read the number at the start of ``text`` ("-0.54%" -> -0.54); None if there isn't one."""
    if text is None:
        return None
    m = _LEADING_NUMBER_RE.match(str(text).replace(",", ""))
    if not m:
        return None
    v = float(m.group(1))
    return v if math.isfinite(v) else None

def format_change_percent(value: float) -> str:
    return f"{value:+,.2f}%"


class QuoteSource:
    """Something that can report today's percent change for a symbol."""

    name = "base"
    accept = "*/*"

    def __init__(self, timeout: Optional[float] = None, user_agent: Optional[str] = None):
        settings = get_settings()
        self.timeout = timeout if timeout is not None else settings.quote_timeout_seconds
        self.user_agent = user_agent or settings.user_agent

    @property
    def headers(self) -> Dict[str, str]:
        return {"User-Agent": self.user_agent, "Accept": self.accept}

    def change_percent(self, symbol: str) -> Optional[float]:
        raise NotImplementedError


class YahooChartSource(QuoteSource):
    name = "yahoo"
    accept = "application/json"

    def __init__(self, url: Optional[str] = None, **kw):
        super().__init__(**kw)
        self.url = url or get_settings().yahoo_chart_url

    def change_percent(self, symbol: str) -> Optional[float]:
        r = requests.get(self.url.format(symbol=quote(symbol, safe="")), headers=self.headers, timeout=self.timeout)
        if not r.ok:
            logger.error(f"HTTP {r.status_code} for {symbol}")
            return None
        data = r.json() or {}
        chart = data.get("chart") or {}
        result = chart.get("result") or []
        meta = (result[0] or {}).get("meta") if result else None
        if meta:
            price = meta.get("regularMarketPrice")
            prev = meta.get("chartPreviousClose") or meta.get("previousClose")
            if price and prev:
                return (float(price) - float(prev)) / float(prev) * 100
        if chart.get("error"):
            logger.error(f"Yahoo Finance error for {symbol}: {chart['error']}")
        return None


class BarchartPageSource(QuoteSource):
    """Scrapes the percentChange field out of the JSON embedded in a futures quotes page."""

    name = "barchart"
    accept = "text/html"

    def __init__(self, url: Optional[str] = None, **kw):
        super().__init__(**kw)
        self.url = url or get_settings().barchart_quotes_url

    def change_percent(self, symbol: str) -> Optional[float]:
        r = requests.get(self.url.format(root=symbol), headers=self.headers, timeout=self.timeout)
        if not r.ok:
            logger.error(f"Barchart HTTP {r.status_code} for root {symbol}")
            return None
        m = _PERCENT_CHANGE_RE.search(r.text)
        if not m:
            return None
        return parse_leading_number(m.group(1))


def default_sources() -> Dict[str, QuoteSource]:
    return {"yahoo": YahooChartSource(), "barchart": BarchartPageSource()}


def fetch_quote(ticker: str, sources: Optional[Dict[str, QuoteSource]] = None) -> QuoteResult:
    sources = sources or default_sources()
    try:
        resolved: ResolvedSymbol = resolve_symbol(ticker)
        pct = sources[resolved.source].change_percent(resolved.symbol)
        if pct is None:
            return QuoteResult(ticker=ticker, change_text=NA)
        return QuoteResult(ticker=ticker, change_text=format_change_percent(pct))
    except Exception as e:
        logger.error(f"Error fetching price for {ticker}: {e}")
        return QuoteResult(ticker=ticker, change_text=NA)


def fetch_quotes(
    tickers: Iterable[str],
    max_workers: Optional[int] = None,
    sources: Optional[Dict[str, QuoteSource]] = None,
) -> Dict[str, str]:
    """Fetch today's change for every ticker, at most ``max_workers`` requests in flight.

    Repeated tickers are fetched once per occurrence. Returns ticker -> "+1.23%" / "N/A".
    """
    tickers = list(tickers)
    if not tickers:
        return {}
    cap = max_workers or get_settings().quote_concurrency
    sources = sources or default_sources()

    with ThreadPoolExecutor(max_workers=max(1, min(cap, len(tickers))), thread_name_prefix="quotes") as executor:
        results: List[QuoteResult] = list(executor.map(lambda t: fetch_quote(t, sources), tickers))

    quotes = {q.ticker: q.change_text for q in results}
    missing = sum(1 for q in results if q.change_text == NA)
    logger.info(f"Fetched {len(results)} quotes ({missing} unavailable)")
    return quotes
