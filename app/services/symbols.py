"""Futures ticker -> quote source routing.

Published tickers look like CLZ5 (crude, Dec 2025): commodity root, one
month-code letter, year digits. Yahoo carries most roots as generic
front-month symbols (CL=F); the MSCI index futures are only on Barchart.
"""

import logging
import re

from app.models.schemas import ResolvedSymbol

logger = logging.getLogger(__name__)

_CONTRACT_RE = re.compile(r"^([A-Z]+?)([A-Z]\d+)$")
_LEADING_ALPHA_RE = re.compile(r"^([A-Z]+)")

# commodity prefix -> Barchart root
BARCHART_ROOTS = {
    "MFS": "DI",  # MSCI EAFE
    "MES": "M0",  # MSCI Emerging Markets
}


def commodity_prefix(ticker: str) -> str:
    t = (ticker or "").strip().upper()
    m = _CONTRACT_RE.match(t)
    if m:
        return m.group(1)
    m = _LEADING_ALPHA_RE.match(t)
    if m:
        return m.group(1)
    return t


def resolve_symbol(ticker: str) -> ResolvedSymbol:
    prefix = commodity_prefix(ticker)
    root = BARCHART_ROOTS.get(prefix)
    if root:
        return ResolvedSymbol(source="barchart", symbol=root)
    if not _LEADING_ALPHA_RE.match(prefix):
        # not a futures code; look it up as-is
        logger.debug(f"No commodity prefix in {ticker!r}, using it unchanged")
        return ResolvedSymbol(source="yahoo", symbol=prefix)
    return ResolvedSymbol(source="yahoo", symbol=f"{prefix}=F")
