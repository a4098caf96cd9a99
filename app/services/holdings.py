"""Holdings spreadsheet download and row extraction.

Sheet layout as published:
    row 0      title
    row 1      blank
    rows 2-3   fund info (NAV, shares outstanding, ...)
    row 4      blank
    row 5      headers: DATE, CUSIP, TICKER, DESCRIPTION, SHARES, BASE_MV, PCT_HOLDINGS
    row 6+     holdings
"""

from __future__ import annotations

import io
import logging
import math
from typing import Any, List, Optional

import numpy as np
import pandas as pd
import requests

from app.core.config import Settings
from app.models.schemas import HoldingRecord

logger = logging.getLogger(__name__)

HEADER_ROW = 5
TICKER_COLUMN = "TICKER"


class SpreadsheetFetchError(RuntimeError):
    def __init__(self, status_code: Optional[int], reason: str):
        self.status_code = status_code
        self.reason = reason
        detail = f"{status_code} {reason}" if status_code is not None else reason
        super().__init__(f"Failed to fetch Excel file: {detail}")


def fetch_spreadsheet(url: str, timeout: float = 30.0, user_agent: str | None = None) -> bytes:
    headers = {"User-Agent": user_agent} if user_agent else {}
    try:
        resp = requests.get(url, headers=headers, timeout=timeout)
    except requests.RequestException as e:
        raise SpreadsheetFetchError(None, str(e)) from e
    if not resp.ok:
        raise SpreadsheetFetchError(resp.status_code, resp.reason or "")
    return resp.content


def read_sheet(content: bytes) -> pd.DataFrame:
    """Parse the first worksheet into a positional grid (no header applied)."""
    return pd.read_excel(io.BytesIO(content), sheet_name=0, header=None, dtype=object, engine="openpyxl")


# -------------------- cell normalization --------------------
def _cell(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, float):
        if math.isnan(value):
            return None
        if value.is_integer():
            return int(value)
        return value
    if isinstance(value, str):
        value = value.strip()
        return value or None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    return value


def _text(value: Any) -> str:
    value = _cell(value)
    return "" if value is None else str(value)


def _number(value: Any) -> Optional[float]:
    value = _cell(value)
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).replace(",", ""))
    except ValueError:
        return None


def _date(value: Any) -> Any:
    value = _cell(value)
    if value is None or isinstance(value, (int, str)):
        return value
    # real Excel dates come back as datetime
    if hasattr(value, "strftime"):
        return value.strftime("%Y%m%d")
    return str(value)


def extract_holdings(grid: pd.DataFrame, header_row: int = HEADER_ROW) -> List[HoldingRecord]:
    """Turn the raw sheet grid into holding records.

    Row ``header_row`` supplies the column names; every later row with a
    non-blank TICKER becomes a record, in sheet order.
    """
    if len(grid.index) <= header_row:
        logger.warning(f"Sheet has {len(grid.index)} rows, expected header at row {header_row}")
        return []

    headers = [_text(v).upper() for v in grid.iloc[header_row].tolist()]
    if TICKER_COLUMN not in headers:
        logger.warning(f"No {TICKER_COLUMN} column in header row: {headers}")
        return []

    holdings: List[HoldingRecord] = []
    for values in grid.iloc[header_row + 1:].itertuples(index=False, name=None):
        row = {h: v for h, v in zip(headers, values) if h}
        ticker = _text(row.get(TICKER_COLUMN))
        if not ticker:
            continue
        pct = _number(row.get("PCT_HOLDINGS"))
        if pct is None:
            logger.warning(f"{ticker}: missing PCT_HOLDINGS, using 0")
        holdings.append(HoldingRecord(
            date=_date(row.get("DATE")),
            cusip=_text(row.get("CUSIP")),
            ticker=ticker,
            description=_text(row.get("DESCRIPTION")),
            shares=_number(row.get("SHARES")),
            market_value=_number(row.get("BASE_MV")),
            holdings_pct=pct or 0.0,
        ))
    logger.info(f"Extracted {len(holdings)} holdings with tickers")
    return holdings


def load_holdings(settings: Settings) -> List[HoldingRecord]:
    content = fetch_spreadsheet(
        settings.spreadsheet_url,
        timeout=settings.spreadsheet_timeout_seconds,
        user_agent=settings.user_agent,
    )
    return extract_holdings(read_sheet(content), header_row=settings.header_row)
