"""Ranking and display formatting for the holdings table."""

from typing import Any, List, Optional, Sequence

from app.models.schemas import NA, EnrichedHolding, HoldingRow, HoldingsTable
from app.services.contribution import fund_total, parse_change_text
from app.services.market import format_change_percent

# (header label, HoldingRow field)
COLUMNS = [
    ("Date", "date"),
    ("CUSIP", "cusip"),
    ("Ticker", "ticker"),
    ("Description", "description"),
    ("Shares", "shares"),
    ("Market Value", "market_value"),
    ("Holdings %", "holdings_pct"),
    ("Daily Change", "daily_change"),
    ("Contribution", "contribution"),
]


def _blank(value: Any) -> bool:
    return value is None or value == ""


def rank(enriched: Sequence[EnrichedHolding]) -> List[EnrichedHolding]:
    # sorted() is stable with reverse=True, ties keep sheet order
    return sorted(enriched, key=lambda e: e.contribution, reverse=True)


def format_date(value: Any) -> str:
    """20240115 -> "2024-01-15"; anything else passes through as text."""
    if _blank(value):
        return ""
    s = str(value)
    if len(s) == 8 and s.isdigit():
        return f"{s[:4]}-{s[4:6]}-{s[6:]}"
    return s


def format_number(value: Optional[float]) -> str:
    if _blank(value):
        return ""
    s = f"{float(value):,.3f}".rstrip("0").rstrip(".")
    return "0" if s in ("-0", "") else s


def format_currency(value: Optional[float]) -> str:
    if _blank(value):
        return ""
    v = round(float(value))
    return f"-${abs(v):,}" if v < 0 else f"${v:,}"


def format_percent(value: Optional[float]) -> str:
    """Decimal fraction -> percent text, 0.0123 -> "1.23%"."""
    if _blank(value):
        return ""
    return f"{float(value) * 100:,.2f}%"


def change_class(value: float) -> str:
    if value > 0:
        return "positive-change"
    if value < 0:
        return "negative-change"
    return ""


def holding_class(pct: float) -> str:
    if pct > 0:
        return "positive-holding"
    if pct < 0:
        return "negative-holding"
    return ""


def build_row(e: EnrichedHolding) -> HoldingRow:
    h = e.holding
    unavailable = e.change_text == NA
    contribution = NA if unavailable else format_change_percent(e.contribution * 100)
    return HoldingRow(
        date=format_date(h.date),
        cusip=h.cusip,
        ticker=h.ticker,
        description=h.description,
        shares=format_number(h.shares),
        market_value=format_currency(h.market_value),
        holdings_pct=format_percent(h.holdings_pct),
        daily_change=e.change_text or NA,
        contribution=contribution,
        row_class=holding_class(h.holdings_pct),
        change_class="" if unavailable else change_class(parse_change_text(e.change_text)),
        contribution_class="" if unavailable else change_class(parse_change_text(contribution)),
    )


def build_table(enriched: Sequence[EnrichedHolding]) -> HoldingsTable:
    ranked = rank(enriched)
    total = fund_total(ranked)
    return HoldingsTable(
        rows=[build_row(e) for e in ranked],
        total_contribution=total,
        total_text=format_change_percent(total * 100),
        total_class=change_class(total),
    )
