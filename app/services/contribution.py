"""Per-holding contribution to the fund's daily move."""

from typing import Dict, List, Optional, Sequence

from app.models.schemas import NA, EnrichedHolding, HoldingRecord
from app.services.market import parse_leading_number


def parse_change_text(text: Optional[str]) -> float:
    """"+2.00%" -> 0.02. Unavailable or unparseable quotes count as no change."""
    if not text or text == NA:
        return 0.0
    value = parse_leading_number(text.replace("%", ""))
    return 0.0 if value is None else value / 100


def enrich(holdings: Sequence[HoldingRecord], quotes: Dict[str, str]) -> List[EnrichedHolding]:
    out: List[EnrichedHolding] = []
    for h in holdings:
        text = quotes.get(h.ticker) or NA
        change = parse_change_text(text)
        out.append(EnrichedHolding(
            holding=h,
            change_text=text,
            change_pct=change,
            contribution=h.holdings_pct * change if change else 0.0,
        ))
    return out


def fund_total(enriched: Sequence[EnrichedHolding]) -> float:
    return sum(e.contribution for e in enriched)
