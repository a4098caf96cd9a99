from pydantic import BaseModel, ConfigDict, Field
from typing import Literal, Optional, Union

NA = "N/A"

class HoldingRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: Union[int, str, None] = None
    cusip: str = ""
    ticker: str = Field(..., min_length=1, description="Futures/security ticker as published")
    description: str = ""
    shares: Optional[float] = None
    market_value: Optional[float] = None
    holdings_pct: float = Field(0.0, description="Weight as a decimal fraction, e.g. 0.0123")

class ResolvedSymbol(BaseModel):
    source: Literal["yahoo", "barchart"]
    symbol: str

class QuoteResult(BaseModel):
    ticker: str
    change_text: str = NA

class EnrichedHolding(BaseModel):
    model_config = ConfigDict(frozen=True)

    holding: HoldingRecord
    change_text: str = NA
    change_pct: float = 0.0
    contribution: float = 0.0

class HoldingRow(BaseModel):
    date: str
    cusip: str
    ticker: str
    description: str
    shares: str
    market_value: str
    holdings_pct: str
    daily_change: str
    contribution: str
    row_class: str = ""
    change_class: str = ""
    contribution_class: str = ""

class HoldingsTable(BaseModel):
    rows: list[HoldingRow] = []
    total_contribution: float = 0.0
    total_text: str = "+0.00%"
    total_class: str = ""
