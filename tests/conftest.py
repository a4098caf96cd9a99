import pytest

from app.models.schemas import HoldingRecord


@pytest.fixture
def make_holding():
    def _make(ticker: str, pct: float = 0.01, **kw) -> HoldingRecord:
        return HoldingRecord(ticker=ticker, holdings_pct=pct, **kw)
    return _make
