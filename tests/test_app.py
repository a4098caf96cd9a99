"""API-level tests for the holdings page."""

from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

from fastapi.testclient import TestClient

from app.models.schemas import NA, HoldingRecord
from app.routers import holdings as holdings_routes
from app.main import app

client = TestClient(app)

HOLDINGS = [
    HoldingRecord(date=20240115, cusip="X1", ticker="XYZ", description="Unknown", holdings_pct=0.05),
    HoldingRecord(date=20240115, cusip="C1", ticker="CLZ5", description="WTI CRUDE FUT", holdings_pct=0.10),
]


def _stub_pipeline(monkeypatch, quotes):
    monkeypatch.setattr(holdings_routes, "load_holdings", lambda settings: HOLDINGS)
    monkeypatch.setattr(holdings_routes, "fetch_quotes", lambda tickers, max_workers=None: quotes)


def test_healthz():
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_page_ranks_by_contribution(monkeypatch):
    _stub_pipeline(monkeypatch, {"CLZ5": "+2.00%", "XYZ": NA})

    response = client.get("/")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert response.headers["cache-control"] == "public, max-age=300"
    body = response.text
    assert "<title>DBMF Holdings</title>" in body
    assert body.index("CLZ5") < body.index("XYZ")
    assert "<td class='positive-change'>+0.20%</td>" in body
    assert "<strong>TOTAL</strong>" in body
    assert "2024-01-15" in body


def test_any_path_serves_page(monkeypatch):
    _stub_pipeline(monkeypatch, {"CLZ5": NA, "XYZ": NA})
    response = client.get("/some/other/path")
    assert response.status_code == 200
    assert "holdings-table" in response.text


def test_upstream_404_is_500_with_status():
    resp = MagicMock(ok=False, status_code=404, reason="Not Found")
    with patch("app.services.holdings.requests.get", return_value=resp):
        response = client.get("/")
    assert response.status_code == 500
    assert response.headers["content-type"].startswith("text/plain")
    assert "404" in response.text
    assert response.text == "Failed to fetch Excel file: 404 Not Found"


def test_unparseable_spreadsheet_is_500():
    resp = MagicMock(ok=True, content=b"<html>not a workbook</html>")
    with patch("app.services.holdings.requests.get", return_value=resp):
        response = client.get("/")
    assert response.status_code == 500
    assert response.text.startswith("Error processing Excel file: ")
    assert "Traceback" not in response.text


def test_render_table_empty():
    html = holdings_routes.render_table(holdings_routes.build_table([]))
    assert html == "<p>No holdings with tickers found.</p>"


def test_render_table_escapes_cells(monkeypatch):
    from app.services.contribution import enrich

    rec = HoldingRecord(ticker="ESZ5", description="S&P500 <EMINI>", holdings_pct=0.1)
    html = holdings_routes.render_table(holdings_routes.build_table(enrich([rec], {"ESZ5": "-1.00%"})))
    assert "S&amp;P500 &lt;EMINI&gt;" in html
    assert "<tr class='positive-holding'>" in html
    assert "<td class='negative-change'>-1.00%</td>" in html
    assert html.count("<th>") == 9


def test_render_page_footer():
    html = holdings_routes.render_page("<p>x</p>", "https://example.com/DBMF-Holdings.xlsx",
                                       datetime(2024, 1, 15, 21, 0, tzinfo=timezone.utc))
    assert 'href="https://example.com/DBMF-Holdings.xlsx"' in html
    assert ">DBMF-Holdings.xlsx</a>" in html
    assert "Last updated: Mon, 15 Jan 2024 21:00:00 GMT" in html
