from datetime import datetime, timezone
from html import escape
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse, PlainTextResponse

from app.core.config import Settings, get_settings
from app.models.schemas import HoldingsTable
from app.services.contribution import enrich
from app.services.formatting import COLUMNS, build_table
from app.services.holdings import SpreadsheetFetchError, load_holdings
from app.services.market import fetch_quotes

logger = logging.getLogger(__name__)

router = APIRouter()

STYLE = """
<style>
*{margin:0;padding:0;box-sizing:border-box}
body{font-family:-apple-system,BlinkMacSystemFont,'Segoe UI',Roboto,Oxygen,Ubuntu,Cantarell,sans-serif;background:linear-gradient(135deg,#667eea 0%,#764ba2 100%);min-height:100vh;padding:20px}
.container{max-width:1400px;margin:0 auto;background:#fff;border-radius:12px;box-shadow:0 20px 60px rgba(0,0,0,.3);overflow:hidden}
.header{background:linear-gradient(135deg,#667eea 0%,#764ba2 100%);color:#fff;padding:30px;text-align:center}
.header h1{font-size:2.5em;font-weight:700}
.table-container{overflow-x:auto;padding:30px}
#holdings-table{width:100%;border-collapse:collapse;font-size:14px}
#holdings-table th{background:#667eea;color:#fff;padding:15px;text-align:left;font-weight:600;position:sticky;top:0;z-index:10;text-transform:uppercase;font-size:12px;letter-spacing:.5px}
#holdings-table td{padding:12px 15px;border-bottom:1px solid #e0e0e0}
#holdings-table td:nth-child(n+5),#holdings-table th:nth-child(n+5){text-align:right}
#holdings-table td:nth-child(n+5){font-family:'SF Mono',Monaco,'Cascadia Code','Roboto Mono',Consolas,'Courier New',monospace}
#holdings-table tr:nth-child(even){background-color:#fafafa}
#holdings-table tr:hover{background-color:#f5f5f5;transition:background-color .2s ease}
.positive-holding td:nth-child(7),.positive-change{background:linear-gradient(135deg,#e8f5e9 0%,#c8e6c9 100%);color:#2e7d32;font-weight:600;box-shadow:inset 0 0 0 1px rgba(76,175,80,.2)}
.negative-holding td:nth-child(7),.negative-change{background:linear-gradient(135deg,#ffebee 0%,#ffcdd2 100%);color:#c62828;font-weight:600;box-shadow:inset 0 0 0 1px rgba(244,67,54,.2)}
.total-row{background:linear-gradient(135deg,#e3f2fd 0%,#bbdefb 100%);font-weight:700;border-top:3px solid #667eea}
.total-row td{padding:15px;font-size:1.1em}
.footer{background:#f8f9fa;padding:20px 30px;text-align:center;color:#666;font-size:14px;border-top:1px solid #e0e0e0}
.footer a{color:#667eea;text-decoration:none;font-weight:600}
.timestamp{margin-top:10px;font-size:12px;opacity:.8}
@media (max-width:768px){
  body{padding:5px}
  .header{padding:10px}
  .header h1{font-size:1.1em}
  .table-container{padding:3px}
  #holdings-table{font-size:7px}
  #holdings-table th,#holdings-table td{padding:2px;white-space:nowrap}
  #holdings-table th{font-size:6px}
  #holdings-table td:nth-child(4){max-width:60px;white-space:normal;font-size:6px;line-height:1.1}
  .footer{padding:8px;font-size:9px}
}
</style>
"""


def _td(value: str, cls: str = "") -> str:
    return f"<td class='{cls}'>{escape(value)}</td>" if cls else f"<td>{escape(value)}</td>"


def render_table(table: HoldingsTable) -> str:
    if not table.rows:
        return "<p>No holdings with tickers found.</p>"

    head = "".join(f"<th>{label}</th>" for label, _ in COLUMNS)
    body = []
    for r in table.rows:
        cells = []
        for _, field in COLUMNS:
            cls = {"daily_change": r.change_class, "contribution": r.contribution_class}.get(field, "")
            cells.append(_td(getattr(r, field), cls))
        row_cls = f" class='{r.row_class}'" if r.row_class else ""
        body.append(f"<tr{row_cls}>{''.join(cells)}</tr>")

    total = []
    for i, (_, field) in enumerate(COLUMNS):
        if field == "contribution":
            total.append(_td(table.total_text, table.total_class))
        elif i == 0:
            total.append("<td><strong>TOTAL</strong></td>")
        else:
            total.append("<td></td>")
    body.append(f"<tr class='total-row'>{''.join(total)}</tr>")

    return (
        "<table id='holdings-table'>\n"
        f"<thead><tr>{head}</tr></thead>\n"
        "<tbody>\n" + "\n".join(body) + "\n</tbody>\n</table>"
    )


def render_page(table_html: str, source_url: str, updated_at: datetime) -> str:
    asof = updated_at.strftime("%a, %d %b %Y %H:%M:%S GMT")
    return f"""<!DOCTYPE html>
<html lang="en"><head><meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>DBMF Holdings</title>{STYLE}</head>
<body><div class="container">
<div class="header"><h1>📊 DBMF Holdings</h1></div>
<div class="table-container">
{table_html}
</div>
<div class="footer">
<p>Data source: <a href="{escape(source_url)}" target="_blank">{escape(source_url.rsplit('/', 1)[-1])}</a></p>
<p class="timestamp">Last updated: {asof}</p>
</div>
</div></body></html>"""


def build_holdings_page(settings: Settings) -> str:
    holdings = load_holdings(settings)
    quotes = fetch_quotes([h.ticker for h in holdings], max_workers=settings.quote_concurrency)
    table = build_table(enrich(holdings, quotes))
    logger.info(f"Fund contribution {table.total_text} across {len(table.rows)} holdings")
    return render_page(render_table(table), settings.spreadsheet_url, datetime.now(timezone.utc))


@router.get("/healthz")
def healthz():
    return {"status": "ok"}


@router.get("/{path:path}", response_class=HTMLResponse)
def holdings_page(path: str, settings: Settings = Depends(get_settings)):
    try:
        html = build_holdings_page(settings)
    except SpreadsheetFetchError as e:
        logger.error(str(e))
        return PlainTextResponse(str(e), status_code=500)
    except Exception as e:
        logger.exception("Error processing Excel file")
        return PlainTextResponse(f"Error processing Excel file: {e}", status_code=500)
    return HTMLResponse(html, headers={"Cache-Control": f"public, max-age={settings.cache_max_age}"})
