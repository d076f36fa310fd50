"""
Export a stock lifted or sales report as CSV.

Rows first, then a blank line and the kind roll-up.

Run locally:
  python backend/scripts/export_report.py --report sales --type monthly --year 2025 --month 3 --token $TOKEN > march.csv
"""

import argparse
import csv
import sys
from datetime import date
from pathlib import Path

# Allow running from repo root by ensuring `backend/` is on sys.path
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from core.api_client import ApiError, LedgerApiClient  # noqa: E402
from core.business_date import REPORT_TYPES, resolve_period  # noqa: E402
from core.config import settings  # noqa: E402
from core.logging_setup import configure_logging  # noqa: E402
from core.money import format_inr  # noqa: E402
from schemas.reports import BrandReport  # noqa: E402
from services.reports import sales_report, stock_lifted_report  # noqa: E402

REPORTS = {
    "stock-lifted": stock_lifted_report,
    "sales": sales_report,
}

ROW_COLUMNS = [
    "brand_number",
    "brand_name",
    "size_code",
    "size_ml",
    "brand_kind",
    "cases",
    "loose_bottles",
    "bottles",
    "invoice_value",
    "mrp_value",
]


def write_csv(report: BrandReport, out, pretty: bool = False) -> None:
    w = csv.writer(out)
    w.writerow([report.title])
    w.writerow(ROW_COLUMNS)
    for r in report.rows:
        row = r.model_dump()
        if pretty:
            row["invoice_value"] = format_inr(row["invoice_value"])
            row["mrp_value"] = format_inr(row["mrp_value"])
        w.writerow(["" if row[c] is None else row[c] for c in ROW_COLUMNS])
    w.writerow(["Total", "", "", "", "", "", "", report.totals.bottles, report.totals.invoice_value, report.totals.mrp_value])
    w.writerow([])
    w.writerow(["kind", "invoice_value", "mrp_value", "share_pct"])
    for k in report.kind_totals:
        w.writerow([k.label, k.invoice_value, k.mrp_value, f"{k.share:.2f}"])
    w.writerow(["Total", "", "", f"{report.kind_share_total:.2f}"])


def main() -> int:
    p = argparse.ArgumentParser()
    p.add_argument("--report", choices=sorted(REPORTS), default="stock-lifted")
    p.add_argument("--type", dest="report_type", choices=REPORT_TYPES, default="daily")
    p.add_argument("--day", type=date.fromisoformat, help="YYYY-MM-DD, daily reports")
    p.add_argument("--year", type=int)
    p.add_argument("--month", type=int)
    p.add_argument("--week", type=int, help="Week of the month, weekly reports")
    p.add_argument("--start", type=date.fromisoformat, help="YYYY-MM-DD, custom reports")
    p.add_argument("--end", type=date.fromisoformat, help="YYYY-MM-DD, custom reports")
    p.add_argument("--token", help="Bearer token for the shop API")
    p.add_argument("--api-url", default=settings.api_base_url)
    p.add_argument("--shop-name", default=None)
    p.add_argument("--pretty", action="store_true", help="Format money columns as ₹ with Indian grouping")
    args = p.parse_args()

    configure_logging()
    try:
        start, end = resolve_period(
            args.report_type,
            day=args.day,
            year=args.year,
            month=args.month,
            week=args.week,
            start=args.start,
            end=args.end,
        )
    except ValueError as e:
        p.error(str(e))

    client = LedgerApiClient(base_url=args.api_url, token=args.token)
    try:
        report = REPORTS[args.report](client, args.report_type, start, end, args.shop_name)
    except ApiError as e:
        print(f"[export_report] {e}", file=sys.stderr)
        return 1
    write_csv(report, sys.stdout, pretty=args.pretty)
    return 0


if __name__ == "__main__":
    sys.exit(main())
