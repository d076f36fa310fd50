import logging
from datetime import date
from typing import Optional

from core.api_client import ApiError, LedgerApiClient
from core.business_date import business_date
from schemas.reports import DashboardSummary

logger = logging.getLogger(__name__)


def summary_number(data: dict, key: str) -> float:
    try:
        return float(data.get(key) or 0)
    except (TypeError, ValueError):
        return 0.0


def summary_from_api(data: dict, day: date) -> DashboardSummary:
    return DashboardSummary(
        business_date=day,
        stock_value=summary_number(data, "stockValue"),
        stock_lifted_invoice_value=summary_number(data, "stockLiftedInvoiceValue"),
        stock_lifted_mrp_value=summary_number(data, "stockLiftedMrpValue"),
        todays_sale=summary_number(data, "totalSales"),
        counter_balance=summary_number(data, "counterBalance"),
    )


def load_dashboard(client: LedgerApiClient, day: Optional[date] = None) -> DashboardSummary:
    """Today's figures. Any upstream failure shows zeros instead of an error."""
    day = day or business_date()
    try:
        client.initialize_today()
    except ApiError as exc:
        # the summary is still worth asking for
        logger.warning("Stock initialisation for %s failed: %s", day, exc)

    try:
        data = client.summary()
    except ApiError as exc:
        logger.warning("Dashboard summary unavailable, showing zeros: %s", exc)
        return DashboardSummary(business_date=day, degraded=True)
    if not isinstance(data, dict):
        return DashboardSummary(business_date=day, degraded=True)
    return summary_from_api(data, day)
