"""
Daily sale sheet.

The closing stock rows for a day (or a range: opening and received from the
first day, closing from the last), the stock valued at the shop's selling
price, and the day's income, expenses, payments and counter balance. Stock
is required; the money sections are best effort and show zeros when their
fetch fails.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Callable, List, Optional, TypeVar

from core.api_client import ApiError, LedgerApiClient
from core.business_date import business_date
from core.money import money, to_decimal
from schemas.income_expenses import ExpenseEntry, IncomeEntry
from schemas.inventory import SaleSheet, ShopInventoryItem
from schemas.payments import PaymentAmounts
from services.closing_stock import build_sheet, closing_for, load_items
from services.dashboard import summary_number
from services.payments import counter_balance, stored_amounts

logger = logging.getLogger(__name__)

T = TypeVar("T")


def merge_range(start_items: List[ShopInventoryItem], end_items: List[ShopInventoryItem]) -> List[ShopInventoryItem]:
    """Start-day rows carrying the end day's closing count, matched on brand number and size code."""
    by_key = {it.order_key: it for it in end_items}
    merged = []
    for it in start_items:
        end = by_key.get(it.order_key)
        if end is None:
            merged.append(it)
            continue
        closing = end.closing_stock if end.closing_stock is not None else end.total_stock
        merged.append(it.model_copy(update={"closing_stock": closing}))
    return merged


def _value(items: List[ShopInventoryItem], count: Callable[[ShopInventoryItem], int]) -> float:
    total = sum((count(it) * to_decimal(it.final_price) for it in items), Decimal("0"))
    return float(money(total))


def _total(entries) -> Decimal:
    return sum((to_decimal(e.amount) for e in entries), Decimal("0"))


def build_sale_sheet(
    items: List[ShopInventoryItem],
    start: date,
    end: date,
    income: List[IncomeEntry],
    expenses: List[ExpenseEntry],
    payments: Optional[PaymentAmounts],
    summary: dict,
    status: Optional[dict] = None,
    unavailable: Optional[List[str]] = None,
) -> SaleSheet:
    sheet = build_sheet(items, end, status)
    payments = payments or PaymentAmounts()
    total_income = _total(income)
    total_expenses = _total(expenses)
    balance = counter_balance(
        summary_number(summary, "openingBalance"),
        sheet.totals.sale_value,
        total_income,
        total_expenses,
        payments.total,
    )
    return SaleSheet(
        start_date=start,
        end_date=end,
        rows=sheet.rows,
        totals=sheet.totals,
        opening_stock_value=_value(items, lambda it: it.opening_stock),
        received_stock_value=_value(items, lambda it: it.received_stock),
        closing_stock_value=_value(items, closing_for),
        total_income=float(money(total_income)),
        total_expenses=float(money(total_expenses)),
        payments=payments,
        balance=balance,
        is_fully_saved=sheet.is_fully_saved,
        is_partially_saved=sheet.is_partially_saved,
        unavailable=list(unavailable or []),
    )


def load_sale_sheet(client: LedgerApiClient, start: Optional[date] = None, end: Optional[date] = None) -> SaleSheet:
    start = start or business_date()
    end = end or start
    if end < start:
        raise ValueError("end date must not be before start date")

    items, data = load_items(client, start)
    if end != start:
        end_items, data = load_items(client, end)
        items = merge_range(items, end_items)

    unavailable: List[str] = []

    def best_effort(what: str, fn: Callable[[], T], default: T) -> T:
        try:
            return fn()
        except ApiError as exc:
            logger.warning("Sale sheet %s for %s unavailable: %s", what, end, exc)
            unavailable.append(what)
            return default

    income = best_effort("income", lambda: [IncomeEntry.model_validate(r) for r in client.income(end)], [])
    expenses = best_effort("expenses", lambda: [ExpenseEntry.model_validate(r) for r in client.expenses(end)], [])
    payments = best_effort("payments", lambda: stored_amounts(client.payments(end)), None)
    summary = best_effort("summary", lambda: client.summary(end), {})

    return build_sale_sheet(
        items, start, end, income, expenses, payments, summary or {}, data.get("closingStockStatus"), unavailable
    )
