import logging
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional

from core.api_client import LedgerApiClient
from core.money import money, to_decimal
from schemas.income_expenses import DaySheet, DaySheetSave, ExpenseEntry, IncomeEntry

logger = logging.getLogger(__name__)

INCOME_CATEGORIES = [
    "Sitting",
    "Used bottles/cartons sale",
    "Others",
]

EXPENSE_CATEGORIES = [
    "Meals",
    "Stationery",
    "Groceries",
    "Fuel cost",
    "Rent",
    "Salaries",
    "Electricity",
    "Damages",
    "Depo charges",
    "Transportation",
    "Police dept",
    "Excise dept",
    "Festival charities",
    "Local Charities",
    "Others",
]


def _merge(template: List[str], entries: List, model, day: date) -> List:
    """One entry per template category, filled from what upstream returned."""
    by_cat = {}
    for e in entries:
        by_cat.setdefault(e.category, e)
    out = []
    for cat in template:
        found = by_cat.get(cat)
        out.append(
            model(
                day=day,
                category=cat,
                amount=found.amount if found else 0,
                description=(found.description if found else "") or "",
            )
        )
    return out


def _total(entries: Iterable) -> Decimal:
    return sum((to_decimal(e.amount) for e in entries), Decimal("0"))


def _has_saved(entries: Iterable) -> bool:
    # upstream may return placeholder rows with 0
    return any(e.amount > 0 for e in entries)


def build_day_sheet(day: date, income_raw: List[dict], expenses_raw: List[dict]) -> DaySheet:
    income = [IncomeEntry.model_validate(r) for r in income_raw]
    expenses = [ExpenseEntry.model_validate(r) for r in expenses_raw]
    merged_in = _merge(INCOME_CATEGORIES, income, IncomeEntry, day)
    merged_out = _merge(EXPENSE_CATEGORIES, expenses, ExpenseEntry, day)
    total_in = _total(merged_in)
    total_out = _total(merged_out)
    return DaySheet(
        day=day,
        income=merged_in,
        expenses=merged_out,
        total_income=float(money(total_in)),
        total_expenses=float(money(total_out)),
        net=float(money(total_in - total_out)),
        income_saved=_has_saved(income),
        expenses_saved=_has_saved(expenses),
    )


def load_day_sheet(client: LedgerApiClient, day: date) -> DaySheet:
    return build_day_sheet(day, client.income(day), client.expenses(day))


def to_payload(entries: Optional[Iterable]) -> List[dict]:
    """Only non-zero rows are sent."""
    return [
        {"category": e.category, "amount": e.amount, "description": e.description or ""}
        for e in (entries or [])
        if e.amount > 0
    ]


def _check_categories(entries: Optional[Iterable], allowed: List[str], kind: str) -> None:
    for e in entries or []:
        if e.category not in allowed:
            raise ValueError(f"unknown {kind} category: {e.category}")


def save_day_sheet(client: LedgerApiClient, day: date, body: DaySheetSave) -> DaySheet:
    """Both lists are checked before either is posted."""
    _check_categories(body.income, INCOME_CATEGORIES, "income")
    _check_categories(body.expenses, EXPENSE_CATEGORIES, "expense")
    income_rows = to_payload(body.income) if body.income is not None else None
    expense_rows = to_payload(body.expenses) if body.expenses is not None else None

    if income_rows is not None:
        client.save_income(day, income_rows)
        logger.info("Saved %d income rows for %s", len(income_rows), day)
    if expense_rows is not None:
        client.save_expenses(day, expense_rows)
        logger.info("Saved %d expense rows for %s", len(expense_rows), day)
    return load_day_sheet(client, day)
