"""
Stock lifted, sales and income/expense reports.

Every report is computed here from raw upstream rows so the numbers do not
depend on the screen that asked for them. Per-day (or per-month) upstream
calls run concurrently; a sub-fetch that fails counts as an empty day.
"""

import logging
from collections import OrderedDict, defaultdict
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple, TypeVar

from core.api_client import ApiError, LedgerApiClient
from core.business_date import dates_between, months_in_year, short_label
from core.config import settings
from core.kinds import KIND_ORDER, base_name, canonical_kind
from core.money import money, to_decimal
from core.quantities import split_bottles
from schemas.brands import MasterBrand
from schemas.income_expenses import ExpenseEntry, IncomeEntry
from schemas.inventory import ShopInventoryItem
from schemas.reports import (
    BrandReport,
    CategoryTotal,
    IncomeExpenseReport,
    KindTop,
    KindTotal,
    PeriodTotal,
    ReceivedStockRecord,
    ReportRow,
    ReportTotals,
    SalesRecord,
)
from services.income_expenses import EXPENSE_CATEGORIES, INCOME_CATEGORIES

logger = logging.getLogger(__name__)

UNKNOWN_ORDER = 9999
TOP_PER_KIND = 3

T = TypeVar("T")
R = TypeVar("R")


# ----------------------------
# Fetch helpers
# ----------------------------

def fan_out(fn: Callable[[T], R], items: Sequence[T], default: Callable[[], R], what: str = "fetch") -> List[R]:
    """Run `fn` over `items` in a thread pool, results in input order.

    An `ApiError` from one item is logged and replaced with `default()`.
    """
    def _one(item):
        try:
            return fn(item)
        except ApiError as exc:
            logger.warning("%s for %s failed, counting as empty: %s", what, item, exc)
            return default()

    if not items:
        return []
    workers = max(1, min(settings.report_fetch_workers, len(items)))
    with ThreadPoolExecutor(max_workers=workers) as pool:
        return list(pool.map(_one, items))


def load_brand_map(client: LedgerApiClient) -> Dict[object, MasterBrand]:
    return {b.id: b for b in (MasterBrand.model_validate(raw) for raw in client.list_master_brands())}


def load_order_index(client: LedgerApiClient, day: date) -> Dict[str, int]:
    """Display order of the shop's products on `day`, keyed by `brand_number|size_code`."""
    products = client.shop_products(day).get("products") or []
    index: Dict[str, int] = {}
    for i, raw in enumerate(products):
        key = ShopInventoryItem.model_validate(raw).order_key
        index.setdefault(key, i)
    return index


# ----------------------------
# Aggregation
# ----------------------------

def _sort_rows(rows: Iterable[ReportRow]) -> List[ReportRow]:
    return sorted(rows, key=lambda r: (r.order, -(r.size_ml or 0)))


def _totals(rows: List[ReportRow]) -> ReportTotals:
    return ReportTotals(
        bottles=sum(r.bottles for r in rows),
        mrp_value=float(money(sum((to_decimal(r.mrp_value) for r in rows), Decimal("0")))),
        invoice_value=float(money(sum((to_decimal(r.invoice_value) for r in rows), Decimal("0")))),
    )


def kind_totals(rows: List[ReportRow]) -> Tuple[List[KindTotal], float]:
    """Roll rows up by kind in the fixed kind order.

    Share is against the MRP total of all rows, "Other" included, so the
    listed shares can add up to less than 100.
    """
    mrp_by_kind: Dict[str, Decimal] = defaultdict(Decimal)
    inv_by_kind: Dict[str, Decimal] = defaultdict(Decimal)
    for r in rows:
        k = canonical_kind(r.brand_kind)
        mrp_by_kind[k] += to_decimal(r.mrp_value)
        inv_by_kind[k] += to_decimal(r.invoice_value)

    total = sum(mrp_by_kind.values(), Decimal("0"))
    out = []
    listed = Decimal("0")
    for label in KIND_ORDER:
        mrp_val = mrp_by_kind.get(label, Decimal("0"))
        listed += mrp_val
        share = (mrp_val * 100 / total) if total > 0 else Decimal("0")
        out.append(
            KindTotal(
                label=label,
                mrp_value=float(money(mrp_val)),
                invoice_value=float(money(inv_by_kind.get(label, Decimal("0")))),
                share=float(money(share)),
            )
        )
    share_total = (listed * 100 / total) if total > 0 else Decimal("0")
    return out, float(money(share_total))


def kinds_top(rows: List[ReportRow], limit: int = TOP_PER_KIND) -> List[KindTop]:
    by_kind: Dict[str, List[ReportRow]] = defaultdict(list)
    for r in rows:
        by_kind[canonical_kind(r.brand_kind)].append(r)
    out = []
    for label in KIND_ORDER:
        ranked = sorted(by_kind.get(label, []), key=lambda r: r.mrp_value, reverse=True)
        out.append(KindTop(label=label, count=len(ranked), top=ranked[:limit]))
    return out


def group_by_base_name(rows: List[ReportRow]) -> Dict[str, List[str]]:
    """base name -> row keys, groups ordered by their first row's position."""
    groups: "OrderedDict[str, List[str]]" = OrderedDict()
    for r in _sort_rows(rows):
        groups.setdefault(r.base_name, []).append(r.key)
    return dict(groups)


def report_title(report_name: str, report_type: str, start: date, end: date, shop_name: Optional[str] = None) -> str:
    shop = shop_name or settings.shop_name
    month_part = f"{start.strftime('%B %Y')} Report - " if report_type == "monthly" else ""
    if start == end:
        range_part = short_label(start)
    else:
        range_part = f"{short_label(start)} to {short_label(end)}"
    return f"{shop} - {report_name} - {month_part}{range_part}"


def _row(
    *,
    row_id,
    key: str,
    order: int,
    brand_number: Optional[str],
    brand_name: str,
    size_code: Optional[str],
    size_ml: int,
    pack_type: Optional[str],
    pack_quantity: Optional[int],
    brand_kind: Optional[str],
    bottles: int,
    mrp,
    invoice_price,
) -> ReportRow:
    cases, loose = split_bottles(bottles, pack_quantity or 0)
    return ReportRow(
        id=row_id,
        key=key,
        order=order,
        brand_number=brand_number,
        brand_name=brand_name,
        base_name=base_name(brand_name),
        size_code=size_code,
        size_ml=size_ml or 0,
        pack_type=pack_type,
        pack_quantity=pack_quantity or None,
        brand_kind=canonical_kind(brand_kind),
        bottles=bottles,
        cases=cases,
        loose_bottles=loose,
        mrp=float(money(mrp)),
        invoice_price=float(money(invoice_price)),
        mrp_value=float(money(bottles * to_decimal(mrp))),
        invoice_value=float(money(bottles * to_decimal(invoice_price))),
    )


def _build_report(
    name: str,
    report_type: str,
    start: date,
    end: date,
    rows: List[ReportRow],
    period_totals: List[PeriodTotal],
    shop_name: Optional[str],
) -> BrandReport:
    rows = _sort_rows(rows)
    kt, share_total = kind_totals(rows)
    return BrandReport(
        title=report_title(name, report_type, start, end, shop_name),
        report_type=report_type,
        start_date=start,
        end_date=end,
        rows=rows,
        groups=group_by_base_name(rows),
        totals=_totals(rows),
        kind_totals=kt,
        kind_share_total=share_total,
        kinds_top=kinds_top(rows),
        period_totals=period_totals,
    )


# ----------------------------
# Stock lifted
# ----------------------------

def aggregate_received(
    days: List[List[ReceivedStockRecord]],
    brands: Dict[object, MasterBrand],
    order_index: Dict[str, int],
) -> List[ReportRow]:
    """Sum invoice quantities per master brand across all days."""
    bottles: Dict[object, int] = defaultdict(int)
    first_seen: Dict[object, ReceivedStockRecord] = {}
    for records in days:
        for rs in records:
            if not rs.invoice_quantity:
                continue
            bottles[rs.master_brand_id] += rs.invoice_quantity
            first_seen.setdefault(rs.master_brand_id, rs)

    rows = []
    for mb_id, qty in bottles.items():
        rs = first_seen[mb_id]
        mb = brands.get(mb_id)
        brand_number = (mb.brand_number if mb else None) or rs.brand_number
        size_code = (mb.size_code if mb else None) or rs.size_code
        key = f"{brand_number}|{size_code}"
        rows.append(
            _row(
                row_id=mb_id,
                key=key,
                order=order_index.get(key, UNKNOWN_ORDER),
                brand_number=brand_number,
                brand_name=(mb.name if mb else "") or rs.brand_name or "",
                size_code=size_code,
                size_ml=(mb.size_ml if mb else 0) or rs.size_ml,
                pack_type=mb.pack_type if mb else None,
                pack_quantity=mb.pack_quantity if mb else None,
                brand_kind=mb.brand_kind if mb else None,
                bottles=qty,
                mrp=(mb.mrp if mb else 0) or rs.mrp_price,
                invoice_price=mb.invoice_price if mb else 0,
            )
        )
    return rows


def _received_day_value(records: List[ReceivedStockRecord], brands: Dict[object, MasterBrand]) -> Tuple[Decimal, Decimal]:
    inv = Decimal("0")
    mrp = Decimal("0")
    for rs in records:
        mb = brands.get(rs.master_brand_id)
        inv += rs.invoice_quantity * to_decimal(mb.invoice_price if mb else 0)
        mrp += rs.invoice_quantity * to_decimal((mb.mrp if mb else 0) or rs.mrp_price)
    return inv, mrp


def received_period_totals(
    report_type: str,
    dates: List[date],
    days: List[List[ReceivedStockRecord]],
    brands: Dict[object, MasterBrand],
) -> List[PeriodTotal]:
    per_day = [_received_day_value(recs, brands) for recs in days]
    if report_type == "yearly":
        months: "OrderedDict[Tuple[int, int], List[Decimal]]" = OrderedDict()
        for d, (inv, mrp) in zip(dates, per_day):
            acc = months.setdefault((d.year, d.month), [Decimal("0"), Decimal("0")])
            acc[0] += inv
            acc[1] += mrp
        return [
            PeriodTotal(
                label=date(y, m, 1).strftime("%B"),
                invoice_total=float(money(inv)),
                mrp_total=float(money(mrp)),
            )
            for (y, m), (inv, mrp) in months.items()
        ]
    return [
        PeriodTotal(label=short_label(d), invoice_total=float(money(inv)), mrp_total=float(money(mrp)))
        for d, (inv, mrp) in zip(dates, per_day)
    ]


def stock_lifted_report(
    client: LedgerApiClient,
    report_type: str,
    start: date,
    end: date,
    shop_name: Optional[str] = None,
) -> BrandReport:
    dates = dates_between(start, end)
    brands = load_brand_map(client)
    order_index = load_order_index(client, start)

    raw_days = fan_out(client.received_stock, dates, list, what="received stock")
    days = [[ReceivedStockRecord.model_validate(r) for r in recs] for recs in raw_days]
    logger.info("Stock lifted %s..%s: %d days, %d records", start, end, len(dates), sum(len(d) for d in days))

    rows = aggregate_received(days, brands, order_index)
    periods = received_period_totals(report_type, dates, days, brands)
    return _build_report("Stock Lifted Report", report_type, start, end, rows, periods, shop_name)


# ----------------------------
# Sales
# ----------------------------

def sales_rows_to_report(
    records: List[SalesRecord],
    brands: Dict[object, MasterBrand],
    order_index: Dict[str, int],
) -> List[ReportRow]:
    rows = []
    for r in records:
        mb = brands.get(r.master_brand_id)
        brand_number = r.brand_number or (mb.brand_number if mb else None)
        size_code = r.size_code or (mb.size_code if mb else None)
        key = f"{brand_number}|{size_code}"
        rows.append(
            _row(
                row_id=r.master_brand_id,
                key=key,
                order=order_index.get(key, UNKNOWN_ORDER),
                brand_number=brand_number,
                brand_name=r.brand_name or (mb.name if mb else "") or "",
                size_code=size_code,
                size_ml=r.size_ml or (mb.size_ml if mb else 0),
                pack_type=mb.pack_type if mb else None,
                pack_quantity=r.pack_quantity or (mb.pack_quantity if mb else None),
                brand_kind=r.brand_kind or (mb.brand_kind if mb else None),
                bottles=r.sold_bottles,
                mrp=r.standard_mrp or (mb.mrp if mb else 0),
                invoice_price=mb.invoice_price if mb else 0,
            )
        )
    return rows


def _sales_value(raw_rows: List[dict]) -> Decimal:
    total = Decimal("0")
    for raw in raw_rows:
        rec = SalesRecord.model_validate(raw)
        total += rec.sold_bottles * to_decimal(rec.standard_mrp)
    return total


def sales_period_totals(client: LedgerApiClient, report_type: str, start: date, end: date) -> List[PeriodTotal]:
    if report_type == "yearly":
        ranges = [(m["start_date"], m["end_date"], m["label"]) for m in months_in_year(start.year)]
    else:
        ranges = [(d, d, short_label(d)) for d in dates_between(start, end)]

    results = fan_out(lambda r: client.sales_rows(r[0], r[1]), ranges, list, what="sales")
    return [
        PeriodTotal(label=label, mrp_total=float(money(_sales_value(raw))))
        for (_, _, label), raw in zip(ranges, results)
    ]


def sales_report(
    client: LedgerApiClient,
    report_type: str,
    start: date,
    end: date,
    shop_name: Optional[str] = None,
) -> BrandReport:
    if end < start:
        raise ValueError("end date must not be before start date")
    brands = load_brand_map(client)
    order_index = load_order_index(client, start)
    records = [SalesRecord.model_validate(r) for r in client.sales_rows(start, end)]
    rows = sales_rows_to_report(records, brands, order_index)
    periods = sales_period_totals(client, report_type, start, end)
    return _build_report("Sales Report", report_type, start, end, rows, periods, shop_name)


# ----------------------------
# Income / expenses
# ----------------------------

def _category_totals(entries: Iterable, categories: Sequence[str]) -> List[CategoryTotal]:
    sums: Dict[str, Decimal] = OrderedDict((c, Decimal("0")) for c in categories)
    for e in entries:
        key = e.category or "Others"
        sums[key] = sums.get(key, Decimal("0")) + to_decimal(e.amount)
    return [CategoryTotal(category=k, amount=float(money(v))) for k, v in sums.items()]


def income_expense_report(
    client: LedgerApiClient,
    report_type: str,
    start: date,
    end: date,
    shop_name: Optional[str] = None,
) -> IncomeExpenseReport:
    dates = dates_between(start, end)
    incomes = fan_out(client.income, dates, list, what="income")
    expenses = fan_out(client.expenses, dates, list, what="expenses")

    all_income: List[IncomeEntry] = []
    all_expenses: List[ExpenseEntry] = []
    daily = []
    for d, inc_raw, exp_raw in zip(dates, incomes, expenses):
        inc = [IncomeEntry.model_validate(r) for r in inc_raw]
        exp = [ExpenseEntry.model_validate(r) for r in exp_raw]
        all_income.extend(inc)
        all_expenses.extend(exp)
        day_in = sum((to_decimal(e.amount) for e in inc), Decimal("0"))
        day_out = sum((to_decimal(e.amount) for e in exp), Decimal("0"))
        daily.append({
            "date": d.isoformat(),
            "label": short_label(d),
            "income": float(money(day_in)),
            "expenses": float(money(day_out)),
            "net": float(money(day_in - day_out)),
        })

    total_in = sum((to_decimal(e.amount) for e in all_income), Decimal("0"))
    total_out = sum((to_decimal(e.amount) for e in all_expenses), Decimal("0"))
    return IncomeExpenseReport(
        title=report_title("Income & Expenses Report", report_type, start, end, shop_name),
        report_type=report_type,
        start_date=start,
        end_date=end,
        income_by_category=_category_totals(all_income, INCOME_CATEGORIES),
        expenses_by_category=_category_totals(all_expenses, EXPENSE_CATEGORIES),
        total_income=float(money(total_in)),
        total_expenses=float(money(total_out)),
        net=float(money(total_in - total_out)),
        daily=daily,
    )
