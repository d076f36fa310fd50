"""
Daily closing stock reconciliation.

total = opening + received; an uncounted product shows its total as the
closing count; sales = total - closing (never negative).
"""

import logging
from collections import OrderedDict, defaultdict
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from core.api_client import LedgerApiClient
from core.business_date import business_date
from core.money import money, to_decimal
from core.quantities import clamp_quantity
from schemas.inventory import (
    ClosingStockEntry,
    ClosingStockRow,
    ClosingStockSheet,
    ClosingStockTotals,
    ShopInventoryItem,
)

logger = logging.getLogger(__name__)


def closing_for(item: ShopInventoryItem, entered: Optional[int] = None) -> int:
    total = item.total_stock
    if entered is None:
        entered = item.closing_stock
    if entered is None:
        return total
    return clamp_quantity(entered, 0, total)


def _display_size(item: ShopInventoryItem) -> str:
    return f"{item.size_code}({item.size_ml}ml)"


def build_rows(items: List[ShopInventoryItem]) -> List[ClosingStockRow]:
    """Rows grouped by brand name; the serial number sits on each group's first row."""
    pack_types: Dict[str, set] = defaultdict(set)
    for it in items:
        pack_types[f"{it.name}_{it.size_ml}"].add(it.pack_type)

    groups: "OrderedDict[str, List[ShopInventoryItem]]" = OrderedDict()
    for it in items:
        groups.setdefault(it.name, []).append(it)

    rows = []
    for serial, variants in enumerate(groups.values(), start=1):
        for i, it in enumerate(variants):
            size = _display_size(it)
            display = size
            if len(pack_types[f"{it.name}_{it.size_ml}"]) > 1:
                display = f"{size} ({it.pack_type})"
            closing = closing_for(it)
            sales = max(0, it.total_stock - closing)
            rows.append(
                ClosingStockRow(
                    id=it.id,
                    serial_number=serial if i == 0 else None,
                    brand_name=it.name,
                    brand_number=it.brand_number,
                    size=size,
                    display_size=display,
                    pack_type=it.pack_type,
                    opening_stock=it.opening_stock,
                    received=it.received_stock,
                    total=it.total_stock,
                    closing_stock=closing,
                    is_closing_stock_set=it.closing_stock is not None,
                    sales=sales,
                    sale_value=float(money(sales * to_decimal(it.final_price))),
                )
            )
    return rows


def column_totals(rows: List[ClosingStockRow]) -> ClosingStockTotals:
    return ClosingStockTotals(
        opening_stock=sum(r.opening_stock for r in rows),
        received=sum(r.received for r in rows),
        total=sum(r.total for r in rows),
        closing_stock=sum(r.closing_stock for r in rows),
        sales=sum(r.sales for r in rows),
        sale_value=float(money(sum((to_decimal(r.sale_value) for r in rows), Decimal("0")))),
    )


def _parse_day(value) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def load_items(client: LedgerApiClient, day: Optional[date] = None) -> tuple:
    data = client.shop_products(day)
    items = [ShopInventoryItem.model_validate(p) for p in data.get("products") or []]
    return items, data


def build_sheet(items: List[ShopInventoryItem], day: date, status: Optional[dict] = None) -> ClosingStockSheet:
    rows = build_rows(items)
    if status:
        fully = bool(status.get("isFullySaved"))
        partially = bool(status.get("isPartiallySaved"))
    else:
        counted = sum(1 for r in rows if r.is_closing_stock_set)
        fully = bool(rows) and counted == len(rows)
        partially = 0 < counted < len(rows)
    return ClosingStockSheet(
        business_date=day,
        rows=rows,
        totals=column_totals(rows),
        is_fully_saved=fully,
        is_partially_saved=partially,
    )


def load_sheet(client: LedgerApiClient, day: Optional[date] = None) -> ClosingStockSheet:
    items, data = load_items(client, day)
    day = day or _parse_day(data.get("businessDate")) or business_date()
    return build_sheet(items, day, data.get("closingStockStatus"))


def stock_updates(items: List[ShopInventoryItem], entries: List[ClosingStockEntry]) -> List[dict]:
    """Closing count for every product; entered counts override, clamped to 0..total."""
    entered = {e.id: e.closing_stock for e in entries}
    known = {it.id for it in items}
    unknown = [i for i in entered if i not in known]
    if unknown:
        raise ValueError(f"unknown product ids: {unknown}")
    return [{"id": it.id, "closingStock": closing_for(it, entered.get(it.id))} for it in items]


def save_closing_stock(
    client: LedgerApiClient,
    entries: List[ClosingStockEntry],
    day: Optional[date] = None,
) -> ClosingStockSheet:
    day = day or business_date()
    items, _ = load_items(client, day)
    updates = stock_updates(items, entries)
    result = client.update_closing_stock(day, updates)
    logger.info("Closing stock for %s saved: %s products (%s updated)", day, len(updates), result.get("updatedCount"))
    return load_sheet(client, day)
