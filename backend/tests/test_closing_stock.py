from datetime import date

import pytest

from schemas.inventory import ClosingStockEntry, ShopInventoryItem
from services.closing_stock import build_rows, build_sheet, column_totals, save_closing_stock, stock_updates


def _item(id, name="Royal Stag", size=750, code="QQ", pack_type="G", opening=10, received=5, closing=None, price=100):
    return ShopInventoryItem.model_validate({
        "id": id, "name": name, "size": size, "sizeCode": code, "packType": pack_type,
        "openingStock": opening, "receivedStock": received, "closingStock": closing, "finalPrice": price,
    })


def test_uncounted_product_shows_total_as_closing():
    row = build_rows([_item(1)])[0]
    assert row.total == 15
    assert row.closing_stock == 15
    assert row.is_closing_stock_set is False
    assert row.sales == 0
    assert row.size == "QQ(750ml)"


def test_sales_from_counted_closing():
    row = build_rows([_item(1, closing=12, price=120)])[0]
    assert row.sales == 3
    assert row.sale_value == 360
    assert row.is_closing_stock_set is True


def test_serial_numbers_and_pack_types():
    rows = build_rows([
        _item(1, pack_type="G"),
        _item(2, pack_type="P"),
        _item(3, size=180, code="NN"),
        _item(4, name="Old Monk", size=180, code="NN"),
    ])
    assert [r.serial_number for r in rows] == [1, None, None, 2]
    assert rows[0].display_size == "QQ(750ml) (G)"
    assert rows[1].display_size == "QQ(750ml) (P)"
    assert rows[2].display_size == "NN(180ml)"


def test_column_totals():
    rows = build_rows([_item(1, closing=12, price=100), _item(2, name="Old Monk", opening=4, received=0, closing=0, price=50)])
    totals = column_totals(rows)
    assert (totals.opening_stock, totals.received, totals.total) == (14, 5, 19)
    assert (totals.closing_stock, totals.sales) == (12, 7)
    assert totals.sale_value == 300 + 200


def test_save_status_derived_when_upstream_has_none():
    sheet = build_sheet([_item(1, closing=3), _item(2, name="Old Monk")], date(2025, 3, 5))
    assert sheet.is_partially_saved and not sheet.is_fully_saved
    sheet = build_sheet([_item(1, closing=3)], date(2025, 3, 5), {"isFullySaved": True})
    assert sheet.is_fully_saved


def test_entered_counts_clamp_to_total():
    items = [_item(1), _item(2, name="Old Monk", closing=4)]
    updates = stock_updates(items, [ClosingStockEntry(id=1, closing_stock=40)])
    assert updates == [{"id": 1, "closingStock": 15}, {"id": 2, "closingStock": 4}]
    assert stock_updates(items, [ClosingStockEntry(id=1, closingStock=-2)])[0]["closingStock"] == 0


def test_unknown_product_rejected():
    with pytest.raises(ValueError):
        stock_updates([_item(1)], [ClosingStockEntry(id=9, closing_stock=1)])


def test_save_posts_every_product_for_the_day(fake):
    day = date(2025, 3, 5)
    fake.products = [{"id": 1, "name": "Royal Stag", "size": 750, "sizeCode": "QQ", "openingStock": 10,
                      "receivedStock": 2, "closingStock": None, "finalPrice": 100}]
    sheet = save_closing_stock(fake, [ClosingStockEntry(id=1, closing_stock=9)], day)

    (posted_day, updates), = fake.called("update_closing_stock")
    assert posted_day == day
    assert updates == [{"id": 1, "closingStock": 9}]
    assert sheet.rows[0].sales == 3
    assert sheet.is_fully_saved
