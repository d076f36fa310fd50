from datetime import date

import pytest

from schemas.transfers import ShiftProduct, ShiftRequest, Supplier
from services.transfers import (
    TGBCL,
    build_record,
    build_suppliers,
    list_suppliers,
    shift_stock,
    transfer_report,
    validate_shift,
)

USER_SHOPS = [
    {"id": 1, "shop_name": "Sri Wines Main", "retailer_code": "R001"},
    {"id": 2, "shop_name": "Sri Wines Branch", "retailer_code": "R002"},
]
MANUAL = [{"id": 40, "shop_name": "City Liquors", "retailer_code": "C900"}]


def test_supplier_order_and_current_shop_excluded():
    suppliers = build_suppliers(USER_SHOPS, MANUAL, shop_id=1)
    assert [s.id for s in suppliers] == ["tgbcl", "user_shop_2", "40"]
    assert [s.source for s in suppliers] == ["default", "user_shop", "manual"]


def test_current_shop_matched_by_retailer_code_then_name():
    assert [s.id for s in build_suppliers(USER_SHOPS, [], retailer_code="R002")] == ["tgbcl", "user_shop_1"]
    shops = [{"id": None, "shop_name": "Sri Wines Main"}, {"id": None, "shop_name": "Other"}]
    assert [s.shop_name for s in build_suppliers(shops, [], shop_name="Sri Wines Main")] == ["TGBCL", "Other"]


def test_no_identifiers_keeps_every_shop():
    shops = [{"id": 1, "shop_name": "Sri Wines Main"}, {"id": 2}]
    assert [s.id for s in build_suppliers(shops, [])] == ["tgbcl", "user_shop_1", "user_shop_2"]


def test_tgbcl_not_offered_for_shift_out(fake):
    fake.user_shop_rows = USER_SHOPS
    assert "tgbcl" not in [s.id for s in list_suppliers(fake, "out", shop_id=1)]


def _product(**kw):
    base = dict(master_brand_id=5, name="Royal Stag", pack_quantity=12, cases=1, bottles=2)
    base.update(kw)
    return ShiftProduct(**base)


def test_records_for_each_supplier_kind():
    p = _product()
    r = build_record(p, "in", TGBCL)
    assert (r.quantity, r.is_from_tgbcl, r.supplier_code) == (14, True, "TGBCL")
    assert r.source_shop_id is None and r.supplier_shop_id is None

    own = Supplier(id="user_shop_2", shop_name="Sri Wines Branch", retailer_code="R002", source="user_shop")
    r = build_record(p, "out", own)
    assert r.quantity == -14
    assert (r.source_shop_id, r.supplier_shop_id, r.supplier_code) == (2, None, "R002")

    manual = Supplier(id="40", shop_name="City Liquors", retailer_code="C900", source="manual")
    r = build_record(p, "in", manual).to_api()
    assert r["supplierShopId"] == "40"
    assert r["sourceShopId"] is None
    assert r["isFromTGBCL"] is False
    assert r["masterBrandId"] == 5


def test_non_numeric_user_shop_id_kept_as_is():
    own = Supplier(id="user_shop_br-7", shop_name="Branch", source="user_shop")
    r = build_record(_product(), "in", own)
    assert r.source_shop_id == "br-7"
    assert r.to_api()["sourceShopId"] == "br-7"


def test_shift_out_cannot_exceed_available():
    req = ShiftRequest(shift_type="out", supplier_id="40", products=[_product(available=10)])
    suppliers = build_suppliers([], MANUAL)
    with pytest.raises(ValueError, match="available 10, requested 14"):
        validate_shift(req, suppliers)


@pytest.mark.parametrize("req,msg", [
    (ShiftRequest(shift_type="in", supplier_id="", products=[]), "supplier"),
    (ShiftRequest(shift_type="in", supplier_id="tgbcl", products=[]), "at least one product"),
    (ShiftRequest(shift_type="in", supplier_id="tgbcl", products=[_product(cases=0, bottles=0)]), "quantities"),
    (ShiftRequest(shift_type="out", supplier_id="tgbcl", products=[_product()]), "TGBCL"),
    (ShiftRequest(shift_type="in", supplier_id="nope", products=[_product()]), "Unknown supplier"),
])
def test_invalid_shifts(req, msg):
    with pytest.raises(ValueError, match=msg):
        validate_shift(req, build_suppliers([], MANUAL))


def test_shift_out_checks_shop_stock(fake):
    fake.products = [{"id": 11, "masterBrandId": 5, "name": "Royal Stag", "openingStock": 10,
                      "receivedStock": 10, "closingStock": None}]
    fake.supplier_shop_rows = MANUAL
    req = ShiftRequest(shift_type="out", supplier_id="40", products=[_product(cases=1, bottles=8)])
    result = shift_stock(fake, req)
    assert [r.quantity for r in result.shifted] == [-20]
    assert fake.called("post_stock_shift")[0][0]["quantity"] == -20

    fake.products[0]["closingStock"] = 6
    with pytest.raises(ValueError):
        shift_stock(fake, req)


def test_zero_lines_are_skipped(fake):
    req = ShiftRequest(shift_type="in", supplier_id="tgbcl",
                       products=[_product(), _product(master_brand_id=6, cases=0, bottles=0)])
    result = shift_stock(fake, req)
    assert len(result.shifted) == 1
    assert len(fake.called("post_stock_shift")) == 1


def test_transfer_report_lists_both_directions(fake):
    fake.transfers_in = {"2025-03-05": [
        {"brandName": "Royal Stag", "brandNumber": 101, "sizeCode": "QQ", "quantity": 24,
         "supplierName": "Sri Wines Branch", "supplierCode": "R002", "transferDate": "2025-03-05T14:10:00Z"},
        {"brandName": "Kingfisher Strong", "brandNumber": "201", "sizeCode": "BB", "quantity": 12,
         "supplierName": "City Liquors", "supplierCode": "C900", "transferDate": "2025-03-05"},
    ]}
    fake.transfers_out = {"2025-03-05": [
        {"brandName": "Royal Stag", "brandNumber": "101", "sizeCode": "NN", "quantity": -48,
         "supplierName": "Sri Wines Main", "supplierCode": "R001", "transferDate": "2025-03-05"},
    ]}
    report = transfer_report(fake, date(2025, 3, 5))
    assert [r.serial_number for r in report.shifted_in] == [1, 2]
    first = report.shifted_in[0]
    assert (first.brand_number, first.shop_name, first.retailer_code) == ("101", "Sri Wines Branch", "R002")
    assert first.transfer_date == date(2025, 3, 5)
    assert report.shifted_out[0].quantity == 48
    assert (report.total_in, report.total_out) == (36, 48)


def test_transfer_report_empty_day(fake):
    report = transfer_report(fake, date(2025, 3, 6))
    assert report.shifted_in == [] and report.shifted_out == []
    assert (report.total_in, report.total_out) == (0, 0)
