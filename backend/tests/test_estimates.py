import pytest
from pydantic import ValidationError

from schemas.brands import MasterBrand
from schemas.estimates import EstimateLineItem, EstimateRequest, TcsMode
from services.estimates import add_line, compute_estimate, line_from_brand, set_quantity


def _line(**kw):
    base = dict(brand_id=1, brand_name="Royal Stag", size_ml=750, pack_quantity=12, invoice_price=500)
    base.update(kw)
    return EstimateLineItem(**base)


def test_ten_cases_at_500():
    s = compute_estimate([_line(cases=10)])
    assert s.total_bottles == 120
    assert s.invoice_value == 60000
    assert s.net_invoice_value == 60000
    assert s.retail_excise_turnover_tax == 0
    assert s.tcs == 600
    assert s.grand_total == 60600
    assert s.lines[0].size == "12/750ml"
    assert s.lines[0].amount == 60000


def test_ten_times_lifted_with_margin_and_cess():
    s = compute_estimate(
        [_line(cases=10, special_margin=10, special_excise_cess=5)],
        ten_times_lifted=True,
    )
    assert s.invoice_value == 60000
    assert s.mrp_rounding_off == 1200
    assert s.net_invoice_value == 61200
    assert s.retail_excise_turnover_tax == 6000
    assert s.special_excise_cess == 600
    # 1% of (net + retail excise turnover tax)
    assert s.tcs == 672
    assert s.grand_total == 68472


def test_legacy_tcs_is_on_invoice_value():
    s = compute_estimate([_line(cases=10)], tcs_mode=TcsMode.LEGACY)
    assert s.tcs == 705
    assert s.tcs_mode == TcsMode.LEGACY


def test_empty_estimate_is_all_zero():
    s = compute_estimate([])
    assert s.total_bottles == 0
    assert s.grand_total == 0


def test_money_rounds_half_up():
    s = compute_estimate([_line(cases=0, bottles=1, invoice_price=0.125)])
    assert s.invoice_value == 0.13


def test_loose_bottles_carry_on_lines():
    s = compute_estimate([_line(cases=0, bottles=15)])
    assert (s.lines[0].cases, s.lines[0].bottles, s.lines[0].total_bottles) == (1, 3, 15)


def test_line_from_brand_starts_at_one_case():
    b = MasterBrand.model_validate({"id": "7", "name": "Old Monk", "size": 180, "packQuantity": 48, "invoice": 90})
    line = line_from_brand(b)
    assert line.brand_id == 7
    assert (line.cases, line.bottles) == (1, 0)
    assert line.pack_quantity == 48


def test_add_line_ignores_duplicates():
    b = MasterBrand.model_validate({"id": 7, "name": "Old Monk"})
    lines = add_line([], b)
    assert add_line(lines, b) == lines


def test_set_quantity_clamps():
    line = _line()
    assert set_quantity(line, "bottles", 30).bottles == 11
    assert set_quantity(line, "cases", "99999").cases == 9999
    assert set_quantity(line, "cases", "x").cases == 0
    with pytest.raises(ValueError):
        set_quantity(line, "litres", 1)


def test_request_rejects_duplicate_brands():
    with pytest.raises(ValidationError):
        EstimateRequest(items=[_line(), _line()])


def test_negative_cases_rejected():
    with pytest.raises(ValidationError):
        _line(cases=-1)
